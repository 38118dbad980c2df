"""Development-only code: the test suite."""
