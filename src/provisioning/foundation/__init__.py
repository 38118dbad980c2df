"""Foundation - building blocks shared by the provisioning client.

Contains: error handling, configuration, testing helpers.
"""

from __future__ import annotations

__all__ = [
    # Errors
    "ErrorCode", "ProvisioningError", "ProvisioningException", "classify_status",
    # Config
    "ProvisioningSettings", "HttpSettings", "get_settings", "clear_settings_cache", "parse_account_url",
    # Testing
    "MockTransport", "Invocation", "mock_transport",
]


def __getattr__(name: str):
    """Lazy imports to avoid circular dependencies."""
    if name in ("ErrorCode", "ProvisioningError", "ProvisioningException", "classify_status"):
        from . import errors
        return getattr(errors, name)

    if name in ("ProvisioningSettings", "HttpSettings", "get_settings", "clear_settings_cache", "parse_account_url"):
        from . import config
        return getattr(config, name)

    if name in ("MockTransport", "Invocation", "mock_transport"):
        from . import testing
        return getattr(testing, name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
