"""Testing utilities: recording mock transport."""

from .mock import Invocation, MockTransport, mock_transport

__all__ = ["Invocation", "MockTransport", "mock_transport"]
