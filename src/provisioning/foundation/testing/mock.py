"""Mock transport for testing code that calls provisioning operations.

Provides MockTransport and the mock_transport context manager for:
- Replacing the HTTP transport with controlled responses
- Simulating API errors
- Recording invocations for verification

Example:
    >>> from provisioning import account
    >>> with mock_transport(return_value={"users": []}) as mock:
    ...     account.users(prefix="jo")
    ...     mock.assert_called_with(method="GET", uri=("users",), params={"prefix": "jo"})
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable

from provisioning.foundation.errors import ErrorCode, ProvisioningException
from provisioning.request import Callback, HttpMethod, OptionsArg, RequestOptions, UriSegment

if TYPE_CHECKING:
    from collections.abc import Generator


@dataclass(slots=True)
class Invocation:
    """Record of a single transport call."""
    method: HttpMethod
    uri: tuple[UriSegment, ...]
    params: dict[str, Any]
    options: RequestOptions
    callback: Callback | None = None


@dataclass
class MockTransport:
    """Transport double with invocation recording.

    Returns ``return_value`` (or ``side_effect(invocation)``), raises
    ``raises`` when set, or raises a ProvisioningException when
    ``error_code`` is set. The callback is invoked on success, as the real
    transports do.
    """
    return_value: Any = None
    raises: type[Exception] | Exception | None = None
    side_effect: Callable[[Invocation], Any] | None = None
    error_code: ErrorCode | None = None
    invocations: list[Invocation] = field(default_factory=list)

    @property
    def call_count(self) -> int:
        return len(self.invocations)

    @property
    def called(self) -> bool:
        return self.call_count > 0

    @property
    def last_call(self) -> Invocation | None:
        return self.invocations[-1] if self.invocations else None

    def assert_called(self) -> None:
        if not self.called:
            raise AssertionError("Expected transport to be called")

    def assert_not_called(self) -> None:
        if self.called:
            raise AssertionError(f"Transport called {self.call_count} times")

    def assert_called_with(self, **expected: object) -> None:
        """Compare fields of the last invocation (method, uri, params, options)."""
        self.assert_called()
        last = self.last_call
        assert last is not None
        for key, value in expected.items():
            actual = getattr(last, key)
            if actual != value:
                raise AssertionError(f"'{key}': expected {value!r}, got {actual!r}")

    def reset(self) -> None:
        self.invocations.clear()

    def __call__(
        self,
        method: HttpMethod,
        uri: Sequence[UriSegment],
        params: Mapping[str, Any],
        callback: Callback | None = None,
        options: OptionsArg = None,
    ) -> Any:
        invocation = Invocation(method, tuple(uri), dict(params), RequestOptions.coerce(options), callback)
        self.invocations.append(invocation)

        if self.raises is not None:
            raise self.raises() if isinstance(self.raises, type) else self.raises
        if self.error_code is not None:
            raise ProvisioningException.create(f"Mock error: {self.error_code}", self.error_code, method=method)

        result = self.side_effect(invocation) if self.side_effect is not None else self.return_value
        if callback is not None:
            callback(result)
        return result


@contextmanager
def mock_transport(
    return_value: Any = None,
    *,
    raises: type[Exception] | Exception | None = None,
    side_effect: Callable[[Invocation], Any] | None = None,
    error_code: ErrorCode | None = None,
) -> Generator[MockTransport, None, None]:
    """Install a MockTransport as the default transport for the block."""
    from provisioning import transport as transport_mod

    mock = MockTransport(return_value=return_value, raises=raises, side_effect=side_effect, error_code=error_code)
    previous = transport_mod._transport
    transport_mod.set_transport(mock)
    try:
        yield mock
    finally:
        transport_mod._transport = previous
