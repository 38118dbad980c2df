"""Transports that execute provisioning requests over HTTP.

Operations hand a (method, uri, params, callback, options) call to a
Transport. The default implementations resolve the account URL, apply HTTP
Basic authentication with the provisioning key/secret, encode the body,
decode the JSON response and translate failures into ProvisioningException.

Example:
    >>> from provisioning import AccountApiClient, set_transport
    >>> client = AccountApiClient()  # credentials from PROVISIONING_* env
    >>> client("GET", ["sub_accounts"], {"prefix": "dev"})
    {'sub_accounts': [...], 'rate_limit_remaining': 4999, ...}
    >>>
    >>> # Make it the default for every operation
    >>> set_transport(client)
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable
from urllib.parse import quote, urlencode

import httpx
import orjson
from pydantic import SecretStr

from .foundation.config import ProvisioningSettings, get_settings
from .foundation.errors import ErrorCode, ProvisioningException
from .request import Callback, HttpMethod, OptionsArg, RequestOptions, UriSegment

logger = logging.getLogger("provisioning.transport")

PROVISIONING = "provisioning"
ACCOUNTS = "accounts"

# Response header -> result key
RATE_LIMIT_HEADERS: dict[str, str] = {
    "x-featureratelimit-limit": "rate_limit_allowed",
    "x-featureratelimit-remaining": "rate_limit_remaining",
    "x-featureratelimit-reset": "rate_limit_reset_at",
}


@runtime_checkable
class Transport(Protocol):
    """Callable that performs one provisioning request."""

    def __call__(
        self,
        method: HttpMethod,
        uri: Sequence[UriSegment],
        params: Mapping[str, Any],
        callback: Callback | None = None,
        options: OptionsArg = None,
    ) -> Any: ...


# ─────────────────────────────────────────────────────────────────────────────
# Encoding
# ─────────────────────────────────────────────────────────────────────────────

def _encode_value(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Mapping):
        return orjson.dumps(value).decode()
    return str(value)


def encode_params(params: Mapping[str, Any]) -> list[tuple[str, str]]:
    """Flatten params into query/form pairs.

    Lists repeat their key once per item, mappings are sent as JSON text and
    booleans as ``true``/``false``. ``None`` values are skipped.
    """
    pairs: list[tuple[str, str]] = []
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            pairs.extend((key, _encode_value(item)) for item in value)
        else:
            pairs.append((key, _encode_value(value)))
    return pairs


@dataclass(slots=True, frozen=True)
class PreparedRequest:
    """Fully resolved HTTP request, ready for httpx."""

    method: HttpMethod
    url: str
    auth: tuple[str, str] = field(repr=False)
    timeout: float
    query: list[tuple[str, str]] = field(default_factory=list)
    content: bytes | None = field(default=None, repr=False)
    headers: dict[str, str] = field(default_factory=dict)

    def as_kwargs(self) -> dict[str, Any]:
        return {
            "method": self.method,
            "url": self.url,
            "params": self.query or None,
            "content": self.content,
            "headers": self.headers,
            "auth": self.auth,
            "timeout": self.timeout,
        }


# ─────────────────────────────────────────────────────────────────────────────
# Shared request/response handling
# ─────────────────────────────────────────────────────────────────────────────

class _AccountApiBase:
    """Request preparation and response decoding shared by sync and async clients."""

    def __init__(self, settings: ProvisioningSettings | None = None) -> None:
        self._settings = settings or get_settings()

    @property
    def settings(self) -> ProvisioningSettings:
        return self._settings

    def _client_kwargs(self) -> dict[str, Any]:
        http = self._settings.http
        return {
            "timeout": http.timeout,
            "verify": http.verify_ssl,
            "headers": {"User-Agent": http.user_agent, "Accept": "application/json"},
        }

    def build_url(self, uri: Sequence[UriSegment], options: RequestOptions) -> str:
        """Resolve the absolute URL for ``uri`` under the configured account."""
        account_id = options.account_id or self._settings.account_id
        if not account_id:
            raise ProvisioningException.create("Must supply account_id", ErrorCode.CONFIG_MISSING)
        for segment in uri:
            if segment is None or segment == "":
                raise ProvisioningException.create(
                    f"Missing identifier in request path {list(uri)!r}", ErrorCode.BAD_REQUEST,
                )
        prefix = str(options.upload_prefix or self._settings.upload_prefix).rstrip("/")
        parts = [prefix, self._settings.api_version, PROVISIONING, ACCOUNTS, quote(str(account_id), safe="")]
        parts.extend(quote(str(segment), safe="") for segment in uri)
        return "/".join(parts)

    def _credentials(self, options: RequestOptions) -> tuple[str, str]:
        key = options.provisioning_api_key or self._settings.api_key
        secret = options.provisioning_api_secret or self._settings.api_secret
        if isinstance(secret, SecretStr):
            secret = secret.get_secret_value()
        missing = [
            name for name, value in (("provisioning_api_key", key), ("provisioning_api_secret", secret))
            if not value
        ]
        if missing:
            raise ProvisioningException.create(f"Must supply {', '.join(missing)}", ErrorCode.CONFIG_MISSING)
        return str(key), str(secret)

    def _timeout(self, options: RequestOptions) -> float:
        if options.timeout is None:
            return self._settings.http.timeout
        try:
            timeout = float(options.timeout)
        except (TypeError, ValueError):
            timeout = 0.0
        if not timeout > 0:
            raise ProvisioningException.create(
                f"timeout must be a positive number of seconds, got {options.timeout!r}", ErrorCode.BAD_REQUEST,
            )
        return timeout

    def prepare(
        self,
        method: HttpMethod,
        uri: Sequence[UriSegment],
        params: Mapping[str, Any],
        options: OptionsArg = None,
    ) -> PreparedRequest:
        """Resolve URL, credentials and body encoding for one call."""
        opts = RequestOptions.coerce(options)
        url = self.build_url(uri, opts)
        auth = self._credentials(opts)
        timeout = self._timeout(opts)

        if method == "GET":
            return PreparedRequest(method, url, auth, timeout, query=encode_params(params))
        if opts.is_json:
            body = {k: v for k, v in params.items() if v is not None}
            return PreparedRequest(
                method, url, auth, timeout,
                content=orjson.dumps(body),
                headers={"Content-Type": "application/json"},
            )
        return PreparedRequest(
            method, url, auth, timeout,
            content=urlencode(encode_params(params)).encode() if params else None,
            headers={"Content-Type": "application/x-www-form-urlencoded"} if params else {},
        )

    def _transport_error(self, request: PreparedRequest, exc: httpx.HTTPError) -> ProvisioningException:
        if isinstance(exc, httpx.TimeoutException):
            code, message = ErrorCode.TIMEOUT, f"Request timed out after {request.timeout}s"
        else:
            code, message = ErrorCode.NETWORK_ERROR, f"Network error: {exc}"
        logger.warning("provisioning request failed: %s %s (%s)", request.method, request.url, code)
        return ProvisioningException.create(message, code, recoverable=True, method=request.method, url=request.url)

    def handle_response(self, request: PreparedRequest, response: httpx.Response) -> Any:
        """Decode the body, raising ProvisioningException on non-2xx status."""
        try:
            body = response.json() if response.content else {}
        except ValueError as e:
            if response.is_success:
                raise ProvisioningException.create(
                    f"Invalid JSON response: {e}", ErrorCode.PARSE_ERROR,
                    method=request.method, url=request.url,
                ) from e
            body = {}

        if not response.is_success:
            message = _error_message(body) or response.reason_phrase
            logger.warning(
                "provisioning request rejected: %s %s -> %d %s",
                request.method, request.url, response.status_code, message,
            )
            raise ProvisioningException.from_response(
                response.status_code, message, method=request.method, url=request.url,
            )

        logger.debug("provisioning response: %s %s -> %d", request.method, request.url, response.status_code)
        if isinstance(body, dict):
            # keys already present in the response body win over headers
            for key, value in _rate_limits(response.headers).items():
                body.setdefault(key, value)
        return body


def _error_message(body: object) -> str | None:
    if isinstance(body, dict) and isinstance(error := body.get("error"), dict):
        message = error.get("message")
        return str(message) if message else None
    return None


def _rate_limits(headers: httpx.Headers) -> dict[str, int | str]:
    limits: dict[str, int | str] = {}
    for header, key in RATE_LIMIT_HEADERS.items():
        if (value := headers.get(header)) is not None:
            limits[key] = int(value) if value.isdigit() else value
    return limits


# ─────────────────────────────────────────────────────────────────────────────
# Clients
# ─────────────────────────────────────────────────────────────────────────────

class AccountApiClient(_AccountApiBase):
    """Synchronous transport backed by ``httpx.Client``.

    A client passed in by the caller is used as-is and never closed here.

    Example:
        >>> with AccountApiClient() as client:
        ...     client("GET", ["users", "u-1"], {})
    """

    def __init__(self, settings: ProvisioningSettings | None = None, *, client: httpx.Client | None = None) -> None:
        super().__init__(settings)
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(**self._client_kwargs())
        return self._client

    def close(self) -> None:
        if self._client is not None and self._owns_client:
            self._client.close()
            self._client = None

    def __enter__(self) -> AccountApiClient:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    def __call__(
        self,
        method: HttpMethod,
        uri: Sequence[UriSegment],
        params: Mapping[str, Any],
        callback: Callback | None = None,
        options: OptionsArg = None,
    ) -> Any:
        request = self.prepare(method, uri, params, options)
        logger.debug("provisioning request: %s %s", request.method, request.url)
        try:
            response = self._get_client().request(**request.as_kwargs())
        except httpx.TransportError as e:
            raise self._transport_error(request, e) from e
        result = self.handle_response(request, response)
        if callback is not None:
            callback(result)
        return result


class AsyncAccountApiClient(_AccountApiBase):
    """Asynchronous transport backed by ``httpx.AsyncClient``.

    Operations called with this transport return a coroutine.

    Example:
        >>> async with AsyncAccountApiClient() as client:
        ...     await sub_accounts(prefix="dev", transport=client)
    """

    def __init__(
        self,
        settings: ProvisioningSettings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(settings)
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(**self._client_kwargs())
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> AsyncAccountApiClient:
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()

    async def __call__(
        self,
        method: HttpMethod,
        uri: Sequence[UriSegment],
        params: Mapping[str, Any],
        callback: Callback | None = None,
        options: OptionsArg = None,
    ) -> Any:
        request = self.prepare(method, uri, params, options)
        logger.debug("provisioning request: %s %s", request.method, request.url)
        try:
            response = await self._get_client().request(**request.as_kwargs())
        except httpx.TransportError as e:
            raise self._transport_error(request, e) from e
        result = self.handle_response(request, response)
        if callback is not None:
            callback(result)
        return result


# Global default transport
_transport: Transport | None = None


def get_transport() -> Transport:
    """Get the default transport (creates an AccountApiClient if unset)."""
    global _transport
    if _transport is None:
        _transport = AccountApiClient()
    return _transport


def set_transport(transport: Transport) -> None:
    """Set the transport used by operations called without ``transport=``."""
    global _transport
    _transport = transport


def reset_transport() -> None:
    """Drop the default transport, closing it if it owns an HTTP client."""
    global _transport
    if isinstance(_transport, AccountApiClient):
        _transport.close()
    _transport = None
