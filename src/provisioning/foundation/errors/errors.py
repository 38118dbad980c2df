"""Standardized error handling for provisioning API calls.

Provides error codes and structured error responses raised by transports.
Uses Pydantic for validation and serialization.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Self

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
)


class ErrorCode(StrEnum):
    """Standard error codes for provisioning failures.

    Used for programmatic error handling and retry decisions.
    """
    BAD_REQUEST = "BAD_REQUEST"
    AUTHORIZATION_REQUIRED = "AUTHORIZATION_REQUIRED"
    NOT_ALLOWED = "NOT_ALLOWED"
    NOT_FOUND = "NOT_FOUND"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    RATE_LIMITED = "RATE_LIMITED"
    GENERAL_ERROR = "GENERAL_ERROR"
    TIMEOUT = "TIMEOUT"
    NETWORK_ERROR = "NETWORK_ERROR"
    PARSE_ERROR = "PARSE_ERROR"
    CONFIG_MISSING = "CONFIG_MISSING"
    UNKNOWN = "UNKNOWN"


# Status -> code mapping; anything >= 500 falls through to GENERAL_ERROR
_STATUS_CODES: dict[int, ErrorCode] = {
    400: ErrorCode.BAD_REQUEST,
    401: ErrorCode.AUTHORIZATION_REQUIRED,
    403: ErrorCode.NOT_ALLOWED,
    404: ErrorCode.NOT_FOUND,
    409: ErrorCode.ALREADY_EXISTS,
    420: ErrorCode.RATE_LIMITED,
    429: ErrorCode.RATE_LIMITED,
}


def classify_status(status_code: int) -> ErrorCode:
    """Map an HTTP status code to an error code."""
    if status_code in _STATUS_CODES:
        return _STATUS_CODES[status_code]
    if 500 <= status_code < 600:
        return ErrorCode.GENERAL_ERROR
    return ErrorCode.UNKNOWN


# Pre-computed retryable codes set for O(1) lookup
_RETRYABLE_CODES: frozenset[ErrorCode] = frozenset({
    ErrorCode.RATE_LIMITED,
    ErrorCode.TIMEOUT,
    ErrorCode.NETWORK_ERROR,
    ErrorCode.GENERAL_ERROR,
})

_AUTH_CODES: frozenset[ErrorCode] = frozenset({
    ErrorCode.AUTHORIZATION_REQUIRED,
    ErrorCode.NOT_ALLOWED,
    ErrorCode.CONFIG_MISSING,
})


class ProvisioningError(BaseModel):
    """Structured error for a failed provisioning request.

    Attributes:
        message: Human-readable error message
        code: Machine-readable error code for programmatic handling
        http_code: HTTP status returned by the API, if a response was received
        method: HTTP method of the failed request
        url: Request URL (never includes credentials)
        recoverable: Whether the error might succeed on retry
    """

    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
        validate_default=True,
        json_schema_extra={
            "title": "Provisioning Error",
            "examples": [{
                "message": "Sub-account not found",
                "code": "NOT_FOUND",
                "http_code": 404,
                "method": "GET",
                "recoverable": False,
            }],
        },
    )

    message: Annotated[str, Field(
        min_length=1,
        description="Human-readable error message",
    )]
    code: ErrorCode = Field(
        default=ErrorCode.UNKNOWN,
        description="Machine-readable error classification",
    )
    http_code: int | None = Field(default=None, ge=100, le=999)
    method: str | None = None
    url: str | None = Field(default=None, repr=False)
    recoverable: bool = False

    @field_validator("message", mode="before")
    @classmethod
    def _ensure_message(cls, v: str | Exception) -> str:
        """Accept Exception objects and extract message."""
        return str(v) if isinstance(v, Exception) else v

    @computed_field
    @property
    def is_retryable(self) -> bool:
        """Whether this error is typically retryable (rate limits, timeouts, network, 5xx)."""
        return self.code in _RETRYABLE_CODES

    @computed_field
    @property
    def is_auth_error(self) -> bool:
        """Whether this is an authentication/authorization error."""
        return self.code in _AUTH_CODES

    def render(self) -> str:
        parts = [f"[{self.code}]"]
        if self.http_code is not None:
            parts.append(f"HTTP {self.http_code}")
        if self.method and self.url:
            parts.append(f"{self.method} {self.url}")
        parts.append(f"- {self.message}")
        return " ".join(parts)

    __str__ = render


class ProvisioningException(Exception):
    """Exception wrapping a ProvisioningError for raising."""

    __slots__ = ("error",)

    def __init__(self, error: ProvisioningError) -> None:
        self.error = error
        super().__init__(error.message)

    @property
    def code(self) -> ErrorCode:
        return self.error.code

    @property
    def http_code(self) -> int | None:
        return self.error.http_code

    @classmethod
    def create(
        cls,
        message: str,
        code: ErrorCode = ErrorCode.UNKNOWN,
        *,
        recoverable: bool = False,
        method: str | None = None,
        url: str | None = None,
    ) -> Self:
        """Create exception without an HTTP response."""
        return cls(ProvisioningError(
            message=message, code=code, recoverable=recoverable, method=method, url=url,
        ))

    @classmethod
    def from_response(cls, status_code: int, message: str, *, method: str, url: str) -> Self:
        """Create from a non-2xx API response."""
        code = classify_status(status_code)
        return cls(ProvisioningError(
            message=message or f"Request failed with status {status_code}",
            code=code,
            http_code=status_code,
            method=method,
            url=url,
            recoverable=code in _RETRYABLE_CODES,
        ))
