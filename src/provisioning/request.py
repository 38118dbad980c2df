"""Request descriptors passed from operations to transports.

A RequestSpec is the full description of one provisioning call: HTTP method,
URI path segments below the account root, the parameter mapping and the
per-call options. Specs are immutable; building one never mutates the
caller's options.

Example:
    >>> spec = RequestSpec.create("GET", ["sub_accounts"], {"prefix": "foo", "enabled": None})
    >>> spec.params
    {'prefix': 'foo'}
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Callable, Literal, TypeAlias, TypeVar

from pydantic import BaseModel, ConfigDict, Field, computed_field

if TYPE_CHECKING:
    from .transport import Transport

HttpMethod = Literal["GET", "POST", "PUT", "DELETE"]
UriSegment: TypeAlias = str | int
JsonDict = dict[str, Any]
Callback = Callable[[Any], object]

V = TypeVar("V")


def pick_only_existing_values(source: Mapping[str, V | None], *keys: str) -> dict[str, V]:
    """Return the entries of ``source`` whose value was actually provided.

    ``None`` marks a value as not provided. Falsy values (False, 0, "", [])
    are kept. When ``keys`` are given only those keys are considered.
    Insertion order of the remaining entries is preserved.

    Example:
        >>> pick_only_existing_values({"a": 1, "b": None, "c": False})
        {'a': 1, 'c': False}
        >>> pick_only_existing_values({"a": 1, "b": 2}, "b")
        {'b': 2}
    """
    wanted = frozenset(keys) if keys else None
    return {
        k: v for k, v in source.items()
        if v is not None and (wanted is None or k in wanted)
    }


class RequestOptions(BaseModel):
    """Per-call configuration forwarded to the transport.

    Unknown keys are kept as extras so transports and callers can carry
    their own settings through untouched. Field values are not validated
    or converted on the way in.

    Attributes:
        content_type: "json" to send the body as a JSON document
        page_size, page, sort_by, sort_order: Access key listing controls
        name, enabled: Access key fields for generate/update/delete-by-name
        account_id, provisioning_api_key, provisioning_api_secret: Credential overrides
        upload_prefix: API host override
        timeout: Request timeout override in seconds
    """

    model_config = ConfigDict(
        frozen=True,
        extra="allow",
        revalidate_instances="never",
    )

    content_type: Any = None
    page_size: Any = None
    page: Any = None
    sort_by: Any = None
    sort_order: Any = None
    name: Any = None
    enabled: Any = None

    account_id: Any = None
    provisioning_api_key: Any = None
    provisioning_api_secret: Any = Field(default=None, repr=False)
    upload_prefix: Any = None
    timeout: Any = None

    @classmethod
    def coerce(cls, value: RequestOptions | Mapping[str, Any] | None) -> RequestOptions:
        """Build a new options value from None, a mapping, or another RequestOptions.

        Values are stored exactly as given. Transports check the ones they use.
        """
        if value is None:
            return cls()
        if isinstance(value, cls):
            return value.model_copy()
        return cls.model_construct(**dict(value))

    def with_json(self) -> RequestOptions:
        """Copy with ``content_type`` forced to "json"."""
        return self.model_copy(update={"content_type": "json"})

    @computed_field
    @property
    def is_json(self) -> bool:
        return self.content_type == "json"

    def to_dict(self) -> JsonDict:
        """Provided fields only, extras included."""
        return self.model_dump(exclude_none=True, exclude={"is_json"})


OptionsArg: TypeAlias = RequestOptions | Mapping[str, Any] | None


class RequestSpec(BaseModel):
    """Immutable descriptor of one provisioning API call."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        revalidate_instances="never",
    )

    method: HttpMethod
    uri: tuple[UriSegment, ...]
    params: JsonDict = Field(default_factory=dict)
    options: RequestOptions = Field(default_factory=RequestOptions)

    @classmethod
    def create(
        cls,
        method: HttpMethod,
        uri: Sequence[UriSegment],
        params: Mapping[str, Any] | None = None,
        options: OptionsArg = None,
        *,
        json: bool = False,
    ) -> RequestSpec:
        """Build a spec, dropping absent params and copying options.

        Identifiers are not validated here; a missing id is reported by the
        transport that tries to send the request.
        """
        opts = RequestOptions.coerce(options)
        return cls.model_construct(
            method=method,
            uri=tuple(uri),
            params=pick_only_existing_values(params or {}),
            options=opts.with_json() if json else opts,
        )

    @property
    def path(self) -> str:
        return "/".join(str(segment) for segment in self.uri)

    def send(self, transport: Transport, callback: Callback | None = None) -> Any:
        """Forward to ``transport`` and return whatever it returns."""
        return transport(self.method, self.uri, dict(self.params), callback, self.options)
