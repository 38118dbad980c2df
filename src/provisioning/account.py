"""Account provisioning operations: sub-accounts, users, user groups, access keys.

Every operation builds a RequestSpec from its arguments and forwards it to a
transport. Calling an operation performs the request and returns exactly what
the transport returns; ``op.build(...)`` returns the spec without sending it.

All operations accept the keyword-only arguments:
    options: Mapping or RequestOptions with per-call configuration
    callback: Called with the result once the transport succeeds
    transport: Transport override (defaults to ``get_transport()``)

Example:
    >>> from provisioning import account
    >>> account.sub_accounts(enabled=True, prefix="dev")
    >>> account.create_user("Jane", "jane@example.com", "admin", sub_account_ids=["abc"])
    >>> account.access_keys("abc", options={"page_size": 10})
    >>>
    >>> account.add_user_to_group.build("g1", "u1")
    RequestSpec(method='POST', uri=('user_groups', 'g1', 'users', 'u1'), params={}, ...)
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from functools import update_wrapper
from typing import Any, Callable

from .request import Callback, OptionsArg, RequestOptions, RequestSpec
from .transport import Transport, get_transport

logger = logging.getLogger("provisioning.account")

SUB_ACCOUNTS = "sub_accounts"
USERS = "users"
USER_GROUPS = "user_groups"
ACCESS_KEYS = "access_keys"


# ─────────────────────────────────────────────────────────────────────────────
# Operation wrapper
# ─────────────────────────────────────────────────────────────────────────────

class Operation:
    """Provisioning operation wrapping a request builder.

    Bridges the builder (pure: arguments -> RequestSpec) with the transport
    call, keeping the builder reachable through ``build`` for inspection.
    """

    def __init__(self, builder: Callable[..., RequestSpec]) -> None:
        self._builder = builder
        self.name = builder.__name__
        update_wrapper(self, builder)

    def build(self, *args: Any, **kwargs: Any) -> RequestSpec:
        """Build the request descriptor without sending it."""
        spec = self._builder(*args, **kwargs)
        logger.debug("built %s: %s %s", self.name, spec.method, spec.path)
        return spec

    def __call__(
        self,
        *args: Any,
        callback: Callback | None = None,
        transport: Transport | None = None,
        **kwargs: Any,
    ) -> Any:
        return self.build(*args, **kwargs).send(transport or get_transport(), callback)

    def __repr__(self) -> str:
        return f"<Operation {self.name}>"


def operation(builder: Callable[..., RequestSpec]) -> Operation:
    """Decorator turning a request builder into a callable operation."""
    return Operation(builder)


def _as_list(values: Sequence[Any] | None) -> list[Any] | None:
    return None if values is None else list(values)


# ─────────────────────────────────────────────────────────────────────────────
# Sub-accounts
# ─────────────────────────────────────────────────────────────────────────────

@operation
def sub_accounts(
    enabled: bool | None = None,
    ids: Sequence[str] | None = None,
    prefix: str | None = None,
    *,
    options: OptionsArg = None,
) -> RequestSpec:
    """Lists sub-accounts.

    Args:
        enabled: Only enabled (True) or only disabled (False) sub-accounts.
            Both are returned when omitted.
        ids: Up to 100 sub-account IDs. When provided, other parameters are ignored.
        prefix: Case-insensitive prefix the sub-account name must start with.
    """
    params = {
        "enabled": enabled,
        "ids": list(ids) if ids is not None else [],
        "prefix": prefix,
    }
    return RequestSpec.create("GET", [SUB_ACCOUNTS], params, options)


@operation
def sub_account(sub_account_id: str, *, options: OptionsArg = None) -> RequestSpec:
    """Retrieves the details of the specified sub-account."""
    return RequestSpec.create("GET", [SUB_ACCOUNTS, sub_account_id], {}, options)


@operation
def create_sub_account(
    name: str,
    cloud_name: str | None = None,
    custom_attributes: Mapping[str, Any] | None = None,
    enabled: bool | None = None,
    base_account: str | None = None,
    *,
    options: OptionsArg = None,
) -> RequestSpec:
    """Creates a new sub-account.

    Users with access to all sub-accounts automatically get access to the
    new one.

    Args:
        name: Display name shown in the management console.
        cloud_name: Case-insensitive cloud name of alphanumeric and underscore
            characters. Must be unique across all accounts.
        custom_attributes: Key/value pairs to associate with the sub-account.
        enabled: Whether the sub-account is enabled. The API defaults to True.
        base_account: ID of a sub-account to copy size limits, timed limits
            and flags from.
    """
    params = {
        "cloud_name": cloud_name,
        "name": name,
        "custom_attributes": dict(custom_attributes) if custom_attributes is not None else None,
        "enabled": enabled,
        "base_sub_account_id": base_account,
    }
    return RequestSpec.create("POST", [SUB_ACCOUNTS], params, options, json=True)


@operation
def update_sub_account(
    sub_account_id: str,
    name: str | None = None,
    cloud_name: str | None = None,
    custom_attributes: Mapping[str, Any] | None = None,
    enabled: bool | None = None,
    *,
    options: OptionsArg = None,
) -> RequestSpec:
    """Updates the specified details of the sub-account.

    The cloud name can only be changed for accounts with fewer than 1000
    assets and must stay unique across all accounts.
    """
    params = {
        "cloud_name": cloud_name,
        "name": name,
        "custom_attributes": dict(custom_attributes) if custom_attributes is not None else None,
        "enabled": enabled,
    }
    return RequestSpec.create("PUT", [SUB_ACCOUNTS, sub_account_id], params, options, json=True)


@operation
def delete_sub_account(sub_account_id: str, *, options: OptionsArg = None) -> RequestSpec:
    """Deletes the sub-account. Supported only for accounts with fewer than 1000 assets."""
    return RequestSpec.create("DELETE", [SUB_ACCOUNTS, sub_account_id], {}, options)


# ─────────────────────────────────────────────────────────────────────────────
# Users
# ─────────────────────────────────────────────────────────────────────────────

@operation
def user(user_id: str, *, options: OptionsArg = None) -> RequestSpec:
    """Returns the user with the specified ID."""
    return RequestSpec.create("GET", [USERS, user_id], {}, options)


@operation
def users(
    pending: bool | None = None,
    user_ids: Sequence[str] | None = None,
    prefix: str | None = None,
    sub_account_id: str | None = None,
    *,
    options: OptionsArg = None,
) -> RequestSpec:
    """Lists users in the account.

    Args:
        pending: Only pending users (True), only non-pending users (False),
            or all users when omitted.
        user_ids: Up to 100 user IDs. When provided, other parameters are ignored.
        prefix: Case-insensitive prefix of the user name or email address.
        sub_account_id: Only users with access to this sub-account.
    """
    params = {
        "ids": _as_list(user_ids),
        "pending": pending,
        "prefix": prefix,
        "sub_account_id": sub_account_id,
    }
    return RequestSpec.create("GET", [USERS], params, options)


@operation
def create_user(
    name: str,
    email: str,
    role: str,
    sub_account_ids: Sequence[str] | None = None,
    *,
    options: OptionsArg = None,
) -> RequestSpec:
    """Creates a new user in the account.

    Args:
        name: Name of the user.
        email: Unique email address, used as login name and for notifications.
        role: One of master_admin, admin, billing, technical_admin, reports,
            media_library_admin, media_library_user.
        sub_account_ids: Sub-accounts the user can access. Ignored for master_admin.
    """
    params = {
        "name": name,
        "email": email,
        "role": role,
        "sub_account_ids": _as_list(sub_account_ids),
    }
    return RequestSpec.create("POST", [USERS], params, options, json=True)


@operation
def update_user(
    user_id: str,
    name: str | None = None,
    email: str | None = None,
    role: str | None = None,
    sub_account_ids: Sequence[str] | None = None,
    *,
    options: OptionsArg = None,
) -> RequestSpec:
    """Updates the details of the specified user. Arguments as in create_user."""
    params = {
        "name": name,
        "email": email,
        "role": role,
        "sub_account_ids": _as_list(sub_account_ids),
    }
    return RequestSpec.create("PUT", [USERS, user_id], params, options, json=True)


@operation
def delete_user(user_id: str, *, options: OptionsArg = None) -> RequestSpec:
    return RequestSpec.create("DELETE", [USERS, user_id], {}, options)


# ─────────────────────────────────────────────────────────────────────────────
# User groups
# ─────────────────────────────────────────────────────────────────────────────

@operation
def create_user_group(name: str, *, options: OptionsArg = None) -> RequestSpec:
    """Creates a new user group."""
    return RequestSpec.create("POST", [USER_GROUPS], {"name": name}, options, json=True)


@operation
def update_user_group(group_id: str, name: str, *, options: OptionsArg = None) -> RequestSpec:
    """Renames the specified user group."""
    return RequestSpec.create("PUT", [USER_GROUPS, group_id], {"name": name}, options, json=True)


@operation
def delete_user_group(group_id: str, *, options: OptionsArg = None) -> RequestSpec:
    return RequestSpec.create("DELETE", [USER_GROUPS, group_id], {}, options)


@operation
def user_group(group_id: str, *, options: OptionsArg = None) -> RequestSpec:
    """Retrieves the details of the specified user group."""
    return RequestSpec.create("GET", [USER_GROUPS, group_id], {}, options)


@operation
def user_groups(*, options: OptionsArg = None) -> RequestSpec:
    """Lists user groups in the account."""
    return RequestSpec.create("GET", [USER_GROUPS], {}, options)


@operation
def user_group_users(group_id: str, *, options: OptionsArg = None) -> RequestSpec:
    """Lists users in the specified user group."""
    return RequestSpec.create("GET", [USER_GROUPS, group_id, USERS], {}, options)


@operation
def add_user_to_group(group_id: str, user_id: str, *, options: OptionsArg = None) -> RequestSpec:
    return RequestSpec.create("POST", [USER_GROUPS, group_id, USERS, user_id], {}, options)


@operation
def remove_user_from_group(group_id: str, user_id: str, *, options: OptionsArg = None) -> RequestSpec:
    return RequestSpec.create("DELETE", [USER_GROUPS, group_id, USERS, user_id], {}, options)


# ─────────────────────────────────────────────────────────────────────────────
# Access keys
#
# Filterable fields come from the options, not from positional arguments.
# ─────────────────────────────────────────────────────────────────────────────

@operation
def access_keys(sub_account_id: str, *, options: OptionsArg = None) -> RequestSpec:
    """Lists access keys in the given sub-account.

    Options:
        page_size: Number of keys per page.
        page: Page to return.
        sort_by: Field to sort by (e.g. ``created_at``).
        sort_order: ``asc`` or ``desc``.
    """
    opts = RequestOptions.coerce(options)
    params = {
        "page_size": opts.page_size,
        "page": opts.page,
        "sort_by": opts.sort_by,
        "sort_order": opts.sort_order,
    }
    return RequestSpec.create("GET", [SUB_ACCOUNTS, sub_account_id, ACCESS_KEYS], params, opts)


@operation
def generate_access_key(sub_account_id: str, *, options: OptionsArg = None) -> RequestSpec:
    """Generates a new access key pair in the given sub-account.

    Options:
        name: Name of the new key.
        enabled: Whether the key is enabled.
    """
    opts = RequestOptions.coerce(options)
    params = {"name": opts.name, "enabled": opts.enabled}
    return RequestSpec.create("POST", [SUB_ACCOUNTS, sub_account_id, ACCESS_KEYS], params, opts, json=True)


@operation
def update_access_key(sub_account_id: str, api_key: str | int, *, options: OptionsArg = None) -> RequestSpec:
    """Updates an existing access key pair. Options as in generate_access_key."""
    opts = RequestOptions.coerce(options)
    params = {"name": opts.name, "enabled": opts.enabled}
    uri = [SUB_ACCOUNTS, sub_account_id, ACCESS_KEYS, api_key]
    return RequestSpec.create("PUT", uri, params, opts, json=True)


@operation
def delete_access_key(sub_account_id: str, api_key: str | int, *, options: OptionsArg = None) -> RequestSpec:
    """Deletes an existing access key pair."""
    uri = [SUB_ACCOUNTS, sub_account_id, ACCESS_KEYS, api_key]
    return RequestSpec.create("DELETE", uri, {}, options)


@operation
def delete_access_key_by_name(sub_account_id: str, *, options: OptionsArg = None) -> RequestSpec:
    """Deletes an access key pair identified by ``options["name"]``."""
    opts = RequestOptions.coerce(options)
    return RequestSpec.create("DELETE", [SUB_ACCOUNTS, sub_account_id, ACCESS_KEYS], {"name": opts.name}, opts)


OPERATIONS: dict[str, Operation] = {
    op.name: op for op in (
        sub_accounts, sub_account, create_sub_account, update_sub_account, delete_sub_account,
        user, users, create_user, update_user, delete_user,
        create_user_group, update_user_group, delete_user_group,
        user_group, user_groups, user_group_users, add_user_to_group, remove_user_from_group,
        access_keys, generate_access_key, update_access_key, delete_access_key, delete_access_key_by_name,
    )
}
