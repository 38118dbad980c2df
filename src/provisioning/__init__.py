"""Provisioning - Python binding for the account provisioning REST API.

Manage sub-accounts, users, user groups and access keys of a master account.
Each operation shapes its arguments into a request descriptor and hands it to
a transport that performs the signed HTTP call.

Quick Start:
    >>> from provisioning import account
    >>>
    >>> # Credentials from PROVISIONING_ACCOUNT_ID / _API_KEY / _API_SECRET
    >>> # or CLOUDINARY_ACCOUNT_URL=account://<key>:<secret>@<account_id>
    >>> account.sub_accounts(enabled=True, prefix="dev")
    >>> account.create_sub_account("Dev", cloud_name="dev_cloud", enabled=True)
    >>> account.generate_access_key("abc123", options={"name": "ci", "enabled": True})

Per-call credentials:
    >>> account.user("u-1", options={
    ...     "account_id": "abc123",
    ...     "provisioning_api_key": "1234",
    ...     "provisioning_api_secret": "s3cr3t",
    ... })

Async:
    >>> from provisioning import AsyncAccountApiClient
    >>> async with AsyncAccountApiClient() as client:
    ...     await account.users(prefix="jo", transport=client)

Inspecting requests:
    >>> account.access_keys.build("abc123", options={"page_size": 10})
    RequestSpec(method='GET', uri=('sub_accounts', 'abc123', 'access_keys'), params={'page_size': 10}, ...)
"""

from __future__ import annotations

__version__ = "0.1.0"

# Operations
from . import account
from .account import OPERATIONS, Operation, operation

# Request model
from .request import HttpMethod, RequestOptions, RequestSpec, pick_only_existing_values

# Transports
from .transport import (
    AccountApiClient,
    AsyncAccountApiClient,
    Transport,
    get_transport,
    reset_transport,
    set_transport,
)

# Errors
from .foundation.errors import ErrorCode, ProvisioningError, ProvisioningException, classify_status

# Config
from .foundation.config import ProvisioningSettings, clear_settings_cache, get_settings

__all__ = [
    "__version__",
    # Operations
    "account", "OPERATIONS", "Operation", "operation",
    # Request model
    "HttpMethod", "RequestOptions", "RequestSpec", "pick_only_existing_values",
    # Transports
    "AccountApiClient", "AsyncAccountApiClient", "Transport",
    "get_transport", "set_transport", "reset_transport",
    # Errors
    "ErrorCode", "ProvisioningError", "ProvisioningException", "classify_status",
    # Config
    "ProvisioningSettings", "get_settings", "clear_settings_cache",
]
