"""Configuration management using pydantic-settings."""

from .settings import (
    HttpSettings,
    ProvisioningSettings,
    clear_settings_cache,
    get_settings,
    parse_account_url,
)

__all__ = [
    "HttpSettings",
    "ProvisioningSettings",
    "clear_settings_cache",
    "get_settings",
    "parse_account_url",
]
