"""Shared fixtures for provisioning tests."""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterator

import httpx
import pytest
import pytest_asyncio

from provisioning import AccountApiClient, AsyncAccountApiClient, ProvisioningSettings, reset_transport
from provisioning.foundation.config import clear_settings_cache
from provisioning.foundation.testing import MockTransport


@pytest.fixture(autouse=True)
def clean_globals() -> Iterator[None]:
    """Reset default transport and cached settings around each test."""
    reset_transport()
    clear_settings_cache()
    yield
    reset_transport()
    clear_settings_cache()


@pytest.fixture
def mock() -> MockTransport:
    return MockTransport(return_value={"ok": True})


@pytest.fixture
def settings(monkeypatch: pytest.MonkeyPatch) -> ProvisioningSettings:
    for var in ("CLOUDINARY_ACCOUNT_URL", "PROVISIONING_ACCOUNT_URL"):
        monkeypatch.delenv(var, raising=False)
    return ProvisioningSettings(_env_file=None, account_id="acct", api_key="key", api_secret="secret")


class RecordingHandler:
    """httpx.MockTransport handler that records requests and returns a canned response."""

    def __init__(self, response: httpx.Response | None = None, exc: Exception | None = None) -> None:
        self.response = response or httpx.Response(200, json={"ok": True})
        self.exc = exc
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.exc is not None:
            raise self.exc
        return self.response

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def handler() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
def client(settings: ProvisioningSettings, handler: RecordingHandler) -> Iterator[AccountApiClient]:
    http = httpx.Client(transport=httpx.MockTransport(handler))
    with AccountApiClient(settings, client=http) as api:
        yield api
    http.close()


@pytest_asyncio.fixture
async def async_client(settings: ProvisioningSettings, handler: RecordingHandler) -> AsyncIterator[AsyncAccountApiClient]:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    async with AsyncAccountApiClient(settings, client=http) as api:
        yield api
    await http.aclose()
