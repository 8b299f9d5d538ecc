"""Shared fixtures: a scripted fake of the Community Hub login and REST API."""

from __future__ import annotations

from typing import Any

import httpx
import pytest

from communityhub_sync.client import CommunityHubClient
from communityhub_sync.config import SETTINGS_OPTION, Settings
from communityhub_sync.credentials import CredentialCache
from communityhub_sync.storage import MemorySettingsStore

LOGIN_URL = "https://login.example.com/services/oauth2/token"
INSTANCE_URL = "https://hub.example.com"

INVALID_SESSION_BODY = [
    {"message": "Session expired or invalid", "errorCode": "INVALID_SESSION_ID"}
]


def token_response(
    access_token: str = "token-1",
    instance_url: str = INSTANCE_URL,
) -> httpx.Response:
    return httpx.Response(
        200, json={"access_token": access_token, "instance_url": instance_url}
    )


class FakeApi:
    """MockTransport handler replaying queued responses.

    POST requests (token exchanges) and GET requests (API calls) have
    separate queues so tests can script them independently.
    """

    def __init__(self) -> None:
        self.token_queue: list[httpx.Response] = []
        self.api_queue: list[httpx.Response] = []
        self.token_requests: list[httpx.Request] = []
        self.api_requests: list[httpx.Request] = []

    def queue_token(self, response: httpx.Response) -> None:
        self.token_queue.append(response)

    def queue_api(self, status_code: int, body: Any) -> None:
        self.api_queue.append(httpx.Response(status_code, json=body))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.method == "POST":
            self.token_requests.append(request)
            assert self.token_queue, f"unexpected token request to {request.url}"
            return self.token_queue.pop(0)

        # Record a snapshot: the client may mutate the sent request afterwards.
        self.api_requests.append(
            httpx.Request(request.method, request.url, headers=request.headers.copy())
        )
        assert self.api_queue, f"unexpected API request to {request.url}"
        return self.api_queue.pop(0)

    @property
    def request_count(self) -> int:
        return len(self.token_requests) + len(self.api_requests)


def complete_settings(**overrides: Any) -> dict[str, Any]:
    settings = {
        "sync_enabled": True,
        "login_url": LOGIN_URL,
        "client_id": "client-id",
        "client_secret": "client-secret",
        "username": "sync@example.com",
        "password": "hunter2",
    }
    settings.update(overrides)
    return settings


@pytest.fixture
def store() -> MemorySettingsStore:
    return MemorySettingsStore({SETTINGS_OPTION: complete_settings()})


@pytest.fixture
def api() -> FakeApi:
    return FakeApi()


@pytest.fixture
def http_client(api: FakeApi):
    client = httpx.Client(transport=httpx.MockTransport(api))
    yield client
    client.close()


@pytest.fixture
def client(store: MemorySettingsStore, http_client: httpx.Client) -> CommunityHubClient:
    return CommunityHubClient(Settings.load(store), CredentialCache(store), http_client)
