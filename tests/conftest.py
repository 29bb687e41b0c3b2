"""
Pytest configuration and common fixtures for wacloud tests.

Provides a fake aiohttp session that records requests and replays queued
responses, plus ready-made configurations, clients and handlers.
"""

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from wacloud.core.config.settings import WhatsAppConfig
from wacloud.core.logging.context import clear_request_context
from wacloud.messaging.whatsapp.client.whatsapp_client import WhatsAppClient
from wacloud.messaging.whatsapp.handlers.whatsapp_media_handler import (
    WhatsAppMediaHandler,
)
from wacloud.messaging.whatsapp.handlers.whatsapp_template_handler import (
    WhatsAppTemplateHandler,
)
from wacloud.messaging.whatsapp.messenger.whatsapp_messenger import WhatsAppMessenger


class FakeResponse:
    """Stand-in for aiohttp.ClientResponse used as an async context manager."""

    def __init__(
        self,
        status: int = 200,
        json_data: Any = None,
        body: bytes = b"",
        headers: dict[str, str] | None = None,
        json_error: Exception | None = None,
    ):
        self.status = status
        self._json_data = json_data
        self._body = body
        self.headers = headers or {}
        self._json_error = json_error

    async def json(self, content_type: str | None = "application/json") -> Any:
        if self._json_error is not None:
            raise self._json_error
        return self._json_data

    async def read(self) -> bytes:
        return self._body

    async def __aenter__(self) -> "FakeResponse":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        return False


class FakeSession:
    """Records (method, url, kwargs) for every request and replays queued responses.

    Queue an exception instead of a response to simulate a transport fault.
    """

    def __init__(self):
        self.calls: list[tuple[str, str, dict[str, Any]]] = []
        self._responses: list[FakeResponse | Exception] = []

    def queue(self, *responses: FakeResponse | Exception) -> "FakeSession":
        self._responses.extend(responses)
        return self

    def _request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append((method, url, kwargs))
        if not self._responses:
            raise AssertionError(f"Unexpected {method} {url}")
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        return self._request("POST", url, **kwargs)

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        return self._request("GET", url, **kwargs)

    def delete(self, url: str, **kwargs: Any) -> FakeResponse:
        return self._request("DELETE", url, **kwargs)


@pytest.fixture(autouse=True)
def reset_logging_context():
    """Keep tenant/user logging context from leaking between tests."""
    clear_request_context()
    yield
    clear_request_context()


@pytest.fixture
def config() -> WhatsAppConfig:
    return WhatsAppConfig(
        phone_number_id="123",
        access_token="tok",
        api_version="v19.0",
        business_account_id="waba-1",
        app_id="app-1",
        webhook_verify_token="secret",
    )


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def client(fake_session: FakeSession, config: WhatsAppConfig) -> WhatsAppClient:
    return WhatsAppClient(session=fake_session, config=config)


@pytest.fixture
def media_handler(client: WhatsAppClient) -> WhatsAppMediaHandler:
    return WhatsAppMediaHandler(client=client, tenant_id="123")


@pytest.fixture
def template_handler(client: WhatsAppClient) -> WhatsAppTemplateHandler:
    return WhatsAppTemplateHandler(client=client, tenant_id="123")


@pytest.fixture
def messenger(
    client: WhatsAppClient,
    media_handler: WhatsAppMediaHandler,
    template_handler: WhatsAppTemplateHandler,
) -> WhatsAppMessenger:
    return WhatsAppMessenger(
        client=client,
        media_handler=media_handler,
        template_handler=template_handler,
        tenant_id="123",
    )


@pytest.fixture
def mock_media_handler() -> MagicMock:
    """Media handler with every operation replaced by an AsyncMock."""
    handler = MagicMock(spec=WhatsAppMediaHandler)
    handler.upload_media = AsyncMock()
    handler.resumable_upload = AsyncMock()
    handler.get_media_info = AsyncMock()
    handler.download_media = AsyncMock()
    handler.delete_media = AsyncMock()
    return handler


@pytest.fixture
def make_response():
    """Factory for FakeResponse objects to queue on the fake session."""
    return FakeResponse
