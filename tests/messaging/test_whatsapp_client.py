"""
Tests for the WhatsApp HTTP transport.
"""

import asyncio
from json import JSONDecodeError

import aiohttp
import pytest

from wacloud.core.config.settings import WhatsAppConfig
from wacloud.messaging.whatsapp.client.whatsapp_client import (
    WhatsAppClient,
    WhatsAppFormDataBuilder,
    WhatsAppResponse,
    WhatsAppTransportError,
)

GRAPH = "https://graph.facebook.com/v19.0"


class TestWhatsAppResponse:
    def test_ok_requires_success_status_and_no_error(self):
        assert WhatsAppResponse(status=200, data={"id": "1"}).ok
        assert not WhatsAppResponse(status=400, data={}).ok
        assert not WhatsAppResponse(status=200, data={"error": {"code": 1}}).ok


class TestPostRequest:
    async def test_json_post_to_messages_endpoint(self, client, fake_session, make_response):
        fake_session.queue(make_response(200, {"messages": [{"id": "wamid.1"}]}))
        payload = {"messaging_product": "whatsapp", "to": "1"}

        response = await client.post_request(payload)

        method, url, kwargs = fake_session.calls[0]
        assert method == "POST"
        assert url == f"{GRAPH}/123/messages"
        assert kwargs["json"] == payload
        assert kwargs["headers"] == {
            "Authorization": "Bearer tok",
            "Content-Type": "application/json",
        }
        assert response.status == 200
        assert response.data == {"messages": [{"id": "wamid.1"}]}

    async def test_error_status_is_returned_not_raised(
        self, client, fake_session, make_response
    ):
        error_body = {
            "error": {"message": "Invalid parameter", "type": "OAuthException", "code": 100}
        }
        fake_session.queue(make_response(400, error_body))

        response = await client.post_request({"to": "1"})

        assert response.status == 400
        assert response.data == error_body
        assert not response.ok

    async def test_unauthorized_is_returned(self, client, fake_session, make_response):
        fake_session.queue(make_response(401, {"error": {"code": 190}}))

        response = await client.post_request({"to": "1"})

        assert response.status == 401

    async def test_network_error_raises_transport_error(self, client, fake_session):
        fake_session.queue(aiohttp.ClientConnectionError("connection refused"))

        with pytest.raises(WhatsAppTransportError) as exc_info:
            await client.post_request({"to": "1"})

        assert exc_info.value.url == f"{GRAPH}/123/messages"
        assert "connection refused" in str(exc_info.value)

    async def test_timeout_raises_transport_error(self, client, fake_session):
        fake_session.queue(asyncio.TimeoutError())

        with pytest.raises(WhatsAppTransportError):
            await client.post_request({"to": "1"})

    async def test_unreadable_body_raises_transport_error(
        self, client, fake_session, make_response
    ):
        fake_session.queue(
            make_response(502, json_error=JSONDecodeError("Expecting value", "<html>", 0))
        )

        with pytest.raises(WhatsAppTransportError):
            await client.post_request({"to": "1"})

    async def test_empty_and_non_object_bodies(self, client, fake_session, make_response):
        fake_session.queue(make_response(200, None), make_response(200, [1, 2]))

        empty = await client.post_request({"to": "1"})
        listed = await client.post_request({"to": "1"})

        assert empty.data == {}
        assert listed.data == {"data": [1, 2]}

    async def test_raw_body_with_header_override(self, client, fake_session, make_response):
        fake_session.queue(make_response(200, {"h": "handle"}))

        await client.post_request(
            custom_url=f"{GRAPH}/upload:abc",
            headers={"Authorization": "OAuth tok", "file_offset": "0"},
            data=b"raw-bytes",
        )

        _, url, kwargs = fake_session.calls[0]
        assert url == f"{GRAPH}/upload:abc"
        assert kwargs["data"] == b"raw-bytes"
        assert "json" not in kwargs
        assert kwargs["headers"] == {"Authorization": "OAuth tok", "file_offset": "0"}

    async def test_multipart_upload(self, client, fake_session, make_response):
        fake_session.queue(make_response(200, {"id": "media-1"}))

        await client.post_request(
            payload={"messaging_product": "whatsapp", "type": "image/png"},
            custom_url=f"{GRAPH}/123/media",
            files={"file": ("a.png", b"\x89PNG", "image/png")},
        )

        _, _, kwargs = fake_session.calls[0]
        assert isinstance(kwargs["data"], aiohttp.FormData)
        # aiohttp sets the multipart boundary header itself
        assert "Content-Type" not in kwargs["headers"]
        assert kwargs["headers"]["Authorization"] == "Bearer tok"

    async def test_query_params_are_forwarded(self, client, fake_session, make_response):
        fake_session.queue(make_response(200, {}))

        await client.post_request({"to": "1"}, params={"a": "b"})

        assert fake_session.calls[0][2]["params"] == {"a": "b"}

    async def test_clients_sharing_a_session_keep_their_own_state(
        self, client, fake_session, make_response
    ):
        other = WhatsAppClient(
            session=fake_session,
            config=WhatsAppConfig(
                phone_number_id="456", access_token="tok-2", api_version="v19.0"
            ),
        )
        fake_session.queue(make_response(200, {}), make_response(200, {}))

        await other.post_request({"to": "1"})
        await client.post_request({"to": "1"})

        (_, first_url, first), (_, second_url, second) = fake_session.calls
        assert (first_url, first["headers"]["Authorization"]) == (
            f"{GRAPH}/456/messages",
            "Bearer tok-2",
        )
        assert (second_url, second["headers"]["Authorization"]) == (
            f"{GRAPH}/123/messages",
            "Bearer tok",
        )


class TestGetAndDelete:
    async def test_get_request_with_url(self, client, fake_session, make_response):
        fake_session.queue(make_response(200, {"id": "m1"}))

        response = await client.get_request(url=f"{GRAPH}/m1")

        assert fake_session.calls[0][:2] == ("GET", f"{GRAPH}/m1")
        assert response.data == {"id": "m1"}

    async def test_get_request_with_endpoint(self, client, fake_session, make_response):
        fake_session.queue(make_response(200, {}))

        await client.get_request("waba-1/phone_numbers", params={"limit": 1})

        _, url, kwargs = fake_session.calls[0]
        assert url == f"{GRAPH}/waba-1/phone_numbers"
        assert kwargs["params"] == {"limit": 1}

    async def test_delete_request(self, client, fake_session, make_response):
        fake_session.queue(make_response(200, {"success": True}))

        response = await client.delete_request(url=f"{GRAPH}/m1")

        assert fake_session.calls[0][:2] == ("DELETE", f"{GRAPH}/m1")
        assert response.ok

    async def test_delete_network_error(self, client, fake_session):
        fake_session.queue(aiohttp.ServerDisconnectedError())

        with pytest.raises(WhatsAppTransportError):
            await client.delete_request(url=f"{GRAPH}/m1")


class TestGetBytes:
    async def test_download_bytes(self, client, fake_session, make_response):
        fake_session.queue(
            make_response(200, body=b"\xff\xd8", headers={"content-type": "image/jpeg"})
        )

        response = await client.get_bytes("https://lookaside.example/m1")

        assert response.ok
        assert response.content == b"\xff\xd8"
        assert response.content_type == "image/jpeg"
        assert "Content-Type" not in fake_session.calls[0][2]["headers"]

    async def test_download_error_status(self, client, fake_session, make_response):
        fake_session.queue(make_response(404, body=b"not found"))

        response = await client.get_bytes("https://lookaside.example/m1")

        assert not response.ok
        assert response.data == {"error": {"message": "not found"}}


class TestFormDataBuilder:
    def test_invalid_file_tuple(self):
        with pytest.raises(ValueError):
            WhatsAppFormDataBuilder.build_form_data({}, {"file": b"bytes-only"})

    def test_file_handle_is_read(self, tmp_path):
        path = tmp_path / "a.txt"
        path.write_bytes(b"hello")

        with open(path, "rb") as handle:
            form = WhatsAppFormDataBuilder.build_form_data(
                {"type": "text/plain"}, {"file": ("a.txt", handle, "text/plain")}
            )

        assert isinstance(form, aiohttp.FormData)
