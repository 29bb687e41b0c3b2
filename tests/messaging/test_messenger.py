"""
Tests for the WhatsApp messenger facade.
"""

import aiohttp
import pytest

from wacloud.domain.models.media_result import MediaUploadResult
from wacloud.messaging.whatsapp.messenger.whatsapp_messenger import WhatsAppMessenger
from wacloud.messaging.whatsapp.models.basic_models import ErrorKind
from wacloud.messaging.whatsapp.models.message_models import VideoMessage

GRAPH = "https://graph.facebook.com/v19.0"
SENT = {"messaging_product": "whatsapp", "messages": [{"id": "wamid.HBgL"}]}


class TestSendMessages:
    async def test_send_text(self, messenger, fake_session, make_response):
        fake_session.queue(make_response(200, SENT))

        result = await messenger.send_text("15551234567", "hello")

        assert result.success
        assert result.message_id == "wamid.HBgL"
        assert result.recipient == "15551234567"
        assert result.api_response == SENT
        _, url, kwargs = fake_session.calls[0]
        assert url == f"{GRAPH}/123/messages"
        assert kwargs["json"] == {
            "messaging_product": "whatsapp",
            "recipient_type": "individual",
            "to": "15551234567",
            "type": "text",
            "text": {"preview_url": False, "body": "hello"},
        }

    @pytest.mark.parametrize(
        "media, expected",
        [
            ("https://x.example/a.jpg", {"link": "https://x.example/a.jpg", "caption": "cap"}),
            ("MEDIA_ID_1", {"id": "MEDIA_ID_1", "caption": "cap"}),
        ],
    )
    async def test_send_image(self, messenger, fake_session, make_response, media, expected):
        fake_session.queue(make_response(200, SENT))

        await messenger.send_image("15551234567", media, "cap")

        assert fake_session.calls[0][2]["json"]["image"] == expected

    async def test_send_video_without_caption(self, messenger, fake_session, make_response):
        fake_session.queue(make_response(200, SENT))

        await messenger.send_video("1", "vid-1")

        assert fake_session.calls[0][2]["json"]["video"] == {"id": "vid-1"}

    async def test_send_audio(self, messenger, fake_session, make_response):
        fake_session.queue(make_response(200, SENT))

        await messenger.send_audio("1", "https://x.example/a.ogg")

        payload = fake_session.calls[0][2]["json"]
        assert payload["type"] == "audio"
        assert payload["audio"] == {"link": "https://x.example/a.ogg"}

    async def test_send_document(self, messenger, fake_session, make_response):
        fake_session.queue(make_response(200, SENT))

        await messenger.send_document("1", "doc-1", caption="Invoice", filename="inv.pdf")

        assert fake_session.calls[0][2]["json"]["document"] == {
            "id": "doc-1",
            "caption": "Invoice",
            "filename": "inv.pdf",
        }

    async def test_send_template(self, messenger, fake_session, make_response):
        fake_session.queue(make_response(200, SENT))

        result = await messenger.send_template("1", "hello_world")

        assert result.success
        assert fake_session.calls[0][2]["json"]["template"] == {
            "name": "hello_world",
            "language": {"code": "en_US"},
        }

    async def test_send_message_model(self, messenger, fake_session, make_response):
        fake_session.queue(make_response(200, SENT))

        result = await messenger.send_message(VideoMessage(to="1", media="vid-1"))

        assert result.success
        assert fake_session.calls[0][2]["json"]["type"] == "video"

    async def test_missing_message_id(self, messenger, fake_session, make_response):
        fake_session.queue(make_response(200, {"messaging_product": "whatsapp"}))

        result = await messenger.send_text("1", "hi")

        assert result.success
        assert result.message_id is None


class TestSendFailures:
    async def test_platform_rejection(self, messenger, fake_session, make_response):
        body = {
            "error": {
                "message": "Recipient phone number not in allowed list",
                "type": "OAuthException",
                "code": 131030,
            }
        }
        fake_session.queue(make_response(400, body))

        result = await messenger.send_text("1", "hi")

        assert not result.success
        assert result.error_kind == ErrorKind.PLATFORM
        assert result.error_code == "PLATFORM_131030"
        assert result.error == "Recipient phone number not in allowed list"
        assert result.status_code == 400
        assert result.api_response == body

    async def test_invalid_token(self, messenger, fake_session, make_response):
        fake_session.queue(
            make_response(401, {"error": {"message": "Session expired", "code": 190}})
        )

        result = await messenger.send_text("1", "hi")

        assert result.error_kind == ErrorKind.PLATFORM
        assert result.error_code == "PLATFORM_190"

    async def test_transport_fault(self, messenger, fake_session):
        fake_session.queue(aiohttp.ClientConnectionError("dns failure"))

        result = await messenger.send_text("1", "hi")

        assert not result.success
        assert result.error_kind == ErrorKind.TRANSPORT
        assert result.error_code == "TRANSPORT_ERROR"
        assert result.recipient == "1"

    async def test_hybrid_message_is_local_fault(self, messenger, fake_session):
        result = await messenger.send_message(
            {"to": "1", "text": {"body": "hi"}, "image": {"media": "img-1"}}
        )

        assert not result.success
        assert result.error_kind == ErrorKind.LOCAL
        assert result.error_code == "INVALID_INPUT"
        assert fake_session.calls == []


class TestMediaDelegation:
    @pytest.fixture
    def delegating_messenger(self, client, template_handler, mock_media_handler):
        return WhatsAppMessenger(
            client=client,
            media_handler=mock_media_handler,
            template_handler=template_handler,
            tenant_id="123",
        )

    async def test_upload_media(self, delegating_messenger, mock_media_handler):
        expected = MediaUploadResult(success=True, media_id="media-1")
        mock_media_handler.upload_media.return_value = expected

        result = await delegating_messenger.upload_media("/tmp/a.png")

        assert result is expected
        mock_media_handler.upload_media.assert_awaited_once_with(
            "/tmp/a.png", media_type=None, filename=None
        )

    async def test_resumable_upload(self, delegating_messenger, mock_media_handler):
        mock_media_handler.resumable_upload.return_value = MediaUploadResult(
            success=True, media_handle="h"
        )

        result = await delegating_messenger.resumable_upload("/tmp/a.mp4", file_offset=10)

        assert result.media_handle == "h"
        mock_media_handler.resumable_upload.assert_awaited_once_with(
            "/tmp/a.mp4", file_offset=10, media_type=None
        )

    async def test_lookup_download_delete(self, delegating_messenger, mock_media_handler):
        await delegating_messenger.get_media_info("m1")
        await delegating_messenger.download_media("m1", destination_path="/tmp")
        await delegating_messenger.delete_media("m1")

        mock_media_handler.get_media_info.assert_awaited_once_with("m1")
        mock_media_handler.download_media.assert_awaited_once_with(
            "m1", destination_path="/tmp"
        )
        mock_media_handler.delete_media.assert_awaited_once_with("m1")
