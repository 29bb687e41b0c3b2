"""
WhatsApp messenger: the public surface of the client.

Provides every outbound operation:
- Messages: send_text, send_template, send_image, send_video, send_audio,
  send_document, send_message (any OutboundMessage)
- Media: upload_media, resumable_upload, get_media_info, download_media, delete_media

Every operation catches faults at its boundary and returns a typed result;
nothing is re-raised to the caller.
"""

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from wacloud.core.logging.context import request_context
from wacloud.core.logging.logger import get_logger
from wacloud.domain.models.media_result import (
    MediaDeleteResult,
    MediaDownloadResult,
    MediaInfoResult,
    MediaUploadResult,
)
from wacloud.messaging.whatsapp.builders.payload_builder import build_message_payload
from wacloud.messaging.whatsapp.client.whatsapp_client import WhatsAppClient
from wacloud.messaging.whatsapp.handlers.whatsapp_media_handler import (
    WhatsAppMediaHandler,
)
from wacloud.messaging.whatsapp.handlers.whatsapp_template_handler import (
    WhatsAppTemplateHandler,
)
from wacloud.messaging.whatsapp.models.basic_models import MessageResult
from wacloud.messaging.whatsapp.models.media_models import MediaReference
from wacloud.messaging.whatsapp.models.message_models import OutboundMessage
from wacloud.messaging.whatsapp.utils.error_helpers import (
    handle_whatsapp_error,
    message_result_from_response,
)


class WhatsAppMessenger:
    """
    WhatsApp implementation of all outbound operations for one phone number.

    Uses composition:
    - WhatsAppClient: HTTP transport and URL resolution
    - WhatsAppMediaHandler: direct and resumable uploads, media lookup/download/delete
    - WhatsAppTemplateHandler: template sends and template administration
    """

    def __init__(
        self,
        client: WhatsAppClient,
        media_handler: WhatsAppMediaHandler,
        template_handler: WhatsAppTemplateHandler,
        tenant_id: str,
    ):
        """Initialize WhatsApp messenger.

        Args:
            client: Configured WhatsApp client for API operations
            media_handler: Media handler for upload/download operations
            template_handler: Template handler for template operations
            tenant_id: Tenant identifier (phone_number_id)
        """
        self.client = client
        self.media_handler = media_handler
        self.template_handler = template_handler
        self._tenant_id = tenant_id
        self.logger = get_logger(__name__).bind(tenant_id=tenant_id)

    @property
    def tenant_id(self) -> str:
        return self._tenant_id

    # Messages

    async def send_message(
        self, message: OutboundMessage | Mapping[str, Any]
    ) -> MessageResult:
        """Send any message variant (model or mapping) to the /messages endpoint."""
        if isinstance(message, Mapping):
            recipient = str(message.get("to", "unknown"))
            message_type = message.get("type", "")
        else:
            recipient = message.to
            message_type = message.type
        operation = f"send {message_type} message" if message_type else "send message"

        with request_context(tenant_id=self._tenant_id, user_id=recipient):
            try:
                payload = build_message_payload(message)
                self.logger.debug(f"Sending {payload['type']} message")
                response = await self.client.post_request(payload)

                return message_result_from_response(
                    response,
                    operation=operation,
                    recipient=recipient,
                    tenant_id=self._tenant_id,
                    logger=self.logger,
                )

            except Exception as e:
                return handle_whatsapp_error(
                    error=e,
                    operation=operation,
                    recipient=recipient,
                    tenant_id=self._tenant_id,
                    logger=self.logger,
                )

    async def send_text(self, to: str, message: str) -> MessageResult:
        """Send a plain text message (link previews disabled)."""
        return await self.send_message({"type": "text", "to": to, "body": message})

    async def send_template(
        self,
        to: str,
        template_name: str,
        language: str = "en_US",
        header: list | None = None,
        body: list | None = None,
        buttons: list[dict[str, Any]] | None = None,
    ) -> MessageResult:
        """Send an approved template.

        Components are ordered header, body, buttons no matter how they are passed.
        """
        return await self.template_handler.send_template(
            to,
            template_name,
            language=language,
            header=header,
            body=body,
            buttons=buttons,
        )

    async def send_image(
        self,
        to: str,
        media: str | MediaReference,
        caption: str | None = None,
    ) -> MessageResult:
        """Send an image by URL or uploaded media id.

        Args:
            to: Recipient phone number
            media: "http..." link, media id, or a MediaReference
            caption: Optional caption
        """
        return await self.send_message(
            {"type": "image", "to": to, "media": media, "caption": caption}
        )

    async def send_video(
        self,
        to: str,
        media: str | MediaReference,
        caption: str | None = None,
    ) -> MessageResult:
        return await self.send_message(
            {"type": "video", "to": to, "media": media, "caption": caption}
        )

    async def send_audio(self, to: str, media: str | MediaReference) -> MessageResult:
        """Send audio by URL or media id. Audio messages take no caption."""
        return await self.send_message({"type": "audio", "to": to, "media": media})

    async def send_document(
        self,
        to: str,
        media: str | MediaReference,
        caption: str | None = None,
        filename: str | None = None,
    ) -> MessageResult:
        return await self.send_message(
            {
                "type": "document",
                "to": to,
                "media": media,
                "caption": caption,
                "filename": filename,
            }
        )

    # Media

    async def upload_media(
        self,
        file_path: str | Path,
        media_type: str | None = None,
        filename: str | None = None,
    ) -> MediaUploadResult:
        """Single-request multipart upload; result.media_id is usable in send_* calls."""
        return await self.media_handler.upload_media(
            file_path, media_type=media_type, filename=filename
        )

    async def resumable_upload(
        self,
        file_path: str | Path,
        file_offset: int = 0,
        media_type: str | None = None,
    ) -> MediaUploadResult:
        """Session-based upload; result.media_handle holds the returned file handle."""
        return await self.media_handler.resumable_upload(
            file_path, file_offset=file_offset, media_type=media_type
        )

    async def get_media_info(self, media_id: str) -> MediaInfoResult:
        return await self.media_handler.get_media_info(media_id)

    async def download_media(
        self, media_id: str, destination_path: str | Path | None = None
    ) -> MediaDownloadResult:
        return await self.media_handler.download_media(
            media_id, destination_path=destination_path
        )

    async def delete_media(self, media_id: str) -> MediaDeleteResult:
        return await self.media_handler.delete_media(media_id)
