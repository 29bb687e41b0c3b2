"""WhatsApp client package."""

from .whatsapp_client import (
    WhatsAppClient,
    WhatsAppFormDataBuilder,
    WhatsAppResponse,
    WhatsAppTransportError,
    WhatsAppUrlBuilder,
)

__all__ = [
    "WhatsAppClient",
    "WhatsAppFormDataBuilder",
    "WhatsAppResponse",
    "WhatsAppTransportError",
    "WhatsAppUrlBuilder",
]
