"""
wacloud - WhatsApp Cloud API client

Builds outbound message payloads, uploads media (direct and resumable) and
answers the webhook verification handshake.

Top level exposes the essentials only; everything else is importable from
its wacloud.messaging / wacloud.domain path.
"""

from .api.routes.webhooks import create_webhook_router
from .core.config.settings import WhatsAppConfig
from .domain.factories.messenger_factory import MessengerFactory
from .messaging.whatsapp.builders.payload_builder import (
    InvalidMessageError,
    build_message_payload,
)
from .messaging.whatsapp.client.whatsapp_client import WhatsAppClient
from .messaging.whatsapp.messenger.whatsapp_messenger import WhatsAppMessenger
from .webhooks.verifier import WebhookVerifier

# Dynamic version from pyproject.toml
from .core.config.settings import settings

__version__ = settings.version

__all__ = [
    "InvalidMessageError",
    "MessengerFactory",
    "WebhookVerifier",
    "WhatsAppClient",
    "WhatsAppConfig",
    "WhatsAppMessenger",
    "build_message_payload",
    "create_webhook_router",
]
