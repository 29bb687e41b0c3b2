"""WhatsApp service handlers."""

from .whatsapp_media_handler import WhatsAppMediaHandler
from .whatsapp_template_handler import WhatsAppTemplateHandler

__all__ = [
    "WhatsAppMediaHandler",
    "WhatsAppTemplateHandler",
]
