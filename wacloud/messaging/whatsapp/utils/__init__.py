"""WhatsApp utility functions and helpers."""

from wacloud.messaging.whatsapp.utils.error_helpers import (
    classify_error,
    handle_platform_rejection,
    handle_whatsapp_error,
    is_authentication_error,
    platform_error_from_response,
)

__all__ = [
    "classify_error",
    "handle_platform_rejection",
    "handle_whatsapp_error",
    "is_authentication_error",
    "platform_error_from_response",
]
