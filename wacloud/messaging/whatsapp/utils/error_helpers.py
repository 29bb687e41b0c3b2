"""
WhatsApp error handling utilities.

Centralizes how faults become results:
- transport faults (WhatsAppTransportError) -> ErrorKind.TRANSPORT
- Graph API error bodies / HTTP >= 400 -> ErrorKind.PLATFORM
- bad input, missing files or config -> ErrorKind.LOCAL
"""

from logging import Logger
from typing import Any

from wacloud.messaging.whatsapp.client.whatsapp_client import (
    WhatsAppResponse,
    WhatsAppTransportError,
)
from wacloud.messaging.whatsapp.models.basic_models import ErrorKind, MessageResult

# Graph API error code for an expired or invalid access token
ERROR_CODE_INVALID_TOKEN = 190


def classify_error(error: Exception) -> ErrorKind:
    """Map an exception caught at an operation boundary to its ErrorKind."""
    if isinstance(error, WhatsAppTransportError):
        return ErrorKind.TRANSPORT
    return ErrorKind.LOCAL


def error_code_for(error: Exception) -> str:
    if isinstance(error, WhatsAppTransportError):
        return "TRANSPORT_ERROR"
    if isinstance(error, FileNotFoundError):
        return "FILE_NOT_FOUND"
    if isinstance(error, OSError):
        return "FILE_READ_FAILED"
    if isinstance(error, ValueError):
        return "INVALID_INPUT"
    return "LOCAL_ERROR"


def is_authentication_error(error: Exception | dict[str, Any]) -> bool:
    """Check if an exception or Graph error body indicates an authentication failure."""
    if isinstance(error, dict):
        return error.get("code") == ERROR_CODE_INVALID_TOKEN
    error_str = str(error)
    return "401" in error_str or "Unauthorized" in error_str


def platform_error_from_response(response: WhatsAppResponse) -> tuple[str, str]:
    """Extract (message, code) from a Graph API error response.

    Graph errors look like:
    {"error": {"message": "...", "type": "OAuthException", "code": 100, "fbtrace_id": "..."}}
    """
    error = response.data.get("error")
    if isinstance(error, dict):
        message = error.get("message") or f"HTTP {response.status}"
        code = error.get("code")
        return message, f"PLATFORM_{code}" if code is not None else f"HTTP_{response.status}"
    if error:
        return str(error), f"HTTP_{response.status}"
    return f"HTTP {response.status}", f"HTTP_{response.status}"


def handle_whatsapp_error(
    error: Exception,
    operation: str,
    recipient: str,
    tenant_id: str,
    logger: Logger,
    extra_context: str | None = None,
    include_traceback: bool = False,
) -> MessageResult:
    """Convert an exception raised during a messaging operation into a failed MessageResult.

    Args:
        error: The exception that occurred
        operation: Description of the operation that failed (e.g., "send text message")
        recipient: The recipient identifier
        tenant_id: The phone_number_id for logging context
        logger: Logger instance for error logging
        extra_context: Optional additional context to include in error log
        include_traceback: Whether to include full traceback in log (exc_info=True)
    """
    kind = classify_error(error)

    error_message = f"Failed to {operation} to {recipient} ({kind.value}): {error}"
    if extra_context:
        error_message = f"{error_message} - {extra_context}"

    logger.error(error_message, exc_info=include_traceback)

    return MessageResult(
        success=False,
        error=str(error),
        error_code=error_code_for(error),
        error_kind=kind,
        recipient=recipient,
        tenant_id=tenant_id,
    )


def handle_platform_rejection(
    response: WhatsAppResponse,
    operation: str,
    recipient: str,
    tenant_id: str,
    logger: Logger,
) -> MessageResult:
    """Build a failed MessageResult from a Graph API error response."""
    message, code = platform_error_from_response(response)

    error = response.data.get("error")
    if isinstance(error, dict) and is_authentication_error(error):
        logger.error(f"CRITICAL: WhatsApp authentication failed - cannot {operation}!")
        logger.error(f"Check WhatsApp access token for tenant {tenant_id}")

    logger.error(f"Platform rejected {operation} to {recipient}: {message}")

    return MessageResult(
        success=False,
        error=message,
        error_code=code,
        error_kind=ErrorKind.PLATFORM,
        status_code=response.status,
        api_response=response.data,
        recipient=recipient,
        tenant_id=tenant_id,
    )


def message_result_from_response(
    response: WhatsAppResponse,
    operation: str,
    recipient: str,
    tenant_id: str,
    logger: Logger,
) -> MessageResult:
    """Turn a /messages response into a MessageResult.

    A rejection body becomes a PLATFORM failure; anything else is a success
    carrying the parsed response and the first message id, if present.
    """
    if not response.ok:
        return handle_platform_rejection(
            response, operation, recipient, tenant_id, logger
        )

    messages = response.data.get("messages") or [{}]
    message_id = messages[0].get("id") if isinstance(messages[0], dict) else None
    logger.info(f"{operation.capitalize()} succeeded for {recipient}, id: {message_id}")

    return MessageResult(
        success=True,
        message_id=message_id,
        recipient=recipient,
        status_code=response.status,
        api_response=response.data,
        tenant_id=tenant_id,
    )
