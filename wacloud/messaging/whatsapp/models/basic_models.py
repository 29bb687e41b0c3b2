"""
Basic result models for WhatsApp messaging.

Every outbound operation returns a result instead of raising, and failed
results say which kind of failure happened.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ErrorKind(str, Enum):
    """Failure taxonomy for outbound operations.

    - TRANSPORT: network/DNS/timeout or an unreadable response
    - PLATFORM: the Graph API answered with an error body or status >= 400
    - LOCAL: malformed input, missing file or configuration, missing session id
    """

    TRANSPORT = "transport"
    PLATFORM = "platform"
    LOCAL = "local"


class OperationResult(BaseModel):
    """Fields shared by all operation results."""

    model_config = ConfigDict(use_enum_values=True)

    success: bool
    error: str | None = None
    error_code: str | None = None
    error_kind: ErrorKind | None = None
    status_code: int | None = None
    api_response: dict[str, Any] | None = None
    tenant_id: str | None = None  # phone_number_id


class MessageResult(OperationResult):
    """Result of a messaging operation.

    On success, api_response holds the parsed Graph response, e.g.
    {"messaging_product": "whatsapp", "contacts": [...], "messages": [{"id": "wamid..."}]}
    """

    message_id: str | None = None
    recipient: str | None = None
    timestamp: datetime = Field(default_factory=_utcnow)
