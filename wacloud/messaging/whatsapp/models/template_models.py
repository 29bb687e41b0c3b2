"""
WhatsApp template message models.

Template parameters can be given as plain dicts in the Graph format or as
TemplateParameter models; both end up as the same parameter objects.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

from wacloud.messaging.whatsapp.models.basic_models import OperationResult


class TemplateComponentType(str, Enum):
    """Component slots, in the order the platform requires them."""

    HEADER = "header"
    BODY = "body"
    BUTTON = "button"


class TemplateParameterType(str, Enum):
    """Template parameter types."""

    TEXT = "text"
    CURRENCY = "currency"
    DATE_TIME = "date_time"
    IMAGE = "image"
    VIDEO = "video"
    DOCUMENT = "document"
    LOCATION = "location"


class TemplateParameter(BaseModel):
    """Template parameter for dynamic content replacement."""

    type: TemplateParameterType = Field(..., description="Parameter type")
    text: str | None = Field(
        None, max_length=1024, description="Text content for text parameters"
    )
    currency: dict[str, Any] | None = None
    date_time: dict[str, Any] | None = None
    image: dict[str, Any] | None = None
    video: dict[str, Any] | None = None
    document: dict[str, Any] | None = None
    location: dict[str, Any] | None = None

    @field_validator("text")
    @classmethod
    def validate_text_required_for_text_type(cls, v, info):
        """Validate that text is provided for text type parameters."""
        if info.data.get("type") == TemplateParameterType.TEXT and not v:
            raise ValueError("Text content is required for text type parameters")
        return v

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


def parameter_payload(parameter: "TemplateParameter | dict[str, Any]") -> dict[str, Any]:
    """Graph API form of a parameter; dicts are passed through unmodified."""
    if isinstance(parameter, TemplateParameter):
        return parameter.to_payload()
    return parameter


class TemplateOperationResult(OperationResult):
    """Result of a template administration call (list/get/create/update/delete)."""

    template_id: str | None = None
    template_name: str | None = None
