"""
Outbound message variants.

OutboundMessage is a tagged union discriminated by ``type``; each variant
carries only the fields that make sense for it, so a hybrid payload (say,
text plus image) cannot be constructed.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from wacloud.messaging.whatsapp.models.media_models import MediaReference
from wacloud.messaging.whatsapp.models.template_models import TemplateParameter

MESSAGING_PRODUCT = "whatsapp"
RECIPIENT_TYPE_INDIVIDUAL = "individual"

# Plain dicts are tried first so they pass through with every key intact
TemplateParameterInput = Annotated[
    dict[str, Any] | TemplateParameter, Field(union_mode="left_to_right")
]


class BaseOutboundMessage(BaseModel):
    """Fields common to every outbound message."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    to: str = Field(..., description="Recipient phone number or user identifier")


class TextMessage(BaseOutboundMessage):
    type: Literal["text"] = "text"
    body: str


class TemplateMessage(BaseOutboundMessage):
    type: Literal["template"] = "template"
    name: str
    language: str = "en_US"
    header: list[TemplateParameterInput] | None = None
    body: list[TemplateParameterInput] | None = None
    buttons: list[dict[str, Any]] | None = None


class _MediaMessage(BaseOutboundMessage):
    media: MediaReference

    @field_validator("media", mode="before")
    @classmethod
    def classify_media(cls, v):
        """Accept a raw string and classify it as link or id."""
        if isinstance(v, str):
            return MediaReference.from_string(v)
        return v


class ImageMessage(_MediaMessage):
    type: Literal["image"] = "image"
    caption: str | None = None


class VideoMessage(_MediaMessage):
    type: Literal["video"] = "video"
    caption: str | None = None


class AudioMessage(_MediaMessage):
    type: Literal["audio"] = "audio"


class DocumentMessage(_MediaMessage):
    type: Literal["document"] = "document"
    caption: str | None = None
    filename: str | None = None


OutboundMessage = Annotated[
    Union[
        TextMessage,
        TemplateMessage,
        ImageMessage,
        VideoMessage,
        AudioMessage,
        DocumentMessage,
    ],
    Field(discriminator="type"),
]

MESSAGE_TYPES: tuple[str, ...] = (
    "text",
    "template",
    "image",
    "video",
    "audio",
    "document",
)

outbound_message_adapter: TypeAdapter[OutboundMessage] = TypeAdapter(OutboundMessage)
