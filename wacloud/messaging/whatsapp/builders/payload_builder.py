"""
Request bodies for the /messages endpoint.

Pure functions: an OutboundMessage (or a mapping describing one) goes in,
a JSON-serializable dict comes out. Nothing is validated against the
platform's rules (recipient format, template existence, lengths); the Graph
API rejects what it doesn't like.

Optional fields that were not supplied are left out of the body entirely.
"""

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from wacloud.messaging.whatsapp.models.media_models import MediaReference, MediaType
from wacloud.messaging.whatsapp.models.message_models import (
    MESSAGE_TYPES,
    MESSAGING_PRODUCT,
    RECIPIENT_TYPE_INDIVIDUAL,
    AudioMessage,
    BaseOutboundMessage,
    DocumentMessage,
    ImageMessage,
    OutboundMessage,
    TemplateMessage,
    TextMessage,
    VideoMessage,
    outbound_message_adapter,
)
from wacloud.messaging.whatsapp.models.template_models import (
    TemplateComponentType,
    parameter_payload,
)


class InvalidMessageError(ValueError):
    """The message input is structurally inconsistent (e.g. two variants at once)."""


_MEDIA_MESSAGE_CLASSES: dict[MediaType, type[BaseOutboundMessage]] = {
    MediaType.IMAGE: ImageMessage,
    MediaType.VIDEO: VideoMessage,
    MediaType.AUDIO: AudioMessage,
    MediaType.DOCUMENT: DocumentMessage,
}


def build_template_components(
    header: list | None = None,
    body: list | None = None,
    buttons: list[dict[str, Any]] | None = None,
) -> list[dict[str, Any]]:
    """Template components in platform order: header, body, then buttons.

    Header and body components are only added when they have parameters.
    Button components are appended verbatim.
    """
    components: list[dict[str, Any]] = []

    if header:
        components.append(
            {
                "type": TemplateComponentType.HEADER.value,
                "parameters": [parameter_payload(p) for p in header],
            }
        )

    if body:
        components.append(
            {
                "type": TemplateComponentType.BODY.value,
                "parameters": [parameter_payload(p) for p in body],
            }
        )

    if buttons:
        components.extend(buttons)

    return components


def _text_payload(message: TextMessage) -> dict[str, Any]:
    return {
        "messaging_product": MESSAGING_PRODUCT,
        "recipient_type": RECIPIENT_TYPE_INDIVIDUAL,
        "to": message.to,
        "type": "text",
        "text": {"preview_url": False, "body": message.body},
    }


def _template_payload(message: TemplateMessage) -> dict[str, Any]:
    template: dict[str, Any] = {
        "name": message.name,
        "language": {"code": message.language},
    }

    components = build_template_components(
        message.header, message.body, message.buttons
    )
    if components:
        template["components"] = components

    return {
        "messaging_product": MESSAGING_PRODUCT,
        "to": message.to,
        "type": "template",
        "template": template,
    }


def _media_payload(
    message: ImageMessage | VideoMessage | AudioMessage | DocumentMessage,
) -> dict[str, Any]:
    media_object = message.media.to_payload()

    caption = getattr(message, "caption", None)
    if caption is not None:
        media_object["caption"] = caption

    filename = getattr(message, "filename", None)
    if filename is not None:
        media_object["filename"] = filename

    return {
        "messaging_product": MESSAGING_PRODUCT,
        "recipient_type": RECIPIENT_TYPE_INDIVIDUAL,
        "to": message.to,
        "type": message.type,
        message.type: media_object,
    }


# Envelope keys the builders add themselves. They are accepted on input so a
# built body, or one written in the Graph format, parses back.
_ENVELOPE_KEYS = {
    "messaging_product": MESSAGING_PRODUCT,
    "recipient_type": RECIPIENT_TYPE_INDIVIDUAL,
}

_TEMPLATE_PARAMETER_SLOTS = (
    TemplateComponentType.HEADER.value,
    TemplateComponentType.BODY.value,
)


def _drop_envelope(fields: dict[str, Any]) -> None:
    for key, expected in _ENVELOPE_KEYS.items():
        if key in fields and fields.pop(key) != expected:
            raise InvalidMessageError(f"Unsupported {key}: expected '{expected}'")


def _media_fields(variant: str, content: dict[str, Any]) -> dict[str, Any]:
    references = [key for key in ("link", "id", "media") if key in content]
    if len(references) > 1:
        raise InvalidMessageError(
            f"{variant} content carries more than one media reference: "
            f"{', '.join(references)}"
        )
    if "link" in content:
        content["media"] = MediaReference.link(content.pop("link"))
    elif "id" in content:
        content["media"] = MediaReference.media_id(content.pop("id"))
    return content


def _template_fields(content: dict[str, Any]) -> dict[str, Any]:
    """Split Graph "components" back into header, body and buttons."""
    language = content.get("language")
    if isinstance(language, Mapping):
        content["language"] = language.get("code")

    components = content.pop("components", None)
    if components is None:
        return content

    given = [key for key in ("header", "body", "buttons") if key in content]
    if given:
        raise InvalidMessageError(
            f"Template carries both components and {', '.join(given)}"
        )

    for component in components:
        kind = component.get("type") if isinstance(component, Mapping) else None
        if kind == TemplateComponentType.BUTTON.value:
            content.setdefault("buttons", []).append(component)
        elif kind in _TEMPLATE_PARAMETER_SLOTS and kind not in content:
            content[kind] = list(component.get("parameters", []))
        else:
            raise InvalidMessageError(f"Unexpected template component: {kind!r}")
    return content


def _variant_fields(variant: str, content: Any) -> dict[str, Any]:
    if not isinstance(content, Mapping):
        return {"body": content} if variant == "text" else {"media": content}

    content = dict(content)
    if variant == "text":
        if content.pop("preview_url", False):
            raise InvalidMessageError("Link previews are not supported")
        return content
    if variant == "template":
        return _template_fields(content)
    return _media_fields(variant, content)


def _normalize_mapping(data: Mapping[str, Any]) -> dict[str, Any]:
    """Flatten the {"to": ..., "<variant>": {...}} shorthand and reject hybrids."""
    present = [key for key in MESSAGE_TYPES if key in data]
    if len(present) > 1:
        raise InvalidMessageError(
            f"Message carries more than one variant: {', '.join(present)}"
        )

    fields = dict(data)
    _drop_envelope(fields)
    if not present:
        return fields

    variant = present[0]
    declared = fields.get("type")
    if declared is not None and declared != variant:
        raise InvalidMessageError(
            f"Message type '{declared}' conflicts with '{variant}' content"
        )

    fields.update(_variant_fields(variant, fields.pop(variant)))
    fields["type"] = variant
    return fields


def parse_outbound_message(data: Mapping[str, Any]) -> OutboundMessage:
    """Validate a mapping into exactly one OutboundMessage variant.

    Accepts the flat form {"type": "image", "to": ..., "media": ...}, the
    shorthand {"to": ..., "image": {"media": ..., "caption": ...}}, and the
    Graph request body itself ({"image": {"link": ...}} or {"id": ...},
    template "components", the "messaging_product" envelope).

    Raises:
        InvalidMessageError: If the mapping names several variants or is malformed
    """
    try:
        fields = _normalize_mapping(data)
        return outbound_message_adapter.validate_python(fields)
    except ValidationError as e:
        raise InvalidMessageError(str(e)) from e


def build_message_payload(
    message: OutboundMessage | Mapping[str, Any],
) -> dict[str, Any]:
    """Build the /messages request body for any message variant."""
    if isinstance(message, Mapping):
        message = parse_outbound_message(message)

    if isinstance(message, TextMessage):
        return _text_payload(message)
    if isinstance(message, TemplateMessage):
        return _template_payload(message)
    if isinstance(message, ImageMessage | VideoMessage | AudioMessage | DocumentMessage):
        return _media_payload(message)

    raise InvalidMessageError(f"Unsupported message: {type(message).__name__}")


def build_text_payload(to: str, body: str) -> dict[str, Any]:
    return build_message_payload(TextMessage(to=to, body=body))


def build_template_payload(
    to: str,
    name: str,
    language: str = "en_US",
    header: list | None = None,
    body: list | None = None,
    buttons: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    return build_message_payload(
        TemplateMessage(
            to=to,
            name=name,
            language=language,
            header=header,
            body=body,
            buttons=buttons,
        )
    )


def build_media_payload(
    media_type: MediaType,
    to: str,
    media: str | MediaReference,
    caption: str | None = None,
    filename: str | None = None,
) -> dict[str, Any]:
    """Body for an image/video/audio/document message.

    Audio takes no caption, and only documents take a filename.

    Raises:
        InvalidMessageError: If a field is given that the media type does not carry
    """
    fields: dict[str, Any] = {"to": to, "media": media}
    if caption is not None:
        fields["caption"] = caption
    if filename is not None:
        fields["filename"] = filename

    message_class = _MEDIA_MESSAGE_CLASSES[media_type]
    extra = set(fields) - set(message_class.model_fields)
    if extra:
        raise InvalidMessageError(
            f"{media_type.value} messages do not accept: {', '.join(sorted(extra))}"
        )

    try:
        return build_message_payload(message_class(**fields))
    except ValidationError as e:
        raise InvalidMessageError(str(e)) from e
