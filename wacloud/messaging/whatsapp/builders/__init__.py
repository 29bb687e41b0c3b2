"""Request payload builders."""

from .payload_builder import (
    InvalidMessageError,
    build_media_payload,
    build_message_payload,
    build_template_components,
    build_template_payload,
    build_text_payload,
    parse_outbound_message,
)

__all__ = [
    "InvalidMessageError",
    "build_media_payload",
    "build_message_payload",
    "build_template_components",
    "build_template_payload",
    "build_text_payload",
    "parse_outbound_message",
]
