"""WhatsApp models package."""

from .basic_models import ErrorKind, MessageResult, OperationResult
from .media_models import (
    MediaReference,
    MediaReferenceKind,
    MediaType,
    UploadSession,
    UploadState,
)
from .message_models import (
    AudioMessage,
    DocumentMessage,
    ImageMessage,
    OutboundMessage,
    TemplateMessage,
    TextMessage,
    VideoMessage,
)
from .template_models import (
    TemplateComponentType,
    TemplateParameter,
    TemplateParameterType,
)

__all__ = [
    "ErrorKind",
    "MessageResult",
    "OperationResult",
    "MediaReference",
    "MediaReferenceKind",
    "MediaType",
    "UploadSession",
    "UploadState",
    "AudioMessage",
    "DocumentMessage",
    "ImageMessage",
    "OutboundMessage",
    "TemplateMessage",
    "TextMessage",
    "VideoMessage",
    "TemplateComponentType",
    "TemplateParameter",
    "TemplateParameterType",
]
