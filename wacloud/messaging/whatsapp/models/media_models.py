"""
Media models for WhatsApp messaging.

Media types, the link-or-id Media Reference used by media messages, and
the resumable Upload Session.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class MediaType(Enum):
    """Media types a message can carry."""

    AUDIO = "audio"
    DOCUMENT = "document"
    IMAGE = "image"
    VIDEO = "video"


class MediaReferenceKind(str, Enum):
    """How a Media Reference addresses its content."""

    LINK = "link"
    ID = "id"


class MediaReference(BaseModel):
    """Attachable content, either a remote link or an uploaded media id.

    Classification is by prefix only: anything starting with "http" is a
    link, everything else is an opaque platform id.
    """

    model_config = ConfigDict(frozen=True, use_enum_values=False)

    kind: MediaReferenceKind
    value: str

    @classmethod
    def from_string(cls, value: str) -> "MediaReference":
        if value.startswith("http"):
            return cls(kind=MediaReferenceKind.LINK, value=value)
        return cls(kind=MediaReferenceKind.ID, value=value)

    @classmethod
    def link(cls, url: str) -> "MediaReference":
        return cls(kind=MediaReferenceKind.LINK, value=url)

    @classmethod
    def media_id(cls, media_id: str) -> "MediaReference":
        return cls(kind=MediaReferenceKind.ID, value=media_id)

    @property
    def is_link(self) -> bool:
        return self.kind == MediaReferenceKind.LINK

    def to_payload(self) -> dict[str, str]:
        """Sub-object key for the message body: {"link": ...} or {"id": ...}."""
        return {self.kind.value: self.value}


class UploadState(str, Enum):
    """Resumable upload lifecycle."""

    INIT = "init"
    SESSION_OPEN = "session_open"
    COMPLETE = "complete"
    FAILED = "failed"


class UploadSession(BaseModel):
    """An in-progress resumable upload.

    The session id comes from the platform; the byte offset is supplied by
    the caller and is not tracked server-side by this library.
    """

    session_id: str | None = None
    file_length: int = Field(..., ge=0)
    file_type: str = Field(..., min_length=1)
    file_offset: int = Field(0, ge=0)
    state: UploadState = UploadState.INIT
