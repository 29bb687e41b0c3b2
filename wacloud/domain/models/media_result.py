"""
Result models for media operations.

Each mirrors the Graph API response it wraps while sharing the success /
error / error_kind fields of every other operation result.
"""

from datetime import datetime, timezone
from pathlib import Path

from pydantic import Field

from wacloud.messaging.whatsapp.models.basic_models import OperationResult
from wacloud.messaging.whatsapp.models.media_models import UploadSession, UploadState


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MediaUploadResult(OperationResult):
    """Result of a media upload.

    Direct uploads answer {"id": "<MEDIA_ID>"}; resumable uploads answer
    {"h": "<FILE_HANDLE>"}, exposed as media_handle.
    """

    media_id: str | None = None
    media_handle: str | None = None
    file_size: int | None = None
    mime_type: str | None = None
    session: UploadSession | None = None
    uploaded_at: datetime = Field(default_factory=_utcnow)


class UploadSessionResult(OperationResult):
    """Result of opening a resumable upload session ({"id": "upload:..."})."""

    session: UploadSession | None = None

    @property
    def session_id(self) -> str | None:
        return self.session.session_id if self.session else None

    @property
    def state(self) -> UploadState | None:
        return self.session.state if self.session else None


class MediaInfoResult(OperationResult):
    """Result of a media info lookup.

    Based on:
    {
        "messaging_product": "whatsapp",
        "url": "<URL>",
        "mime_type": "<MIME_TYPE>",
        "sha256": "<HASH>",
        "file_size": "<FILE_SIZE>",
        "id": "<MEDIA_ID>"
    }
    """

    media_id: str | None = None
    url: str | None = None
    mime_type: str | None = None
    file_size: int | None = None
    sha256: str | None = None
    retrieved_at: datetime = Field(default_factory=_utcnow)


class MediaDownloadResult(OperationResult):
    """Result of a media download; file_path is set when saved to disk."""

    media_id: str | None = None
    file_data: bytes | None = None
    file_path: str | None = None
    mime_type: str | None = None
    file_size: int | None = None
    sha256: str | None = None
    downloaded_at: datetime = Field(default_factory=_utcnow)

    def save(self, destination: str | Path) -> Path:
        """Write the downloaded bytes to destination and remember the path."""
        if self.file_data is None:
            raise ValueError("No file data to save")
        path = Path(destination)
        path.write_bytes(self.file_data)
        self.file_path = str(path)
        return path


class MediaDeleteResult(OperationResult):
    """Result of a media delete ({"success": true})."""

    media_id: str | None = None
    deleted_at: datetime = Field(default_factory=_utcnow)
