"""Domain result models."""

from .media_result import (
    MediaDeleteResult,
    MediaDownloadResult,
    MediaInfoResult,
    MediaUploadResult,
    UploadSessionResult,
)

__all__ = [
    "MediaDeleteResult",
    "MediaDownloadResult",
    "MediaInfoResult",
    "MediaUploadResult",
    "UploadSessionResult",
]
