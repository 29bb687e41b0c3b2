"""
WhatsApp media operations.

Implements the Cloud API media endpoints:
- POST /PHONE_NUMBER_ID/media (direct multipart upload)
- POST /APP_ID/uploads, then POST /UPLOAD_SESSION_ID (resumable upload)
- GET /MEDIA_ID (info), GET <media url> (download), DELETE /MEDIA_ID
"""

import mimetypes
from pathlib import Path
from typing import Any, TypeVar

from wacloud.core.logging.logger import get_logger
from wacloud.domain.models.media_result import (
    MediaDeleteResult,
    MediaDownloadResult,
    MediaInfoResult,
    MediaUploadResult,
    UploadSessionResult,
)
from wacloud.messaging.whatsapp.client.whatsapp_client import (
    WhatsAppClient,
    WhatsAppResponse,
)
from wacloud.messaging.whatsapp.models.basic_models import ErrorKind, OperationResult
from wacloud.messaging.whatsapp.models.media_models import UploadSession, UploadState
from wacloud.messaging.whatsapp.models.message_models import MESSAGING_PRODUCT
from wacloud.messaging.whatsapp.utils.error_helpers import (
    classify_error,
    error_code_for,
    platform_error_from_response,
)

ResultT = TypeVar("ResultT", bound=OperationResult)


class WhatsAppMediaHandler:
    """
    Media upload, lookup, download and delete for one phone number.

    Resumable uploads run as two phases with the session id threaded
    between them:
        INIT --create_upload_session--> SESSION_OPEN --upload_to_session--> COMPLETE
    A failed phase leaves the session FAILED. Once a session id exists,
    upload_to_session can be called again (after COMPLETE or FAILED) with a
    new offset. Nothing is retried automatically and sessions are not kept
    anywhere; choosing the offset is the caller's job.
    """

    def __init__(self, client: WhatsAppClient, tenant_id: str):
        """Initialize WhatsApp media handler.

        Args:
            client: Configured WhatsApp client for API operations
            tenant_id: Tenant identifier (phone_number_id)
        """
        self.client = client
        self._tenant_id = tenant_id
        self.logger = get_logger(__name__)

    @property
    def tenant_id(self) -> str:
        return self._tenant_id

    def _failure(
        self,
        result_cls: type[ResultT],
        error: str,
        error_code: str,
        error_kind: ErrorKind,
        **fields: Any,
    ) -> ResultT:
        return result_cls(
            success=False,
            error=error,
            error_code=error_code,
            error_kind=error_kind,
            tenant_id=self._tenant_id,
            **fields,
        )

    def _from_exception(
        self, result_cls: type[ResultT], error: Exception, **fields: Any
    ) -> ResultT:
        return self._failure(
            result_cls,
            str(error),
            error_code_for(error),
            classify_error(error),
            **fields,
        )

    def _from_rejection(
        self, result_cls: type[ResultT], response: WhatsAppResponse, **fields: Any
    ) -> ResultT:
        message, code = platform_error_from_response(response)
        return self._failure(
            result_cls,
            message,
            code,
            ErrorKind.PLATFORM,
            status_code=response.status,
            api_response=response.data,
            **fields,
        )

    @staticmethod
    def _guess_mime_type(path: Path) -> str | None:
        return mimetypes.guess_type(path.name)[0]

    # Direct upload

    async def upload_media(
        self,
        file_path: str | Path,
        media_type: str | None = None,
        filename: str | None = None,
    ) -> MediaUploadResult:
        """
        Upload a media file from disk with a single multipart request.

        Args:
            file_path: Path to the file
            media_type: MIME type; guessed from the file name when omitted
            filename: Name sent with the upload (defaults to the file name)
        """
        try:
            media_path = Path(file_path)
            if not media_path.exists():
                return self._failure(
                    MediaUploadResult,
                    f"Media file not found: {media_path}",
                    "FILE_NOT_FOUND",
                    ErrorKind.LOCAL,
                )

            if media_type is None:
                media_type = self._guess_mime_type(media_path)
                if not media_type:
                    return self._failure(
                        MediaUploadResult,
                        f"Could not determine MIME type for file: {media_path}",
                        "MIME_TYPE_UNKNOWN",
                        ErrorKind.LOCAL,
                    )

            file_data = media_path.read_bytes()

        except Exception as e:
            self.logger.exception(f"Failed to read {file_path}: {e}")
            return self._from_exception(MediaUploadResult, e)

        return await self.upload_media_from_bytes(
            file_data, media_type, filename or media_path.name
        )

    async def upload_media_from_bytes(
        self, file_data: bytes, media_type: str, filename: str
    ) -> MediaUploadResult:
        """Upload in-memory content with a single multipart request."""
        try:
            data = {"messaging_product": MESSAGING_PRODUCT, "type": media_type}
            upload_url = self.client.url_builder.get_media_url()
            files = {"file": (filename, file_data, media_type)}

            self.logger.debug(f"Uploading {filename} ({len(file_data)} bytes) to {upload_url}")

            response = await self.client.post_request(
                payload=data, custom_url=upload_url, files=files
            )
            if not response.ok:
                return self._from_rejection(MediaUploadResult, response)

            media_id = response.data.get("id")
            if not media_id:
                return self._failure(
                    MediaUploadResult,
                    f"No media ID in response for {filename}: {response.data}",
                    "NO_MEDIA_ID",
                    ErrorKind.PLATFORM,
                    status_code=response.status,
                    api_response=response.data,
                )

            self.logger.info(f"Successfully uploaded {filename} (ID: {media_id})")
            return MediaUploadResult(
                success=True,
                media_id=media_id,
                file_size=len(file_data),
                mime_type=media_type,
                status_code=response.status,
                api_response=response.data,
                tenant_id=self._tenant_id,
            )

        except Exception as e:
            self.logger.exception(f"Failed to upload {filename}: {e}")
            return self._from_exception(MediaUploadResult, e)

    # Resumable upload

    async def create_upload_session(
        self, file_length: int, file_type: str
    ) -> UploadSessionResult:
        """
        Phase 1: open a resumable upload session (INIT -> SESSION_OPEN).

        POST /APP_ID/uploads?file_length=..&file_type=..&access_token=..
        A response without an id fails the session; there is no retry.
        """
        try:
            session = UploadSession(file_length=file_length, file_type=file_type)
        except Exception as e:
            return self._from_exception(UploadSessionResult, e)

        app_id = self.client.config.app_id
        if not app_id:
            session.state = UploadState.FAILED
            return self._failure(
                UploadSessionResult,
                "app_id is required for resumable uploads",
                "MISSING_APP_ID",
                ErrorKind.LOCAL,
                session=session,
            )

        try:
            url = self.client.url_builder.get_uploads_url(
                app_id,
                params={
                    "file_length": file_length,
                    "file_type": file_type,
                    "access_token": self.client.access_token,
                },
            )
            self.logger.debug(
                f"Opening upload session for {file_length} bytes of {file_type}"
            )

            response = await self.client.post_request(custom_url=url)
            if not response.ok:
                session.state = UploadState.FAILED
                return self._from_rejection(
                    UploadSessionResult, response, session=session
                )

            session_id = response.data.get("id")
            if not session_id:
                session.state = UploadState.FAILED
                return self._failure(
                    UploadSessionResult,
                    f"No upload session id in response: {response.data}",
                    "NO_SESSION_ID",
                    ErrorKind.LOCAL,
                    status_code=response.status,
                    api_response=response.data,
                    session=session,
                )

            session.session_id = session_id
            session.state = UploadState.SESSION_OPEN
            self.logger.info(f"Upload session opened: {session_id}")
            return UploadSessionResult(
                success=True,
                session=session,
                status_code=response.status,
                api_response=response.data,
                tenant_id=self._tenant_id,
            )

        except Exception as e:
            self.logger.exception(f"Failed to open upload session: {e}")
            session.state = UploadState.FAILED
            return self._from_exception(UploadSessionResult, e, session=session)

    async def upload_to_session(
        self,
        session: UploadSession,
        file_data: bytes,
        file_offset: int | None = None,
    ) -> MediaUploadResult:
        """
        Phase 2: send the file content into an open session (SESSION_OPEN -> COMPLETE).

        POST /UPLOAD_SESSION_ID with "Authorization: OAuth <token>" and
        "file_offset: <offset>". The response is passed through as-is; partial
        uploads are not detected, call again with a larger offset to continue.
        Only a session that never received an id is refused.
        """
        if session.state == UploadState.INIT or not session.session_id:
            return self._failure(
                MediaUploadResult,
                f"Upload session has no session id (state: {session.state.value})",
                "SESSION_NOT_OPEN",
                ErrorKind.LOCAL,
                session=session,
            )

        if file_offset is not None:
            session.file_offset = file_offset

        try:
            url = self.client.url_builder.get_upload_session_url(session.session_id)
            headers = {
                "Authorization": f"OAuth {self.client.access_token}",
                "file_offset": str(session.file_offset),
            }
            self.logger.debug(
                f"Uploading {len(file_data)} bytes to session {session.session_id} "
                f"at offset {session.file_offset}"
            )

            response = await self.client.post_request(
                custom_url=url, headers=headers, data=file_data
            )
            if not response.ok:
                session.state = UploadState.FAILED
                return self._from_rejection(MediaUploadResult, response, session=session)

            session.state = UploadState.COMPLETE
            media_handle = response.data.get("h")
            self.logger.info(f"Resumable upload complete (handle: {media_handle})")
            return MediaUploadResult(
                success=True,
                media_handle=media_handle,
                file_size=session.file_length,
                mime_type=session.file_type,
                session=session,
                status_code=response.status,
                api_response=response.data,
                tenant_id=self._tenant_id,
            )

        except Exception as e:
            self.logger.exception(
                f"Failed to upload to session {session.session_id}: {e}"
            )
            session.state = UploadState.FAILED
            return self._from_exception(MediaUploadResult, e, session=session)

    async def resumable_upload_from_bytes(
        self, file_data: bytes, media_type: str, file_offset: int = 0
    ) -> MediaUploadResult:
        """Run both resumable phases; phase 2 only runs once phase 1 yields a session id."""
        session_result = await self.create_upload_session(len(file_data), media_type)
        if not session_result.success:
            return MediaUploadResult(
                success=False,
                error=session_result.error,
                error_code=session_result.error_code,
                error_kind=session_result.error_kind,
                status_code=session_result.status_code,
                api_response=session_result.api_response,
                session=session_result.session,
                tenant_id=self._tenant_id,
            )

        return await self.upload_to_session(
            session_result.session, file_data, file_offset=file_offset
        )

    async def resumable_upload(
        self,
        file_path: str | Path,
        file_offset: int = 0,
        media_type: str | None = None,
    ) -> MediaUploadResult:
        """Upload a file from disk through a resumable upload session."""
        try:
            media_path = Path(file_path)
            media_type = media_type or self._guess_mime_type(media_path)
            if not media_type:
                return self._failure(
                    MediaUploadResult,
                    f"Could not determine MIME type for file: {media_path}",
                    "MIME_TYPE_UNKNOWN",
                    ErrorKind.LOCAL,
                )
            file_data = media_path.read_bytes()

        except Exception as e:
            self.logger.exception(f"Failed to read {file_path}: {e}")
            return self._from_exception(MediaUploadResult, e)

        return await self.resumable_upload_from_bytes(
            file_data, media_type, file_offset=file_offset
        )

    # Lookup, download, delete

    async def get_media_info(self, media_id: str) -> MediaInfoResult:
        """
        Retrieve media metadata (including the short-lived download URL).

        Implements GET /MEDIA_ID.
        """
        try:
            self.logger.debug(f"Fetching media info for ID: {media_id}")
            response = await self.client.get_request(
                url=self.client.url_builder.get_media_url(media_id)
            )
            if not response.ok:
                return self._from_rejection(MediaInfoResult, response, media_id=media_id)

            result = response.data
            self.logger.info(f"Successfully retrieved media info for ID: {media_id}")
            return MediaInfoResult(
                success=True,
                media_id=result.get("id", media_id),
                url=result.get("url"),
                mime_type=result.get("mime_type"),
                file_size=result.get("file_size"),
                sha256=result.get("sha256"),
                status_code=response.status,
                api_response=result,
                tenant_id=self._tenant_id,
            )

        except Exception as e:
            self.logger.exception(f"Error getting info for media ID {media_id}: {e}")
            return self._from_exception(MediaInfoResult, e, media_id=media_id)

    async def download_media(
        self,
        media_id: str,
        destination_path: str | Path | None = None,
    ) -> MediaDownloadResult:
        """
        Download media bytes by id: GET /MEDIA_ID, then GET the returned URL.

        Args:
            media_id: Platform media identifier
            destination_path: Optional directory or file path to write the bytes to
        """
        info = await self.get_media_info(media_id)
        if not info.success:
            return MediaDownloadResult(
                success=False,
                media_id=media_id,
                error=f"Failed to get media URL for ID {media_id}: {info.error}",
                error_code=info.error_code,
                error_kind=info.error_kind,
                status_code=info.status_code,
                api_response=info.api_response,
                tenant_id=self._tenant_id,
            )
        if not info.url:
            return self._failure(
                MediaDownloadResult,
                f"No download URL for media ID {media_id}",
                "NO_MEDIA_URL",
                ErrorKind.PLATFORM,
                media_id=media_id,
                api_response=info.api_response,
            )

        try:
            response = await self.client.get_bytes(info.url)
            if not response.ok:
                return self._from_rejection(
                    MediaDownloadResult, response, media_id=media_id
                )

            mime_type = info.mime_type or response.content_type
            result = MediaDownloadResult(
                success=True,
                media_id=media_id,
                file_data=response.content,
                mime_type=mime_type,
                file_size=len(response.content or b""),
                sha256=info.sha256,
                status_code=response.status,
                tenant_id=self._tenant_id,
            )

            if destination_path is not None:
                path = Path(destination_path)
                if path.is_dir():
                    extension = mimetypes.guess_extension(mime_type or "") or ""
                    path = path / f"{media_id}{extension}"
                result.save(path)
                self.logger.info(f"Media {media_id} saved to {path}")

            return result

        except Exception as e:
            self.logger.exception(f"Error downloading media ID {media_id}: {e}")
            return self._from_exception(MediaDownloadResult, e, media_id=media_id)

    async def delete_media(self, media_id: str) -> MediaDeleteResult:
        """
        Delete media from WhatsApp servers.

        Implements DELETE /MEDIA_ID.
        """
        try:
            self.logger.debug(f"Attempting to delete media ID: {media_id}")
            response = await self.client.delete_request(
                url=self.client.url_builder.get_media_url(media_id)
            )
            if not response.ok or not response.data.get("success"):
                return self._from_rejection(MediaDeleteResult, response, media_id=media_id)

            self.logger.info(f"Successfully deleted media ID: {media_id}")
            return MediaDeleteResult(
                success=True,
                media_id=media_id,
                status_code=response.status,
                api_response=response.data,
                tenant_id=self._tenant_id,
            )

        except Exception as e:
            self.logger.exception(f"Error deleting media ID {media_id}: {e}")
            return self._from_exception(MediaDeleteResult, e, media_id=media_id)
