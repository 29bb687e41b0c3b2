"""
WhatsApp Cloud API HTTP client.

Key Design Decisions:
- The aiohttp session is injected; the caller owns its lifecycle
- URLs are assembled from path segments, never by string replacement
- HTTP error statuses are returned as parsed bodies, not raised; only
  network faults and unreadable responses raise WhatsAppTransportError
"""

import asyncio
from dataclasses import dataclass, field
from json import JSONDecodeError
from typing import Any
from urllib.parse import urlencode

import aiohttp

from wacloud.core.config.settings import WhatsAppConfig
from wacloud.core.logging.logger import get_logger


class WhatsAppTransportError(Exception):
    """The request never produced a usable response (network, timeout, bad body)."""

    def __init__(self, message: str, url: str | None = None):
        super().__init__(message)
        self.url = url


@dataclass(frozen=True)
class WhatsAppResponse:
    """A Graph API response: HTTP status plus the parsed JSON body."""

    status: int
    data: dict[str, Any] = field(default_factory=dict)
    content: bytes | None = None
    content_type: str | None = None

    @property
    def ok(self) -> bool:
        return self.status < 400 and "error" not in self.data


class WhatsAppUrlBuilder:
    """Builds URLs for Graph API resources.

    Every URL has the shape {base_url}/{api_version}/{resource_id}[/{sub_resource}][?query];
    only the resource segment changes between phone number, media, template,
    account, app and upload session calls.
    """

    def __init__(self, base_url: str, api_version: str, phone_number_id: str):
        """Initialize URL builder with configuration.

        Args:
            base_url: Facebook Graph API base URL
            api_version: Graph API version, e.g. "v19.0"
            phone_number_id: WhatsApp Business phone number ID
        """
        self.base_url = base_url.rstrip("/")
        self.api_version = api_version.strip("/")
        self.phone_number_id = phone_number_id

    def get_resource_url(
        self,
        resource_id: str,
        sub_resource: str | None = None,
        params: dict[str, Any] | None = None,
    ) -> str:
        """Build the URL for a resource id and optional sub-resource.

        Segments are inserted as given (upload session ids carry their own
        "?sig=..." suffix and must not be re-encoded).
        """
        segments = [self.api_version, resource_id.strip("/")]
        if sub_resource:
            segments.append(sub_resource.strip("/"))
        url = f"{self.base_url}/{'/'.join(segments)}"

        if params:
            separator = "&" if "?" in url else "?"
            url = f"{url}{separator}{urlencode(params)}"
        return url

    def get_messages_url(self) -> str:
        """Build URL for sending messages."""
        return self.get_resource_url(self.phone_number_id, "messages")

    def get_media_url(self, media_id: str | None = None) -> str:
        """Build URL for media operations.

        Args:
            media_id: Optional media ID for specific media operations
        """
        if media_id:
            return self.get_resource_url(media_id)
        return self.get_resource_url(self.phone_number_id, "media")

    def get_uploads_url(self, app_id: str, params: dict[str, Any] | None = None) -> str:
        """Build URL for opening a resumable upload session."""
        return self.get_resource_url(app_id, "uploads", params=params)

    def get_upload_session_url(self, session_id: str) -> str:
        """Build URL for transferring bytes into an open upload session."""
        return self.get_resource_url(session_id)

    def get_templates_url(
        self, business_account_id: str, params: dict[str, Any] | None = None
    ) -> str:
        """Build URL for the account's message templates collection."""
        return self.get_resource_url(
            business_account_id, "message_templates", params=params
        )

    def get_template_url(self, template_id: str) -> str:
        """Build URL for a single message template."""
        return self.get_resource_url(template_id)

    def get_endpoint_url(self, endpoint: str) -> str:
        """Build URL for any custom endpoint path."""
        return f"{self.base_url}/{self.api_version}/{endpoint.lstrip('/')}"


class WhatsAppFormDataBuilder:
    """Multipart bodies for the media endpoint."""

    @staticmethod
    def build_form_data(
        payload: dict[str, Any] | None, files: dict[str, Any]
    ) -> aiohttp.FormData:
        """Plain fields first, then files.

        Args:
            payload: Form fields; values are sent as strings
            files: {field_name: (filename, bytes or binary file object, content_type)}

        Raises:
            ValueError: If a file entry is not a 3-tuple
        """
        form = aiohttp.FormData()
        for key, value in (payload or {}).items():
            form.add_field(key, str(value))

        for field_name, file_info in files.items():
            if not (isinstance(file_info, tuple) and len(file_info) == 3):
                raise ValueError(
                    f"File field '{field_name}' must be (filename, content, content_type)"
                )
            filename, content, content_type = file_info
            if hasattr(content, "read"):
                content = content.read()
            form.add_field(
                field_name, content, filename=filename, content_type=content_type
            )

        return form


class WhatsAppClient:
    """
    WhatsApp Cloud API transport with dependency injection.

    Executes requests against resolved URLs and returns WhatsAppResponse
    objects. Platform rejections (HTTP 4xx/5xx with an error body) come back
    as responses for the caller to inspect.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        config: WhatsAppConfig,
        logger: Any | None = None,
    ):
        """Initialize WhatsApp client.

        Args:
            session: aiohttp session owned by the caller
            config: Immutable client configuration
            logger: Pre-configured logger instance
        """
        self.session = session
        self.config = config
        self.logger = logger or get_logger(__name__)

        self.url_builder = WhatsAppUrlBuilder(
            config.base_url, config.api_version, config.phone_number_id
        )
        self.form_builder = WhatsAppFormDataBuilder()

        self.logger.debug(
            f"WhatsApp client initialized for phone_id: {self.phone_number_id}, "
            f"api_version: {self.api_version}"
        )

    @property
    def phone_number_id(self) -> str:
        return self.config.phone_number_id

    @property
    def access_token(self) -> str:
        return self.config.access_token

    @property
    def api_version(self) -> str:
        return self.config.api_version

    @property
    def tenant_id(self) -> str:
        """The phone_number_id doubles as the tenant identifier in logs."""
        return self.config.phone_number_id

    def _get_headers(self, include_content_type: bool = True) -> dict[str, str]:
        """Get HTTP headers for WhatsApp API requests."""
        headers = {"Authorization": f"Bearer {self.access_token}"}
        if include_content_type:
            headers["Content-Type"] = "application/json"
        return headers

    async def _parse_response(
        self, response: aiohttp.ClientResponse, url: str
    ) -> WhatsAppResponse:
        try:
            data = await response.json(content_type=None)
        except (JSONDecodeError, ValueError) as e:
            raise WhatsAppTransportError(
                f"Unreadable response from {url} (HTTP {response.status}): {e}",
                url=url,
            ) from e

        if data is None:
            data = {}
        elif not isinstance(data, dict):
            data = {"data": data}

        if response.status == 401:
            self.logger.error(
                f"CRITICAL: WhatsApp access token expired or invalid for {self.tenant_id} "
                f"(401 Unauthorized at {url})"
            )
        elif response.status >= 400:
            self.logger.error(f"HTTP {response.status} from {url}: {data}")
        else:
            self.logger.debug(f"Response: {data}")

        return WhatsAppResponse(status=response.status, data=data)

    async def post_request(
        self,
        payload: dict[str, Any] | None = None,
        custom_url: str | None = None,
        files: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        data: bytes | None = None,
    ) -> WhatsAppResponse:
        """Send POST request to WhatsApp API.

        Args:
            payload: JSON payload, or form fields when files are given
            custom_url: Optional custom URL (defaults to messages endpoint)
            files: Optional files for multipart upload
            params: Optional query parameters
            headers: Extra headers; they override the defaults
            data: Raw request body (sent as-is instead of JSON)

        Raises:
            WhatsAppTransportError: For network failures and unreadable responses
        """
        url = custom_url or self.url_builder.get_messages_url()

        try:
            if files:
                # aiohttp sets the multipart Content-Type
                request_headers = self._get_headers(include_content_type=False)
                body = self.form_builder.build_form_data(payload or {}, files)
                self.logger.debug(f"Sending multipart request to {url}")
                self.logger.debug(f"Files: {list(files.keys())}")
                request_kwargs = {"data": body}
            elif data is not None:
                request_headers = self._get_headers(include_content_type=False)
                self.logger.debug(f"Sending {len(data)} raw bytes to {url}")
                request_kwargs = {"data": data}
            else:
                request_headers = self._get_headers()
                self.logger.debug(f"Sending JSON request to {url}")
                self.logger.debug(f"Payload: {payload}")
                request_kwargs = {"json": payload}

            if headers:
                request_headers.update(headers)

            async with self.session.post(
                url, headers=request_headers, params=params, **request_kwargs
            ) as response:
                return await self._parse_response(response, url)

        except (aiohttp.ClientError, asyncio.TimeoutError) as err:
            self.logger.error(f"Transport error on POST {url}: {err!r}")
            raise WhatsAppTransportError(str(err) or repr(err), url=url) from err

    async def get_request(
        self,
        endpoint: str | None = None,
        params: dict[str, Any] | None = None,
        url: str | None = None,
    ) -> WhatsAppResponse:
        """Send GET request to WhatsApp API.

        Args:
            endpoint: API endpoint path (without base URL)
            params: Optional query parameters
            url: Full URL, used instead of endpoint when given

        Raises:
            WhatsAppTransportError: For network failures and unreadable responses
        """
        url = url or self.url_builder.get_endpoint_url(endpoint or "")

        try:
            async with self.session.get(
                url, headers=self._get_headers(), params=params
            ) as response:
                self.logger.debug(f"GET {url} with params: {params}")
                return await self._parse_response(response, url)

        except (aiohttp.ClientError, asyncio.TimeoutError) as err:
            self.logger.error(f"Transport error on GET {url}: {err!r}")
            raise WhatsAppTransportError(str(err) or repr(err), url=url) from err

    async def delete_request(
        self,
        endpoint: str | None = None,
        params: dict[str, Any] | None = None,
        url: str | None = None,
    ) -> WhatsAppResponse:
        """Send DELETE request to WhatsApp API.

        Raises:
            WhatsAppTransportError: For network failures and unreadable responses
        """
        url = url or self.url_builder.get_endpoint_url(endpoint or "")

        try:
            async with self.session.delete(
                url, headers=self._get_headers(), params=params
            ) as response:
                self.logger.debug(f"DELETE {url} with params: {params}")
                return await self._parse_response(response, url)

        except (aiohttp.ClientError, asyncio.TimeoutError) as err:
            self.logger.error(f"Transport error on DELETE {url}: {err!r}")
            raise WhatsAppTransportError(str(err) or repr(err), url=url) from err

    async def get_bytes(self, url: str) -> WhatsAppResponse:
        """Fetch raw bytes (e.g. a media download URL) with bearer auth.

        Error statuses still come back as a response; the body is parsed as
        JSON when possible so platform error details are kept.
        """

        try:
            async with self.session.get(
                url, headers=self._get_headers(include_content_type=False)
            ) as response:
                content = await response.read()
                content_type = response.headers.get("content-type")
                self.logger.debug(
                    f"Binary GET {url}: HTTP {response.status}, {len(content)} bytes"
                )
                if response.status >= 400:
                    self.logger.error(f"HTTP {response.status} downloading {url}")
                    return WhatsAppResponse(
                        status=response.status,
                        data={"error": {"message": content.decode(errors="replace")}},
                        content=content,
                        content_type=content_type,
                    )
                return WhatsAppResponse(
                    status=response.status,
                    content=content,
                    content_type=content_type,
                )

        except (aiohttp.ClientError, asyncio.TimeoutError) as err:
            self.logger.error(f"Transport error downloading {url}: {err!r}")
            raise WhatsAppTransportError(str(err) or repr(err), url=url) from err
