"""
Webhook subscription handshake.

Meta verifies a callback URL with
GET ?hub.mode=subscribe&hub.verify_token=<secret>&hub.challenge=<nonce>
and expects the challenge echoed back verbatim.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from wacloud.core.config.settings import WhatsAppConfig
from wacloud.core.logging.logger import get_logger

SUBSCRIBE_MODE = "subscribe"

HUB_MODE = "hub.mode"
HUB_VERIFY_TOKEN = "hub.verify_token"
HUB_CHALLENGE = "hub.challenge"


@dataclass(frozen=True)
class WebhookVerificationResult:
    """Outcome of a handshake: HTTP status plus the body to send back.

    200 carries the challenge string, 400 carries nothing, 500 carries
    {"message": <fault text>}.
    """

    status_code: int
    body: str | dict[str, Any] | None = None

    @property
    def verified(self) -> bool:
        return self.status_code == 200


class WebhookVerifier:
    """Checks handshake requests against the configured verify token.

    Stateless: the result depends only on the request and the token. A
    request without hub.verify_token never passes.
    """

    def __init__(self, verify_token: str):
        self._verify_token = verify_token
        self.logger = get_logger(__name__)
        if not verify_token:
            self.logger.warning("Webhook verify token is not configured")

    @classmethod
    def from_config(cls, config: WhatsAppConfig) -> "WebhookVerifier":
        return cls(config.webhook_verify_token)

    def verify(
        self,
        mode: str | None,
        verify_token: str | None,
        challenge: str | None,
    ) -> WebhookVerificationResult:
        if (
            mode == SUBSCRIBE_MODE
            and verify_token is not None
            and verify_token == self._verify_token
        ):
            self.logger.info("Webhook verification successful")
            return WebhookVerificationResult(status_code=200, body=challenge or "")

        self.logger.warning(f"Webhook verification rejected (mode: {mode!r})")
        return WebhookVerificationResult(status_code=400)

    def handle(self, query_params: Mapping[str, Any]) -> WebhookVerificationResult:
        """Verify from raw query parameters; faults while reading them become a 500."""
        try:
            mode = query_params.get(HUB_MODE)
            verify_token = query_params.get(HUB_VERIFY_TOKEN)
            challenge = query_params.get(HUB_CHALLENGE)
            return self.verify(mode, verify_token, challenge)
        except Exception as e:
            self.logger.exception(f"Webhook verification failed: {e}")
            return WebhookVerificationResult(status_code=500, body={"message": str(e)})
