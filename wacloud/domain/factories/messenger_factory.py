"""
Messenger factory.

Wires WhatsAppClient, the handlers and WhatsAppMessenger for a given
configuration, sharing one aiohttp session across every messenger it builds.
"""

from typing import TYPE_CHECKING

from wacloud.core.config.settings import WhatsAppConfig
from wacloud.core.logging.logger import get_logger
from wacloud.messaging.whatsapp.client.whatsapp_client import WhatsAppClient
from wacloud.messaging.whatsapp.handlers.whatsapp_media_handler import (
    WhatsAppMediaHandler,
)
from wacloud.messaging.whatsapp.handlers.whatsapp_template_handler import (
    WhatsAppTemplateHandler,
)
from wacloud.messaging.whatsapp.messenger.whatsapp_messenger import WhatsAppMessenger

if TYPE_CHECKING:
    import aiohttp


class MessengerFactory:
    """
    Factory for WhatsApp messengers.

    Messengers are cached per phone_number_id; a config with different
    credentials for the same number needs force_recreate=True.
    """

    def __init__(self, http_session: "aiohttp.ClientSession"):
        """
        Initialize the messenger factory.

        Args:
            http_session: Shared HTTP session for efficient connection pooling
        """
        self._http_session = http_session
        self.logger = get_logger(__name__)
        self._messenger_cache: dict[str, WhatsAppMessenger] = {}

    async def create_messenger(
        self, config: WhatsAppConfig, force_recreate: bool = False
    ) -> WhatsAppMessenger:
        """
        Create (or reuse) a configured messenger.

        Args:
            config: Immutable client configuration
            force_recreate: Force creation of new instance even if cached
        """
        cache_key = config.phone_number_id

        if not force_recreate and cache_key in self._messenger_cache:
            self.logger.debug(f"Using cached messenger for {cache_key}")
            return self._messenger_cache[cache_key]

        self.logger.debug(f"Creating new messenger for phone_id: {cache_key}")

        client = WhatsAppClient(session=self._http_session, config=config)
        media_handler = WhatsAppMediaHandler(client=client, tenant_id=cache_key)
        template_handler = WhatsAppTemplateHandler(client=client, tenant_id=cache_key)

        messenger = WhatsAppMessenger(
            client=client,
            media_handler=media_handler,
            template_handler=template_handler,
            tenant_id=cache_key,
        )
        self._messenger_cache[cache_key] = messenger

        self.logger.info(f"WhatsApp messenger created for phone_id: {cache_key}")
        return messenger

    def clear_cache(self, phone_number_id: str | None = None) -> None:
        """Clear one cached messenger, or all of them."""
        if phone_number_id is None:
            self._messenger_cache.clear()
        else:
            self._messenger_cache.pop(phone_number_id, None)
