"""Configuration for wacloud."""

from .settings import DEFAULT_API_VERSION, Settings, WhatsAppConfig, settings

__all__ = ["DEFAULT_API_VERSION", "Settings", "WhatsAppConfig", "settings"]
