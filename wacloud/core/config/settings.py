"""
Settings for the wacloud WhatsApp Cloud API client.

Two layers live here:
- Settings: environment variable configuration (loaded from .env for local work)
- WhatsAppConfig: the immutable per-client configuration every request is derived from
"""

import os
import tomllib
from importlib import metadata
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

# .env in the current working directory, for local development
load_dotenv(".env")

DEFAULT_API_VERSION = "v19.0"
DEFAULT_BASE_URL = "https://graph.facebook.com"


def _package_version() -> str:
    """Version from the project's pyproject.toml in a source checkout, else from installed metadata."""
    for parent in Path(__file__).resolve().parents:
        pyproject = parent / "pyproject.toml"
        if not pyproject.is_file():
            continue
        try:
            project = tomllib.loads(pyproject.read_text(encoding="utf-8")).get(
                "project", {}
            )
        except (OSError, tomllib.TOMLDecodeError):
            continue
        if project.get("name") == "wacloud" and project.get("version"):
            return project["version"]

    try:
        return metadata.version("wacloud")
    except metadata.PackageNotFoundError:
        return "0.0.0"


class Settings:
    """Environment configuration.

    WhatsApp credentials are optional here and only checked by
    validate_whatsapp_credentials(), so importing the package never fails
    on a bare environment.
    """

    LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
    ENVIRONMENTS = ("DEV", "PROD")

    def __init__(self):
        self.version: str = _package_version()

        # Logging
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
        self.log_dir: str = os.getenv("LOG_DIR", "./logs")
        self.environment: str = os.getenv("ENVIRONMENT", "DEV").upper()

        # Graph API
        self.api_version: str = os.getenv("API_VERSION", DEFAULT_API_VERSION)
        self.base_url: str = os.getenv("BASE_URL", DEFAULT_BASE_URL)

        # Credentials and account identifiers
        self.wp_access_token: str | None = os.getenv("WP_ACCESS_TOKEN")
        self.wp_phone_id: str | None = os.getenv("WP_PHONE_ID")
        self.wp_bid: str | None = os.getenv("WP_BID")
        self.wp_app_id: str | None = os.getenv("WP_APP_ID")
        self.whatsapp_webhook_verify_token: str | None = os.getenv(
            "WHATSAPP_WEBHOOK_VERIFY_TOKEN"
        )

        if self.log_level not in self.LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(self.LOG_LEVELS)}")
        if self.environment not in self.ENVIRONMENTS:
            self.environment = "DEV"

    def validate_whatsapp_credentials(self) -> None:
        """Raise ValueError naming every missing required credential."""
        missing = [
            name
            for name, value in (
                ("WP_ACCESS_TOKEN", self.wp_access_token),
                ("WP_PHONE_ID", self.wp_phone_id),
            )
            if not value
        ]
        if missing:
            raise ValueError(f"Missing WhatsApp credentials: {', '.join(missing)}")


class WhatsAppConfig(BaseModel):
    """Immutable client configuration.

    Created once per client. Every URL and credential header is derived from
    it, and it is safe to share across concurrent calls.
    """

    model_config = ConfigDict(frozen=True)

    phone_number_id: str = Field(..., min_length=1)
    access_token: str = Field(..., min_length=1)
    api_version: str = DEFAULT_API_VERSION
    business_account_id: str = ""
    app_id: str = ""
    webhook_verify_token: str = ""
    base_url: str = DEFAULT_BASE_URL

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @classmethod
    def from_settings(cls, source: Settings | None = None) -> "WhatsAppConfig":
        """Build a client configuration from environment settings.

        Raises:
            ValueError: If the access token or phone number id is missing
        """
        source = source or settings
        source.validate_whatsapp_credentials()
        return cls(
            phone_number_id=source.wp_phone_id,
            access_token=source.wp_access_token,
            api_version=source.api_version,
            business_account_id=source.wp_bid or "",
            app_id=source.wp_app_id or "",
            webhook_verify_token=source.whatsapp_webhook_verify_token or "",
            base_url=source.base_url,
        )


# Global settings instance
settings = Settings()
