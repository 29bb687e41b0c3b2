"""
Logging for wacloud.

Console output goes through rich; DEV mode also writes a daily file under
LOG_DIR. Messages are prefixed with the phone number id the client acts for
([T:...]) and, when known, the recipient ([U:...]).
"""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

from wacloud.core.config.settings import settings
from wacloud.core.logging.context import (
    get_current_tenant_context,
    get_current_user_context,
)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

CONSOLE_FORMAT = "[%(name)s] %(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"

_console = Console(
    theme=Theme(
        {
            "logging.level.debug": "dim",
            "logging.level.info": "cyan",
            "logging.level.warning": "yellow",
            "logging.level.error": "bold red",
        }
    )
)


class CompactFormatter(logging.Formatter):
    """Shows wacloud loggers by their last two name parts, e.g. handlers.whatsapp_media_handler."""

    def format(self, record):
        if record.name.startswith("wacloud."):
            record.name = ".".join(record.name.split(".")[-2:])
        return super().format(record)


class ContextLogger(logging.LoggerAdapter):
    """
    Logger adapter that prefixes messages with tenant and user context.

    Values set with set_request_context() win over the ones bound here, so a
    logger created at import time still reports the tenant of the running task.
    """

    def __init__(
        self,
        logger: logging.Logger,
        tenant_id: str | None = None,
        user_id: str | None = None,
    ):
        super().__init__(logger, {"tenant_id": tenant_id, "user_id": user_id})

    def prefix(self) -> str:
        tenant = get_current_tenant_context() or self.extra.get("tenant_id")
        user = get_current_user_context() or self.extra.get("user_id")

        prefix = f"[T:{tenant}]" if tenant else ""
        if user:
            prefix += f"[U:{user}]"
        return prefix

    def process(self, msg, kwargs):
        prefix = self.prefix()
        return (f"{prefix} {msg}" if prefix else msg), kwargs

    def bind(self, **context: str | None) -> ContextLogger:
        """Return a logger with tenant_id and/or user_id replaced.

        Example:
            logger = get_logger(__name__).bind(tenant_id=config.phone_number_id)
        """
        merged = {**self.extra, **context}
        return ContextLogger(
            self.logger,
            tenant_id=merged.get("tenant_id"),
            user_id=merged.get("user_id"),
        )


def _console_handler() -> logging.Handler:
    # RichHandler renders time and level itself
    handler = RichHandler(
        console=_console,
        show_time=True,
        show_level=True,
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    handler.setFormatter(CompactFormatter(CONSOLE_FORMAT))
    return handler


def _file_handler(log_dir: str) -> logging.Handler:
    directory = Path(log_dir)
    directory.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(
        directory / f"wacloud_{date.today():%Y%m%d}.log", encoding="utf-8"
    )
    handler.setFormatter(CompactFormatter(FILE_FORMAT))
    return handler


def setup_logging(
    *,
    level: str = "INFO",
    mode: str = "PROD",
    log_dir: str | None = None,
) -> None:
    """
    Configure the root logger.

    Args:
        level: One of DEBUG, INFO, WARNING, ERROR; anything else means INFO
        mode: "DEV" adds a daily log file in log_dir, any other mode is console only
        log_dir: Directory for the DEV log file
    """
    level = level.upper()
    if level not in LOG_LEVELS:
        level = "INFO"

    handlers = [_console_handler()]
    if mode.upper() == "DEV" and log_dir:
        handlers.append(_file_handler(log_dir))

    logging.basicConfig(level=level, handlers=handlers, force=True)
    logging.getLogger("wacloud.setup").debug(f"Logging configured: {level}, {mode}")


def setup_app_logging() -> None:
    """Configure logging from LOG_LEVEL, LOG_DIR and ENVIRONMENT."""
    setup_logging(
        level=settings.log_level,
        mode=settings.environment,
        log_dir=settings.log_dir,
    )


def get_logger(name: str) -> ContextLogger:
    """Get a context-aware logger, usually get_logger(__name__)."""
    return ContextLogger(
        logging.getLogger(name),
        tenant_id=get_current_tenant_context(),
        user_id=get_current_user_context(),
    )
