"""Logging configuration module."""

from __future__ import annotations

import logging

from outfitter.config.settings import Settings, get_settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

_CHATTY_LOGGERS = ("httpx", "openai", "aiosqlite")


def configure_logging(settings: Settings | None = None) -> None:
    """Configure the root logger for the service.

    HTTP and database client libraries are capped at WARNING unless the
    service itself runs at DEBUG.
    """

    settings = settings or get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)

    client_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(client_level)
