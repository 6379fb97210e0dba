"""Logging configuration driven by the application settings."""

import logging

from dicegame.config.settings import Settings, get_settings

_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(settings: Settings | None = None) -> None:
    """Apply the configured log level to the root logger."""
    if settings is None:
        settings = get_settings()
    level = logging.DEBUG if settings.debug else getattr(
        logging, settings.log_level.upper(), logging.INFO
    )
    logging.basicConfig(level=level, format=_FORMAT)
    logging.getLogger("dicegame").setLevel(level)
