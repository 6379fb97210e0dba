"""
Second Chance Dice Configuration.

Environment variables, settings, and logging configuration.
"""

from dicegame.config.log_setup import configure_logging
from dicegame.config.settings import Settings, get_settings

__all__ = ["Settings", "configure_logging", "get_settings"]
