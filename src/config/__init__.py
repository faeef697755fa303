"""Configuration module."""

from src.config.logging import configure_logging, get_logger
from src.config.settings import (
    APISettings,
    Settings,
    StockSettings,
    StorageSettings,
    get_settings,
    reset_settings,
)

__all__ = [
    "Settings",
    "StorageSettings",
    "StockSettings",
    "APISettings",
    "get_settings",
    "reset_settings",
    "configure_logging",
    "get_logger",
]
