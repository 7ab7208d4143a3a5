"""Configuration module."""

from stockledger.config.logging import configure_logging, document_context, get_logger
from stockledger.config.settings import (
    APISettings,
    InventorySettings,
    Settings,
    StorageSettings,
    get_settings,
    reset_settings,
)

__all__ = [
    "Settings",
    "InventorySettings",
    "StorageSettings",
    "APISettings",
    "get_settings",
    "reset_settings",
    "configure_logging",
    "document_context",
    "get_logger",
]
