"""Configuration management for LexiconHub.

This module provides centralized configuration loaded from environment variables
with validation using Pydantic BaseSettings.

Usage:
    >>> from lexicon_hub.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.database_path)
"""

from lexicon_hub.config.settings import (
    ProviderCredentials,
    Settings,
    SettingsHolder,
    get_settings,
)

__all__ = [
    "ProviderCredentials",
    "Settings",
    "SettingsHolder",
    "get_settings",
]
