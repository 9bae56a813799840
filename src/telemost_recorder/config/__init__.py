"""
Configuration module - Centralized settings management.

This module provides type-safe configuration management using Pydantic,
supporting environment variables, YAML files, and explicit overrides.

Usage:
    from telemost_recorder.config import get_settings, load_config

    # Get global settings (loaded once)
    settings = get_settings()

    # Or load fresh settings with overrides
    settings = load_config(browser={"headless": False})

Environment Variables:
    TELEMOST_RECORDER__BROWSER__HEADLESS=false
    TELEMOST_RECORDER__PAGE__WAIT_TIMEOUT_MS=45000
    TELEMOST_RECORDER__RECORDING__OUTPUT_DIR=/data/recordings
"""

from telemost_recorder.config.settings import (
    Settings,
    BrowserSettings,
    PageSettings,
    RecordingSettings,
    JoinSettings,
    LoggingSettings,
    ServerSettings,
    DEFAULT_JOIN_LOCATORS,
)
from telemost_recorder.config.loader import ConfigLoader, load_config

# Global settings singleton
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the global settings instance (singleton).

    Settings are loaded once from environment variables and config files.
    Call reset_settings() to reload.

    Returns:
        Global Settings instance
    """
    global _settings
    if _settings is None:
        _settings = load_config()
    return _settings


def reset_settings() -> None:
    """Reset the global settings (forces reload on next get_settings())."""
    global _settings
    _settings = None


__all__ = [
    "Settings",
    "BrowserSettings",
    "PageSettings",
    "RecordingSettings",
    "JoinSettings",
    "LoggingSettings",
    "ServerSettings",
    "DEFAULT_JOIN_LOCATORS",
    "ConfigLoader",
    "load_config",
    "get_settings",
    "reset_settings",
]
