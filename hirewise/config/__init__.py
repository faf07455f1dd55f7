"""Configuration."""

from .settings import AISettings, MatchingSettings, Settings, StorageSettings, get_settings

__all__ = ["AISettings", "MatchingSettings", "Settings", "StorageSettings", "get_settings"]
