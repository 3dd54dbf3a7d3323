"""Runtime services: settings persistence and logging configuration."""

from .settings import Settings, SettingsStore, configure_logging

__all__ = ["Settings", "SettingsStore", "configure_logging"]
