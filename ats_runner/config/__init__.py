"""Configuration package for runtime settings and startup validation."""

from .settings import AtsSettings, SettingsLoadError, config_load_settings

__all__ = ["AtsSettings", "SettingsLoadError", "config_load_settings"]
