"""Configuration package for runtime settings and startup validation."""

from .settings import OperatorSettings, SettingsLoadError, config_load_settings

__all__ = ["OperatorSettings", "SettingsLoadError", "config_load_settings"]
