"""Configuration loading for design_drift."""

from design_drift.config.settings import FigmaSettings, get_settings

__all__ = [
    "FigmaSettings",
    "get_settings",
]
