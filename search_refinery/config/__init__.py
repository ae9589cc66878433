"""Configuration management module."""

from .settings import AppSettings, get_settings

__all__ = [
    "AppSettings",
    "get_settings",
]
