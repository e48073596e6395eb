"""Configuration module using Pydantic Settings.

Provides typed reflection settings with environment variable support.

Usage:
    from typemirror.config import ReflectionSettings, configure

    settings = ReflectionSettings(strict_access=False)
    configure(include_special_members=True)
"""

from typemirror.config.settings import (
    ReflectionSettings,
    configure,
    get_settings,
    reset_settings,
)

__all__ = [
    "ReflectionSettings",
    "get_settings",
    "configure",
    "reset_settings",
]
