"""Configuration settings using Pydantic Settings.

Provides typed configuration with environment variable support for the
describer, the registry and the accessor layer.

Usage:
    from typemirror.config import ReflectionSettings, get_settings

    # Load from environment variables (TYPEMIRROR_*)
    settings = get_settings()

    # Or override with explicit values
    settings = ReflectionSettings(strict_access=False)
"""

from __future__ import annotations

import logging

try:
    from pydantic_settings import BaseSettings, SettingsConfigDict
except ImportError as e:
    raise ImportError(
        "pydantic-settings is required for config module. "
        "Install with: pip install typemirror"
    ) from e

logger = logging.getLogger(__name__)


class ReflectionSettings(BaseSettings):  # type: ignore[misc]
    """Configuration for reflection.

    Attributes:
        auto_register: Describe and register unknown types on first lookup
            instead of raising TypeNotRegisteredError.
        include_special_members: Report ``__dunder__`` members.
        resolve_annotations: Resolve string annotations with
            ``typing.get_type_hints``; keep raw strings when False.
        strict_access: Refuse access to private members unless the accessor
            was made accessible.
        enforce_protected: Treat ``_protected`` members like private ones.
        check_types: Check written field values and invocation arguments
            against declared types.

    Environment Variables:
        TYPEMIRROR_AUTO_REGISTER
        TYPEMIRROR_INCLUDE_SPECIAL_MEMBERS
        TYPEMIRROR_RESOLVE_ANNOTATIONS
        TYPEMIRROR_STRICT_ACCESS
        TYPEMIRROR_ENFORCE_PROTECTED
        TYPEMIRROR_CHECK_TYPES
    """

    model_config = SettingsConfigDict(
        env_prefix="TYPEMIRROR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    auto_register: bool = True
    include_special_members: bool = False
    resolve_annotations: bool = True
    strict_access: bool = True
    enforce_protected: bool = False
    check_types: bool = True


_settings: ReflectionSettings | None = None


def get_settings() -> ReflectionSettings:
    """Access the process-wide reflection settings, loading them on first use.

    Returns:
        The shared ReflectionSettings instance.
    """
    global _settings
    if _settings is None:
        _settings = ReflectionSettings()
        logger.debug("Loaded reflection settings: %s", _settings.model_dump())
    return _settings


def configure(**overrides: bool) -> ReflectionSettings:
    """Replace the process-wide settings, applying explicit overrides.

    Args:
        **overrides: Setting values taking precedence over the environment.

    Returns:
        The new shared ReflectionSettings instance.
    """
    global _settings
    _settings = ReflectionSettings(**overrides)
    return _settings


def reset_settings() -> None:
    """Drop the process-wide settings so the next access reloads them."""
    global _settings
    _settings = None
