"""Configuration management for BookVault."""

from __future__ import annotations

from .constants import (
    DEFAULT_DATABASE_URL,
    DEFAULT_GOOGLE_BOOKS_TIMEOUT_SECONDS,
    GOOGLE_BOOKS_API_KEY_PLACEHOLDER,
)
from .settings import BookVaultSettings, get_settings, is_placeholder_api_key, reset_settings

__all__ = [
    "BookVaultSettings",
    "DEFAULT_DATABASE_URL",
    "DEFAULT_GOOGLE_BOOKS_TIMEOUT_SECONDS",
    "GOOGLE_BOOKS_API_KEY_PLACEHOLDER",
    "get_settings",
    "is_placeholder_api_key",
    "reset_settings",
]
