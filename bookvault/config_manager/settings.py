"""Typed settings sourced from the environment."""

from __future__ import annotations

import re
from functools import lru_cache
from typing import List, Optional

from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    DEFAULT_DATABASE_URL,
    DEFAULT_GOOGLE_BOOKS_TIMEOUT_SECONDS,
    GOOGLE_BOOKS_API_KEY_PLACEHOLDER,
)


class BookVaultSettings(BaseSettings):
    """Runtime configuration for the web service."""

    model_config = SettingsConfigDict(env_prefix="", extra="ignore", populate_by_name=True)

    database_url: str = Field(
        default=DEFAULT_DATABASE_URL,
        validation_alias=AliasChoices("DATABASE_URL", "BOOKVAULT_DATABASE_URL"),
    )
    dev_auth_email: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("DEV_AUTH_EMAIL", "BOOKVAULT_DEV_AUTH_EMAIL"),
    )
    google_books_api_key: SecretStr = Field(
        default=SecretStr(GOOGLE_BOOKS_API_KEY_PLACEHOLDER),
        validation_alias=AliasChoices("GOOGLE_BOOKS_API_KEY"),
    )
    google_books_timeout_seconds: float = Field(
        default=DEFAULT_GOOGLE_BOOKS_TIMEOUT_SECONDS,
        gt=0,
        validation_alias=AliasChoices("GOOGLE_BOOKS_TIMEOUT_SECONDS"),
    )
    cors_origins: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("BOOKVAULT_CORS_ORIGINS")
    )
    log_level: str = Field(default="INFO", validation_alias=AliasChoices("BOOKVAULT_LOG_LEVEL"))

    @field_validator("dev_auth_email")
    @classmethod
    def _blank_email_disables_override(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None

    def cors_origin_list(self) -> List[str]:
        if not self.cors_origins:
            return []
        return [token for token in re.split(r"[\s,]+", self.cors_origins) if token]


def is_placeholder_api_key(api_key: Optional[str]) -> bool:
    """Return True when ``api_key`` should not be sent upstream."""

    if api_key is None:
        return True
    candidate = api_key.strip()
    return not candidate or candidate == GOOGLE_BOOKS_API_KEY_PLACEHOLDER


@lru_cache
def get_settings() -> BookVaultSettings:
    """Return the process-wide settings instance."""

    return BookVaultSettings()


def reset_settings() -> None:
    """Forget cached settings so the next call re-reads the environment."""

    get_settings.cache_clear()
