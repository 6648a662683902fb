"""Application configuration helpers."""

from __future__ import annotations

from functools import lru_cache
import os
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_SHEET_NAME = "Sheet1"
DEFAULT_CORS_ORIGINS = ("http://localhost:3000", "http://127.0.0.1:3000")


class AppConfig(BaseModel):
    """Runtime configuration loaded from environment variables."""

    model_config = ConfigDict(frozen=True)

    google_sheet_id: Optional[str] = Field(
        default=None, description="Spreadsheet ID of the profile sheet"
    )
    google_client_email: Optional[str] = Field(
        default=None, description="Service account email with access to the sheet"
    )
    google_private_key: Optional[str] = Field(
        default=None, description="PEM private key of the service account"
    )
    sheet_name: str = Field(
        default=DEFAULT_SHEET_NAME, description="Tab holding the profile rows"
    )
    profile_cache_seconds: float = Field(
        default=60.0, ge=0, description="How long a successful profile read is reused"
    )
    sheets_timeout: float = Field(
        default=10.0, gt=0, description="Timeout in seconds for Sheets API calls"
    )
    cors_origins: tuple[str, ...] = Field(default=DEFAULT_CORS_ORIGINS)

    @field_validator("google_sheet_id", "google_client_email", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        cleaned = value.strip()
        return cleaned or None

    @field_validator("google_private_key", mode="before")
    @classmethod
    def _normalize_private_key(cls, value: Optional[str]) -> Optional[str]:
        # Keys pasted into .env files carry escaped newlines
        if value is None:
            return None
        cleaned = value.replace("\\n", "\n").strip()
        return cleaned or None

    @field_validator("sheet_name", mode="before")
    @classmethod
    def _default_sheet_name(cls, value: Optional[str]) -> str:
        if value is None or not value.strip():
            return DEFAULT_SHEET_NAME
        return value.strip()

    @property
    def sheets_configured(self) -> bool:
        """True when every credential needed to reach the sheet is present."""
        return bool(
            self.google_sheet_id and self.google_client_email and self.google_private_key
        )


def _read_env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(key, default)


def _parse_origins(raw: Optional[str]) -> tuple[str, ...]:
    if not raw:
        return DEFAULT_CORS_ORIGINS
    origins = tuple(part.strip() for part in raw.split(",") if part.strip())
    return origins or DEFAULT_CORS_ORIGINS


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Load and cache application configuration."""
    return AppConfig(
        google_sheet_id=_read_env("GOOGLE_SHEET_ID"),
        google_client_email=_read_env("GOOGLE_CLIENT_EMAIL"),
        google_private_key=_read_env("GOOGLE_PRIVATE_KEY"),
        sheet_name=_read_env("GOOGLE_SHEET_NAME"),
        profile_cache_seconds=_read_env("PROFILE_CACHE_SECONDS", "60"),
        sheets_timeout=_read_env("SHEETS_TIMEOUT", "10"),
        cors_origins=_parse_origins(_read_env("CORS_ORIGINS")),
    )


def reload_config() -> AppConfig:
    """Clear cached config (useful for tests) and reload."""
    get_config.cache_clear()
    return get_config()


__all__ = ["AppConfig", "get_config", "reload_config", "DEFAULT_SHEET_NAME"]
