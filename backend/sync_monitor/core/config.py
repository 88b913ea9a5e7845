# sync_monitor/core/config.py
"""
Central configuration for the Sync Monitor backend.

This module defines a single `settings` object (Pydantic BaseSettings) that reads
configuration from environment variables and a local `.env` file.

Guiding principles:
- DRY: config is declared once, imported everywhere.
- KISS: defaults match the production container layout (/home + /homelive).
- Security: the admin token lives in env vars; `.env` is never committed.
"""

from __future__ import annotations

from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables and optional `.env`.

    `.env` location:
      - uvicorn is run from `backend/`, so `.env` should live in `backend/.env`.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # deployment environments often add extra env vars
        case_sensitive=False,
    )

    # -----------------------
    # Runtime
    # -----------------------
    ENV: str = Field(default="dev", description="Environment: dev|test|prod")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level (e.g., INFO, DEBUG)")

    # -----------------------
    # API / CORS / auth
    # -----------------------
    CORS_ALLOW_ORIGINS: List[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://localhost:3000"],
        description="Allowed CORS origins for the dashboard frontend",
    )
    ADMIN_TOKEN: str | None = Field(
        default=None,
        description="Bearer token granting operator access (unset denies every protected call)",
    )

    # -----------------------
    # Filesystem layout
    # -----------------------
    LIVE_ROOT: str = Field(
        default="/homelive",
        description="Storage root used when sync is enabled (preferred for most logs)",
    )
    HOME_ROOT: str = Field(
        default="/home",
        description="Persistent storage root",
    )
    STATUS_FILE: str = Field(
        default="/home/syncstatus",
        description="Single-line status file written by the sync process",
    )

    # -----------------------
    # Caching
    # -----------------------
    CACHE_NAMESPACE: str = Field(default="sync_monitor", description="Cache namespace")
    CATALOG_TTL_SECONDS: int = Field(default=60, ge=0, description="Log catalog cache TTL")
    STATUS_TTL_SECONDS: int = Field(default=30, ge=0, description="Sync status cache TTL")

    # -----------------------
    # Size limits
    # -----------------------
    MAX_DISPLAY_MB: int = Field(
        default=50,
        ge=1,
        description="Largest log file (MB) admitted to the catalog for display",
    )
    MAX_DOWNLOAD_MB: int = Field(
        default=10,
        ge=1,
        description="Largest log file (MB) served by the download endpoint",
    )
    MAX_STATUS_BYTES: int = Field(
        default=4096,
        ge=1,
        description="Status files larger than this are reported as corrupt",
    )
    TAIL_DEFAULT_LINES: int = Field(
        default=500,
        ge=1,
        le=1000,
        description="Lines shown by the dashboard tail view",
    )

    @property
    def MAX_DISPLAY_BYTES(self) -> int:
        return int(self.MAX_DISPLAY_MB) * 1024 * 1024

    @property
    def MAX_DOWNLOAD_BYTES(self) -> int:
        return int(self.MAX_DOWNLOAD_MB) * 1024 * 1024

    # -----------------------
    # Validators / normalizers
    # -----------------------
    @field_validator("ENV")
    @classmethod
    def _normalize_env(cls, v: str) -> str:
        return (v or "dev").strip().lower()

    @field_validator("LOG_LEVEL")
    @classmethod
    def _normalize_log_level(cls, v: str) -> str:
        return (v or "INFO").strip().upper()

    @field_validator("CORS_ALLOW_ORIGINS")
    @classmethod
    def _clean_cors_origins(cls, v: List[str]) -> List[str]:
        cleaned = []
        for origin in v or []:
            o = (origin or "").strip()
            if o:
                cleaned.append(o)
        return cleaned

    @field_validator("ADMIN_TOKEN")
    @classmethod
    def _blank_token_is_unset(cls, v: str | None) -> str | None:
        v = (v or "").strip()
        return v or None

    @field_validator("LIVE_ROOT", "HOME_ROOT", "STATUS_FILE", "CACHE_NAMESPACE")
    @classmethod
    def _strip_strings(cls, v: str) -> str:
        return (v or "").strip()


# Singleton instance imported across the codebase.
settings = Settings()
