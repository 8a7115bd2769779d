#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Plugin configuration.

All values can be overridden via environment variables or a .env file.
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging.config
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from imagerating._version import __version__ as _pkg_version


# -----------------------------------------------------------------------------

class Settings(BaseSettings):

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Application ────────────────────────────────────────────────────────

    app_name: str = "ImageRating"
    app_version: str = _pkg_version
    base_url: str = ""
    site_name: str = "Wiki"
    debug: bool = False
    environment: Literal["development", "testing", "production"] = "development"
    log_level: str = "INFO"
    # Mirrors the host's read-only switch; every write path refuses while set.
    read_only: bool = False
    read_only_reason: str = "The database is locked for maintenance."

    # ── Database (shared with the host wiki) ───────────────────────────────

    database_url: str = "sqlite+aiosqlite:///./wiki.db"
    db_echo: bool = False
    db_pool_size: int = 5
    db_max_overflow: int = 10

    # ── Auth / JWT (tokens are issued by the host) ─────────────────────────

    secret_key: str = "CHANGE-ME-IN-PRODUCTION-use-a-random-64-char-hex-string"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 8
    csrf_token_expire_minutes: int = 60

    # Rights per group: "*" is everyone, "user" every logged-in account,
    # "sysop" administrators.
    group_permissions: dict[str, list[str]] = {
        "*":     [],
        "user":  ["edit", "rateimage", "voteny"],
        "sysop": ["edit", "rateimage", "voteny"],
    }

    # ── Object cache ───────────────────────────────────────────────────────

    cache_backend: Literal["memory", "redis"] = "memory"
    redis_url: str = "redis://localhost:6379/0"
    cache_key_prefix: str = "imagerating"
    featured_cache_ttl: int = 60
    list_cache_ttl: int = 60

    # ── Namespaces ─────────────────────────────────────────────────────────

    file_namespace: str = "File"
    category_namespace: str = "Category"
    user_namespace: str = "User"

    # ── Featured image ─────────────────────────────────────────────────────

    featured_default_width: int = 250
    featured_max_age_days: int = 30

    # ── Special:ImageRating ────────────────────────────────────────────────

    images_per_page: int = 5
    thumbnail_size: int = 120
    categories_per_row: int = 3
    pagination_window: int = 9

    # ── Category API ───────────────────────────────────────────────────────

    edit_debounce_seconds: float = 2.0


# -----------------------------------------------------------------------------

@lru_cache
def get_settings() -> Settings:
    return Settings()


# -----------------------------------------------------------------------------

def configure_logging(level: str | None = None) -> None:
    """Route the plugin's loggers to stderr at the configured level."""
    settings = get_settings()
    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": "%(asctime)s %(levelname)-7s %(name)s: %(message)s"},
        },
        "handlers": {
            "console": {"class": "logging.StreamHandler", "formatter": "default"},
        },
        "loggers": {
            "imagerating": {
                "handlers": ["console"],
                "level": (level or settings.log_level).upper(),
                "propagate": False,
            },
        },
    })


# -----------------------------------------------------------------------------
