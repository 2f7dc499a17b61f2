"""Centralised application configuration using pydantic-settings.

All environment variables are read through the Settings class.
Consumers call ``get_settings()`` to obtain a cached, validated instance.
Tests construct ``Settings(_env_file=None, ...)`` directly for isolation.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# src/docmargin/config.py  ->  parent x3  ->  project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


# ---------------------------------------------------------------------------
# Sub-models (one per configuration domain)
# ---------------------------------------------------------------------------
class AppConfig(BaseModel):
    """Application runtime configuration."""

    base_url: str = "http://localhost:8080"
    port: int = 8080
    storage_secret: SecretStr = SecretStr("dev-secret-change-me")
    docs_dir: Path = Path("working-docs")
    log_dir: Path = Path("logs")


class AnnotationConfig(BaseModel):
    """Defaults for comments written into documents."""

    default_author: str = "You"

    @field_validator("default_author")
    @classmethod
    def author_is_single_line(cls, value: str) -> str:
        value = value.strip()
        if not value:
            msg = "ANNOTATIONS__DEFAULT_AUTHOR must not be empty"
            raise ValueError(msg)
        if "\n" in value or "\r" in value:
            msg = "ANNOTATIONS__DEFAULT_AUTHOR must be a single line"
            raise ValueError(msg)
        return value


class DevConfig(BaseModel):
    """Development toggles."""

    reload: bool = True
    log_level: str = "INFO"


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------
class Settings(BaseSettings):
    """Application settings with automatic .env loading and type validation.

    Environment variables use double-underscore delimiter for nesting:
    ``APP__PORT``, ``APP__DOCS_DIR``, ``ANNOTATIONS__DEFAULT_AUTHOR``, etc.
    """

    model_config = SettingsConfigDict(
        env_file=_PROJECT_ROOT / ".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    app: AppConfig = AppConfig()
    annotations: AnnotationConfig = AnnotationConfig()
    dev: DevConfig = DevConfig()


# ---------------------------------------------------------------------------
# Singleton access
# ---------------------------------------------------------------------------
@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance.

    Call ``get_settings.cache_clear()`` in tests to reset.
    """
    settings = Settings()

    env_file = settings.model_config.get("env_file")
    if env_file is not None and Path(str(env_file)).is_file():
        logger.info("Settings loaded .env from: %s", env_file)
    else:
        logger.info("Settings: no .env file found, using env vars and defaults")

    return settings
