"""Centralised configuration using pydantic-settings.

All environment variables are read through the Settings class.
Consumers call ``get_settings()`` to obtain a cached, validated instance.
Tests construct ``Settings(_env_file=None, ...)`` directly for isolation.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# src/annotator_extras/config.py  ->  parent x3  ->  project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

DEFAULT_COLOR_OPTIONS: tuple[str, ...] = (
    "#FFFF00",  # yellow
    "#FFA500",  # orange
    "#FF6B6B",  # red
    "#FF69B4",  # pink
    "#9B59B6",  # purple
    "#5DADE2",  # blue
    "#58D68D",  # green
    "#BDC3C7",  # grey
)


# ---------------------------------------------------------------------------
# Sub-models (one per configuration domain)
# ---------------------------------------------------------------------------
class ColorConfig(BaseModel):
    """Highlight colour palette."""

    default_color: str = DEFAULT_COLOR_OPTIONS[0]
    color_options: list[str] = Field(default_factory=lambda: list(DEFAULT_COLOR_OPTIONS))


class TagConfig(BaseModel):
    """Tag field and remote tag list."""

    prefix: str = ""
    read_url: str = "/tags"
    refresh_delay: float = 0.5
    request_timeout: float = 10.0
    available_tags: dict[str, str] = Field(default_factory=dict)
    input_type: Literal["text", "select"] = "text"
    multiple: bool = True
    delimiter: str = ","

    @field_validator("delimiter")
    @classmethod
    def _delimiter_not_empty(cls, value: str) -> str:
        if not value:
            msg = "TAGS__DELIMITER must not be empty"
            raise ValueError(msg)
        return value

    @field_validator("refresh_delay", "request_timeout")
    @classmethod
    def _not_negative(cls, value: float) -> float:
        if value < 0:
            msg = "delays and timeouts must not be negative"
            raise ValueError(msg)
        return value


class I18nConfig(BaseModel):
    """Translation lookup overrides."""

    locale: str = "en"
    catalog: dict[str, str] = Field(default_factory=dict)


class AppConfig(BaseModel):
    """Demo application runtime configuration."""

    port: int = 8080
    log_dir: Path = Path("logs")


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------
class Settings(BaseSettings):
    """Settings with automatic .env loading and type validation.

    Environment variables use double-underscore delimiter for nesting:
    ``COLOR__DEFAULT_COLOR``, ``TAGS__READ_URL``, ``I18N__LOCALE``, etc.
    List and dict values are given as JSON, e.g.
    ``COLOR__COLOR_OPTIONS='["#fff", "#000"]'``.
    """

    model_config = SettingsConfigDict(
        env_file=_PROJECT_ROOT / ".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    color: ColorConfig = ColorConfig()
    tags: TagConfig = TagConfig()
    i18n: I18nConfig = I18nConfig()
    app: AppConfig = AppConfig()


# ---------------------------------------------------------------------------
# Singleton access
# ---------------------------------------------------------------------------
@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance.

    Call ``get_settings.cache_clear()`` in tests to reset.
    """
    settings = Settings()
    env_file = Path(str(settings.model_config.get("env_file")))
    if env_file.is_file():
        logger.info("Settings loaded .env from: %s", env_file)
    else:
        logger.info("Settings: no .env file found, using env vars and defaults")
    return settings
