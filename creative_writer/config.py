"""Application settings for the Creative Writer backend."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

PROJECT_ROOT = Path(__file__).resolve().parent.parent

OPENROUTER_CHAT_URL = "https://openrouter.ai/api/v1/chat/completions"

_ENV_FIELDS: Dict[str, str] = {
    "openrouter_enabled": "OPENROUTER_ENABLED",
    "openrouter_api_key": "OPENROUTER_API_KEY",
    "openrouter_model": "OPENROUTER_MODEL",
    "openrouter_temperature": "OPENROUTER_TEMPERATURE",
    "openrouter_top_p": "OPENROUTER_TOP_P",
    "openrouter_base_url": "OPENROUTER_BASE_URL",
    "openrouter_http_referer": "OPENROUTER_HTTP_REFERER",
    "openrouter_title": "OPENROUTER_TITLE",
    "openrouter_timeout_s": "OPENROUTER_TIMEOUT_S",
    "database_url": "DATABASE_URL",
    "log_level": "LOG_LEVEL",
    "ai_log_prompt_preview_chars": "AI_LOG_PROMPT_PREVIEW_CHARS",
}


class Settings(BaseModel):
    """Environment-driven configuration."""

    openrouter_enabled: bool = True
    openrouter_api_key: str = ""
    openrouter_model: str = ""
    openrouter_temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    openrouter_top_p: float = Field(default=1.0, ge=0.0, le=1.0)
    openrouter_base_url: str = OPENROUTER_CHAT_URL
    openrouter_http_referer: str = "http://localhost:8000"
    openrouter_title: str = "Creative Writer"
    openrouter_timeout_s: Optional[float] = None
    database_url: str = "sqlite:///./data/creative_writer.db"
    log_level: str = "INFO"
    ai_log_prompt_preview_chars: int = Field(default=2000, gt=0)

    @field_validator("openrouter_timeout_s", mode="before")
    @classmethod
    def _blank_timeout(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("openrouter_api_key", "openrouter_model")
    @classmethod
    def _strip(cls, value: str) -> str:
        return value.strip()

    @classmethod
    def from_env(cls) -> "Settings":
        values = {
            name: os.environ[env_name]
            for name, env_name in _ENV_FIELDS.items()
            if env_name in os.environ
        }
        return cls.model_validate(values)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the cached settings instance."""

    load_dotenv(PROJECT_ROOT / ".env", override=False)
    return Settings.from_env()


def reset_settings_cache() -> None:
    """Clear the cached settings (used by tests)."""

    get_settings.cache_clear()


__all__ = [
    "OPENROUTER_CHAT_URL",
    "PROJECT_ROOT",
    "Settings",
    "get_settings",
    "reset_settings_cache",
]
