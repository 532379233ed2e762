"""Provider settings snapshots consumed by the request builder."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

from creative_writer.config import Settings, get_settings


@dataclass(frozen=True, slots=True)
class OpenRouterSettings:
    """Point-in-time view of the OpenRouter configuration."""

    enabled: bool
    api_key: str
    model: Optional[str]
    temperature: float
    top_p: float

    @classmethod
    def from_settings(cls, settings: Settings) -> "OpenRouterSettings":
        return cls(
            enabled=settings.openrouter_enabled,
            api_key=settings.openrouter_api_key,
            model=settings.openrouter_model or None,
            temperature=settings.openrouter_temperature,
            top_p=settings.openrouter_top_p,
        )


class SettingsProvider(Protocol):
    def get_settings(self) -> OpenRouterSettings: ...


class EnvironmentSettingsProvider:
    """Read the snapshot from the cached application settings on every call."""

    def get_settings(self) -> OpenRouterSettings:
        return OpenRouterSettings.from_settings(get_settings())


class StaticSettingsProvider:
    """Serve a fixed snapshot."""

    def __init__(self, settings: OpenRouterSettings) -> None:
        self._settings = settings

    def get_settings(self) -> OpenRouterSettings:
        return self._settings


__all__ = [
    "EnvironmentSettingsProvider",
    "OpenRouterSettings",
    "SettingsProvider",
    "StaticSettingsProvider",
]
