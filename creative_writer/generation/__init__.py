"""Cancellable text generation against OpenRouter."""

from .builder import PreparedRequest, build_request
from .errors import ConfigurationError, GenerationError, GenerationServiceError, InvariantViolation
from .models import GenerationOptions, GenerationRequest, GenerationResult
from .registry import CancellationHandle, InFlightRegistry, InFlightRequest
from .service import (
    GenerationService,
    PendingGeneration,
    get_generation_service,
    set_generation_service,
)
from .settings import (
    EnvironmentSettingsProvider,
    OpenRouterSettings,
    SettingsProvider,
    StaticSettingsProvider,
)

__all__ = [
    "CancellationHandle",
    "ConfigurationError",
    "EnvironmentSettingsProvider",
    "GenerationError",
    "GenerationOptions",
    "GenerationRequest",
    "GenerationResult",
    "GenerationService",
    "GenerationServiceError",
    "InFlightRegistry",
    "InFlightRequest",
    "InvariantViolation",
    "OpenRouterSettings",
    "PendingGeneration",
    "PreparedRequest",
    "SettingsProvider",
    "StaticSettingsProvider",
    "build_request",
    "get_generation_service",
    "set_generation_service",
]
