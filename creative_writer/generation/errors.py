"""Exceptions raised by the generation service."""

from __future__ import annotations

from typing import Optional


class GenerationServiceError(Exception):
    """Base class for generation failures surfaced to callers."""


class ConfigurationError(GenerationServiceError):
    """The provider integration cannot be used with the current settings."""


class InvariantViolation(GenerationServiceError):
    """Bookkeeping misuse, e.g. a request id registered twice."""


class GenerationError(GenerationServiceError):
    """The provider call failed after the request was dispatched."""

    def __init__(
        self,
        message: str,
        *,
        request_id: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.request_id = request_id
        self.status_code = status_code


__all__ = [
    "ConfigurationError",
    "GenerationError",
    "GenerationServiceError",
    "InvariantViolation",
]
