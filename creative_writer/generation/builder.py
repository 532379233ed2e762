"""Assemble provider payloads from caller options and configured defaults."""

from __future__ import annotations

import math
from dataclasses import dataclass

from .errors import ConfigurationError
from .models import DEFAULT_MAX_TOKENS, ChatMessage, GenerationOptions, GenerationRequest
from .settings import OpenRouterSettings

# Approximate tokens per English word.
TOKENS_PER_WORD = 1.3


@dataclass(frozen=True, slots=True)
class PreparedRequest:
    request: GenerationRequest
    word_count: int


def estimate_word_count(max_tokens: int) -> int:
    return math.floor(max_tokens / TOKENS_PER_WORD)


def build_request(
    prompt: str,
    options: GenerationOptions,
    settings: OpenRouterSettings,
) -> PreparedRequest:
    """Validate preconditions and return the payload plus its audit word count.

    Raises :class:`ConfigurationError` when the integration is disabled, no API
    key is configured, or neither ``options`` nor ``settings`` name a model.
    """

    if not settings.enabled or not settings.api_key:
        raise ConfigurationError("OpenRouter API is not enabled or the API key is missing")

    model = options.model or settings.model
    if not model:
        raise ConfigurationError("No AI model selected")

    max_tokens = options.max_tokens if options.max_tokens is not None else DEFAULT_MAX_TOKENS
    word_count = (
        options.word_count if options.word_count is not None else estimate_word_count(max_tokens)
    )

    request = GenerationRequest(
        model=model,
        messages=[ChatMessage(role="user", content=prompt)],
        max_tokens=max_tokens,
        temperature=options.temperature if options.temperature is not None else settings.temperature,
        top_p=options.top_p if options.top_p is not None else settings.top_p,
    )
    return PreparedRequest(request=request, word_count=word_count)


__all__ = ["PreparedRequest", "TOKENS_PER_WORD", "build_request", "estimate_word_count"]
