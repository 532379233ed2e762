"""Async OpenRouter chat-completion transport built on httpx."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

import httpx

from creative_writer.config import OPENROUTER_CHAT_URL, Settings

logger = logging.getLogger(__name__)


class OpenRouterError(RuntimeError):
    """Raised when the provider call fails at the network or HTTP level."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        provider_message: Optional[str] = None,
        payload: Any = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.provider_message = provider_message
        self.payload = payload


def _provider_message(payload: Any) -> Optional[str]:
    """Return ``error.message`` from an OpenRouter error body, if present."""

    if not isinstance(payload, Mapping):
        return None
    error = payload.get("error")
    if isinstance(error, Mapping):
        message = error.get("message")
        if isinstance(message, str) and message.strip():
            return message.strip()
    return None


class OpenRouterClient:
    """Single-call, non-streaming OpenRouter client."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = OPENROUTER_CHAT_URL,
        http_referer: str | None = None,
        title: str | None = None,
        timeout_s: float | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url
        self.http_referer = http_referer
        self.title = title
        self.timeout_s = timeout_s
        self._http_transport = http_transport

    @classmethod
    def from_settings(cls, settings: Settings, *, api_key: str | None = None) -> "OpenRouterClient":
        return cls(
            api_key if api_key is not None else settings.openrouter_api_key,
            base_url=settings.openrouter_base_url,
            http_referer=settings.openrouter_http_referer,
            title=settings.openrouter_title,
            timeout_s=settings.openrouter_timeout_s,
        )

    def headers(self) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        if self.http_referer:
            headers["HTTP-Referer"] = self.http_referer
        if self.title:
            headers["X-Title"] = self.title
        return headers

    async def chat_completion(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        """POST ``payload`` and return the decoded JSON response."""

        timeout = httpx.Timeout(self.timeout_s)
        logger.debug(
            "[openrouter] sending request model=%s max_tokens=%s",
            payload.get("model"),
            payload.get("max_tokens"),
        )
        try:
            async with httpx.AsyncClient(timeout=timeout, transport=self._http_transport) as client:
                response = await client.post(self.base_url, headers=self.headers(), json=dict(payload))
        except httpx.HTTPError as exc:
            message = str(exc) or exc.__class__.__name__
            raise OpenRouterError(message) from exc

        decoded = True
        try:
            body: Any = response.json()
        except ValueError:
            decoded = False
            body = {"raw": response.text}

        logger.debug("[openrouter] received response status_code=%s", response.status_code)

        if response.is_error:
            provider_message = _provider_message(body)
            raise OpenRouterError(
                f"OpenRouter HTTP {response.status_code}: {response.reason_phrase}",
                status_code=response.status_code,
                provider_message=provider_message,
                payload=body,
            )
        if not decoded or not isinstance(body, dict):
            raise OpenRouterError(
                "OpenRouter returned a non-JSON response",
                status_code=response.status_code,
                payload=body,
            )
        return body


__all__ = ["OpenRouterClient", "OpenRouterError"]
