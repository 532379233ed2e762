"""Pydantic models describing generation requests and responses."""
from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

Role = Literal["system", "user", "assistant"]

DEFAULT_MAX_TOKENS = 500


class ChatMessage(BaseModel):
    """Single role-tagged turn sent to the provider."""

    role: Role
    content: str


class GenerationOptions(BaseModel):
    """Caller overrides; anything left as ``None`` falls back to settings."""

    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    model: Optional[str] = None
    max_tokens: Optional[int] = Field(default=None, gt=0, alias="maxTokens")
    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0)
    top_p: Optional[float] = Field(default=None, ge=0.0, le=1.0, alias="topP")
    word_count: Optional[int] = Field(default=None, ge=0, alias="wordCount")
    request_id: Optional[str] = Field(default=None, alias="requestId")

    @field_validator("model", "request_id")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None


class GenerationRequest(BaseModel):
    """Provider-ready chat-completion payload."""

    model_config = ConfigDict(protected_namespaces=())

    model: str
    messages: List[ChatMessage]
    max_tokens: int = Field(gt=0)
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    stream: bool = False

    @field_validator("model")
    @classmethod
    def _model_not_empty(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("model must not be empty")
        return value

    def to_payload(self) -> dict:
        return self.model_dump(exclude_none=True)


class ResponseMessage(BaseModel):
    role: str = "assistant"
    content: Optional[str] = None


class Choice(BaseModel):
    model_config = ConfigDict(extra="allow")

    index: int = 0
    message: Optional[ResponseMessage] = None
    finish_reason: Optional[str] = None


class Usage(BaseModel):
    model_config = ConfigDict(extra="allow")

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class GenerationResult(BaseModel):
    """Chat-completion response returned by OpenRouter."""

    model_config = ConfigDict(extra="allow", protected_namespaces=())

    id: str = ""
    object: str = "chat.completion"
    created: int = 0
    model: str = ""
    choices: List[Choice] = Field(default_factory=list)
    usage: Optional[Usage] = None

    @property
    def content(self) -> str:
        """Text of the first choice, or ``""`` when the provider sent none."""

        if not self.choices:
            return ""
        message = self.choices[0].message
        if message is None or message.content is None:
            return ""
        return message.content


__all__ = [
    "ChatMessage",
    "Choice",
    "DEFAULT_MAX_TOKENS",
    "GenerationOptions",
    "GenerationRequest",
    "GenerationResult",
    "ResponseMessage",
    "Usage",
]
