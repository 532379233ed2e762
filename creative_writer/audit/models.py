"""SQLModel table backing the AI request audit trail."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Optional
from uuid import uuid4

from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    return datetime.now(UTC)


class AIRequestStatus(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"
    ABORTED = "aborted"


class AIRequestLog(SQLModel, table=True):
    """One row per generation request sent to the provider."""

    __tablename__ = "ai_request_logs"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    created_at: datetime = Field(default_factory=_utcnow, nullable=False, index=True)
    request_id: Optional[str] = Field(default=None, index=True)
    endpoint: str = Field(nullable=False)
    model: str = Field(nullable=False, index=True)
    word_count: int = Field(nullable=False)
    max_tokens: int = Field(nullable=False)
    prompt_preview: str = Field(default="", nullable=False)
    prompt_length: int = Field(default=0, nullable=False)
    status: str = Field(default=AIRequestStatus.PENDING.value, nullable=False, index=True)
    response_preview: Optional[str] = Field(default=None)
    response_length: Optional[int] = Field(default=None)
    error_message: Optional[str] = Field(default=None)
    duration_ms: Optional[int] = Field(default=None)
    completed_at: Optional[datetime] = Field(default=None)


__all__ = ["AIRequestLog", "AIRequestStatus"]
