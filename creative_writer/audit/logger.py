"""Persistent audit trail for AI generation requests."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Callable, List, Optional, Protocol

from sqlalchemy.engine import Engine
from sqlmodel import Session, select

from creative_writer import database
from creative_writer.config import get_settings

from .models import AIRequestLog, AIRequestStatus

LOGGER = logging.getLogger(__name__)


class AuditLogger(Protocol):
    """Lifecycle hooks the generation service reports to."""

    def log_request(
        self,
        endpoint: str,
        model: str,
        word_count: int,
        max_tokens: int,
        prompt: str,
        *,
        request_id: Optional[str] = None,
    ) -> str: ...

    def log_success(self, log_id: str, content: str, duration_ms: int) -> None: ...

    def log_error(self, log_id: str, message: str, duration_ms: int) -> None: ...

    def log_aborted(self, log_id: str, duration_ms: int) -> None: ...


def _preview(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "…"


class AIRequestLogger:
    """Store request lifecycle events in the ``ai_request_logs`` table."""

    def __init__(
        self,
        *,
        engine_factory: Callable[[], Engine] | None = None,
        preview_chars: int | None = None,
    ) -> None:
        self._engine_factory = engine_factory or database.get_engine
        self._preview_chars = preview_chars

    @property
    def preview_chars(self) -> int:
        if self._preview_chars is not None:
            return self._preview_chars
        return get_settings().ai_log_prompt_preview_chars

    def _session(self) -> Session:
        return Session(self._engine_factory())

    def log_request(
        self,
        endpoint: str,
        model: str,
        word_count: int,
        max_tokens: int,
        prompt: str,
        *,
        request_id: Optional[str] = None,
    ) -> str:
        entry = AIRequestLog(
            request_id=request_id,
            endpoint=endpoint,
            model=model,
            word_count=word_count,
            max_tokens=max_tokens,
            prompt_preview=_preview(prompt, self.preview_chars),
            prompt_length=len(prompt),
        )
        with self._session() as session:
            session.add(entry)
            session.commit()
            log_id = entry.id
        LOGGER.debug(
            "Opened AI request log %s request_id=%s model=%s max_tokens=%s",
            log_id,
            request_id,
            model,
            max_tokens,
        )
        return log_id

    def log_success(self, log_id: str, content: str, duration_ms: int) -> None:
        self._finalize(
            log_id,
            AIRequestStatus.SUCCESS,
            duration_ms,
            response_preview=_preview(content, self.preview_chars),
            response_length=len(content),
        )

    def log_error(self, log_id: str, message: str, duration_ms: int) -> None:
        self._finalize(log_id, AIRequestStatus.ERROR, duration_ms, error_message=message)

    def log_aborted(self, log_id: str, duration_ms: int) -> None:
        self._finalize(log_id, AIRequestStatus.ABORTED, duration_ms)

    def _finalize(
        self,
        log_id: str,
        status: AIRequestStatus,
        duration_ms: int,
        **fields: object,
    ) -> None:
        with self._session() as session:
            entry = session.get(AIRequestLog, log_id)
            if entry is None:
                LOGGER.warning("AI request log %s not found; dropping %s event", log_id, status.value)
                return
            if entry.status != AIRequestStatus.PENDING.value:
                LOGGER.warning(
                    "AI request log %s already %s; ignoring %s event",
                    log_id,
                    entry.status,
                    status.value,
                )
                return
            entry.status = status.value
            entry.duration_ms = duration_ms
            entry.completed_at = datetime.now(UTC)
            for name, value in fields.items():
                setattr(entry, name, value)
            session.add(entry)
            session.commit()
        LOGGER.debug("Closed AI request log %s status=%s duration_ms=%s", log_id, status.value, duration_ms)

    def list_logs(self, limit: int = 100) -> List[AIRequestLog]:
        """Return the most recent entries, newest first."""

        with self._session() as session:
            statement = (
                select(AIRequestLog)
                .order_by(AIRequestLog.created_at.desc())
                .limit(limit)
            )
            return list(session.exec(statement).all())

    def get_log(self, log_id: str) -> Optional[AIRequestLog]:
        with self._session() as session:
            return session.get(AIRequestLog, log_id)

    def clear_logs(self) -> int:
        """Delete every entry and return how many were removed."""

        with self._session() as session:
            entries = session.exec(select(AIRequestLog)).all()
            for entry in entries:
                session.delete(entry)
            session.commit()
        return len(entries)


__all__ = ["AIRequestLogger", "AuditLogger"]
