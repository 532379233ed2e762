"""Database utilities for the AI request audit log."""

from __future__ import annotations

from pathlib import Path

from sqlalchemy.engine import URL, Engine, make_url
from sqlmodel import SQLModel, create_engine

from .config import PROJECT_ROOT, get_settings

_engine: Engine | None = None


def resolve_database_url(database_url: str, root: Path = PROJECT_ROOT) -> URL:
    """Anchor relative sqlite files at ``root`` and create their directory."""

    url = make_url(database_url)
    if url.get_backend_name() != "sqlite" or url.database in (None, "", ":memory:"):
        return url
    path = Path(url.database)
    if not path.is_absolute():
        path = (root / path).resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    return url.set(database=str(path))


def get_engine() -> Engine:
    """Return the shared engine for the configured audit database."""

    global _engine
    if _engine is None:
        url = resolve_database_url(get_settings().database_url)
        # Requests finish on whichever thread the ASGI server hands them.
        connect_args = {"check_same_thread": False} if url.get_backend_name() == "sqlite" else {}
        _engine = create_engine(url, connect_args=connect_args)
    return _engine


def init_db() -> None:
    """Create the audit log table."""

    from .audit import models  # noqa: F401  Registers AIRequestLog with SQLModel metadata.

    SQLModel.metadata.create_all(get_engine())


def reset_database_state() -> None:
    """Dispose of the cached engine so the next call re-reads settings."""

    global _engine
    if _engine is not None:
        _engine.dispose()
    _engine = None
