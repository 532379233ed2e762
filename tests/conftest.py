"""Test configuration for the Creative Writer backend."""

from __future__ import annotations

import asyncio
import inspect
import sys
from pathlib import Path
from typing import Generator

import pytest  # noqa: E402

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from creative_writer.config import reset_settings_cache  # noqa: E402
from creative_writer.database import init_db, reset_database_state  # noqa: E402
from creative_writer.generation.service import GenerationService, set_generation_service  # noqa: E402
from creative_writer.generation.settings import (  # noqa: E402
    OpenRouterSettings,
    StaticSettingsProvider,
)

from support import FakeClock, RecordingAuditLogger, ScriptedTransport  # noqa: E402


@pytest.fixture(autouse=True)
def _isolate_environment(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> Generator[None, None, None]:
    """Provide isolated configuration for each test."""

    for name in (
        "OPENROUTER_ENABLED",
        "OPENROUTER_TEMPERATURE",
        "OPENROUTER_TOP_P",
        "OPENROUTER_BASE_URL",
        "OPENROUTER_TIMEOUT_S",
        "AI_LOG_PROMPT_PREVIEW_CHARS",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'test.db'}")
    monkeypatch.setenv("OPENROUTER_API_KEY", "sk-test")
    monkeypatch.setenv("OPENROUTER_MODEL", "mock/model")
    reset_settings_cache()
    reset_database_state()
    set_generation_service(None)
    yield
    set_generation_service(None)
    reset_settings_cache()
    reset_database_state()


@pytest.fixture()
def db() -> None:
    init_db()


@pytest.fixture()
def provider_settings() -> OpenRouterSettings:
    return OpenRouterSettings(
        enabled=True,
        api_key="sk-test",
        model="mock/model",
        temperature=0.7,
        top_p=0.9,
    )


@pytest.fixture
def audit_logger() -> RecordingAuditLogger:
    return RecordingAuditLogger()


@pytest.fixture
def transport() -> ScriptedTransport:
    return ScriptedTransport()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def service(
    provider_settings: OpenRouterSettings,
    audit_logger: RecordingAuditLogger,
    transport: ScriptedTransport,
    clock: FakeClock,
) -> GenerationService:
    return GenerationService(
        settings_provider=StaticSettingsProvider(provider_settings),
        audit_logger=audit_logger,
        transport=transport,
        clock=clock,
        endpoint="https://openrouter.test/v1/chat/completions",
    )


def pytest_pyfunc_call(pyfuncitem):
    if inspect.iscoroutinefunction(pyfuncitem.obj):
        loop = asyncio.new_event_loop()
        try:
            signature = inspect.signature(pyfuncitem.obj)
            kwargs = {
                name: pyfuncitem.funcargs[name]
                for name in signature.parameters
                if name in pyfuncitem.funcargs
            }
            loop.run_until_complete(pyfuncitem.obj(**kwargs))
        finally:
            loop.close()
        return True
    return None
