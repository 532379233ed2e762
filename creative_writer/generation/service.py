"""Lifecycle management for cancellable OpenRouter generation calls.

Every call to :meth:`GenerationService.generate_text` is admitted into the
in-flight registry, raced against its cancellation handle, and released
exactly once. The audit entry opened for a call is closed by exactly one of
``log_success``, ``log_error`` or ``log_aborted``.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Generator, Mapping, Optional, Tuple, Union
from uuid import uuid4

from creative_writer.audit.logger import AIRequestLogger, AuditLogger
from creative_writer.config import get_settings
from creative_writer.services.openrouter_client import OpenRouterClient, OpenRouterError

from .builder import build_request
from .errors import GenerationError, InvariantViolation
from .models import GenerationOptions, GenerationRequest, GenerationResult
from .registry import InFlightRegistry, InFlightRequest
from .settings import EnvironmentSettingsProvider, OpenRouterSettings, SettingsProvider

LOGGER = logging.getLogger(__name__)

Transport = Callable[[Mapping[str, Any]], Awaitable[Mapping[str, Any]]]
Clock = Callable[[], int]
OptionsLike = Union[GenerationOptions, Mapping[str, Any], None]


def _now_ms() -> int:
    return int(time.time() * 1000)


def describe_error(exc: BaseException) -> str:
    """Return the most useful human-readable message for ``exc``."""

    provider_message = getattr(exc, "provider_message", None)
    if isinstance(provider_message, str) and provider_message:
        return provider_message
    message = str(exc).strip()
    if message:
        return message
    return "Unknown error"


def _discard(task: "asyncio.Future[Any]") -> None:
    """Cancel ``task`` and swallow whatever it eventually settles with."""

    def _consume(fut: "asyncio.Future[Any]") -> None:
        if not fut.cancelled():
            fut.exception()

    task.cancel()
    task.add_done_callback(_consume)


class PendingGeneration:
    """Awaitable handle for one in-flight generation.

    Awaiting yields the :class:`GenerationResult`, raises
    :class:`GenerationError` on provider failure, or raises
    :class:`asyncio.CancelledError` if the request was aborted.
    """

    def __init__(
        self,
        request_id: str,
        task: "asyncio.Task[GenerationResult]",
        service: "GenerationService",
    ) -> None:
        self.request_id = request_id
        self._task = task
        self._service = service

    def __await__(self) -> Generator[Any, None, GenerationResult]:
        return self._task.__await__()

    def done(self) -> bool:
        return self._task.done()

    def cancelled(self) -> bool:
        return self._task.cancelled()

    def abort(self) -> bool:
        return self._service.abort_request(self.request_id)

    def __repr__(self) -> str:
        return f"PendingGeneration(request_id={self.request_id!r}, done={self.done()})"


class GenerationService:
    """Issue text-generation calls and track them until they terminate."""

    def __init__(
        self,
        *,
        settings_provider: SettingsProvider | None = None,
        audit_logger: AuditLogger | None = None,
        transport: Transport | None = None,
        clock: Clock | None = None,
        endpoint: str | None = None,
    ) -> None:
        self._settings_provider = settings_provider or EnvironmentSettingsProvider()
        self._audit_logger = audit_logger or AIRequestLogger()
        self._transport = transport
        self._clock = clock or _now_ms
        self._endpoint = endpoint
        self._registry = InFlightRegistry()

    @property
    def endpoint(self) -> str:
        return self._endpoint or get_settings().openrouter_base_url

    # --- Public API -----------------------------------------------------------
    def generate_text(self, prompt: str, options: OptionsLike = None) -> PendingGeneration:
        """Validate, admit and dispatch one generation request.

        Must be called from inside a running event loop. Configuration and
        request id problems raise immediately, before anything is logged or
        registered.
        """

        loop = asyncio.get_running_loop()
        if options is None:
            options = GenerationOptions()
        elif not isinstance(options, GenerationOptions):
            options = GenerationOptions.model_validate(options)

        request_id = self._resolve_request_id(options.request_id)
        settings = self._settings_provider.get_settings()
        prepared = build_request(prompt, options, settings)
        transport = self._transport or self._default_transport(settings)

        started_at_ms = self._clock()
        audit_log_id = self._audit(
            "log_request",
            self.endpoint,
            prepared.request.model,
            prepared.word_count,
            prepared.request.max_tokens,
            prompt,
            request_id=request_id,
        )
        entry = self._registry.register(
            request_id,
            audit_log_id=audit_log_id,
            started_at_ms=started_at_ms,
        )
        LOGGER.info(
            "Dispatching generation request_id=%s model=%s max_tokens=%s",
            request_id,
            prepared.request.model,
            prepared.request.max_tokens,
        )
        task = loop.create_task(
            self._run(entry, prepared.request, transport),
            name=f"generation:{request_id}",
        )
        task.add_done_callback(lambda finished: self._on_task_done(entry, finished))
        return PendingGeneration(request_id, task, self)

    def abort_request(self, request_id: str) -> bool:
        """Cancel ``request_id`` if it is still in flight.

        Returns ``False`` without side effects for unknown or finished ids.
        """

        entry = self._registry.get(request_id)
        if entry is None:
            LOGGER.debug("Abort ignored for unknown request_id=%s", request_id)
            return False
        duration_ms = self._clock() - entry.started_at_ms
        if entry.audit_log_id is not None:
            self._audit("log_aborted", entry.audit_log_id, duration_ms)
        self._registry.signal(request_id)
        self._release(request_id)
        LOGGER.info("Aborted generation request_id=%s after %sms", request_id, duration_ms)
        return True

    def abort_all(self) -> int:
        """Abort every in-flight request and return how many were aborted."""

        return sum(1 for request_id in self._registry.request_ids() if self.abort_request(request_id))

    def in_flight_request_ids(self) -> Tuple[str, ...]:
        return self._registry.request_ids()

    def is_in_flight(self, request_id: str) -> bool:
        return request_id in self._registry

    # --- Internals ------------------------------------------------------------
    def _resolve_request_id(self, supplied: Optional[str]) -> str:
        if supplied is not None:
            if supplied in self._registry:
                raise InvariantViolation(f"Request id {supplied!r} is already in flight")
            return supplied
        while True:
            candidate = f"req_{self._clock()}_{uuid4().hex[:7]}"
            if candidate not in self._registry:
                return candidate

    def _default_transport(self, settings: OpenRouterSettings) -> Transport:
        client = OpenRouterClient.from_settings(get_settings(), api_key=settings.api_key)
        return client.chat_completion

    def _audit(self, method: str, *args: Any, **kwargs: Any) -> Any:
        try:
            return getattr(self._audit_logger, method)(*args, **kwargs)
        except Exception:
            LOGGER.warning("Audit logger call %s failed", method, exc_info=True)
            return None

    def _release(self, request_id: str) -> None:
        self._registry.release(request_id)

    def _on_task_done(self, entry: InFlightRequest, task: "asyncio.Task[GenerationResult]") -> None:
        # A task cancelled before it started never reaches its own abort path.
        if self._registry.get(entry.request_id) is entry:
            self.abort_request(entry.request_id)
        # Failures are already logged by _run; awaiting still re-raises them.
        if not task.cancelled():
            task.exception()

    async def _run(
        self,
        entry: InFlightRequest,
        request: GenerationRequest,
        transport: Transport,
    ) -> GenerationResult:
        if entry.handle.signalled:
            raise asyncio.CancelledError()
        transport_task = asyncio.ensure_future(transport(request.to_payload()))
        try:
            await asyncio.wait(
                {transport_task, entry.handle.future},
                return_when=asyncio.FIRST_COMPLETED,
            )
        except asyncio.CancelledError:
            # The caller cancelled the pending task itself; treat it as an abort.
            _discard(transport_task)
            self.abort_request(entry.request_id)
            raise

        if entry.handle.signalled or not transport_task.done():
            _discard(transport_task)
            LOGGER.debug("Discarding transport outcome for aborted request_id=%s", entry.request_id)
            raise asyncio.CancelledError()

        duration_ms = self._clock() - entry.started_at_ms
        try:
            result = GenerationResult.model_validate(transport_task.result())
        except (Exception, asyncio.CancelledError) as exc:
            message = describe_error(exc)
            status_code = exc.status_code if isinstance(exc, OpenRouterError) else None
            LOGGER.warning(
                "Generation failed request_id=%s status=%s: %s",
                entry.request_id,
                status_code,
                message,
            )
            if entry.audit_log_id is not None:
                self._audit("log_error", entry.audit_log_id, message, duration_ms)
            self._release(entry.request_id)
            raise GenerationError(
                message,
                request_id=entry.request_id,
                status_code=status_code,
            ) from exc

        if entry.audit_log_id is not None:
            self._audit("log_success", entry.audit_log_id, result.content, duration_ms)
        self._release(entry.request_id)
        LOGGER.info(
            "Generation completed request_id=%s duration_ms=%s",
            entry.request_id,
            duration_ms,
        )
        return result


_SERVICE: GenerationService | None = None


def set_generation_service(service: GenerationService | None) -> None:
    """Override the process-wide service (useful for tests)."""

    global _SERVICE
    _SERVICE = service


def get_generation_service() -> GenerationService:
    """Return the process-wide service, creating it if necessary."""

    global _SERVICE
    if _SERVICE is None:
        _SERVICE = GenerationService()
    return _SERVICE


__all__ = [
    "GenerationService",
    "PendingGeneration",
    "Transport",
    "describe_error",
    "get_generation_service",
    "set_generation_service",
]
