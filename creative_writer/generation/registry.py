"""In-flight request bookkeeping keyed by request id."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

from .errors import InvariantViolation


class HandleState(str, Enum):
    IDLE = "idle"
    SIGNALLED = "signalled"
    RELEASED = "released"


class CancellationHandle:
    """One-shot cancellation signal.

    ``wait()`` returns ``True`` once the handle is signalled and ``False`` when
    it is released without ever being signalled.
    """

    def __init__(self) -> None:
        self._state = HandleState.IDLE
        self._signalled = False
        self._waiter: asyncio.Future[bool] = asyncio.get_running_loop().create_future()

    @property
    def state(self) -> HandleState:
        return self._state

    @property
    def signalled(self) -> bool:
        return self._signalled

    @property
    def future(self) -> "asyncio.Future[bool]":
        """Resolves ``True`` on signal or ``False`` on release."""

        return self._waiter

    def signal(self) -> bool:
        if self._state is not HandleState.IDLE:
            return False
        self._state = HandleState.SIGNALLED
        self._signalled = True
        if not self._waiter.done():
            self._waiter.set_result(True)
        return True

    def release(self) -> None:
        if self._state is HandleState.RELEASED:
            return
        self._state = HandleState.RELEASED
        if not self._waiter.done():
            self._waiter.set_result(False)

    async def wait(self) -> bool:
        return await asyncio.shield(self._waiter)


@dataclass(slots=True)
class InFlightRequest:
    """Everything needed to finalise one request, stored under its id."""

    request_id: str
    handle: CancellationHandle
    audit_log_id: Optional[str]
    started_at_ms: int


class InFlightRegistry:
    """Map of request id to :class:`InFlightRequest`.

    Cancellation handles and request metadata live in the same record, so
    registering and releasing always touch both together.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, InFlightRequest] = {}

    def register(
        self,
        request_id: str,
        *,
        audit_log_id: Optional[str],
        started_at_ms: int,
    ) -> InFlightRequest:
        if request_id in self._entries:
            raise InvariantViolation(f"Request id {request_id!r} is already in flight")
        entry = InFlightRequest(
            request_id=request_id,
            handle=CancellationHandle(),
            audit_log_id=audit_log_id,
            started_at_ms=started_at_ms,
        )
        self._entries[request_id] = entry
        return entry

    def get(self, request_id: str) -> Optional[InFlightRequest]:
        return self._entries.get(request_id)

    def signal(self, request_id: str) -> bool:
        entry = self._entries.get(request_id)
        if entry is None:
            return False
        return entry.handle.signal()

    def release(self, request_id: str) -> Optional[InFlightRequest]:
        entry = self._entries.get(request_id)
        if entry is None:
            return None
        entry.handle.release()
        del self._entries[request_id]
        return entry

    def request_ids(self) -> Tuple[str, ...]:
        return tuple(self._entries)

    def __contains__(self, request_id: object) -> bool:
        return request_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["CancellationHandle", "HandleState", "InFlightRegistry", "InFlightRequest"]
