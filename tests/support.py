"""Shared doubles for the generation tests."""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Mapping, Optional, Tuple


class RecordingAuditLogger:
    """In-memory audit logger capturing every lifecycle call."""

    def __init__(self) -> None:
        self.calls: List[Tuple[str, Tuple[Any, ...]]] = []
        self.request_ids: Dict[str, Optional[str]] = {}
        self._counter = 0

    def log_request(self, endpoint, model, word_count, max_tokens, prompt, *, request_id=None) -> str:
        self._counter += 1
        log_id = f"log-{self._counter}"
        self.request_ids[log_id] = request_id
        self.calls.append(("request", (log_id, endpoint, model, word_count, max_tokens, prompt)))
        return log_id

    def log_success(self, log_id, content, duration_ms) -> None:
        self.calls.append(("success", (log_id, content, duration_ms)))

    def log_error(self, log_id, message, duration_ms) -> None:
        self.calls.append(("error", (log_id, message, duration_ms)))

    def log_aborted(self, log_id, duration_ms) -> None:
        self.calls.append(("aborted", (log_id, duration_ms)))

    def events(self, kind: Optional[str] = None) -> List[Tuple[str, Tuple[Any, ...]]]:
        return [call for call in self.calls if kind is None or call[0] == kind]

    def terminal_events(self, log_id: str) -> List[str]:
        return [
            kind
            for kind, args in self.calls
            if kind in {"success", "error", "aborted"} and args[0] == log_id
        ]


class BrokenAuditLogger(RecordingAuditLogger):
    """Audit logger whose storage fails for the named events."""

    def __init__(self, *broken: str) -> None:
        super().__init__()
        self.broken = set(broken)

    def _check(self, kind: str) -> None:
        if kind in self.broken:
            raise OSError("audit store offline")

    def log_request(self, endpoint, model, word_count, max_tokens, prompt, *, request_id=None) -> str:
        self._check("request")
        return super().log_request(endpoint, model, word_count, max_tokens, prompt, request_id=request_id)

    def log_success(self, log_id, content, duration_ms) -> None:
        self._check("success")
        super().log_success(log_id, content, duration_ms)

    def log_error(self, log_id, message, duration_ms) -> None:
        self._check("error")
        super().log_error(log_id, message, duration_ms)

    def log_aborted(self, log_id, duration_ms) -> None:
        self._check("aborted")
        super().log_aborted(log_id, duration_ms)


class ScriptedTransport:
    """Transport whose responses are futures resolved by the test."""

    def __init__(self) -> None:
        self.payloads: List[Mapping[str, Any]] = []
        self.futures: List[asyncio.Future] = []
        self.cancelled = 0

    async def __call__(self, payload: Mapping[str, Any]) -> Mapping[str, Any]:
        future = asyncio.get_running_loop().create_future()
        self.payloads.append(payload)
        self.futures.append(future)
        try:
            return await future
        except asyncio.CancelledError:
            self.cancelled += 1
            raise

    def resolve(self, index: int, response: Mapping[str, Any]) -> None:
        self.futures[index].set_result(response)

    def fail(self, index: int, exc: BaseException) -> None:
        self.futures[index].set_exception(exc)


class FakeClock:
    def __init__(self, start: int = 1_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


def completion(content: Optional[str] = "Once upon a time", *, model: str = "mock/model") -> Dict[str, Any]:
    return {
        "id": "gen-1",
        "object": "chat.completion",
        "created": 1_700_000_000,
        "model": model,
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
        "usage": {"prompt_tokens": 12, "completion_tokens": 4, "total_tokens": 16},
    }


async def settle() -> None:
    """Let scheduled tasks and callbacks run."""

    for _ in range(5):
        await asyncio.sleep(0)
