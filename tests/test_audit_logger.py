from __future__ import annotations

from creative_writer.audit.logger import AIRequestLogger
from creative_writer.audit.models import AIRequestStatus


def test_request_then_success_updates_single_row(db) -> None:
    logger = AIRequestLogger()
    log_id = logger.log_request("https://openrouter.test", "mock/model", 100, 130, "Tell me a story")

    entry = logger.get_log(log_id)
    assert entry is not None
    assert entry.status == AIRequestStatus.PENDING.value
    assert entry.word_count == 100
    assert entry.max_tokens == 130
    assert entry.prompt_preview == "Tell me a story"
    assert entry.request_id is None

    logger.log_success(log_id, "Once upon a time", 321)

    entry = logger.get_log(log_id)
    assert entry.status == AIRequestStatus.SUCCESS.value
    assert entry.duration_ms == 321
    assert entry.response_preview == "Once upon a time"
    assert entry.response_length == len("Once upon a time")
    assert entry.completed_at is not None


def test_error_and_abort_are_recorded(db) -> None:
    logger = AIRequestLogger()
    failed = logger.log_request("endpoint", "mock/model", 384, 500, "a")
    aborted = logger.log_request("endpoint", "mock/model", 384, 500, "b")

    logger.log_error(failed, "Rate limit exceeded", 12)
    logger.log_aborted(aborted, 7)

    assert logger.get_log(failed).error_message == "Rate limit exceeded"
    assert logger.get_log(aborted).status == AIRequestStatus.ABORTED.value
    assert logger.get_log(aborted).duration_ms == 7


def test_terminal_rows_are_not_overwritten(db) -> None:
    logger = AIRequestLogger()
    log_id = logger.log_request("endpoint", "mock/model", 1, 2, "prompt")
    logger.log_aborted(log_id, 5)

    logger.log_success(log_id, "late", 9)
    logger.log_error("missing-id", "ignored", 1)

    entry = logger.get_log(log_id)
    assert entry.status == AIRequestStatus.ABORTED.value
    assert entry.response_preview is None


def test_prompt_preview_is_truncated(db) -> None:
    logger = AIRequestLogger(preview_chars=10)
    log_id = logger.log_request("endpoint", "mock/model", 1, 2, "x" * 50)

    entry = logger.get_log(log_id)
    assert entry.prompt_preview == "x" * 10 + "…"
    assert entry.prompt_length == 50


def test_list_and_clear_logs(db) -> None:
    logger = AIRequestLogger()
    for index in range(3):
        logger.log_request("endpoint", "mock/model", index, 10, f"prompt {index}")

    assert len(logger.list_logs()) == 3
    assert len(logger.list_logs(limit=2)) == 2
    assert logger.clear_logs() == 3
    assert logger.list_logs() == []


def test_request_id_is_stored_for_correlation(db) -> None:
    logger = AIRequestLogger()
    log_id = logger.log_request("endpoint", "mock/model", 1, 2, "prompt", request_id="req_42_abcdef0")

    assert logger.get_log(log_id).request_id == "req_42_abcdef0"
    assert logger.list_logs()[0].request_id == "req_42_abcdef0"
