"""FastAPI router exposing generation and abort endpoints."""

from __future__ import annotations

import asyncio
from typing import Any, List

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from creative_writer.audit.logger import AIRequestLogger

from .errors import ConfigurationError, GenerationError, InvariantViolation
from .service import GenerationService, get_generation_service

router = APIRouter(prefix="/api/ai", tags=["generation"])


class GenerateBody(BaseModel):
    prompt: str
    # Checked against GenerationOptions by the service.
    options: Any = None


def get_audit_logger() -> AIRequestLogger:
    return AIRequestLogger()


def _error(status_code: int, message: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"ok": False, "error": message, **extra})


def _describe_invalid(exc: ValidationError) -> List[str]:
    return [
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    ]


@router.post("/generate")
async def generate(
    body: GenerateBody,
    service: GenerationService = Depends(get_generation_service),
) -> Any:
    try:
        pending = service.generate_text(body.prompt, body.options)
    except ValidationError as exc:
        return _error(400, "Invalid generation options", detail=_describe_invalid(exc))
    except ConfigurationError as exc:
        return _error(400, str(exc))
    except InvariantViolation as exc:
        return _error(409, str(exc))

    try:
        result = await pending
    except asyncio.CancelledError:
        current = asyncio.current_task()
        if current is not None and current.cancelling():
            raise
        return _error(409, "Request aborted", requestId=pending.request_id, aborted=True)
    except GenerationError as exc:
        return _error(
            502,
            exc.message,
            requestId=pending.request_id,
            statusCode=exc.status_code,
        )

    return {
        "ok": True,
        "requestId": pending.request_id,
        "content": result.content,
        "result": result.model_dump(mode="json"),
    }


@router.post("/requests/{request_id}/abort")
async def abort(
    request_id: str,
    service: GenerationService = Depends(get_generation_service),
) -> Any:
    aborted = service.abort_request(request_id)
    return {"ok": True, "requestId": request_id, "aborted": aborted}


@router.get("/requests")
async def list_requests(service: GenerationService = Depends(get_generation_service)) -> Any:
    return {"ok": True, "requestIds": list(service.in_flight_request_ids())}


@router.get("/logs")
async def list_logs(
    limit: int = Query(100, ge=1, le=1000),
    audit_logger: AIRequestLogger = Depends(get_audit_logger),
) -> Any:
    entries = audit_logger.list_logs(limit=limit)
    return {"ok": True, "logs": [entry.model_dump(mode="json") for entry in entries]}


@router.delete("/logs")
async def clear_logs(audit_logger: AIRequestLogger = Depends(get_audit_logger)) -> Any:
    removed = audit_logger.clear_logs()
    return {"ok": True, "removed": removed}
