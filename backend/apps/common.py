"""Helpers shared by the feature handlers."""

import json
import time
import uuid
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from config import get_settings
from llm.types import ProviderFailure
from responses import ResponseCode, error_response
from services.credits import CreditStatus


class CamelModel(BaseModel):
    """Request schema accepting camelCase keys (snake_case also works)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def get_request_id(request: Request) -> str:
    """Request id assigned by the middleware in main.py."""
    request_id = getattr(request.state, "request_id", None)
    return request_id or str(uuid.uuid4())[:8]


def timing_body(start: float, provider_duration_ms: int | None = None) -> dict[str, Any]:
    """Durations for response bodies; ``start`` comes from ``time.perf_counter()``."""
    total_ms = int((time.perf_counter() - start) * 1000)
    timing: dict[str, Any] = {
        "totalDuration": total_ms,
        "totalDurationSeconds": round(total_ms / 1000, 2),
    }
    if provider_duration_ms is not None:
        timing["providerDuration"] = provider_duration_ms
    return timing


def provider_error_response(
    failure: ProviderFailure,
    request_id: str,
    **extra: Any,
) -> JSONResponse:
    """Error body for a failed provider call, using the classified status."""
    return error_response(
        ResponseCode.PROVIDER_ERROR,
        failure.detail,
        request_id,
        status_code=failure.http_status,
        errorKind=failure.error_kind.value,
        provider=failure.provider_name,
        durationMs=failure.duration_ms,
        **extra,
    )


def credit_limit_response(status: CreditStatus, request_id: str) -> JSONResponse:
    return error_response(
        ResponseCode.CREDIT_LIMIT_REACHED,
        get_settings().credit_limit_message,
        request_id,
        creditsRemaining=0,
        creditsUsed=status.used,
        totalCredits=status.limit_count,
    )


def sse_event(payload: dict[str, Any]) -> str:
    """Format one server-sent event."""
    return f"data: {json.dumps(payload)}\n\n"
