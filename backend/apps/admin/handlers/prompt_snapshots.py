"""GET endpoints for the last prompts sent to the model."""

import logging
from collections.abc import Callable
from typing import Any

from fastapi import Depends, Request
from fastapi.responses import JSONResponse

from apps.common import get_request_id
from db import KVStore, KVStoreError
from dependencies import get_kv_store
from responses import ResponseCode, error_response
from services import KVKey

logger = logging.getLogger(__name__)

# (path, key, endpoint that writes the snapshot)
SNAPSHOT_ENDPOINTS: tuple[tuple[str, KVKey, str], ...] = (
    ("/latest-suggestion-prompt", KVKey.LATEST_SUGGESTION_PROMPT, "/api/suggestion"),
    ("/latest-grade-prompt", KVKey.LATEST_GRADE_PROMPT, "/api/grade-response"),
    (
        "/latest-analyze-intent-prompt",
        KVKey.LATEST_ANALYZE_INTENT_PROMPT,
        "/api/analyze-intent",
    ),
    (
        "/latest-generate-from-direction-prompt",
        KVKey.LATEST_GENERATE_FROM_DIRECTION_PROMPT,
        "/api/generate-from-direction",
    ),
)


async def _read_snapshot(store: KVStore, key: KVKey) -> Any | None:
    """Stored snapshot, or None. Raises KVStoreError on read failure."""
    try:
        return await store.get(key.value)
    except KVStoreError:
        raise
    except Exception as e:
        raise KVStoreError(f"Failed to read {key.value}: {e}") from e


async def get_full_prompt_preview(
    request: Request,
    store: KVStore = Depends(get_kv_store),
) -> JSONResponse:
    """Last structured-reasoning reply prompt with the model output."""
    request_id = get_request_id(request)
    try:
        data = await _read_snapshot(store, KVKey.CURRENT_FULL_PROMPT)
    except KVStoreError as e:
        logger.error("[%s] Failed to read prompt preview: %s", request_id, e)
        return error_response(ResponseCode.STORAGE_ERROR, request_id=request_id)

    if not isinstance(data, dict):
        return JSONResponse(
            content={
                "prompt": None,
                "message": "No prompt stored yet. Generate a response to see.",
            }
        )

    return JSONResponse(
        content={
            "prompt": data.get("prompt"),
            "output": data.get("output"),
            "timestamp": data.get("timestamp"),
            "originalMessage": data.get("message"),
            "provider": data.get("provider"),
        }
    )


def make_snapshot_handler(key: KVKey, source_path: str) -> Callable:
    """Build a GET handler returning the snapshot stored under ``key``."""

    async def get_latest_prompt(
        request: Request,
        store: KVStore = Depends(get_kv_store),
    ) -> JSONResponse:
        request_id = get_request_id(request)
        try:
            data = await _read_snapshot(store, key)
        except KVStoreError as e:
            logger.error("[%s] Failed to read %s: %s", request_id, key.value, e)
            return error_response(ResponseCode.STORAGE_ERROR, request_id=request_id)

        if not data:
            return JSONResponse(
                content={
                    "message": f"No prompt stored yet. Call the {source_path} endpoint first."
                }
            )
        return JSONResponse(content=data)

    get_latest_prompt.__name__ = f"get_{key.value.lower()}"
    return get_latest_prompt
