"""GET/POST /log-prompt - Structured-reasoning flag.

When enabled, reply prompts ask the model for ``{"response", "reasoning"}``
JSON and the full prompt is kept for /full-prompt-preview.
"""

import logging

from fastapi import Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from apps.common import get_request_id
from db import KVStore, KVStoreError
from dependencies import get_config_cache, get_kv_store
from llm.prompts.engine import REASONING_MODE_FIELD
from responses import ResponseCode, error_response
from services import ConfigCache, KVKey, read_setting

logger = logging.getLogger(__name__)


class LogPromptRequest(BaseModel):
    enabled: bool = False


async def get_log_prompt(
    store: KVStore = Depends(get_kv_store),
    config_cache: ConfigCache = Depends(get_config_cache),
) -> dict[str, bool]:
    enabled = await read_setting(store, config_cache.setting(REASONING_MODE_FIELD))
    return {"enabled": enabled}


async def set_log_prompt(
    body: LogPromptRequest,
    request: Request,
    store: KVStore = Depends(get_kv_store),
    config_cache: ConfigCache = Depends(get_config_cache),
) -> JSONResponse:
    request_id = get_request_id(request)
    try:
        await store.set(KVKey.LOG_PROMPT.value, body.enabled)
    except KVStoreError as e:
        logger.error("[%s] Failed to set LOG_PROMPT: %s", request_id, e)
        return error_response(ResponseCode.STORAGE_ERROR, request_id=request_id)

    config_cache.invalidate()
    logger.info("[%s] Structured reasoning %s", request_id, "on" if body.enabled else "off")
    return JSONResponse(content={"enabled": body.enabled})
