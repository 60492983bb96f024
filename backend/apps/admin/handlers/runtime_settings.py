"""GET/POST for the text settings kept in the key-value store.

Each endpoint reads one setting straight from the store (falling back to its
default) and writes it back, invalidating the config cache so the next
request sees the new value. An empty string resets a prompt to its default.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from fastapi import Body, Depends, Request
from fastapi.responses import JSONResponse

from apps.common import get_request_id
from db import KVStore, KVStoreError
from dependencies import get_config_cache, get_kv_store, get_provider_registry
from llm import ProviderRegistry
from llm.catalog import is_valid_model_for_provider
from llm.prompts import PromptTask
from llm.prompts.engine import RESPONSE_CRITERIA_FIELD
from llm.service import MODEL_FIELD, PROVIDER_FIELD
from responses import ResponseCode, error_response
from services import ConfigCache, read_setting

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SettingEndpoint:
    path: str
    field: str
    body_key: str = "prompt"


SETTING_ENDPOINTS: tuple[SettingEndpoint, ...] = (
    SettingEndpoint("/system-prompt", PromptTask.REPLY.override_field),
    SettingEndpoint("/response-criteria", RESPONSE_CRITERIA_FIELD),
    SettingEndpoint("/llm-model", MODEL_FIELD, "modelName"),
    SettingEndpoint("/llm-provider", PROVIDER_FIELD, "provider"),
    SettingEndpoint("/suggestion-prompt", PromptTask.CONSULTATION.override_field),
    SettingEndpoint("/grade-response-prompt", PromptTask.GRADE.override_field),
    SettingEndpoint(
        "/analyze-intent-prompt", PromptTask.ANALYZE_INTENT.override_field
    ),
    SettingEndpoint(
        "/generate-from-direction-prompt", PromptTask.FROM_DIRECTION.override_field
    ),
)


def make_get_handler(endpoint: SettingEndpoint) -> Callable:
    """Build ``GET <path>`` returning ``{<body_key>: value}``."""

    async def get_setting(
        store: KVStore = Depends(get_kv_store),
        config_cache: ConfigCache = Depends(get_config_cache),
    ) -> dict[str, Any]:
        value = await read_setting(store, config_cache.setting(endpoint.field))
        return {endpoint.body_key: value}

    get_setting.__name__ = f"get_{endpoint.field}"
    return get_setting


def make_update_handler(endpoint: SettingEndpoint) -> Callable:
    """Build ``POST <path>`` accepting ``{<body_key>: str}``."""

    async def update_setting(
        request: Request,
        payload: dict[str, Any] = Body(...),
        store: KVStore = Depends(get_kv_store),
        config_cache: ConfigCache = Depends(get_config_cache),
        registry: ProviderRegistry = Depends(get_provider_registry),
    ) -> JSONResponse:
        request_id = get_request_id(request)
        value = payload.get(endpoint.body_key)
        if not isinstance(value, str):
            return error_response(
                ResponseCode.VALIDATION_ERROR,
                f"Missing {endpoint.body_key}",
                request_id,
            )

        if endpoint.field == PROVIDER_FIELD and value not in registry.names():
            return error_response(
                ResponseCode.VALIDATION_ERROR,
                f"Unknown LLM provider: {value}",
                request_id,
                error_details={"providers": registry.names()},
            )

        if endpoint.field == MODEL_FIELD:
            provider = (await config_cache.get_all())[PROVIDER_FIELD]
            if not is_valid_model_for_provider(provider, value):
                logger.warning(
                    "[%s] Model %s is not in the %s catalog", request_id, value, provider
                )

        setting = config_cache.setting(endpoint.field)
        try:
            await store.set(setting.key.value, value)
        except KVStoreError as e:
            logger.error("[%s] Failed to save %s: %s", request_id, setting.key.value, e)
            return error_response(ResponseCode.STORAGE_ERROR, request_id=request_id)

        config_cache.invalidate()
        logger.info("[%s] Updated %s", request_id, setting.key.value)
        return JSONResponse(content={"success": True})

    update_setting.__name__ = f"update_{endpoint.field}"
    return update_setting
