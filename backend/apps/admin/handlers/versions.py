"""Configuration version history.

- POST /versions/save - Snapshot the given config values
- GET /versions/history - All snapshots, newest first
- DELETE /versions/{version_id} - Remove a snapshot
"""

import logging
from typing import Any

from fastapi import Depends, Request
from fastapi.responses import JSONResponse
from pydantic import Field

from apps.common import CamelModel, get_request_id
from db import KVStoreError
from dependencies import get_version_service
from responses import ResponseCode, error_response
from services import VersionNotFoundError, VersionService

logger = logging.getLogger(__name__)


class SaveVersionRequest(CamelModel):
    description: str | None = None
    config_data: dict[str, Any] | None = Field(
        None,
        description="SYSTEM_PROMPT, RESPONSE_CRITERIA, LLM_MODEL_NAME, LLM_PROVIDER",
    )


async def save_version(
    body: SaveVersionRequest,
    request: Request,
    version_service: VersionService = Depends(get_version_service),
) -> JSONResponse:
    request_id = get_request_id(request)
    try:
        version = await version_service.save_new_version(
            body.config_data, body.description
        )
    except KVStoreError as e:
        logger.error("[%s] Failed to save version: %s", request_id, e)
        return error_response(
            ResponseCode.STORAGE_ERROR, "Failed to save new version", request_id
        )
    return JSONResponse(content={"success": True, "version": version})


async def get_version_history(
    request: Request,
    version_service: VersionService = Depends(get_version_service),
) -> JSONResponse:
    request_id = get_request_id(request)
    try:
        versions = await version_service.get_version_history()
    except KVStoreError as e:
        logger.error("[%s] Failed to read versions: %s", request_id, e)
        return error_response(
            ResponseCode.STORAGE_ERROR, "Failed to get version history", request_id
        )
    return JSONResponse(content=versions)


async def delete_version(
    version_id: str,
    request: Request,
    version_service: VersionService = Depends(get_version_service),
) -> JSONResponse:
    request_id = get_request_id(request)
    try:
        await version_service.delete_version(version_id)
    except VersionNotFoundError as e:
        return error_response(ResponseCode.VERSION_NOT_FOUND, str(e), request_id)
    except KVStoreError as e:
        logger.error("[%s] Failed to delete version: %s", request_id, e)
        return error_response(
            ResponseCode.STORAGE_ERROR, "Failed to delete version", request_id
        )
    return JSONResponse(content={"success": True})
