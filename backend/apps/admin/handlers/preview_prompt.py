"""POST /preview-prompt - Run an arbitrary prompt against the active model."""

import logging

from fastapi import Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from apps.common import get_request_id, provider_error_response
from dependencies import get_llm_service
from llm import LLMService

logger = logging.getLogger(__name__)


class PreviewPromptRequest(BaseModel):
    prompt: str = Field(..., min_length=1, description="Full prompt text")


async def preview_prompt(
    body: PreviewPromptRequest,
    request: Request,
    llm_service: LLMService = Depends(get_llm_service),
) -> JSONResponse:
    request_id = get_request_id(request)
    logger.info("[%s] Preview prompt (%d chars)", request_id, len(body.prompt))

    result = await llm_service.generate(body.prompt)
    if not result.ok:
        return provider_error_response(result, request_id)

    return JSONResponse(content={"response": result.text})
