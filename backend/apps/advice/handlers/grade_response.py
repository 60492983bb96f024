"""POST /grade-response - Score a candidate reply from -100 to 100."""

import logging

from fastapi import Depends, Request
from fastapi.responses import JSONResponse
from pydantic import Field

from apps.common import CamelModel, get_request_id, provider_error_response
from config import get_settings
from dependencies import get_config_cache, get_llm_service, get_prompt_recorder
from llm import LLMService
from llm.parsing import parse_grade
from llm.prompts import ChatMessage, PromptTask, build_grade_prompt, render_task_transcript
from services import ConfigCache, KVKey, PromptRecorder

logger = logging.getLogger(__name__)


class GradeRequest(CamelModel):
    """Request body for grading."""

    context: list[ChatMessage] = Field(..., description="Conversation history")
    response: str = Field(..., min_length=1, description="Reply to grade")


async def grade_response(
    body: GradeRequest,
    request: Request,
    config_cache: ConfigCache = Depends(get_config_cache),
    llm_service: LLMService = Depends(get_llm_service),
    recorder: PromptRecorder = Depends(get_prompt_recorder),
) -> JSONResponse:
    """Grade a reply. Output that is not a number grades as 0."""
    request_id = get_request_id(request)
    logger.info("[%s] Grade response", request_id)

    config = await config_cache.get_all()
    transcript = render_task_transcript(
        PromptTask.GRADE, body.context, get_settings().max_context_turns
    )
    prompt = build_grade_prompt(transcript, body.response, config)

    result = await llm_service.generate(prompt, config)
    recorder.record_in_background(
        KVKey.LATEST_GRADE_PROMPT,
        {
            "prompt": prompt,
            "output": result.text if result.ok else result.detail,
            "response": body.response,
            "provider": result.provider_name,
        },
    )

    if not result.ok:
        return provider_error_response(result, request_id)

    grade = parse_grade(result.text)
    if grade == 0 and result.text.strip() not in ("0", "+0", "-0"):
        logger.warning("[%s] Unparseable grade output: %r", request_id, result.text[:50])

    return JSONResponse(content={"grade": grade})
