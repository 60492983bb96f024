"""POST /suggestion - Dating advice about a conversation."""

import logging

from fastapi import Depends, Request
from fastapi.responses import JSONResponse
from pydantic import Field

from apps.common import CamelModel, get_request_id, provider_error_response
from config import get_settings
from dependencies import get_config_cache, get_llm_service, get_prompt_recorder
from llm import LLMService
from llm.prompts import (
    ChatMessage,
    PromptTask,
    build_consultation_prompt,
    render_task_transcript,
)
from services import ConfigCache, KVKey, PromptRecorder

logger = logging.getLogger(__name__)


class SuggestionRequest(CamelModel):
    """Request body for advice."""

    context: list[ChatMessage] = Field(..., description="Conversation history")
    selected_message: str | None = Field(
        None, description="Message the user wants advice about"
    )
    question: str | None = Field(None, description="Free-form question")


async def get_suggestion(
    body: SuggestionRequest,
    request: Request,
    config_cache: ConfigCache = Depends(get_config_cache),
    llm_service: LLMService = Depends(get_llm_service),
    recorder: PromptRecorder = Depends(get_prompt_recorder),
) -> JSONResponse:
    """Advise the user on the conversation. Returns ``{suggestion}``."""
    request_id = get_request_id(request)
    logger.info(
        "[%s] Suggestion (selected=%s, question=%s)",
        request_id,
        bool(body.selected_message),
        bool(body.question),
    )

    config = await config_cache.get_all()
    transcript = render_task_transcript(
        PromptTask.CONSULTATION, body.context, get_settings().max_context_turns
    )
    prompt = build_consultation_prompt(
        transcript, config, body.selected_message, body.question
    )

    result = await llm_service.generate(prompt, config)
    recorder.record_in_background(
        KVKey.LATEST_SUGGESTION_PROMPT,
        {
            "prompt": prompt,
            "output": result.text if result.ok else result.detail,
            "selectedMessage": body.selected_message,
            "question": body.question,
            "provider": result.provider_name,
        },
    )

    if not result.ok:
        return provider_error_response(result, request_id)

    return JSONResponse(content={"suggestion": result.text})
