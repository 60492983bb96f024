"""POST /generate-from-direction - Write a reply in a chosen direction."""

import logging

from fastapi import Depends, Request
from fastapi.responses import JSONResponse
from pydantic import Field

from apps.common import (
    CamelModel,
    credit_limit_response,
    get_request_id,
    provider_error_response,
)
from config import get_settings
from dependencies import (
    get_config_cache,
    get_credit_ledger,
    get_llm_service,
    get_prompt_recorder,
)
from llm import LLMService
from llm.parsing import parse_json_response
from llm.prompts import (
    ChatMessage,
    PromptTask,
    ReplyDirection,
    build_direction_prompt,
    render_task_transcript,
)
from responses import ResponseCode, error_response
from services import ConfigCache, CreditLedger, KVKey, PromptRecorder

logger = logging.getLogger(__name__)


class DirectionRequest(CamelModel):
    """Request body for direction-guided replies."""

    direction: ReplyDirection
    message_text: str = Field(..., min_length=1, description="Message to reply to")
    context: list[ChatMessage] = Field(..., description="Conversation history")
    user_id: str | None = None


def _text_field(parsed: dict, key: str) -> str:
    value = parsed.get(key)
    return value if isinstance(value, str) else ""


async def generate_from_direction(
    body: DirectionRequest,
    request: Request,
    config_cache: ConfigCache = Depends(get_config_cache),
    credit_ledger: CreditLedger = Depends(get_credit_ledger),
    llm_service: LLMService = Depends(get_llm_service),
    recorder: PromptRecorder = Depends(get_prompt_recorder),
) -> JSONResponse:
    """Generate a reply. Returns ``{result: {message, reasoning, emotion}}``."""
    request_id = get_request_id(request)
    logger.info("[%s] Generate from direction: %s", request_id, body.direction.label)

    config = await config_cache.get_all()

    if body.user_id:
        status = await credit_ledger.check_credits(body.user_id)
        if not status.allowed:
            logger.info("[%s] Credit limit reached for %s", request_id, body.user_id)
            return credit_limit_response(status, request_id)

    transcript = render_task_transcript(
        PromptTask.FROM_DIRECTION, body.context, get_settings().max_context_turns
    )
    prompt = build_direction_prompt(transcript, body.message_text, body.direction, config)

    result = await llm_service.generate(prompt, config)
    recorder.record_in_background(
        KVKey.LATEST_GENERATE_FROM_DIRECTION_PROMPT,
        {
            "prompt": prompt,
            "output": result.text if result.ok else result.detail,
            "messageText": body.message_text,
            "direction": body.direction.model_dump(exclude_none=True),
            "provider": result.provider_name,
        },
    )

    if not result.ok:
        return provider_error_response(result, request_id)

    parsed = parse_json_response(result.text)
    if parsed is None:
        logger.error("[%s] Direction output is not JSON", request_id)
        return error_response(
            ResponseCode.UNPARSEABLE_OUTPUT,
            request_id=request_id,
            rawResponse=result.text,
        )

    content = {
        "result": {
            "message": _text_field(parsed, "message"),
            "reasoning": _text_field(parsed, "reasoning"),
            "emotion": _text_field(parsed, "emotion"),
        }
    }
    if body.user_id:
        charged = await credit_ledger.charge(body.user_id)
        content["creditsRemaining"] = charged.remaining_count

    return JSONResponse(content=content)
