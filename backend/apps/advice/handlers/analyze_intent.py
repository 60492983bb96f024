"""POST /analyze-intent - Read the other person's latest message.

Returns the model's JSON analysis (intent, emotion, subtext, interest level
and reply directions). Unlike reply generation there is no raw-text fallback:
output that is not a JSON object is a 500.
"""

import logging
import uuid
from datetime import UTC, datetime

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
    build_intent_prompt,
    render_task_transcript,
)
from responses import ResponseCode, error_response
from services import ConfigCache, CreditLedger, KVKey, PromptRecorder

logger = logging.getLogger(__name__)


class AnalyzedMessage(CamelModel):
    text: str = Field(..., min_length=1)
    timestamp: datetime | None = Field(None, description="When it was sent")


class AnalyzeIntentRequest(CamelModel):
    """Request body for intent analysis."""

    message: AnalyzedMessage
    context: list[ChatMessage] = Field(..., description="Conversation history")
    user_id: str | None = None
    reference_time: datetime | None = Field(
        None, description="Time the message age is measured from (default: now)"
    )


async def analyze_intent(
    body: AnalyzeIntentRequest,
    request: Request,
    config_cache: ConfigCache = Depends(get_config_cache),
    credit_ledger: CreditLedger = Depends(get_credit_ledger),
    llm_service: LLMService = Depends(get_llm_service),
    recorder: PromptRecorder = Depends(get_prompt_recorder),
) -> JSONResponse:
    """Analyze a message. Returns ``{analysis, creditsRemaining?}``."""
    request_id = get_request_id(request)
    logger.info("[%s] Analyze intent", request_id)

    config = await config_cache.get_all()

    if body.user_id:
        status = await credit_ledger.check_credits(body.user_id)
        if not status.allowed:
            logger.info("[%s] Credit limit reached for %s", request_id, body.user_id)
            return credit_limit_response(status, request_id)

    transcript = render_task_transcript(
        PromptTask.ANALYZE_INTENT, body.context, get_settings().max_context_turns
    )
    prompt = build_intent_prompt(
        transcript,
        body.message.text,
        config,
        sent_at=body.message.timestamp,
        reference_time=body.reference_time or datetime.now(UTC),
    )

    result = await llm_service.generate(prompt, config)
    recorder.record_in_background(
        KVKey.LATEST_ANALYZE_INTENT_PROMPT,
        {
            "prompt": prompt,
            "output": result.text if result.ok else result.detail,
            "message": body.message.text,
            "provider": result.provider_name,
        },
    )

    if not result.ok:
        return provider_error_response(result, request_id)

    parsed = parse_json_response(result.text)
    if parsed is None:
        logger.error("[%s] Analysis output is not JSON", request_id)
        return error_response(
            ResponseCode.UNPARSEABLE_OUTPUT,
            request_id=request_id,
            rawResponse=result.text,
        )

    content = {
        "analysis": {
            **parsed,
            "analysisTimestamp": datetime.now(UTC).isoformat(),
            "messageId": str(uuid.uuid4()),
        }
    }
    if body.user_id:
        charged = await credit_ledger.charge(body.user_id)
        content["creditsRemaining"] = charged.remaining_count

    return JSONResponse(content=content)
