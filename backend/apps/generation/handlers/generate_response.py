"""POST /generate-response - Generate a reply to a message."""

import logging
import time

from fastapi import Depends, Request
from fastapi.responses import JSONResponse

from apps.common import (
    credit_limit_response,
    get_request_id,
    provider_error_response,
    timing_body,
)
from apps.generation.reply import (
    GenerateRequest,
    build_reply_prompt,
    record_full_prompt,
    reply_fields,
)
from dependencies import (
    get_config_cache,
    get_credit_ledger,
    get_llm_service,
    get_prompt_recorder,
)
from llm import LLMService
from services import ConfigCache, CreditLedger, PromptRecorder

logger = logging.getLogger(__name__)


async def generate_response(
    body: GenerateRequest,
    request: Request,
    config_cache: ConfigCache = Depends(get_config_cache),
    credit_ledger: CreditLedger = Depends(get_credit_ledger),
    llm_service: LLMService = Depends(get_llm_service),
    recorder: PromptRecorder = Depends(get_prompt_recorder),
) -> JSONResponse:
    """Generate a single reply.

    Returns ``{response, usage, provider, timing}``, plus ``reasoning`` in
    structured-reasoning mode and ``creditsRemaining`` when a userId is given.
    """
    start = time.perf_counter()
    request_id = get_request_id(request)
    logger.info("[%s] Generate response (%d messages)", request_id, len(body.context))

    config = await config_cache.get_all()

    if body.user_id:
        status = await credit_ledger.check_credits(body.user_id)
        if not status.allowed:
            logger.info("[%s] Credit limit reached for %s", request_id, body.user_id)
            return credit_limit_response(status, request_id)

    prompt = build_reply_prompt(body, config)
    result = await llm_service.generate(prompt.prompt_text, config)
    record_full_prompt(recorder, prompt, body, result)

    if not result.ok:
        return provider_error_response(result, request_id, timing=timing_body(start))

    content = {
        **reply_fields(result.text, prompt.expects_structured_reasoning),
        "usage": result.usage.to_dict(),
        "provider": result.provider_name,
    }
    if body.user_id:
        charged = await credit_ledger.charge(body.user_id)
        content["creditsRemaining"] = charged.remaining_count

    content["timing"] = timing_body(start, result.duration_ms)
    logger.info(
        "[%s] Generated via %s in %dms",
        request_id,
        result.provider_name,
        content["timing"]["totalDuration"],
    )
    return JSONResponse(content=content)
