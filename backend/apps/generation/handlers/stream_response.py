"""POST /generate-response-stream - Stream a reply as server-sent events.

Events (``data: {json}``):
- type: "chunk" - Text fragment, in arrival order
- type: "complete" - Final response, usage, provider and timing
- type: "done" - Stream finished
- type: "error" - Generation failed; the stream ends after it
"""

import asyncio
import logging
import time

from fastapi import Depends, Request, Response
from fastapi.responses import StreamingResponse

from apps.common import credit_limit_response, get_request_id, sse_event, timing_body
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


async def stream_response(
    body: GenerateRequest,
    request: Request,
    config_cache: ConfigCache = Depends(get_config_cache),
    credit_ledger: CreditLedger = Depends(get_credit_ledger),
    llm_service: LLMService = Depends(get_llm_service),
    recorder: PromptRecorder = Depends(get_prompt_recorder),
) -> Response:
    """Stream a reply.

    Validation and credit failures are returned as plain JSON errors before
    the stream opens; provider failures arrive as a terminal error event.
    """
    start = time.perf_counter()
    request_id = get_request_id(request)
    logger.info("[%s] Stream response (%d messages)", request_id, len(body.context))

    config = await config_cache.get_all()

    if body.user_id:
        status = await credit_ledger.check_credits(body.user_id)
        if not status.allowed:
            logger.info("[%s] Credit limit reached for %s", request_id, body.user_id)
            return credit_limit_response(status, request_id)

    prompt = build_reply_prompt(body, config)

    async def generate_sse_events():
        chunks: asyncio.Queue[str | None] = asyncio.Queue()

        async def run_generation():
            try:
                return await llm_service.generate_stream(
                    prompt.prompt_text, chunks.put_nowait, config
                )
            finally:
                chunks.put_nowait(None)

        task = asyncio.create_task(run_generation())
        try:
            while True:
                chunk = await chunks.get()
                if chunk is None:
                    break
                yield sse_event({"type": "chunk", "content": chunk})

            result = await task
            record_full_prompt(recorder, prompt, body, result)

            if not result.ok:
                logger.warning("[%s] Stream failed: %s", request_id, result.detail)
                yield sse_event(
                    {
                        "type": "error",
                        "status": result.http_status,
                        **result.to_dict(),
                        "timing": timing_body(start),
                    }
                )
                return

            complete = {
                "type": "complete",
                **reply_fields(result.text, prompt.expects_structured_reasoning),
                "usage": result.usage.to_dict(),
                "provider": result.provider_name,
            }
            if body.user_id:
                charged = await credit_ledger.charge(body.user_id)
                complete["creditsRemaining"] = charged.remaining_count
            complete["timing"] = timing_body(start, result.duration_ms)

            yield sse_event(complete)
            yield sse_event({"type": "done"})

        except Exception as e:
            logger.exception("[%s] Stream error", request_id)
            yield sse_event({"type": "error", "error": str(e)})
        finally:
            if not task.done():
                task.cancel()

    return StreamingResponse(
        generate_sse_events(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Request-ID": request_id,
        },
    )
