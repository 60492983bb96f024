"""Reply generation shared by the JSON and streaming endpoints.

Both endpoints follow the same sequence: render the transcript, read the
runtime config, check credits, build the prompt, dispatch, then parse, charge
and respond. Only the delivery of the text differs.
"""

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import Field

from apps.common import CamelModel
from config import get_settings
from llm.parsing import extract_structured_reply
from llm.prompts import (
    ChatMessage,
    GenerationPrompt,
    PromptTask,
    StyleSpec,
    build_generation_prompt,
    render_task_transcript,
)
from llm.types import ProviderResult
from services import KVKey, PromptRecorder

logger = logging.getLogger(__name__)

EMPTY_RESPONSE_TEXT = "Cannot get response from LLM"


class GenerateRequest(CamelModel):
    """Request body for reply generation."""

    context: list[ChatMessage] = Field(
        ..., description="Conversation history, oldest first"
    )
    message: str = Field(..., min_length=1, description="Message to reply to")
    spec: StyleSpec | None = Field(None, description="Optional persona and sliders")
    user_id: str | None = Field(None, description="Metered user; omit to skip credits")


def build_reply_prompt(
    body: GenerateRequest, config: Mapping[str, Any]
) -> GenerationPrompt:
    transcript = render_task_transcript(
        PromptTask.REPLY, body.context, get_settings().max_context_turns
    )
    return build_generation_prompt(transcript, body.message, body.spec, config)


def reply_fields(text: str, structured: bool) -> dict[str, Any]:
    """Response (and reasoning, when requested) from the model output.

    In structured-reasoning mode unparseable output falls back to the raw text.
    """
    if structured:
        parsed = extract_structured_reply(text)
        if parsed is not None:
            return {"response": parsed.response, "reasoning": parsed.reasoning}
        logger.warning("Structured reply was not valid JSON, returning raw text")
    return {"response": text or EMPTY_RESPONSE_TEXT}


def record_full_prompt(
    recorder: PromptRecorder,
    prompt: GenerationPrompt,
    body: GenerateRequest,
    result: ProviderResult,
) -> None:
    """Snapshot the structured-reasoning prompt for the admin preview."""
    if not prompt.expects_structured_reasoning:
        return
    recorder.record_in_background(
        KVKey.CURRENT_FULL_PROMPT,
        {
            "prompt": prompt.prompt_text,
            "message": body.message,
            "output": result.text if result.ok else result.detail,
            "provider": result.provider_name,
        },
    )
