"""Prompt building: transcript formatting, personas and task templates."""

from llm.prompts.conversation import ChatMessage, Sender, Turn, group_turns, render_transcript
from llm.prompts.engine import (
    GenerationPrompt,
    PromptTask,
    build_consultation_prompt,
    build_direction_prompt,
    build_generation_prompt,
    build_grade_prompt,
    build_intent_prompt,
    render_task_transcript,
)
from llm.prompts.style import ReplyDirection, StyleSpec, resolve_persona
from llm.prompts.templates import DEFAULT_RESPONSE_CRITERIA, DEFAULT_SYSTEM_PROMPT

__all__ = [
    "ChatMessage",
    "Sender",
    "Turn",
    "group_turns",
    "render_transcript",
    "GenerationPrompt",
    "PromptTask",
    "build_consultation_prompt",
    "build_direction_prompt",
    "build_generation_prompt",
    "build_grade_prompt",
    "build_intent_prompt",
    "render_task_transcript",
    "ReplyDirection",
    "StyleSpec",
    "resolve_persona",
    "DEFAULT_RESPONSE_CRITERIA",
    "DEFAULT_SYSTEM_PROMPT",
]
