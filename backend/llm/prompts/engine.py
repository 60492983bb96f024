"""Prompt template engine.

Every task prompt is a base instruction (overridable through runtime config)
plus fixed scaffolding: transcript delimiters, the task inputs and a closing
instruction. Builders are pure functions of their arguments and the config
snapshot, so the same inputs always give byte-identical text.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from llm.prompts.conversation import (
    DEFAULT_MAX_TURNS,
    ChatMessage,
    Sender,
    render_transcript,
)
from llm.prompts.style import ReplyDirection, StyleSpec, render_style_block
from llm.prompts.templates import (
    ANALYZE_INTENT_FORMAT,
    DEFAULT_ANALYZE_INTENT_PROMPT,
    DEFAULT_GENERATE_FROM_DIRECTION_PROMPT,
    DEFAULT_GRADE_PROMPT,
    DEFAULT_RESPONSE_CRITERIA,
    DEFAULT_SUGGESTION_PROMPT,
    DEFAULT_SYSTEM_PROMPT,
    GENERATE_FROM_DIRECTION_FORMAT,
    REASONING_INSTRUCTION,
    REPLY_ONLY_INSTRUCTION,
    SUGGESTION_GENERAL_TASK,
    SUGGESTION_LENGTH_LIMIT,
    SUGGESTION_SELECTED_TASK,
    TRANSCRIPT_LABEL_NOTE,
)

RESPONSE_CRITERIA_FIELD = "response_criteria"
REASONING_MODE_FIELD = "reasoning_mode"


class PromptTask(str, Enum):
    """Kinds of prompt the engine builds."""

    REPLY = "reply"
    CONSULTATION = "consultation"
    GRADE = "grade"
    ANALYZE_INTENT = "analyze_intent"
    FROM_DIRECTION = "from_direction"

    @property
    def override_field(self) -> str:
        """Config snapshot field holding this task's base instruction."""
        return _OVERRIDE_FIELDS[self]

    @property
    def default_instruction(self) -> str:
        return _DEFAULT_INSTRUCTIONS[self]


_OVERRIDE_FIELDS: dict[PromptTask, str] = {
    PromptTask.REPLY: "system_prompt",
    PromptTask.CONSULTATION: "suggestion_prompt",
    PromptTask.GRADE: "grade_prompt",
    PromptTask.ANALYZE_INTENT: "analyze_intent_prompt",
    PromptTask.FROM_DIRECTION: "direction_prompt",
}

_DEFAULT_INSTRUCTIONS: dict[PromptTask, str] = {
    PromptTask.REPLY: DEFAULT_SYSTEM_PROMPT,
    PromptTask.CONSULTATION: DEFAULT_SUGGESTION_PROMPT,
    PromptTask.GRADE: DEFAULT_GRADE_PROMPT,
    PromptTask.ANALYZE_INTENT: DEFAULT_ANALYZE_INTENT_PROMPT,
    PromptTask.FROM_DIRECTION: DEFAULT_GENERATE_FROM_DIRECTION_PROMPT,
}

_HER_LABELS = {Sender.SELF: "You", Sender.OTHER: "Her"}
_THEM_LABELS = {Sender.SELF: "You", Sender.OTHER: "Them"}

TRANSCRIPT_LABELS: dict[PromptTask, Mapping[Sender, str]] = {
    PromptTask.REPLY: _HER_LABELS,
    PromptTask.CONSULTATION: _THEM_LABELS,
    PromptTask.GRADE: _THEM_LABELS,
    PromptTask.ANALYZE_INTENT: _HER_LABELS,
    PromptTask.FROM_DIRECTION: _HER_LABELS,
}


@dataclass(frozen=True)
class GenerationPrompt:
    prompt_text: str
    expects_structured_reasoning: bool


def render_task_transcript(
    task: PromptTask,
    messages: Sequence[ChatMessage],
    max_turns: int = DEFAULT_MAX_TURNS,
) -> str:
    """Render history with the sender labels used by ``task``."""
    return render_transcript(messages, max_turns, TRANSCRIPT_LABELS[task])


def base_instruction(task: PromptTask, config: Mapping[str, Any]) -> str:
    """Configured override for the task, or the built-in text."""
    override = config.get(task.override_field)
    if isinstance(override, str) and override.strip():
        return override
    return task.default_instruction


def _section(transcript: str, heading: str | None = None) -> str:
    lines = [heading] if heading else []
    lines += ["---", transcript, "---"]
    return "\n".join(lines)


def _join(*blocks: str | None) -> str:
    return "\n\n".join(block for block in blocks if block)


def build_generation_prompt(
    transcript: str,
    target_message: str,
    style: StyleSpec | None,
    config: Mapping[str, Any],
) -> GenerationPrompt:
    """Prompt for writing a reply to ``target_message``.

    The style block is included only when the caller supplied a style spec.
    In structured-reasoning mode the closing asks for a JSON object with the
    reply and the model's rationale instead of bare text.
    """
    criteria = config.get(RESPONSE_CRITERIA_FIELD)
    if not isinstance(criteria, str) or not criteria.strip():
        criteria = DEFAULT_RESPONSE_CRITERIA
    reasoning = bool(config.get(REASONING_MODE_FIELD))

    prompt = _join(
        base_instruction(PromptTask.REPLY, config),
        render_style_block(style) if style is not None else None,
        TRANSCRIPT_LABEL_NOTE,
        _section(transcript, "[context]"),
        f'Message to reply to: "{target_message}"',
        criteria,
        REASONING_INSTRUCTION if reasoning else REPLY_ONLY_INSTRUCTION,
    )
    return GenerationPrompt(prompt_text=prompt, expects_structured_reasoning=reasoning)


def build_consultation_prompt(
    transcript: str,
    config: Mapping[str, Any],
    selected_message: str | None = None,
    question: str | None = None,
) -> str:
    """Advice prompt; selected message and question each add a clause."""
    if selected_message:
        task = (
            f'The user has selected the following message: "{selected_message}"'
            f"\n\n{SUGGESTION_SELECTED_TASK}"
        )
    else:
        task = SUGGESTION_GENERAL_TASK

    return _join(
        base_instruction(PromptTask.CONSULTATION, config),
        _section(transcript),
        task,
        f'The user\'s specific question: "{question}"' if question else None,
        SUGGESTION_LENGTH_LIMIT,
    )


def build_grade_prompt(
    transcript: str,
    response_to_grade: str,
    config: Mapping[str, Any],
) -> str:
    """Prompt asking for a single integer grade in [-100, 100]."""
    return _join(
        base_instruction(PromptTask.GRADE, config),
        _section(transcript, "Conversation History:"),
        f'Response to grade: "{response_to_grade}"',
        "Grade:",
    )


def describe_age(sent_at: datetime, reference_time: datetime) -> str:
    """Human phrase for how long before ``reference_time`` a message was sent."""
    if sent_at.tzinfo is None:
        sent_at = sent_at.replace(tzinfo=UTC)
    if reference_time.tzinfo is None:
        reference_time = reference_time.replace(tzinfo=UTC)

    seconds = int((reference_time - sent_at).total_seconds())
    if seconds < 60:
        return "just now"
    minutes = seconds // 60
    if minutes < 60:
        return f"{minutes} minute{'s' if minutes != 1 else ''} ago"
    hours = minutes // 60
    if hours < 24:
        return f"{hours} hour{'s' if hours != 1 else ''} ago"
    days = hours // 24
    return f"{days} day{'s' if days != 1 else ''} ago"


def build_intent_prompt(
    transcript: str,
    message_text: str,
    config: Mapping[str, Any],
    *,
    sent_at: datetime | None = None,
    reference_time: datetime | None = None,
) -> str:
    """Prompt asking for a JSON analysis of the other person's message.

    The age hint is only added when both timestamps are supplied.
    """
    timing = None
    if sent_at is not None and reference_time is not None:
        timing = f"This message was sent {describe_age(sent_at, reference_time)}."

    return _join(
        base_instruction(PromptTask.ANALYZE_INTENT, config),
        TRANSCRIPT_LABEL_NOTE,
        _section(transcript, "[context]"),
        f'Message to analyze: "{message_text}"',
        timing,
        ANALYZE_INTENT_FORMAT,
    )


def build_direction_prompt(
    transcript: str,
    message_text: str,
    direction: ReplyDirection,
    config: Mapping[str, Any],
) -> str:
    """Prompt asking for a JSON reply that follows a chosen direction."""
    direction_lines = [
        f"Direction: {direction.label}",
        f"Tone: {direction.tone}",
    ]
    if direction.description:
        direction_lines.append(f"Description: {direction.description}")
    if direction.example:
        direction_lines.append(f'Example of the style: "{direction.example}"')

    return _join(
        base_instruction(PromptTask.FROM_DIRECTION, config),
        TRANSCRIPT_LABEL_NOTE,
        _section(transcript, "[context]"),
        f'Message to reply to: "{message_text}"',
        "\n".join(direction_lines),
        GENERATE_FROM_DIRECTION_FORMAT,
    )
