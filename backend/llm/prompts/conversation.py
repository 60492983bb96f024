"""Conversation formatting for prompts.

Groups raw messages into turns (maximal runs from one sender), keeps the most
recent turns and renders them as ``"<Label>: <text>"`` lines.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator

DEFAULT_MAX_TURNS = 20


class Sender(str, Enum):
    """Who sent a message, from the user's point of view."""

    SELF = "self"
    OTHER = "other"


class ChatMessage(BaseModel):
    """A message in the caller-supplied conversation history.

    Accepts ``{"sender": "self"|"other"}`` or the older
    ``{"is_from_me": bool}`` shape.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    sender: Sender
    text: str = ""
    timestamp: datetime | None = None

    @model_validator(mode="before")
    @classmethod
    def accept_is_from_me(cls, data: Any) -> Any:
        if isinstance(data, dict) and "sender" not in data and "is_from_me" in data:
            sender = Sender.SELF if data["is_from_me"] else Sender.OTHER
            data = {**data, "sender": sender}
        return data


@dataclass(frozen=True)
class Turn:
    """Consecutive messages from the same sender."""

    sender: Sender
    messages: tuple[ChatMessage, ...]


DEFAULT_LABELS: Mapping[Sender, str] = {Sender.SELF: "You", Sender.OTHER: "Her"}


def group_turns(messages: Sequence[ChatMessage]) -> list[Turn]:
    """Partition messages into turns in a single pass."""
    turns: list[Turn] = []
    current: list[ChatMessage] = []

    for msg in messages:
        if current and current[-1].sender != msg.sender:
            turns.append(Turn(sender=current[0].sender, messages=tuple(current)))
            current = []
        current.append(msg)

    if current:
        turns.append(Turn(sender=current[0].sender, messages=tuple(current)))
    return turns


def recent_turns(turns: Sequence[Turn], max_turns: int) -> list[Turn]:
    """Keep the last ``max_turns`` turns in chronological order."""
    if max_turns <= 0:
        return []
    return list(turns[-max_turns:])


def format_message(msg: ChatMessage, labels: Mapping[Sender, str] = DEFAULT_LABELS) -> str:
    return f"{labels[msg.sender]}: {msg.text}"


def render_transcript(
    messages: Sequence[ChatMessage],
    max_turns: int = DEFAULT_MAX_TURNS,
    labels: Mapping[Sender, str] = DEFAULT_LABELS,
) -> str:
    """Render the most recent turns of a conversation as text.

    Args:
        messages: Conversation history, oldest first.
        max_turns: Number of most recent turns to keep.
        labels: Display label per sender.

    Returns:
        Newline-joined lines, or an empty string for an empty history.
    """
    if not messages:
        return ""

    kept = recent_turns(group_turns(messages), max_turns)
    return "\n".join(
        format_message(msg, labels) for turn in kept for msg in turn.messages
    )
