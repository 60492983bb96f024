"""Persona and slider parameters that shape reply tone."""

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_PERSONA = "Rizz"
DEFAULT_SLIDER_VALUE = 50

PERSONAS: dict[str, str] = {
    "Chad": "Your persona is Chad: confident, blunt, high-status energy.",
    "Rizz": "Your persona is Rizz: smooth, wordplay, flirty finesse.",
    "Simp": "Your persona is Simp: sweet, wholesome, try-hard vibes.",
    "Main Character": (
        "Your persona is Main Character: dramatic, cinematic, larger-than-life tone."
    ),
}


@dataclass(frozen=True)
class SliderAxis:
    key: str
    label: str
    low: str
    high: str


SLIDER_AXES: tuple[SliderAxis, ...] = (
    SliderAxis("spiciness", "Spiciness", "mild teasing", "heavy innuendo"),
    SliderAxis("boldness", "Boldness", "reserved", "alpha assertive"),
    SliderAxis("thirst", "Thirst", "subtle interest", "down bad"),
    SliderAxis("energy", "Energy", "chill", "hype/excited"),
    SliderAxis("toxicity", "Toxicity", "a nice guy", "a villain arc"),
    SliderAxis("humour", "Humour", "dry wit", "full clown"),
    SliderAxis("emojiUse", "Emoji Use", "clean text", "Gen Z emoji spam"),
)

_AXIS_KEYS = {axis.key for axis in SLIDER_AXES}


class StyleSpec(BaseModel):
    """Caller-chosen persona and slider values (0-100).

    Also accepts the flat ``{"filter": ..., "spiciness": ...}`` shape.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    persona: str | None = None
    sliders: dict[str, int] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def accept_flat_shape(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if "persona" not in data and "filter" in data:
            data["persona"] = data.pop("filter")
        flat = {k: data.pop(k) for k in list(data) if k in _AXIS_KEYS}
        if flat:
            data["sliders"] = {**flat, **(data.get("sliders") or {})}
        return data

    @field_validator("sliders")
    @classmethod
    def validate_range(cls, v: dict[str, int]) -> dict[str, int]:
        for key, value in v.items():
            if not 0 <= value <= 100:
                raise ValueError(f"slider '{key}' must be between 0 and 100")
        return v


class ReplyDirection(BaseModel):
    """A suggested way to answer, as produced by intent analysis."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    label: str = Field(..., min_length=1)
    tone: str = Field(..., min_length=1)
    description: str | None = None
    example: str | None = None


def resolve_persona(persona: str | None) -> str:
    """Persona description; unknown or missing keys get the default persona."""
    if persona and persona in PERSONAS:
        return PERSONAS[persona]
    return PERSONAS[DEFAULT_PERSONA]


def slider_value(spec: StyleSpec, axis: SliderAxis) -> int:
    return spec.sliders.get(axis.key, DEFAULT_SLIDER_VALUE)


def render_style_block(spec: StyleSpec) -> str:
    """Persona line followed by one annotation per slider axis."""
    lines = [
        resolve_persona(spec.persona),
        "",
        "Fine-tune the response based on the following sliders (0-100 scale):",
    ]
    for axis in SLIDER_AXES:
        lines.append(f"- {axis.label} ({slider_value(spec, axis)}): {axis.low} ... {axis.high}")
    return "\n".join(lines)
