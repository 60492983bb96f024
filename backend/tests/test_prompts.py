"""Tests for the prompt template engine."""

from datetime import UTC, datetime, timedelta

from llm.prompts import (
    PromptTask,
    ReplyDirection,
    StyleSpec,
    build_consultation_prompt,
    build_direction_prompt,
    build_generation_prompt,
    build_grade_prompt,
    build_intent_prompt,
    resolve_persona,
)
from llm.prompts.engine import REASONING_MODE_FIELD, RESPONSE_CRITERIA_FIELD, describe_age
from llm.prompts.style import DEFAULT_PERSONA, PERSONAS, render_style_block
from llm.prompts.templates import (
    DEFAULT_GRADE_PROMPT,
    DEFAULT_RESPONSE_CRITERIA,
    DEFAULT_SYSTEM_PROMPT,
    REASONING_INSTRUCTION,
    REPLY_ONLY_INSTRUCTION,
)

TRANSCRIPT = "Her: hey\nYou: hi"


class TestGenerationPrompt:
    """Tests for build_generation_prompt."""

    def test_defaults_when_config_empty(self):
        """Test built-in texts are used without overrides."""
        prompt = build_generation_prompt(TRANSCRIPT, "hey", None, {})

        assert prompt.prompt_text.startswith(DEFAULT_SYSTEM_PROMPT)
        assert DEFAULT_RESPONSE_CRITERIA in prompt.prompt_text
        assert prompt.prompt_text.endswith(REPLY_ONLY_INSTRUCTION)
        assert 'Message to reply to: "hey"' in prompt.prompt_text
        assert prompt.expects_structured_reasoning is False

    def test_override_text_used(self):
        """Test configured system prompt and criteria replace defaults."""
        config = {
            PromptTask.REPLY.override_field: "Be witty.",
            RESPONSE_CRITERIA_FIELD: "Keep it short.",
        }
        prompt = build_generation_prompt(TRANSCRIPT, "hey", None, config)

        assert prompt.prompt_text.startswith("Be witty.")
        assert "Keep it short." in prompt.prompt_text
        assert DEFAULT_SYSTEM_PROMPT not in prompt.prompt_text

    def test_blank_override_falls_back(self):
        """Test whitespace-only overrides count as unset."""
        config = {PromptTask.REPLY.override_field: "   "}
        prompt = build_generation_prompt(TRANSCRIPT, "hey", None, config)
        assert prompt.prompt_text.startswith(DEFAULT_SYSTEM_PROMPT)

    def test_structured_reasoning_mode(self):
        """Test the flag switches the closing to the JSON instruction."""
        prompt = build_generation_prompt(
            TRANSCRIPT, "hey", None, {REASONING_MODE_FIELD: True}
        )

        assert prompt.expects_structured_reasoning is True
        assert prompt.prompt_text.endswith(REASONING_INSTRUCTION)
        assert REPLY_ONLY_INSTRUCTION not in prompt.prompt_text

    def test_style_block_only_with_spec(self):
        """Test sliders appear only when a spec is supplied."""
        without = build_generation_prompt(TRANSCRIPT, "hey", None, {})
        with_spec = build_generation_prompt(
            TRANSCRIPT, "hey", StyleSpec(persona="Chad", sliders={"spiciness": 80}), {}
        )

        assert "Spiciness" not in without.prompt_text
        assert "- Spiciness (80): mild teasing ... heavy innuendo" in with_spec.prompt_text
        assert "- Boldness (50): reserved ... alpha assertive" in with_spec.prompt_text
        assert PERSONAS["Chad"] in with_spec.prompt_text

    def test_deterministic(self):
        """Test same inputs produce byte-identical prompts."""
        spec = StyleSpec(persona="Simp", sliders={"humour": 10})
        config = {REASONING_MODE_FIELD: True}

        first = build_generation_prompt(TRANSCRIPT, "hey", spec, config)
        second = build_generation_prompt(TRANSCRIPT, "hey", spec, config)

        assert first == second


class TestStyle:
    """Tests for persona resolution and style specs."""

    def test_unknown_persona_falls_back(self):
        """Test unrecognized personas resolve to the default."""
        assert resolve_persona("Wizard") == PERSONAS[DEFAULT_PERSONA]
        assert resolve_persona(None) == PERSONAS[DEFAULT_PERSONA]

    def test_flat_legacy_shape(self):
        """Test the flat filter/slider shape is accepted."""
        spec = StyleSpec.model_validate({"filter": "Chad", "thirst": 90, "energy": 20})

        assert spec.persona == "Chad"
        assert spec.sliders == {"thirst": 90, "energy": 20}

    def test_missing_axes_default(self):
        """Test axes not supplied render at 50."""
        block = render_style_block(StyleSpec())
        assert "- Emoji Use (50): clean text ... Gen Z emoji spam" in block
        assert PERSONAS[DEFAULT_PERSONA] in block


class TestConsultationPrompt:
    """Tests for build_consultation_prompt."""

    def test_general_advice(self):
        """Test no selection or question gives the general task only."""
        prompt = build_consultation_prompt(TRANSCRIPT, {})

        assert "selected the following message" not in prompt
        assert "specific question" not in prompt
        assert "flirting" in prompt

    def test_selected_message_clause(self):
        """Test a selected message adds its clause."""
        prompt = build_consultation_prompt(TRANSCRIPT, {}, selected_message="long. yours?")
        assert 'The user has selected the following message: "long. yours?"' in prompt

    def test_question_clause(self):
        """Test a question adds its clause independently."""
        prompt = build_consultation_prompt(TRANSCRIPT, {}, question="is she into me?")

        assert 'The user\'s specific question: "is she into me?"' in prompt
        assert "selected the following message" not in prompt

    def test_override_replaces_base(self):
        """Test the suggestion override replaces the base instruction."""
        config = {PromptTask.CONSULTATION.override_field: "Be blunt."}
        assert build_consultation_prompt(TRANSCRIPT, config).startswith("Be blunt.")


class TestGradePrompt:
    """Tests for build_grade_prompt."""

    def test_contains_rules_and_response(self):
        """Test the grading rules and the graded reply are included."""
        prompt = build_grade_prompt(TRANSCRIPT, "u up?", {})

        assert prompt.startswith(DEFAULT_GRADE_PROMPT)
        assert 'Response to grade: "u up?"' in prompt
        assert prompt.endswith("Grade:")


class TestIntentPrompt:
    """Tests for build_intent_prompt and message age."""

    def test_age_hint_from_supplied_times(self):
        """Test the age hint comes from the supplied timestamps."""
        now = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)
        prompt = build_intent_prompt(
            TRANSCRIPT,
            "long. yours?",
            {},
            sent_at=now - timedelta(minutes=5),
            reference_time=now,
        )

        assert "This message was sent 5 minutes ago." in prompt
        assert '"interestLevel"' in prompt

    def test_no_age_hint_without_timestamp(self):
        """Test no hint is added when the send time is unknown."""
        prompt = build_intent_prompt(TRANSCRIPT, "hey", {}, reference_time=datetime.now(UTC))
        assert "This message was sent" not in prompt

    def test_describe_age_units(self):
        """Test age phrasing across units."""
        now = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)

        assert describe_age(now - timedelta(seconds=10), now) == "just now"
        assert describe_age(now - timedelta(minutes=1), now) == "1 minute ago"
        assert describe_age(now - timedelta(hours=3), now) == "3 hours ago"
        assert describe_age(now - timedelta(days=2), now) == "2 days ago"


class TestDirectionPrompt:
    """Tests for build_direction_prompt."""

    def test_direction_fields(self):
        """Test label, tone and description are included."""
        direction = ReplyDirection(label="Tease", tone="playful", description="light jab")
        prompt = build_direction_prompt(TRANSCRIPT, "long. yours?", direction, {})

        assert "Direction: Tease" in prompt
        assert "Tone: playful" in prompt
        assert "Description: light jab" in prompt
        assert '"emotion"' in prompt

    def test_optional_fields_omitted(self):
        """Test absent description and example add no lines."""
        direction = ReplyDirection(label="Tease", tone="playful")
        prompt = build_direction_prompt(TRANSCRIPT, "hey", direction, {})

        assert "Description:" not in prompt
        assert "Example of the style" not in prompt
