"""Tests for parsing model output."""

from llm.parsing import extract_structured_reply, parse_grade, parse_json_response


class TestParseJsonResponse:
    """Tests for parse_json_response."""

    def test_direct_json(self):
        """Test a bare JSON object parses directly."""
        assert parse_json_response('{"intent": "flirt"}') == {"intent": "flirt"}

    def test_embedded_json(self):
        """Test an object wrapped in prose is extracted."""
        text = 'Here you go:\n```json\n{"message": "hi", "emotion": "warm"}\n```'
        assert parse_json_response(text) == {"message": "hi", "emotion": "warm"}

    def test_garbage(self):
        """Test non-JSON returns None without raising."""
        assert parse_json_response("no json here") is None
        assert parse_json_response("{not: valid}") is None
        assert parse_json_response("") is None
        assert parse_json_response(None) is None

    def test_non_object_json(self):
        """Test JSON that is not an object is rejected."""
        assert parse_json_response("[1, 2, 3]") is None


class TestExtractStructuredReply:
    """Tests for extract_structured_reply."""

    def test_plain_object(self):
        """Test the response and reasoning fields are read."""
        reply = extract_structured_reply('{"response":"hi","reasoning":"because"}')

        assert reply is not None
        assert reply.response == "hi"
        assert reply.reasoning == "because"

    def test_wrapped_object(self):
        """Test extra text around the object is ignored."""
        reply = extract_structured_reply('Sure! {"response":"hi","reasoning":"x"} thanks')

        assert reply is not None
        assert reply.response == "hi"

    def test_garbage(self):
        """Test non-JSON output gives None."""
        assert extract_structured_reply("just a reply") is None

    def test_missing_response_field(self):
        """Test objects without a response string are rejected."""
        assert extract_structured_reply('{"reasoning": "x"}') is None


class TestParseGrade:
    """Tests for parse_grade."""

    def test_integers(self):
        """Test plain integers parse."""
        assert parse_grade("42") == 42
        assert parse_grade("-17") == -17
        assert parse_grade("  85\n") == 85

    def test_non_numeric(self):
        """Test non-numeric output falls back to 0."""
        assert parse_grade("abc") == 0
        assert parse_grade("") == 0
        assert parse_grade(None) == 0

    def test_trailing_text(self):
        """Test text after the number is ignored."""
        assert parse_grade("70 - nice") == 70

    def test_clamped(self):
        """Test out-of-range numbers are clamped."""
        assert parse_grade("250") == 100
        assert parse_grade("-999") == -100
