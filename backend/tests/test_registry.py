"""Tests for provider dispatch and error classification."""

import asyncio

import httpx
import pytest

from conftest import FakeProvider, StatusError
from llm import LLMService, ProviderRegistry, classify_error
from llm.base import ProviderConfigurationError
from llm.catalog import get_models_for_provider, is_valid_model_for_provider
from llm.types import ErrorKind, GenerationConfig

CONFIG = GenerationConfig(model="gpt-4o")


class StaticConfig:
    def __init__(self, config):
        self.config = config
        self.calls = 0

    async def get_all(self):
        self.calls += 1
        return dict(self.config)


class TestClassifyError:
    """Tests for classify_error."""

    def test_timeouts(self):
        """Test timeout exceptions and statuses map to 504."""
        assert classify_error(asyncio.TimeoutError()) == (ErrorKind.TIMEOUT, 504)
        assert classify_error(httpx.ReadTimeout("slow")) == (ErrorKind.TIMEOUT, 504)
        assert classify_error(StatusError("gateway", 504)) == (ErrorKind.TIMEOUT, 504)
        assert classify_error(Exception("Request timed out")) == (ErrorKind.TIMEOUT, 504)

    def test_rate_limited(self):
        """Test 429s and rate limit messages map to 429."""
        assert classify_error(StatusError("slow down", 429)) == (
            ErrorKind.RATE_LIMITED,
            429,
        )
        assert classify_error(Exception("Rate limit exceeded")) == (
            ErrorKind.RATE_LIMITED,
            429,
        )

    def test_unauthenticated(self):
        """Test auth failures keep their 401/403 status."""
        assert classify_error(StatusError("bad key", 401)) == (
            ErrorKind.UNAUTHENTICATED,
            401,
        )
        assert classify_error(StatusError("forbidden", 403)) == (
            ErrorKind.UNAUTHENTICATED,
            403,
        )
        assert classify_error(ProviderConfigurationError("No API key")) == (
            ErrorKind.UNAUTHENTICATED,
            401,
        )

    def test_bad_request(self):
        """Test other 4xx statuses are passed through."""
        assert classify_error(StatusError("unknown model", 404)) == (
            ErrorKind.BAD_REQUEST,
            404,
        )
        assert classify_error(StatusError("invalid", 400)) == (ErrorKind.BAD_REQUEST, 400)

    def test_upstream_unavailable(self):
        """Test 5xx and connection failures map to unavailable."""
        assert classify_error(StatusError("oops", 502)) == (
            ErrorKind.UPSTREAM_UNAVAILABLE,
            502,
        )
        assert classify_error(Exception("Overloaded")) == (
            ErrorKind.UPSTREAM_UNAVAILABLE,
            503,
        )

    def test_generic(self):
        """Test unrecognized errors map to 500."""
        assert classify_error(ValueError("weird")) == (ErrorKind.GENERIC, 500)


class TestProviderRegistry:
    """Tests for ProviderRegistry dispatch."""

    @pytest.mark.asyncio
    async def test_dispatch_success(self):
        """Test the named adapter handles the call."""
        openai = FakeProvider(name="openai", text="from openai")
        anthropic = FakeProvider(name="anthropic", text="from claude")
        registry = ProviderRegistry([openai, anthropic])

        result = await registry.dispatch_generate("anthropic", CONFIG, "hi")

        assert result.ok
        assert result.text == "from claude"
        assert result.provider_name == "anthropic"
        assert anthropic.prompts == ["hi"]
        assert openai.prompts == []

    @pytest.mark.asyncio
    async def test_dispatch_never_raises(self):
        """Test adapter exceptions come back as failures."""
        registry = ProviderRegistry(
            [FakeProvider(error=StatusError("Too many requests", 429))]
        )

        result = await registry.dispatch_generate("openai", CONFIG, "hi")

        assert not result.ok
        assert result.error_kind == ErrorKind.RATE_LIMITED
        assert result.http_status == 429
        assert result.provider_name == "openai"
        assert result.duration_ms >= 0
        assert result.to_dict()["errorKind"] == "rate_limited"

    @pytest.mark.asyncio
    async def test_unknown_provider(self):
        """Test an unregistered name is a generic 500 failure."""
        registry = ProviderRegistry([FakeProvider()])

        result = await registry.dispatch_generate("mystery", CONFIG, "hi")

        assert not result.ok
        assert result.error_kind == ErrorKind.GENERIC
        assert result.http_status == 500
        assert "mystery" in result.detail

    @pytest.mark.asyncio
    async def test_stream_forwards_chunks(self):
        """Test streaming dispatch delivers chunks in order."""
        registry = ProviderRegistry([FakeProvider(text="one two three")])
        chunks: list[str] = []

        result = await registry.dispatch_generate_stream(
            "openai", CONFIG, "hi", chunks.append
        )

        assert result.ok
        assert chunks == ["one ", "two ", "three "]

    @pytest.mark.asyncio
    async def test_stream_failure(self):
        """Test streaming errors are classified like single-shot ones."""
        registry = ProviderRegistry([FakeProvider(error=httpx.ConnectError("Connection refused"))])

        result = await registry.dispatch_generate_stream(
            "openai", CONFIG, "hi", lambda chunk: None
        )

        assert not result.ok
        assert result.error_kind == ErrorKind.UPSTREAM_UNAVAILABLE

    def test_names(self):
        registry = ProviderRegistry([FakeProvider("openai"), FakeProvider("xai")])
        assert registry.names() == ["openai", "xai"]


class TestLLMService:
    """Tests for LLMService."""

    @pytest.mark.asyncio
    async def test_uses_config_provider_and_model(self):
        """Test provider and model come from the config snapshot."""
        anthropic = FakeProvider(name="anthropic")
        registry = ProviderRegistry([FakeProvider("openai"), anthropic])
        source = StaticConfig({"provider": "anthropic", "model": "claude-x"})
        service = LLMService(registry, source)

        result = await service.generate("hi")

        assert result.provider_name == "anthropic"
        assert anthropic.models == ["claude-x"]
        assert source.calls == 1

    @pytest.mark.asyncio
    async def test_supplied_snapshot_skips_fetch(self):
        """Test a snapshot passed in is used as-is."""
        source = StaticConfig({"provider": "openai", "model": "gpt-4o"})
        service = LLMService(ProviderRegistry([FakeProvider()]), source)

        await service.generate("hi", {"provider": "openai", "model": "gpt-4.1"})

        assert source.calls == 0


class TestCatalog:
    """Tests for the provider catalog."""

    def test_models_for_provider(self):
        assert {"id": "gpt-4o"} in get_models_for_provider("openai")
        assert get_models_for_provider("unknown") == []

    def test_valid_model(self):
        assert is_valid_model_for_provider("anthropic", "claude-sonnet-4-20250514")
        assert not is_valid_model_for_provider("anthropic", "gpt-4o")
