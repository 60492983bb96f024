"""Tests for the provider adapters with mocked SDK clients."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from llm.anthropic import AnthropicProvider
from llm.base import LLMProvider, ProviderConfigurationError
from llm.openai_compat import OpenAICompatibleProvider
from llm.types import GenerationConfig

CONFIG = GenerationConfig(model="test-model", max_tokens=256)


def _openai_response(text, usage=None):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=text))],
        usage=usage,
    )


def _openai_chunk(text=None, usage=None):
    choices = [SimpleNamespace(delta=SimpleNamespace(content=text))] if text else []
    return SimpleNamespace(choices=choices, usage=usage)


async def _aiter(items):
    for item in items:
        yield item


class FakeAnthropicStream:
    """Stands in for the SDK's message stream context manager."""

    def __init__(self, parts, usage):
        self._parts = parts
        self._usage = usage

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    @property
    def text_stream(self):
        return _aiter(self._parts)

    async def get_final_message(self):
        return SimpleNamespace(usage=self._usage)


class TestOpenAICompatibleProvider:
    """Tests for OpenAICompatibleProvider."""

    def _provider(self, client):
        provider = OpenAICompatibleProvider("openai", "sk-test")
        provider._client = client
        return provider

    def test_satisfies_protocol(self):
        assert isinstance(OpenAICompatibleProvider("xai", "key"), LLMProvider)

    @pytest.mark.asyncio
    async def test_generate(self):
        """Test text and usage are normalized."""
        client = MagicMock()
        client.chat.completions.create = AsyncMock(
            return_value=_openai_response(
                "hey there",
                SimpleNamespace(prompt_tokens=12, completion_tokens=4, total_tokens=16),
            )
        )

        result = await self._provider(client).generate(CONFIG, "prompt text")

        assert result.text == "hey there"
        assert result.provider_name == "openai"
        assert result.usage.total_tokens == 16
        assert result.duration_ms >= 0
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["messages"] == [{"role": "user", "content": "prompt text"}]
        assert kwargs["max_tokens"] == 256

    @pytest.mark.asyncio
    async def test_no_token_limit_by_default(self):
        """Test max_tokens is only sent when the config sets one."""
        client = MagicMock()
        client.chat.completions.create = AsyncMock(return_value=_openai_response("ok"))

        await self._provider(client).generate(GenerationConfig(model="gpt-4o"), "p")

        assert "max_tokens" not in client.chat.completions.create.call_args.kwargs

    @pytest.mark.asyncio
    async def test_client_created_once(self):
        """Test the SDK client is built on first use and then reused."""
        with patch("llm.openai_compat.AsyncOpenAI") as client_cls:
            client_cls.return_value.chat.completions.create = AsyncMock(
                return_value=_openai_response("ok")
            )
            provider = OpenAICompatibleProvider(
                "xai", "xai-key", base_url="https://api.x.ai/v1"
            )
            assert client_cls.call_count == 0

            await provider.generate(CONFIG, "p")
            await provider.generate(CONFIG, "p")

        client_cls.assert_called_once()
        assert client_cls.call_args.kwargs["api_key"] == "xai-key"
        assert client_cls.call_args.kwargs["base_url"] == "https://api.x.ai/v1"

    @pytest.mark.asyncio
    async def test_generate_missing_usage(self):
        """Test absent usage reports zeros."""
        client = MagicMock()
        client.chat.completions.create = AsyncMock(return_value=_openai_response(None))

        result = await self._provider(client).generate(CONFIG, "p")

        assert result.text == ""
        assert result.usage.total_tokens == 0

    @pytest.mark.asyncio
    async def test_generate_stream(self):
        """Test chunks are forwarded in order and aggregated."""
        client = MagicMock()
        client.chat.completions.create = AsyncMock(
            return_value=_aiter(
                [
                    _openai_chunk("he"),
                    _openai_chunk("llo"),
                    _openai_chunk(
                        usage=SimpleNamespace(
                            prompt_tokens=5, completion_tokens=2, total_tokens=7
                        )
                    ),
                ]
            )
        )
        chunks: list[str] = []

        result = await self._provider(client).generate_stream(
            CONFIG, "p", chunks.append
        )

        assert chunks == ["he", "llo"]
        assert result.text == "hello"
        assert result.usage.total_tokens == 7
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["stream"] is True
        assert kwargs["max_tokens"] == 256
        assert kwargs["stream_options"] == {"include_usage": True}

    @pytest.mark.asyncio
    async def test_errors_propagate(self):
        """Test SDK errors reach the caller unmodified."""
        client = MagicMock()
        client.chat.completions.create = AsyncMock(side_effect=RuntimeError("boom"))

        with pytest.raises(RuntimeError, match="boom"):
            await self._provider(client).generate(CONFIG, "p")

    @pytest.mark.asyncio
    async def test_missing_api_key(self):
        """Test an adapter without a key fails on first use."""
        provider = OpenAICompatibleProvider("gemini", None)

        with pytest.raises(ProviderConfigurationError):
            await provider.generate(CONFIG, "p")


class TestAnthropicProvider:
    """Tests for AnthropicProvider."""

    def _provider(self, client):
        provider = AnthropicProvider("sk-ant-test")
        provider._client = client
        return provider

    @pytest.mark.asyncio
    async def test_generate(self):
        """Test the first text block is returned with usage totals."""
        client = MagicMock()
        client.messages.create = AsyncMock(
            return_value=SimpleNamespace(
                content=[SimpleNamespace(type="text", text="hi from claude")],
                usage=SimpleNamespace(input_tokens=20, output_tokens=5),
            )
        )

        result = await self._provider(client).generate(CONFIG, "p")

        assert result.text == "hi from claude"
        assert result.provider_name == "anthropic"
        assert result.usage.prompt_tokens == 20
        assert result.usage.total_tokens == 25
        assert client.messages.create.call_args.kwargs["max_tokens"] == 256

    @pytest.mark.asyncio
    async def test_default_max_tokens(self):
        """Test the adapter default applies when config has none."""
        client = MagicMock()
        client.messages.create = AsyncMock(
            return_value=SimpleNamespace(content=[], usage=None)
        )

        result = await self._provider(client).generate(
            GenerationConfig(model="claude-x"), "p"
        )

        assert result.text == ""
        assert client.messages.create.call_args.kwargs["max_tokens"] == 1024

    @pytest.mark.asyncio
    async def test_generate_stream(self):
        """Test streamed text is forwarded and usage read from the final message."""
        client = MagicMock()
        client.messages.stream = MagicMock(
            return_value=FakeAnthropicStream(
                ["hey ", "you"], SimpleNamespace(input_tokens=8, output_tokens=2)
            )
        )
        chunks: list[str] = []

        result = await self._provider(client).generate_stream(
            CONFIG, "p", chunks.append
        )

        assert chunks == ["hey ", "you"]
        assert result.text == "hey you"
        assert result.usage.total_tokens == 10

    @pytest.mark.asyncio
    async def test_client_created_once(self):
        """Test the SDK client is built on first use and then reused."""
        with patch("llm.anthropic.AsyncAnthropic") as client_cls:
            client_cls.return_value.messages.create = AsyncMock(
                return_value=SimpleNamespace(content=[], usage=None)
            )
            provider = AnthropicProvider("sk-ant-test")
            assert client_cls.call_count == 0

            await provider.generate(CONFIG, "p")
            await provider.generate(CONFIG, "p")

        client_cls.assert_called_once()
        assert client_cls.call_args.kwargs["api_key"] == "sk-ant-test"
        assert client_cls.return_value.messages.create.await_count == 2
