"""OpenAI-compatible provider adapter.

Serves OpenAI itself plus any backend exposing the Chat Completions API
(xAI Grok, Gemini's compatibility endpoint) by varying name, key and base URL.
"""

import logging
import time

import httpx
from openai import AsyncOpenAI

from llm.base import ChunkCallback, ProviderConfigurationError, elapsed_ms
from llm.types import GenerationConfig, ProviderSuccess, TokenUsage

logger = logging.getLogger(__name__)


def _usage_from_openai(usage) -> TokenUsage:
    if usage is None:
        return TokenUsage()
    return TokenUsage(
        prompt_tokens=getattr(usage, "prompt_tokens", 0) or 0,
        completion_tokens=getattr(usage, "completion_tokens", 0) or 0,
        total_tokens=getattr(usage, "total_tokens", 0) or 0,
    )


def _token_limit(config: GenerationConfig) -> dict:
    if config.max_tokens is None:
        return {}
    return {"max_tokens": config.max_tokens}


class OpenAICompatibleProvider:
    """Chat Completions adapter."""

    def __init__(
        self,
        name: str,
        api_key: str | None,
        *,
        base_url: str | None = None,
        timeout: httpx.Timeout | None = None,
        stream_usage: bool = True,
    ) -> None:
        self.name = name
        self._api_key = api_key
        self._base_url = base_url
        self._timeout = timeout or httpx.Timeout(timeout=60.0, connect=10.0)
        self._stream_usage = stream_usage
        self._client: AsyncOpenAI | None = None

    def _get_client(self) -> AsyncOpenAI:
        """Get or create the API client."""
        if self._client is None:
            if not self._api_key:
                raise ProviderConfigurationError(
                    f"No API key configured for provider '{self.name}'"
                )
            self._client = AsyncOpenAI(
                api_key=self._api_key,
                base_url=self._base_url,
                timeout=self._timeout,
            )
        return self._client

    async def generate(self, config: GenerationConfig, prompt: str) -> ProviderSuccess:
        """Generate a single chat completion."""
        client = self._get_client()
        start = time.perf_counter()
        logger.info("Starting %s call (model=%s)", self.name, config.model)

        try:
            response = await client.chat.completions.create(
                model=config.model,
                messages=[{"role": "user", "content": prompt}],
                **_token_limit(config),
            )
        except Exception as e:
            logger.error(
                "%s call failed after %dms: %s", self.name, elapsed_ms(start), e
            )
            raise

        duration_ms = elapsed_ms(start)
        logger.info("%s call completed in %dms", self.name, duration_ms)

        text = ""
        if response.choices:
            text = response.choices[0].message.content or ""
        return ProviderSuccess(
            text=text,
            provider_name=self.name,
            duration_ms=duration_ms,
            usage=_usage_from_openai(response.usage),
        )

    async def generate_stream(
        self,
        config: GenerationConfig,
        prompt: str,
        on_chunk: ChunkCallback,
    ) -> ProviderSuccess:
        """Stream a chat completion; usage arrives with the last chunk."""
        client = self._get_client()
        start = time.perf_counter()
        logger.info("Starting %s stream (model=%s)", self.name, config.model)

        extra = {"stream_options": {"include_usage": True}} if self._stream_usage else {}
        parts: list[str] = []
        usage = None
        try:
            stream = await client.chat.completions.create(
                model=config.model,
                messages=[{"role": "user", "content": prompt}],
                stream=True,
                **_token_limit(config),
                **extra,
            )
            async for chunk in stream:
                if chunk.choices:
                    delta = chunk.choices[0].delta.content or ""
                    if delta:
                        parts.append(delta)
                        on_chunk(delta)
                if chunk.usage:
                    usage = chunk.usage
        except Exception as e:
            logger.error(
                "%s stream failed after %dms: %s", self.name, elapsed_ms(start), e
            )
            raise

        duration_ms = elapsed_ms(start)
        logger.info("%s stream completed in %dms", self.name, duration_ms)

        return ProviderSuccess(
            text="".join(parts),
            provider_name=self.name,
            duration_ms=duration_ms,
            usage=_usage_from_openai(usage),
        )
