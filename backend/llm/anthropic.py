"""Anthropic Claude provider adapter."""

import logging
import time

import httpx
from anthropic import AsyncAnthropic

from llm.base import ChunkCallback, ProviderConfigurationError, elapsed_ms
from llm.types import GenerationConfig, ProviderSuccess, TokenUsage

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOKENS = 1024


def _usage_from_anthropic(usage) -> TokenUsage:
    if usage is None:
        return TokenUsage()
    prompt_tokens = getattr(usage, "input_tokens", 0) or 0
    completion_tokens = getattr(usage, "output_tokens", 0) or 0
    return TokenUsage(
        prompt_tokens=prompt_tokens,
        completion_tokens=completion_tokens,
        total_tokens=prompt_tokens + completion_tokens,
    )


class AnthropicProvider:
    """Claude via the Anthropic Messages API."""

    def __init__(
        self,
        api_key: str | None,
        *,
        name: str = "anthropic",
        max_tokens: int = DEFAULT_MAX_TOKENS,
        timeout: httpx.Timeout | None = None,
    ) -> None:
        self.name = name
        self._api_key = api_key
        self._max_tokens = max_tokens
        self._timeout = timeout or httpx.Timeout(timeout=60.0, connect=10.0)
        self._client: AsyncAnthropic | None = None

    def _get_client(self) -> AsyncAnthropic:
        """Get or create the API client."""
        if self._client is None:
            if not self._api_key:
                raise ProviderConfigurationError(
                    f"No API key configured for provider '{self.name}'"
                )
            self._client = AsyncAnthropic(api_key=self._api_key, timeout=self._timeout)
        return self._client

    async def generate(self, config: GenerationConfig, prompt: str) -> ProviderSuccess:
        """Generate a response using Claude."""
        client = self._get_client()
        start = time.perf_counter()
        logger.info("Starting %s call (model=%s)", self.name, config.model)

        try:
            response = await client.messages.create(
                model=config.model,
                max_tokens=config.max_tokens or self._max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
        except Exception as e:
            logger.error(
                "%s call failed after %dms: %s", self.name, elapsed_ms(start), e
            )
            raise

        duration_ms = elapsed_ms(start)
        logger.info("%s call completed in %dms", self.name, duration_ms)

        text = next(
            (block.text for block in response.content if block.type == "text"), ""
        )
        return ProviderSuccess(
            text=text,
            provider_name=self.name,
            duration_ms=duration_ms,
            usage=_usage_from_anthropic(response.usage),
        )

    async def generate_stream(
        self,
        config: GenerationConfig,
        prompt: str,
        on_chunk: ChunkCallback,
    ) -> ProviderSuccess:
        """Stream a response using Claude; usage comes from the final message."""
        client = self._get_client()
        start = time.perf_counter()
        logger.info("Starting %s stream (model=%s)", self.name, config.model)

        parts: list[str] = []
        try:
            async with client.messages.stream(
                model=config.model,
                max_tokens=config.max_tokens or self._max_tokens,
                messages=[{"role": "user", "content": prompt}],
            ) as stream:
                async for text in stream.text_stream:
                    if text:
                        parts.append(text)
                        on_chunk(text)
                final_message = await stream.get_final_message()
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
            usage=_usage_from_anthropic(final_message.usage),
        )
