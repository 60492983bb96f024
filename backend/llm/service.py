"""LLM Service - runs prompts against the currently configured provider.

Usage:
    config = await config_cache.get_all()
    result = await llm.generate(prompt, config)
    if result.ok:
        print(result.text)

The provider and model come from the runtime config snapshot, so switching
backends is a key-value store write, not a redeploy.
"""

import logging
from collections.abc import Mapping
from typing import Any, Protocol

from llm.base import ChunkCallback
from llm.registry import ProviderRegistry
from llm.types import GenerationConfig, ProviderResult

logger = logging.getLogger(__name__)

PROVIDER_FIELD = "provider"
MODEL_FIELD = "model"


class ConfigSource(Protocol):
    async def get_all(self) -> dict[str, Any]: ...


class LLMService:
    """Dispatches prompts to the provider named in runtime config."""

    def __init__(
        self,
        registry: ProviderRegistry,
        config_source: ConfigSource,
        *,
        max_tokens: int | None = None,
    ) -> None:
        self.registry = registry
        self._config_source = config_source
        self._max_tokens = max_tokens

    async def _resolve(
        self, config: Mapping[str, Any] | None
    ) -> tuple[str, GenerationConfig]:
        if config is None:
            config = await self._config_source.get_all()
        provider_name = str(config[PROVIDER_FIELD])
        gen_config = GenerationConfig(
            model=str(config[MODEL_FIELD]), max_tokens=self._max_tokens
        )
        return provider_name, gen_config

    async def generate(
        self,
        prompt: str,
        config: Mapping[str, Any] | None = None,
    ) -> ProviderResult:
        """Generate with the active provider.

        Args:
            prompt: Full prompt text.
            config: Snapshot already read for this request; fetched if omitted.

        Returns:
            ProviderSuccess or ProviderFailure. Never raises for provider errors.
        """
        provider_name, gen_config = await self._resolve(config)
        logger.debug("Dispatching to %s/%s", provider_name, gen_config.model)
        return await self.registry.dispatch_generate(provider_name, gen_config, prompt)

    async def generate_stream(
        self,
        prompt: str,
        on_chunk: ChunkCallback,
        config: Mapping[str, Any] | None = None,
    ) -> ProviderResult:
        """Stream with the active provider, forwarding chunks to ``on_chunk``."""
        provider_name, gen_config = await self._resolve(config)
        logger.debug("Dispatching stream to %s/%s", provider_name, gen_config.model)
        return await self.registry.dispatch_generate_stream(
            provider_name, gen_config, prompt, on_chunk
        )
