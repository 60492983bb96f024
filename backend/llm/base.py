"""LLM provider contract.

Defines the interface that all provider adapters satisfy. Adapters are
independent objects; they share helpers, not a base class.
"""

import time
from collections.abc import Callable
from typing import Protocol, runtime_checkable

from llm.types import GenerationConfig, ProviderSuccess

ChunkCallback = Callable[[str], None]


class LLMError(Exception):
    """Raised when LLM generation fails."""


class ProviderNotFoundError(LLMError):
    """Raised when no adapter is registered under the requested name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown LLM provider: {name}")
        self.name = name


class ProviderConfigurationError(LLMError):
    """Raised when an adapter is used without credentials."""


@runtime_checkable
class LLMProvider(Protocol):
    """Capabilities every provider adapter must expose.

    Adapters let transport and API errors propagate unmodified; the
    dispatcher is responsible for classifying them.
    """

    name: str

    async def generate(self, config: GenerationConfig, prompt: str) -> ProviderSuccess:
        """Single-shot generation.

        Args:
            config: Model selection and limits.
            prompt: Full prompt text, sent as a single user message.

        Returns:
            Normalized success result with usage and provider duration.
        """
        ...

    async def generate_stream(
        self,
        config: GenerationConfig,
        prompt: str,
        on_chunk: ChunkCallback,
    ) -> ProviderSuccess:
        """Streaming generation.

        Calls ``on_chunk`` once per text fragment in arrival order and returns
        the aggregated result once the stream completes.
        """
        ...


def elapsed_ms(start: float) -> int:
    """Milliseconds since a ``time.perf_counter()`` reading."""
    return int((time.perf_counter() - start) * 1000)
