"""LLM module - provider adapters, dispatch and prompt building.

Usage:
    from llm import LLMService, ProviderRegistry

    result = await llm_service.generate(prompt, config)

Structure:
    - base.py: Provider contract (LLMProvider) and errors
    - types.py: Normalized results (ProviderSuccess / ProviderFailure)
    - openai_compat.py: OpenAI, xAI and Gemini adapter
    - anthropic.py: Claude adapter
    - registry.py: Name-based dispatch and error classification
    - service.py: Dispatch to the provider chosen by runtime config
    - parsing.py: JSON and grade extraction from model output
    - prompts/: Transcript formatting and task templates
"""

from llm.base import (
    LLMError,
    LLMProvider,
    ProviderConfigurationError,
    ProviderNotFoundError,
)
from llm.registry import ProviderRegistry, build_provider_registry, classify_error
from llm.service import LLMService
from llm.types import (
    ErrorKind,
    GenerationConfig,
    ProviderFailure,
    ProviderResult,
    ProviderSuccess,
    TokenUsage,
)

__all__ = [
    "LLMError",
    "LLMProvider",
    "ProviderConfigurationError",
    "ProviderNotFoundError",
    "ProviderRegistry",
    "build_provider_registry",
    "classify_error",
    "LLMService",
    "ErrorKind",
    "GenerationConfig",
    "ProviderFailure",
    "ProviderResult",
    "ProviderSuccess",
    "TokenUsage",
]
