"""Provider registry and dispatcher.

Resolves adapters by name and wraps every call so callers always receive a
ProviderResult, whichever backend ran and however it failed.
"""

import asyncio
import logging
import time
from collections.abc import Iterable

import httpx

from config import Settings
from llm.anthropic import AnthropicProvider
from llm.base import (
    ChunkCallback,
    LLMProvider,
    ProviderConfigurationError,
    ProviderNotFoundError,
    elapsed_ms,
)
from llm.openai_compat import OpenAICompatibleProvider
from llm.types import ErrorKind, GenerationConfig, ProviderFailure, ProviderResult

logger = logging.getLogger(__name__)

_TIMEOUT_MARKERS = ("timeout", "timed out")
_RATE_LIMIT_MARKERS = ("rate limit", "ratelimit", "too many requests", "quota")
_AUTH_MARKERS = ("api key", "unauthorized", "authentication", "permission denied")
_UNAVAILABLE_MARKERS = (
    "overloaded",
    "unavailable",
    "bad gateway",
    "connection",
    "econnrefused",
    "econnreset",
)


def _status_of(exc: BaseException) -> int | None:
    status = getattr(exc, "status_code", None)
    if status is None:
        status = getattr(exc, "status", None)
    return status if isinstance(status, int) else None


def classify_error(exc: BaseException) -> tuple[ErrorKind, int]:
    """Map a provider exception to an error kind and HTTP status.

    Checks the exception type and status code first, then falls back to
    message text for SDKs and transports that only report a string.
    """
    status = _status_of(exc)
    name = type(exc).__name__.lower()
    message = str(exc).lower()

    if (
        isinstance(exc, (TimeoutError, asyncio.TimeoutError, httpx.TimeoutException))
        or "timeout" in name
        or status in (408, 504)
        or any(marker in message for marker in _TIMEOUT_MARKERS)
    ):
        return ErrorKind.TIMEOUT, 504

    if (
        status == 429
        or "ratelimit" in name
        or any(marker in message for marker in _RATE_LIMIT_MARKERS)
    ):
        return ErrorKind.RATE_LIMITED, 429

    if (
        isinstance(exc, ProviderConfigurationError)
        or status in (401, 403)
        or "authentication" in name
        or "permissiondenied" in name
        or any(marker in message for marker in _AUTH_MARKERS)
    ):
        return ErrorKind.UNAUTHENTICATED, status if status in (401, 403) else 401

    if status is not None and 400 <= status < 500:
        return ErrorKind.BAD_REQUEST, status
    if "badrequest" in name or "bad request" in message:
        return ErrorKind.BAD_REQUEST, 400

    if status is not None and status >= 500:
        return ErrorKind.UPSTREAM_UNAVAILABLE, status
    if "connection" in name or any(
        marker in message for marker in _UNAVAILABLE_MARKERS
    ):
        return ErrorKind.UPSTREAM_UNAVAILABLE, 503

    return ErrorKind.GENERIC, 500


class ProviderRegistry:
    """Name-keyed set of provider adapters."""

    def __init__(self, providers: Iterable[LLMProvider]) -> None:
        self._providers: dict[str, LLMProvider] = {}
        for provider in providers:
            self._providers[provider.name] = provider

    def names(self) -> list[str]:
        return list(self._providers)

    def resolve_provider(self, name: str) -> LLMProvider:
        """Return the adapter registered as ``name``.

        Raises:
            ProviderNotFoundError: If no adapter has that name.
        """
        provider = self._providers.get(name)
        if provider is None:
            raise ProviderNotFoundError(name)
        return provider

    def _failure(
        self, provider_name: str, exc: BaseException, start: float
    ) -> ProviderFailure:
        if isinstance(exc, ProviderNotFoundError):
            kind, status = ErrorKind.GENERIC, 500
        else:
            kind, status = classify_error(exc)
        duration_ms = elapsed_ms(start)
        logger.warning(
            "Provider %s failed (%s, status=%d) after %dms: %s",
            provider_name,
            kind.value,
            status,
            duration_ms,
            exc,
        )
        return ProviderFailure(
            error_kind=kind,
            http_status=status,
            provider_name=provider_name,
            duration_ms=duration_ms,
            detail=str(exc) or type(exc).__name__,
        )

    async def dispatch_generate(
        self,
        provider_name: str,
        config: GenerationConfig,
        prompt: str,
    ) -> ProviderResult:
        """Run a single-shot generation. Never raises."""
        start = time.perf_counter()
        try:
            provider = self.resolve_provider(provider_name)
            return await provider.generate(config, prompt)
        except Exception as e:
            return self._failure(provider_name, e, start)

    async def dispatch_generate_stream(
        self,
        provider_name: str,
        config: GenerationConfig,
        prompt: str,
        on_chunk: ChunkCallback,
    ) -> ProviderResult:
        """Run a streaming generation. Never raises."""
        start = time.perf_counter()
        try:
            provider = self.resolve_provider(provider_name)
            return await provider.generate_stream(config, prompt, on_chunk)
        except Exception as e:
            return self._failure(provider_name, e, start)


def build_provider_registry(settings: Settings) -> ProviderRegistry:
    """Create the registry of every supported backend."""
    timeout = httpx.Timeout(
        timeout=settings.llm_timeout_seconds,
        connect=settings.llm_connect_timeout_seconds,
    )
    return ProviderRegistry(
        [
            OpenAICompatibleProvider("openai", settings.openai_api_key, timeout=timeout),
            AnthropicProvider(
                settings.anthropic_api_key,
                max_tokens=settings.llm_max_tokens,
                timeout=timeout,
            ),
            OpenAICompatibleProvider(
                "xai",
                settings.xai_api_key,
                base_url=settings.xai_base_url,
                timeout=timeout,
            ),
            OpenAICompatibleProvider(
                "gemini",
                settings.google_api_key,
                base_url=settings.gemini_base_url,
                timeout=timeout,
            ),
        ]
    )
