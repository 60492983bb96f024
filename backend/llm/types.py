"""Normalized result types shared by every provider adapter."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Classification of a failed provider call."""

    TIMEOUT = "timeout"
    RATE_LIMITED = "rate_limited"
    UNAUTHENTICATED = "unauthenticated"
    BAD_REQUEST = "bad_request"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    GENERIC = "generic"


@dataclass(frozen=True)
class GenerationConfig:
    """Per-call settings handed to an adapter."""

    model: str
    max_tokens: int | None = None


@dataclass(frozen=True)
class TokenUsage:
    """Token counts; zero when the provider does not report them."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "promptTokens": self.prompt_tokens,
            "completionTokens": self.completion_tokens,
            "totalTokens": self.total_tokens,
        }


@dataclass(frozen=True)
class ProviderSuccess:
    """Generated text plus usage and timing."""

    text: str
    provider_name: str
    duration_ms: int
    usage: TokenUsage = field(default_factory=TokenUsage)

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class ProviderFailure:
    """A classified provider error. Never raised, always returned."""

    error_kind: ErrorKind
    http_status: int
    provider_name: str
    duration_ms: int
    detail: str

    @property
    def ok(self) -> bool:
        return False

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.detail,
            "errorKind": self.error_kind.value,
            "provider": self.provider_name,
            "durationMs": self.duration_ms,
        }


ProviderResult = ProviderSuccess | ProviderFailure
