"""Pytest configuration and fixtures for Wingman tests."""

import os
import sys

# Set required env vars BEFORE any imports that might trigger Settings
os.environ["KV_BACKEND"] = "memory"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")
os.environ.setdefault("ANTHROPIC_API_KEY", "test-anthropic-key")
os.environ.setdefault("DEFAULT_LLM_PROVIDER", "openai")
os.environ.setdefault("DEFAULT_LLM_MODEL", "gpt-4o")

import pytest

# Add backend to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from db import InMemoryKVStore  # noqa: E402
from llm.types import GenerationConfig, ProviderSuccess, TokenUsage  # noqa: E402


class FakeProvider:
    """Provider adapter returning canned text and recording prompts."""

    def __init__(self, name: str = "openai", text: str = "hey you", error=None):
        self.name = name
        self.text = text
        self.error = error
        # Raised by generate_stream after every chunk has been sent
        self.stream_error = None
        self.prompts: list[str] = []
        self.models: list[str] = []

    async def generate(self, config: GenerationConfig, prompt: str) -> ProviderSuccess:
        self.prompts.append(prompt)
        self.models.append(config.model)
        if self.error is not None:
            raise self.error
        return ProviderSuccess(
            text=self.text,
            provider_name=self.name,
            duration_ms=12,
            usage=TokenUsage(prompt_tokens=10, completion_tokens=3, total_tokens=13),
        )

    async def generate_stream(self, config, prompt, on_chunk) -> ProviderSuccess:
        self.prompts.append(prompt)
        self.models.append(config.model)
        if self.error is not None:
            raise self.error
        for word in self.text.split(" "):
            on_chunk(word + " ")
        if self.stream_error is not None:
            raise self.stream_error
        return ProviderSuccess(
            text=self.text,
            provider_name=self.name,
            duration_ms=15,
            usage=TokenUsage(prompt_tokens=10, completion_tokens=3, total_tokens=13),
        )


class StatusError(Exception):
    """Exception carrying an HTTP status, like the SDK errors do."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


@pytest.fixture
def fake_provider():
    """Fake provider registered as 'openai' (the default provider)."""
    return FakeProvider()


@pytest.fixture
def kv_store():
    """Empty in-memory key-value store."""
    return InMemoryKVStore()


@pytest.fixture
def recorder(kv_store):
    """Prompt recorder writing to the test store."""
    from services import PromptRecorder

    return PromptRecorder(kv_store)


@pytest.fixture
def client(kv_store, fake_provider, recorder):
    """TestClient with every service wired to the fake store and provider."""
    from fastapi.testclient import TestClient

    import dependencies
    from config import get_settings
    from llm import LLMService, ProviderRegistry
    from main import app
    from services import (
        ConfigCache,
        CreditLedger,
        KVKey,
        VersionService,
        tracked_settings,
    )

    settings = get_settings()
    cache = ConfigCache(kv_store, tracked_settings(settings))
    registry = ProviderRegistry([fake_provider, FakeProvider(name="anthropic")])
    ledger = CreditLedger(
        kv_store,
        admin_users=["admin"],
        premium_users=["vip"],
        free_credits=5,
        premium_credits=200,
    )
    versions = VersionService(
        kv_store,
        defaults={
            KVKey.SYSTEM_PROMPT: "default system",
            KVKey.RESPONSE_CRITERIA: "default criteria",
            KVKey.LLM_MODEL_NAME: "gpt-4o",
            KVKey.LLM_PROVIDER: "openai",
        },
    )
    overrides = {
        dependencies.get_kv_store: lambda: kv_store,
        dependencies.get_config_cache: lambda: cache,
        dependencies.get_provider_registry: lambda: registry,
        dependencies.get_llm_service: lambda: LLMService(registry, cache),
        dependencies.get_credit_ledger: lambda: ledger,
        dependencies.get_version_service: lambda: versions,
        dependencies.get_prompt_recorder: lambda: recorder,
    }
    app.dependency_overrides.update(overrides)

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def sample_context():
    """Short conversation in the current wire shape."""
    return [
        {"sender": "other", "text": "hey"},
        {"sender": "self", "text": "hi!"},
        {"sender": "self", "text": "how was your day"},
        {"sender": "other", "text": "long. yours?"},
    ]
