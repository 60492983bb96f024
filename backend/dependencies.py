"""FastAPI dependency injection for services.

Every service is a process-wide instance created on first use and cached with
@lru_cache. Tests swap them out through ``app.dependency_overrides``.
"""

import logging
from functools import lru_cache

from config import get_settings
from db import InMemoryKVStore, KVStore
from llm import LLMService, ProviderRegistry, build_provider_registry
from llm.prompts.templates import DEFAULT_RESPONSE_CRITERIA, DEFAULT_SYSTEM_PROMPT
from services import (
    ConfigCache,
    CreditLedger,
    KVKey,
    PromptRecorder,
    VersionService,
    tracked_settings,
)

logger = logging.getLogger(__name__)


# --- Storage ---


@lru_cache
def get_kv_store() -> KVStore:
    """Get the configured key-value store (Firestore unless KV_BACKEND=memory)."""
    settings = get_settings()
    if settings.kv_backend == "memory":
        logger.warning("Using in-memory key-value store; data is not persisted")
        return InMemoryKVStore()

    # Imported here so the memory backend runs without Firebase credentials
    from db.firestore import FirestoreKVStore

    return FirestoreKVStore(settings.kv_collection)


@lru_cache
def get_config_cache() -> ConfigCache:
    """Get the shared runtime configuration cache."""
    settings = get_settings()
    return ConfigCache(
        get_kv_store(),
        tracked_settings(settings),
        ttl_seconds=settings.config_cache_ttl_seconds,
    )


# --- LLM ---


@lru_cache
def get_provider_registry() -> ProviderRegistry:
    """Get the provider registry (clients are created lazily per adapter)."""
    return build_provider_registry(get_settings())


@lru_cache
def get_llm_service() -> LLMService:
    return LLMService(
        get_provider_registry(),
        get_config_cache(),
        max_tokens=get_settings().llm_max_tokens,
    )


# --- Ledger, versions, prompt snapshots ---


@lru_cache
def get_credit_ledger() -> CreditLedger:
    settings = get_settings()
    return CreditLedger(
        get_kv_store(),
        admin_users=settings.admin_users,
        premium_users=settings.premium_users,
        free_credits=settings.free_credits,
        premium_credits=settings.premium_credits,
    )


@lru_cache
def get_version_service() -> VersionService:
    settings = get_settings()
    return VersionService(
        get_kv_store(),
        defaults={
            KVKey.SYSTEM_PROMPT: DEFAULT_SYSTEM_PROMPT,
            KVKey.RESPONSE_CRITERIA: DEFAULT_RESPONSE_CRITERIA,
            KVKey.LLM_MODEL_NAME: settings.default_llm_model,
            KVKey.LLM_PROVIDER: settings.default_llm_provider,
        },
    )


@lru_cache
def get_prompt_recorder() -> PromptRecorder:
    return PromptRecorder(get_kv_store())
