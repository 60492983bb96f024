"""Configuration and settings for the Wingman API.

Uses Pydantic Settings for fail-fast validation on startup.
Runtime-tunable values (active model, prompts) live in the key-value store,
these are only the process-level defaults and credentials.
"""

import json
import logging
import sys
from functools import lru_cache
from typing import Annotated, Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def setup_logging(level: str = "INFO") -> None:
    """Configure application logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("anthropic").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)
    logging.getLogger("google").setLevel(logging.WARNING)


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Raises ValidationError on startup if a value cannot be parsed.
    """

    model_config = SettingsConfigDict(
        env_file=("../.env", ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Provider API keys (optional - a provider without a key fails on first use)
    openai_api_key: str | None = Field(default=None, description="OpenAI API key")
    anthropic_api_key: str | None = Field(
        default=None, description="Anthropic API key for Claude"
    )
    xai_api_key: str | None = Field(default=None, description="xAI API key for Grok")
    google_api_key: str | None = Field(
        default=None, description="Google API key for Gemini"
    )

    # OpenAI-compatible endpoints
    xai_base_url: str = Field(default="https://api.x.ai/v1")
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta/openai/"
    )

    # Key-value store
    kv_backend: str = Field(
        default="firestore", description="Key-value backend: firestore or memory"
    )
    firebase_credentials: str | None = Field(
        default=None,
        description="Firebase service account JSON string or path to JSON file",
    )
    kv_collection: str = Field(
        default="kv", description="Firestore collection holding config keys"
    )

    # Application Settings
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Root log level")

    # LLM defaults (overridable at runtime through the key-value store)
    default_llm_provider: str = Field(
        default="openai", description="Provider used when none is configured"
    )
    default_llm_model: str = Field(
        default="gpt-4o", description="Model used when none is configured"
    )
    llm_max_tokens: int = Field(default=1024, description="Max tokens for generation")
    llm_timeout_seconds: float = Field(
        default=60.0, description="Total timeout for provider HTTP calls"
    )
    llm_connect_timeout_seconds: float = Field(
        default=10.0, description="Connect timeout for provider HTTP calls"
    )

    # Runtime config cache
    config_cache_ttl_seconds: float = Field(
        default=300.0, description="TTL for the runtime configuration snapshot"
    )

    # Prompt settings
    max_context_turns: int = Field(
        default=20, description="Conversation turns kept in prompts"
    )

    # Credits
    free_credits: int = Field(default=5, description="Generations for free users")
    premium_credits: int = Field(
        default=200, description="Generations for premium users"
    )
    admin_users: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["admin"],
        description="User ids exempt from credit limits",
    )
    premium_users: Annotated[list[str], NoDecode] = Field(
        default_factory=list, description="User ids on the premium tier"
    )
    credit_limit_message: str = Field(
        default="All credits used. Chat with team to upgrade",
        description="Message returned when a user runs out of credits",
    )

    # Rate limiting for generation endpoints (per client address)
    rate_limit_enabled: bool = Field(default=True)
    rate_limit_per_minute: int = Field(default=20)
    rate_limit_per_hour: int = Field(default=200)
    rate_limit_burst: int = Field(
        default=5, description="Max requests in any 10 second window"
    )

    @field_validator(
        "openai_api_key",
        "anthropic_api_key",
        "xai_api_key",
        "google_api_key",
        "firebase_credentials",
    )
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        """Treat empty strings as unset."""
        if v is None or not v.strip():
            return None
        return v.strip()

    @field_validator("admin_users", "premium_users", mode="before")
    @classmethod
    def parse_user_list(cls, v: Any) -> Any:
        """Accept a JSON list or a comma-separated string."""
        if isinstance(v, str):
            v = v.strip()
            if v.startswith("["):
                return json.loads(v)
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @field_validator("kv_backend")
    @classmethod
    def validate_kv_backend(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in ("firestore", "memory"):
            raise ValueError("kv_backend must be 'firestore' or 'memory'")
        return v


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


# CORS Configuration
CORS_CONFIG: dict[str, Any] = {
    "allow_origins": ["*"],
    "allow_credentials": False,
    "allow_methods": ["GET", "POST", "DELETE", "OPTIONS"],
    "allow_headers": ["*"],
    "expose_headers": ["*"],
    "max_age": 600,
}

# FastAPI App Configuration
APP_CONFIG: dict[str, Any] = {
    "title": "Wingman",
    "description": (
        "Conversation assistant API. Builds prompts from chat history and "
        "style settings and brokers them to a configurable LLM provider."
    ),
    "version": "0.1.0",
    "docs_url": "/api/docs",
    "redoc_url": "/api/redoc",
    "openapi_url": "/api/openapi.json",
    "openapi_tags": [
        {
            "name": "Health",
            "description": "Health check and service status",
        },
        {
            "name": "Generation",
            "description": "Reply generation, advice, grading and intent analysis",
        },
        {
            "name": "Credits",
            "description": "Per-user usage limits",
        },
        {
            "name": "Admin",
            "description": "Runtime configuration, prompt previews and versions",
        },
    ],
}


def get_app_config() -> dict[str, Any]:
    """Get FastAPI application configuration."""
    return APP_CONFIG.copy()


def get_cors_config() -> dict[str, Any]:
    """Get CORS middleware configuration."""
    return CORS_CONFIG.copy()
