"""Known providers and their models, served to the admin UI."""

from typing import Any

PROVIDERS: list[dict[str, Any]] = [
    {
        "id": "openai",
        "name": "OpenAI",
        "models": [
            {"id": "o1"},
            {"id": "o3"},
            {"id": "o4-mini"},
            {"id": "gpt-3.5-turbo"},
            {"id": "gpt-4o"},
            {"id": "gpt-4.1"},
            {"id": "gpt-5-chat-latest"},
            {"id": "gpt-5"},
            {"id": "gpt-5.1"},
            {"id": "gpt-5.2"},
        ],
    },
    {
        "id": "anthropic",
        "name": "Anthropic Claude",
        "models": [
            {"id": "claude-sonnet-4-20250514"},
            {"id": "claude-sonnet-4-5-20250929"},
            {"id": "claude-opus-4-5-20251101"},
            {"id": "claude-haiku-4-5-20251001"},
        ],
    },
    {
        "id": "xai",
        "name": "xAI Grok",
        "models": [
            {"id": "grok-4-0709"},
            {"id": "grok-4-1-fast-reasoning"},
            {"id": "grok-3"},
        ],
    },
    {
        "id": "gemini",
        "name": "Google Gemini",
        "models": [
            {"id": "gemini-2.5-flash"},
            {"id": "gemini-2.5-pro"},
        ],
    },
]


def get_models_for_provider(provider_id: str) -> list[dict[str, Any]]:
    """Models for a provider, or an empty list if the provider is unknown."""
    for provider in PROVIDERS:
        if provider["id"] == provider_id:
            return provider["models"]
    return []


def is_valid_model_for_provider(provider_id: str, model_id: str) -> bool:
    return any(m["id"] == model_id for m in get_models_for_provider(provider_id))
