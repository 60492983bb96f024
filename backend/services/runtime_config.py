"""Runtime settings kept in the key-value store.

Each tracked setting pairs a config snapshot field with its store key and
a built-in default. Absent or unreadable values always resolve to the
default, so the service starts in a valid state against an empty store.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from config import Settings
from db.base import KVStore
from llm.prompts.engine import (
    REASONING_MODE_FIELD,
    RESPONSE_CRITERIA_FIELD,
    PromptTask,
)
from llm.prompts.templates import DEFAULT_RESPONSE_CRITERIA
from llm.service import MODEL_FIELD, PROVIDER_FIELD

logger = logging.getLogger(__name__)

_TRUTHY = frozenset({"true", "1", "yes", "on"})


class KVKey(str, Enum):
    """Flat keys in the key-value store."""

    SYSTEM_PROMPT = "SYSTEM_PROMPT"
    RESPONSE_CRITERIA = "RESPONSE_CRITERIA"
    LLM_MODEL_NAME = "LLM_MODEL_NAME"
    LLM_PROVIDER = "LLM_PROVIDER"
    LOG_PROMPT = "LOG_PROMPT"
    SUGGESTION_PROMPT = "SUGGESTION_PROMPT"
    GRADE_RESPONSE_PROMPT = "GRADE_RESPONSE_PROMPT"
    ANALYZE_INTENT_PROMPT = "ANALYZE_INTENT_PROMPT"
    GENERATE_FROM_DIRECTION_PROMPT = "GENERATE_FROM_DIRECTION_PROMPT"
    USER_CREDITS = "USER_CREDITS"
    PROMPT_VERSIONS = "PROMPT_VERSIONS"
    CURRENT_FULL_PROMPT = "CURRENT_FULL_PROMPT"
    LATEST_SUGGESTION_PROMPT = "LATEST_SUGGESTION_PROMPT"
    LATEST_GRADE_PROMPT = "LATEST_GRADE_PROMPT"
    LATEST_ANALYZE_INTENT_PROMPT = "LATEST_ANALYZE_INTENT_PROMPT"
    LATEST_GENERATE_FROM_DIRECTION_PROMPT = "LATEST_GENERATE_FROM_DIRECTION_PROMPT"


@dataclass(frozen=True)
class RuntimeSetting:
    field: str
    key: KVKey
    default: Any
    is_flag: bool = False

    def coerce(self, raw: Any) -> Any:
        """Normalize a stored value, substituting the default when unset."""
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            return self.default
        if self.is_flag:
            if isinstance(raw, str):
                return raw.strip().lower() in _TRUTHY
            return bool(raw)
        return raw if isinstance(raw, str) else str(raw)


def tracked_settings(settings: Settings) -> tuple[RuntimeSetting, ...]:
    """Every setting the configuration cache keeps in its snapshot."""
    return (
        RuntimeSetting(MODEL_FIELD, KVKey.LLM_MODEL_NAME, settings.default_llm_model),
        RuntimeSetting(
            PROVIDER_FIELD, KVKey.LLM_PROVIDER, settings.default_llm_provider
        ),
        RuntimeSetting(
            PromptTask.REPLY.override_field,
            KVKey.SYSTEM_PROMPT,
            PromptTask.REPLY.default_instruction,
        ),
        RuntimeSetting(
            RESPONSE_CRITERIA_FIELD, KVKey.RESPONSE_CRITERIA, DEFAULT_RESPONSE_CRITERIA
        ),
        RuntimeSetting(REASONING_MODE_FIELD, KVKey.LOG_PROMPT, False, is_flag=True),
        RuntimeSetting(
            PromptTask.CONSULTATION.override_field,
            KVKey.SUGGESTION_PROMPT,
            PromptTask.CONSULTATION.default_instruction,
        ),
        RuntimeSetting(
            PromptTask.GRADE.override_field,
            KVKey.GRADE_RESPONSE_PROMPT,
            PromptTask.GRADE.default_instruction,
        ),
        RuntimeSetting(
            PromptTask.ANALYZE_INTENT.override_field,
            KVKey.ANALYZE_INTENT_PROMPT,
            PromptTask.ANALYZE_INTENT.default_instruction,
        ),
        RuntimeSetting(
            PromptTask.FROM_DIRECTION.override_field,
            KVKey.GENERATE_FROM_DIRECTION_PROMPT,
            PromptTask.FROM_DIRECTION.default_instruction,
        ),
    )


async def read_setting(store: KVStore, setting: RuntimeSetting) -> Any:
    """Read one setting, falling back to its default on any store error."""
    try:
        raw = await store.get(setting.key.value)
    except Exception as e:
        logger.warning("Failed to read %s, using default: %s", setting.key.value, e)
        return setting.default
    return setting.coerce(raw)
