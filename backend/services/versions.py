"""Saved snapshots of the prompt configuration.

Versions are a manual history for admins; the generation path never reads
them. The list is stored newest-first under ``PROMPT_VERSIONS``.
"""

import logging
import secrets
import time
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from db.base import KVStore, KVStoreError
from services.runtime_config import KVKey

logger = logging.getLogger(__name__)

VERSIONED_KEYS = (
    KVKey.SYSTEM_PROMPT,
    KVKey.RESPONSE_CRITERIA,
    KVKey.LLM_MODEL_NAME,
    KVKey.LLM_PROVIDER,
)


class VersionNotFoundError(Exception):
    """Raised when deleting a version id that is not in the history."""

    def __init__(self, version_id: str):
        self.version_id = version_id
        super().__init__(f"Version not found: {version_id}")


def new_version_id() -> str:
    return f"v_{int(time.time() * 1000)}_{secrets.token_hex(3)}"


class VersionService:
    """Create, list and delete configuration versions."""

    def __init__(self, store: KVStore, defaults: Mapping[KVKey, str]) -> None:
        self._store = store
        self._defaults = dict(defaults)

    async def _load(self) -> list[dict[str, Any]]:
        try:
            raw = await self._store.get(KVKey.PROMPT_VERSIONS.value)
        except KVStoreError:
            raise
        except Exception as e:
            raise KVStoreError(f"Failed to read versions: {e}") from e
        if not isinstance(raw, list):
            return []
        return [item for item in raw if isinstance(item, dict)]

    def _config_data(self, config_data: Mapping[str, Any] | None) -> dict[str, str]:
        config_data = config_data or {}
        data = {}
        for key in VERSIONED_KEYS:
            value = config_data.get(key.value)
            if not isinstance(value, str) or not value:
                value = self._defaults.get(key, "")
            data[key.value] = value
        return data

    async def save_new_version(
        self,
        config_data: Mapping[str, Any] | None,
        description: str | None = None,
    ) -> dict[str, Any]:
        """Prepend a new snapshot to the history and return it."""
        version = {
            "id": new_version_id(),
            "description": description or "",
            "timestamp": datetime.now(UTC).isoformat(),
            "configData": self._config_data(config_data),
        }
        versions = await self._load()
        versions.insert(0, version)
        await self._store.set(KVKey.PROMPT_VERSIONS.value, versions)
        logger.info("Saved config version %s", version["id"])
        return version

    async def get_version_history(self) -> list[dict[str, Any]]:
        """All saved versions, newest first."""
        return await self._load()

    async def delete_version(self, version_id: str) -> None:
        """Remove a version by id.

        Raises:
            VersionNotFoundError: If no version has that id.
        """
        versions = await self._load()
        remaining = [v for v in versions if v.get("id") != version_id]
        if len(remaining) == len(versions):
            raise VersionNotFoundError(version_id)
        await self._store.set(KVKey.PROMPT_VERSIONS.value, remaining)
        logger.info("Deleted config version %s", version_id)
