"""Process-local key-value store for development and tests."""

import copy
import logging
from typing import Any

from db.base import KVStore

logger = logging.getLogger(__name__)


class InMemoryKVStore(KVStore):
    """Dictionary-backed store. Values are deep-copied in and out."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}

    async def get(self, key: str) -> Any | None:
        return copy.deepcopy(self._data.get(key))

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)
        logger.debug("Stored key %s", key)

    async def health_check(self) -> dict[str, Any]:
        return {"status": "healthy", "latency_ms": 0.0, "backend": "memory"}
