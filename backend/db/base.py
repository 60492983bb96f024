"""Key-value store interface.

Runtime configuration, credit counters and prompt snapshots are all stored
as flat string keys mapped to JSON-compatible values.
"""

from abc import ABC, abstractmethod
from typing import Any


class KVStoreError(Exception):
    """Raised when a key-value store operation fails."""


class KVStore(ABC):
    """Abstract async key-value store."""

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Return the value for ``key`` or None when absent."""

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    @abstractmethod
    async def health_check(self) -> dict[str, Any]:
        """Return ``{"status": "healthy"|"unhealthy", ...}``."""
