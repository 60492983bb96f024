"""Best-effort snapshots of the latest prompts for admin inspection.

Writes run as detached tasks. A failed write is logged and never reaches the
request that produced the prompt.
"""

import asyncio
import logging
from datetime import UTC, datetime
from typing import Any

from db.base import KVStore
from services.runtime_config import KVKey

logger = logging.getLogger(__name__)


class PromptRecorder:
    """Fire-and-forget writer for ``CURRENT_FULL_PROMPT`` and ``LATEST_*`` keys."""

    def __init__(self, store: KVStore) -> None:
        self._store = store
        # Strong references; the event loop only keeps weak ones.
        self._pending: set[asyncio.Task] = set()

    def record_in_background(self, key: KVKey, payload: dict[str, Any]) -> None:
        """Schedule a write of ``payload`` (stamped with the time) under ``key``."""
        payload = {**payload, "timestamp": datetime.now(UTC).isoformat()}
        task = asyncio.create_task(self._write(key, payload))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _write(self, key: KVKey, payload: dict[str, Any]) -> None:
        try:
            await self._store.set(key.value, payload)
            logger.debug("Recorded %s", key.value)
        except Exception as e:
            logger.warning("Failed to record %s: %s", key.value, e)

    async def drain(self) -> None:
        """Wait for pending writes (used on shutdown and in tests)."""
        if self._pending:
            await asyncio.gather(*self._pending)
