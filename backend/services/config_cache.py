"""TTL-bounded in-memory view of the runtime settings.

Usage:
    cache = ConfigCache(store, tracked_settings(settings), ttl_seconds=300)
    config = await cache.get_all()
    ...
    await store.set(KVKey.SYSTEM_PROMPT.value, text)
    cache.invalidate()
"""

import asyncio
import logging
import time
from collections.abc import Callable, Iterable
from typing import Any

from db.base import KVStore
from services.runtime_config import RuntimeSetting, read_setting

logger = logging.getLogger(__name__)


class ConfigCache:
    """Snapshot of runtime settings refreshed at most once per TTL.

    Concurrent callers that find the snapshot stale share one in-flight
    refresh. Readers are never blocked by writers: a write followed by
    ``invalidate()`` is visible from the next ``get_all()``.
    """

    def __init__(
        self,
        store: KVStore,
        settings: Iterable[RuntimeSetting],
        ttl_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._store = store
        self._settings = {setting.field: setting for setting in settings}
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._snapshot: dict[str, Any] = {}
        self._last_refresh: float | None = None
        self._refresh_task: asyncio.Task | None = None
        # Bumped by invalidate() so a refresh that started earlier
        # does not mark its possibly stale result as fresh.
        self._generation = 0
        self._snapshot_generation = -1

    def setting(self, field: str) -> RuntimeSetting:
        return self._settings[field]

    def _is_stale(self) -> bool:
        if not self._snapshot or self._last_refresh is None:
            return True
        return self._clock() - self._last_refresh >= self.ttl_seconds

    async def get_all(self) -> dict[str, Any]:
        """Return a copy of the current snapshot, refreshing it if stale."""
        if self._is_stale():
            if self._refresh_task is None:
                self._refresh_task = asyncio.create_task(self._run_refresh())
            await asyncio.shield(self._refresh_task)
        return dict(self._snapshot)

    async def _run_refresh(self) -> None:
        try:
            await self.refresh()
        finally:
            # invalidate() may already have detached this task
            if self._refresh_task is asyncio.current_task():
                self._refresh_task = None

    async def refresh(self) -> None:
        """Read every tracked key in parallel, defaulting per key."""
        generation = self._generation
        fields = list(self._settings)
        values = await asyncio.gather(
            *(read_setting(self._store, self._settings[field]) for field in fields)
        )
        # A refresh that started before an invalidate() must not replace
        # the result of one that started after it
        if generation >= self._snapshot_generation:
            self._snapshot = dict(zip(fields, values, strict=True))
            self._snapshot_generation = generation
        if generation == self._generation:
            self._last_refresh = self._clock()
        logger.debug("Config cache refreshed (%d keys)", len(fields))

    def invalidate(self) -> None:
        """Force the next ``get_all()`` to re-read the store."""
        self._generation += 1
        self._last_refresh = None
        # Readers arriving now start a new refresh instead of joining one
        # that may have read the store before the write
        self._refresh_task = None
        logger.info("Config cache invalidated")
