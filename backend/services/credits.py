"""Per-user generation credits.

Usage counts live in one aggregate mapping (``USER_CREDITS``: user id to
calls consumed). Tiers come from static membership lists in settings, so
nothing tier-related is stored per user.

Increments are a read-modify-write of the whole mapping. The lock below only
serializes increments inside one process; two processes (or instances)
charging the same user concurrently can still lose an increment, which
under-counts usage. Limits are therefore soft.
"""

import asyncio
import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from db.base import KVStore, KVStoreError
from services.runtime_config import KVKey

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CreditStatus:
    user_id: str
    allowed: bool
    remaining: float
    used: int
    limit: float
    is_admin: bool = False

    @property
    def remaining_count(self) -> int | None:
        """Remaining credits for JSON bodies; None means unlimited."""
        return None if math.isinf(self.remaining) else int(self.remaining)

    @property
    def limit_count(self) -> int | None:
        return None if math.isinf(self.limit) else int(self.limit)


def _as_counts(raw: Any) -> dict[str, int]:
    if not isinstance(raw, dict):
        return {}
    counts: dict[str, int] = {}
    for user_id, used in raw.items():
        try:
            counts[str(user_id)] = int(used)
        except (TypeError, ValueError):
            logger.warning("Ignoring malformed credit count for %s: %r", user_id, used)
    return counts


class CreditLedger:
    """Checks and charges generation credits."""

    def __init__(
        self,
        store: KVStore,
        *,
        admin_users: Iterable[str] = (),
        premium_users: Iterable[str] = (),
        free_credits: int = 5,
        premium_credits: int = 200,
    ) -> None:
        self._store = store
        self._admins = frozenset(admin_users)
        self._premium = frozenset(premium_users)
        self.free_credits = free_credits
        self.premium_credits = premium_credits
        self._lock = asyncio.Lock()

    def is_admin(self, user_id: str) -> bool:
        return user_id in self._admins

    def is_premium(self, user_id: str) -> bool:
        return user_id in self._premium

    def credit_limit(self, user_id: str) -> float:
        """Total credits for the user's tier; infinite for admins."""
        if self.is_admin(user_id):
            return math.inf
        if self.is_premium(user_id):
            return self.premium_credits
        return self.free_credits

    async def get_used(self, user_id: str) -> int:
        """Calls consumed so far. Store failures read as zero."""
        try:
            raw = await self._store.get(KVKey.USER_CREDITS.value)
        except Exception as e:
            logger.warning("Failed to read credits for %s: %s", user_id, e)
            return 0
        return _as_counts(raw).get(user_id, 0)

    async def check_credits(self, user_id: str) -> CreditStatus:
        """Read-only check of the user's remaining credits."""
        if self.is_admin(user_id):
            return CreditStatus(
                user_id=user_id,
                allowed=True,
                remaining=math.inf,
                used=0,
                limit=math.inf,
                is_admin=True,
            )

        used = await self.get_used(user_id)
        limit = self.credit_limit(user_id)
        remaining = max(0, limit - used)
        return CreditStatus(
            user_id=user_id,
            allowed=remaining > 0,
            remaining=remaining,
            used=used,
            limit=limit,
        )

    async def increment_user_credits(self, user_id: str) -> int:
        """Record one consumed call and return the new count.

        Admins are never charged; their count is returned unchanged.

        Raises:
            KVStoreError: If the aggregate could not be read or written.
        """
        if self.is_admin(user_id):
            return await self.get_used(user_id)

        async with self._lock:
            try:
                raw = await self._store.get(KVKey.USER_CREDITS.value)
            except KVStoreError:
                raise
            except Exception as e:
                raise KVStoreError(f"Failed to read credits: {e}") from e

            counts = _as_counts(raw)
            counts[user_id] = counts.get(user_id, 0) + 1
            await self._store.set(KVKey.USER_CREDITS.value, counts)

        logger.info("Charged credit for %s (used=%d)", user_id, counts[user_id])
        return counts[user_id]

    async def charge(self, user_id: str) -> CreditStatus:
        """Charge one credit after a successful generation.

        A failed write is logged and does not fail the request; the returned
        status then reflects whatever the store currently holds.
        """
        try:
            await self.increment_user_credits(user_id)
        except KVStoreError as e:
            logger.error("Failed to charge credit for %s: %s", user_id, e)
        return await self.check_credits(user_id)
