"""Per-key serialization of in-flight async operations."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class InFlightTracker:
    """Hands out one :class:`asyncio.Lock` per key while it is in use.

    Operations on the same key run one after another; different keys never
    block each other. Locks are dropped once no holder or waiter remains so
    the map only grows with concurrent activity.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    def is_pending(self, key: str) -> bool:
        return key in self._users

    @property
    def pending_keys(self) -> frozenset[str]:
        return frozenset(self._users)

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            remaining = self._users[key] - 1
            if remaining:
                self._users[key] = remaining
            else:
                del self._users[key]
                del self._locks[key]
