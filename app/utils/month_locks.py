"""
Per (hostel, month, year) write serialisation.

Fact writes and closing transitions for the same hostel-month run one at a
time inside this process, so a write that passed the lock check cannot land
after a lock it raced with. Different hostel-months never block each other.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Tuple

MonthKey = Tuple[str, int, int]


class MonthLockRegistry:
    """Keyed asyncio locks, one per hostel-month."""

    def __init__(self):
        self._locks: Dict[MonthKey, asyncio.Lock] = {}
        self._waiters: Dict[MonthKey, int] = {}

    @staticmethod
    def key(hostel_id, month: int, year: int) -> MonthKey:
        return (str(hostel_id), int(month), int(year))

    @asynccontextmanager
    async def hold(self, hostel_id, month: int, year: int) -> AsyncIterator[None]:
        """Hold the lock for one hostel-month for the duration of the block."""
        key = self.key(hostel_id, month, year)
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._waiters[key] = self._waiters.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[key] -= 1
            if self._waiters[key] == 0:
                # Nobody else holds or waits on it
                del self._waiters[key]
                del self._locks[key]

    @asynccontextmanager
    async def hold_many(self, keys) -> AsyncIterator[None]:
        """Hold several hostel-month locks, acquired in sorted order."""
        ordered = sorted({self.key(*k) for k in keys})
        async with _nested(self, ordered):
            yield

    def __len__(self) -> int:
        return len(self._locks)


@asynccontextmanager
async def _nested(registry: MonthLockRegistry, keys) -> AsyncIterator[None]:
    if not keys:
        yield
        return
    first, rest = keys[0], keys[1:]
    async with registry.hold(*first):
        async with _nested(registry, rest):
            yield
