"""
In-process lock strategy: one asyncio.Lock per unit.
Correct only while a single process serves all writes.
"""

import asyncio

from app.core.exceptions import UnitLockUnavailable
from app.core.metrics import record_lock_failure
from app.services.interfaces.unit_lock import UnitLock


class LocalUnitLock(UnitLock):
    """
    Use when:
    - One uvicorn worker
    - Tests and local development

    Locks are created on demand and dropped once nobody holds or waits on
    them, so the registry does not grow with the number of units ever seen.
    """

    name = "local"

    def __init__(self, timeout: float = 5.0):
        self.timeout = timeout
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    async def acquire(self, key: str) -> asyncio.Lock:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            await asyncio.wait_for(lock.acquire(), timeout=self.timeout)
        except asyncio.TimeoutError:
            self._forget(key)
            record_lock_failure(self.name)
            raise UnitLockUnavailable(key)
        except asyncio.CancelledError:
            # caller went away while waiting
            self._forget(key)
            raise
        return lock

    async def release(self, key: str, token: asyncio.Lock) -> None:
        token.release()
        self._forget(key)

    def _forget(self, key: str) -> None:
        self._users[key] -= 1
        if self._users[key] == 0:
            del self._users[key]
            del self._locks[key]

    def active_units(self) -> int:
        return len(self._locks)
