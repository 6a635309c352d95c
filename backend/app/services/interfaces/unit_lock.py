"""
Per-unit lock strategy interface.
Allows swapping between in-process and distributed serialization.
"""

import time
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from app.core.logging import get_logger
from app.core.metrics import unit_lock_wait

logger = get_logger(__name__)


class UnitLock(ABC):
    """
    Serializes the check-then-write sequence for one lock key.
    The booking service uses keys "unit:{unit_id}" and "guest:{guest_name}".

    Implementations:
    - LocalUnitLock: asyncio locks, one process
    - RedisUnitLock: Redis lock shared by every worker process

    Two use cases holding the same key never run their availability check and
    write concurrently while both hold the lock through `hold()`.
    """

    name: str = "abstract"

    @abstractmethod
    async def acquire(self, key: str) -> Any:
        """
        Block until the key is locked.

        Returns:
            A token to hand back to release()

        Raises:
            UnitLockUnavailable if the lock cannot be obtained in time
        """
        pass

    @abstractmethod
    async def release(self, key: str, token: Any) -> None:
        pass

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        start = time.perf_counter()
        token = await self.acquire(key)
        waited = time.perf_counter() - start
        unit_lock_wait.observe(waited)
        logger.debug("unit_lock_acquired", key=key, strategy=self.name, wait_ms=round(waited * 1000, 2))
        try:
            yield
        finally:
            await self.release(key, token)
