"""
Distributed lock strategy for multi-worker deployments.
Implements UnitLock using redis-py's Lock (SET NX PX + token check on release).

Failure mode:
  Unlike a cache, this lock is what keeps two workers from accepting the same
  nights. On Redis failure the request fails closed with UnitLockUnavailable
  (HTTP 503) instead of proceeding unserialized.

  The lock has a TTL so a crashed worker cannot wedge a unit forever. The TTL
  must comfortably exceed one use case (two reads and one write).
"""

from typing import Optional

import redis.asyncio as redis
from redis.exceptions import LockError, RedisError

from app.core.exceptions import UnitLockUnavailable
from app.core.logging import get_logger
from app.core.metrics import record_lock_failure
from app.infrastructure.redis_client import get_redis
from app.services.interfaces.unit_lock import UnitLock

logger = get_logger(__name__)


class RedisUnitLock(UnitLock):
    """
    Use when:
    - More than one uvicorn/gunicorn worker or host serves bookings
    """

    name = "redis"

    def __init__(self, timeout: float = 5.0, ttl: float = 30.0, client: Optional[redis.Redis] = None):
        self.redis = client if client is not None else get_redis()
        self.timeout = timeout
        self.ttl = ttl

    @staticmethod
    def key_for(key: str) -> str:
        return f"booking-lock:{key}"

    async def acquire(self, key: str):
        lock = self.redis.lock(self.key_for(key), timeout=self.ttl, blocking_timeout=self.timeout)
        try:
            acquired = await lock.acquire()
        except RedisError as e:
            record_lock_failure(self.name)
            logger.error("unit_lock_redis_error", key=key, error=str(e))
            raise UnitLockUnavailable(key, reason="lock service unavailable") from e

        if not acquired:
            record_lock_failure(self.name)
            raise UnitLockUnavailable(key)
        return lock

    async def release(self, key: str, token) -> None:
        try:
            await token.release()
        except LockError:
            # TTL ran out before we finished; someone else may own it now
            logger.warning("unit_lock_expired_before_release", key=key, ttl=self.ttl)
        except RedisError as e:
            logger.error("unit_lock_release_failed", key=key, error=str(e))
