"""
Unit lock strategy factory.
Configures which serialization strategy the booking service uses.
"""

from typing import Optional

from app.services.interfaces.unit_lock import UnitLock
from app.services.interfaces.local_unit_lock import LocalUnitLock
from app.core.config import get_settings


def get_unit_lock_strategy() -> UnitLock:
    """
    Build the configured strategy.

    - local: one process (default, tests)
    - redis: several workers sharing one database

    Selected via the UNIT_LOCK_STRATEGY env var.
    """
    settings = get_settings()
    strategy = settings.UNIT_LOCK_STRATEGY.lower()

    if strategy == 'redis':
        from app.services.redis_unit_lock import RedisUnitLock

        return RedisUnitLock(
            timeout=settings.UNIT_LOCK_TIMEOUT_SECONDS,
            ttl=settings.UNIT_LOCK_TTL_SECONDS,
        )
    if strategy == 'local':
        return LocalUnitLock(timeout=settings.UNIT_LOCK_TIMEOUT_SECONDS)
    raise ValueError(f"Unknown UNIT_LOCK_STRATEGY: {settings.UNIT_LOCK_STRATEGY}")


# Singleton instance
_strategy: Optional[UnitLock] = None


def get_unit_lock() -> UnitLock:
    """Get unit lock strategy singleton."""
    global _strategy
    if _strategy is None:
        _strategy = get_unit_lock_strategy()
    return _strategy
