"""
Service interfaces for dependency inversion.
Allows swapping implementations without changing business logic.
"""

from .unit_lock import UnitLock
from .local_unit_lock import LocalUnitLock

__all__ = ['UnitLock', 'LocalUnitLock']
