"""
Tent hold strategy factory.
ADMISSION_STRATEGY selects the implementation.
"""

from typing import Optional

from nomadic.services.interfaces.admission import AdmissionStrategy
from nomadic.services.interfaces.optimistic_admission import OptimisticAdmission
from nomadic.services.admission_service import RedisAdmission
from nomadic.core.config import get_settings


def get_admission_strategy() -> AdmissionStrategy:
    """
    - "optimistic" (default): read-then-write, no holds
    - "redis": atomic per-date holds
    """
    strategy = get_settings().ADMISSION_STRATEGY

    if strategy == 'redis':
        return RedisAdmission()
    return OptimisticAdmission()


_strategy: Optional[AdmissionStrategy] = None


def get_admission() -> AdmissionStrategy:
    """Strategy singleton; also the FastAPI dependency."""
    global _strategy
    if _strategy is None:
        _strategy = get_admission_strategy()
    return _strategy
