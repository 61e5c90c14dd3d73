"""
Tent hold strategy interfaces.
The booking flow depends on AdmissionStrategy, never on Redis directly.
"""

from .admission import AdmissionStrategy
from .optimistic_admission import OptimisticAdmission

__all__ = ['AdmissionStrategy', 'OptimisticAdmission']
