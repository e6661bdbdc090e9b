"""値オブジェクト（Value Objects）

値オブジェクトは不変で、同値性によって識別されます。
"""

from .time_slot import TimeSlot, PreferredTime
from .assignment import TimetableEntry, ConstraintViolation, ConstraintLevel
from .relaxation import (
    RelaxationAction,
    RelaxationSuggestion,
    RelaxationConfig,
    RelaxationResult,
)

__all__ = [
    'TimeSlot',
    'PreferredTime',
    'TimetableEntry',
    'ConstraintViolation',
    'ConstraintLevel',
    'RelaxationAction',
    'RelaxationSuggestion',
    'RelaxationConfig',
    'RelaxationResult',
]
