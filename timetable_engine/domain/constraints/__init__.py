"""制約モジュール"""

from .base import Constraint, SoftConstraint, ScheduleView, IndexedScheduleView, is_joint_session
from .critical import (
    TeacherConflictConstraint,
    TeacherAvailabilityConstraint,
    RoomConflictConstraint,
    BlockContiguityConstraint,
    ClassConflictConstraint,
    critical_constraints,
)
from .high import (
    WeeklyHoursConstraint,
    TeacherWeeklyHoursConstraint,
    PriorityTeacherPreferenceConstraint,
    ExternalInstructorConcentrationConstraint,
    TeacherDailyHoursConstraint,
    high_constraints,
)
from .medium import (
    ConsecutivePeriodsConstraint,
    LunchConcentrationConstraint,
    GradeSuitabilityConstraint,
    medium_constraints,
)
from .low import PreferencePatternConstraint, RoomChangeConstraint, low_constraints
from .soft import DEFAULT_SOFT_WEIGHTS, soft_constraints

__all__ = [
    'Constraint',
    'SoftConstraint',
    'ScheduleView',
    'IndexedScheduleView',
    'is_joint_session',
    'TeacherConflictConstraint',
    'TeacherAvailabilityConstraint',
    'RoomConflictConstraint',
    'BlockContiguityConstraint',
    'ClassConflictConstraint',
    'WeeklyHoursConstraint',
    'TeacherWeeklyHoursConstraint',
    'PriorityTeacherPreferenceConstraint',
    'ExternalInstructorConcentrationConstraint',
    'TeacherDailyHoursConstraint',
    'ConsecutivePeriodsConstraint',
    'LunchConcentrationConstraint',
    'GradeSuitabilityConstraint',
    'PreferencePatternConstraint',
    'RoomChangeConstraint',
    'DEFAULT_SOFT_WEIGHTS',
    'critical_constraints',
    'high_constraints',
    'medium_constraints',
    'low_constraints',
    'soft_constraints',
]
