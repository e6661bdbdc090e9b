"""低優先度（Low）制約"""
from typing import List

from .base import Constraint, ScheduleView
from ..value_objects.assignment import ConstraintLevel, ConstraintViolation


class PreferencePatternConstraint(Constraint):
    """希望時間帯制約（優先教員以外）"""

    def __init__(self):
        super().__init__(ConstraintLevel.LOW, "preference", "希望時間帯制約")

    def validate(self, view: ScheduleView) -> List[ConstraintViolation]:
        violations = []
        school = view.school
        for entry in view.entries:
            lunch_period = school.lunch_period_for(entry.class_id)
            for teacher_id in entry.all_teacher_ids:
                teacher = school.get_teacher(teacher_id)
                if not teacher or teacher.is_priority:
                    continue
                if teacher.prefers(entry.day, entry.period, lunch_period) is False:
                    violations.append(self.violation(
                        f"{teacher.name}先生の希望時間帯に合っていません（{entry.time_slot}）",
                        entry_id=entry.id,
                        teacher_id=teacher.id,
                    ))
        return violations


class RoomChangeConstraint(Constraint):
    """教室移動制約: 連続する校時での不要な教室移動を避ける"""

    def __init__(self):
        super().__init__(ConstraintLevel.LOW, "movement", "教室移動制約")

    def validate(self, view: ScheduleView) -> List[ConstraintViolation]:
        violations = []
        for (teacher_id, day), entries in view.by_teacher_day.items():
            rooms = {e.period: e.room_id for e in entries}
            changes = sum(
                1 for period, room in rooms.items()
                if period + 1 in rooms and rooms[period + 1] != room
            )
            if changes:
                violations.append(self.violation(
                    f"教員{teacher_id}が{day}曜日に連続する校時で教室を移動しています（{changes}回）",
                    teacher_id=teacher_id,
                    day=day,
                    changes=changes,
                ))
        return violations


def low_constraints():
    return [
        PreferencePatternConstraint(),
        RoomChangeConstraint(),
    ]
