"""中優先度（Medium）制約"""
from typing import List

from .base import Constraint, ScheduleView
from ..value_objects.assignment import ConstraintLevel, ConstraintViolation, TimetableEntry

MAX_MORNING_PERIODS = 3


class ConsecutivePeriodsConstraint(Constraint):
    """連続授業制約: 教員が3校時以上連続で授業しない

    ブロック授業と、連続授業を許可された教員は対象外です。
    """

    def __init__(self):
        super().__init__(ConstraintLevel.MEDIUM, "consecutive_periods", "連続授業制約")

    def validate(self, view: ScheduleView) -> List[ConstraintViolation]:
        violations = []
        school = view.school
        for entry in view.entries:
            subject = school.get_subject(entry.subject_id)
            if subject and subject.is_block_class:
                continue
            for teacher_id in entry.all_teacher_ids:
                teacher = school.get_teacher(teacher_id)
                if teacher and teacher.allow_consecutive:
                    continue
                periods = {
                    e.period for e in view.by_teacher_day.get((teacher_id, entry.day), [])
                    if e.id != entry.id
                }
                neighbours = (entry.period - 1 in periods) + (entry.period + 1 in periods)
                if neighbours + 1 >= 3:
                    violations.append(self.violation(
                        f"教員{teacher_id}が{entry.day}曜日に3校時以上連続で授業しています",
                        entry_id=entry.id,
                        teacher_id=teacher_id,
                        day=entry.day,
                    ))
        return violations


class LunchConcentrationConstraint(Constraint):
    """昼前集中制約: 昼休み前に授業が詰まりすぎないようにする"""

    def __init__(self):
        super().__init__(ConstraintLevel.MEDIUM, "lunch_concentration", "昼前集中制約")

    def validate(self, view: ScheduleView) -> List[ConstraintViolation]:
        violations = []
        for (class_id, day), entries in view.by_class_day.items():
            lunch_period = view.school.lunch_period_for(class_id)
            morning = {e.period for e in entries if e.period <= lunch_period}
            if len(morning) > MAX_MORNING_PERIODS:
                violations.append(self.violation(
                    f"{class_id}の{day}曜日は昼休み前に授業が集中しています（{len(morning)}校時）",
                    class_id=class_id,
                    day=day,
                    morning_periods=len(morning),
                ))
        return violations


class GradeSuitabilityConstraint(Constraint):
    """学年適合制約"""

    def __init__(self):
        super().__init__(ConstraintLevel.MEDIUM, "grade_suitability", "学年適合制約")

    def check(self, entry: TimetableEntry, view: ScheduleView) -> bool:
        subject = view.school.get_subject(entry.subject_id)
        grade = view.school.grade_of(entry.class_id)
        if not subject or grade is None:
            return True
        return subject.is_suitable_for_grade(grade)

    def message(self, entry: TimetableEntry) -> str:
        return f"{entry.subject_id}は{entry.class_id}の学年に適していません"


def medium_constraints():
    return [
        ConsecutivePeriodsConstraint(),
        LunchConcentrationConstraint(),
        GradeSuitabilityConstraint(),
    ]
