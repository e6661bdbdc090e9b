"""高優先度（High）制約"""
from typing import List

from .base import Constraint, ScheduleView
from ..value_objects.assignment import ConstraintLevel, ConstraintViolation


class WeeklyHoursConstraint(Constraint):
    """週授業時数制約: 学級ごとに教科の週時数を過不足なく配置する"""

    def __init__(self):
        super().__init__(ConstraintLevel.HIGH, "weekly_hours", "週授業時数制約")

    def validate(self, view: ScheduleView) -> List[ConstraintViolation]:
        violations = []
        school = view.school
        for class_info in school.classes:
            for subject in school.required_subjects(class_info):
                actual = view.hours_by_class_subject.get((class_info.id, subject.id), 0)
                required = subject.weekly_hours
                if actual == required:
                    continue
                if actual == 0:
                    message = f"{class_info.display_name}の{subject.name}が配置されていません"
                elif actual < required:
                    message = (f"{class_info.display_name}の{subject.name}の時数が不足しています"
                               f"（必要: {required}, 現在: {actual}）")
                else:
                    message = (f"{class_info.display_name}の{subject.name}の時数が超過しています"
                               f"（必要: {required}, 現在: {actual}）")
                violations.append(self.violation(
                    message,
                    subject_id=subject.id,
                    class_id=class_info.id,
                    required=required,
                    actual=actual,
                ))
        return violations


class TeacherWeeklyHoursConstraint(Constraint):
    """教員週最大時数制約"""

    def __init__(self):
        super().__init__(ConstraintLevel.HIGH, "teacher_max_weekly_hours", "教員週最大時数制約")

    def validate(self, view: ScheduleView) -> List[ConstraintViolation]:
        violations = []
        for teacher in view.school.teachers:
            assigned = len(view.by_teacher.get(teacher.id, []))
            if assigned > teacher.max_weekly_hours:
                violations.append(self.violation(
                    f"{teacher.name}先生の週時数が上限を超えています"
                    f"（上限: {teacher.max_weekly_hours}, 現在: {assigned}）",
                    teacher_id=teacher.id,
                    max_hours=teacher.max_weekly_hours,
                    actual=assigned,
                ))
        return violations


class PriorityTeacherPreferenceConstraint(Constraint):
    """優先教員の希望時間帯制約"""

    def __init__(self):
        super().__init__(ConstraintLevel.HIGH, "priority_preference", "優先教員希望時間帯制約")

    def validate(self, view: ScheduleView) -> List[ConstraintViolation]:
        violations = []
        school = view.school
        for entry in view.entries:
            lunch_period = school.lunch_period_for(entry.class_id)
            for teacher_id in entry.all_teacher_ids:
                teacher = school.get_teacher(teacher_id)
                if not teacher or not teacher.is_priority:
                    continue
                if teacher.prefers(entry.day, entry.period, lunch_period) is False:
                    violations.append(self.violation(
                        f"優先教員{teacher.name}先生の希望時間帯に合っていません（{entry.time_slot}）",
                        entry_id=entry.id,
                        teacher_id=teacher.id,
                    ))
        return violations


class ExternalInstructorConcentrationConstraint(Constraint):
    """外部講師集中制約: 外部講師の授業を1日にまとめる"""

    def __init__(self):
        super().__init__(ConstraintLevel.HIGH, "external_concentration", "外部講師集中制約")

    def validate(self, view: ScheduleView) -> List[ConstraintViolation]:
        violations = []
        school = view.school
        for subject in school.subjects:
            if not subject.is_external_instructor or not subject.prefer_concentrated:
                continue
            for teacher in school.get_subject_teachers(subject.id):
                if not teacher.is_external:
                    continue
                days = {e.day for e in view.by_teacher.get(teacher.id, [])}
                if len(days) > 1:
                    violations.append(self.violation(
                        f"外部講師{teacher.name}先生の授業が1日にまとまっていません（{len(days)}日）",
                        subject_id=subject.id,
                        teacher_id=teacher.id,
                        days=sorted(days),
                    ))
        return violations


class TeacherDailyHoursConstraint(Constraint):
    """教員日最大時数制約"""

    def __init__(self):
        super().__init__(ConstraintLevel.HIGH, "teacher_daily_max", "教員日最大時数制約")

    def validate(self, view: ScheduleView) -> List[ConstraintViolation]:
        violations = []
        for (teacher_id, day), entries in view.by_teacher_day.items():
            teacher = view.school.get_teacher(teacher_id)
            if not teacher:
                continue
            if len(entries) > teacher.max_daily_hours:
                violations.append(self.violation(
                    f"{teacher.name}先生の{day}曜日の授業が1日の上限を超えています"
                    f"（上限: {teacher.max_daily_hours}, 現在: {len(entries)}）",
                    teacher_id=teacher_id,
                    day=day,
                ))
        return violations


def high_constraints():
    return [
        WeeklyHoursConstraint(),
        TeacherWeeklyHoursConstraint(),
        PriorityTeacherPreferenceConstraint(),
        ExternalInstructorConcentrationConstraint(),
        TeacherDailyHoursConstraint(),
    ]
