"""ソフト制約（スコア評価器）

重みはSchedulerConfig.soft_weightsで上書きできます。
"""
from typing import Dict, List, Optional

from .base import ScheduleView, SoftConstraint

DEFAULT_SOFT_WEIGHTS: Dict[str, float] = {
    "movement": 1.0,
    "consecutive_periods": 2.0,
    "lunch_concentration": 1.5,
    "preference": 0.5,
    "external_concentration": 1.0,
}


class MovementEvaluator(SoftConstraint):
    """教室移動の回数（教員・曜日ごとの使用教室数 - 1 の合計）"""

    def __init__(self, weight: float = DEFAULT_SOFT_WEIGHTS["movement"]):
        super().__init__("movement", "教室移動最小化", weight)

    def evaluate(self, view: ScheduleView) -> float:
        moves = 0
        for entries in view.by_teacher_day.values():
            rooms = {e.room_id or "default" for e in entries}
            moves += max(0, len(rooms) - 1)
        return moves


class ConsecutivePeriodsEvaluator(SoftConstraint):
    """3校時連続の回数"""

    def __init__(self, weight: float = DEFAULT_SOFT_WEIGHTS["consecutive_periods"]):
        super().__init__("consecutive_periods", "連続授業回避", weight)

    def evaluate(self, view: ScheduleView) -> float:
        count = 0
        school = view.school
        for (teacher_id, _day), entries in view.by_teacher_day.items():
            teacher = school.get_teacher(teacher_id)
            if teacher and teacher.allow_consecutive:
                continue
            periods = sorted(
                e.period for e in entries
                if not self._is_block(e.subject_id, school)
            )
            for i in range(len(periods) - 2):
                if periods[i + 1] == periods[i] + 1 and periods[i + 2] == periods[i] + 2:
                    count += 1
        return count

    @staticmethod
    def _is_block(subject_id: str, school) -> bool:
        subject = school.get_subject(subject_id)
        return bool(subject and subject.is_block_class)


class LunchConcentrationEvaluator(SoftConstraint):
    """昼休み前の校時数が3を超えた分の合計"""

    def __init__(self, weight: float = DEFAULT_SOFT_WEIGHTS["lunch_concentration"]):
        super().__init__("lunch_concentration", "昼前集中回避", weight)

    def evaluate(self, view: ScheduleView) -> float:
        score = 0
        for (class_id, _day), entries in view.by_class_day.items():
            lunch_period = view.school.lunch_period_for(class_id)
            morning = {e.period for e in entries if e.period <= lunch_period}
            if len(morning) > 3:
                score += len(morning) - 3
        return score


class PreferenceEvaluator(SoftConstraint):
    """希望時間帯に合わない担当の数"""

    def __init__(self, weight: float = DEFAULT_SOFT_WEIGHTS["preference"]):
        super().__init__("preference", "希望時間帯反映", weight)

    def evaluate(self, view: ScheduleView) -> float:
        mismatches = 0
        school = view.school
        for entry in view.entries:
            lunch_period = school.lunch_period_for(entry.class_id)
            for teacher_id in entry.all_teacher_ids:
                teacher = school.get_teacher(teacher_id)
                if teacher and teacher.prefers(entry.day, entry.period, lunch_period) is False:
                    mismatches += 1
        return mismatches


class ExternalConcentrationEvaluator(SoftConstraint):
    """外部講師の授業が分散している日数"""

    def __init__(self, weight: float = DEFAULT_SOFT_WEIGHTS["external_concentration"]):
        super().__init__("external_concentration", "外部講師集中", weight)

    def evaluate(self, view: ScheduleView) -> float:
        spread = 0
        school = view.school
        external_ids = {
            teacher.id
            for subject in school.subjects
            if subject.is_external_instructor and subject.prefer_concentrated
            for teacher in school.get_subject_teachers(subject.id)
            if teacher.is_external
        }
        for teacher_id in external_ids:
            days = {e.day for e in view.by_teacher.get(teacher_id, [])}
            spread += max(0, len(days) - 1)
        return spread


def soft_constraints(weights: Optional[Dict[str, float]] = None) -> List[SoftConstraint]:
    """ソフト制約の一覧（重みの上書き対応）"""
    merged = dict(DEFAULT_SOFT_WEIGHTS)
    if weights:
        merged.update(weights)
    return [
        MovementEvaluator(merged["movement"]),
        ConsecutivePeriodsEvaluator(merged["consecutive_periods"]),
        LunchConcentrationEvaluator(merged["lunch_concentration"]),
        PreferenceEvaluator(merged["preference"]),
        ExternalConcentrationEvaluator(merged["external_concentration"]),
    ]
