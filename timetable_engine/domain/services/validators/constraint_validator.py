"""統一制約検証サービス

探索・最適化・結果の作成で共通して使用する検証器です。
エントリ一覧を受け取って判定するだけで、内部状態は持ちません。
"""
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from ...constraints import (
    Constraint,
    IndexedScheduleView,
    ScheduleView,
    SoftConstraint,
    critical_constraints,
    high_constraints,
    low_constraints,
    medium_constraints,
    soft_constraints,
)
from ...entities.class_info import ClassInfo
from ...entities.schedule_config import ScheduleConfig
from ...entities.school import School
from ...entities.subject import Subject
from ...entities.teacher import Teacher
from ...value_objects.assignment import ConstraintLevel, ConstraintViolation, TimetableEntry
from ....shared.mixins.logging_mixin import LoggingMixin


class ConstraintValidator(LoggingMixin):
    """制約検証器

    Args:
        config: 時間割の基本設定
        subjects: 教科一覧
        teachers: 教員一覧
        classes: 学級一覧
        relaxed_constraints: 緩和済み（無効化する）制約キー
        soft_weights: ソフト制約の重み（キーごとに上書き）
    """

    def __init__(self,
                 config: ScheduleConfig,
                 subjects: Sequence[Subject],
                 teachers: Sequence[Teacher],
                 classes: Sequence[ClassInfo],
                 relaxed_constraints: Optional[Iterable[str]] = None,
                 soft_weights: Optional[Dict[str, float]] = None):
        super().__init__()
        self.school = School(config, subjects, teachers, classes)
        self.relaxed_constraints = frozenset(relaxed_constraints or ())

        # 必須制約は緩和の対象外
        self.critical = critical_constraints()
        self.rules: List[Constraint] = self.critical + [
            c for c in high_constraints() + medium_constraints() + low_constraints()
            if c.key not in self.relaxed_constraints
        ]
        self.evaluators: List[SoftConstraint] = [
            e for e in soft_constraints(soft_weights)
            if e.key not in self.relaxed_constraints
        ]

    def view(self, entries: Iterable[TimetableEntry]) -> ScheduleView:
        return ScheduleView(entries, self.school)

    def has_critical_violations(self,
                                entries: Sequence[TimetableEntry],
                                changed: Optional[Sequence[TimetableEntry]] = None,
                                slot_lookup: Optional[Callable[[str, int], Sequence[TimetableEntry]]] = None) -> bool:
        """必須制約に違反しているか判定

        Args:
            entries: 全エントリ
            changed: 指定された場合、これらのエントリに関係する違反のみ確認する
                （探索中は直前に置いたエントリだけを渡す）
            slot_lookup: 曜日・校時からエントリを引く既存の索引。
                指定された場合はビューを作り直さない
        """
        if slot_lookup is None:
            view = self.view(entries)
        else:
            view = IndexedScheduleView(entries, self.school, slot_lookup)
        targets = entries if changed is None else changed
        for entry in targets:
            for constraint in self.critical:
                if not constraint.check(entry, view):
                    return True
        return False

    def critical_violation_count(self, entries: Sequence[TimetableEntry]) -> int:
        view = self.view(entries)
        return sum(len(c.validate(view)) for c in self.critical)

    def validate_all(self, entries: Sequence[TimetableEntry]) -> List[ConstraintViolation]:
        """全制約を検証し、重要度の高い順に違反を返す"""
        view = self.view(entries)
        violations: List[ConstraintViolation] = []
        for constraint in self.rules:
            violations.extend(constraint.validate(view))
        violations.sort(key=lambda v: -v.level.rank)
        return violations

    def calculate_score(self, entries: Sequence[TimetableEntry]) -> float:
        """ソフト制約の重み付きスコアを計算（低いほど良い）"""
        view = self.view(entries)
        return sum(evaluator.weighted(view) for evaluator in self.evaluators)

    def score_breakdown(self, entries: Sequence[TimetableEntry]) -> Dict[str, float]:
        """評価器ごとの重み付きスコア"""
        view = self.view(entries)
        return {evaluator.key: evaluator.weighted(view) for evaluator in self.evaluators}

    def get_violation_summary(self, entries: Sequence[TimetableEntry]) -> str:
        violations = self.validate_all(entries)
        counts = {level: 0 for level in ConstraintLevel}
        for violation in violations:
            counts[violation.level] += 1
        return "制約違反: " + ", ".join(
            f"{level.value} {counts[level]}件" for level in ConstraintLevel
        )
