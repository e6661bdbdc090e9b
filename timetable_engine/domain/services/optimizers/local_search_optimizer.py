"""局所探索による時間割の最適化

エントリ同士の曜日・校時の交換（山登り法）と、教員ごとの授業日の集約を
繰り返してソフト制約スコアを下げます。必須制約に違反する変更は採用しません。
"""
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Set, Tuple

from ..validators.constraint_validator import ConstraintValidator
from ...entities.school import School
from ...value_objects.assignment import TimetableEntry
from ....shared.mixins.logging_mixin import LoggingMixin

DEFAULT_MAX_ITERATIONS = 100


@dataclass
class OptimizationResult:
    """最適化結果"""
    initial_score: float
    final_score: float
    iterations_performed: int
    swap_attempts: int
    swap_successes: int
    consolidation_moves: int = 0

    @property
    def improvement_percentage(self) -> float:
        if self.initial_score <= 0:
            return 0.0
        return (self.initial_score - self.final_score) / self.initial_score * 100

    def __repr__(self) -> str:
        return (f"OptimizationResult(改善: {self.initial_score:.2f} -> {self.final_score:.2f}, "
                f"改善率: {self.improvement_percentage:.1f}%, "
                f"反復: {self.iterations_performed}, 交換成功: {self.swap_successes}/{self.swap_attempts}, "
                f"集約移動: {self.consolidation_moves})")


class LocalSearchOptimizer(LoggingMixin):
    """局所探索オプティマイザー

    ブロック授業のエントリと、教科の固定時間に置かれたエントリは動かしません。
    """

    def __init__(self, school: School, validator: ConstraintValidator,
                 max_iterations: int = DEFAULT_MAX_ITERATIONS):
        super().__init__()
        self.school = school
        self.validator = validator
        self.max_iterations = max_iterations
        self.stats = {'swap_attempts': 0, 'swap_success': 0, 'consolidation_moves': 0}

    def optimize(self, entries: Sequence[TimetableEntry]) -> Tuple[List[TimetableEntry], OptimizationResult]:
        """最適化を実行

        Returns:
            (最適化後のエントリ, 最適化結果)
        """
        self.stats = {'swap_attempts': 0, 'swap_success': 0, 'consolidation_moves': 0}
        current = list(entries)
        current_score = self.validator.calculate_score(current)
        initial_score = current_score

        iterations = 0
        improved = True
        while improved and iterations < self.max_iterations:
            iterations += 1
            current, current_score, swapped = self._swap_sweep(current, current_score)
            current, current_score, moved = self._consolidate_teacher_days(current, current_score)
            improved = swapped or moved

        result = OptimizationResult(
            initial_score=initial_score,
            final_score=current_score,
            iterations_performed=iterations,
            swap_attempts=self.stats['swap_attempts'],
            swap_successes=self.stats['swap_success'],
            consolidation_moves=self.stats['consolidation_moves'],
        )
        self.logger.debug(repr(result))
        return current, result

    def is_movable(self, entry: TimetableEntry) -> bool:
        if entry.is_block_class:
            return False
        subject = self.school.get_subject(entry.subject_id)
        return not (subject and subject.is_fixed_at(entry.day, entry.period))

    def _fits(self, entry: TimetableEntry, day: str, period: int) -> bool:
        """学級の授業日・最大校時の範囲内か"""
        grade = self.school.grade_of(entry.class_id)
        if day not in self.school.config.days_for(grade):
            return False
        return period <= self.school.config.max_periods_for(day, grade)

    def _swap_sweep(self, entries: List[TimetableEntry],
                    score: float) -> Tuple[List[TimetableEntry], float, bool]:
        """全ペアの交換を1巡試す"""
        improved = False
        occupied = self._class_slots(entries)

        for i in range(len(entries)):
            for j in range(i + 1, len(entries)):
                a, b = entries[i], entries[j]
                if (a.day, a.period) == (b.day, b.period):
                    continue
                if not self.is_movable(a) or not self.is_movable(b):
                    continue
                if not self._fits(a, b.day, b.period) or not self._fits(b, a.day, a.period):
                    continue
                # 別学級同士の交換で学級の授業が重なる場合は評価しない
                if a.class_id != b.class_id and (
                        (a.class_id, b.day, b.period) in occupied
                        or (b.class_id, a.day, a.period) in occupied):
                    continue

                self.stats['swap_attempts'] += 1
                new_a = a.moved_to(b.day, b.period)
                new_b = b.moved_to(a.day, a.period)
                candidate = list(entries)
                candidate[i], candidate[j] = new_a, new_b

                if self.validator.has_critical_violations(candidate, [new_a, new_b]):
                    continue
                new_score = self.validator.calculate_score(candidate)
                if new_score < score:
                    entries, score = candidate, new_score
                    occupied = self._class_slots(entries)
                    self.stats['swap_success'] += 1
                    improved = True

        return entries, score, improved

    def _consolidate_teacher_days(self, entries: List[TimetableEntry],
                                  score: float) -> Tuple[List[TimetableEntry], float, bool]:
        """教員の授業を、その教員の授業が最も多い曜日へ寄せる"""
        improved = False

        for teacher_id in sorted({tid for e in entries for tid in e.all_teacher_ids}):
            target_day = self._busiest_day(entries, teacher_id)
            if target_day is None:
                continue

            for index in range(len(entries)):
                entry = entries[index]
                if entry.day == target_day or not entry.involves_teacher(teacher_id):
                    continue
                if not self.is_movable(entry) or not self._fits(entry, target_day, 1):
                    continue

                occupied = self._class_slots(entries)
                max_period = self.school.max_periods_for(target_day, entry.class_id)
                for period in range(1, max_period + 1):
                    if (entry.class_id, target_day, period) in occupied:
                        continue
                    moved = entry.moved_to(target_day, period)
                    candidate = list(entries)
                    candidate[index] = moved
                    if self.validator.has_critical_violations(candidate, [moved]):
                        continue
                    new_score = self.validator.calculate_score(candidate)
                    if new_score < score:
                        entries, score = candidate, new_score
                        self.stats['consolidation_moves'] += 1
                        improved = True
                        break

        return entries, score, improved

    def _busiest_day(self, entries: List[TimetableEntry], teacher_id: str) -> Optional[str]:
        counts: Dict[str, int] = defaultdict(int)
        for entry in entries:
            if entry.involves_teacher(teacher_id):
                counts[entry.day] += 1
        if len(counts) < 2:
            return None
        day_order = {day: i for i, day in enumerate(self.school.config.days)}
        return max(counts, key=lambda day: (counts[day], -day_order.get(day, len(day_order))))

    @staticmethod
    def _class_slots(entries: List[TimetableEntry]) -> Set[Tuple[str, str, int]]:
        return {(e.class_id, e.day, e.period) for e in entries}
