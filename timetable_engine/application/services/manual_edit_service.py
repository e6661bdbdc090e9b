"""手動編集サービス

生成結果のコマを移動・交換し、新しい結果として再検証・再採点します。
再最適化は行いません。元の結果は変更しません。
"""
import dataclasses
from dataclasses import dataclass
from typing import Iterable, List, Optional

from ...domain.entities.schedule_config import ScheduleConfig
from ...domain.entities.schedule_result import ScheduleResult
from ...domain.services.validators.constraint_validator import ConstraintValidator
from ...domain.value_objects.assignment import ConstraintViolation, TimetableEntry
from ...shared.mixins.logging_mixin import LoggingMixin


@dataclass
class EditOutcome:
    """手動編集の結果"""
    result: ScheduleResult
    applied: bool
    message: str = ""
    new_critical_violations: List[ConstraintViolation] = dataclasses.field(default_factory=list)

    @property
    def introduced_critical(self) -> bool:
        return bool(self.new_critical_violations)


class ManualEditService(LoggingMixin):
    """手動での移動・交換"""

    def __init__(self, config: ScheduleConfig,
                 relaxed_constraints: Optional[Iterable[str]] = None,
                 soft_weights=None):
        super().__init__()
        self.config = config
        self.relaxed_constraints = list(relaxed_constraints or ())
        self.soft_weights = soft_weights

    def move_entry(self, result: ScheduleResult, entry_id: str, day: str, period: int) -> EditOutcome:
        """コマを指定の曜日・校時へ移動"""
        entry = result.find_entry(entry_id)
        if entry is None:
            return EditOutcome(result, False, f"エントリ{entry_id}が見つかりません")
        grade = next((c.grade for c in result.classes if c.id == entry.class_id), None)
        if day not in self.config.days_for(grade) or not 1 <= period <= self.config.max_periods_for(day, grade):
            return EditOutcome(result, False, f"{day}{period}限は時間割の範囲外です")

        moved = entry.moved_to(day, period)
        return self._rebuild(result, {entry_id: moved}, f"{entry}を{moved.time_slot}へ移動しました")

    def swap_entries(self, result: ScheduleResult, first_id: str, second_id: str) -> EditOutcome:
        """2つのコマの曜日・校時を交換"""
        first = result.find_entry(first_id)
        second = result.find_entry(second_id)
        if first is None or second is None:
            missing = first_id if first is None else second_id
            return EditOutcome(result, False, f"エントリ{missing}が見つかりません")

        replacements = {
            first_id: first.moved_to(second.day, second.period),
            second_id: second.moved_to(first.day, first.period),
        }
        return self._rebuild(result, replacements, f"{first}と{second}を交換しました")

    def _rebuild(self, result: ScheduleResult, replacements: dict, message: str) -> EditOutcome:
        validator = ConstraintValidator(
            self.config, result.subjects, result.teachers, result.classes,
            relaxed_constraints=self.relaxed_constraints,
            soft_weights=self.soft_weights,
        )
        entries: List[TimetableEntry] = [replacements.get(e.id, e) for e in result.entries]
        violations = validator.validate_all(entries)

        before = set(result.critical_violations)
        new_critical = [v for v in violations if v.is_critical and v not in before]

        edited = dataclasses.replace(
            result,
            entries=entries,
            violations=violations,
            score=validator.calculate_score(entries),
        )
        if new_critical:
            self.logger.warning(f"{message}（必須制約違反: {len(new_critical)}件）")
        else:
            self.logger.info(message)
        return EditOutcome(edited, True, message, new_critical)
