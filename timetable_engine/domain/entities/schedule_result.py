"""時間割生成結果"""
import math
from dataclasses import dataclass, field
from typing import List, Optional

from ..value_objects.assignment import ConstraintLevel, ConstraintViolation, TimetableEntry
from ..value_objects.relaxation import RelaxationSuggestion
from .class_info import ClassInfo
from .subject import Subject
from .teacher import Teacher


@dataclass
class ScheduleResult:
    """1つの時間割候補"""
    entries: List[TimetableEntry]
    classes: List[ClassInfo]
    subjects: List[Subject]
    teachers: List[Teacher]
    violations: List[ConstraintViolation]
    score: float
    days: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.entries

    @property
    def critical_violations(self) -> List[ConstraintViolation]:
        return [v for v in self.violations if v.level == ConstraintLevel.CRITICAL]

    @property
    def is_feasible(self) -> bool:
        """エントリがあり、必須制約違反がないか"""
        return bool(self.entries) and not self.critical_violations and not math.isinf(self.score)

    def find_entry(self, entry_id: str) -> Optional[TimetableEntry]:
        return next((e for e in self.entries if e.id == entry_id), None)


@dataclass
class MultipleScheduleResult:
    """複数の時間割候補（スコア昇順、先頭が最良）"""
    results: List[ScheduleResult]
    generation_attempts: int
    relaxation_attempts: int
    can_relax: bool
    relaxation_suggestions: List[RelaxationSuggestion] = field(default_factory=list)
    relaxed_constraints: List[str] = field(default_factory=list)
    selected_index: Optional[int] = None

    def __post_init__(self):
        if self.selected_index is None and self.results:
            self.selected_index = 0

    @property
    def best(self) -> Optional[ScheduleResult]:
        return self.results[0] if self.results else None
