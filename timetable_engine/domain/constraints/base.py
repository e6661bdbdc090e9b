"""制約システムの基盤クラス"""
from abc import ABC, abstractmethod
from collections import defaultdict
from functools import cached_property
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from ..entities.school import School
from ..value_objects.assignment import ConstraintLevel, ConstraintViolation, TimetableEntry


def is_joint_session(a: TimetableEntry, b: TimetableEntry) -> bool:
    """合同の共同授業かどうか判定

    同じ教科・同じ教員構成の共同授業は、複数学級が同じ時間に
    同じ教員・教室を使っても重複とみなしません。
    """
    return (
        a.is_co_teaching
        and b.is_co_teaching
        and a.subject_id == b.subject_id
        and sorted(a.all_teacher_ids) == sorted(b.all_teacher_ids)
    )


class ScheduleView:
    """検証用にエントリを索引化したビュー

    索引は必要になった時点で一度だけ構築されます。
    """

    def __init__(self, entries: Iterable[TimetableEntry], school: School):
        self.entries: List[TimetableEntry] = list(entries)
        self.school = school

    @cached_property
    def by_slot(self) -> Dict[Tuple[str, int], List[TimetableEntry]]:
        index = defaultdict(list)
        for entry in self.entries:
            index[(entry.day, entry.period)].append(entry)
        return index

    @cached_property
    def by_teacher(self) -> Dict[str, List[TimetableEntry]]:
        index = defaultdict(list)
        for entry in self.entries:
            for teacher_id in entry.all_teacher_ids:
                index[teacher_id].append(entry)
        return index

    @cached_property
    def by_teacher_day(self) -> Dict[Tuple[str, str], List[TimetableEntry]]:
        index = defaultdict(list)
        for entry in self.entries:
            for teacher_id in entry.all_teacher_ids:
                index[(teacher_id, entry.day)].append(entry)
        return index

    @cached_property
    def by_class_day(self) -> Dict[Tuple[str, str], List[TimetableEntry]]:
        index = defaultdict(list)
        for entry in self.entries:
            index[(entry.class_id, entry.day)].append(entry)
        return index

    @cached_property
    def hours_by_class_subject(self) -> Dict[Tuple[str, str], int]:
        counts = defaultdict(int)
        for entry in self.entries:
            counts[(entry.class_id, entry.subject_id)] += 1
        return counts

    def at(self, day: str, period: int) -> List[TimetableEntry]:
        return self.by_slot.get((day, period), [])


class IndexedScheduleView(ScheduleView):
    """呼び出し側が持つ時間枠の索引を使うビュー

    エントリを複製せず、索引も作り直しません。探索中の必須制約判定に使います。
    """

    def __init__(self, entries: Sequence[TimetableEntry], school: School,
                 slot_lookup: Callable[[str, int], Sequence[TimetableEntry]]):
        self.entries = entries
        self.school = school
        self._slot_lookup = slot_lookup

    def at(self, day: str, period: int) -> Sequence[TimetableEntry]:
        return self._slot_lookup(day, period)


class Constraint(ABC):
    """制約の抽象基底クラス

    各制約は緩和時に参照されるキー（key）を持ちます。
    エントリ単位の制約は check/message を実装し、
    全体を見る必要がある制約は validate を上書きします。
    """

    def __init__(self, level: ConstraintLevel, key: str, name: str, description: str = ""):
        self.level = level
        self.key = key
        self.name = name
        self.description = description

    def check(self, entry: TimetableEntry, view: ScheduleView) -> bool:
        """エントリが制約を満たすか判定（既定は常に満たす）"""
        return True

    def message(self, entry: TimetableEntry) -> str:
        return f"{self.name}に違反しています: {entry}"

    def validate(self, view: ScheduleView) -> List[ConstraintViolation]:
        """制約を検証する"""
        return [
            self.violation(self.message(entry), entry_id=entry.id)
            for entry in view.entries
            if not self.check(entry, view)
        ]

    def violation(self, message: str, entry_id: Optional[str] = None, **details) -> ConstraintViolation:
        return ConstraintViolation(
            level=self.level,
            message=message,
            constraint_name=self.key,
            entry_id=entry_id,
            details=details,
        )

    def __str__(self) -> str:
        return f"{self.name} ({self.level.value})"


class SoftConstraint(ABC):
    """ソフト制約（スコア評価器）の基底クラス

    evaluateは違反の度合いを返し、重みを掛けた値がスコアに加算されます。
    スコアは低いほど良い時間割です。
    """

    def __init__(self, key: str, name: str, weight: float):
        self.key = key
        self.name = name
        self.weight = weight

    @abstractmethod
    def evaluate(self, view: ScheduleView) -> float:
        pass

    def weighted(self, view: ScheduleView) -> float:
        return self.evaluate(view) * self.weight

    def __str__(self) -> str:
        return f"{self.name} (weight={self.weight})"
