"""時間割エントリと制約違反を表す値オブジェクト"""
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .time_slot import TimeSlot


class ConstraintLevel(Enum):
    """制約違反の重要度"""
    CRITICAL = "critical"  # 絶対に守る必要がある制約
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """緩和順序（low=0 ... critical=3）"""
        return _LEVEL_RANKS[self]


_LEVEL_RANKS = {
    ConstraintLevel.LOW: 0,
    ConstraintLevel.MEDIUM: 1,
    ConstraintLevel.HIGH: 2,
    ConstraintLevel.CRITICAL: 3,
}


@dataclass(frozen=True)
class TimetableEntry:
    """時間割の1コマ（クラス・教科・教員・曜日・校時）を表す不変オブジェクト

    探索中に生成され、結果に採用された後は変更されません。
    手動編集は同じidで曜日・校時だけが異なる新しいエントリを作ります。
    """

    id: str
    class_id: str
    subject_id: str
    teacher_id: str
    day: str
    period: int
    teacher_ids: Optional[Tuple[str, ...]] = None  # 共同授業のときのみ
    room_id: Optional[str] = None
    is_block_class: bool = False
    block_start_period: Optional[int] = None

    @property
    def time_slot(self) -> TimeSlot:
        return TimeSlot(self.day, self.period)

    @property
    def all_teacher_ids(self) -> Tuple[str, ...]:
        """担当する全教員のID"""
        return self.teacher_ids or (self.teacher_id,)

    @property
    def is_co_teaching(self) -> bool:
        return bool(self.teacher_ids) and len(self.teacher_ids) > 1

    def involves_teacher(self, teacher_id: str) -> bool:
        """指定された教員が関与しているかどうか"""
        return teacher_id in self.all_teacher_ids

    def moved_to(self, day: str, period: int) -> 'TimetableEntry':
        """曜日・校時を変更した新しいエントリを返す"""
        return replace(self, day=day, period=period)

    def __str__(self) -> str:
        teachers = ",".join(self.all_teacher_ids)
        return f"{self.time_slot} {self.class_id}: {self.subject_id}({teachers})"


@dataclass(frozen=True)
class ConstraintViolation:
    """制約違反を表す値オブジェクト"""

    level: ConstraintLevel
    message: str
    constraint_name: str = ""
    entry_id: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict, hash=False, compare=False)

    @property
    def is_critical(self) -> bool:
        return self.level == ConstraintLevel.CRITICAL

    def __str__(self) -> str:
        return f"[{self.level.value}] {self.message}"
