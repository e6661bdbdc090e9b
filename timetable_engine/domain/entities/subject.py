"""教科を表すエンティティ"""
from dataclasses import dataclass
from typing import Optional, Tuple

from ..value_objects.time_slot import TimeSlot


@dataclass(frozen=True)
class Subject:
    """教科の設定

    ブロック授業の場合、block_hoursは2〜4かつweekly_hours以下であることが
    前提条件です（入力フォーム側で検証済みとして扱います）。
    """
    id: str
    name: str
    weekly_hours: int
    requires_special_room: bool = False
    special_room_type: Optional[str] = None
    target_grades: Tuple[int, ...] = ()
    is_block_class: bool = False
    block_hours: Optional[int] = None
    is_co_teaching: bool = False
    co_teaching_teachers: Tuple[str, ...] = ()
    is_external_instructor: bool = False
    prefer_concentrated: bool = False
    priority: int = 0
    fixed_times: Tuple[TimeSlot, ...] = ()
    grade_suitability: Tuple[int, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'target_grades', tuple(self.target_grades))
        object.__setattr__(self, 'co_teaching_teachers', tuple(self.co_teaching_teachers))
        object.__setattr__(self, 'fixed_times', tuple(self.fixed_times))
        object.__setattr__(self, 'grade_suitability', tuple(self.grade_suitability))

    def targets_grade(self, grade: int) -> bool:
        """対象学年かどうか（未指定は全学年）"""
        return not self.target_grades or grade in self.target_grades

    def is_suitable_for_grade(self, grade: int) -> bool:
        return not self.grade_suitability or grade in self.grade_suitability

    @property
    def room(self) -> Optional[str]:
        """使用する特別教室（通常教室はNone）"""
        if not self.requires_special_room:
            return None
        return self.special_room_type or self.id

    def is_fixed_at(self, day: str, period: int) -> bool:
        return TimeSlot(day, period) in self.fixed_times

    def __str__(self) -> str:
        return self.name
