"""時間割の基本設定"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ..value_objects.time_slot import TimeSlot


@dataclass(frozen=True)
class DailyScheduleConfig:
    """学年別の曜日・校時設定"""
    days: Tuple[str, ...]
    daily_max_periods: Dict[str, int] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        object.__setattr__(self, 'days', tuple(self.days))


@dataclass(frozen=True)
class ScheduleConfig:
    """時間割の基本設定

    Attributes:
        days: 授業を行う曜日（順序付き）
        max_periods_per_day: 1日の最大校時（全体の既定値、1以上）
        daily_max_periods: 曜日別の最大校時
        lunch_period: 昼休み直前の校時
        grade_configs: 学年別の曜日・校時の上書き設定
    """
    days: Tuple[str, ...] = ("月", "火", "水", "木", "金")
    max_periods_per_day: int = 6
    daily_max_periods: Dict[str, int] = field(default_factory=dict, hash=False)
    lunch_period: int = 4
    grade_configs: Dict[int, DailyScheduleConfig] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        object.__setattr__(self, 'days', tuple(self.days))

    def days_for(self, grade: Optional[int] = None) -> Tuple[str, ...]:
        """学年の授業曜日を取得"""
        grade_config = self.grade_configs.get(grade) if grade is not None else None
        if grade_config and grade_config.days:
            return grade_config.days
        return self.days

    def max_periods_for(self, day: str, grade: Optional[int] = None) -> int:
        """曜日・学年ごとの最大校時を取得

        学年別設定 → 曜日別設定 → 全体既定値 の順に解決します。
        """
        grade_config = self.grade_configs.get(grade) if grade is not None else None
        if grade_config and day in grade_config.daily_max_periods:
            return grade_config.daily_max_periods[day]
        if day in self.daily_max_periods:
            return self.daily_max_periods[day]
        return self.max_periods_per_day

    def time_slots_for(self, grade: Optional[int] = None) -> List[TimeSlot]:
        """学年のドメイン（曜日×校時）を生成"""
        return [
            TimeSlot(day, period)
            for day in self.days_for(grade)
            for period in range(1, self.max_periods_for(day, grade) + 1)
        ]

    def total_slots(self, grade: Optional[int] = None) -> int:
        return sum(self.max_periods_for(day, grade) for day in self.days_for(grade))
