"""教員を表すエンティティ"""
from dataclasses import dataclass
from typing import FrozenSet, Optional, Tuple

from ..value_objects.time_slot import TimeSlot, PreferredTime


@dataclass(frozen=True)
class Teacher:
    """教員の設定"""
    id: str
    name: str
    subjects: Tuple[str, ...] = ()
    max_weekly_hours: int = 25
    unavailable_times: FrozenSet[TimeSlot] = frozenset()
    is_priority: bool = False
    is_external: bool = False
    preferred_times: Tuple[PreferredTime, ...] = ()
    max_daily_hours: int = 6
    allow_consecutive: bool = False

    def __post_init__(self):
        object.__setattr__(self, 'subjects', tuple(self.subjects))
        object.__setattr__(self, 'unavailable_times', frozenset(self.unavailable_times))
        object.__setattr__(self, 'preferred_times', tuple(self.preferred_times))

    def teaches(self, subject_id: str) -> bool:
        return subject_id in self.subjects

    def is_unavailable(self, day: str, period: int) -> bool:
        return TimeSlot(day, period) in self.unavailable_times

    def prefers(self, day: str, period: int, lunch_period: int) -> Optional[bool]:
        """希望時間帯に合っているか判定

        Returns:
            その曜日に希望がない場合はNone
        """
        verdicts = [
            verdict for verdict in (
                preferred.accepts(day, period, lunch_period)
                for preferred in self.preferred_times
            )
            if verdict is not None
        ]
        if not verdicts:
            return None
        return any(verdicts)

    def __str__(self) -> str:
        return self.name
