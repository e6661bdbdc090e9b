"""時間枠を表す値オブジェクト"""
from dataclasses import dataclass
from typing import Literal, Optional

PreferencePattern = Literal["morning", "afternoon"]


@dataclass(frozen=True)
class TimeSlot:
    """時間枠（曜日・校時）を表す不変オブジェクト

    CSPのドメイン値としても使用します。
    """

    day: str
    period: int

    def __str__(self) -> str:
        return f"{self.day}{self.period}限"

    def __format__(self, format_spec: str) -> str:
        """f-string内での表示をサポート"""
        return str(self)

    def shifted(self, offset: int) -> 'TimeSlot':
        """同じ曜日で校時をずらした時間枠を返す"""
        return TimeSlot(self.day, self.period + offset)


@dataclass(frozen=True)
class PreferredTime:
    """教員の希望時間帯"""

    day: str
    period: int
    preference: PreferencePattern = "morning"

    def accepts(self, day: str, period: int, lunch_period: int) -> Optional[bool]:
        """指定コマが希望に沿うか判定

        Returns:
            曜日が異なる場合はNone（判定対象外）
        """
        if day != self.day:
            return None
        if period == self.period:
            return True
        if self.preference == "morning":
            return period <= lunch_period
        return period > lunch_period
