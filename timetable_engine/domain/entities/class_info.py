"""学級を表すエンティティ"""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ClassInfo:
    """学級情報（idで識別、作成後は不変）"""
    id: str
    grade: int
    class_number: int
    name: str = ""
    lunch_period: Optional[int] = None

    @property
    def display_name(self) -> str:
        return self.name or f"{self.grade}年{self.class_number}組"

    def __str__(self) -> str:
        return self.display_name
