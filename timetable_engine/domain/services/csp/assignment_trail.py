"""配置の記録とやり直し

配置済みエントリを1本のリストに積み、操作ログ（trail）にマークを付けて
巻き戻すことで、バックトラックのたびにリストを複製せずに済ませます。
"""
from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Tuple

from ...value_objects.assignment import TimetableEntry

_ENTRY = "entry"
_BIND = "bind"


class AssignmentTrail:
    """配置済みエントリと占有状況の索引"""

    def __init__(self):
        self.entries: List[TimetableEntry] = []
        self._log: List[Tuple[str, object]] = []
        self._by_teacher: Dict[Tuple[str, str, int], List[TimetableEntry]] = defaultdict(list)
        self._by_room: Dict[Tuple[str, str, int], List[TimetableEntry]] = defaultdict(list)
        self._by_class: Dict[Tuple[str, str, int], List[TimetableEntry]] = defaultdict(list)
        self._by_slot: Dict[Tuple[str, int], List[TimetableEntry]] = defaultdict(list)
        self._teacher_load: Dict[str, int] = defaultdict(int)
        self._bindings: Dict[Tuple[str, str], str] = {}

    def __len__(self) -> int:
        return len(self.entries)

    def mark(self) -> int:
        """現在の位置を返す（undo_toに渡す）"""
        return len(self._log)

    def push(self, entry: TimetableEntry) -> None:
        self.entries.append(entry)
        self._log.append((_ENTRY, entry))
        for teacher_id in entry.all_teacher_ids:
            self._by_teacher[(teacher_id, entry.day, entry.period)].append(entry)
            self._teacher_load[teacher_id] += 1
        if entry.room_id:
            self._by_room[(entry.room_id, entry.day, entry.period)].append(entry)
        self._by_class[(entry.class_id, entry.day, entry.period)].append(entry)
        self._by_slot[(entry.day, entry.period)].append(entry)

    def bind(self, group_key: Tuple[str, str], teacher_id: str) -> None:
        """学級・教科の担当教員を確定"""
        self._bindings[group_key] = teacher_id
        self._log.append((_BIND, group_key))

    def undo_to(self, mark: int) -> None:
        while len(self._log) > mark:
            kind, item = self._log.pop()
            if kind == _BIND:
                del self._bindings[item]
                continue
            entry = self.entries.pop()
            for teacher_id in entry.all_teacher_ids:
                self._by_teacher[(teacher_id, entry.day, entry.period)].pop()
                self._teacher_load[teacher_id] -= 1
            if entry.room_id:
                self._by_room[(entry.room_id, entry.day, entry.period)].pop()
            self._by_class[(entry.class_id, entry.day, entry.period)].pop()
            self._by_slot[(entry.day, entry.period)].pop()

    def bound_teacher(self, group_key: Tuple[str, str]) -> Optional[str]:
        return self._bindings.get(group_key)

    def teacher_load(self, teacher_id: str) -> int:
        return self._teacher_load.get(teacher_id, 0)

    def class_occupied(self, class_id: str, day: str, period: int) -> bool:
        return bool(self._by_class.get((class_id, day, period)))

    def teacher_entries(self, teacher_id: str, day: str, period: int) -> Sequence[TimetableEntry]:
        return self._by_teacher.get((teacher_id, day, period), ())

    def room_entries(self, room_id: str, day: str, period: int) -> Sequence[TimetableEntry]:
        return self._by_room.get((room_id, day, period), ())

    def slot_entries(self, day: str, period: int) -> Sequence[TimetableEntry]:
        """指定コマの全エントリ（ConstraintValidatorの索引として使う）"""
        return self._by_slot.get((day, period), ())

    def snapshot(self) -> List[TimetableEntry]:
        return list(self.entries)
