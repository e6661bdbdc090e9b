"""時間割の内容ハッシュ（重複候補の除外用）"""
from typing import Iterable

from ...domain.value_objects.assignment import TimetableEntry

_MASK = 0xFFFFFFFF


def entry_keys(entries: Iterable[TimetableEntry]) -> list:
    """学級-教科-曜日-校時 のキーを整列して返す"""
    return sorted(f"{e.class_id}-{e.subject_id}-{e.day}-{e.period}" for e in entries)


def schedule_hash(entries: Iterable[TimetableEntry]) -> int:
    """多項式ローリングハッシュ（32bit）

    エントリのidや担当教員は含めないため、同じ配置の時間割は同じ値になります。
    """
    h = 0
    for key in entry_keys(entries):
        for ch in key + "|":
            h = (h * 31 + ord(ch)) & _MASK
    return h
