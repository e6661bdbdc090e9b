"""必須（Critical）制約

1つでも違反があれば時間割として成立しません。
探索中に毎回呼ばれるため、各checkは索引を使った定数時間の判定にしています。
"""
from .base import Constraint, ScheduleView, is_joint_session
from ..value_objects.assignment import ConstraintLevel, TimetableEntry


class TeacherConflictConstraint(Constraint):
    """教員重複制約: 同じ時間に同じ教員が複数の授業を担当しない"""

    def __init__(self):
        super().__init__(
            ConstraintLevel.CRITICAL,
            "teacher_conflict",
            "教員重複制約",
            "同じ時間に同じ教員が複数の授業を担当しない（合同の共同授業を除く）",
        )

    def check(self, entry: TimetableEntry, view: ScheduleView) -> bool:
        teacher_ids = set(entry.all_teacher_ids)
        for other in view.at(entry.day, entry.period):
            if other.id == entry.id or is_joint_session(entry, other):
                continue
            if teacher_ids.intersection(other.all_teacher_ids):
                return False
        return True

    def message(self, entry: TimetableEntry) -> str:
        return f"教員が{entry.time_slot}に重複して配置されています（{entry.class_id}）"


class TeacherAvailabilityConstraint(Constraint):
    """教員不在制約: 教員の不在時間に授業を配置しない"""

    def __init__(self):
        super().__init__(
            ConstraintLevel.CRITICAL,
            "teacher_unavailable",
            "教員不在制約",
            "教員の不在時間に授業を配置しない",
        )

    def check(self, entry: TimetableEntry, view: ScheduleView) -> bool:
        for teacher_id in entry.all_teacher_ids:
            teacher = view.school.get_teacher(teacher_id)
            if teacher and teacher.is_unavailable(entry.day, entry.period):
                return False
        return True

    def message(self, entry: TimetableEntry) -> str:
        return f"教員の不在時間{entry.time_slot}に授業が配置されています（{entry.class_id}）"


class RoomConflictConstraint(Constraint):
    """特別教室重複制約: 同じ特別教室を同時に使用しない"""

    def __init__(self):
        super().__init__(
            ConstraintLevel.CRITICAL,
            "room_conflict",
            "特別教室重複制約",
            "同じ時間に同じ特別教室を複数の授業で使用しない",
        )

    def check(self, entry: TimetableEntry, view: ScheduleView) -> bool:
        if not entry.room_id:
            return True
        subject = view.school.get_subject(entry.subject_id)
        if not subject or not subject.requires_special_room:
            return True
        for other in view.at(entry.day, entry.period):
            if other.id == entry.id or is_joint_session(entry, other):
                continue
            if other.room_id == entry.room_id:
                return False
        return True

    def message(self, entry: TimetableEntry) -> str:
        return f"特別教室{entry.room_id}が{entry.time_slot}に重複して使用されています"


class ClassConflictConstraint(Constraint):
    """学級重複制約: 1つの学級に同時に複数の授業を配置しない"""

    def __init__(self):
        super().__init__(
            ConstraintLevel.CRITICAL,
            "class_conflict",
            "学級重複制約",
            "同じ時間に同じ学級へ複数の授業を配置しない",
        )

    def check(self, entry: TimetableEntry, view: ScheduleView) -> bool:
        return not any(
            other.id != entry.id and other.class_id == entry.class_id
            for other in view.at(entry.day, entry.period)
        )

    def message(self, entry: TimetableEntry) -> str:
        return f"{entry.class_id}の{entry.time_slot}に授業が重複しています"


class BlockContiguityConstraint(Constraint):
    """ブロック授業連続性制約

    ブロック授業は開始校時からblock_hours分の連続した校時に、
    その日の最大校時を超えずに配置されている必要があります。
    """

    def __init__(self):
        super().__init__(
            ConstraintLevel.CRITICAL,
            "block_contiguity",
            "ブロック授業連続性制約",
            "ブロック授業を連続した校時に配置する",
        )

    def check(self, entry: TimetableEntry, view: ScheduleView) -> bool:
        if not entry.is_block_class or not entry.block_start_period:
            return True
        subject = view.school.get_subject(entry.subject_id)
        if not subject or not subject.block_hours:
            return True

        start = entry.block_start_period
        last = start + subject.block_hours - 1
        if not start <= entry.period <= last:
            return False
        if last > view.school.max_periods_for(entry.day, entry.class_id):
            return False

        for period in range(start, last + 1):
            if period == entry.period:
                continue
            if not any(
                other.class_id == entry.class_id
                and other.subject_id == entry.subject_id
                and other.block_start_period == start
                for other in view.at(entry.day, period)
            ):
                return False
        return True

    def message(self, entry: TimetableEntry) -> str:
        return f"ブロック授業が連続した校時に配置されていません（{entry.class_id} {entry.subject_id} {entry.day}）"


def critical_constraints():
    """必須制約の一覧"""
    return [
        TeacherConflictConstraint(),
        TeacherAvailabilityConstraint(),
        RoomConflictConstraint(),
        BlockContiguityConstraint(),
        ClassConflictConstraint(),
    ]
