"""CSP変数・ドメインの構築"""
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ...entities.class_info import ClassInfo
from ...entities.school import School
from ...entities.subject import Subject
from ...entities.teacher import Teacher
from ...value_objects.time_slot import TimeSlot
from ....shared.mixins.logging_mixin import LoggingMixin

# 配置優先度（小さいほど先に配置する）
PRIORITY_CO_TEACHING = 100
PRIORITY_BLOCK = 200
PRIORITY_SPECIAL_ROOM = 300
PRIORITY_EXTERNAL = 400
PRIORITY_PRIORITY_TEACHER = 500
PRIORITY_DEFAULT = 600


@dataclass(frozen=True)
class CSPVariable:
    """配置単位（1コマ、またはブロック授業の連続コマ）

    共同授業では teacher_ids の全員が同時に担当します。
    それ以外では teacher_ids は担当候補で、同じ学級・教科の変数群は
    最初の配置時に選ばれた1人の教員を共有します。
    """
    index: int
    class_id: str
    subject_id: str
    grade: int
    teacher_ids: Tuple[str, ...]
    required_hours: int
    group_hours: int
    priority: int
    is_block_class: bool = False
    is_co_teaching: bool = False
    room_id: Optional[str] = None
    fixed_slot: Optional[TimeSlot] = None

    @property
    def group_key(self) -> Tuple[str, str]:
        return (self.class_id, self.subject_id)

    @property
    def binds_teacher(self) -> bool:
        return not self.is_co_teaching


@dataclass
class CSPProblem:
    """構築済みの問題（変数と学年別ドメイン）"""
    variables: List[CSPVariable]
    domains: Dict[int, List[TimeSlot]]

    def domain_for(self, variable: CSPVariable) -> List[TimeSlot]:
        return self.domains[variable.grade]


def calculate_priority(subject: Subject, teachers: List[Teacher]) -> int:
    """配置優先度を計算"""
    if subject.is_co_teaching:
        return PRIORITY_CO_TEACHING
    if subject.is_block_class:
        return PRIORITY_BLOCK
    if subject.requires_special_room:
        return PRIORITY_SPECIAL_ROOM
    if subject.is_external_instructor:
        return PRIORITY_EXTERNAL
    if any(t.is_priority for t in teachers):
        return PRIORITY_PRIORITY_TEACHER
    return PRIORITY_DEFAULT


class VariableBuilder(LoggingMixin):
    """学級×教科から配置単位とドメインを作る"""

    def __init__(self, school: School):
        super().__init__()
        self.school = school

    def build(self) -> CSPProblem:
        variables: List[CSPVariable] = []
        domains: Dict[int, List[TimeSlot]] = {}

        for class_info in self.school.classes:
            if class_info.grade not in domains:
                domains[class_info.grade] = self.school.config.time_slots_for(class_info.grade)
            for subject in self.school.subjects:
                if not subject.targets_grade(class_info.grade):
                    continue
                teachers = self._teachers_for(subject)
                if not teachers:
                    continue
                variables.extend(self._chunk(class_info, subject, teachers, len(variables)))

        self.logger.debug(f"変数を{len(variables)}個作成しました")
        return CSPProblem(variables, domains)

    def _teachers_for(self, subject: Subject) -> List[Teacher]:
        if not self.school.get_subject_teachers(subject.id):
            return []
        if subject.is_co_teaching and subject.co_teaching_teachers:
            return [
                teacher for teacher in (
                    self.school.get_teacher(tid) for tid in subject.co_teaching_teachers
                )
                if teacher is not None
            ]
        return self.school.get_subject_teachers(subject.id)

    def _chunk(self, class_info: ClassInfo, subject: Subject,
               teachers: List[Teacher], start_index: int) -> List[CSPVariable]:
        """週時数をブロック単位と1時間単位に分割"""
        is_co_teaching = subject.is_co_teaching and bool(subject.co_teaching_teachers)
        priority = calculate_priority(subject, teachers)
        teacher_ids = tuple(t.id for t in teachers)

        sizes: List[int] = []
        if subject.is_block_class and subject.block_hours:
            sizes.extend([subject.block_hours] * (subject.weekly_hours // subject.block_hours))
            sizes.extend([1] * (subject.weekly_hours % subject.block_hours))
        else:
            sizes.extend([1] * subject.weekly_hours)

        variables = []
        single_count = 0
        for size in sizes:
            fixed_slot = None
            if size == 1:
                if single_count < len(subject.fixed_times):
                    fixed_slot = subject.fixed_times[single_count]
                single_count += 1
            variables.append(CSPVariable(
                index=start_index + len(variables),
                class_id=class_info.id,
                subject_id=subject.id,
                grade=class_info.grade,
                teacher_ids=teacher_ids,
                required_hours=size,
                group_hours=subject.weekly_hours,
                priority=priority,
                is_block_class=size > 1,
                is_co_teaching=is_co_teaching,
                room_id=subject.room,
                fixed_slot=fixed_slot,
            ))
        return variables
