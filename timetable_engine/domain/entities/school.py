"""学校エンティティ"""
from typing import Dict, Iterable, List, Optional

from .class_info import ClassInfo
from .schedule_config import ScheduleConfig
from .subject import Subject
from .teacher import Teacher


class School:
    """学校全体の情報（学級・教科・教員・基本設定）を管理するエンティティ

    探索と検証の中で頻繁に行われるID検索のための索引を持ちます。
    """

    def __init__(self,
                 config: ScheduleConfig,
                 subjects: Iterable[Subject],
                 teachers: Iterable[Teacher],
                 classes: Iterable[ClassInfo]):
        self.config = config
        self._subjects: Dict[str, Subject] = {s.id: s for s in subjects}
        self._teachers: Dict[str, Teacher] = {t.id: t for t in teachers}
        self._classes: Dict[str, ClassInfo] = {c.id: c for c in classes}

    # 教科管理
    @property
    def subjects(self) -> List[Subject]:
        return list(self._subjects.values())

    def get_subject(self, subject_id: str) -> Optional[Subject]:
        return self._subjects.get(subject_id)

    # 教員管理
    @property
    def teachers(self) -> List[Teacher]:
        return list(self._teachers.values())

    def get_teacher(self, teacher_id: str) -> Optional[Teacher]:
        return self._teachers.get(teacher_id)

    def get_subject_teachers(self, subject_id: str) -> List[Teacher]:
        """教科を担当できる教員を取得（入力順）"""
        return [t for t in self._teachers.values() if t.teaches(subject_id)]

    # 学級管理
    @property
    def classes(self) -> List[ClassInfo]:
        return list(self._classes.values())

    def get_class(self, class_id: str) -> Optional[ClassInfo]:
        return self._classes.get(class_id)

    def grade_of(self, class_id: str) -> Optional[int]:
        class_info = self._classes.get(class_id)
        return class_info.grade if class_info else None

    def lunch_period_for(self, class_id: str) -> int:
        """学級の昼休み校時（学級設定 → 全体設定）"""
        class_info = self._classes.get(class_id)
        if class_info and class_info.lunch_period:
            return class_info.lunch_period
        return self.config.lunch_period

    def max_periods_for(self, day: str, class_id: Optional[str] = None) -> int:
        grade = self.grade_of(class_id) if class_id else None
        return self.config.max_periods_for(day, grade)

    def required_subjects(self, class_info: ClassInfo) -> List[Subject]:
        """学級で開講される教科（対象学年かつ担当教員がいるもの）"""
        return [
            subject for subject in self._subjects.values()
            if subject.targets_grade(class_info.grade)
            and self.get_subject_teachers(subject.id)
        ]

    def __str__(self) -> str:
        return (f"School(classes={len(self._classes)}, subjects={len(self._subjects)}, "
                f"teachers={len(self._teachers)})")
