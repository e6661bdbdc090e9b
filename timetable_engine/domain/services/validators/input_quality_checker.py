"""入力データの品質チェック

生成を止めるほどではないが、結果が悪くなりやすい入力を警告として報告します。
"""
from dataclasses import dataclass
from typing import List

from ...entities.school import School
from ....shared.mixins.logging_mixin import LoggingMixin


@dataclass(frozen=True)
class QualityWarning:
    """入力品質の警告"""
    code: str
    message: str
    target_id: str

    def __str__(self) -> str:
        return self.message


class InputQualityChecker(LoggingMixin):
    """入力品質チェッカー"""

    def check(self, school: School) -> List[QualityWarning]:
        warnings: List[QualityWarning] = []
        warnings.extend(self._check_subjects(school))
        warnings.extend(self._check_teacher_capacity(school))

        if warnings:
            self.logger.debug(f"入力品質チェック: {len(warnings)}件の警告")
        return warnings

    def _check_subjects(self, school: School) -> List[QualityWarning]:
        warnings = []
        days = set(school.config.days)
        for grade_config in school.config.grade_configs.values():
            days.update(grade_config.days)

        for subject in school.subjects:
            if subject.is_co_teaching and len(subject.co_teaching_teachers) < 2:
                warnings.append(QualityWarning(
                    "co_teaching_teachers",
                    f"共同授業{subject.name}の担当教員が2名未満です",
                    subject.id,
                ))
            if subject.is_block_class:
                block_hours = subject.block_hours or 0
                if not 2 <= block_hours <= 4 or block_hours > subject.weekly_hours:
                    warnings.append(QualityWarning(
                        "block_hours",
                        f"ブロック授業{subject.name}の連続時数({block_hours})が不正です"
                        f"（2〜4かつ週時数{subject.weekly_hours}以下）",
                        subject.id,
                    ))
            if not school.get_subject_teachers(subject.id):
                warnings.append(QualityWarning(
                    "no_teacher",
                    f"{subject.name}を担当できる教員がいないため配置されません",
                    subject.id,
                ))
            for slot in subject.fixed_times:
                if slot.day not in days:
                    warnings.append(QualityWarning(
                        "fixed_time_day",
                        f"{subject.name}の固定時間{slot}は授業日に含まれていません",
                        subject.id,
                    ))
        return warnings

    def _check_teacher_capacity(self, school: School) -> List[QualityWarning]:
        """教科の必要時数合計が担当教員の週上限合計を超えていないか"""
        warnings = []
        for subject in school.subjects:
            teachers = school.get_subject_teachers(subject.id)
            if not teachers:
                continue
            demand = subject.weekly_hours * sum(
                1 for c in school.classes if subject.targets_grade(c.grade)
            )
            capacity = sum(t.max_weekly_hours for t in teachers)
            if demand > capacity:
                warnings.append(QualityWarning(
                    "teacher_capacity",
                    f"{subject.name}の必要時数({demand})が担当教員の週上限合計({capacity})を超えています",
                    subject.id,
                ))
        return warnings
