"""制約緩和サービス

生成に失敗したときの違反内容から緩和案を作り、許可された緩和を
内部の教科・教員のコピーに適用します。呼び出し元のデータは変更しません。
"""
import dataclasses
from typing import List, Optional, Sequence

from ...entities.subject import Subject
from ...entities.teacher import Teacher
from ...value_objects.assignment import ConstraintLevel, ConstraintViolation
from ...value_objects.relaxation import (
    MODIFY_SUBJECT,
    MODIFY_TEACHER,
    REDUCE_HOURS,
    REMOVE_CONSTRAINT,
    RelaxationAction,
    RelaxationConfig,
    RelaxationResult,
    RelaxationSuggestion,
)
from ....shared.mixins.logging_mixin import LoggingMixin


class ConstraintRelaxer(LoggingMixin):
    """制約緩和器"""

    def __init__(self,
                 subjects: Sequence[Subject],
                 teachers: Sequence[Teacher],
                 config: Optional[RelaxationConfig] = None):
        super().__init__()
        self.subjects: List[Subject] = list(subjects)
        self.teachers: List[Teacher] = list(teachers)
        self.config = config or RelaxationConfig()

    def generate_suggestions(self, violations: Sequence[ConstraintViolation]) -> List[RelaxationSuggestion]:
        """重要度ごとに1件ずつ緩和案を作成（low → critical の順）"""
        suggestions: List[RelaxationSuggestion] = []
        processed = set()

        for violation in violations:
            if violation.level in processed:
                continue
            suggestion = self._create_suggestion(violation)
            if suggestion:
                suggestions.append(suggestion)
                processed.add(violation.level)

        return sorted(suggestions, key=lambda s: s.level.rank)

    def _create_suggestion(self, violation: ConstraintViolation) -> Optional[RelaxationSuggestion]:
        level = violation.level
        allowed = self.config.allows(level)
        name = violation.constraint_name
        details = violation.details

        if level == ConstraintLevel.CRITICAL:
            return RelaxationSuggestion(
                level=level,
                message="必須制約に違反しています",
                suggestion="条件が厳しすぎます。教員の担当や教科の設定を見直してください。",
                affected_constraints=[
                    "teacher_conflict", "teacher_unavailable", "room_conflict",
                    "block_contiguity", "class_conflict",
                ],
            )

        if level == ConstraintLevel.LOW:
            return self._suggest(
                violation, allowed,
                message="希望時間帯が反映されていません",
                suggestion="希望時間帯の制約を緩和できます。",
                affected=["preference"],
                action=RelaxationAction(REMOVE_CONSTRAINT, "preference", {"constraint": "preference"}),
            )

        if level == ConstraintLevel.MEDIUM:
            if name == "consecutive_periods":
                return self._suggest(
                    violation, allowed,
                    message="3校時以上の連続授業があります",
                    suggestion="該当教員の連続授業を許可できます。",
                    affected=["consecutive_periods"],
                    action=RelaxationAction(
                        MODIFY_TEACHER, details.get("teacher_id", ""), {"allow_consecutive": True}
                    ),
                )
            if name == "lunch_concentration":
                return self._suggest(
                    violation, allowed,
                    message="昼休み前に授業が集中しています",
                    suggestion="昼前集中の制約を緩和できます。",
                    affected=["lunch_concentration"],
                    action=RelaxationAction(
                        REMOVE_CONSTRAINT, "lunch_concentration", {"constraint": "lunch_concentration"}
                    ),
                )
            return None

        if name == "weekly_hours":
            return self._suggest(
                violation, allowed,
                message="週授業時数が満たされていません",
                suggestion="教科の週時数を減らすか、教員の担当を調整してください。",
                affected=["weekly_hours"],
                action=RelaxationAction(REDUCE_HOURS, details.get("subject_id", ""), {"reduce_by": 1}),
            )
        if name == "external_concentration":
            return self._suggest(
                violation, allowed,
                message="外部講師の授業を1日にまとめられません",
                suggestion="外部講師の集中配置の希望を緩和できます。",
                affected=["external_concentration"],
                action=RelaxationAction(
                    MODIFY_SUBJECT, details.get("subject_id", ""), {"prefer_concentrated": False}
                ),
            )
        return None

    @staticmethod
    def _suggest(violation: ConstraintViolation, allowed: bool, message: str, suggestion: str,
                 affected: List[str], action: RelaxationAction) -> RelaxationSuggestion:
        return RelaxationSuggestion(
            level=violation.level,
            message=message,
            suggestion=suggestion,
            affected_constraints=affected,
            action=action if allowed else None,
        )

    def apply_relaxation(self, suggestion: RelaxationSuggestion) -> RelaxationResult:
        """緩和案を内部のコピーに適用"""
        if not suggestion.action:
            return RelaxationResult(success=False, suggestions=[suggestion])

        action = suggestion.action
        result = RelaxationResult(success=True, suggestions=[suggestion])

        if action.type == REMOVE_CONSTRAINT:
            result.relaxed_constraints.append(action.target)
        elif action.type == MODIFY_SUBJECT:
            modified = self._replace_subject(action.target, **action.details)
            if modified:
                result.modified_subjects.append(modified)
        elif action.type == MODIFY_TEACHER:
            modified = self._replace_teacher(action.target, **action.details)
            if modified:
                result.modified_teachers.append(modified)
        elif action.type == REDUCE_HOURS:
            subject = self._find_subject(action.target)
            if subject and subject.weekly_hours > 1:
                reduced = max(1, subject.weekly_hours - action.details.get("reduce_by", 1))
                result.modified_subjects.append(self._replace_subject(subject.id, weekly_hours=reduced))
        else:
            self.logger.warning(f"未知の緩和アクションです: {action.type}")
            result.success = False
            return result

        self.logger.info(f"制約を緩和しました: {suggestion.message}")
        return result

    def _find_subject(self, subject_id: str) -> Optional[Subject]:
        return next((s for s in self.subjects if s.id == subject_id), None)

    def _replace_subject(self, subject_id: str, **changes) -> Optional[Subject]:
        for index, subject in enumerate(self.subjects):
            if subject.id == subject_id:
                self.subjects[index] = dataclasses.replace(subject, **changes)
                return self.subjects[index]
        return None

    def _replace_teacher(self, teacher_id: str, **changes) -> Optional[Teacher]:
        for index, teacher in enumerate(self.teachers):
            if teacher.id == teacher_id:
                self.teachers[index] = dataclasses.replace(teacher, **changes)
                return self.teachers[index]
        return None

    def get_relaxed_subjects(self) -> List[Subject]:
        return list(self.subjects)

    def get_relaxed_teachers(self) -> List[Teacher]:
        return list(self.teachers)
