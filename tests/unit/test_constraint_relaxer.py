"""制約緩和器のテスト"""
from timetable_engine.domain.entities import Subject, Teacher
from timetable_engine.domain.services.relaxation.constraint_relaxer import ConstraintRelaxer
from timetable_engine.domain.value_objects.assignment import ConstraintLevel, ConstraintViolation
from timetable_engine.domain.value_objects.relaxation import (
    MODIFY_SUBJECT,
    MODIFY_TEACHER,
    REDUCE_HOURS,
    REMOVE_CONSTRAINT,
    RelaxationAction,
    RelaxationConfig,
    RelaxationSuggestion,
)


def violation(level, name, **details):
    return ConstraintViolation(level, f"{name}の違反", name, details=details)


def create_relaxer(config=None):
    subjects = [
        Subject("math", "数学", 4),
        Subject("art", "美術", 2, is_external_instructor=True, prefer_concentrated=True),
        Subject("moral", "道徳", 1),
    ]
    teachers = [Teacher("t1", "山田", subjects=("math",))]
    return ConstraintRelaxer(subjects, teachers, config), subjects, teachers


class TestGenerateSuggestions:
    """緩和案の作成のテスト"""

    def test_one_suggestion_per_level_sorted_by_severity(self):
        relaxer, _, _ = create_relaxer()
        violations = [
            violation(ConstraintLevel.CRITICAL, "teacher_conflict"),
            violation(ConstraintLevel.HIGH, "weekly_hours", subject_id="math"),
            violation(ConstraintLevel.HIGH, "weekly_hours", subject_id="art"),
            violation(ConstraintLevel.LOW, "preference"),
            violation(ConstraintLevel.MEDIUM, "lunch_concentration"),
        ]

        suggestions = relaxer.generate_suggestions(violations)

        assert [s.level for s in suggestions] == [
            ConstraintLevel.LOW, ConstraintLevel.MEDIUM, ConstraintLevel.HIGH, ConstraintLevel.CRITICAL,
        ]

    def test_critical_suggestion_never_has_action(self):
        relaxer, _, _ = create_relaxer(RelaxationConfig(allow_critical_relaxation=True))

        [suggestion] = relaxer.generate_suggestions([violation(ConstraintLevel.CRITICAL, "room_conflict")])

        assert suggestion.action is None
        assert "room_conflict" in suggestion.affected_constraints

    def test_default_config_allows_low_and_medium_only(self):
        relaxer, _, _ = create_relaxer()
        suggestions = relaxer.generate_suggestions([
            violation(ConstraintLevel.LOW, "movement"),
            violation(ConstraintLevel.MEDIUM, "consecutive_periods", teacher_id="t1"),
            violation(ConstraintLevel.HIGH, "weekly_hours", subject_id="math"),
        ])
        low, medium, high = suggestions

        assert low.action == RelaxationAction(REMOVE_CONSTRAINT, "preference", {"constraint": "preference"})
        assert medium.action.type == MODIFY_TEACHER
        assert medium.action.target == "t1"
        assert medium.action.details == {"allow_consecutive": True}
        assert high.action is None
        assert not high.is_actionable

    def test_high_actions_when_allowed(self):
        relaxer, _, _ = create_relaxer(RelaxationConfig(allow_high_relaxation=True))

        [weekly] = relaxer.generate_suggestions([violation(ConstraintLevel.HIGH, "weekly_hours", subject_id="math")])
        [external] = relaxer.generate_suggestions([
            violation(ConstraintLevel.HIGH, "external_concentration", subject_id="art")
        ])

        assert weekly.action == RelaxationAction(REDUCE_HOURS, "math", {"reduce_by": 1})
        assert external.action.type == MODIFY_SUBJECT
        assert external.action.details == {"prefer_concentrated": False}

    def test_unhandled_rules_fall_through_to_next_violation(self):
        """緩和方法のない制約は飛ばし、同じ重要度の次の違反から作る"""
        relaxer, _, _ = create_relaxer()

        suggestions = relaxer.generate_suggestions([
            violation(ConstraintLevel.MEDIUM, "grade_suitability"),
            violation(ConstraintLevel.MEDIUM, "lunch_concentration", class_id="1-1"),
            violation(ConstraintLevel.HIGH, "teacher_daily_max", teacher_id="t1"),
        ])

        assert len(suggestions) == 1
        assert suggestions[0].affected_constraints == ["lunch_concentration"]


class TestApplyRelaxation:
    """緩和の適用のテスト"""

    def test_remove_constraint(self):
        relaxer, _, _ = create_relaxer()
        [suggestion] = relaxer.generate_suggestions([violation(ConstraintLevel.LOW, "preference")])

        result = relaxer.apply_relaxation(suggestion)

        assert result.success
        assert result.relaxed_constraints == ["preference"]

    def test_reduce_hours_does_not_touch_caller_data(self):
        relaxer, subjects, _ = create_relaxer()
        suggestion = RelaxationSuggestion(
            ConstraintLevel.HIGH, "時数", "減らす", ["weekly_hours"],
            RelaxationAction(REDUCE_HOURS, "math", {"reduce_by": 1}),
        )

        result = relaxer.apply_relaxation(suggestion)

        assert result.success
        assert result.modified_subjects[0].weekly_hours == 3
        assert next(s for s in relaxer.get_relaxed_subjects() if s.id == "math").weekly_hours == 3
        assert subjects[0].weekly_hours == 4

    def test_reduce_hours_keeps_at_least_one(self):
        relaxer, _, _ = create_relaxer()
        suggestion = RelaxationSuggestion(
            ConstraintLevel.HIGH, "時数", "減らす", ["weekly_hours"],
            RelaxationAction(REDUCE_HOURS, "moral", {"reduce_by": 1}),
        )

        result = relaxer.apply_relaxation(suggestion)

        assert result.modified_subjects == []
        assert next(s for s in relaxer.get_relaxed_subjects() if s.id == "moral").weekly_hours == 1

    def test_modify_subject_and_teacher(self):
        relaxer, _, teachers = create_relaxer()

        relaxer.apply_relaxation(RelaxationSuggestion(
            ConstraintLevel.HIGH, "外部", "集中を解除", ["external_concentration"],
            RelaxationAction(MODIFY_SUBJECT, "art", {"prefer_concentrated": False}),
        ))
        relaxer.apply_relaxation(RelaxationSuggestion(
            ConstraintLevel.MEDIUM, "連続", "許可", ["consecutive_periods"],
            RelaxationAction(MODIFY_TEACHER, "t1", {"allow_consecutive": True}),
        ))

        art = next(s for s in relaxer.get_relaxed_subjects() if s.id == "art")
        assert art.prefer_concentrated is False
        assert relaxer.get_relaxed_teachers()[0].allow_consecutive is True
        assert teachers[0].allow_consecutive is False

    def test_suggestion_without_action_fails(self):
        relaxer, _, _ = create_relaxer()
        suggestion = RelaxationSuggestion(ConstraintLevel.CRITICAL, "必須", "見直し", [])

        assert not relaxer.apply_relaxation(suggestion).success

    def test_unknown_action_type_fails(self):
        relaxer, _, _ = create_relaxer()
        suggestion = RelaxationSuggestion(
            ConstraintLevel.LOW, "?", "?", [], RelaxationAction("swap_days", "x"),
        )

        assert not relaxer.apply_relaxation(suggestion).success
