"""制約検証器のテスト"""
import pytest

from timetable_engine.domain.entities import ClassInfo, Subject, Teacher
from timetable_engine.domain.services.csp.assignment_trail import AssignmentTrail
from timetable_engine.domain.value_objects.assignment import ConstraintLevel
from timetable_engine.domain.value_objects.time_slot import PreferredTime, TimeSlot


@pytest.fixture
def school_data():
    subjects = [
        Subject("math", "数学", 2),
        Subject("sci", "理科", 1, requires_special_room=True, special_room_type="理科室"),
        Subject("pe", "体育", 1, is_co_teaching=True, co_teaching_teachers=("t3", "t4")),
        Subject("lab", "実験", 2, is_block_class=True, block_hours=2),
    ]
    teachers = [
        Teacher("t1", "山田", subjects=("math", "lab"), unavailable_times=[TimeSlot("金", 6)]),
        Teacher("t2", "鈴木", subjects=("sci",)),
        Teacher("t3", "田中", subjects=("pe",)),
        Teacher("t4", "佐藤", subjects=("pe",)),
    ]
    classes = [ClassInfo("1-1", 1, 1), ClassInfo("1-2", 1, 2)]
    return subjects, teachers, classes


def keys(violations, level=None):
    return {v.constraint_name for v in violations if level is None or v.level == level}


class TestCriticalConstraints:
    """必須制約のテスト"""

    def test_teacher_double_booking(self, school_data, validator_factory, make_entry):
        validator = validator_factory(*school_data)
        entries = [
            make_entry("a", class_id="1-1"),
            make_entry("b", class_id="1-2"),
        ]

        violations = validator.validate_all(entries)

        assert "teacher_conflict" in keys(violations, ConstraintLevel.CRITICAL)
        assert validator.has_critical_violations(entries)
        assert validator.critical_violation_count(entries) == 2

    def test_joint_co_teaching_is_not_a_conflict(self, school_data, validator_factory, make_entry):
        """同じ教科・同じ教員構成の共同授業は重複とみなさない"""
        validator = validator_factory(*school_data)
        entries = [
            make_entry("a", class_id="1-1", subject_id="pe", teacher_id="t3", teacher_ids=("t3", "t4")),
            make_entry("b", class_id="1-2", subject_id="pe", teacher_id="t4", teacher_ids=("t4", "t3")),
        ]

        assert not validator.has_critical_violations(entries)

    def test_co_teaching_with_different_teachers_conflicts(self, school_data, validator_factory, make_entry):
        validator = validator_factory(*school_data)
        entries = [
            make_entry("a", class_id="1-1", subject_id="pe", teacher_id="t3", teacher_ids=("t3", "t4")),
            make_entry("b", class_id="1-2", subject_id="pe", teacher_id="t3", teacher_ids=("t3", "t1")),
        ]

        assert validator.has_critical_violations(entries)

    def test_teacher_unavailable(self, school_data, validator_factory, make_entry):
        validator = validator_factory(*school_data)
        entries = [make_entry("a", day="金", period=6)]

        assert "teacher_unavailable" in keys(validator.validate_all(entries))

    def test_special_room_conflict(self, school_data, validator_factory, make_entry):
        validator = validator_factory(*school_data)
        entries = [
            make_entry("a", class_id="1-1", subject_id="sci", teacher_id="t2", room_id="理科室"),
            make_entry("b", class_id="1-2", subject_id="sci", teacher_id="t9", room_id="理科室"),
        ]

        assert "room_conflict" in keys(validator.validate_all(entries))

    def test_class_double_booking(self, school_data, validator_factory, make_entry):
        validator = validator_factory(*school_data)
        entries = [
            make_entry("a", subject_id="math", teacher_id="t1"),
            make_entry("b", subject_id="sci", teacher_id="t2"),
        ]

        assert keys(validator.validate_all(entries), ConstraintLevel.CRITICAL) == {"class_conflict"}

    def test_block_contiguity(self, school_data, validator_factory, make_entry):
        """ブロック授業は開始校時から連続して配置する"""
        validator = validator_factory(*school_data)
        block = dict(subject_id="lab", is_block_class=True, block_start_period=2)

        contiguous = [make_entry("a", period=2, **block), make_entry("b", period=3, **block)]
        broken = [make_entry("a", period=2, **block), make_entry("b", period=4, **block)]

        assert not validator.has_critical_violations(contiguous)
        assert "block_contiguity" in keys(validator.validate_all(broken))

    def test_block_must_fit_within_day(self, school_data, validator_factory, make_entry):
        validator = validator_factory(*school_data)
        block = dict(subject_id="lab", is_block_class=True, block_start_period=6)

        entries = [make_entry("a", period=6, **block), make_entry("b", period=7, **block)]

        assert "block_contiguity" in keys(validator.validate_all(entries))

    def test_changed_entries_limit_the_check(self, school_data, validator_factory, make_entry):
        """changedを指定した場合はそのエントリに関係する違反だけを見る"""
        validator = validator_factory(*school_data)
        clash_a = make_entry("a", class_id="1-1")
        clash_b = make_entry("b", class_id="1-2")
        other = make_entry("c", class_id="1-1", subject_id="sci", teacher_id="t2", day="火")

        entries = [clash_a, clash_b, other]

        assert validator.has_critical_violations(entries, [clash_a])
        assert not validator.has_critical_violations(entries, [other])

    def test_trail_index_gives_same_verdict(self, school_data, validator_factory, make_entry):
        """配置記録の索引を渡しても同じ判定になる"""
        validator = validator_factory(*school_data)
        trail = AssignmentTrail()
        clash_a = make_entry("a", class_id="1-1")
        clash_b = make_entry("b", class_id="1-2")
        other = make_entry("c", class_id="1-1", subject_id="sci", teacher_id="t2", day="火")
        for entry in (clash_a, clash_b, other):
            trail.push(entry)

        assert validator.has_critical_violations(trail.entries, [clash_a], trail.slot_entries)
        assert not validator.has_critical_violations(trail.entries, [other], trail.slot_entries)

        trail.undo_to(0)
        trail.push(clash_a)
        assert not validator.has_critical_violations(trail.entries, slot_lookup=trail.slot_entries)



class TestRuleLevels:
    """High・Medium・Low制約のテスト"""

    def test_weekly_hours_reports_missing_and_short(self, school_data, validator_factory, make_entry):
        validator = validator_factory(*school_data)
        entries = [make_entry("a", class_id="1-1")]

        weekly = [v for v in validator.validate_all(entries) if v.constraint_name == "weekly_hours"]
        math_1_1 = next(v for v in weekly if v.details["class_id"] == "1-1" and v.details["subject_id"] == "math")
        math_1_2 = next(v for v in weekly if v.details["class_id"] == "1-2" and v.details["subject_id"] == "math")

        assert math_1_1.level == ConstraintLevel.HIGH
        assert math_1_1.details["actual"] == 1
        assert "不足" in math_1_1.message
        assert "配置されていません" in math_1_2.message

    def test_teacher_weekly_and_daily_limits(self, validator_factory, make_entry, weekly_config):
        subjects = [Subject("math", "数学", 3)]
        teachers = [Teacher("t1", "山田", subjects=("math",), max_weekly_hours=2, max_daily_hours=2)]
        classes = [ClassInfo("1-1", 1, 1)]
        validator = validator_factory(subjects, teachers, classes)
        entries = [make_entry(f"e{p}", period=p) for p in (1, 3, 5)]

        found = keys(validator.validate_all(entries), ConstraintLevel.HIGH)

        assert "teacher_max_weekly_hours" in found
        assert "teacher_daily_max" in found
        assert "weekly_hours" not in found

    def test_consecutive_periods(self, validator_factory, make_entry):
        subjects = [Subject("math", "数学", 3)]
        teachers = [Teacher("t1", "山田", subjects=("math",))]
        classes = [ClassInfo("1-1", 1, 1), ClassInfo("1-2", 1, 2), ClassInfo("1-3", 1, 3)]
        entries = [
            make_entry("a", class_id="1-1", period=1),
            make_entry("b", class_id="1-2", period=2),
            make_entry("c", class_id="1-3", period=3),
        ]

        strict = validator_factory(subjects, teachers, classes)
        relaxed_teacher = validator_factory(
            subjects, [Teacher("t1", "山田", subjects=("math",), allow_consecutive=True)], classes
        )

        violations = [v for v in strict.validate_all(entries) if v.constraint_name == "consecutive_periods"]
        assert violations
        assert violations[0].details["teacher_id"] == "t1"
        assert violations[0].level == ConstraintLevel.MEDIUM
        assert "consecutive_periods" not in keys(relaxed_teacher.validate_all(entries))

    def test_lunch_concentration(self, validator_factory, make_entry):
        subjects = [Subject("math", "数学", 4)]
        teachers = [Teacher(f"t{p}", "教員", subjects=("math",)) for p in range(1, 5)]
        classes = [ClassInfo("1-1", 1, 1)]
        validator = validator_factory(subjects, teachers, classes)
        entries = [make_entry(f"e{p}", period=p, teacher_id=f"t{p}") for p in range(1, 5)]

        violation = next(v for v in validator.validate_all(entries) if v.constraint_name == "lunch_concentration")

        assert violation.details == {"class_id": "1-1", "day": "月", "morning_periods": 4}

    def test_grade_suitability(self, validator_factory, make_entry):
        subjects = [Subject("math", "数学", 1, grade_suitability=(2, 3))]
        teachers = [Teacher("t1", "山田", subjects=("math",))]
        validator = validator_factory(subjects, teachers, [ClassInfo("1-1", 1, 1)])

        assert "grade_suitability" in keys(validator.validate_all([make_entry("a")]))

    def test_preferences_split_by_priority_teacher(self, validator_factory, make_entry):
        """優先教員はHigh、それ以外はLowの希望時間帯違反になる"""
        subjects = [Subject("math", "数学", 1), Subject("jpn", "国語", 1)]
        morning = [PreferredTime("月", 1, "morning")]
        teachers = [
            Teacher("t1", "山田", subjects=("math",), is_priority=True, preferred_times=morning),
            Teacher("t2", "田中", subjects=("jpn",), preferred_times=morning),
        ]
        validator = validator_factory(subjects, teachers, [ClassInfo("1-1", 1, 1)])
        entries = [
            make_entry("a", period=5),
            make_entry("b", subject_id="jpn", teacher_id="t2", period=6),
        ]

        violations = validator.validate_all(entries)

        assert "priority_preference" in keys(violations, ConstraintLevel.HIGH)
        assert "preference" in keys(violations, ConstraintLevel.LOW)

    def test_external_instructor_concentration(self, validator_factory, make_entry):
        subjects = [Subject("art", "美術", 2, is_external_instructor=True, prefer_concentrated=True)]
        teachers = [Teacher("x1", "外部", subjects=("art",), is_external=True)]
        validator = validator_factory(subjects, teachers, [ClassInfo("1-1", 1, 1)])
        entries = [
            make_entry("a", subject_id="art", teacher_id="x1", day="月"),
            make_entry("b", subject_id="art", teacher_id="x1", day="火"),
        ]

        violation = next(v for v in validator.validate_all(entries)
                         if v.constraint_name == "external_concentration")

        assert violation.details["subject_id"] == "art"
        assert violation.details["days"] == sorted(["月", "火"])
        assert validator.calculate_score(entries) == pytest.approx(1.0)

    def test_violations_sorted_by_severity(self, school_data, validator_factory, make_entry):
        validator = validator_factory(*school_data)
        entries = [make_entry("a", class_id="1-1"), make_entry("b", class_id="1-2")]

        ranks = [v.level.rank for v in validator.validate_all(entries)]

        assert ranks == sorted(ranks, reverse=True)


class TestRelaxedConstraints:
    """緩和済み制約のテスト"""

    def test_relaxed_key_disables_rule_and_evaluator(self, validator_factory):
        subjects = [Subject("math", "数学", 1)]
        teachers = [Teacher("t1", "山田", subjects=("math",))]
        classes = [ClassInfo("1-1", 1, 1)]

        validator = validator_factory(subjects, teachers, classes, relaxed_constraints=["preference"])

        assert "preference" not in {c.key for c in validator.rules}
        assert "preference" not in {e.key for e in validator.evaluators}

    def test_critical_rules_cannot_be_relaxed(self, validator_factory, make_entry):
        subjects = [Subject("math", "数学", 1)]
        teachers = [Teacher("t1", "山田", subjects=("math",))]
        classes = [ClassInfo("1-1", 1, 1), ClassInfo("1-2", 1, 2)]
        validator = validator_factory(subjects, teachers, classes, relaxed_constraints=["teacher_conflict"])
        entries = [make_entry("a", class_id="1-1"), make_entry("b", class_id="1-2")]

        assert "teacher_conflict" in keys(validator.validate_all(entries))


class TestScore:
    """ソフト制約スコアのテスト"""

    def test_room_movement_is_scored(self, validator_factory, make_entry):
        subjects = [
            Subject("math", "数学", 1),
            Subject("sci", "理科", 1, requires_special_room=True, special_room_type="理科室"),
        ]
        teachers = [Teacher("t1", "山田", subjects=("math", "sci"))]
        validator = validator_factory(subjects, teachers, [ClassInfo("1-1", 1, 1)])
        entries = [
            make_entry("a", period=1),
            make_entry("b", subject_id="sci", period=2, room_id="理科室"),
        ]

        breakdown = validator.score_breakdown(entries)

        assert breakdown["movement"] == pytest.approx(1.0)
        assert "movement" in keys(validator.validate_all(entries), ConstraintLevel.LOW)
        assert validator.calculate_score(entries) == pytest.approx(sum(breakdown.values()))

    def test_soft_weights_override(self, validator_factory, make_entry):
        subjects = [Subject("math", "数学", 1), Subject("sci", "理科", 1, requires_special_room=True)]
        teachers = [Teacher("t1", "山田", subjects=("math", "sci"))]
        validator = validator_factory(
            subjects, teachers, [ClassInfo("1-1", 1, 1)], soft_weights={"movement": 5.0}
        )
        entries = [
            make_entry("a", period=1),
            make_entry("b", subject_id="sci", period=3, room_id="sci"),
        ]

        assert validator.score_breakdown(entries)["movement"] == pytest.approx(5.0)

    def test_empty_schedule_scores_zero(self, school_data, validator_factory):
        validator = validator_factory(*school_data)

        assert validator.calculate_score([]) == 0
        assert "制約違反" in validator.get_violation_summary([])
