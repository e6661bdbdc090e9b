"""ドメインエンティティのテスト"""
import math

from timetable_engine.domain.entities import (
    ClassInfo,
    DailyScheduleConfig,
    MultipleScheduleResult,
    ScheduleConfig,
    ScheduleResult,
    School,
    Subject,
    Teacher,
)
from timetable_engine.domain.value_objects.assignment import ConstraintLevel, ConstraintViolation
from timetable_engine.domain.value_objects.time_slot import PreferredTime, TimeSlot


class TestScheduleConfig:
    """基本設定の解決順のテスト"""

    def test_grade_config_overrides_days_and_periods(self):
        config = ScheduleConfig(
            days=("月", "火", "水"),
            max_periods_per_day=6,
            daily_max_periods={"水": 4},
            grade_configs={3: DailyScheduleConfig(days=("月", "火"), daily_max_periods={"火": 5})},
        )

        assert config.days_for(1) == ("月", "火", "水")
        assert config.days_for(3) == ("月", "火")
        assert config.max_periods_for("水", 1) == 4
        assert config.max_periods_for("火", 3) == 5
        assert config.max_periods_for("月", 3) == 6

    def test_time_slots_for_grade(self):
        config = ScheduleConfig(days=("月", "火"), max_periods_per_day=3, daily_max_periods={"火": 2})

        slots = config.time_slots_for(1)

        assert slots == [
            TimeSlot("月", 1), TimeSlot("月", 2), TimeSlot("月", 3),
            TimeSlot("火", 1), TimeSlot("火", 2),
        ]
        assert config.total_slots(1) == 5


class TestTeacherPreference:
    """教員の希望時間帯のテスト"""

    def test_morning_preference(self):
        teacher = Teacher("t1", "山田", preferred_times=[PreferredTime("月", 1, "morning")])

        assert teacher.prefers("月", 2, lunch_period=4) is True
        assert teacher.prefers("月", 5, lunch_period=4) is False
        assert teacher.prefers("火", 5, lunch_period=4) is None

    def test_afternoon_preference_accepts_exact_period(self):
        teacher = Teacher("t1", "山田", preferred_times=[PreferredTime("水", 2, "afternoon")])

        assert teacher.prefers("水", 2, lunch_period=4) is True
        assert teacher.prefers("水", 3, lunch_period=4) is False
        assert teacher.prefers("水", 6, lunch_period=4) is True


class TestSchool:
    """学校エンティティのテスト"""

    def test_lookup_and_required_subjects(self, weekly_config):
        subjects = [
            Subject("math", "数学", 4),
            Subject("eng", "英語", 3, target_grades=(2,)),
            Subject("art", "美術", 1),  # 担当教員なし
        ]
        teachers = [Teacher("t1", "山田", subjects=("math", "eng"))]
        classes = [ClassInfo("1-1", 1, 1, lunch_period=3), ClassInfo("2-1", 2, 1)]
        school = School(weekly_config, subjects, teachers, classes)

        assert [s.id for s in school.required_subjects(classes[0])] == ["math"]
        assert [s.id for s in school.required_subjects(classes[1])] == ["math", "eng"]
        assert school.get_subject_teachers("art") == []
        assert school.lunch_period_for("1-1") == 3
        assert school.lunch_period_for("2-1") == weekly_config.lunch_period
        assert school.grade_of("2-1") == 2
        assert school.grade_of("9-9") is None

    def test_subject_room(self):
        assert Subject("sci", "理科", 3, requires_special_room=True, special_room_type="理科室").room == "理科室"
        assert Subject("mus", "音楽", 1, requires_special_room=True).room == "mus"
        assert Subject("math", "数学", 4).room is None


class TestScheduleResult:
    """生成結果のテスト"""

    def test_feasibility(self, make_entry):
        critical = ConstraintViolation(ConstraintLevel.CRITICAL, "重複", "teacher_conflict")
        low = ConstraintViolation(ConstraintLevel.LOW, "希望", "preference")
        entries = [make_entry("e1")]

        ok = ScheduleResult(entries, [], [], [], [low], 1.0)
        broken = ScheduleResult(entries, [], [], [], [critical, low], 1.0)
        empty = ScheduleResult([], [], [], [], [], math.inf)

        assert ok.is_feasible
        assert not broken.is_feasible
        assert broken.critical_violations == [critical]
        assert empty.is_empty and not empty.is_feasible
        assert ok.find_entry("e1") is entries[0]
        assert ok.find_entry("missing") is None

    def test_multiple_result_selects_first(self):
        result = ScheduleResult([], [], [], [], [], 0.0)

        multi = MultipleScheduleResult([result], 3, 0, False)
        none = MultipleScheduleResult([], 3, 0, True)

        assert multi.selected_index == 0
        assert multi.best is result
        assert none.selected_index is None
        assert none.best is None
