"""時間割統計のテスト"""
import math

import pytest

from timetable_engine.application.services.schedule_statistics import ScheduleStatistics
from timetable_engine.domain.entities import ClassInfo, ScheduleConfig, ScheduleResult, Subject, Teacher
from timetable_engine.domain.value_objects.assignment import ConstraintLevel, ConstraintViolation


@pytest.fixture
def result(make_entry):
    entries = [
        make_entry("a", day="月", period=1),
        make_entry("b", day="火", period=1),
        make_entry("c", subject_id="jpn", teacher_id="t2", day="月", period=2),
        make_entry("d", class_id="1-2", day="月", period=2),
    ]
    return ScheduleResult(
        entries=entries,
        classes=[ClassInfo("1-1", 1, 1), ClassInfo("1-2", 1, 2)],
        subjects=[Subject("math", "数学", 2), Subject("jpn", "国語", 1)],
        teachers=[
            Teacher("t1", "山田", subjects=("math",), max_weekly_hours=2),
            Teacher("t2", "田中", subjects=("jpn",), max_weekly_hours=4),
            Teacher("t3", "鈴木", max_weekly_hours=0),
        ],
        violations=[
            ConstraintViolation(ConstraintLevel.HIGH, "不足", "weekly_hours"),
            ConstraintViolation(ConstraintLevel.LOW, "希望", "preference"),
        ],
        score=2.5,
    )


@pytest.fixture
def config():
    return ScheduleConfig(days=("月", "火"), max_periods_per_day=2)


def test_teacher_hours(result, config):
    hours = ScheduleStatistics(result, config).teacher_hours()

    assert hours.loc["t1", "assigned"] == 3
    assert hours.loc["t1", "utilization"] == pytest.approx(150.0)
    assert hours.loc["t2", "utilization"] == pytest.approx(25.0)
    assert hours.loc["t3", "utilization"] == pytest.approx(0.0)


def test_overloaded_teachers(result, config):
    assert ScheduleStatistics(result, config).overloaded_teachers() == ["t1"]


def test_class_subject_hours(result, config):
    table = ScheduleStatistics(result, config).class_subject_hours()

    assert table.loc["1-1", "math"] == 2
    assert table.loc["1-1", "jpn"] == 1
    assert table.loc["1-2", "jpn"] == 0


def test_fill_rate_and_summary(result, config):
    statistics = ScheduleStatistics(result, config)

    assert statistics.fill_rate() == pytest.approx(4 / 8)
    summary = statistics.summary()
    assert summary["entries"] == 4
    assert summary["violations"] == {"critical": 0, "high": 1, "medium": 0, "low": 1}
    assert summary["teacher_load_variance"] == pytest.approx(round(((3 - 4 / 3) ** 2 + (1 - 4 / 3) ** 2 + (4 / 3) ** 2) / 3, 3))


def test_empty_result(config):
    empty = ScheduleResult([], [ClassInfo("1-1", 1, 1)], [Subject("math", "数学", 2)], [], [], math.inf)
    statistics = ScheduleStatistics(empty, config)

    assert statistics.fill_rate() == 0.0
    assert statistics.teacher_load_variance() == 0.0
    assert statistics.class_subject_hours().loc["1-1", "math"] == 0
