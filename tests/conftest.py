"""テスト共通のフィクスチャ"""
import sys
from pathlib import Path

import pytest

# プロジェクトルートをパスに追加
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from timetable_engine.domain.entities import ClassInfo, ScheduleConfig, Subject, Teacher
from timetable_engine.domain.services.validators.constraint_validator import ConstraintValidator
from timetable_engine.domain.value_objects.assignment import TimetableEntry
from timetable_engine.infrastructure.config.scheduler_config_loader import SchedulerConfig

WEEKDAYS = ("月", "火", "水", "木", "金")


def _make_entry(entry_id, class_id="1-1", subject_id="math", teacher_id="t1",
                day="月", period=1, **kwargs):
    """テスト用のエントリを作成"""
    return TimetableEntry(
        id=entry_id,
        class_id=class_id,
        subject_id=subject_id,
        teacher_id=teacher_id,
        day=day,
        period=period,
        **kwargs
    )


@pytest.fixture
def make_entry():
    """エントリを作るファクトリ"""
    return _make_entry


@pytest.fixture
def weekly_config():
    """月〜金・6校時の基本設定"""
    return ScheduleConfig(days=WEEKDAYS, max_periods_per_day=6)


@pytest.fixture
def one_period_config():
    """月〜金・1日1校時の設定（5コマ）"""
    return ScheduleConfig(days=WEEKDAYS, max_periods_per_day=1)


@pytest.fixture
def small_school(weekly_config):
    """2学級・3教科・3教員の小さな学校"""
    subjects = [
        Subject("math", "数学", 4),
        Subject("jpn", "国語", 4),
        Subject("sci", "理科", 3, requires_special_room=True, special_room_type="理科室"),
    ]
    teachers = [
        Teacher("t1", "山田", subjects=("math",)),
        Teacher("t2", "田中", subjects=("jpn",)),
        Teacher("t3", "鈴木", subjects=("sci",)),
    ]
    classes = [
        ClassInfo("1-1", 1, 1),
        ClassInfo("1-2", 1, 2),
    ]
    return weekly_config, subjects, teachers, classes


@pytest.fixture
def validator_factory(weekly_config):
    """検証器を作るファクトリ"""
    def factory(subjects, teachers, classes, config=None, **kwargs):
        return ConstraintValidator(config or weekly_config, subjects, teachers, classes, **kwargs)
    return factory


@pytest.fixture
def fast_settings():
    """テスト用の軽い設定"""
    return SchedulerConfig(
        optimizer_max_iterations=5,
        backtrack_limit=5000,
        default_retries=2,
        min_count=2,
        max_attempts=4,
        relaxation_trigger=2,
        max_relaxation_rounds=3,
    )


@pytest.fixture
def request_payload():
    """ホストから届く入力メッセージ（camelCase）"""
    return {
        "config": {
            "days": list(WEEKDAYS),
            "maxPeriodsPerDay": 2,
            "lunchPeriod": 4,
        },
        "subjects": [
            {"id": "math", "name": "数学", "weeklyHours": 3},
            {
                "id": "sci", "name": "理科", "weeklyHours": 2,
                "requiresSpecialRoom": True, "specialRoomType": "理科室",
            },
        ],
        "teachers": [
            {"id": "t1", "name": "山田", "subjects": ["math"], "maxWeeklyHours": 20},
            {
                "id": "t2", "name": "鈴木", "subjects": ["sci"],
                "unavailableTimes": [{"day": "金", "period": 2}],
            },
        ],
        "classes": [
            {"id": "1-1", "grade": 1, "classNumber": 1, "name": "1年1組"},
        ],
        "seed": 7,
    }
