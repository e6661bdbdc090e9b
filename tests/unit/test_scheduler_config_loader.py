"""スケジューラー設定ローダーのテスト"""
import json

import pytest

from timetable_engine.infrastructure.config.scheduler_config_loader import (
    SchedulerConfig,
    SchedulerConfigLoader,
)
from timetable_engine.shared.mixins.validation_mixin import ValidationError


def test_missing_file_uses_defaults(tmp_path):
    loader = SchedulerConfigLoader(tmp_path / "missing.json")

    assert loader.load() == SchedulerConfig()


def test_broken_file_uses_defaults(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{", encoding="utf-8")

    assert SchedulerConfigLoader(path).load() == SchedulerConfig()


def test_sections_are_read(tmp_path):
    path = tmp_path / "scheduler_config.json"
    path.write_text(json.dumps({
        "generation": {"default_retries": 4, "min_count": 2, "max_attempts": 20},
        "search": {"backtrack_limit": 1000, "optimizer_max_iterations": 0},
        "relaxation": {"trigger_after_failures": 5, "max_rounds": 1, "allow_high": True},
        "soft_weights": {"movement": 3},
    }), encoding="utf-8")

    config = SchedulerConfigLoader(path).load()

    assert config.default_retries == 4
    assert config.min_count == 2
    assert config.max_attempts == 20
    assert config.backtrack_limit == 1000
    assert config.optimizer_max_iterations == 0
    assert config.relaxation_trigger == 5
    assert config.max_relaxation_rounds == 1
    assert config.relaxation.allow_high_relaxation
    assert not config.relaxation.allow_critical_relaxation
    assert config.soft_weights["movement"] == 3.0
    assert config.soft_weights["preference"] == 0.5


@pytest.mark.parametrize("data", [
    {"generation": {"min_count": 0}},
    {"search": {"backtrack_limit": 0}},
    {"relaxation": {"trigger_after_failures": 0}},
    {"soft_weights": {"unknown": 1.0}},
    {"soft_weights": {"movement": -1}},
])
def test_invalid_values_raise(data):
    with pytest.raises(ValidationError):
        SchedulerConfigLoader().from_dict(data)
