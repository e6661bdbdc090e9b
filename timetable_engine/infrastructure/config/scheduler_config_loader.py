"""スケジューラー設定ローダー"""
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from ...domain.constraints.soft import DEFAULT_SOFT_WEIGHTS
from ...domain.value_objects.relaxation import RelaxationConfig
from ...shared.mixins.logging_mixin import LoggingMixin
from ...shared.mixins.validation_mixin import ValidationMixin

DEFAULT_CONFIG_PATH = Path("data/config/scheduler_config.json")


@dataclass
class SchedulerConfig:
    """スケジューラーの設定"""
    optimizer_max_iterations: int = 100
    backtrack_limit: int = 20000
    default_retries: int = 10
    min_count: int = 3
    max_attempts: int = 50
    relaxation_trigger: int = 10  # 連続失敗何回ごとに緩和するか
    max_relaxation_rounds: int = 3
    soft_weights: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_SOFT_WEIGHTS))
    relaxation: RelaxationConfig = field(default_factory=RelaxationConfig)


class SchedulerConfigLoader(LoggingMixin, ValidationMixin):
    """スケジューラー設定ローダー

    ファイルがない場合や読めない場合はデフォルト設定を使用します。
    値が範囲外の場合はValidationErrorを送出します。
    """

    def __init__(self, config_path: Optional[Path] = None):
        super().__init__()
        self.config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    def load(self) -> SchedulerConfig:
        """設定ファイルを読み込んでSchedulerConfigを返す"""
        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError:
            self.logger.warning(f"設定ファイル {self.config_path} が見つかりません。デフォルト設定を使用します。")
            return self._create_default_config()
        except json.JSONDecodeError as e:
            self.logger.error(f"設定ファイルの読み込みエラー: {e}")
            return self._create_default_config()

        return self.from_dict(data)

    def from_dict(self, data: Dict[str, Any]) -> SchedulerConfig:
        self.validate_type(data, dict, "設定")
        defaults = self._create_default_config()

        generation = data.get('generation', {})
        search = data.get('search', {})
        relaxation = data.get('relaxation', {})

        soft_weights = dict(defaults.soft_weights)
        for key, weight in data.get('soft_weights', {}).items():
            self.validate_in_choices(key, list(DEFAULT_SOFT_WEIGHTS), "soft_weightsのキー")
            self.validate_range(weight, 0, None, f"soft_weights.{key}")
            soft_weights[key] = float(weight)

        config = SchedulerConfig(
            optimizer_max_iterations=search.get('optimizer_max_iterations', defaults.optimizer_max_iterations),
            backtrack_limit=search.get('backtrack_limit', defaults.backtrack_limit),
            default_retries=generation.get('default_retries', defaults.default_retries),
            min_count=generation.get('min_count', defaults.min_count),
            max_attempts=generation.get('max_attempts', defaults.max_attempts),
            relaxation_trigger=relaxation.get('trigger_after_failures', defaults.relaxation_trigger),
            max_relaxation_rounds=relaxation.get('max_rounds', defaults.max_relaxation_rounds),
            soft_weights=soft_weights,
            relaxation=RelaxationConfig(
                allow_low_relaxation=relaxation.get('allow_low', True),
                allow_medium_relaxation=relaxation.get('allow_medium', True),
                allow_high_relaxation=relaxation.get('allow_high', False),
                allow_critical_relaxation=relaxation.get('allow_critical', False),
            ),
        )

        self.validate_range(config.optimizer_max_iterations, 0, None, "optimizer_max_iterations")
        self.validate_range(config.backtrack_limit, 1, None, "backtrack_limit")
        self.validate_range(config.default_retries, 1, None, "default_retries")
        self.validate_range(config.min_count, 1, None, "min_count")
        self.validate_range(config.max_attempts, 1, None, "max_attempts")
        self.validate_range(config.relaxation_trigger, 1, None, "relaxation_trigger")
        self.validate_range(config.max_relaxation_rounds, 0, None, "max_relaxation_rounds")

        self.logger.debug(f"スケジューラー設定を読み込みました: {self.config_path}")
        return config

    def _create_default_config(self) -> SchedulerConfig:
        """デフォルト設定を作成"""
        return SchedulerConfig()
