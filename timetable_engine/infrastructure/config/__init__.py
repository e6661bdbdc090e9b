"""設定管理"""

from .logging_config import LoggingConfig, ContextFormatter
from .scheduler_config_loader import SchedulerConfig, SchedulerConfigLoader

__all__ = ['LoggingConfig', 'ContextFormatter', 'SchedulerConfig', 'SchedulerConfigLoader']
