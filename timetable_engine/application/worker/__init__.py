"""ワーカー（ホストとのメッセージ境界）"""

from .messages import (
    MODE_SINGLE,
    MODE_MULTIPLE,
    ScheduleRequest,
    ResultEvent,
    MultiResultEvent,
    is_terminal,
)
from .schedule_task import ScheduleTask, ScheduleWorker, log_events

__all__ = [
    'MODE_SINGLE',
    'MODE_MULTIPLE',
    'ScheduleRequest',
    'ResultEvent',
    'MultiResultEvent',
    'is_terminal',
    'ScheduleTask',
    'ScheduleWorker',
    'log_events',
]
