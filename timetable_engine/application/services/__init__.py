"""アプリケーションサービス"""

from .progress_reporter import LogEvent, ProgressReporter
from .schedule_hash import schedule_hash
from .scheduler import Scheduler
from .manual_edit_service import ManualEditService, EditOutcome
from .schedule_statistics import ScheduleStatistics

__all__ = [
    'LogEvent',
    'ProgressReporter',
    'schedule_hash',
    'Scheduler',
    'ManualEditService',
    'EditOutcome',
    'ScheduleStatistics',
]
