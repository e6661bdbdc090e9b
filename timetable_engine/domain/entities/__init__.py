"""エンティティ"""

from .schedule_config import ScheduleConfig, DailyScheduleConfig
from .class_info import ClassInfo
from .subject import Subject
from .teacher import Teacher
from .school import School
from .schedule_result import ScheduleResult, MultipleScheduleResult

__all__ = [
    'ScheduleConfig',
    'DailyScheduleConfig',
    'ClassInfo',
    'Subject',
    'Teacher',
    'School',
    'ScheduleResult',
    'MultipleScheduleResult',
]
