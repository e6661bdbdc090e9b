"""シリアライザー"""

from .schedule_message_codec import ScheduleMessageCodec

__all__ = ['ScheduleMessageCodec']
