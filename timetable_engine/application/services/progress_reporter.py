"""生成の進捗ログ"""
import logging
from dataclasses import dataclass
from typing import Callable, ClassVar, List, Optional

INFO = "info"
SUCCESS = "success"
WARNING = "warning"
ERROR = "error"

SEVERITIES = (INFO, SUCCESS, WARNING, ERROR)

_LOG_LEVELS = {
    INFO: logging.INFO,
    SUCCESS: logging.INFO,
    WARNING: logging.WARNING,
    ERROR: logging.ERROR,
}


@dataclass(frozen=True)
class LogEvent:
    """ホストへ送る進捗イベント"""
    kind: ClassVar[str] = "log"

    message: str
    severity: str = INFO

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message, "severity": self.severity}


class ProgressReporter:
    """進捗イベントをコールバックへ送り、同じ内容をロガーにも出力する"""

    def __init__(self,
                 callback: Optional[Callable[[LogEvent], None]] = None,
                 logger: Optional[logging.Logger] = None):
        self.callback = callback
        self.logger = logger or logging.getLogger(__name__)
        self.events: List[LogEvent] = []

    def emit(self, message: str, severity: str = INFO, **context) -> LogEvent:
        event = LogEvent(message, severity)
        self.events.append(event)
        self.logger.log(_LOG_LEVELS[severity], message, extra={'context': context} if context else None)
        if self.callback:
            self.callback(event)
        return event

    def info(self, message: str, **context) -> LogEvent:
        return self.emit(message, INFO, **context)

    def success(self, message: str, **context) -> LogEvent:
        return self.emit(message, SUCCESS, **context)

    def warning(self, message: str, **context) -> LogEvent:
        return self.emit(message, WARNING, **context)

    def error(self, message: str, **context) -> LogEvent:
        return self.emit(message, ERROR, **context)
