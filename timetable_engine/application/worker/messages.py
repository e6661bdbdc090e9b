"""ワーカーとホストの間でやり取りするメッセージ"""
from dataclasses import dataclass, field
from typing import ClassVar, List, Optional, Union

from ..services.progress_reporter import LogEvent
from ...domain.entities.class_info import ClassInfo
from ...domain.entities.schedule_config import ScheduleConfig
from ...domain.entities.schedule_result import MultipleScheduleResult, ScheduleResult
from ...domain.entities.subject import Subject
from ...domain.entities.teacher import Teacher

MODE_SINGLE = "single"
MODE_MULTIPLE = "multiple"
MODES = (MODE_SINGLE, MODE_MULTIPLE)


@dataclass
class ScheduleRequest:
    """生成リクエスト（入力のスナップショット）

    modeがsingleの場合は再試行して最良の1件を、
    multipleの場合は複数候補を生成します。
    """
    config: ScheduleConfig
    subjects: List[Subject] = field(default_factory=list)
    teachers: List[Teacher] = field(default_factory=list)
    classes: List[ClassInfo] = field(default_factory=list)
    mode: str = MODE_SINGLE
    min_count: Optional[int] = None
    max_attempts: Optional[int] = None
    max_retries: Optional[int] = None
    seed: Optional[int] = None


@dataclass(frozen=True)
class ResultEvent:
    """単一結果の終了イベント"""
    kind: ClassVar[str] = "result"

    value: ScheduleResult


@dataclass(frozen=True)
class MultiResultEvent:
    """複数候補の終了イベント"""
    kind: ClassVar[str] = "multi-result"

    value: MultipleScheduleResult


TerminalEvent = Union[ResultEvent, MultiResultEvent]
WorkerEvent = Union[LogEvent, ResultEvent, MultiResultEvent]


def is_terminal(event: WorkerEvent) -> bool:
    return isinstance(event, (ResultEvent, MultiResultEvent))
