"""時間割生成タスクとバックグラウンドワーカー

ホストとの境界はメッセージのやり取りだけです。
リクエストを受け取り、進捗イベントをキューへ流し、最後に結果イベントを1件送ります。
キャンセルは試行の合間にだけ確認されます。
"""
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from queue import Empty, Queue
from typing import Callable, Iterator, List, Optional

from .messages import (
    MODE_MULTIPLE,
    MultiResultEvent,
    ResultEvent,
    ScheduleRequest,
    TerminalEvent,
    WorkerEvent,
    is_terminal,
)
from ..services.progress_reporter import LogEvent
from ..services.scheduler import Scheduler
from ...infrastructure.config.scheduler_config_loader import SchedulerConfig
from ...shared.mixins.logging_mixin import LoggingMixin


class ScheduleTask(LoggingMixin):
    """1回の生成リクエストを最後まで実行するタスク"""

    def __init__(self,
                 request: ScheduleRequest,
                 settings: Optional[SchedulerConfig] = None,
                 emit: Optional[Callable[[WorkerEvent], None]] = None,
                 should_cancel: Optional[Callable[[], bool]] = None):
        super().__init__()
        self.request = request
        self.settings = settings or SchedulerConfig()
        self.emit = emit or (lambda event: None)
        self.should_cancel = should_cancel

    def run(self) -> TerminalEvent:
        request = self.request
        scheduler = Scheduler(
            request.config,
            request.subjects,
            request.teachers,
            request.classes,
            settings=self.settings,
            seed=request.seed,
            on_log=self.emit,
            should_cancel=self.should_cancel,
        )

        self.log_operation_start("時間割生成タスク", {'mode': request.mode})
        if request.mode == MODE_MULTIPLE:
            multi = scheduler.generate_multiple(request.min_count, request.max_attempts)
            event: TerminalEvent = MultiResultEvent(multi)
            success = bool(multi.results)
        else:
            result = scheduler.generate_with_retry(request.max_retries)
            event = ResultEvent(result)
            success = bool(result.entries)
        self.log_operation_end("時間割生成タスク", success)

        self.emit(event)
        return event


class ScheduleWorker(LoggingMixin):
    """タスクをバックグラウンドスレッドで実行するワーカー

    使用例:
        worker = ScheduleWorker()
        worker.start(request)
        for event in worker.iter_events():
            ...
    """

    def __init__(self, settings: Optional[SchedulerConfig] = None):
        super().__init__()
        self.settings = settings or SchedulerConfig()
        self.events: "Queue[WorkerEvent]" = Queue()
        self._cancel = threading.Event()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="schedule-worker")
        self._future: Optional[Future] = None

    def start(self, request: ScheduleRequest) -> Future:
        if self.is_running:
            raise RuntimeError("ワーカーは既に実行中です")
        self._cancel.clear()
        task = ScheduleTask(
            request,
            settings=self.settings,
            emit=self.events.put,
            should_cancel=self._cancel.is_set,
        )
        self._future = self._executor.submit(task.run)
        return self._future

    def cancel(self) -> None:
        """キャンセルを要求（実行中の試行が終わった時点で止まる）"""
        self._cancel.set()

    @property
    def is_running(self) -> bool:
        return self._future is not None and not self._future.done()

    def iter_events(self, poll_interval: float = 0.1) -> Iterator[WorkerEvent]:
        """終了イベントまでのイベントを順に返す

        タスクが例外で終了した場合はその例外を送出します。
        """
        if self._future is None:
            return
        while True:
            try:
                event = self.events.get(timeout=poll_interval)
            except Empty:
                if self._future.done() and self.events.empty():
                    self._future.result()
                    return
                continue
            yield event
            if is_terminal(event):
                return

    def result(self, timeout: Optional[float] = None) -> TerminalEvent:
        """終了イベントを待って返す"""
        if self._future is None:
            raise RuntimeError("ワーカーが開始されていません")
        return self._future.result(timeout)

    def run(self, request: ScheduleRequest) -> List[WorkerEvent]:
        """リクエストを実行し、発生したすべてのイベントを返す"""
        self.start(request)
        return list(self.iter_events())

    def shutdown(self) -> None:
        self.cancel()
        self._executor.shutdown(wait=True)


def log_events(events: List[WorkerEvent]) -> List[LogEvent]:
    return [event for event in events if isinstance(event, LogEvent)]
