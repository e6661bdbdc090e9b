"""ロギング機能を提供するミックスイン

エンジン内の各サービス（探索・最適化・スケジューラー・ワーカー・CLI）が
`module.ClassName` という名前のロガーを共有するための共通ミックスインです。
"""
import logging
from typing import Any, Dict, Optional


class LoggingMixin:
    """ロギング機能を提供するミックスイン

    使用例:
        class ScheduleTask(LoggingMixin):
            def run(self):
                self.log_operation_start("時間割生成タスク", {'mode': 'single'})
                ...
                self.log_operation_end("時間割生成タスク", success)
    """

    @property
    def logger(self) -> logging.Logger:
        """モジュール名とクラス名から作ったロガー"""
        if not hasattr(self, '_logger'):
            self._logger = logging.getLogger(
                f"{self.__class__.__module__}.{self.__class__.__name__}"
            )
        return self._logger

    def log_info(self, message: str, *args, **kwargs) -> None:
        self.logger.info(message, *args, **kwargs)

    def log_warning(self, message: str, *args, **kwargs) -> None:
        self.logger.warning(message, *args, **kwargs)

    def log_error(self, message: str, *args, **kwargs) -> None:
        self.logger.error(message, *args, **kwargs)

    def log_operation_start(self, operation: str, details: Optional[Dict[str, Any]] = None) -> None:
        message = f"{operation}を開始"
        if details:
            message += f" - {details}"
        self.log_info(message)

    def log_operation_end(self, operation: str, success: bool = True) -> None:
        """操作終了のログを出力

        生成の失敗は例外ではなく結果として返すため、失敗も警告にとどめます。
        """
        if success:
            self.log_info(f"{operation}が成功")
        else:
            self.log_warning(f"{operation}が失敗")

    def log_performance(self, operation: str, elapsed_time: float,
                        attempts: Optional[int] = None) -> None:
        """処理時間と試行回数をログ出力

        Args:
            operation: 操作名
            elapsed_time: 経過時間（秒）
            attempts: 試行回数
        """
        message = f"{operation} - 処理時間: {elapsed_time:.3f}秒"
        if attempts is not None:
            per_attempt = elapsed_time / attempts if attempts > 0 else 0.0
            message += f" (試行{attempts}回, 1回あたり{per_attempt:.3f}秒)"
        self.log_info(message)
