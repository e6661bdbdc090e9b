"""ロギング設定の統一管理

エンジン全体のロギング設定（ハンドラー・フォーマット・モジュール別レベル）を
一元管理します。エンジン自体はロガーに書き込むだけで、設定はホスト側（CLI等）が行います。
"""
import json
import logging
import logging.handlers
from pathlib import Path
from typing import Dict, Optional


class LoggingConfig:
    """ロギング設定クラス"""

    LEVELS = {
        'DEBUG': logging.DEBUG,
        'INFO': logging.INFO,
        'WARNING': logging.WARNING,
        'ERROR': logging.ERROR,
        'CRITICAL': logging.CRITICAL
    }

    # モジュール別のログレベル設定
    MODULE_LEVELS = {
        'timetable_engine.application': 'INFO',
        # 探索は1試行ごとのログが多いので警告以上
        'timetable_engine.domain.services.csp': 'WARNING',
        'timetable_engine.domain.services.optimizers': 'WARNING',
        'timetable_engine.domain.services.validators': 'INFO',
        'timetable_engine.infrastructure': 'INFO',
        'timetable_engine.presentation': 'INFO',
    }

    @classmethod
    def setup_logging(cls,
                      log_level: str = 'INFO',
                      log_file: Optional[Path] = None,
                      console_output: bool = True,
                      simple_format: bool = False,
                      module_levels: Optional[Dict[str, str]] = None) -> None:
        """ロギングを設定

        Args:
            log_level: デフォルトのログレベル
            log_file: ログファイルのパス（Noneの場合はファイル出力なし）
            console_output: コンソール出力を有効にするか
            simple_format: シンプルなフォーマットを使用するか
            module_levels: モジュール別レベルの上書き
        """
        root_logger = logging.getLogger()
        root_logger.setLevel(cls.LEVELS.get(log_level, logging.INFO))
        root_logger.handlers.clear()

        if simple_format:
            formatter = logging.Formatter('%(levelname)s: %(message)s')
        else:
            formatter = ContextFormatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )

        if console_output:
            console_handler = logging.StreamHandler()
            console_handler.setFormatter(formatter)
            root_logger.addHandler(console_handler)

        if log_file:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=10 * 1024 * 1024,  # 10MB
                backupCount=5,
                encoding='utf-8'
            )
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)

        levels = dict(cls.MODULE_LEVELS)
        if module_levels:
            levels.update(module_levels)
        for module_name, level_name in levels.items():
            logging.getLogger(module_name).setLevel(cls.LEVELS.get(level_name, logging.INFO))

    @classmethod
    def setup_production_logging(cls) -> None:
        """本番環境用のロギング設定"""
        cls.setup_logging(
            log_level='WARNING',
            log_file=Path('logs/timetable_engine.log'),
            console_output=True,
            simple_format=True
        )

    @classmethod
    def setup_development_logging(cls) -> None:
        """開発環境用のロギング設定（探索のログも出力）"""
        cls.setup_logging(
            log_level='DEBUG',
            log_file=Path('logs/debug.log'),
            console_output=True,
            simple_format=False,
            module_levels={
                'timetable_engine.domain.services.csp': 'DEBUG',
                'timetable_engine.domain.services.optimizers': 'DEBUG',
            }
        )

    @classmethod
    def setup_quiet_logging(cls) -> None:
        """静音モード（エラーのみ）"""
        cls.setup_logging(
            log_level='ERROR',
            log_file=None,
            console_output=True,
            simple_format=True,
            module_levels={name: 'ERROR' for name in cls.MODULE_LEVELS}
        )


class ContextFormatter(logging.Formatter):
    """コンテキスト情報を含むカスタムフォーマッター

    ログ呼び出しの extra={'context': {...}} を末尾に出力します。
    """

    def format(self, record):
        formatted = super().format(record)

        if hasattr(record, 'context') and record.context:
            context_str = json.dumps(record.context, ensure_ascii=False, default=str)
            formatted += f" | {context_str}"

        return formatted
