"""CLIメインインターフェース"""
import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from ...application.services.manual_edit_service import EditOutcome, ManualEditService
from ...application.services.progress_reporter import LogEvent
from ...application.services.schedule_statistics import ScheduleStatistics
from ...application.worker.messages import MODE_MULTIPLE, MultiResultEvent, ScheduleRequest
from ...application.worker.schedule_task import ScheduleWorker
from ...domain.entities.schedule_result import ScheduleResult
from ...domain.services.validators.constraint_validator import ConstraintValidator
from ...infrastructure.config.logging_config import LoggingConfig
from ...infrastructure.config.scheduler_config_loader import DEFAULT_CONFIG_PATH, SchedulerConfigLoader
from ...infrastructure.serializers.schedule_message_codec import ScheduleMessageCodec
from ...shared.mixins.logging_mixin import LoggingMixin
from ...shared.mixins.validation_mixin import ValidationError


class TimetableCLI(LoggingMixin):
    """時間割エンジンのCLIインターフェース"""

    def __init__(self):
        super().__init__()
        self.codec = ScheduleMessageCodec()
        LoggingConfig.setup_production_logging()

    def run(self, args=None) -> int:
        """CLIメイン実行"""
        parser = self.create_parser()
        parsed_args = parser.parse_args(args)

        if parsed_args.verbose:
            LoggingConfig.setup_development_logging()
        elif parsed_args.quiet:
            LoggingConfig.setup_quiet_logging()

        handlers = {
            "generate": self.handle_generate_command,
            "validate": self.handle_validate_command,
            "move": self.handle_move_command,
            "swap": self.handle_swap_command,
        }
        handler = handlers.get(parsed_args.command)
        if handler is None:
            parser.print_help()
            return 1

        try:
            return handler(parsed_args)
        except (OSError, ValidationError) as e:
            self.log_error(f"実行エラー: {e}")
            return 1

    def create_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            description="学校時間割生成エンジン",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
使用例:
  %(prog)s generate input.json                       # 最良の1件を生成
  %(prog)s generate input.json --multiple --min-count 5
  %(prog)s generate input.json --seed 42 --output result.json
  %(prog)s validate input.json result.json           # 結果を再検証
  %(prog)s move input.json result.json 1-1-math-0-0 火 3
  %(prog)s swap input.json result.json ENTRY_A ENTRY_B
            """
        )
        parser.add_argument("--verbose", "-v", action="store_true", help="詳細なログを出力")
        parser.add_argument("--quiet", "-q", action="store_true", help="警告以上のログのみ出力")
        parser.add_argument(
            "--config",
            type=Path,
            default=DEFAULT_CONFIG_PATH,
            help=f"スケジューラー設定ファイル (デフォルト: {DEFAULT_CONFIG_PATH})"
        )

        subparsers = parser.add_subparsers(dest="command", help="利用可能なコマンド")

        generate_parser = subparsers.add_parser("generate", help="時間割を生成")
        generate_parser.add_argument("input", type=Path, help="入力メッセージ（JSON）")
        generate_parser.add_argument("--multiple", action="store_true", help="複数候補を生成")
        generate_parser.add_argument("--min-count", type=int, help="目標候補数")
        generate_parser.add_argument("--max-attempts", type=int, help="最大試行回数")
        generate_parser.add_argument("--retries", type=int, help="単一生成の再試行回数")
        generate_parser.add_argument("--seed", type=int, help="乱数シード")
        generate_parser.add_argument("--output", type=Path, help="結果の出力先（省略時は標準出力）")

        validate_parser = subparsers.add_parser("validate", help="時間割を検証")
        validate_parser.add_argument("input", type=Path, help="入力メッセージ（JSON）")
        validate_parser.add_argument("result", type=Path, help="検証する結果（JSON）")

        move_parser = subparsers.add_parser("move", help="コマを移動")
        move_parser.add_argument("input", type=Path)
        move_parser.add_argument("result", type=Path)
        move_parser.add_argument("entry_id")
        move_parser.add_argument("day")
        move_parser.add_argument("period", type=int)
        move_parser.add_argument("--output", type=Path)

        swap_parser = subparsers.add_parser("swap", help="2つのコマを交換")
        swap_parser.add_argument("input", type=Path)
        swap_parser.add_argument("result", type=Path)
        swap_parser.add_argument("first_id")
        swap_parser.add_argument("second_id")
        swap_parser.add_argument("--output", type=Path)

        return parser

    def handle_generate_command(self, args) -> int:
        request = self._load_request(args)
        settings = SchedulerConfigLoader(args.config).load()

        worker = ScheduleWorker(settings)
        terminal = None
        try:
            worker.start(request)
            for event in worker.iter_events():
                if isinstance(event, LogEvent):
                    continue
                terminal = event
        except KeyboardInterrupt:
            self.log_warning("キャンセルを要求しました")
            worker.cancel()
            terminal = worker.result()
        finally:
            worker.shutdown()

        self._write_json(self.codec.encode_event(terminal)["value"], args.output)

        if isinstance(terminal, MultiResultEvent):
            multi = terminal.value
            self.log_info(f"候補数: {len(multi.results)}（試行{multi.generation_attempts}回）")
            for suggestion in multi.relaxation_suggestions:
                self.log_info(f"緩和提案[{suggestion.level.value}]: {suggestion.suggestion}")
            best = multi.best
        else:
            best = terminal.value

        if best is None or best.is_empty:
            self.log_error("時間割を生成できませんでした")
            return 1
        self.print_summary(best, request)
        return 0

    def handle_validate_command(self, args) -> int:
        request = self._load_request(args)
        result = self._load_result(args.result)
        validator = ConstraintValidator(request.config, request.subjects, request.teachers, request.classes)

        print(validator.get_violation_summary(result.entries))
        score = validator.calculate_score(result.entries)
        print(f"ソフト制約スコア: {score:.2f}")
        return 1 if validator.has_critical_violations(result.entries) else 0

    def handle_move_command(self, args) -> int:
        request = self._load_request(args)
        result = self._load_result(args.result)
        outcome = ManualEditService(request.config).move_entry(result, args.entry_id, args.day, args.period)
        return self._finish_edit(outcome, args.output)

    def handle_swap_command(self, args) -> int:
        request = self._load_request(args)
        result = self._load_result(args.result)
        outcome = ManualEditService(request.config).swap_entries(result, args.first_id, args.second_id)
        return self._finish_edit(outcome, args.output)

    def print_summary(self, result: ScheduleResult, request: ScheduleRequest) -> None:
        statistics = ScheduleStatistics(result, request.config)
        summary = statistics.summary()
        print("=" * 50)
        print(f"コマ数: {summary['entries']}")
        print(f"スコア: {summary['score']:.2f}")
        print(f"充足率: {summary['fill_rate'] * 100:.1f}%")
        print(f"教員持ち時数の分散: {summary['teacher_load_variance']}")
        for level, count in summary['violations'].items():
            print(f"  {level}: {count}件")
        overloaded = statistics.overloaded_teachers()
        if overloaded:
            print(f"上限超過の教員: {', '.join(overloaded)}")
        print("=" * 50)

    def _load_request(self, args) -> ScheduleRequest:
        request = self.codec.decode_request(self._read_json(args.input))
        if getattr(args, "multiple", False):
            request.mode = MODE_MULTIPLE
        for name in ("min_count", "max_attempts", "seed"):
            value = getattr(args, name, None)
            if value is not None:
                setattr(request, name, value)
        if getattr(args, "retries", None) is not None:
            request.max_retries = args.retries
        return request

    def _load_result(self, path: Path) -> ScheduleResult:
        data = self._read_json(path)
        if "results" in data:
            results = data["results"]
            if not results:
                raise ValidationError(f"{path}に候補がありません")
            data = results[data.get("selectedIndex") or 0]
        return self.codec.decode_result(data)

    def _finish_edit(self, outcome: EditOutcome, output: Optional[Path]) -> int:
        if not outcome.applied:
            self.log_error(outcome.message)
            return 1
        for violation in outcome.new_critical_violations:
            self.log_warning(f"新たな必須制約違反: {violation.message}")
        self._write_json(self.codec.encode_result(outcome.result), output)
        return 0

    @staticmethod
    def _read_json(path: Path) -> Dict[str, Any]:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"{path}をJSONとして読み込めません: {e}") from e

    @staticmethod
    def _write_json(data: Dict[str, Any], output: Optional[Path]) -> None:
        text = json.dumps(data, ensure_ascii=False, indent=2)
        if output is None:
            print(text)
            return
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text, encoding='utf-8')


def main(args=None) -> int:
    """CLIエントリーポイント"""
    cli = TimetableCLI()
    return cli.run(args)


if __name__ == "__main__":
    sys.exit(main())
