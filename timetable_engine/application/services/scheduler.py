"""時間割生成のオーケストレーター

1回の生成（探索 → 最適化 → 検証）、最良候補を選ぶ再試行、
重複を除いた複数候補の生成（失敗が続いた場合の制約緩和を含む）を管理します。
各試行は独立しており、試行間で状態を共有しません。
"""
import math
import random
import time
from typing import Callable, List, Optional, Sequence

from .progress_reporter import LogEvent, ProgressReporter
from .schedule_hash import schedule_hash
from ...domain.entities.class_info import ClassInfo
from ...domain.entities.schedule_config import ScheduleConfig
from ...domain.entities.schedule_result import MultipleScheduleResult, ScheduleResult
from ...domain.entities.school import School
from ...domain.entities.subject import Subject
from ...domain.entities.teacher import Teacher
from ...domain.services.csp.backtracking_solver import BacktrackingSolver
from ...domain.services.optimizers.local_search_optimizer import LocalSearchOptimizer
from ...domain.services.relaxation.constraint_relaxer import ConstraintRelaxer
from ...domain.services.validators.constraint_validator import ConstraintValidator
from ...domain.services.validators.input_quality_checker import InputQualityChecker
from ...domain.value_objects.assignment import ConstraintViolation
from ...domain.value_objects.relaxation import RelaxationSuggestion
from ...infrastructure.config.scheduler_config_loader import SchedulerConfig
from ...shared.mixins.logging_mixin import LoggingMixin

SEED_RANGE = 1000000


class Scheduler(LoggingMixin):
    """時間割スケジューラー

    Args:
        config: 時間割の基本設定
        subjects: 教科一覧
        teachers: 教員一覧
        classes: 学級一覧
        settings: スケジューラー設定（探索上限・緩和設定など）
        seed: 試行ごとのシードを作る乱数の初期値（Noneなら毎回異なる）
        on_log: 進捗イベントを受け取るコールバック
        should_cancel: 試行の合間に確認するキャンセル判定
    """

    def __init__(self,
                 config: ScheduleConfig,
                 subjects: Sequence[Subject],
                 teachers: Sequence[Teacher],
                 classes: Sequence[ClassInfo],
                 settings: Optional[SchedulerConfig] = None,
                 seed: Optional[int] = None,
                 on_log: Optional[Callable[[LogEvent], None]] = None,
                 should_cancel: Optional[Callable[[], bool]] = None):
        super().__init__()
        self.config = config
        self.subjects = list(subjects)
        self.teachers = list(teachers)
        self.classes = list(classes)
        self.settings = settings or SchedulerConfig()
        self.reporter = ProgressReporter(on_log, self.logger)
        self.should_cancel = should_cancel or (lambda: False)
        self._rng = random.Random(seed)

    # ------------------------------------------------------------------
    # 1回の生成
    # ------------------------------------------------------------------
    def generate(self, seed: Optional[int] = None) -> ScheduleResult:
        """1回の生成（探索 → 最適化 → 検証）

        解が見つからない場合はエントリが空でスコアが無限大の結果を返します。
        """
        self._report_input_quality()
        return self._attempt(self._next_seed() if seed is None else seed)

    def _attempt(self, seed: int,
                 subjects: Optional[List[Subject]] = None,
                 teachers: Optional[List[Teacher]] = None,
                 relaxed_constraints: Sequence[str] = ()) -> ScheduleResult:
        subjects = self.subjects if subjects is None else subjects
        teachers = self.teachers if teachers is None else teachers

        school = School(self.config, subjects, teachers, self.classes)
        validator = ConstraintValidator(
            self.config, subjects, teachers, self.classes,
            relaxed_constraints=relaxed_constraints,
            soft_weights=self.settings.soft_weights,
        )

        solver = BacktrackingSolver(school, validator, seed, self.settings.backtrack_limit)
        entries = solver.solve()
        if not entries:
            self.logger.debug(f"シード{seed}: 解なし {solver.stats.as_dict()}")
            return self._failed_result(validator.validate_all(solver.best_partial), subjects, teachers)

        optimizer = LocalSearchOptimizer(school, validator, self.settings.optimizer_max_iterations)
        entries, optimization = optimizer.optimize(entries)
        self.logger.debug(f"シード{seed}: {optimization!r}")

        return ScheduleResult(
            entries=entries,
            classes=list(self.classes),
            subjects=list(subjects),
            teachers=list(teachers),
            violations=validator.validate_all(entries),
            score=validator.calculate_score(entries),
            days=list(self.config.days),
        )

    def _failed_result(self, violations: List[ConstraintViolation],
                       subjects: Optional[List[Subject]] = None,
                       teachers: Optional[List[Teacher]] = None) -> ScheduleResult:
        return ScheduleResult(
            entries=[],
            classes=list(self.classes),
            subjects=list(self.subjects if subjects is None else subjects),
            teachers=list(self.teachers if teachers is None else teachers),
            violations=violations,
            score=math.inf,
            days=list(self.config.days),
        )

    # ------------------------------------------------------------------
    # 再試行して最良を選ぶ
    # ------------------------------------------------------------------
    def generate_with_retry(self, max_retries: Optional[int] = None) -> ScheduleResult:
        """独立した試行を繰り返し、必須制約違反のない最良の結果を返す"""
        max_retries = max_retries if max_retries is not None else self.settings.default_retries
        start = time.time()
        self._report_input_quality()
        self.reporter.info(f"時間割を生成します（最大{max_retries}回試行）")

        best: Optional[ScheduleResult] = None
        for attempt in range(1, max_retries + 1):
            if self.should_cancel():
                self.reporter.warning("生成がキャンセルされました")
                break

            result = self._attempt(self._next_seed())
            if result.entries and not result.critical_violations:
                self.reporter.info(f"試行{attempt}: スコア {result.score:.2f}", attempt=attempt)
                if best is None or result.score < best.score:
                    best = result
            else:
                self.reporter.warning(f"試行{attempt}: 解が見つかりませんでした", attempt=attempt)

        if best is not None:
            self.reporter.success(f"時間割を生成しました（スコア {best.score:.2f}）")
            self.log_performance("時間割生成", time.time() - start, max_retries)
            return best

        if self.should_cancel():
            return self._failed_result([])

        self.reporter.warning("すべての試行に失敗しました。通常の生成を実行します")
        result = self._attempt(self._next_seed())
        if not result.entries:
            self.reporter.error("時間割を生成できませんでした。条件を見直してください")
        return result

    # ------------------------------------------------------------------
    # 複数候補の生成
    # ------------------------------------------------------------------
    def generate_multiple(self,
                          min_count: Optional[int] = None,
                          max_attempts: Optional[int] = None) -> MultipleScheduleResult:
        """重複のない複数の候補を生成する

        失敗が一定回数続くたびに、直近の失敗の違反から緩和案を作って適用します。
        緩和はこの呼び出しの以降の試行に引き継がれ、次の呼び出しには持ち越しません。
        """
        min_count = min_count if min_count is not None else self.settings.min_count
        max_attempts = max_attempts if max_attempts is not None else self.settings.max_attempts
        start = time.time()
        self._report_input_quality()
        self.reporter.info(f"候補を{min_count}件生成します（最大{max_attempts}回試行）")

        subjects = list(self.subjects)
        teachers = list(self.teachers)
        relaxer = ConstraintRelaxer(subjects, teachers, self.settings.relaxation)
        relaxed_constraints: List[str] = []

        results: List[ScheduleResult] = []
        seen_hashes = set()
        suggestions: List[RelaxationSuggestion] = []
        attempts = 0
        failures = 0
        relaxation_rounds = 0

        while len(results) < min_count and attempts < max_attempts:
            if self.should_cancel():
                self.reporter.warning("生成がキャンセルされました")
                break
            attempts += 1

            result = self._attempt(self._next_seed(), subjects, teachers, relaxed_constraints)
            if result.entries and not result.critical_violations:
                digest = schedule_hash(result.entries)
                if digest in seen_hashes:
                    self.reporter.info(f"試行{attempts}: 既存の候補と同じ時間割のため除外しました")
                    continue
                seen_hashes.add(digest)
                results.append(result)
                self.reporter.success(
                    f"候補{len(results)}を生成しました（スコア {result.score:.2f}）", attempt=attempts
                )
                continue

            failures += 1
            self.reporter.warning(f"試行{attempts}: 解が見つかりませんでした", attempt=attempts)

            if (failures % self.settings.relaxation_trigger == 0
                    and relaxation_rounds < self.settings.max_relaxation_rounds):
                suggestions = relaxer.generate_suggestions(result.violations)
                actionable = next((s for s in suggestions if s.is_actionable), None)
                if actionable is None:
                    self.reporter.warning("自動で緩和できる制約がありません")
                    continue

                relaxation = relaxer.apply_relaxation(actionable)
                if relaxation.success:
                    relaxation_rounds += 1
                    for key in relaxation.relaxed_constraints:
                        if key not in relaxed_constraints:
                            relaxed_constraints.append(key)
                    subjects = relaxer.get_relaxed_subjects()
                    teachers = relaxer.get_relaxed_teachers()
                    self.reporter.warning(
                        f"制約を緩和しました（{relaxation_rounds}回目）: {actionable.message}"
                    )

        results.sort(key=lambda r: r.score)
        can_relax = (relaxation_rounds < self.settings.max_relaxation_rounds
                     and len(results) < min_count)

        if results:
            self.reporter.success(f"{len(results)}件の候補を生成しました（試行{attempts}回）")
        else:
            self.reporter.error("候補を生成できませんでした。条件を見直してください")
        self.log_performance("複数候補生成", time.time() - start, attempts)

        return MultipleScheduleResult(
            results=results,
            generation_attempts=attempts,
            relaxation_attempts=relaxation_rounds,
            can_relax=can_relax,
            relaxation_suggestions=suggestions,
            relaxed_constraints=relaxed_constraints,
        )

    def _next_seed(self) -> int:
        return self._rng.randrange(1, SEED_RANGE)

    def _report_input_quality(self) -> None:
        school = School(self.config, self.subjects, self.teachers, self.classes)
        for warning in InputQualityChecker().check(school):
            self.reporter.warning(warning.message)
