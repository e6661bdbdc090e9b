"""バックトラッキングCSPソルバー（MRVヒューリスティック付き）

探索は明示的なスタックで行い、配置の取り消しはAssignmentTrailの
巻き戻しで行います。値の並べ替えに使う乱数のシードは探索ループの
ローカル変数として受け渡し、ソルバー自身は乱数の状態を持ちません。
"""
import time
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .assignment_trail import AssignmentTrail
from .seeded_random import normalize_seed, shuffled
from .variable_builder import CSPProblem, CSPVariable, VariableBuilder
from ..validators.constraint_validator import ConstraintValidator
from ...entities.school import School
from ...value_objects.assignment import TimetableEntry
from ...value_objects.time_slot import TimeSlot
from ....shared.mixins.logging_mixin import LoggingMixin

# 候補値: (開始時間枠, 担当教員)
Candidate = Tuple[TimeSlot, Tuple[str, ...]]

DEFAULT_BACKTRACK_LIMIT = 20000


@dataclass
class _Frame:
    """探索スタックの1段"""
    variable: CSPVariable
    candidates: List[Candidate]
    mark: int
    position: int = 0


@dataclass
class SolveStatistics:
    nodes: int = 0
    backtracks: int = 0
    dead_ends: int = 0
    max_depth: int = 0
    budget_exhausted: bool = False
    elapsed: float = 0.0

    def as_dict(self) -> Dict[str, object]:
        return {
            'nodes_explored': self.nodes,
            'backtracks': self.backtracks,
            'dead_ends': self.dead_ends,
            'max_depth': self.max_depth,
            'budget_exhausted': self.budget_exhausted,
            'elapsed': self.elapsed,
        }


class BacktrackingSolver(LoggingMixin):
    """時間割のCSPソルバー

    Args:
        school: 学校情報
        validator: 必須制約の判定に使う検証器
        seed: 値の並べ替えに使う乱数シード
        backtrack_limit: 試行する配置数の上限
    """

    def __init__(self,
                 school: School,
                 validator: ConstraintValidator,
                 seed: float = 0,
                 backtrack_limit: int = DEFAULT_BACKTRACK_LIMIT):
        super().__init__()
        self.school = school
        self.validator = validator
        self.seed = normalize_seed(seed)
        self.backtrack_limit = backtrack_limit
        self.stats = SolveStatistics()
        self.best_partial: List[TimetableEntry] = []

    def solve(self) -> List[TimetableEntry]:
        """時間割を探索する

        Returns:
            全変数を配置できた場合はエントリ一覧、失敗時は空リスト
        """
        start = time.time()
        self.stats = SolveStatistics()
        self.best_partial = []

        problem = VariableBuilder(self.school).build()
        result = self._search(problem)
        self.stats.elapsed = time.time() - start

        if result:
            self.logger.debug(
                f"解を発見！ 探索ノード数: {self.stats.nodes}, "
                f"バックトラック数: {self.stats.backtracks}"
            )
        else:
            self.logger.debug(
                f"解が見つかりませんでした（探索ノード数: {self.stats.nodes}, "
                f"最深配置: {len(self.best_partial)}件）"
            )
        return result

    def _search(self, problem: CSPProblem) -> List[TimetableEntry]:
        trail = AssignmentTrail()
        unassigned = set(range(len(problem.variables)))
        seed = self.seed

        if not unassigned:
            return []

        stack: List[_Frame] = []
        frame, seed = self._open_frame(problem, unassigned, trail, seed)
        stack.append(frame)

        while stack:
            frame = stack[-1]
            trail.undo_to(frame.mark)

            if frame.position >= len(frame.candidates):
                if not frame.candidates:
                    self.stats.dead_ends += 1
                stack.pop()
                unassigned.add(frame.variable.index)
                self.stats.backtracks += 1
                continue

            if self.stats.nodes >= self.backtrack_limit:
                self.stats.budget_exhausted = True
                self.logger.debug(f"探索上限({self.backtrack_limit})に達しました")
                return []

            candidate = frame.candidates[frame.position]
            frame.position += 1
            self.stats.nodes += 1

            placed = self._place(frame.variable, candidate, trail)
            if self.validator.has_critical_violations(trail.entries, placed, trail.slot_entries):
                continue

            if len(trail) > len(self.best_partial):
                self.best_partial = trail.snapshot()
            self.stats.max_depth = max(self.stats.max_depth, len(stack))

            if not unassigned:
                if not self.validator.has_critical_violations(trail.entries, slot_lookup=trail.slot_entries):
                    return trail.snapshot()
                continue

            next_frame, seed = self._open_frame(problem, unassigned, trail, seed)
            stack.append(next_frame)

        return []

    def _open_frame(self, problem: CSPProblem, unassigned: set,
                    trail: AssignmentTrail, seed: int) -> Tuple[_Frame, int]:
        variable, candidates = self._select_variable(problem, unassigned, trail)
        unassigned.discard(variable.index)
        ordered, seed = shuffled(candidates, seed)
        return _Frame(variable, ordered, trail.mark()), seed

    def _select_variable(self, problem: CSPProblem, unassigned: set,
                         trail: AssignmentTrail) -> Tuple[CSPVariable, List[Candidate]]:
        """MRV: 有効な値が最も少ない変数を選ぶ（同数なら優先度の小さいもの）"""
        best: Optional[CSPVariable] = None
        best_candidates: List[Candidate] = []
        cache: Dict[tuple, List[Candidate]] = {}

        for index in sorted(unassigned):
            variable = problem.variables[index]
            signature = (variable.group_key, variable.required_hours, variable.fixed_slot)
            if signature not in cache:
                cache[signature] = self._candidates(variable, problem.domain_for(variable), trail)
            candidates = cache[signature]

            if not candidates:
                return variable, []
            if (best is None
                    or len(candidates) < len(best_candidates)
                    or (len(candidates) == len(best_candidates) and variable.priority < best.priority)):
                best = variable
                best_candidates = candidates

        return best, best_candidates

    def _teacher_options(self, variable: CSPVariable, trail: AssignmentTrail) -> List[Tuple[str, ...]]:
        """担当教員の候補"""
        if variable.is_co_teaching:
            return [variable.teacher_ids]
        bound = trail.bound_teacher(variable.group_key)
        if bound:
            return [(bound,)]

        with_capacity = []
        for teacher_id in variable.teacher_ids:
            teacher = self.school.get_teacher(teacher_id)
            if teacher and trail.teacher_load(teacher_id) + variable.group_hours <= teacher.max_weekly_hours:
                with_capacity.append(teacher_id)
        return [(tid,) for tid in (with_capacity or variable.teacher_ids)]

    def _candidates(self, variable: CSPVariable, domain: List[TimeSlot],
                    trail: AssignmentTrail) -> List[Candidate]:
        candidates = []
        for teachers in self._teacher_options(variable, trail):
            for slot in domain:
                if all(
                    self._slot_is_valid(variable, teachers, slot.shifted(offset), trail)
                    for offset in range(variable.required_hours)
                ):
                    candidates.append((slot, teachers))
        return candidates

    def _slot_is_valid(self, variable: CSPVariable, teachers: Tuple[str, ...],
                       slot: TimeSlot, trail: AssignmentTrail) -> bool:
        """1コマ分の配置可否（固定時間・不在時間・重複・その日の最大校時）"""
        if variable.fixed_slot and slot != variable.fixed_slot:
            return False
        if slot.period > self.school.config.max_periods_for(slot.day, variable.grade):
            return False
        if trail.class_occupied(variable.class_id, slot.day, slot.period):
            return False

        for teacher_id in teachers:
            teacher = self.school.get_teacher(teacher_id)
            if teacher and teacher.is_unavailable(slot.day, slot.period):
                return False
            for other in trail.teacher_entries(teacher_id, slot.day, slot.period):
                if not self._joins(variable, teachers, other):
                    return False

        if variable.room_id:
            for other in trail.room_entries(variable.room_id, slot.day, slot.period):
                if not self._joins(variable, teachers, other):
                    return False
        return True

    @staticmethod
    def _joins(variable: CSPVariable, teachers: Tuple[str, ...], other: TimetableEntry) -> bool:
        """配置済みの共同授業に合同で参加できるか"""
        return (
            variable.is_co_teaching
            and len(teachers) > 1
            and other.is_co_teaching
            and other.subject_id == variable.subject_id
            and sorted(other.all_teacher_ids) == sorted(teachers)
        )

    def _place(self, variable: CSPVariable, candidate: Candidate,
               trail: AssignmentTrail) -> List[TimetableEntry]:
        start, teachers = candidate
        if variable.binds_teacher and trail.bound_teacher(variable.group_key) is None:
            trail.bind(variable.group_key, teachers[0])

        placed = []
        for h in range(variable.required_hours):
            entry = TimetableEntry(
                id=f"{variable.class_id}-{variable.subject_id}-{variable.index}-{h}",
                class_id=variable.class_id,
                subject_id=variable.subject_id,
                teacher_id=teachers[0],
                teacher_ids=teachers if len(teachers) > 1 else None,
                day=start.day,
                period=start.period + h,
                room_id=variable.room_id,
                is_block_class=variable.is_block_class,
                block_start_period=start.period if variable.is_block_class else None,
            )
            trail.push(entry)
            placed.append(entry)
        return placed
