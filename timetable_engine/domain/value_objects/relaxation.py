"""制約緩和に関する値オブジェクト"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .assignment import ConstraintLevel

# 緩和アクションの種類
REMOVE_CONSTRAINT = "remove_constraint"
MODIFY_SUBJECT = "modify_subject"
MODIFY_TEACHER = "modify_teacher"
REDUCE_HOURS = "reduce_hours"


@dataclass(frozen=True)
class RelaxationAction:
    """緩和アクション"""
    type: str
    target: str  # 対象ID（制約キー・教科ID・教員ID）
    details: Dict[str, Any] = field(default_factory=dict, hash=False)


@dataclass(frozen=True)
class RelaxationSuggestion:
    """緩和提案"""
    level: ConstraintLevel
    message: str
    suggestion: str
    affected_constraints: List[str] = field(default_factory=list, hash=False)
    action: Optional[RelaxationAction] = None

    @property
    def is_actionable(self) -> bool:
        return self.action is not None


@dataclass
class RelaxationConfig:
    """どの重要度までの自動緩和を許可するか"""
    allow_low_relaxation: bool = True
    allow_medium_relaxation: bool = True
    allow_high_relaxation: bool = False
    allow_critical_relaxation: bool = False

    def allows(self, level: ConstraintLevel) -> bool:
        return {
            ConstraintLevel.LOW: self.allow_low_relaxation,
            ConstraintLevel.MEDIUM: self.allow_medium_relaxation,
            ConstraintLevel.HIGH: self.allow_high_relaxation,
            ConstraintLevel.CRITICAL: self.allow_critical_relaxation,
        }[level]


@dataclass
class RelaxationResult:
    """緩和の適用結果"""
    success: bool
    relaxed_constraints: List[str] = field(default_factory=list)
    suggestions: List[RelaxationSuggestion] = field(default_factory=list)
    modified_subjects: list = field(default_factory=list)
    modified_teachers: list = field(default_factory=list)
