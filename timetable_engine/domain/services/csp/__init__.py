"""CSP探索"""

from .seeded_random import next_random, shuffled, normalize_seed
from .variable_builder import CSPVariable, CSPProblem, VariableBuilder, calculate_priority
from .assignment_trail import AssignmentTrail
from .backtracking_solver import BacktrackingSolver, SolveStatistics, DEFAULT_BACKTRACK_LIMIT

__all__ = [
    'next_random',
    'shuffled',
    'normalize_seed',
    'CSPVariable',
    'CSPProblem',
    'VariableBuilder',
    'calculate_priority',
    'AssignmentTrail',
    'BacktrackingSolver',
    'SolveStatistics',
    'DEFAULT_BACKTRACK_LIMIT',
]
