"""制約緩和"""

from .constraint_relaxer import ConstraintRelaxer

__all__ = ['ConstraintRelaxer']
