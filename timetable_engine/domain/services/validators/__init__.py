"""検証サービス"""

from .constraint_validator import ConstraintValidator
from .input_quality_checker import InputQualityChecker, QualityWarning

__all__ = ['ConstraintValidator', 'InputQualityChecker', 'QualityWarning']
