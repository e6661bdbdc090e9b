"""共有ミックスイン"""

from .logging_mixin import LoggingMixin
from .validation_mixin import ValidationMixin, ValidationError

__all__ = [
    'LoggingMixin',
    'ValidationMixin',
    'ValidationError'
]
