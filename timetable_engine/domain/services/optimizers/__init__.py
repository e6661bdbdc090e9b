"""最適化サービス"""

from .local_search_optimizer import LocalSearchOptimizer, OptimizationResult, DEFAULT_MAX_ITERATIONS

__all__ = ['LocalSearchOptimizer', 'OptimizationResult', 'DEFAULT_MAX_ITERATIONS']
