"""
Manufactured-forcing evaluation on top of the forward-mode algebra.
"""

from .evaluator import ForcingConfig, ForcingEvaluator, evaluate_forcing

__all__ = ['ForcingConfig', 'ForcingEvaluator', 'evaluate_forcing']
