# manufactured_ad/__init__.py
# Exact forcing terms for manufactured solutions via forward-mode AD

from . import fad
from .fad import (
    DualNumber,
    NumberArray,
    raw_value,
    independent_variables,
    gradient,
    divergence,
    laplacian,
    identity,
    outer_product,
)
from .forcing import ForcingConfig, ForcingEvaluator, evaluate_forcing

__version__ = "0.1.0"

__all__ = [
    'fad',
    'DualNumber',
    'NumberArray',
    'raw_value',
    'independent_variables',
    'gradient',
    'divergence',
    'laplacian',
    'identity',
    'outer_product',
    'ForcingConfig',
    'ForcingEvaluator',
    'evaluate_forcing',
]
