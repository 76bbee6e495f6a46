# fad/core/__init__.py

"""
Core public API for the forward-mode algebra.

Exports:
    DualNumber            : value + derivatives; nests for higher orders.
    NumberArray           : fixed-size vector/tensor storage; nests for higher ranks.
    promote / raw_value   : implicit widening and the one explicit narrowing.
    independent_variables : unit-seeded DualNumbers for a point.
    AlgebraConfig         : policy knobs, swapped with use_config().
"""

from .dual import DualNumber
from .array import NumberArray
from .promote import promote, zero_like, raw_value, nesting_order, truncate
from .seeds import value, independent_variables, grad, grad_hessian, hessian
from .config import AlgebraConfig, use_config

__all__ = [
    "DualNumber", "NumberArray",
    "promote", "zero_like", "raw_value", "nesting_order", "truncate",
    "value", "independent_variables", "grad", "grad_hessian", "hessian",
    "AlgebraConfig", "use_config",
]
