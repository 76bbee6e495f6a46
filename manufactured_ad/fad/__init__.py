# fad/__init__.py
# Forward-mode automatic differentiation: dual numbers over fixed-size arrays

from .core.dual import DualNumber
from .core.array import NumberArray
from .core.promote import promote, zero_like, raw_value, nesting_order, truncate
from .core.seeds import value, independent_variables, grad, grad_hessian, hessian
from .core.config import AlgebraConfig, use_config

# Registers the DualNumber operators
from . import ops
from .ops import (
    pow, sin, cos, tan, asin, acos, atan, atan2,
    sinh, cosh, tanh,
    exp, log, log10, sqrt, cbrt, hypot,
    floor, ceil, fmin, fmax, absolute, erf,
)

from .operators import (
    gradient, divergence, laplacian,
    identity, outer_product, dot, transpose, trace,
)

__all__ = [
    # Core
    'DualNumber',
    'NumberArray',
    'promote',
    'zero_like',
    'raw_value',
    'nesting_order',
    'truncate',
    # Seeding
    'value',
    'independent_variables',
    'grad',
    'grad_hessian',
    'hessian',
    # Config
    'AlgebraConfig',
    'use_config',
    # Math
    'ops',
    'pow', 'sin', 'cos', 'tan', 'asin', 'acos', 'atan', 'atan2',
    'sinh', 'cosh', 'tanh',
    'exp', 'log', 'log10', 'sqrt', 'cbrt', 'hypot',
    'floor', 'ceil', 'fmin', 'fmax', 'absolute', 'erf',
    # Operators
    'gradient',
    'divergence',
    'laplacian',
    'identity',
    'outer_product',
    'dot',
    'transpose',
    'trace',
]
