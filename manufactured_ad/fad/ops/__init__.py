# fad/ops/__init__.py

# Ensure operator overloading is registered
from . import arithmetic
from . import transcendental
from . import ufuncs

# Convenience re-exports so users can do: from fad.ops import sin, exp, ...
from .arithmetic import add, sub, mul, div, neg, pow
from .transcendental import (
    sin, cos, tan, asin, acos, atan, atan2,
    sinh, cosh, tanh,
    exp, log, log10, sqrt, cbrt, hypot,
    floor, ceil, fmin, fmax, absolute, erf,
)

__all__ = [
    "add", "sub", "mul", "div", "neg", "pow",
    "sin", "cos", "tan", "asin", "acos", "atan", "atan2",
    "sinh", "cosh", "tanh",
    "exp", "log", "log10", "sqrt", "cbrt", "hypot",
    "floor", "ceil", "fmin", "fmax", "absolute", "erf",
]
