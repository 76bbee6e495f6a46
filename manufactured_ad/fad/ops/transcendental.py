# fad/ops/transcendental.py
#
# Every function here accepts a plain real scalar (numpy result), a DualNumber
# (chain rule f'(v) * v') or a NumberArray (entrywise). The derivative factor is
# itself built from these functions, so nested duals differentiate again.
import numpy as np
from scipy.special import erf as _scipy_erf

from ..core.dual import DualNumber
from ..core.array import NumberArray
from ..core.promote import promote, align, raw_value
from ..core.config import errstate
from .arithmetic import _elementwise

TWO_OVER_SQRT_PI = 2.0 / np.sqrt(np.pi)
LN10 = np.log(10.0)


def _elementary(name, scalar_fn, derivative):
    """Build a unary function from its scalar kernel and derivative factor."""
    def fn(x):
        if isinstance(x, DualNumber):
            with errstate():
                return DualNumber(fn(x.value), x.derivatives * derivative(x.value))
        if isinstance(x, NumberArray):
            return x.map(fn)
        with errstate():
            return scalar_fn(np.float64(x))
    fn.__name__ = name
    fn.__qualname__ = name
    return fn


sin = _elementary("sin", np.sin, lambda v: cos(v))
cos = _elementary("cos", np.cos, lambda v: -sin(v))
tan = _elementary("tan", np.tan, lambda v: 1.0 + tan(v) * tan(v))

asin = _elementary("asin", np.arcsin, lambda v: 1.0 / sqrt(1.0 - v * v))
acos = _elementary("acos", np.arccos, lambda v: -1.0 / sqrt(1.0 - v * v))
atan = _elementary("atan", np.arctan, lambda v: 1.0 / (1.0 + v * v))

sinh = _elementary("sinh", np.sinh, lambda v: cosh(v))
cosh = _elementary("cosh", np.cosh, lambda v: sinh(v))
tanh = _elementary("tanh", np.tanh, lambda v: 1.0 - tanh(v) * tanh(v))

exp = _elementary("exp", np.exp, lambda v: exp(v))
log = _elementary("log", np.log, lambda v: 1.0 / v)
log10 = _elementary("log10", np.log10, lambda v: 1.0 / (v * LN10))

sqrt = _elementary("sqrt", np.sqrt, lambda v: 0.5 / sqrt(v))
cbrt = _elementary("cbrt", np.cbrt, lambda v: 1.0 / (3.0 * cbrt(v) * cbrt(v)))

# Piecewise constant: zero derivative everywhere it exists
floor = _elementary("floor", np.floor, lambda v: 0.0)
ceil = _elementary("ceil", np.ceil, lambda v: 0.0)


def erf(x):
    """
    Error function: erf(x) = (2/√π) ∫₀ˣ e^(-t²) dt

    Derivative: d/dx erf(x) = (2/√π) * e^(-x²)
    """
    if isinstance(x, DualNumber):
        with errstate():
            return DualNumber(erf(x.value),
                              x.derivatives * (exp(-(x.value * x.value)) * TWO_OVER_SQRT_PI))
    if isinstance(x, NumberArray):
        return x.map(erf)
    return np.float64(_scipy_erf(x))


def _binary_args(a, b):
    """Shared promotion for two-argument functions; None when both are plain."""
    if isinstance(a, DualNumber) and isinstance(b, DualNumber):
        return align(a, b)
    if isinstance(a, DualNumber):
        return a, promote(b, a)
    if isinstance(b, DualNumber):
        return promote(a, b), b
    return None


def atan2(y, x):
    """
    Two-argument arctangent of y/x.

    d atan2(y, x) = (x * y' - y * x') / (x² + y²)
    """
    if isinstance(y, NumberArray) or isinstance(x, NumberArray):
        return _elementwise(atan2, y, x)
    args = _binary_args(y, x)
    if args is None:
        with errstate():
            return np.arctan2(np.float64(y), np.float64(x))
    y, x = args
    with errstate():
        r2 = x.value * x.value + y.value * y.value
        return DualNumber(atan2(y.value, x.value),
                          (y.derivatives * x.value - x.derivatives * y.value) / r2)


def hypot(a, b):
    """sqrt(a² + b²) with the chain rule (a a' + b b') / hypot(a, b)."""
    if isinstance(a, NumberArray) or isinstance(b, NumberArray):
        return _elementwise(hypot, a, b)
    args = _binary_args(a, b)
    if args is None:
        return np.hypot(np.float64(a), np.float64(b))
    a, b = args
    with errstate():
        h = hypot(a.value, b.value)
        return DualNumber(h, (a.derivatives * a.value + b.derivatives * b.value) / h)


def _select(a, b, pick_first):
    """Return the selected operand, promoted if the other one is a DualNumber."""
    a, b = _binary_args(a, b) or (a, b)
    return a if pick_first else b


def fmin(a, b):
    """Smaller argument; nan loses to a number. Derivative follows the pick."""
    if isinstance(a, NumberArray) or isinstance(b, NumberArray):
        return _elementwise(fmin, a, b)
    ra, rb = raw_value(a), raw_value(b)
    return _select(a, b, bool(np.fmin(ra, rb) == ra))


def fmax(a, b):
    """Larger argument; nan loses to a number. Derivative follows the pick."""
    if isinstance(a, NumberArray) or isinstance(b, NumberArray):
        return _elementwise(fmax, a, b)
    ra, rb = raw_value(a), raw_value(b)
    return _select(a, b, bool(np.fmax(ra, rb) == ra))


def absolute(x):
    """|x| for scalars, DualNumbers and arrays."""
    if isinstance(x, NumberArray):
        return x.map(absolute)
    return abs(x)
