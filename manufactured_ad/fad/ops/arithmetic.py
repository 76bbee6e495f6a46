# fad/ops/arithmetic.py
import numbers

import numpy as np

from ..core.dual import DualNumber
from ..core.array import NumberArray
from ..core.promote import promote, align, zero_like, raw_value
from ..core.config import errstate


def _is_scalar(x):
    return isinstance(x, numbers.Real)


def _all_zero(d):
    if isinstance(d, DualNumber):
        return _all_zero(d.value) and _all_zero(d.derivatives)
    if isinstance(d, NumberArray):
        return all(_all_zero(e) for e in d)
    return d == 0


def _is_constant(x):
    """True when every derivative carried by x, at every order, is zero."""
    if not isinstance(x, DualNumber):
        return True
    return _all_zero(x.derivatives) and _is_constant(x.value)


def _operands(x, y):
    """Promote a plain scalar against its DualNumber partner (the one canonical rule)."""
    if isinstance(x, DualNumber) and isinstance(y, DualNumber):
        return align(x, y)
    if isinstance(x, DualNumber):
        return x, promote(y, x)
    return promote(x, y), y


def add(x, y):
    x, y = _operands(x, y)
    return DualNumber(x.value + y.value, x.derivatives + y.derivatives)


def sub(x, y):
    x, y = _operands(x, y)
    return DualNumber(x.value - y.value, x.derivatives - y.derivatives)


def mul(x, y):
    # d(x*y) = x' * y + x * y'
    # A constant factor skips the zero-derivative term so inf*0 cannot leak nan.
    if _is_scalar(y):
        return DualNumber(x.value * y, x.derivatives * y)
    if _is_scalar(x):
        return DualNumber(y.value * x, y.derivatives * x)
    x, y = _operands(x, y)
    return DualNumber(x.value * y.value,
                      x.derivatives * y.value + y.derivatives * x.value)


def div(x, y):
    # d(x/y) = (x' * y - x * y') / y^2
    with errstate():
        if _is_scalar(y):
            return DualNumber(x.value / y, x.derivatives / y)
        if _is_scalar(x):
            inv = 1.0 / y.value
            return DualNumber(x * inv, y.derivatives * (-x * inv * inv))
        x, y = _operands(x, y)
        return DualNumber(x.value / y.value,
                          (x.derivatives * y.value - y.derivatives * x.value)
                          / (y.value * y.value))


def neg(x):
    return DualNumber(-x.value, -x.derivatives)


def pos(x):
    return DualNumber(x.value, x.derivatives)


def absolute(x):
    """|x|, with derivative sign(x) * x' (zero at x == 0)."""
    s = np.sign(raw_value(x))
    return DualNumber(abs(x.value), x.derivatives * s)


def pow(x, y):
    """
    Power with three cases:

      constant exponent c : (x^c)' = c * x^(c-1) * x'        (monomial rule)
      constant base c     : (c^y)' = c^y * ln(c) * y'
      general             : (x^y)' = x^y * (y' * ln x + y * x'/x)

    Non-positive bases with non-integer exponents give nan through numpy.
    """
    from .transcendental import log

    with errstate():
        if isinstance(x, NumberArray) or isinstance(y, NumberArray):
            return _elementwise(pow, x, y)
        if not isinstance(x, DualNumber) and not isinstance(y, DualNumber):
            return np.power(np.float64(x), y)

        if isinstance(x, DualNumber) and isinstance(y, DualNumber) and _is_constant(y):
            y = raw_value(y)
        if _is_scalar(y):
            if y == 0:
                return DualNumber(x.value ** 0, zero_like(x.derivatives))
            return DualNumber(x.value ** y, x.derivatives * (x.value ** (y - 1) * y))

        if _is_scalar(x):
            v = np.float64(x) ** y.value
            return DualNumber(v, y.derivatives * (v * np.log(np.float64(x))))

        x, y = _operands(x, y)
        v = x.value ** y.value
        return DualNumber(
            v,
            (y.derivatives * log(x.value) + x.derivatives * (y.value / x.value)) * v,
        )


def _elementwise(fn, x, y):
    """Apply a binary function entrywise; a non-array operand is broadcast."""
    if isinstance(x, NumberArray) and isinstance(y, NumberArray):
        return x.combine(y, fn)
    if isinstance(x, NumberArray):
        return x.map(lambda e: fn(e, y))
    return y.map(lambda e: fn(x, e))


def _accepts(other):
    return isinstance(other, (DualNumber, numbers.Real))


def _binop(fn, reflected=False):
    if reflected:
        def op(self, other):
            return fn(other, self) if _accepts(other) else NotImplemented
    else:
        def op(self, other):
            return fn(self, other) if _accepts(other) else NotImplemented
    return op


# Bind Python operators to DualNumber
DualNumber.__add__      = _binop(add)
DualNumber.__radd__     = _binop(add, reflected=True)
DualNumber.__sub__      = _binop(sub)
DualNumber.__rsub__     = _binop(sub, reflected=True)
DualNumber.__mul__      = _binop(mul)
DualNumber.__rmul__     = _binop(mul, reflected=True)
DualNumber.__truediv__  = _binop(div)
DualNumber.__rtruediv__ = _binop(div, reflected=True)
DualNumber.__pow__      = _binop(pow)
DualNumber.__rpow__     = _binop(pow, reflected=True)
DualNumber.__neg__      = lambda self: neg(self)
DualNumber.__pos__      = lambda self: pos(self)
DualNumber.__abs__      = lambda self: absolute(self)
