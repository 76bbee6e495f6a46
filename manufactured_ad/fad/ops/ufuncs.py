# fad/ops/ufuncs.py
#
# numpy ufunc protocol: lets unmodified numpy expressions (np.sin(x),
# np.float64(2.0) * x, np.array([2.0, 3.0]) * x, ...) run on DualNumbers and
# NumberArrays.
import operator

import numpy as np

from ..core.dual import DualNumber
from ..core.array import NumberArray
from . import transcendental as T

# binary ufunc -> (forward dunder, reflected dunder)
_BINARY = {
    np.add: ("__add__", "__radd__"),
    np.subtract: ("__sub__", "__rsub__"),
    np.multiply: ("__mul__", "__rmul__"),
    np.true_divide: ("__truediv__", "__rtruediv__"),
    np.power: ("__pow__", "__rpow__"),
    np.less: ("__lt__", "__gt__"),
    np.less_equal: ("__le__", "__ge__"),
    np.greater: ("__gt__", "__lt__"),
    np.greater_equal: ("__ge__", "__le__"),
    np.equal: ("__eq__", "__eq__"),
    np.not_equal: ("__ne__", "__ne__"),
}

_UNARY = {
    np.negative: lambda x: -x,
    np.positive: lambda x: +x,
    np.absolute: T.absolute,
    np.square: lambda x: x * x,
    np.reciprocal: lambda x: 1.0 / x,
    np.sin: T.sin, np.cos: T.cos, np.tan: T.tan,
    np.arcsin: T.asin, np.arccos: T.acos, np.arctan: T.atan,
    np.sinh: T.sinh, np.cosh: T.cosh, np.tanh: T.tanh,
    np.exp: T.exp, np.log: T.log, np.log10: T.log10,
    np.sqrt: T.sqrt, np.cbrt: T.cbrt,
    np.floor: T.floor, np.ceil: T.ceil,
}

_FUNCTIONS = {
    np.arctan2: T.atan2,
    np.hypot: T.hypot,
    np.fmin: T.fmin,
    np.fmax: T.fmax,
}

_ACTIVE = (DualNumber, NumberArray)


def _boxed(x):
    """Wrap a DualNumber as a 0-d object array so numpy treats it as an element."""
    if isinstance(x, DualNumber):
        box = np.empty((), dtype=object)
        box[()] = x
        return box
    return x


def _over_ndarray(ufunc, inputs):
    """
    ndarray (op) DualNumber: apply the scalar rule per element and return an
    object array of DualNumbers, the way numpy treats any Python number type.
    """
    if any(isinstance(v, NumberArray) for v in inputs):
        return NotImplemented
    if ufunc in _FUNCTIONS:
        rule = _FUNCTIONS[ufunc]
    else:
        rule = getattr(operator, _BINARY[ufunc][0].strip("_"))
    return np.frompyfunc(rule, 2, 1)(*[_boxed(v) for v in inputs])


def dispatch(ufunc, inputs):
    """Route a numpy ufunc call to the forward-mode rule, or NotImplemented."""
    if len(inputs) == 2 and (ufunc in _FUNCTIONS or ufunc in _BINARY) \
            and any(isinstance(v, np.ndarray) for v in inputs):
        return _over_ndarray(ufunc, inputs)
    if ufunc in _UNARY and len(inputs) == 1:
        return _UNARY[ufunc](inputs[0])
    if ufunc in _FUNCTIONS and len(inputs) == 2:
        return _FUNCTIONS[ufunc](*inputs)
    if ufunc in _BINARY and len(inputs) == 2:
        a, b = inputs
        fwd, ref = _BINARY[ufunc]
        result = NotImplemented
        # Call the dunders directly: going through operators would re-enter numpy
        if isinstance(a, _ACTIVE) and hasattr(a, fwd):
            result = getattr(a, fwd)(b)
        if result is NotImplemented and isinstance(b, _ACTIVE) and hasattr(b, ref):
            result = getattr(b, ref)(a)
        return result
    return NotImplemented
