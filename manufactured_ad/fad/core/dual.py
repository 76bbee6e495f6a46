# fad/core/dual.py
from __future__ import annotations
import numbers
import warnings
from typing import Any, Generic, TypeVar

import numpy as np

V = TypeVar("V")
D = TypeVar("D")


class DualNumber(Generic[V, D]):
    """
    Forward-mode active scalar: a value paired with its derivatives.

    Attributes
    ----------
    value : float | DualNumber
        Primal value. Real scalars are stored as numpy.float64 so that domain
        errors (log of a negative, division by zero) give nan/inf instead of
        raising. A DualNumber here nests one more derivative order.
    derivatives : NumberArray | float | DualNumber
        Sensitivity of `value` to the caller's independent variables. A
        NumberArray holds one entry per variable (a gradient); a plain scalar
        is the single-variable case.

    Instances are immutable and share no storage: a NumberArray gradient is
    copied on the way in and on the way out. Arithmetic operators are
    registered by `fad.ops.arithmetic`; elementary functions live in
    `fad.ops.transcendental`.

    Narrowing to a plain number never happens implicitly: float(), int(),
    complex() and the math module raise TypeError. Use raw_value() instead.

    Rebinding pitfall: `x = 3.0` replaces an independent variable by a plain
    constant and loses its seed. To move an independent variable to a new
    point use `x.with_value(3.0)`.
    """

    __slots__ = ("_value", "_derivatives")
    __array_priority__ = 1000  # numpy defers binary ops to __array_ufunc__

    def __init__(self, value: Any, derivatives: Any = 0.0):
        from .array import NumberArray

        if isinstance(value, DualNumber):
            self._value = value
        elif isinstance(value, numbers.Real):
            self._value = np.float64(value)
        else:
            raise TypeError(
                f"DualNumber value must be a real scalar or a DualNumber, "
                f"but got {type(value)}"
            )

        if isinstance(derivatives, NumberArray):
            self._derivatives = derivatives.copy()
        elif isinstance(derivatives, DualNumber):
            self._derivatives = derivatives
        elif isinstance(derivatives, (list, tuple, np.ndarray)):
            self._derivatives = NumberArray(derivatives)
        elif isinstance(derivatives, numbers.Real):
            self._derivatives = np.float64(derivatives)
        else:
            raise TypeError(
                f"DualNumber derivatives must be a NumberArray, DualNumber, "
                f"sequence or real scalar, but got {type(derivatives)}"
            )

    @property
    def value(self) -> V:
        return self._value

    @property
    def derivatives(self) -> D:
        """Read-only: a NumberArray gradient is returned as a fresh copy."""
        from .array import NumberArray
        d = self._derivatives
        return d.copy() if isinstance(d, NumberArray) else d

    @property
    def order(self) -> int:
        """Number of derivative orders carried (1 for a plain-valued dual)."""
        return 1 + (self._value.order if isinstance(self._value, DualNumber) else 0)

    @classmethod
    def constant(cls, value, like: "DualNumber") -> "DualNumber":
        """A constant shaped like `like`: same nesting, zero derivatives."""
        from .promote import promote
        return promote(value, like)

    def with_value(self, value) -> "DualNumber":
        """
        Rebind the value and keep the derivative seed.

        For nested duals the new value is pushed down to the innermost scalar,
        so every derivative order keeps its seed.
        """
        if isinstance(value, DualNumber):
            warnings.warn(
                "with_value() got a DualNumber; its derivatives are discarded "
                "and only its raw value is used",
                stacklevel=2,
            )
            from .promote import raw_value
            value = raw_value(value)
        if isinstance(self._value, DualNumber):
            return DualNumber(self._value.with_value(value), self._derivatives)
        return DualNumber(value, self._derivatives)

    # ---- narrowing is explicit only ----
    def _narrowing(self, kind):
        raise TypeError(
            f"cannot convert DualNumber to {kind} implicitly; derivative "
            f"information would be lost. Use raw_value(x) to narrow explicitly."
        )

    def __float__(self):
        self._narrowing("float")

    def __int__(self):
        self._narrowing("int")

    def __complex__(self):
        self._narrowing("complex")

    def __index__(self):
        self._narrowing("an index")

    # ---- comparisons act on values, so branching code behaves like scalars ----
    @staticmethod
    def _compare_operand(other):
        if isinstance(other, DualNumber):
            return other._value
        if isinstance(other, numbers.Real):
            return other
        return NotImplemented

    def __lt__(self, other):
        o = self._compare_operand(other)
        return NotImplemented if o is NotImplemented else self._value < o

    def __le__(self, other):
        o = self._compare_operand(other)
        return NotImplemented if o is NotImplemented else self._value <= o

    def __gt__(self, other):
        o = self._compare_operand(other)
        return NotImplemented if o is NotImplemented else self._value > o

    def __ge__(self, other):
        o = self._compare_operand(other)
        return NotImplemented if o is NotImplemented else self._value >= o

    def __eq__(self, other):
        o = self._compare_operand(other)
        return NotImplemented if o is NotImplemented else bool(self._value == o)

    def __ne__(self, other):
        o = self._compare_operand(other)
        return NotImplemented if o is NotImplemented else bool(self._value != o)

    def __hash__(self):
        # Consistent with value-only equality against plain floats
        return hash(float(np.float64(_innermost(self))))

    def __bool__(self):
        return bool(_innermost(self) != 0)

    def __array_ufunc__(self, ufunc, method, *inputs, **kwargs):
        if method != "__call__" or kwargs:
            return NotImplemented
        from ..ops.ufuncs import dispatch
        return dispatch(ufunc, inputs)

    def __repr__(self):
        return f"DualNumber({_fmt(self._value)}, {_fmt(self._derivatives)})"


def _innermost(x):
    while isinstance(x, DualNumber):
        x = x._value
    return x


def _fmt(x):
    if isinstance(x, np.floating):
        return repr(float(x))
    return repr(x)
