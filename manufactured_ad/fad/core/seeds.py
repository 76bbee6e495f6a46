# fad/core/seeds.py

#-----------------------------------------------------------------------------
# We "plant" unit seeds (dx_i/dx_j = δ_ij) on the independent variables and let
# derivatives flow forward through ordinary arithmetic.
#-----------------------------------------------------------------------------
from __future__ import annotations
from typing import Any, Callable, Sequence, Tuple

import numpy as np

from .dual import DualNumber
from .array import NumberArray
from .promote import raw_value


def value(x: Any) -> Any:
    """Return the value of a DualNumber (one level); pass through plain numbers unchanged."""
    return x.value if isinstance(x, DualNumber) else x


def _constant(c: float, n: int, order: int) -> Any:
    """The constant c nested `order` times over n variables (all derivatives zero)."""
    if order == 0:
        return np.float64(c)
    inner = _constant(c, n, order - 1)
    zero = _constant(0.0, n, order - 1)
    return DualNumber(inner, NumberArray([zero] * n))


def _seed(v: float, i: int, n: int, order: int) -> Any:
    if order == 0:
        return np.float64(v)
    one = _constant(1.0, n, order - 1)
    zero = _constant(0.0, n, order - 1)
    return DualNumber(_seed(v, i, n, order - 1), NumberArray.unit(n, i, one=one, zero=zero))


def independent_variables(point: Sequence[float], order: int = 1) -> Tuple[DualNumber, ...]:
    """
    Seed one DualNumber per coordinate of `point`.

    Variable i gets derivative direction e_i, so derivative slot i of any
    expression built from them is ∂/∂x_i. With order=k the seeds are nested
    k times and derivatives up to order k are available, e.g. for order=2:
        f.derivatives[i].derivatives[j] == ∂²f/∂x_i∂x_j

    Example
    -------
    x, y = independent_variables([1.0, 2.0])
    f = x * y            # f.derivatives == NumberArray([2.0, 1.0])
    """
    if order < 1:
        raise ValueError(f"order must be >= 1, got {order}")
    point = np.asarray(point, dtype=np.float64).ravel()
    n = len(point)
    if n == 0:
        raise ValueError("independent_variables() needs at least one coordinate")
    return tuple(_seed(v, i, n, order) for i, v in enumerate(point))


def _derivative_slots(y: Any, n: int, depth: int) -> Any:
    """Walk `depth` derivative levels down from y, zero-filling constants."""
    if depth == 0:
        return raw_value(y)
    if not isinstance(y, DualNumber):
        return np.zeros((n,) * depth)
    return np.array([_derivative_slots(y.derivatives[i], n, depth - 1) for i in range(n)])


# ----------------------------- convenience drivers ----------------------------- #
def grad(f: Callable[..., Any], point: Sequence[float]) -> np.ndarray:
    """
    Gradient of a scalar function y = f(x_0, ..., x_{n-1}) at `point`.

    Example
    -------
    grad(lambda x, y: x * x + 3 * y, [2.0, 4.0]) -> array([4.0, 3.0])
    """
    xs = independent_variables(point, order=1)
    return _derivative_slots(f(*xs), len(xs), 1)


def grad_hessian(f: Callable[..., Any],
                 point: Sequence[float]) -> Tuple[np.ndarray, np.ndarray, float]:
    """
    Value, gradient and Hessian of a scalar function in one nested forward pass.

    Returns
    -------
    (g, H, f0):
        - g: gradient as np.ndarray of shape (n,)
        - H: Hessian as np.ndarray of shape (n, n)
        - f0: function value
    """
    xs = independent_variables(point, order=2)
    y = f(*xs)
    n = len(xs)
    g = _derivative_slots(y, n, 1)
    H = _derivative_slots(y, n, 2)
    return g, H, raw_value(y)


def hessian(f: Callable[..., Any], point: Sequence[float]) -> np.ndarray:
    """Hessian only; convenience wrapper around grad_hessian."""
    _, H, _ = grad_hessian(f, point)
    return H
