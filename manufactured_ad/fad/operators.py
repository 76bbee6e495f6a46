# fad/operators.py
"""
Differential and tensor operators over DualNumber / NumberArray compositions.

All operators work by index and shape only. They do not know whether the
nesting represents first or higher derivatives, and they do not know which
independent variable a derivative slot belongs to: slot i is the i-th seed
direction handed out by `independent_variables` (caller convention).

Typical use inside a manufactured residual, with u a second-order dual:
    grad_u = gradient(u)              # NumberArray of first-order duals
    lap_u  = divergence(grad_u)       # first-order dual
    forcing = -lap_u + u * u
"""
from __future__ import annotations
import numbers
import operator
from typing import Any, Callable, Sequence, Union

import numpy as np

from .core.dual import DualNumber
from .core.array import NumberArray

ArrayLike = Union[NumberArray, Sequence]


def _as_array(x: ArrayLike, name: str) -> NumberArray:
    if isinstance(x, NumberArray):
        return x
    if isinstance(x, (list, tuple, np.ndarray)):
        return NumberArray(x)
    raise TypeError(f"{name} expects a NumberArray or sequence, but got {type(x)}")


def gradient(x: Any) -> Any:
    """
    Derivatives of x.

    DualNumber  -> x.derivatives (the gradient, one order lower)
    NumberArray -> entrywise (a vector field gives its Jacobian rows)
    real scalar -> 0.0 (a constant)
    """
    if isinstance(x, DualNumber):
        return x.derivatives
    if isinstance(x, NumberArray):
        return x.map(gradient)
    if isinstance(x, numbers.Real):
        return np.float64(0.0)
    raise TypeError(f"gradient() does not support {type(x)}")


def _derivative_dimensions(x: Any, found: set) -> set:
    """
    Collect the derivative slot counts of every DualNumber in x.

    A constant built as DualNumber(c) carries a bare zero derivative with no
    slot count of its own and is skipped.
    """
    if isinstance(x, DualNumber):
        d = x.derivatives
        if isinstance(d, NumberArray):
            found.add(len(d))
        elif not (isinstance(d, numbers.Real) and d == 0):
            found.add(1)
    elif isinstance(x, NumberArray):
        for e in x:
            _derivative_dimensions(e, found)
    return found


def _partial(x: Any, i: int) -> Any:
    """∂x/∂x_i, structurally: slot i of every DualNumber's derivatives."""
    if isinstance(x, DualNumber):
        d = x.derivatives
        if isinstance(d, NumberArray):
            return d[i]
        return d  # single independent variable, i == 0
    if isinstance(x, NumberArray):
        return x.map(lambda e: _partial(e, i))
    return np.float64(0.0)


def divergence(field: ArrayLike) -> Any:
    """
    Contract the outer index of a field against the derivative index:

        div(T)[...] = Σ_i ∂T[i][...]/∂x_i

    A vector field gives a scalar-like result, a rank-k tensor field gives a
    rank k-1 NumberArray. The field length must equal the number of seeded
    independent variables. With a single independent variable whose
    derivative is a bare scalar or DualNumber, the field may be a DualNumber.
    """
    if isinstance(field, DualNumber) and not isinstance(field.derivatives, NumberArray):
        # Single independent variable: the field is its own only component
        return _partial(field, 0)
    field = _as_array(field, "divergence()")
    dims = _derivative_dimensions(field, set())
    if not dims:
        # Constant field
        return _partial(field[0], 0)
    if len(dims) > 1:
        raise ValueError(
            f"divergence() field mixes derivative sizes {sorted(dims)}"
        )
    n = dims.pop()
    if n != len(field):
        raise ValueError(
            f"divergence() of a length-{len(field)} field needs {len(field)} "
            f"independent variables, but the derivatives have {n} slots"
        )
    total = _partial(field[0], 0)
    for i in range(1, len(field)):
        total = total + _partial(field[i], i)
    return total


def laplacian(u: Any) -> Any:
    """
    Σ_i ∂²u/∂x_i²; entrywise for a NumberArray u.

    u must carry at least second-order nesting.
    """
    if isinstance(u, NumberArray):
        return u.map(laplacian)
    if not isinstance(u, DualNumber) or u.order < 2:
        raise ValueError("laplacian() needs a DualNumber with at least second-order nesting")
    return divergence(gradient(u))


def identity(n: int, scalar_type: Callable[[int], Any] = float) -> NumberArray:
    """n×n identity tensor with scalar_type(1) on the diagonal, scalar_type(0) elsewhere."""
    if operator.index(n) < 1:
        raise ValueError(f"identity() needs n >= 1, got {n}")
    one, zero = scalar_type(1), scalar_type(0)
    return NumberArray([[one if i == j else zero for j in range(n)] for i in range(n)])


def outer_product(u: ArrayLike, v: ArrayLike) -> NumberArray:
    """Rank-2 tensor with [i][j] = u[i] * v[j]."""
    u = _as_array(u, "outer_product()")
    v = _as_array(v, "outer_product()")
    return NumberArray([[a * b for b in v] for a in u])


def dot(u: ArrayLike, v: ArrayLike) -> Any:
    """Inner product Σ_i u[i] * v[i]; sizes must match."""
    u = _as_array(u, "dot()")
    v = _as_array(v, "dot()")
    if len(u) != len(v):
        raise ValueError(f"dot() size mismatch: {len(u)} vs {len(v)}")
    total = u[0] * v[0]
    for i in range(1, len(u)):
        total = total + u[i] * v[i]
    return total


def _check_rank2(t: NumberArray, name: str):
    if t.rank != 2:
        raise ValueError(f"{name} needs a rank-2 NumberArray, got shape {t.shape}")


def transpose(t: ArrayLike) -> NumberArray:
    """Swap the two indices of a rank-2 tensor."""
    t = _as_array(t, "transpose()")
    _check_rank2(t, "transpose()")
    rows, cols = t.shape
    return NumberArray([[t[i][j] for i in range(rows)] for j in range(cols)])


def trace(t: ArrayLike) -> Any:
    """Σ_i t[i][i] of a square rank-2 tensor."""
    t = _as_array(t, "trace()")
    _check_rank2(t, "trace()")
    rows, cols = t.shape
    if rows != cols:
        raise ValueError(f"trace() needs a square tensor, got shape {t.shape}")
    total = t[0][0]
    for i in range(1, rows):
        total = total + t[i][i]
    return total
