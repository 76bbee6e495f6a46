# fad/core/promote.py

#-----------------------------------------------------------------------------
# Promotion (scalar -> DualNumber) is implicit; demotion (DualNumber -> scalar)
# only ever happens through raw_value().
#-----------------------------------------------------------------------------
from __future__ import annotations
import numbers
from typing import Any, Tuple

import numpy as np

from . import config as config_mod
from .dual import DualNumber
from .array import NumberArray


def nesting_order(x: Any) -> int:
    """Derivative orders carried by x (0 for plain scalars)."""
    return x.order if isinstance(x, DualNumber) else 0


def zero_like(d: Any) -> Any:
    """Additive identity with the structure of d (scalar, dual or array)."""
    if isinstance(d, NumberArray):
        return d.map(zero_like)
    if isinstance(d, DualNumber):
        return DualNumber(zero_like(d.value), zero_like(d.derivatives))
    if isinstance(d, numbers.Real):
        return np.float64(0.0)
    raise TypeError(f"zero_like() does not support {type(d)}")


def promote(x: Any, like: Any) -> Any:
    """
    Promote a real scalar to the nesting structure of `like`.

    The result has the value x and zero derivatives at every order, shaped
    like `like.derivatives`. DualNumbers are returned unchanged; promoting
    against a plain scalar returns x itself.
    """
    if isinstance(x, DualNumber):
        return x
    if not isinstance(x, numbers.Real):
        raise TypeError(f"cannot promote {type(x)} to a DualNumber")
    if not isinstance(like, DualNumber):
        return x
    return DualNumber(promote(x, like.value), zero_like(like.derivatives))


def truncate(x: Any, order: int) -> Any:
    """
    Drop derivative orders above `order`.

    The value of an order-k DualNumber is exactly the order-(k-1) DualNumber of
    the same expression, so truncation is lossless for the orders kept.
    order=0 is raw_value() for scalars.
    """
    if order < 0:
        raise ValueError(f"order must be >= 0, got {order}")
    if isinstance(x, NumberArray):
        return x.map(lambda e: truncate(e, order))
    while isinstance(x, DualNumber) and x.order > order:
        x = x.value
    return x


def _is_bare_zero(d: Any) -> bool:
    return isinstance(d, numbers.Real) and d == 0


def align(a: DualNumber, b: DualNumber) -> Tuple[DualNumber, DualNumber]:
    """
    Make two DualNumber operands structurally compatible.

    A constant built as DualNumber(c) carries a bare scalar zero derivative;
    it is widened to the partner's derivative structure. Operands of
    different nesting orders are rejected; with check_nesting disabled the
    deeper operand is truncated to the shallower order instead.
    """
    if a.order != b.order:
        if config_mod.global_config.check_nesting:
            raise ValueError(
                f"cannot combine DualNumbers of nesting order {a.order} and {b.order}; "
                f"use truncate() to drop the extra orders explicitly"
            )
        low = min(a.order, b.order)
        a, b = truncate(a, low), truncate(b, low)
    da, db = a.derivatives, b.derivatives
    if _is_bare_zero(da) and not isinstance(db, numbers.Real):
        a = DualNumber(a.value, zero_like(db))
    elif _is_bare_zero(db) and not isinstance(da, numbers.Real):
        b = DualNumber(b.value, zero_like(da))
    return a, b


def raw_value(x: Any) -> Any:
    """
    Explicit narrowing: strip all derivative information.

    DualNumber -> innermost scalar value (recursively through nesting)
    NumberArray -> numpy.ndarray of raw values, one axis per array rank
    real scalar -> unchanged
    """
    if isinstance(x, DualNumber):
        return raw_value(x.value)
    if isinstance(x, NumberArray):
        return np.array([raw_value(e) for e in x])
    if isinstance(x, numbers.Real):
        return x
    raise TypeError(f"raw_value() does not support {type(x)}")
