# fad/core/array.py
from __future__ import annotations
import numbers
import operator
from typing import Any, Callable, Generic, Iterator, List, Tuple, TypeVar

import numpy as np

T = TypeVar("T")


def _entry(e: Any):
    """Normalize one entry: nested sequences become NumberArrays, arrays are copied."""
    from .dual import DualNumber

    if isinstance(e, NumberArray):
        return e.copy()
    if isinstance(e, (list, tuple, np.ndarray)):
        return NumberArray(e)
    if isinstance(e, (numbers.Real, DualNumber)):
        return e
    raise TypeError(
        f"NumberArray entries must be real scalars, DualNumbers or NumberArrays, "
        f"but got {type(e)}"
    )


def _check_homogeneous(items: List[Any]):
    """Entries are either all NumberArrays of one shape, or all scalar-like."""
    nested = [isinstance(e, NumberArray) for e in items]
    if any(nested) and not all(nested):
        raise ValueError("NumberArray cannot mix nested arrays with scalar entries")
    if all(nested):
        shape = items[0].shape
        for e in items[1:]:
            if e.shape != shape:
                raise ValueError(
                    f"ragged NumberArray: entry shapes {shape} and {e.shape} differ"
                )


class NumberArray(Generic[T]):
    """
    Fixed-size homogeneous array of scalars, DualNumbers or nested NumberArrays.

    The size is set at construction and never changes. Used both as an
    algebraic vector/tensor and as the `derivatives` of a DualNumber, where it
    turns scalar differentiation into gradient computation.

    Each instance owns its storage: construction copies, every operation
    returns a new array, and item assignment only touches this instance.
    """

    __slots__ = ("_entries",)
    __array_priority__ = 1000
    __hash__ = None  # item assignment makes instances mutable

    def __init__(self, entries):
        if isinstance(entries, NumberArray):
            entries = entries._entries
        elif isinstance(entries, np.ndarray):
            if entries.ndim == 0:
                raise TypeError("NumberArray needs a sequence, got a 0-d ndarray")
            entries = list(entries)
        elif not isinstance(entries, (list, tuple)):
            raise TypeError(
                f"NumberArray is built from a list, tuple, ndarray or NumberArray, "
                f"but got {type(entries)}"
            )
        if len(entries) == 0:
            raise ValueError("NumberArray must have at least one entry")

        items = [_entry(e) for e in entries]
        _check_homogeneous(items)
        self._entries = items

    # ----------------------------- constructors ----------------------------- #
    @classmethod
    def full(cls, n: int, fill) -> "NumberArray":
        """Broadcast a scalar (or DualNumber, or array) across n entries."""
        return cls([fill] * operator.index(n))

    @classmethod
    def zeros(cls, n: int) -> "NumberArray":
        return cls.full(n, 0.0)

    @classmethod
    def unit(cls, n: int, i: int, one=1.0, zero=0.0) -> "NumberArray":
        """Basis vector e_i of length n."""
        n = operator.index(n)
        if not 0 <= i < n:
            raise IndexError(f"unit direction {i} out of range for size {n}")
        return cls([one if j == i else zero for j in range(n)])

    # ------------------------------- access -------------------------------- #
    def _check_index(self, i) -> int:
        if isinstance(i, slice):
            raise TypeError("NumberArray does not support slicing")
        i = operator.index(i)
        if not 0 <= i < len(self._entries):
            raise IndexError(
                f"index {i} out of range for NumberArray of size {len(self._entries)}"
            )
        return i

    def __getitem__(self, i):
        return self._entries[self._check_index(i)]

    def __setitem__(self, i, v):
        i = self._check_index(i)
        v = _entry(v)
        old = self._entries[i]
        if isinstance(old, NumberArray) != isinstance(v, NumberArray):
            raise ValueError("assignment would change the nesting of a NumberArray entry")
        if isinstance(v, NumberArray) and v.shape != old.shape:
            raise ValueError(f"assignment shape {v.shape} does not match {old.shape}")
        self._entries[i] = v

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[T]:
        return iter(self._entries)

    @property
    def shape(self) -> Tuple[int, ...]:
        head = self._entries[0]
        inner = head.shape if isinstance(head, NumberArray) else ()
        return (len(self._entries),) + inner

    @property
    def rank(self) -> int:
        return len(self.shape)

    def copy(self) -> "NumberArray":
        return NumberArray(self)

    def map(self, fn: Callable) -> "NumberArray":
        """New array with fn applied to every (top-level) entry."""
        return NumberArray([fn(e) for e in self._entries])

    def combine(self, other: "NumberArray", fn: Callable) -> "NumberArray":
        """Elementwise fn(self[i], other[i]); sizes must match."""
        if len(other) != len(self):
            raise ValueError(
                f"NumberArray size mismatch: {len(self)} vs {len(other)}"
            )
        return NumberArray([fn(a, b) for a, b in zip(self._entries, other._entries)])

    def to_numpy(self) -> np.ndarray:
        from .promote import raw_value
        return raw_value(self)

    # ----------------------------- arithmetic ------------------------------ #
    @staticmethod
    def _broadcastable(other) -> bool:
        from .dual import DualNumber
        return isinstance(other, (numbers.Real, DualNumber))

    def __add__(self, other):
        if isinstance(other, NumberArray):
            return self.combine(other, operator.add)
        return NotImplemented

    def __sub__(self, other):
        if isinstance(other, NumberArray):
            return self.combine(other, operator.sub)
        return NotImplemented

    def __mul__(self, other):
        if isinstance(other, NumberArray):
            return self.combine(other, operator.mul)
        if self._broadcastable(other):
            return self.map(lambda e: e * other)
        return NotImplemented

    def __rmul__(self, other):
        if self._broadcastable(other):
            return self.map(lambda e: other * e)
        return NotImplemented

    def __truediv__(self, other):
        if isinstance(other, NumberArray):
            return self.combine(other, operator.truediv)
        if self._broadcastable(other):
            return self.map(lambda e: e / other)
        return NotImplemented

    def __rtruediv__(self, other):
        if self._broadcastable(other):
            return self.map(lambda e: other / e)
        return NotImplemented

    def __neg__(self):
        return self.map(operator.neg)

    def __pos__(self):
        return self.copy()

    def __eq__(self, other):
        if isinstance(other, (list, tuple, np.ndarray)):
            try:
                other = NumberArray(other)
            except (TypeError, ValueError):
                return False
        if not isinstance(other, NumberArray):
            return NotImplemented
        if len(other) != len(self):
            return False
        return all(bool(a == b) for a, b in zip(self._entries, other._entries))

    def __ne__(self, other):
        eq = self.__eq__(other)
        return eq if eq is NotImplemented else not eq

    def __array_ufunc__(self, ufunc, method, *inputs, **kwargs):
        if method != "__call__" or kwargs:
            return NotImplemented
        from ..ops.ufuncs import dispatch
        return dispatch(ufunc, inputs)

    def __repr__(self):
        from .dual import _fmt
        return "NumberArray([" + ", ".join(_fmt(e) for e in self._entries) + "])"
