# fad/core/config.py
from __future__ import annotations
from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Optional

import numpy as np

_FP_POLICIES = ("ignore", "warn", "raise")


@dataclass(frozen=True)
class AlgebraConfig:
    """Policy knobs for the forward-mode algebra."""
    # Reject DualNumber operands whose nesting orders differ;
    # when False the deeper operand is truncated to the shallower order
    check_nesting: bool = True

    # numpy.errstate policy for divide/invalid/overflow in elementary functions.
    # 'ignore' lets nan/inf flow through value and derivative silently.
    floating_point_errors: str = "ignore"

    def __post_init__(self):
        if self.floating_point_errors not in _FP_POLICIES:
            raise ValueError(
                f"floating_point_errors must be one of {_FP_POLICIES}, "
                f"got {self.floating_point_errors!r}"
            )


# Process-wide default configuration
global_config = AlgebraConfig()


@contextmanager
def use_config(config: Optional[AlgebraConfig] = None, **overrides):
    """
    Context manager to temporarily swap the active configuration:
        with use_config(floating_point_errors="raise"):
            ... log(x) now raises FloatingPointError for x <= 0 ...
    """
    from . import config as _config_mod  # module access so readers see the swap
    prev = _config_mod.global_config
    try:
        _config_mod.global_config = replace(config or prev, **overrides)
        yield _config_mod.global_config
    finally:
        _config_mod.global_config = prev


def errstate():
    """numpy.errstate built from the active floating-point policy."""
    policy = global_config.floating_point_errors
    return np.errstate(divide=policy, invalid=policy, over=policy)
