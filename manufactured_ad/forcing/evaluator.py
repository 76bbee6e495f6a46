"""
Manufactured-forcing evaluation.

Glue between the forward-mode algebra and a host PDE solver. A residual is
written as ordinary arithmetic on the coordinates, for example the forcing of
the Poisson problem -Δu = f for u = sin(x)·cos(y):

    def residual(x, y):
        u = sin(x) * cos(y)
        return -laplacian(u)

The evaluator seeds the coordinates as independent variables (nested to the
requested derivative order), calls the residual, and narrows the result with
raw_value() so the solver receives plain numbers.
"""

import time
import warnings
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

import numpy as np

from ..fad import independent_variables, raw_value


@dataclass
class ForcingConfig:
    """Configuration for forcing evaluation."""
    # Derivative order of the seeded coordinates (2 for second-order PDEs)
    order: int = 2

    # Logging
    verbose: bool = False
    warn_on_nonfinite: bool = True

    def __post_init__(self):
        if self.order < 1:
            raise ValueError(f"order must be >= 1, got {self.order}")


def evaluate_forcing(residual: Callable[..., Any],
                     point: Sequence[float],
                     order: int = 2) -> Any:
    """
    Evaluate a manufactured residual at one point.

    Args:
        residual: Function of the coordinates (as DualNumbers) returning the
                  forcing expression (scalar-like or NumberArray)
        point: Coordinates of the evaluation point
        order: Derivative order to seed

    Returns:
        Plain float (scalar residual) or np.ndarray (vector/tensor residual)
    """
    xs = independent_variables(point, order=order)
    return raw_value(residual(*xs))


class ForcingEvaluator:
    """
    Evaluate a manufactured forcing term at points of a host mesh.

    Usage:
        >>> evaluator = ForcingEvaluator(residual, ForcingConfig(order=2))
        >>> f0 = evaluator([0.5, 0.25])
        >>> f = evaluator.field(mesh_points)      # shape (n_points,) or (n_points, ...)
    """

    def __init__(self,
                 residual: Callable[..., Any],
                 config: Optional[ForcingConfig] = None):
        self.residual = residual
        self.config = config or ForcingConfig()

    def __call__(self, point: Sequence[float]) -> Any:
        result = evaluate_forcing(self.residual, point, order=self.config.order)
        if self.config.warn_on_nonfinite and not np.all(np.isfinite(result)):
            warnings.warn(
                f"Forcing is not finite at point {np.ravel(point).tolist()}: {result}"
            )
        return result

    def field(self, points: np.ndarray) -> np.ndarray:
        """
        Evaluate at every row of `points`.

        Args:
            points: Array of shape (n_points, dim); a 1-D array is one point
                    per entry in one dimension

        Returns:
            np.ndarray of shape (n_points,) + residual shape
        """
        points = np.asarray(points, dtype=np.float64)
        if points.ndim == 1:
            points = points[:, None]
        if points.ndim != 2:
            raise ValueError(f"points must be 1-D or 2-D, got shape {points.shape}")

        t0 = time.time()
        values = np.array([self(p) for p in points])
        elapsed = time.time() - t0

        if self.config.verbose:
            print(f"  Forcing: {len(points)} points, dim={points.shape[1]}, "
                  f"order={self.config.order}")
            print(f"  Runtime: {elapsed:.3f} s")
        return values
