"""
Weighted radial-basis regression.

Models mean departure delay as a function of distance with a bias column
plus one Gaussian bump per knot:

    delay(x) = b0 + sum_k b_k * exp(-(x - knot_k)^2 / bandwidth^2)

Knots are evenly spaced between the smallest and largest observed
distance. Coefficients come from a plain weighted least-squares solve
(no regularization). Inputs that cannot give a unique solution raise
``DegenerateRegressionError``.
"""

from dataclasses import dataclass
from typing import Optional, Sequence
import logging

import numpy as np
import pandas as pd
from sklearn.linear_model import LinearRegression

from .config import RegressionConfig
from .errors import DegenerateRegressionError


logger = logging.getLogger(__name__)


def make_knots(distances: Sequence[float], knot_count: int) -> np.ndarray:
    """Evenly spaced knots between the minimum and maximum distance."""
    x = np.asarray(distances, dtype=float)
    return np.linspace(x.min(), x.max(), knot_count)


def design_matrix(x: Sequence[float], knots: Sequence[float], bandwidth: float) -> np.ndarray:
    """
    Bias column followed by one Gaussian basis column per knot.

    Returns an array of shape (len(x), len(knots) + 1).
    """
    x = np.asarray(x, dtype=float).reshape(-1, 1)
    centers = np.asarray(knots, dtype=float).reshape(1, -1)
    basis = np.exp(-((x - centers) ** 2) / bandwidth ** 2)
    return np.hstack([np.ones((x.shape[0], 1)), basis])


@dataclass
class RegressionFit:
    """Fitted coefficients and the basis they apply to."""

    knots: np.ndarray
    bandwidth: float
    coefficients: np.ndarray  # bias first, then one per knot
    x_min: float
    x_max: float
    n_observations: int

    def predict(self, x: Sequence[float]) -> np.ndarray:
        return design_matrix(x, self.knots, self.bandwidth) @ self.coefficients

    def curve(self, grid_size: int = 100) -> pd.DataFrame:
        """Predictions over an evenly spaced grid spanning the fitted range."""
        grid = np.linspace(self.x_min, self.x_max, grid_size)
        return pd.DataFrame({"dist": grid, "predicted_dep_delay": self.predict(grid)})

    def to_dict(self) -> dict:
        return {
            "knots": self.knots.tolist(),
            "bandwidth": self.bandwidth,
            "coefficients": self.coefficients.tolist(),
            "x_min": self.x_min,
            "x_max": self.x_max,
            "n_observations": self.n_observations,
        }


class RBFRegression:
    """Weighted least squares on a fixed radial-basis expansion."""

    def __init__(self, knot_count: int = 4, bandwidth: float = 50.0):
        if knot_count < 1:
            raise ValueError(f"knot_count must be at least 1, got {knot_count}")
        if bandwidth <= 0:
            raise ValueError(f"bandwidth must be positive, got {bandwidth}")
        self.knot_count = knot_count
        self.bandwidth = float(bandwidth)
        self.fit_: Optional[RegressionFit] = None

    @classmethod
    def from_config(cls, config: RegressionConfig) -> "RBFRegression":
        return cls(knot_count=config.knot_count, bandwidth=config.bandwidth)

    def fit(
        self,
        x: Sequence[float],
        y: Sequence[float],
        weights: Optional[Sequence[float]] = None,
    ) -> RegressionFit:
        """
        Fit coefficients by weighted least squares.

        Args:
            x: Distances
            y: Mean departure delays
            weights: Per-row weights (flight counts); equal weights if None

        Returns:
            RegressionFit

        Raises:
            DegenerateRegressionError: empty, mismatched or non-finite input,
                negative weights, fewer distinct distances than knots, or a
                rank-deficient design matrix
        """
        x = np.asarray(x, dtype=float)
        y = np.asarray(y, dtype=float)
        w = np.ones_like(x) if weights is None else np.asarray(weights, dtype=float)

        if x.ndim != 1 or x.shape != y.shape or x.shape != w.shape:
            raise DegenerateRegressionError(
                f"x, y and weights must be 1-D of equal length, got {x.shape}, {y.shape}, {w.shape}"
            )
        if len(x) == 0:
            raise DegenerateRegressionError("Cannot fit on an empty input")
        if not (np.isfinite(x).all() and np.isfinite(y).all() and np.isfinite(w).all()):
            raise DegenerateRegressionError("Input contains NaN or infinite values")
        if (w < 0).any():
            raise DegenerateRegressionError("Weights must be non-negative")

        distinct = len(np.unique(x))
        if distinct < self.knot_count:
            raise DegenerateRegressionError(
                f"{distinct} distinct distances is fewer than {self.knot_count} knots"
            )

        knots = make_knots(x, self.knot_count)
        X = design_matrix(x, knots, self.bandwidth)

        weighted = X * np.sqrt(w)[:, None]
        rank = np.linalg.matrix_rank(weighted)
        if rank < X.shape[1]:
            raise DegenerateRegressionError(
                f"Design matrix is singular: rank {rank} for {X.shape[1]} coefficients"
            )

        # Bias column is part of X
        model = LinearRegression(fit_intercept=False)
        model.fit(X, y, sample_weight=w)

        self.fit_ = RegressionFit(
            knots=knots,
            bandwidth=self.bandwidth,
            coefficients=np.asarray(model.coef_, dtype=float),
            x_min=float(x.min()),
            x_max=float(x.max()),
            n_observations=len(x),
        )
        logger.info(
            f"Fitted {self.knot_count} knots (bandwidth {self.bandwidth:g}) "
            f"on {len(x)} routes"
        )
        return self.fit_

    def _require_fit(self) -> RegressionFit:
        if self.fit_ is None:
            raise RuntimeError("RBFRegression has not been fitted")
        return self.fit_

    def predict(self, x: Sequence[float]) -> np.ndarray:
        return self._require_fit().predict(x)

    def predict_curve(self, grid_size: int = 100) -> pd.DataFrame:
        return self._require_fit().curve(grid_size)
