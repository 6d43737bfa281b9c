"""
===========================================================
disp_fit.outliers — shot outlier detection
===========================================================

Two interchangeable strategies, both returning ascending indices into the
caller's original point list (so flags can be joined back onto the shot
records, timestamps included):

  - MahalanobisOutliers(threshold=2.5)
      distance to the centroid under the population covariance; the
      threshold is a sensitivity knob, not a calibrated p-value (compare
      against sqrt(χ²) from core.CHI_SQUARE_2DOF for formal levels)
  - IQROutliers(factor=1.5)
      per-axis Tukey fences on nearest-rank quartiles; no matrix
      inversion, robust for the 5–30 shots a club usually has

Fewer than 4 finite points, or a singular covariance, yields [] rather
than an error. Non-finite rows are never flagged and never contribute to
the statistics.
"""

# --- Imports --------------------------------------------------------------

from __future__ import annotations

import logging
from typing import Optional, Union

import numpy as np

from .stats import _as_array, covariance

_logger = logging.getLogger(__name__)


# --- Configuration --------------------------------------------------------

MIN_OUTLIER_POINTS = 4
MAHALANOBIS_THRESHOLD = 2.5
IQR_FACTOR = 1.5
# det / (xx·yy) below this is treated as singular (1 - r² for the shots).
SINGULAR_EPS = 1e-10


# --- Helpers --------------------------------------------------------------

def _split_finite(points):
    """Return (finite rows, their original indices, total row count)."""
    P = _as_array(points)
    idx = np.flatnonzero(np.isfinite(P).all(axis=1))
    return P[idx], idx, len(P)


def _check_non_negative(name: str, value: float) -> None:
    if not np.isfinite(value) or value < 0:
        raise ValueError(f"{name} must be a finite value >= 0, got {value}")


def _nearest_rank_quartiles(values: np.ndarray) -> tuple[float, float]:
    v = np.sort(values)
    n = len(v)
    return float(v[int(np.floor(0.25 * n))]), float(v[int(np.floor(0.75 * n))])


# --- Mahalanobis ----------------------------------------------------------

def mahalanobis_distances(points, ddof: int = 0) -> Optional[np.ndarray]:
    """
    Mahalanobis distance of every point to the centroid.

    Parameters
    ----------
    points : array-like, shape (N, 2)
    ddof : int
        Covariance convention (0 = population).

    Returns
    -------
    d : np.ndarray, shape (N,) or None
        NaN for non-finite input rows. None when fewer than 2 finite
        points remain or the covariance is (near) singular.
    """
    P, idx, n_total = _split_finite(points)
    if len(P) < 2:
        return None

    cov = covariance(P, ddof=ddof)
    det = cov.determinant
    # Scaled by xx·yy; the floor of 1 keeps an absolute check for zero spread.
    if det < SINGULAR_EPS * max(cov.xx * cov.yy, 1.0):
        _logger.debug("singular covariance (det=%.3g), no Mahalanobis distances", det)
        return None

    inv_xx = cov.yy / det
    inv_yy = cov.xx / det
    inv_xy = -cov.xy / det

    D = P - P.mean(axis=0)
    dx, dy = D[:, 0], D[:, 1]
    q = dx * dx * inv_xx + dy * dy * inv_yy + 2.0 * dx * dy * inv_xy

    out = np.full(n_total, np.nan)
    out[idx] = np.sqrt(np.maximum(q, 0.0))
    return out


def detect_outliers_mahalanobis(points, threshold: float = MAHALANOBIS_THRESHOLD) -> list[int]:
    """Indices whose Mahalanobis distance exceeds ``threshold``."""
    _check_non_negative("threshold", threshold)
    P, _, _ = _split_finite(points)
    if len(P) < MIN_OUTLIER_POINTS:
        return []
    d = mahalanobis_distances(points)
    if d is None:
        return []
    # NaN compares False, so non-finite rows are never flagged.
    return [int(i) for i in np.flatnonzero(d > threshold)]


# --- IQR ------------------------------------------------------------------

def detect_outliers_iqr(points, factor: float = IQR_FACTOR) -> list[int]:
    """
    Per-axis interquartile-range outliers.

    Q1 / Q3 are the sorted values at floor(0.25·N) / floor(0.75·N)
    (nearest rank, no interpolation). A point is flagged when its side OR
    its carry falls outside [Q1 - factor·IQR, Q3 + factor·IQR]. An axis
    with IQR == 0 never flags anything.
    """
    _check_non_negative("factor", factor)
    P, idx, _ = _split_finite(points)
    if len(P) < MIN_OUTLIER_POINTS:
        return []

    flagged = np.zeros(len(P), dtype=bool)
    for axis in (0, 1):
        values = P[:, axis]
        q1, q3 = _nearest_rank_quartiles(values)
        iqr = q3 - q1
        if iqr <= 0.0:
            continue
        lo, hi = q1 - factor * iqr, q3 + factor * iqr
        flagged |= (values < lo) | (values > hi)

    return [int(i) for i in idx[flagged]]


# --- Strategies -----------------------------------------------------------

class MahalanobisOutliers:
    """Outlier strategy based on Mahalanobis distance."""

    name = "mahalanobis"

    def __init__(self, threshold: float = MAHALANOBIS_THRESHOLD):
        _check_non_negative("threshold", threshold)
        self.threshold = float(threshold)

    def detect(self, points) -> list[int]:
        return detect_outliers_mahalanobis(points, self.threshold)

    def __repr__(self) -> str:
        return f"MahalanobisOutliers(threshold={self.threshold})"


class IQROutliers:
    """Outlier strategy based on per-axis interquartile range."""

    name = "iqr"

    def __init__(self, factor: float = IQR_FACTOR):
        _check_non_negative("factor", factor)
        self.factor = float(factor)

    def detect(self, points) -> list[int]:
        return detect_outliers_iqr(points, self.factor)

    def __repr__(self) -> str:
        return f"IQROutliers(factor={self.factor})"


OutlierStrategy = Union[MahalanobisOutliers, IQROutliers]


def detect_outliers(points, strategy: Optional[OutlierStrategy] = None) -> list[int]:
    """Run ``strategy`` (IQROutliers() by default) on ``points``."""
    if strategy is None:
        strategy = IQROutliers()
    return strategy.detect(points)


def make_strategy(method: str, **params) -> OutlierStrategy:
    """
    Build a strategy from its name ('iqr' or 'mahalanobis').

    Keyword parameters are forwarded (factor= / threshold=).
    """
    key = method.strip().lower()
    if key == IQROutliers.name:
        return IQROutliers(**params)
    if key == MahalanobisOutliers.name:
        return MahalanobisOutliers(**params)
    raise ValueError(f"Unknown outlier method {method!r}; use 'iqr' or 'mahalanobis'.")
