"""
===========================================================
disp_fit.stats — centroid / covariance / eigen primitive
===========================================================

Shared numeric leaf used by both the ellipse fitter and the outlier
detectors:
  - as_points()            : validate & copy a point set to an (N, 2) array
  - finite_mask()          : rows with finite side AND carry
  - centroid()             : arithmetic mean (0, 0 for an empty set)
  - covariance()           : 2x2 covariance, population (ddof=0) by default
  - eigen_decomposition()  : closed-form symmetric 2x2 eigensolution
  - shot_stats()           : per-axis summary (count, mean, min, max, std)

Coordinates
-----------
x = side offset (negative = left, positive = right)
y = carry / total distance downrange

Design goals
------------
- Never raise for degenerate data (collinear, duplicated, empty)
- Never return NaN / inf: clamp, zero-default, or axis-aligned fallback
- Non-finite rows are dropped before any statistic is computed
"""

# --- Imports --------------------------------------------------------------

from __future__ import annotations

import logging
from typing import NamedTuple, Optional

import numpy as np

_logger = logging.getLogger(__name__)

# Below this norm an eigenvector is considered undefined (diagonal matrix).
_EIGVEC_EPS = 1e-12


# --- Types ----------------------------------------------------------------

class CovarianceMatrix(NamedTuple):
    """Symmetric 2x2 covariance {xx, yy, xy} of a point set."""

    xx: float
    yy: float
    xy: float

    @property
    def determinant(self) -> float:
        return self.xx * self.yy - self.xy * self.xy

    @property
    def trace(self) -> float:
        return self.xx + self.yy

    def is_psd(self, tol: float = 1e-12) -> bool:
        """True if xx, yy >= 0 and det >= 0, within ``tol``."""
        return self.xx >= -tol and self.yy >= -tol and self.determinant >= -tol


class EigenDecomposition(NamedTuple):
    """
    Eigenvalues (larger first) and matching unit eigenvectors.

    eigenvectors[0] is the major axis direction, eigenvectors[1] the minor.
    """

    eigenvalues: tuple[float, float]
    eigenvectors: tuple[tuple[float, float], tuple[float, float]]


class ShotStats(NamedTuple):
    n_shots: int
    mean_side: float
    mean_carry: float
    min_side: float
    max_side: float
    min_carry: float
    max_carry: float
    std_side: float
    std_carry: float


# --- Input validation -----------------------------------------------------

def _as_array(points) -> np.ndarray:
    P = np.array(points, dtype=float)
    if P.size == 0:
        return P.reshape(0, 2)
    if P.ndim != 2 or P.shape[1] != 2:
        raise ValueError(f"expected a point set of shape (N, 2), got {P.shape}")
    return P


def finite_mask(points) -> np.ndarray:
    """
    Boolean mask of rows whose side AND carry are finite numbers.

    Parameters
    ----------
    points : array-like, shape (N, 2)
        Sequence of (x, y) pairs.

    Returns
    -------
    mask : np.ndarray of bool, shape (N,)
    """
    P = _as_array(points)
    return np.isfinite(P).all(axis=1)


def as_points(points) -> np.ndarray:
    """
    Return a fresh (N, 2) float array holding only the finite rows.

    The caller's container is never modified. Raises ValueError if the
    input is not shaped like a list of (x, y) pairs.
    """
    P = _as_array(points)
    mask = np.isfinite(P).all(axis=1)
    if not mask.all():
        _logger.debug("dropping %d non-finite point(s)", int((~mask).sum()))
        P = P[mask]
    return P


# --- Centroid / Covariance ------------------------------------------------

def centroid(points) -> tuple[float, float]:
    """
    Arithmetic mean (x̄, ȳ) of a point set.

    An empty set yields (0.0, 0.0); callers must check the size before
    trusting this value.
    """
    P = as_points(points)
    if len(P) == 0:
        return 0.0, 0.0
    cx, cy = P.mean(axis=0)
    return float(cx), float(cy)


def covariance(points, ddof: int = 0) -> CovarianceMatrix:
    """
    2x2 covariance of a point set around its centroid.

    Parameters
    ----------
    points : array-like, shape (N, 2)
        Point set (non-finite rows are ignored).
    ddof : int
        Delta degrees of freedom. 0 (default) divides by N (population
        covariance, used by the ellipse and outlier code); 1 divides by
        N - 1 (sample covariance).

    Returns
    -------
    CovarianceMatrix
        Zero matrix when fewer than 2 points are available.
    """
    if ddof not in (0, 1):
        raise ValueError("ddof must be 0 (population) or 1 (sample)")
    P = as_points(points)
    n = len(P)
    if n < 2:
        return CovarianceMatrix(0.0, 0.0, 0.0)

    D = P - P.mean(axis=0)
    dx, dy = D[:, 0], D[:, 1]
    div = float(n - ddof)
    return CovarianceMatrix(
        xx=float(np.dot(dx, dx) / div),
        yy=float(np.dot(dy, dy) / div),
        xy=float(np.dot(dx, dy) / div),
    )


# --- Eigen decomposition (closed form, 2x2 symmetric) --------------------

def _unit(vx: float, vy: float) -> Optional[tuple[float, float]]:
    norm = float(np.hypot(vx, vy))
    if norm < _EIGVEC_EPS:
        return None
    return vx / norm, vy / norm


def _eigenvector(lam: float, xx: float, yy: float, xy: float):
    # (xy, λ - xx) and (λ - yy, xy) span the same line; the longer one is
    # the one not dominated by rounding when xy ≈ 0. b is flipped for xy < 0
    # so both keep a non-negative y component (angle in [0°, 180°]).
    a = (xy, lam - xx)
    b = (lam - yy, xy) if xy >= 0.0 else (yy - lam, -xy)
    return _unit(*a) if np.hypot(*a) >= np.hypot(*b) else _unit(*b)


def eigen_decomposition(cov: CovarianceMatrix) -> EigenDecomposition:
    """
    Eigenvalues / eigenvectors of a symmetric 2x2 covariance.

      trace = xx + yy,  det = xx·yy - xy²
      disc  = sqrt(max(trace² - 4·det, 0))
      λ1 = (trace + disc) / 2 ≥ λ2 = (trace - disc) / 2
      v1 ∝ (xy, λ1 - xx)

    When the direction vector vanishes (isotropic or empty covariance) the
    major axis falls back to +x (or +y if yy > xx). The minor axis is the
    perpendicular of the major one, so the result is always finite and
    orthonormal.
    """
    xx, yy, xy = float(cov.xx), float(cov.yy), float(cov.xy)
    trace = xx + yy
    det = xx * yy - xy * xy
    disc = float(np.sqrt(max(trace * trace - 4.0 * det, 0.0)))

    lam1 = (trace + disc) / 2.0
    lam2 = (trace - disc) / 2.0

    v1 = _eigenvector(lam1, xx, yy, xy)
    if v1 is None:
        v1 = (1.0, 0.0) if xx >= yy else (0.0, 1.0)
    v2 = (-v1[1], v1[0])

    return EigenDecomposition((lam1, lam2), (v1, v2))


# --- Summary statistics ---------------------------------------------------

def shot_stats(points) -> Optional[ShotStats]:
    """
    Per-axis summary of a point set (population standard deviation).
    Returns None for an empty set.
    """
    P = as_points(points)
    if len(P) == 0:
        return None
    side, carry = P[:, 0], P[:, 1]
    return ShotStats(
        n_shots=len(P),
        mean_side=float(side.mean()),
        mean_carry=float(carry.mean()),
        min_side=float(side.min()),
        max_side=float(side.max()),
        min_carry=float(carry.min()),
        max_carry=float(carry.max()),
        std_side=float(side.std()),
        std_carry=float(carry.std()),
    )
