"""
===========================================================
disp_fit.core — dispersion ellipse fitting (NumPy-only)
===========================================================

Turns a set of (side, carry) shots into a dispersion ellipse:
  - Confidence / ScaleFactor : how big the ellipse is drawn
  - fit_ellipse()            : centroid + covariance + eigen → Ellipse
  - Ellipse.with_min_radius(): presentation floor, opt-in
  - ellipse_points()         : sample the outline (data coordinates)

Two scale policies
------------------
- Confidence(level): statistically calibrated region, the radii are
  sqrt(λ · χ²) with χ² from a fixed 2-dof table.
- ScaleFactor(k): "best-fit" mode, radii are k · sqrt(λ). k = 2 gives
  the classic always-visible club ellipse.

Conventions
-----------
- rx ≥ ry ≥ 0, rx along the major eigenvector
- angle in degrees within [0, 180], from +x to the major axis
- radii are the true computed values, possibly 0 for collinear shots;
  any minimum drawing radius is up to the caller
"""

# --- Imports --------------------------------------------------------------

from __future__ import annotations

import logging
from typing import NamedTuple, Optional, Union

import numpy as np

from .stats import as_points, covariance, eigen_decomposition

_logger = logging.getLogger(__name__)


# --- Configuration --------------------------------------------------------

# χ² critical values (2 degrees of freedom) per confidence level.
CHI_SQUARE_2DOF = {
    0.50: 1.386,
    0.75: 2.773,
    0.85: 3.841,
    0.95: 5.991,
}

DEFAULT_CONFIDENCE = 0.75
DEFAULT_BEST_FIT_FACTOR = 2.0
DEFAULT_MIN_RADIUS = 5.0
MIN_ELLIPSE_POINTS = 3


# --- Types ----------------------------------------------------------------

class Confidence(NamedTuple):
    """Confidence-region scale: radii = sqrt(λ · χ²(level))."""

    level: float = DEFAULT_CONFIDENCE

    def variance_multiplier(self) -> float:
        return chi_square_value(self.level)


class ScaleFactor(NamedTuple):
    """Best-fit scale: radii = factor · sqrt(λ)."""

    factor: float = DEFAULT_BEST_FIT_FACTOR

    def variance_multiplier(self) -> float:
        if not np.isfinite(self.factor) or self.factor < 0:
            raise ValueError(f"scale factor must be a finite value >= 0, got {self.factor}")
        return float(self.factor) ** 2


EllipseScale = Union[Confidence, ScaleFactor]


class Ellipse(NamedTuple):
    """Dispersion ellipse in data coordinates (angle in degrees)."""

    cx: float
    cy: float
    rx: float
    ry: float
    angle: float

    def with_min_radius(self, minimum: float = DEFAULT_MIN_RADIUS) -> "Ellipse":
        """Copy with both radii raised to at least ``minimum`` (for drawing)."""
        return self._replace(rx=max(self.rx, minimum), ry=max(self.ry, minimum))


# --- Utilities ------------------------------------------------------------

def chi_square_value(level: float) -> float:
    """
    χ² critical value (2 dof) for a supported confidence level.

    Raises ValueError for levels outside CHI_SQUARE_2DOF.
    """
    for known, value in CHI_SQUARE_2DOF.items():
        if np.isclose(level, known, rtol=0.0, atol=1e-9):
            return value
    supported = ", ".join(f"{k:.2f}" for k in CHI_SQUARE_2DOF)
    raise ValueError(f"Unsupported confidence level {level!r}; use one of {supported}.")


def _radius(eigenvalue: float, multiplier: float) -> float:
    # Collinear / underflow cases can leave λ slightly below 0.
    if eigenvalue <= 0.0:
        return 0.0
    return float(np.sqrt(eigenvalue * multiplier))


# --- Ellipse fit ----------------------------------------------------------

def fit_ellipse(points, scale: Optional[EllipseScale] = None,
                ddof: int = 0) -> Optional[Ellipse]:
    """
    Fit a dispersion ellipse to a point set.

    Parameters
    ----------
    points : array-like, shape (N, 2)
        (side, carry) pairs. Non-finite rows are ignored.
    scale : Confidence | ScaleFactor, optional
        Size policy. Defaults to Confidence(0.75).
    ddof : int
        Covariance convention, 0 = population (default), 1 = sample.

    Returns
    -------
    Ellipse or None
        None when fewer than 3 finite points are available.
    """
    if scale is None:
        scale = Confidence()
    if not isinstance(scale, (Confidence, ScaleFactor)):
        raise TypeError("scale must be a Confidence or ScaleFactor instance")
    multiplier = scale.variance_multiplier()

    P = as_points(points)
    if len(P) < MIN_ELLIPSE_POINTS:
        _logger.debug("fit_ellipse: %d point(s), need %d", len(P), MIN_ELLIPSE_POINTS)
        return None

    cx, cy = P.mean(axis=0)
    cov = covariance(P, ddof=ddof)
    eig = eigen_decomposition(cov)
    lam1, lam2 = eig.eigenvalues
    vx, vy = eig.eigenvectors[0]

    if lam2 <= 0.0:
        _logger.debug("fit_ellipse: degenerate covariance %s", cov)

    return Ellipse(
        cx=float(cx),
        cy=float(cy),
        rx=_radius(lam1, multiplier),
        ry=_radius(lam2, multiplier),
        angle=float(np.degrees(np.arctan2(vy, vx))),
    )


# --- Sampling -------------------------------------------------------------

def ellipse_points(ellipse: Ellipse, n: int = 50):
    """
    Sample n + 1 points on the ellipse outline (first == last, closed).
    No plotting or pixel mapping happens here.
    """
    t = np.linspace(0.0, 2.0 * np.pi, n + 1)
    X = ellipse.rx * np.cos(t)
    Y = ellipse.ry * np.sin(t)
    th = np.radians(ellipse.angle)
    c, s = np.cos(th), np.sin(th)
    xr = c * X - s * Y
    yr = s * X + c * Y
    return ellipse.cx + xr, ellipse.cy + yr
