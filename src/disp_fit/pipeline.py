"""
===========================================================
disp_fit.pipeline — per-club dispersion summaries
===========================================================

Glue for the usual flow: flag outliers, optionally drop them, then fit
the dispersion ellipse and summary stats on what is left.

    summary = summarize_dispersion(points, exclude_outliers=True)
    summary.outliers   # indices into `points`
    summary.ellipse    # Ellipse or None (< 3 shots)
"""

# --- Imports --------------------------------------------------------------

from __future__ import annotations

import logging
from typing import Mapping, NamedTuple, Optional

import numpy as np

from .core import Ellipse, EllipseScale, fit_ellipse
from .outliers import OutlierStrategy, detect_outliers
from .stats import ShotStats, _as_array, shot_stats

_logger = logging.getLogger(__name__)


# --- Types ----------------------------------------------------------------

class DispersionSummary(NamedTuple):
    n_shots: int
    outliers: list[int]
    ellipse: Optional[Ellipse]
    stats: Optional[ShotStats]


# --- Pipeline -------------------------------------------------------------

def summarize_dispersion(points,
                         scale: Optional[EllipseScale] = None,
                         strategy: Optional[OutlierStrategy] = None,
                         exclude_outliers: bool = False) -> DispersionSummary:
    """
    Outliers + ellipse + stats for one analysis unit (e.g. one club).

    Parameters
    ----------
    points : array-like, shape (N, 2)
        (side, carry) pairs.
    scale : Confidence | ScaleFactor, optional
        Ellipse size policy (fit_ellipse default when None).
    strategy : MahalanobisOutliers | IQROutliers, optional
        Outlier strategy (IQR when None).
    exclude_outliers : bool
        Fit the ellipse and stats on inliers only.

    Returns
    -------
    DispersionSummary
        ``n_shots`` is the number of input rows, ``outliers`` always refers
        to the original indices.
    """
    P = _as_array(points)
    outliers = detect_outliers(P, strategy)

    used = P
    if exclude_outliers and outliers:
        keep = np.ones(len(P), dtype=bool)
        keep[outliers] = False
        used = P[keep]

    return DispersionSummary(
        n_shots=len(P),
        outliers=outliers,
        ellipse=fit_ellipse(used, scale),
        stats=shot_stats(used),
    )


def summarize_groups(groups: Mapping[str, object], **kwargs) -> dict[str, DispersionSummary]:
    """
    Run summarize_dispersion() on every group (insertion order kept).

    Extra keyword arguments are forwarded to summarize_dispersion().
    """
    out = {}
    for key, points in groups.items():
        summary = summarize_dispersion(points, **kwargs)
        _logger.debug("%s: n=%d outliers=%d ellipse=%s",
                      key, summary.n_shots, len(summary.outliers),
                      "yes" if summary.ellipse is not None else "no")
        out[key] = summary
    return out
