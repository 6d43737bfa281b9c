"""
===========================================================
disp_fit — golf shot dispersion analytics
===========================================================

A small NumPy-based toolkit that turns launch-monitor shots, given as
(side, carry) pairs per club, into a dispersion ellipse and a set of
outlier flags.

Main functions
--------------
- centroid(points), covariance(points), eigen_decomposition(cov)
- fit_ellipse(points, Confidence(0.75) | ScaleFactor(2.0))
- detect_outliers_iqr(points, factor=1.5)
- detect_outliers_mahalanobis(points, threshold=2.5)
- summarize_dispersion(points), summarize_groups({club: points})
- load_xy_csv(path), save_xy_csv(path, x, y)

Typical workflow
----------------
    from disp_fit import *
    P = load_xy_csv("7iron.csv")
    flags = detect_outliers_iqr(P)
    ell = fit_ellipse(P, Confidence(0.95))
    if ell is not None:
        X, Y = ellipse_points(ell)
"""

# --- Public Imports -------------------------------------------------------

from .io import load_xy_csv, save_xy_csv
from .stats import (
    CovarianceMatrix,
    EigenDecomposition,
    ShotStats,
    as_points,
    centroid,
    covariance,
    eigen_decomposition,
    finite_mask,
    shot_stats,
)
from .core import (
    CHI_SQUARE_2DOF,
    Confidence,
    Ellipse,
    ScaleFactor,
    chi_square_value,
    ellipse_points,
    fit_ellipse,
)
from .outliers import (
    IQROutliers,
    MahalanobisOutliers,
    detect_outliers,
    detect_outliers_iqr,
    detect_outliers_mahalanobis,
    mahalanobis_distances,
    make_strategy,
)
from .pipeline import DispersionSummary, summarize_dispersion, summarize_groups

__all__ = [
    "load_xy_csv",
    "save_xy_csv",
    "CovarianceMatrix",
    "EigenDecomposition",
    "ShotStats",
    "as_points",
    "centroid",
    "covariance",
    "eigen_decomposition",
    "finite_mask",
    "shot_stats",
    "CHI_SQUARE_2DOF",
    "Confidence",
    "Ellipse",
    "ScaleFactor",
    "chi_square_value",
    "ellipse_points",
    "fit_ellipse",
    "IQROutliers",
    "MahalanobisOutliers",
    "detect_outliers",
    "detect_outliers_iqr",
    "detect_outliers_mahalanobis",
    "mahalanobis_distances",
    "make_strategy",
    "DispersionSummary",
    "summarize_dispersion",
    "summarize_groups",
]
