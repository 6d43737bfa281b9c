"""
===========================================================
Test suite for disp_fit core (ellipse fitting)
===========================================================
"""

import numpy as np
import pytest
from disp_fit.core import (
    CHI_SQUARE_2DOF,
    Confidence,
    Ellipse,
    ScaleFactor,
    chi_square_value,
    ellipse_points,
    fit_ellipse,
)

SQUARE = [[-1.0, 0.0], [1.0, 0.0], [0.0, -1.0], [0.0, 1.0]]


def _rotate(P, deg):
    th = np.deg2rad(deg)
    R = np.array([[np.cos(th), -np.sin(th)], [np.sin(th), np.cos(th)]])
    return np.asarray(P, float) @ R.T


def _angle_diff_mod_180(a, b):
    """Smallest signed difference between axis angles a and b (degrees)."""
    return (a - b + 90.0) % 180.0 - 90.0


# --- Insufficient / degenerate data ---------------------------------------

@pytest.mark.parametrize("n", [0, 1, 2])
def test_fit_ellipse_needs_three_points(n):
    pts = [[float(i), 100.0 + i] for i in range(n)]
    assert fit_ellipse(pts) is None
    assert fit_ellipse(pts, ScaleFactor(2.0)) is None


def test_non_finite_points_do_not_count():
    pts = [[0.0, 100.0], [1.0, 101.0], [float("nan"), 102.0]]
    assert fit_ellipse(pts) is None


def test_collinear_points_give_zero_minor_radius():
    ell = fit_ellipse([[0, 0], [1, 1], [2, 2]])
    assert ell is not None
    assert all(np.isfinite(ell))
    assert np.isclose(ell.ry, 0.0, atol=1e-7)
    assert ell.rx > 0
    assert np.isclose(_angle_diff_mod_180(ell.angle, 45.0), 0.0)


def test_identical_points_give_zero_radii():
    ell = fit_ellipse([[3.0, 150.0]] * 5)
    assert ell == Ellipse(3.0, 150.0, 0.0, 0.0, 0.0)


# --- Scale policies -------------------------------------------------------

@pytest.mark.parametrize("level", sorted(CHI_SQUARE_2DOF))
def test_confidence_radii(level):
    ell = fit_ellipse(SQUARE, Confidence(level))
    expected = np.sqrt(0.5 * CHI_SQUARE_2DOF[level])
    assert np.isclose(ell.rx, expected)
    assert np.isclose(ell.ry, expected)
    assert ell.angle == 0.0


def test_default_scale_is_75_percent_confidence():
    assert fit_ellipse(SQUARE) == fit_ellipse(SQUARE, Confidence(0.75))


def test_scale_factor_multiplies_std():
    ell = fit_ellipse(SQUARE, ScaleFactor(2.0))
    assert np.isclose(ell.rx, 2.0 * np.sqrt(0.5))
    assert np.isclose(ell.ry, 2.0 * np.sqrt(0.5))


def test_sample_covariance_widens_ellipse():
    pop = fit_ellipse(SQUARE, Confidence(0.95))
    smp = fit_ellipse(SQUARE, Confidence(0.95), ddof=1)
    assert np.isclose(smp.rx / pop.rx, np.sqrt(4.0 / 3.0))


def test_invalid_scale_parameters():
    with pytest.raises(ValueError):
        chi_square_value(0.9)
    with pytest.raises(ValueError):
        fit_ellipse(SQUARE, ScaleFactor(-1.0))
    with pytest.raises(TypeError):
        fit_ellipse(SQUARE, 0.95)


def test_min_radius_is_caller_applied():
    ell = fit_ellipse([[0, 0], [1, 1], [2, 2]], ScaleFactor(2.0))
    floored = ell.with_min_radius(5.0)
    assert ell.ry < 5.0
    assert floored.ry == 5.0 and floored.rx == 5.0
    assert (floored.cx, floored.cy, floored.angle) == (ell.cx, ell.cy, ell.angle)


# --- Geometry -------------------------------------------------------------

def test_major_axis_follows_carry_spread():
    rng = np.random.default_rng(7)
    P = np.column_stack([rng.normal(0.0, 3.0, 30), rng.normal(150.0, 9.0, 30)])
    ell = fit_ellipse(P, ScaleFactor(1.0))
    assert ell.rx >= ell.ry
    assert abs(_angle_diff_mod_180(ell.angle, 90.0)) < 20.0
    assert np.isclose(ell.cx, P[:, 0].mean())
    assert np.isclose(ell.cy, P[:, 1].mean())


@pytest.mark.parametrize("theta", [15.0, 30.0, 90.0, 137.0])
def test_rotation_changes_angle_not_shape(theta):
    rng = np.random.default_rng(42)
    P = rng.normal(size=(25, 2)) * [3.0, 8.0]
    base = fit_ellipse(P, ScaleFactor(1.0))
    rot = fit_ellipse(_rotate(P, theta), ScaleFactor(1.0))
    assert np.isclose(rot.rx, base.rx)
    assert np.isclose(rot.ry, base.ry)
    assert np.isclose(_angle_diff_mod_180(rot.angle - theta, base.angle), 0.0, atol=1e-6)


def test_fit_is_deterministic():
    rng = np.random.default_rng(3)
    P = rng.normal(size=(12, 2)).tolist()
    assert fit_ellipse(P, Confidence(0.95)) == fit_ellipse(P, Confidence(0.95))


def test_input_not_mutated():
    P = np.array([[0.0, 100.0], [2.0, 104.0], [1.0, 99.0], [np.nan, 1.0]])
    before = P.copy()
    fit_ellipse(P)
    assert np.array_equal(P, before, equal_nan=True)


# --- Sampling -------------------------------------------------------------

def test_ellipse_points_closed_outline():
    ell = Ellipse(0.0, 150.0, 6.0, 3.0, 25.0)
    X, Y = ellipse_points(ell, n=100)
    assert X.shape == (101,) and Y.shape == (101,)
    assert np.isclose(X[0], X[-1]) and np.isclose(Y[0], Y[-1])
    # every sample satisfies the implicit ellipse equation
    th = np.deg2rad(ell.angle)
    xr = np.cos(th) * (X - ell.cx) + np.sin(th) * (Y - ell.cy)
    yr = -np.sin(th) * (X - ell.cx) + np.cos(th) * (Y - ell.cy)
    assert np.allclose((xr / ell.rx) ** 2 + (yr / ell.ry) ** 2, 1.0)


def test_angle_in_upper_half_plane_for_negative_correlation():
    # side drifts right as carry drops: major axis in the second quadrant
    pts = [[-12.0, 152.0], [-6.0, 151.0], [0.0, 150.0], [6.0, 149.0], [12.0, 148.5]]
    ell = fit_ellipse(pts, ScaleFactor(1.0))
    assert 90.0 < ell.angle <= 180.0


@pytest.mark.parametrize("seed", range(5))
def test_angle_range_on_random_sets(seed):
    rng = np.random.default_rng(seed)
    P = rng.normal(size=(10, 2)) @ rng.normal(size=(2, 2))
    ell = fit_ellipse(P, ScaleFactor(1.0))
    assert 0.0 <= ell.angle <= 180.0
