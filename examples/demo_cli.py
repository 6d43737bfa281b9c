"""
===========================================================
Dispersion Demo (CLI version, NumPy-only)
===========================================================

Usage
-----
    python3 examples/demo_cli.py path/to/shots.csv
    python3 examples/demo_cli.py shots.csv --scale 2.0 --method mahalanobis
    python3 examples/demo_cli.py shots.csv --exclude-outliers --outline ellipse.csv

Input
-----
    Two-column CSV with a header line: side,carry

Outputs
-------
    Summary on stdout; optional ellipse outline CSV (--outline).
"""

# --- Imports --------------------------------------------------------------

import sys
import argparse
from disp_fit import (
    Confidence,
    ScaleFactor,
    ellipse_points,
    load_xy_csv,
    make_strategy,
    save_xy_csv,
    summarize_dispersion,
)
from disp_fit.core import DEFAULT_CONFIDENCE
from disp_fit.outliers import IQR_FACTOR, MAHALANOBIS_THRESHOLD


# --- CLI -----------------------------------------------------------------

def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Shot dispersion demo.")
    p.add_argument("csv", help="Path to a side,carry CSV.")
    size = p.add_mutually_exclusive_group()
    size.add_argument("--confidence", type=float, default=DEFAULT_CONFIDENCE,
                      help="Confidence level (0.5, 0.75, 0.85, 0.95).")
    size.add_argument("--scale", type=float, default=None,
                      help="Best-fit mode: radii = scale * std along each axis.")
    p.add_argument("--method", choices=["iqr", "mahalanobis"], default="iqr")
    p.add_argument("--factor", type=float, default=IQR_FACTOR)
    p.add_argument("--threshold", type=float, default=MAHALANOBIS_THRESHOLD)
    p.add_argument("--exclude-outliers", action="store_true",
                   help="Fit the ellipse on inliers only.")
    p.add_argument("--outline", type=str, default="",
                   help="Write the sampled ellipse outline to this CSV.")
    p.add_argument("--samples", type=int, default=50)
    return p.parse_args(argv)


# --- Main routine ---------------------------------------------------------

def main(argv=None):
    args = parse_args(argv if argv is not None else sys.argv[1:])

    P = load_xy_csv(args.csv)
    print(f"[info] loaded {len(P)} shots from: {args.csv}")

    scale = ScaleFactor(args.scale) if args.scale is not None else Confidence(args.confidence)
    if args.method == "iqr":
        strategy = make_strategy("iqr", factor=args.factor)
    else:
        strategy = make_strategy("mahalanobis", threshold=args.threshold)

    summary = summarize_dispersion(P, scale=scale, strategy=strategy,
                                   exclude_outliers=args.exclude_outliers)
    print(f"[outliers] {strategy!r}: {summary.outliers}")

    ell = summary.ellipse
    if ell is None:
        print("[error] not enough shots for a dispersion ellipse (need ≥ 3).")
        return 1

    print(f"center=({ell.cx:.2f},{ell.cy:.2f}), rx={ell.rx:.2f}, ry={ell.ry:.2f}, "
          f"θ={ell.angle:.2f}°")

    if args.outline:
        Xf, Yf = ellipse_points(ell, n=args.samples)
        save_xy_csv(args.outline, Xf, Yf)
        print(f"[ok] saved outline -> {args.outline}")
    return 0


# --- Entrypoint -----------------------------------------------------------

if __name__ == "__main__":
    raise SystemExit(main())
