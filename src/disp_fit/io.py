from pathlib import Path
import numpy as np


def load_xy_csv(path: str, delimiter: str = ",", skiprows: int = 1) -> np.ndarray:
    """
    Load a two-column (side, carry) CSV as an (N, 2) array.

    Parameters
    ----------
    path : str
        CSV file path.
    delimiter : str
        CSV delimiter (default ",").
    skiprows : int
        Number of initial rows to skip (default 1, the "x,y" header).
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"File not found: {p}")
    arr = np.loadtxt(p, delimiter=delimiter, skiprows=skiprows, usecols=(0, 1), ndmin=2)
    return arr.reshape(-1, 2)


def save_xy_csv(path: str, side, carry, header: str = "side,carry"):
    """
    Write side / carry columns (e.g. an ellipse outline) as a CSV that
    load_xy_csv() reads back: one header line, 6 decimals.
    """
    if len(side) != len(carry):
        raise ValueError(f"side and carry differ in length ({len(side)} vs {len(carry)})")
    np.savetxt(path, np.column_stack([side, carry]), delimiter=",",
               header=header, comments="", fmt="%.6f")
