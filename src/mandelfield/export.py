# -*- coding: utf-8 -*-
"""
Summary printing and tabular export of a `MandelbrotView`.

The table layout follows the "melt" convention: one row per field cell,
columns x, y, value, with x varying fastest (column-major traversal of z).
Row ``j * nx + i`` holds ``(x[i], y[j], z[i, j])``.
"""
import sys

import numpy as np
import pandas as pd

from mandelfield.core import MandelbrotView

COLUMNS = ["x", "y", "value"]


def summary(view):
    """ One-line, human-readable description of the view """
    (x0, x1), (y0, y1) = view.xlim, view.ylim
    (nx, ny) = view.shape
    return (
        f"Mandelbrot set view object within limits x: {x0:.15g}, {x1:.15g} "
        f"and y: {y0:.15g}, {y1:.15g} - iterations matrix: {nx} x {ny}"
    )


def print_view(view, file=None):
    """ Writes the summary of view to file (default stdout), returns view """
    if file is None:
        file = sys.stdout
    print(summary(view), file=file)
    return view


def to_dataframe(view):
    """
    Converts a view to a tidy 3-column `pandas.DataFrame` (x, y, value),
    one row per field cell, x varying fastest.
    """
    (nx, ny) = view.shape
    return pd.DataFrame({
        "x": np.tile(view.x, ny),
        "y": np.repeat(view.y, nx),
        "value": np.ravel(view.z, order="F"),
    }, columns=COLUMNS)


def from_dataframe(df, max_iter, smooth=False):
    """
    Rebuilds a view from a table produced by `to_dataframe` (any row order).

    The table does not record the iteration budget: `max_iter` and `smooth`
    shall be those of the computation which produced it.

    Raises
    ------
    ValueError
        if the columns are not x, y, value or if the rows do not cover a full
        x-y grid exactly once
    """
    missing = set(COLUMNS) - set(df.columns)
    if missing:
        raise ValueError(f"Missing columns: {sorted(missing)}")

    x = np.unique(df["x"].to_numpy(dtype=np.float64))
    y = np.unique(df["y"].to_numpy(dtype=np.float64))
    (nx, ny) = (x.size, y.size)
    if len(df) != nx * ny:
        raise ValueError(
            f"Table of {len(df)} rows is not a full {nx} x {ny} grid"
        )

    ix = np.searchsorted(x, df["x"].to_numpy(dtype=np.float64))
    iy = np.searchsorted(y, df["y"].to_numpy(dtype=np.float64))
    flat = ix + nx * iy
    if np.unique(flat).size != flat.size:
        raise ValueError("Duplicated (x, y) cells in table")

    z = np.empty(nx * ny, dtype=np.float64)
    z[flat] = df["value"].to_numpy(dtype=np.float64)
    return MandelbrotView(
        x=x, y=y, z=z.reshape((nx, ny), order="F"),
        max_iter=max_iter, smooth=smooth
    )
