"""Resampling between a grid's native cell size and unit cell size.

At unit resolution every iteration of the edge detector advances the
frontier by one distance unit, so step numbers read directly as distances.
"""
import math
import numpy as np
from scipy.ndimage import map_coordinates

from exceptions import DimensionMismatch
from grid import Grid


def _sample_positions(n_out: int, scale: float) -> np.ndarray:
    # pixel centres of the output expressed in input pixel coordinates
    return (np.arange(n_out) + 0.5) / scale - 0.5


def resize_bilinear(data: np.ndarray, scale: float) -> np.ndarray:
    """Bilinear resize of a 2-D array by ``scale`` along both axes.

    The output has ``ceil(n * scale)`` rows and columns. Samples outside
    the input take the value of the nearest edge pixel. A cell is NaN if
    any input pixel contributing to it with non-zero weight is NaN.
    """
    data = np.asarray(data, dtype='float64')
    if scale == 1:
        return data.copy()
    out_rows = math.ceil(data.shape[0] * scale)
    out_cols = math.ceil(data.shape[1] * scale)
    coords = np.meshgrid(
        _sample_positions(out_rows, scale),
        _sample_positions(out_cols, scale),
        indexing='ij'
    )
    valid = np.isfinite(data)
    filled = np.where(valid, data, 0.0)
    values = map_coordinates(filled, coords, order=1, mode='nearest')
    weight = map_coordinates(valid.astype('float64'), coords, order=1, mode='nearest')
    values[weight < 1.0 - 1e-9] = np.nan
    return values


def to_unit_resolution(grid: Grid) -> Grid:
    """Resample a binary grid to cell size 1 and re-binarize at 0.5."""
    resized = resize_bilinear(grid.data, grid.cellsize)
    binary = np.where(resized >= 0.5, 1.0, 0.0)
    binary[np.isnan(resized)] = np.nan
    return grid.with_data(binary, cellsize=1.0)


def from_unit_resolution(data: np.ndarray, template: Grid) -> Grid:
    """Resample unit-resolution values back onto the template's grid.

    Rounding in the resize can leave a few extra rows or columns; these
    are cropped from the top-left block. Coming back short is an error.
    """
    resized = resize_bilinear(data, 1.0 / template.cellsize)
    rows, cols = resized.shape
    if rows < template.nrows or cols < template.ncols:
        raise DimensionMismatch(
            f"resampled grid is {rows}x{cols}, "
            f"expected at least {template.nrows}x{template.ncols}"
        )
    return template.with_data(resized[:template.nrows, :template.ncols])
