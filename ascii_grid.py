"""Read and write ESRI ASCII grids (.asc) as Grid objects using rasterio.

Files are stored north-up; Grid data has the south row first, so rows
are flipped on the way in and out.
"""
from pathlib import Path
import numpy as np
import rasterio
from rasterio.io import MemoryFile, DatasetReader
from rasterio.transform import from_origin

from grid import Grid

DEFAULT_NODATA = -9999.0


def _profile(grid: Grid, driver: str) -> dict:
    top = grid.yllcorner + grid.nrows * grid.cellsize
    return {
        'driver': driver,
        'height': grid.nrows,
        'width': grid.ncols,
        'count': 1,
        'dtype': 'float32',
        'nodata': grid.nodata_value,
        'transform': from_origin(grid.xllcorner, top, grid.cellsize, grid.cellsize),
    }


def _north_up(grid: Grid) -> np.ndarray:
    data = np.where(np.isnan(grid.data), grid.nodata_value, grid.data)
    return np.flipud(data).astype('float32')


def load_ascii_grid(path) -> Grid:
    """Load a single-band raster (normally .asc) into a Grid."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Grid file '{path}' not found.")
    with rasterio.open(path) as src:
        band = src.read(1, masked=True)
        transform = src.transform
        nodata = src.nodata
        nrows, ncols = src.height, src.width
    if not np.isclose(transform.a, -transform.e):
        raise ValueError(
            f"'{path}' has non-square cells ({transform.a} x {-transform.e})"
        )
    data = np.flipud(band.astype('float64').filled(np.nan))
    return Grid(
        nrows=nrows,
        ncols=ncols,
        cellsize=float(transform.a),
        xllcorner=float(transform.c),
        yllcorner=float(transform.f + transform.e * nrows),
        nodata_value=DEFAULT_NODATA if nodata is None else float(nodata),
        data=data,
    )


def save_ascii_grid(grid: Grid, path) -> None:
    """Write a Grid to an ESRI ASCII grid; NaN cells become nodata_value."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with rasterio.open(path, 'w', **_profile(grid, 'AAIGrid')) as dst:
        dst.write(_north_up(grid), 1)


def grid_to_rasterio(grid: Grid) -> DatasetReader:
    """Convert a Grid to a rasterio in-memory dataset."""
    memfile = MemoryFile()
    with memfile.open(**_profile(grid, 'GTiff')) as dataset:
        dataset.write(_north_up(grid), 1)
    return memfile.open()
