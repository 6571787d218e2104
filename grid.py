"""In-memory raster grid used throughout the DCE computation.

Row 0 of ``data`` is the southernmost row. No-data cells are NaN; the
``nodata_value`` is only substituted when a grid is written to disk.
"""
from dataclasses import dataclass, field, replace
import numpy as np


@dataclass(frozen=True, eq=False)
class Grid:
    """Raster header plus cell values.

    ``data`` is copied on construction and made read-only; use
    ``with_data`` to derive a new grid.
    """
    nrows: int
    ncols: int
    cellsize: float
    xllcorner: float
    yllcorner: float
    nodata_value: float
    data: np.ndarray = field(repr=False)

    def __post_init__(self):
        data = np.array(self.data, dtype='float64')
        if data.shape != (self.nrows, self.ncols):
            raise ValueError(
                f"Grid data has shape {data.shape}, "
                f"header says ({self.nrows}, {self.ncols})"
            )
        data.setflags(write=False)
        object.__setattr__(self, 'data', data)

    def with_data(self, data: np.ndarray, **header) -> 'Grid':
        """Return a new grid with the same header and new cell values."""
        data = np.asarray(data, dtype='float64')
        header.setdefault('nrows', data.shape[0])
        header.setdefault('ncols', data.shape[1])
        return replace(self, data=data, **header)


def binarize_chm(chm: Grid, height_cut: float = 2.0) -> Grid:
    """Threshold a canopy height model: 1 above height_cut, 0 at or below."""
    data = chm.data
    binary = np.where(data > height_cut, 1.0, 0.0)
    binary[np.isnan(data)] = np.nan
    return chm.with_data(binary)
