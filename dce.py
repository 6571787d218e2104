"""Distance to canopy edge (DCE) grids from a binary canopy grid.

Three grids can be produced: the non-directional DCE and the distances
to the nearest north- and south-exposed canopy edge. Values are in the
input grid's distance units; cells that no frontier reached within the
step budget are NaN.

References
----------
Mazzotti, G., Currier, W. R., Deems, J. S., Pflug, J. M., Lundquist,
J. D., and Jonas, T. (2019) Revisiting Snow Cover Variability and Canopy
Structure within Forest Stands: Insights from Airborne Lidar Data.
Water Resources Research, 55(7), 6198-6216.
"""
from dataclasses import dataclass
from typing import Optional
import numpy as np

from edge_detection import DIRECTIONS, EdgeLabels, detect_edges
from grid import Grid
from resample import from_unit_resolution, to_unit_resolution

MODES = ('all', 'simple', 'directional')
DEFAULT_STEP_NR = 300


@dataclass
class DCEResult:
    """Output grids of calc_dce; grids not requested by the mode are None."""
    dce: Optional[Grid] = None
    ndce: Optional[Grid] = None
    sdce: Optional[Grid] = None


def compose_simple(labels: EdgeLabels) -> np.ndarray:
    """Merge open and canopy labels into one signed grid (canopy - open)."""
    open_labels = np.where(labels.open_labels < 0, 0, labels.open_labels)
    canopy_labels = np.where(labels.canopy_labels < 0, 0, labels.canopy_labels)
    merged = canopy_labels - open_labels
    merged[merged == 0] = np.nan
    return merged


def compose_directional(labels: EdgeLabels) -> np.ndarray:
    """Merge directional labels: open cells negative, canopy cells positive."""
    open_labels, canopy_labels = labels.open_labels, labels.canopy_labels
    merged = np.full(open_labels.shape, np.nan)
    reached_open = open_labels > 0
    reached_canopy = canopy_labels > 0
    merged[reached_open] = -open_labels[reached_open]
    merged[reached_canopy] = canopy_labels[reached_canopy]
    merged[(canopy_labels == 0) | (open_labels == 0)] = np.nan
    return merged


def _finish(merged: np.ndarray, template: Grid) -> Grid:
    out = from_unit_resolution(merged, template)
    return out.with_data(-1 * out.data)


def directional_dce(
    chm_bin: Grid,
    direction: str,
    step_nr: int = DEFAULT_STEP_NR,
    verbose: bool = False,
    unit_grid: Optional[Grid] = None
) -> Grid:
    """DCE for a single direction of DIRECTIONS ('simple' is non-directional).

    ``unit_grid`` may pass in the already resampled mask to avoid doing it
    again for every direction.
    """
    if direction not in DIRECTIONS:
        raise ValueError(
            f"unknown direction {direction!r}, expected one of {', '.join(DIRECTIONS)}"
        )
    if unit_grid is None:
        unit_grid = to_unit_resolution(chm_bin)
    open_shape, canopy_shape = DIRECTIONS[direction]
    if verbose:
        print(f"Computing {direction} DCE ...")
    labels = detect_edges(unit_grid.data, step_nr, open_shape, canopy_shape, verbose=verbose)
    if direction == 'simple':
        merged = compose_simple(labels)
    else:
        merged = compose_directional(labels)
    return _finish(merged, chm_bin)


def calc_dce(
    chm_bin: Grid,
    mode: str = 'all',
    step_nr: int = DEFAULT_STEP_NR,
    verbose: bool = False
) -> DCEResult:
    """Compute the DCE grids selected by ``mode``.

    mode 'all' computes the non-directional, north and south grids,
    'simple' only the non-directional one and 'directional' only north
    and south. ``chm_bin`` must already be binary (1 canopy, 0 open).
    """
    mode = str(mode).lower()
    if mode not in MODES:
        raise ValueError(f"unknown mode {mode!r}, expected one of {', '.join(MODES)}")
    unit_grid = to_unit_resolution(chm_bin)
    if verbose:
        print(
            f"Resampled {chm_bin.nrows}x{chm_bin.ncols} grid "
            f"(cellsize {chm_bin.cellsize:g}) to {unit_grid.nrows}x{unit_grid.ncols} unit cells"
        )
    result = DCEResult()
    if mode in ('all', 'simple'):
        result.dce = directional_dce(chm_bin, 'simple', step_nr, verbose, unit_grid)
    if mode in ('all', 'directional'):
        result.ndce = directional_dce(chm_bin, 'north', step_nr, verbose, unit_grid)
        result.sdce = directional_dce(chm_bin, 'south', step_nr, verbose, unit_grid)
    return result
