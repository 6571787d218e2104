"""Iterative edge detection on a binary canopy mask.

Two frontiers are grown outward from the canopy/open boundary, one into
the open pixels and one into the canopy pixels. At every step each
frontier is smoothed with a radius-1 kernel and re-binarized, which
dilates it by roughly one cell. Cells reached for the first time are
labelled with the step number, so after the last step a label is an
approximate distance (in cells) to the nearest edge.

Half-disk kernels only let the frontier spread in one direction, which
is how the north/south (and east/west) variants are obtained.
"""
from collections import deque
from dataclasses import dataclass
from typing import Iterator, Tuple
import numpy as np

from kernels import check_shape
from running_mean import running_mean

# direction -> (kernel for the open-pixel run, kernel for the canopy-pixel run)
DIRECTIONS = {
    'simple': ('disk', 'disk'),
    'north': ('disk_north', 'disk_south'),
    'south': ('disk_south', 'disk_north'),
    'east': ('disk_east', 'disk_west'),
    'west': ('disk_west', 'disk_east'),
}


@dataclass
class EdgeLabels:
    """Step labels of open and canopy pixels after a detector run.

    0 means never reached, -1 means the cell belongs to the other class,
    NaN marks no-data cells.
    """
    open_labels: np.ndarray
    canopy_labels: np.ndarray

    def unlabelled(self) -> int:
        """Number of cells neither frontier reached."""
        return int(np.count_nonzero((self.open_labels == 0) | (self.canopy_labels == 0)))


def _advance(labels: np.ndarray, smoothed: np.ndarray, step: int) -> None:
    labels[(labels == 0) & (smoothed > 0)] = step


def _rebinarize(smoothed: np.ndarray) -> np.ndarray:
    # NaN (the undefined border) is carried into the next step
    return np.where(smoothed > 0, 1.0, smoothed)


def _steps(
    mask: np.ndarray,
    labels: EdgeLabels,
    step_nr: int,
    open_shape: str,
    canopy_shape: str
) -> Iterator[Tuple[int, np.ndarray, np.ndarray]]:
    frontier_open = mask.copy()
    frontier_canopy = 1 - mask
    for step in range(1, step_nr + 1):
        smoothed_open = running_mean(frontier_open, 1, open_shape)
        smoothed_canopy = running_mean(frontier_canopy, 1, canopy_shape)
        _advance(labels.open_labels, smoothed_open, step)
        _advance(labels.canopy_labels, smoothed_canopy, step)
        frontier_open = _rebinarize(smoothed_open)
        frontier_canopy = _rebinarize(smoothed_canopy)
        yield step, labels.open_labels, labels.canopy_labels


def _start(mask, open_shape, canopy_shape):
    open_shape, canopy_shape = check_shape(open_shape), check_shape(canopy_shape)
    mask = np.asarray(mask, dtype='float64')
    return mask, EdgeLabels(-mask, mask - 1), open_shape, canopy_shape


def propagate_edges(
    mask: np.ndarray,
    step_nr: int,
    open_shape: str = 'disk',
    canopy_shape: str = 'disk'
) -> Iterator[Tuple[int, np.ndarray, np.ndarray]]:
    """Yield ``(step, open_labels, canopy_labels)`` after every step.

    ``mask`` holds 1 for canopy and 0 for open pixels. Kernel shapes are
    checked on the call itself. The yielded arrays are updated in place by
    the following steps; copy them to keep a snapshot.
    """
    mask, labels, open_shape, canopy_shape = _start(mask, open_shape, canopy_shape)
    return _steps(mask, labels, step_nr, open_shape, canopy_shape)


def detect_edges(
    mask: np.ndarray,
    step_nr: int,
    open_shape: str = 'disk',
    canopy_shape: str = 'disk',
    verbose: bool = False
) -> EdgeLabels:
    """Run the detector for ``step_nr`` steps and return the final labels."""
    mask, labels, open_shape, canopy_shape = _start(mask, open_shape, canopy_shape)
    deque(_steps(mask, labels, step_nr, open_shape, canopy_shape), maxlen=0)
    if verbose:
        print(
            f"Edge detection ({open_shape}/{canopy_shape}, {step_nr} steps): "
            f"{labels.unlabelled()} cells unlabelled"
        )
    return labels
