import os, sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import numpy as np
import pytest
from edge_detection import DIRECTIONS, detect_edges, propagate_edges
from exceptions import UnknownKernelShape


def hole_mask():
    """7x7 canopy with a single open pixel in the middle."""
    mask = np.ones((7, 7))
    mask[3, 3] = 0.0
    return mask


def edge_mask(rows=20, cols=30):
    """Canopy in the southern half (rows 0-9), open above."""
    mask = np.zeros((rows, cols))
    mask[:10, :] = 1.0
    return mask


class TestHoleScenario:
    def test_first_step(self):
        steps = propagate_edges(hole_mask(), 2)
        step, open_labels, canopy_labels = next(steps)
        assert step == 1
        # the hole itself is reached from the surrounding canopy
        assert open_labels[3, 3] == 1
        for cell in [(2, 3), (4, 3), (3, 2), (3, 4)]:
            assert canopy_labels[cell] == 1
        for cell in [(2, 2), (2, 4), (4, 2), (4, 4)]:
            assert canopy_labels[cell] == 0

    def test_second_step(self):
        labels = detect_edges(hole_mask(), 2)
        expected = np.array([[2, 1, 2],
                             [1, -1, 1],
                             [2, 1, 2]])
        np.testing.assert_array_equal(labels.canopy_labels[2:5, 2:5], expected)
        # everything further away than the budget stays unlabelled
        ring = np.ones((7, 7), dtype=bool)
        ring[2:5, 2:5] = False
        assert np.all(labels.canopy_labels[ring] == 0)
        assert labels.open_labels[3, 3] == 1
        assert np.count_nonzero(labels.open_labels == -1) == 48


def test_labels_are_write_once_and_growing():
    rng = np.random.default_rng(42)
    mask = (rng.random((30, 30)) > 0.6).astype(float)
    previous = None
    for _, open_labels, canopy_labels in propagate_edges(mask, 8):
        current = (open_labels.copy(), canopy_labels.copy())
        if previous is not None:
            for before, after in zip(previous, current):
                reached = before > 0
                np.testing.assert_array_equal(after[reached], before[reached])
                assert np.all((after > 0)[reached])
                assert np.count_nonzero(after > 0) >= np.count_nonzero(reached)
        previous = current


def test_seeds_are_never_overwritten():
    rng = np.random.default_rng(7)
    mask = (rng.random((15, 15)) > 0.5).astype(float)
    labels = detect_edges(mask, 5)
    np.testing.assert_array_equal(labels.open_labels[mask == 1], -1)
    np.testing.assert_array_equal(labels.canopy_labels[mask == 0], -1)


def test_all_open_mask_is_never_reached():
    labels = detect_edges(np.zeros((10, 10)), 5)
    assert np.all(labels.open_labels == 0)
    assert np.all(labels.canopy_labels == -1)


def test_zero_steps_returns_seeds():
    mask = hole_mask()
    labels = detect_edges(mask, 0)
    np.testing.assert_array_equal(labels.open_labels, -mask)
    np.testing.assert_array_equal(labels.canopy_labels, mask - 1)


def test_north_kernels_spread_northward():
    labels = detect_edges(edge_mask(), 4, *DIRECTIONS['north'])
    np.testing.assert_array_equal(labels.open_labels[10:14, 15], [1, 2, 3, 4])
    np.testing.assert_array_equal(labels.canopy_labels[6:10, 15], [4, 3, 2, 1])


def test_south_kernels_do_not_reach_a_north_facing_edge():
    labels = detect_edges(edge_mask(), 4, *DIRECTIONS['south'])
    assert np.all(labels.open_labels[10:, :] == 0)
    assert np.all(labels.canopy_labels[:10, :] == 0)


def test_symmetric_kernels_label_both_sides():
    labels = detect_edges(edge_mask(), 4)
    np.testing.assert_array_equal(labels.open_labels[10:14, 15], [1, 2, 3, 4])
    np.testing.assert_array_equal(labels.canopy_labels[6:10, 15], [4, 3, 2, 1])


def test_undefined_border_grows_each_step():
    labels = detect_edges(edge_mask(), 4, *DIRECTIONS['north'])
    # row 14 would be step 5, and rows near the border are never evaluated
    assert labels.open_labels[14, 15] == 0
    assert np.all(labels.open_labels[10:, 0] == 0)


def test_nan_cells_stay_unlabelled():
    mask = edge_mask()
    mask[11, 15] = np.nan
    labels = detect_edges(mask, 4)
    assert np.isnan(labels.open_labels[11, 15])
    assert np.isnan(labels.canopy_labels[11, 15])


def test_unknown_kernel_shape():
    with pytest.raises(UnknownKernelShape):
        detect_edges(edge_mask(), 2, 'disk_up', 'disk')


def test_unknown_kernel_shape_fails_before_iterating():
    with pytest.raises(UnknownKernelShape):
        propagate_edges(edge_mask(), 2, 'disk', 'disk_up')


def test_detect_edges_matches_last_propagated_step():
    mask = hole_mask()
    *_, (step, open_labels, canopy_labels) = propagate_edges(mask, 3)
    labels = detect_edges(mask, 3)
    assert step == 3
    np.testing.assert_array_equal(labels.open_labels, open_labels)
    np.testing.assert_array_equal(labels.canopy_labels, canopy_labels)


def test_verbose(capsys):
    detect_edges(hole_mask(), 1, verbose=True)
    out = capsys.readouterr().out
    assert "cells unlabelled" in out, f"Expected progress output, got: {out!r}"


def test_quiet_by_default(capsys):
    detect_edges(hole_mask(), 1)
    assert capsys.readouterr().out == ""
