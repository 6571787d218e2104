"""Running mean filter based on a valid-region convolution.

Cells whose window does not fit inside the grid are left as NaN rather
than padded, so repeated filtering grows the undefined border by the
kernel radius each time.
"""
import numpy as np
from scipy.signal import convolve2d

from kernels import make_kernel


def running_mean(grid, radius=1, shape='square'):
    """Smooth a 2-D array with the kernel of the given radius and shape.

    Returns an array of the same shape as ``grid``; the band of width
    ``radius`` along each filtered axis is NaN.
    """
    kernel = make_kernel(radius, shape)
    grid = np.asarray(grid, dtype='float64')
    out = np.full(grid.shape, np.nan)
    k_rows, k_cols = kernel.shape
    if grid.shape[0] < k_rows or grid.shape[1] < k_cols:
        return out
    r_off, c_off = k_rows // 2, k_cols // 2
    smoothed = convolve2d(grid, kernel, mode='valid')
    out[r_off:grid.shape[0] - r_off, c_off:grid.shape[1] - c_off] = smoothed
    return out
