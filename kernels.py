"""Normalised smoothing kernels for the running mean filter."""
from functools import lru_cache
import numpy as np

from exceptions import InvalidRadius, UnknownKernelShape

MAX_RADIUS = 500

KERNEL_SHAPES = (
    'square', '1-disk', 'disk',
    'disk_north', 'disk_south', 'disk_east', 'disk_west',
    'rows', 'cols', 'single-ring-weighted',
)

# alternative names for the same kernel
SHAPE_ALIASES = {'single-ring-weighted': '1-disk'}


def check_radius(radius) -> int:
    """Return radius as an int, or raise InvalidRadius."""
    try:
        whole = round(radius)
    except (TypeError, ValueError, OverflowError) as exc:
        raise InvalidRadius(f"radius should be an integer, got {radius!r}") from exc
    if abs(whole - radius) > 0:
        raise InvalidRadius(f"radius should be an integer, got {radius!r}")
    if whole <= 0:
        raise InvalidRadius(f"radius should be a positive integer, got {radius!r}")
    if whole > MAX_RADIUS:
        raise InvalidRadius(f"radius should not exceed {MAX_RADIUS}, got {radius!r}")
    return int(whole)


def check_shape(shape: str) -> str:
    """Return the canonical lower-cased shape identifier, or raise UnknownKernelShape."""
    key = str(shape).lower()
    if key not in KERNEL_SHAPES:
        raise UnknownKernelShape(
            f"unknown kernel shape {shape!r}, expected one of {', '.join(KERNEL_SHAPES)}"
        )
    return SHAPE_ALIASES.get(key, key)


def make_kernel(radius: int = 1, shape: str = 'square') -> np.ndarray:
    """Build a kernel whose weights sum to one.

    Half-disk kernels keep only the cells strictly on one side of the
    centre, so the centre row (or column) itself carries no weight.
    The returned array is read-only and shared between callers.
    """
    radius, shape = check_radius(radius), check_shape(shape)
    if shape == '1-disk' and radius != 1:
        raise InvalidRadius(f"the '1-disk' kernel is fixed at radius 1, got {radius}")
    return _make_kernel(radius, shape)


@lru_cache(maxsize=None)
def _make_kernel(radius: int, shape: str) -> np.ndarray:
    size = 2 * radius + 1
    if shape == 'square':
        kernel = np.ones((size, size))
    elif shape == '1-disk':
        kernel = np.array([[0.5, 1.0, 0.5],
                           [1.0, 1.0, 1.0],
                           [0.5, 1.0, 0.5]])
    elif shape == 'rows':
        kernel = np.ones((1, size))
    elif shape == 'cols':
        kernel = np.ones((size, 1))
    else:
        # x runs along columns, y along rows
        x, y = np.meshgrid(np.arange(-radius, radius + 1), np.arange(-radius, radius + 1))
        inside = np.hypot(x, y) <= radius
        half = {
            'disk': True,
            'disk_north': y > 0,
            'disk_south': y < 0,
            'disk_east': x > 0,
            'disk_west': x < 0,
        }[shape]
        kernel = (inside & half).astype('float64')
    kernel = kernel / kernel.sum()
    kernel.setflags(write=False)
    return kernel
