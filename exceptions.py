"""Errors raised by the DCE computation.

All of them derive from ValueError so callers that only care about bad input
can catch that.
"""


class DCEError(ValueError):
    """Base class for fatal errors in the DCE computation."""


class InvalidRadius(DCEError):
    """Kernel radius is not an integer in 1..500."""


class UnknownKernelShape(DCEError):
    """Kernel shape identifier is not supported."""


class DimensionMismatch(DCEError):
    """A resampled grid came back smaller than the grid it should match."""
