"""
Constant-time box filtering with replicate boundaries.
"""

from __future__ import annotations

import numbers

import numpy as np
from scipy.ndimage import uniform_filter1d

from msfilter.core.errors import DimensionMismatchError, InvalidParameterError


def box_filter(plane: np.ndarray, radius: int) -> np.ndarray:
    """
    Mean over a ``(2*radius + 1)``-wide square window around every pixel.

    The filter is separable: a moving sum along each row, then along each
    column of the row-pass output. Each pass costs O(width * height)
    regardless of the radius. Window positions outside the image are clamped
    to the nearest valid row or column and the divisor stays ``2*radius + 1``
    even where the window is clipped, which matches a replicate-boundary box
    filter rather than an edge-renormalized average.

    Parameters
    ----------
    plane : np.ndarray
        Single-channel samples, shape (H, W)
    radius : int
        Window half-width in pixels; 0 returns an exact copy.

    Returns
    -------
    np.ndarray
        New float32 array of shape (H, W).
    """

    if isinstance(radius, bool) or not isinstance(radius, numbers.Integral):
        raise InvalidParameterError(f"Box filter radius must be an integer, got {radius!r}")
    if radius < 0:
        raise InvalidParameterError(f"Box filter radius {radius} must be >= 0")

    plane = np.asarray(plane, dtype=np.float32)
    if plane.ndim != 2:
        raise DimensionMismatchError(f"Expected H×W plane, got shape {plane.shape}")

    if radius == 0:
        return plane.copy()

    size = 2 * int(radius) + 1
    rows = uniform_filter1d(plane, size=size, axis=1, mode="nearest")
    return uniform_filter1d(rows, size=size, axis=0, mode="nearest")
