"""
Single-channel guided filter (He et al., 2010) built on the box filter.
"""

from __future__ import annotations

import math
import numbers

import numpy as np

from msfilter.core.errors import DimensionMismatchError, InvalidParameterError
from msfilter.filters.box import box_filter


def guided_filter_channel(
    p: np.ndarray,
    guide: np.ndarray,
    radius: int,
    epsilon: float,
) -> np.ndarray:
    """
    Filter ``p`` under the structure of ``guide``.

    Fits the local affine model ``p ≈ a * guide + b`` in every window,
    averages the overlapping coefficients and evaluates them at each pixel.
    Where the guide is flat ``a`` tends to 0 and the output falls back to the
    local mean of ``p``; across guide edges ``a`` tends to 1 and the edge is
    carried into the output.

    Parameters
    ----------
    p : np.ndarray
        Filtering input, shape (H, W)
    guide : np.ndarray
        Guidance plane, shape (H, W)
    radius : int
        Window half-width in pixels
    epsilon : float
        Regularization; larger values treat more local variance as texture.

    Returns
    -------
    np.ndarray
        New float32 array of shape (H, W). Values are not clamped.
    """

    if isinstance(epsilon, bool) or not isinstance(epsilon, numbers.Real):
        raise InvalidParameterError(f"Epsilon must be a real number, got {epsilon!r}")
    if not math.isfinite(epsilon) or epsilon <= 0:
        raise InvalidParameterError(f"Epsilon {epsilon} must be a positive finite number")

    p = np.asarray(p, dtype=np.float32)
    guide = np.asarray(guide, dtype=np.float32)
    if p.shape != guide.shape:
        raise DimensionMismatchError(
            f"Input shape {p.shape} does not match guidance shape {guide.shape}"
        )

    eps = np.float32(epsilon)

    mean_i = box_filter(guide, radius)
    mean_p = box_filter(p, radius)
    mean_ii = box_filter(guide * guide, radius)
    mean_ip = box_filter(guide * p, radius)

    var_i = mean_ii - mean_i * mean_i
    cov_ip = mean_ip - mean_i * mean_p

    a = cov_ip / (var_i + eps)
    b = mean_p - a * mean_i

    mean_a = box_filter(a, radius)
    mean_b = box_filter(b, radius)

    return mean_a * guide + mean_b
