"""
Luma derivation for the guidance signal.
"""

from __future__ import annotations

import numpy as np

from msfilter.utils.codec import PlaneSet

# Rec. 601 luma weights
LUMA_WEIGHTS = (0.299, 0.587, 0.114)


def planes_to_luma(planes: PlaneSet) -> np.ndarray:
    """
    Weighted grayscale combination of the R, G, B planes.

    Returns a new read-only float32 array of shape (H, W).
    """

    wr, wg, wb = (np.float32(w) for w in LUMA_WEIGHTS)
    luma = wr * planes.r + wg * planes.g + wb * planes.b
    luma = luma.astype(np.float32, copy=False)
    luma.setflags(write=False)
    return luma
