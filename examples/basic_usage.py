"""
Basic usage examples for the mutual structure filter.
"""

from __future__ import annotations

import numpy as np

from msfilter import (
    FilterParams,
    MutualStructureFilter,
    PlaneSet,
    RasterImage,
    apply_mutual_structure_filter,
    filter_rasters,
)


def example_simple() -> PlaneSet:
    """Filter random planes with the default parameters."""

    target = PlaneSet.from_array(np.random.rand(256, 256, 3))
    guidance = PlaneSet.from_array(np.random.rand(256, 256, 3))
    msf = MutualStructureFilter()
    result = msf.process(target, guidance)
    print(f"Simple example output range: [{result.to_array().min():0.3f}, {result.to_array().max():0.3f}]")
    return result


def example_with_progress() -> PlaneSet:
    """Print progress while filtering with stronger smoothing."""

    target = PlaneSet.from_array(np.random.rand(128, 128, 3))
    guidance = PlaneSet.from_array(np.random.rand(128, 128, 3))
    params = FilterParams(radius=8, epsilon=0.02, iterations=5)
    return apply_mutual_structure_filter(
        target,
        guidance,
        params,
        progress=lambda percent: print(f"  progress: {percent:5.1f}%"),
    )


def example_rasters() -> RasterImage:
    """Filter packed RGBA rasters of different sizes."""

    target = RasterImage(np.random.randint(0, 256, size=(120, 160, 4), dtype=np.uint8))
    guidance = RasterImage(np.random.randint(0, 256, size=(60, 80, 4), dtype=np.uint8))
    result = filter_rasters(target, guidance, FilterParams(radius=3), resample_guidance=True)
    print(f"Raster example output: {result.width}x{result.height}")
    return result


if __name__ == "__main__":
    print("Running mutual structure filter basic examples...")
    example_simple()
    example_with_progress()
    example_rasters()
