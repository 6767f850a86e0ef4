"""
Advanced usage: image files and cooperative execution.
"""

from __future__ import annotations

import sys
import time

from msfilter import FilterParams, MutualStructureFilter, PlaneSet, combine_planes, extract_planes
from msfilter.io import load_raster, save_raster


def example_files(target_path: str, guidance_path: str, output_path: str) -> None:
    """Load two images, resample the guidance to the target and save the result."""

    target = load_raster(target_path)
    guidance = load_raster(guidance_path, size=(target.width, target.height))

    msf = MutualStructureFilter(FilterParams(radius=4, epsilon=0.005, iterations=3))
    result = msf.process(extract_planes(target), extract_planes(guidance))
    save_raster(combine_planes(result), output_path)
    print(f"Saved {output_path}")


def example_cooperative(target: PlaneSet, guidance: PlaneSet, budget_s: float = 5.0) -> PlaneSet:
    """Drive the pipeline step by step; raises FilterCancelledError past the time budget."""

    deadline = time.monotonic() + budget_s
    msf = MutualStructureFilter(FilterParams(iterations=10))
    steps = msf.iter_process(target, guidance, should_cancel=lambda: time.monotonic() > deadline)
    while True:
        try:
            percent = next(steps)
        except StopIteration as stop:
            return stop.value
        print(f"  {msf.state.value}: {percent:5.1f}%")


if __name__ == "__main__":
    if len(sys.argv) != 4:
        print("usage: advanced_usage.py TARGET GUIDANCE OUTPUT")
        sys.exit(1)
    example_files(*sys.argv[1:])
