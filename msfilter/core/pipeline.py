"""
Mutual structure filtering pipeline.
"""

from __future__ import annotations

import logging
from typing import Callable, Generator, Optional

import numpy as np

from msfilter.core.config import FilterParams, PipelineState
from msfilter.core.errors import (
    DimensionMismatchError,
    FilterCancelledError,
    InvalidParameterError,
)
from msfilter.filters.guided import guided_filter_channel
from msfilter.io.raster import resample_raster
from msfilter.utils.codec import PlaneSet, RasterImage, combine_planes, extract_planes
from msfilter.utils.color import planes_to_luma

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]
CancelCheck = Callable[[], bool]


class MutualStructureFilter:
    """
    Iterated guided filtering of a target image against a fixed guidance.

    Pipeline stages:
        1. Validation of parameters and plane dimensions
        2. Luma derivation from the guidance planes
        3. Per-iteration guided filtering of the R, G and B target planes

    The guidance luma is computed once and reused for every channel and
    every iteration; only the target planes evolve between iterations.
    """

    def __init__(self, params: Optional[FilterParams] = None) -> None:
        self.params = params or FilterParams()
        self.params.validate()

        self.state = PipelineState.IDLE
        self.iteration: Optional[int] = None
        self.result: Optional[PlaneSet] = None

        logger.info("Initializing mutual structure filter")
        logger.info("  radius: %d", self.params.radius)
        logger.info("  epsilon: %g", self.params.epsilon)
        logger.info("  iterations: %d", self.params.iterations)

    def process(
        self,
        target: PlaneSet,
        guidance: PlaneSet,
        progress: Optional[ProgressCallback] = None,
        should_cancel: Optional[CancelCheck] = None,
    ) -> PlaneSet:
        """
        Run every iteration and return the filtered target planes.

        ``progress`` receives ``k / iterations * 100`` before iteration ``k``
        and exactly 100 once the run has finished.
        """

        steps = self.iter_process(target, guidance, should_cancel=should_cancel)
        while True:
            try:
                percent = next(steps)
            except StopIteration as stop:
                return stop.value
            if progress is not None:
                progress(percent)

    def iter_process(
        self,
        target: PlaneSet,
        guidance: PlaneSet,
        should_cancel: Optional[CancelCheck] = None,
    ) -> Generator[float, None, PlaneSet]:
        """
        Cooperative form of :meth:`process`.

        Yields the progress percentage before each iteration's work and a
        final 100. The result planes are stored on ``self.result`` before
        the final 100 is yielded and are also the generator's return value.
        Validation happens before the first value is yielded.
        """

        self.state = PipelineState.PREPARING
        self.iteration = None
        self.result = None
        params = self.params

        try:
            gray, working = self._stage_prepare(target, guidance)

            for k in range(params.iterations):
                if should_cancel is not None and should_cancel():
                    logger.warning("Run cancelled before iteration %d of %d", k, params.iterations)
                    raise FilterCancelledError(f"Cancelled before iteration {k}")

                self.state = PipelineState.ITERATING
                self.iteration = k
                yield k / params.iterations * 100.0

                working = self._stage_iterate(working, gray, k)
        except BaseException:
            self.state = PipelineState.FAILED
            self.iteration = None
            raise

        self.result = working
        self.state = PipelineState.DONE
        self.iteration = None
        logger.info(
            "Filtering complete. Output range: [%0.3f, %0.3f]",
            float(min(np.min(plane) for plane in working)),
            float(max(np.max(plane) for plane in working)),
        )

        yield 100.0
        return working

    # ------------------------------------------------------------------
    # Individual pipeline stages
    # ------------------------------------------------------------------

    def _stage_prepare(self, target: PlaneSet, guidance: PlaneSet):
        logger.debug("Stage 1: validation and guidance luma")

        self.params.validate()

        if target.shape != guidance.shape:
            raise DimensionMismatchError(
                f"Target {target.width}x{target.height} does not match "
                f"guidance {guidance.width}x{guidance.height}"
            )

        for name, planes in (("target", target), ("guidance", guidance)):
            if not all(np.isfinite(plane).all() for plane in planes):
                raise InvalidParameterError(f"{name.capitalize()} planes contain NaN or Inf values")

        logger.info("Processing planes: %dx%d", target.width, target.height)

        gray = planes_to_luma(guidance)
        working = PlaneSet(target.r, target.g, target.b)
        return gray, working

    def _stage_iterate(self, working: PlaneSet, gray: np.ndarray, k: int) -> PlaneSet:
        logger.debug("Stage 2: guided filtering, iteration %d/%d", k + 1, self.params.iterations)

        radius = self.params.radius
        epsilon = self.params.epsilon
        return PlaneSet(
            guided_filter_channel(working.r, gray, radius, epsilon),
            guided_filter_channel(working.g, gray, radius, epsilon),
            guided_filter_channel(working.b, gray, radius, epsilon),
        )


def apply_mutual_structure_filter(
    target: PlaneSet,
    guidance: PlaneSet,
    params: Optional[FilterParams] = None,
    progress: Optional[ProgressCallback] = None,
) -> PlaneSet:
    """
    Convenience wrapper for filtering plane sets.
    """

    return MutualStructureFilter(params).process(target, guidance, progress=progress)


def filter_rasters(
    target: RasterImage,
    guidance: RasterImage,
    params: Optional[FilterParams] = None,
    progress: Optional[ProgressCallback] = None,
    resample_guidance: bool = False,
) -> RasterImage:
    """
    Filter an RGBA target raster against a guidance raster.

    The guidance must already match the target's dimensions unless
    ``resample_guidance`` is set, in which case it is resized first.
    """

    msf = MutualStructureFilter(params)

    if guidance.shape != target.shape:
        if not resample_guidance:
            raise DimensionMismatchError(
                f"Target {target.width}x{target.height} does not match "
                f"guidance {guidance.width}x{guidance.height}"
            )
        logger.warning(
            "Resampling guidance from %dx%d to %dx%d",
            guidance.width,
            guidance.height,
            target.width,
            target.height,
        )
        guidance = resample_raster(guidance, target.width, target.height)

    result = msf.process(extract_planes(target), extract_planes(guidance), progress=progress)
    return combine_planes(result)
