"""Mutual Structure Filter (msfilter).

Extracts structure shared between a target and a guidance image while
smoothing away texture in the target, by iterated guided filtering against
the guidance luma.
"""

from msfilter.core.config import FilterParams, PipelineState
from msfilter.core.errors import (
    DimensionMismatchError,
    FilterCancelledError,
    InvalidParameterError,
    MutualStructureError,
    SourceDecodeError,
    UnsupportedFormatError,
)
from msfilter.core.pipeline import (
    MutualStructureFilter,
    apply_mutual_structure_filter,
    filter_rasters,
)
from msfilter.filters import box_filter, guided_filter_channel
from msfilter.utils.codec import PlaneSet, RasterImage, combine_planes, extract_planes

__all__ = [
    "MutualStructureFilter",
    "FilterParams",
    "PipelineState",
    "PlaneSet",
    "RasterImage",
    "apply_mutual_structure_filter",
    "filter_rasters",
    "box_filter",
    "guided_filter_channel",
    "extract_planes",
    "combine_planes",
    "MutualStructureError",
    "InvalidParameterError",
    "DimensionMismatchError",
    "SourceDecodeError",
    "UnsupportedFormatError",
    "FilterCancelledError",
]

__version__ = "1.0.0"
