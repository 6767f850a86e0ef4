"""
Exception types raised by the mutual structure filter.
"""

from __future__ import annotations


class MutualStructureError(ValueError):
    """Base class for invalid input reported by the filter."""


class InvalidParameterError(MutualStructureError):
    """A filter parameter is outside its valid range."""


class DimensionMismatchError(MutualStructureError):
    """Planes or rasters that must share dimensions do not."""


class SourceDecodeError(MutualStructureError):
    """Raster data could not be decoded from its source."""


class UnsupportedFormatError(MutualStructureError):
    """Raster dimensions or layout cannot be represented."""


class FilterCancelledError(RuntimeError):
    """A run was cancelled between iterations."""
