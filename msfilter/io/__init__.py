"""Image file input and output."""

from msfilter.io.raster import load_raster, resample_raster, save_raster

__all__ = ["load_raster", "resample_raster", "save_raster"]
