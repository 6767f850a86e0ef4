"""
Decoding, resampling and encoding of RGBA rasters with Pillow.

These helpers stand in for the host application's image loading and are
kept apart from the numeric core.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Tuple, Union

import numpy as np
from PIL import Image

from msfilter.core.errors import SourceDecodeError, UnsupportedFormatError
from msfilter.utils.codec import RasterImage

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def load_raster(path: PathLike, size: Optional[Tuple[int, int]] = None) -> RasterImage:
    """
    Decode an image file into an RGBA raster.

    Parameters
    ----------
    path : str or Path
        Any file Pillow can read
    size : tuple of int, optional
        ``(width, height)`` to resample to, e.g. the target's dimensions when
        loading a guidance image.
    """

    path = Path(path)
    try:
        with Image.open(path) as img:
            img.load()
            rgba = img.convert("RGBA")
    except OSError as exc:
        raise SourceDecodeError(f"Image not found or unreadable: {path}") from exc

    if rgba.width <= 0 or rgba.height <= 0:
        raise UnsupportedFormatError(f"Image {path} has zero size")

    if size is not None and tuple(size) != rgba.size:
        size = (int(size[0]), int(size[1]))
        _check_size(*size)
        logger.debug("Resampling %s from %dx%d to %dx%d", path, rgba.width, rgba.height, *size)
        rgba = _resize_rgba(rgba, size)

    logger.info("Loaded %s: %dx%d", path, rgba.width, rgba.height)
    return RasterImage(np.asarray(rgba))


def resample_raster(raster: RasterImage, width: int, height: int) -> RasterImage:
    """Bilinear resize of a raster to ``width`` x ``height``."""

    _check_size(width, height)
    if (width, height) == (raster.width, raster.height):
        return raster

    img = Image.fromarray(np.array(raster.data))
    return RasterImage(np.asarray(_resize_rgba(img, (width, height))))


def save_raster(raster: RasterImage, path: PathLike) -> None:
    """Encode a raster; the format follows the file extension."""

    path = Path(path)
    Image.fromarray(np.array(raster.data)).save(path)
    logger.info("Saved %s: %dx%d", path, raster.width, raster.height)


def _check_size(width: int, height: int) -> None:
    if width <= 0 or height <= 0:
        raise UnsupportedFormatError(f"Raster dimensions must be positive, got {width}x{height}")


def _resize_rgba(img: Image.Image, size: Tuple[int, int]) -> Image.Image:
    # Color is resampled without alpha premultiplication.
    rgb = img.convert("RGB").resize(size, Image.Resampling.BILINEAR)
    alpha = img.getchannel("A").resize(size, Image.Resampling.BILINEAR)
    return Image.merge("RGBA", (*rgb.split(), alpha))
