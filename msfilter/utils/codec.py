"""
Raster containers and conversion between packed RGBA bytes and float planes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Tuple, Union

import numpy as np

from msfilter.core.errors import DimensionMismatchError, UnsupportedFormatError

CHANNELS = ("r", "g", "b")


@dataclass(frozen=True, eq=False)
class RasterImage:
    """
    Immutable 8-bit RGBA raster.

    ``data`` has shape (H, W, 4), dtype uint8, rows top-to-bottom.
    """

    data: np.ndarray

    def __post_init__(self) -> None:
        data = np.asarray(self.data)
        if data.ndim != 3 or data.shape[2] != 4:
            raise UnsupportedFormatError(f"Expected H×W×4 RGBA data, got shape {data.shape}")
        if data.shape[0] <= 0 or data.shape[1] <= 0:
            raise UnsupportedFormatError(f"Raster dimensions must be positive, got {data.shape[:2]}")
        if data.dtype != np.uint8:
            if data.dtype.kind not in "iu":
                raise UnsupportedFormatError(f"Expected 8-bit integer samples, got dtype {data.dtype}")
            if data.min() < 0 or data.max() > 255:
                raise UnsupportedFormatError(
                    f"Samples must lie in [0, 255], got [{data.min()}, {data.max()}]"
                )
        data = np.array(data, dtype=np.uint8, copy=True)
        data.setflags(write=False)
        object.__setattr__(self, "data", data)

    @classmethod
    def from_bytes(cls, buffer: Union[bytes, bytearray, memoryview], width: int, height: int) -> "RasterImage":
        """Build a raster from an interleaved RGBA byte buffer."""

        if width <= 0 or height <= 0:
            raise UnsupportedFormatError(f"Raster dimensions must be positive, got {width}x{height}")

        flat = np.frombuffer(buffer, dtype=np.uint8)
        expected = width * height * 4
        if flat.size != expected:
            raise UnsupportedFormatError(
                f"Buffer holds {flat.size} bytes, expected {expected} for {width}x{height} RGBA"
            )
        return cls(flat.reshape(height, width, 4))

    @property
    def width(self) -> int:
        return int(self.data.shape[1])

    @property
    def height(self) -> int:
        return int(self.data.shape[0])

    @property
    def shape(self) -> Tuple[int, int]:
        return self.height, self.width

    def to_bytes(self) -> bytes:
        return self.data.tobytes()


@dataclass(eq=False)
class PlaneSet:
    """
    Three independent float32 planes (R, G, B), each of shape (H, W).

    Samples start in [0, 1] but are not re-clamped while filtering.
    """

    r: np.ndarray
    g: np.ndarray
    b: np.ndarray

    def __post_init__(self) -> None:
        self.r = np.array(self.r, dtype=np.float32, copy=True)
        self.g = np.array(self.g, dtype=np.float32, copy=True)
        self.b = np.array(self.b, dtype=np.float32, copy=True)

        if self.r.ndim != 2:
            raise DimensionMismatchError(f"Expected H×W planes, got shape {self.r.shape}")
        if not (self.r.shape == self.g.shape == self.b.shape):
            raise DimensionMismatchError(
                f"Channel shapes differ: r={self.r.shape} g={self.g.shape} b={self.b.shape}"
            )

    @classmethod
    def from_array(cls, rgb: np.ndarray) -> "PlaneSet":
        """Split an (H, W, 3) array into planes."""

        rgb = np.asarray(rgb)
        if rgb.ndim != 3 or rgb.shape[2] != 3:
            raise DimensionMismatchError(f"Expected H×W×3 image, got shape {rgb.shape}")
        return cls(rgb[:, :, 0], rgb[:, :, 1], rgb[:, :, 2])

    @property
    def width(self) -> int:
        return int(self.r.shape[1])

    @property
    def height(self) -> int:
        return int(self.r.shape[0])

    @property
    def shape(self) -> Tuple[int, int]:
        return self.height, self.width

    def __iter__(self) -> Iterator[np.ndarray]:
        return iter((self.r, self.g, self.b))

    def to_array(self) -> np.ndarray:
        """Stack the planes into an (H, W, 3) float32 array."""

        return np.stack([self.r, self.g, self.b], axis=-1)


def extract_planes(raster: RasterImage) -> PlaneSet:
    """
    Normalize R, G, B samples to [0, 1]; alpha is dropped.
    """

    rgb = raster.data[:, :, :3].astype(np.float32) / np.float32(255.0)
    return PlaneSet.from_array(rgb)


def combine_planes(planes: PlaneSet) -> RasterImage:
    """
    Scale planes back to 8 bits, clamp to [0, 255], round and set alpha opaque.
    """

    rgb = np.clip(planes.to_array() * np.float32(255.0), 0.0, 255.0)
    data = np.empty((planes.height, planes.width, 4), dtype=np.uint8)
    data[:, :, :3] = np.rint(rgb).astype(np.uint8)
    data[:, :, 3] = 255
    return RasterImage(data)
