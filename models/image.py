from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
import numpy as np


@dataclass(frozen=True, eq=False)
class RasterImage:
    """
    Immutable RGBA raster: pixels (+ optional source path for bookkeeping).
    No OpenCV logic outside the repository and the transform service.
    """
    pixels: np.ndarray  # Shape (H, W, 4), dtype uint8, RGBA order, top-left origin.
    path: Path | None = field(default=None, compare=False)  # Source of the image.

    def __post_init__(self):
        pixels = self.pixels
        if not isinstance(pixels, np.ndarray):
            raise TypeError(f"pixels must be a numpy array, got {type(pixels).__name__}")
        if pixels.dtype != np.uint8:
            raise TypeError(f"pixels must be uint8, got {pixels.dtype}")
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise ValueError(f"pixels must have shape (H, W, 4), got {pixels.shape}")
        if pixels.shape[0] == 0 or pixels.shape[1] == 0:
            raise ValueError(f"image must be non-empty, got {pixels.shape[1]}x{pixels.shape[0]}")

        # Own a read-only, C-contiguous copy so no caller can mutate it later.
        frozen = np.array(pixels, dtype=np.uint8, order="C", copy=True)
        frozen.setflags(write=False)
        object.__setattr__(self, "pixels", frozen)
        if self.path is not None:
            object.__setattr__(self, "path", Path(self.path))

    @classmethod
    def from_array(cls, array: np.ndarray, path: str | Path | None = None) -> RasterImage:
        """Build an image from any numeric RGBA array, clipping into [0, 255]."""
        array = np.asarray(array)
        if np.issubdtype(array.dtype, np.floating):
            array = np.rint(array)
        return cls(np.clip(array, 0, 255).astype(np.uint8), path)

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    def with_pixels(self, pixels: np.ndarray) -> RasterImage:
        """Return a new image holding *pixels*; the source path is not carried over."""
        return RasterImage(pixels)

    def __eq__(self, other):
        if not isinstance(other, RasterImage):
            return NotImplemented
        return self.pixels.shape == other.pixels.shape and np.array_equal(self.pixels, other.pixels)

    __hash__ = None

    def __repr__(self):
        return f"RasterImage({self.width}x{self.height}, path={self.path!s})"
