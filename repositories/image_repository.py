from __future__ import annotations
from io import BytesIO
from pathlib import Path
from typing import Union
import logging

import numpy as np
import cv2
from PIL import Image as PILImage

from models.image import RasterImage
from models.errors import DecodeError, EncodeError

logger = logging.getLogger(__name__)

# Pillow format name -> save() keyword arguments
ENCODE_OPTIONS = {
    "PNG": {},
    "WEBP": {"lossless": True},
    "BMP": {},
    "JPEG": {"quality": 95},
}
FORMAT_ALIASES = {"JPG": "JPEG"}
SUFFIX_FORMATS = {
    ".png": "PNG",
    ".webp": "WEBP",
    ".bmp": "BMP",
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
}


class ImageRepository:
    """
    Converts between encoded image bytes and RasterImage entities.
    Decoding goes through OpenCV, encoding through Pillow.
    """

    @staticmethod
    def normalise_format(fmt: str) -> str:
        name = (fmt or "").strip().lstrip(".").upper()
        name = FORMAT_ALIASES.get(name, name)
        if name not in ENCODE_OPTIONS:
            raise EncodeError(
                f"Unsupported export format {fmt!r}; expected one of {sorted(ENCODE_OPTIONS)}"
            )
        return name

    @staticmethod
    def _to_rgba(arr: np.ndarray) -> np.ndarray:
        # 16-bit sources are scaled down to 8 bits per channel
        if arr.dtype == np.uint16:
            arr = cv2.convertScaleAbs(arr, alpha=255.0 / 65535.0)
        elif arr.dtype != np.uint8:
            raise DecodeError(f"Unsupported sample type: {arr.dtype}")

        if arr.ndim == 2 or (arr.ndim == 3 and arr.shape[2] == 1):
            return cv2.cvtColor(arr, cv2.COLOR_GRAY2RGBA)
        if arr.shape[2] == 3:
            return cv2.cvtColor(arr, cv2.COLOR_BGR2RGBA)
        if arr.shape[2] == 4:
            return cv2.cvtColor(arr, cv2.COLOR_BGRA2RGBA)
        raise DecodeError(f"Unsupported channel layout: {arr.shape}")

    def decode(self, data: bytes, path: Union[str, Path, None] = None) -> RasterImage:
        """Decode PNG/JPEG/... bytes into an RGBA RasterImage."""
        if not data:
            raise DecodeError("No image data")

        buffer = np.frombuffer(data, dtype=np.uint8)
        try:
            arr = cv2.imdecode(buffer, cv2.IMREAD_UNCHANGED)
        except cv2.error as err:
            raise DecodeError(f"Malformed image data: {err}") from err

        if arr is None:
            raise DecodeError("Malformed or unsupported image data")

        rgba = self._to_rgba(arr)
        image = RasterImage(rgba, path)
        logger.debug(f"Decoded {len(data)} bytes into {image.width}x{image.height} RGBA")
        return image

    @staticmethod
    def to_pil_image(image: RasterImage) -> PILImage.Image:
        """RasterImage.pixels -> Pillow RGBA image (on a writable copy)."""
        return PILImage.fromarray(image.pixels.copy())

    def encode(self, image: RasterImage, fmt: str = "PNG") -> bytes:
        """Encode *image* with Pillow. PNG round-trips RGBA losslessly."""
        name = self.normalise_format(fmt)
        pil_image = self.to_pil_image(image)
        if name == "JPEG":
            pil_image = pil_image.convert("RGB")

        buffer = BytesIO()
        try:
            pil_image.save(buffer, format=name, **ENCODE_OPTIONS[name])
        except (OSError, ValueError, KeyError) as err:
            raise EncodeError(f"Could not encode image as {name}: {err}") from err
        return buffer.getvalue()

    def load(self, path: Union[str, Path]) -> RasterImage:
        path = Path(path)
        if not path.is_file():
            raise DecodeError(f"Image not found or unreadable: {path}")
        return self.decode(path.read_bytes(), path)

    def save(self, image: RasterImage, path: Union[str, Path]) -> Path:
        """Write *image* to *path*; the format follows the file suffix."""
        path = Path(path)
        fmt = SUFFIX_FORMATS.get(path.suffix.lower())
        if fmt is None:
            raise EncodeError(f"Cannot infer an export format from {path.name!r}")

        data = self.encode(image, fmt)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as err:
            raise EncodeError(f"Could not write {path}: {err}") from err
        logger.info(f"Saved {image.width}x{image.height} image to {path}")
        return path
