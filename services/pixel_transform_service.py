from __future__ import annotations

from typing import Callable, Dict
import os
import logging

import cv2
import numpy as np
from dotenv import load_dotenv

from models.image import RasterImage
from models.image_adjustments import PointAdjustments, contrast_factor
from models.errors import UnknownOperationError

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

SUPPORTED_SCALE_FACTORS = (1.5, 0.5)
TRANSPARENT = (0, 0, 0, 0)


class PixelTransformService:
    """
    Pixel-transform engine.
    *   Every operation is a pure static function RasterImage -> RasterImage.
    *   The input image is never modified; a new buffer is always returned.
    *   Geometric remaps keep the input canvas size and fill uncovered
        pixels with transparent black.
    *   Point filters touch R, G and B only; alpha is copied through.
    """

    def __init__(self,
                 dx: int = None,
                 dy: int = None,
                 zoom_in: float = None,
                 zoom_out: float = None,
                 adjustments: PointAdjustments = None):
        self.dx = dx if dx is not None else int(os.getenv("TRANSLATE_DX", "50"))
        self.dy = dy if dy is not None else int(os.getenv("TRANSLATE_DY", "30"))
        self.zoom_in = zoom_in if zoom_in is not None else float(os.getenv("ZOOM_IN_FACTOR", "1.5"))
        self.zoom_out = zoom_out if zoom_out is not None else float(os.getenv("ZOOM_OUT_FACTOR", "0.5"))
        self.adjustments = adjustments or PointAdjustments(
            brightness=int(os.getenv("BRIGHTNESS_DELTA", "40")),
            contrast=int(os.getenv("CONTRAST_AMOUNT", "30")),
        )

        # Command dispatch: menu action name -> engine call with configured defaults
        self._operations: Dict[str, Callable[[RasterImage], RasterImage]] = {
            "translate":  lambda img: self.translate(img, self.dx, self.dy),
            "rotate":     self.rotate90,
            "mirror":     self.mirror,
            "zoom_in":    lambda img: self.scale(img, self.zoom_in),
            "zoom_out":   lambda img: self.scale(img, self.zoom_out),
            "brightness": lambda img: self.brightness(img, self.adjustments.brightness),
            "contrast":   lambda img: self.contrast(img, self.adjustments.contrast),
            "grayscale":  self.grayscale,
        }

    # ─── Public API ────────────────────────────────────────────────
    @property
    def operations(self) -> list[str]:
        return list(self._operations)

    def apply(self, operation: str, img: RasterImage) -> RasterImage:
        """Run the engine operation registered under *operation*."""
        try:
            func = self._operations[operation]
        except KeyError:
            raise UnknownOperationError(operation) from None

        result = func(img)
        logger.info(f"Applied {operation} to {img.width}x{img.height} image")
        return result

    # ─── Geometric remaps ──────────────────────────────────────────
    @staticmethod
    def _warp(img: RasterImage, matrix) -> RasterImage:
        """
        Forward affine warp onto a canvas of the input's size.
        Nearest-neighbour sampling, constant transparent border.
        """
        warped = cv2.warpAffine(
            img.pixels,
            np.asarray(matrix, dtype=np.float64),
            (img.width, img.height),
            flags=cv2.INTER_NEAREST,
            borderMode=cv2.BORDER_CONSTANT,
            borderValue=TRANSPARENT,
        )
        return img.with_pixels(warped)

    @staticmethod
    def translate(img: RasterImage, dx: int = 50, dy: int = 30) -> RasterImage:
        """out(x, y) = in(x - dx, y - dy)."""
        return PixelTransformService._warp(img, [[1, 0, dx],
                                                 [0, 1, dy]])

    @staticmethod
    def rotate90(img: RasterImage) -> RasterImage:
        """
        Rotate +90 degrees (clockwise on screen) about the centre of the
        rotated content, which is h wide and w tall and anchored at the
        top-left of the original w x h canvas. Non-square images are
        clipped and padded.
        """
        h = img.height
        # in(u, v) -> out(h - 1 - v, u)
        return PixelTransformService._warp(img, [[0, -1, h - 1],
                                                 [1,  0, 0]])

    @staticmethod
    def mirror(img: RasterImage) -> RasterImage:
        """Horizontal flip: out(x, y) = in(w - 1 - x, y)."""
        return PixelTransformService._warp(img, [[-1, 0, img.width - 1],
                                                 [0,  1, 0]])

    @staticmethod
    def scale(img: RasterImage, factor: float) -> RasterImage:
        """
        Zoom anchored at the top-left origin on a canvas of the input's size:
        1.5 crops the enlarged content, 0.5 leaves a transparent margin.
        Sampling is nearest-neighbour: out(x, y) = in(round(x / f), round(y / f)).
        """
        if factor not in SUPPORTED_SCALE_FACTORS:
            raise ValueError(f"Unsupported scale factor {factor}; expected one of {SUPPORTED_SCALE_FACTORS}")
        return PixelTransformService._warp(img, [[factor, 0, 0],
                                                 [0, factor, 0]])

    # ─── Point filters ─────────────────────────────────────────────
    @staticmethod
    def _replace_rgb(img: RasterImage, rgb: np.ndarray) -> RasterImage:
        out = img.pixels.astype(np.float64)
        out[..., :3] = rgb
        return RasterImage.from_array(out)

    @staticmethod
    def brightness(img: RasterImage, delta: int = 40) -> RasterImage:
        """c' = clamp(c + delta, 0, 255) for R, G, B."""
        rgb = img.pixels[..., :3].astype(np.int32) + int(delta)
        return PixelTransformService._replace_rgb(img, rgb)

    @staticmethod
    def contrast(img: RasterImage, amount: float = 30) -> RasterImage:
        """
        c' = clamp(f * (c - 128) + 128, 0, 255), rounded half-to-even,
        with f = 259 (amount + 255) / (255 (259 - amount)).
        """
        f = contrast_factor(amount)
        rgb = np.rint(f * (img.pixels[..., :3].astype(np.float64) - 128.0) + 128.0)
        return PixelTransformService._replace_rgb(img, rgb)

    @staticmethod
    def grayscale(img: RasterImage) -> RasterImage:
        """
        Luma 0.299 R + 0.587 G + 0.114 B, rounded half-to-even.
        Idempotent since the weights sum to one.
        """
        r, g, b = np.moveaxis(img.pixels[..., :3].astype(np.float64), -1, 0)
        gray = np.rint(0.299 * r + 0.587 * g + 0.114 * b)
        return PixelTransformService._replace_rgb(img, gray[..., np.newaxis])
