from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Union
import logging

from models.image import RasterImage
from models.session import EditSession
from models.errors import InvalidActionError
from services.image_service import ImageService
from services.pixel_transform_service import PixelTransformService

logger = logging.getLogger(__name__)


class EditorService:
    """
    Command dispatcher for one editing session.

    Holds the current EditSession and swaps it for a new one only after an
    action has fully succeeded, so a failed decode, transform or export never
    leaves a half-updated session behind.
    """

    def __init__(self,
                 image_service: ImageService = None,
                 transform_service: PixelTransformService = None):
        self.image_service = image_service or ImageService()
        self.transform_service = transform_service or PixelTransformService()
        self.session = EditSession()

    # ─── File menu ─────────────────────────────────────────────────
    def open_image(self, data: bytes, filename: str = None) -> RasterImage:
        """Decode *data* and make it the new original. Drops any derived image."""
        image = self.image_service.decode(data, filename)
        self.session = self.session.load(image)
        logger.info(f"Opened {filename or 'image'} ({image.width}x{image.height})")
        return image

    def open_file(self, path: Union[str, Path]) -> RasterImage:
        image = self.image_service.load(path)
        self.session = self.session.load(image)
        logger.info(f"Opened {path} ({image.width}x{image.height})")
        return image

    def remove_image(self) -> None:
        if not self.session.has_image:
            raise InvalidActionError("No image to remove")
        self.session = self.session.remove_image()
        logger.info("Image removed")

    def remove_changes(self) -> None:
        if not self.session.can_remove_changes:
            raise InvalidActionError("No changes to remove")
        self.session = self.session.remove_changes()
        logger.info("Changes removed")

    def export(self) -> bytes:
        """Encode the derived image for download."""
        self._require_export()
        return self.image_service.encode(self.session.derived)

    def export_to(self, directory: Union[str, Path]) -> Path:
        """Write the derived image into *directory* under the export filename."""
        self._require_export()
        return self.image_service.export(self.session.derived, directory)

    @property
    def export_filename(self) -> str:
        return self.image_service.EXPORT_FILENAME

    # ─── Transform / filter menus ──────────────────────────────────
    def apply(self, operation: str) -> RasterImage:
        """
        Run *operation* against the original image (never against a previous
        result) and record the output as the derived image.
        """
        if not self.session.can_transform:
            raise InvalidActionError(f"Cannot apply {operation!r}: no image loaded")
        result = self.transform_service.apply(operation, self.session.original)
        self.session = self.session.apply(result)
        return result

    @property
    def operations(self) -> list[str]:
        return self.transform_service.operations

    # ─── State for the presentation shell ──────────────────────────
    def state(self) -> Dict[str, Any]:
        """Flags used to enable or disable menu actions."""
        session = self.session
        return {
            "has_image": session.has_image,
            "is_modified": session.is_modified,
            "can_transform": session.can_transform,
            "can_remove_changes": session.can_remove_changes,
            "can_export": session.can_export,
            "operations": self.operations,
        }

    def _require_export(self) -> None:
        if not self.session.can_export:
            raise InvalidActionError("Nothing to export: apply a transform first")
