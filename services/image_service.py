from __future__ import annotations

from pathlib import Path
from typing import Union
import base64
import os
import logging

from dotenv import load_dotenv

from models.image import RasterImage
from repositories.image_repository import ImageRepository

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


class ImageService:
    """I/O helpers around the raster adapter.  No transform logic here."""
    def __init__(self):
        self.EXPORT_FILENAME = os.getenv("EXPORT_FILENAME", "imagem_transformada.png")
        self.EXPORT_FORMAT = os.getenv("EXPORT_FORMAT", "PNG")
        self.PREVIEW_FORMAT = os.getenv("PREVIEW_FORMAT", "PNG")
        self.VALID_EXTS = {
            ext.strip().lower().lstrip(".")
            for ext in os.getenv("ALLOWED_EXTENSIONS", "png,jpg,jpeg,gif,bmp,webp,tif,tiff").split(",")
            if ext.strip()
        }
        self.image_repository = ImageRepository()

    def is_allowed_file(self, filename: str) -> bool:
        """Check the upload's extension against the allow-list."""
        return "." in filename and filename.rsplit(".", 1)[1].lower() in self.VALID_EXTS

    def decode(self, data: bytes, filename: str = None) -> RasterImage:
        """Decode uploaded bytes into a RasterImage."""
        return self.image_repository.decode(data, filename)

    def load(self, path: Union[str, Path]) -> RasterImage:
        """Load a single image from disk."""
        return self.image_repository.load(path)

    def encode(self, image: RasterImage, fmt: str = None) -> bytes:
        return self.image_repository.encode(image, fmt or self.EXPORT_FORMAT)

    def export(self, image: RasterImage, directory: Union[str, Path]) -> Path:
        """
        Business-level method to write the export file into *directory*.
        """
        path = Path(directory) / self.EXPORT_FILENAME
        return self.image_repository.save(image, path)

    def to_data_url(self, image: RasterImage | None) -> str | None:
        """Encode *image* as a data URL for side-by-side display."""
        if image is None:
            return None
        fmt = self.image_repository.normalise_format(self.PREVIEW_FORMAT)
        data = self.image_repository.encode(image, fmt)
        return f"data:image/{fmt.lower()};base64,{base64.b64encode(data).decode('utf-8')}"
