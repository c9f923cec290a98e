import numpy as np
import pytest
from PIL import Image as PILImage
from io import BytesIO

from models.image import RasterImage

CONFIG_VARS = (
    "TRANSLATE_DX", "TRANSLATE_DY", "ZOOM_IN_FACTOR", "ZOOM_OUT_FACTOR",
    "BRIGHTNESS_DELTA", "CONTRAST_AMOUNT",
    "EXPORT_FILENAME", "EXPORT_FORMAT", "PREVIEW_FORMAT", "ALLOWED_EXTENSIONS",
)


@pytest.fixture(autouse=True)
def default_config(monkeypatch):
    """Run every test against the built-in defaults, ignoring any local .env."""
    for name in CONFIG_VARS:
        monkeypatch.delenv(name, raising=False)


def random_image(width: int, height: int, seed: int = 0, opaque: bool = False) -> RasterImage:
    rng = np.random.default_rng(seed)
    pixels = rng.integers(0, 256, size=(height, width, 4), dtype=np.uint8)
    if opaque:
        pixels[..., 3] = 255
    return RasterImage(pixels)


@pytest.fixture
def rgbw_image() -> RasterImage:
    """2x2 image: red, green / blue, white, all opaque."""
    pixels = np.array(
        [
            [[255, 0, 0, 255], [0, 255, 0, 255]],
            [[0, 0, 255, 255], [255, 255, 255, 255]],
        ],
        dtype=np.uint8,
    )
    return RasterImage(pixels)


@pytest.fixture
def square_image() -> RasterImage:
    return random_image(6, 6, seed=1)


@pytest.fixture
def wide_image() -> RasterImage:
    return random_image(7, 4, seed=2)


@pytest.fixture
def png_bytes(wide_image: RasterImage) -> bytes:
    buffer = BytesIO()
    PILImage.fromarray(wide_image.pixels.copy()).save(buffer, format="PNG")
    return buffer.getvalue()
