from io import BytesIO

import cv2
import numpy as np
import pytest
from PIL import Image as PILImage

from models.errors import DecodeError, EncodeError
from models.image import RasterImage
from repositories.image_repository import ImageRepository


@pytest.fixture
def repository() -> ImageRepository:
    return ImageRepository()


def pil_bytes(image: PILImage.Image, fmt: str, **options) -> bytes:
    buffer = BytesIO()
    image.save(buffer, format=fmt, **options)
    return buffer.getvalue()


class TestDecode:
    def test_png_rgba(self, repository, wide_image, png_bytes):
        decoded = repository.decode(png_bytes)
        assert decoded == wide_image

    def test_rgb_gets_opaque_alpha(self, repository):
        rgb = np.array([[[10, 20, 30], [40, 50, 60]]], dtype=np.uint8)
        decoded = repository.decode(pil_bytes(PILImage.fromarray(rgb), "PNG"))
        np.testing.assert_array_equal(decoded.pixels[..., :3], rgb)
        assert (decoded.pixels[..., 3] == 255).all()

    def test_grayscale_source(self, repository):
        gray = np.array([[0, 100], [200, 255]], dtype=np.uint8)
        decoded = repository.decode(pil_bytes(PILImage.fromarray(gray), "PNG"))
        for channel in range(3):
            np.testing.assert_array_equal(decoded.pixels[..., channel], gray)
        assert (decoded.pixels[..., 3] == 255).all()

    def test_sixteen_bit_source(self, repository):
        ok, encoded = cv2.imencode(".png", np.full((2, 3), 65535, dtype=np.uint16))
        assert ok
        decoded = repository.decode(encoded.tobytes())
        assert decoded.size == (3, 2)
        assert (decoded.pixels == 255).all()

    def test_jpeg(self, repository):
        rgb = np.full((8, 8, 3), 128, dtype=np.uint8)
        decoded = repository.decode(pil_bytes(PILImage.fromarray(rgb), "JPEG", quality=95))
        assert decoded.size == (8, 8)
        assert (decoded.pixels[..., 3] == 255).all()
        assert np.abs(decoded.pixels[..., :3].astype(int) - 128).max() <= 2

    def test_path_is_kept(self, repository, png_bytes):
        decoded = repository.decode(png_bytes, "photo.png")
        assert decoded.path.name == "photo.png"

    def test_empty_data(self, repository):
        with pytest.raises(DecodeError):
            repository.decode(b"")

    def test_garbage(self, repository):
        with pytest.raises(DecodeError):
            repository.decode(b"definitely not an image")

    def test_truncated_png(self, repository, png_bytes):
        with pytest.raises(DecodeError):
            repository.decode(png_bytes[:20])


class TestEncode:
    def test_png_round_trip_is_lossless(self, repository, wide_image):
        data = repository.encode(wide_image, "PNG")
        assert data.startswith(b"\x89PNG")
        assert repository.decode(data) == wide_image

    def test_webp_round_trip_is_lossless(self, repository):
        pixels = np.full((4, 4, 4), 200, dtype=np.uint8)
        pixels[..., 3] = 255
        opaque = RasterImage(pixels)
        data = repository.encode(opaque, "webp")
        assert repository.decode(data) == opaque

    def test_jpeg_alias(self, repository, wide_image):
        data = repository.encode(wide_image, "jpg")
        assert data.startswith(b"\xff\xd8")

    @pytest.mark.parametrize("fmt", ["GIF", "", "tga"])
    def test_unsupported_format(self, repository, wide_image, fmt):
        with pytest.raises(EncodeError):
            repository.encode(wide_image, fmt)


class TestFiles:
    def test_save_and_load(self, repository, wide_image, tmp_path):
        path = repository.save(wide_image, tmp_path / "nested" / "out.png")
        assert path.is_file()

        loaded = repository.load(path)
        assert loaded == wide_image
        assert loaded.path == path

    def test_save_unknown_suffix(self, repository, wide_image, tmp_path):
        with pytest.raises(EncodeError):
            repository.save(wide_image, tmp_path / "out.gif")

    def test_load_missing_file(self, repository, tmp_path):
        with pytest.raises(DecodeError):
            repository.load(tmp_path / "missing.png")
