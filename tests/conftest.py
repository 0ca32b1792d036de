"""Shared fixtures for media storage tests."""
from io import BytesIO

import pytest
from PIL import Image


def make_image_bytes(width: int, height: int, image_format: str = "PNG", mode: str = "RGB") -> bytes:
    """Render a solid-colour test image."""
    image = Image.new(mode, (width, height), "gold" if mode == "RGB" else 0)
    buffer = BytesIO()
    image.save(buffer, format=image_format)
    return buffer.getvalue()


def image_size(data: bytes) -> tuple[int, int]:
    with Image.open(BytesIO(data)) as image:
        return image.size


@pytest.fixture
def png_1000x500() -> bytes:
    """PNG image 1000px wide and 500px high."""
    return make_image_bytes(1000, 500)


@pytest.fixture
def jpeg_400x300() -> bytes:
    """JPEG image 400px wide and 300px high."""
    return make_image_bytes(400, 300, image_format="JPEG")
