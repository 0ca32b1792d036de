"""Unit tests for the Pillow image codec."""

from io import BytesIO

import pytest
from PIL import Image

from conftest import image_size, make_image_bytes
from media_storage.exceptions import DecodeError, ErrorKind
from media_storage.images.codec import PillowImageCodec


@pytest.fixture
def codec():
    return PillowImageCodec()


class TestPillowImageCodec:
    """Test PillowImageCodec."""

    def test_decode_dimensions(self, codec, png_1000x500):
        """Test that width and height are read."""
        image = codec.decode(png_1000x500)
        assert (image.width, image.height) == (1000, 500)

    def test_decode_invalid_data(self, codec):
        """Test DecodeError for data that is not an image."""
        with pytest.raises(DecodeError) as exc_info:
            codec.decode(b"definitely not an image")
        assert exc_info.value.kind == ErrorKind.DECODE_FAILURE

    def test_resize_preserves_aspect(self, codec, png_1000x500):
        """Test scaling into a box keeps the aspect ratio."""
        image = codec.decode(png_1000x500)

        resized = codec.resize(image, 400, 500)

        assert (resized.width, resized.height) == (400, 200)
        assert resized.handle.size == (400, 200)

    def test_resize_exact(self, codec, png_1000x500):
        """Test resizing to exact dimensions without aspect preservation."""
        image = codec.decode(png_1000x500)

        resized = codec.resize(image, 300, 300, preserve_aspect=False)

        assert resized.handle.size == (300, 300)

    @pytest.mark.parametrize("image_format", ["PNG", "JPEG", "GIF"])
    def test_encode_keeps_format(self, codec, image_format):
        """Test that encoding after a resize keeps the source format."""
        data = make_image_bytes(200, 100, image_format=image_format)
        image = codec.decode(data)

        encoded = codec.encode(codec.resize(image, 100, 100))

        with Image.open(BytesIO(encoded)) as result:
            assert result.format == image_format
            assert result.size == (100, 50)

    def test_encode_jpeg_converts_mode(self, codec):
        """Test that images with alpha can still be written as JPEG."""
        rgba = Image.new("RGBA", (50, 50), (255, 0, 0, 128))
        image = codec.decode(make_image_bytes(50, 50, image_format="JPEG"))
        image.handle = rgba
        rgba.format = "JPEG"

        assert image_size(codec.encode(image)) == (50, 50)
