"""Image decoding, resizing and encoding."""
import logging
from dataclasses import dataclass
from io import BytesIO
from typing import Any, Protocol

from PIL import Image, UnidentifiedImageError

from media_storage.exceptions import DecodeError

logger = logging.getLogger(__name__)

DEFAULT_FORMAT = "PNG"


@dataclass
class DecodedImage:
    """A decoded image and its dimensions."""

    width: int
    height: int
    handle: Any


class ImageCodec(Protocol):
    """Interface for the image primitives derivative generation needs."""

    def decode(self, data: bytes) -> DecodedImage:
        """Decode image bytes.

        Raises:
            DecodeError: If the data is not a readable image.
        """
        ...

    def resize(
        self, image: DecodedImage, width: int, height: int, preserve_aspect: bool = True
    ) -> DecodedImage:
        """Resize into a ``width`` x ``height`` box.

        With ``preserve_aspect`` the image is scaled uniformly to the
        largest size fitting the box.
        """
        ...

    def encode(self, image: DecodedImage) -> bytes:
        """Encode an image back into bytes in its source format."""
        ...


class PillowImageCodec(ImageCodec):
    """ImageCodec backed by Pillow."""

    def __init__(self, resample: Image.Resampling = Image.Resampling.LANCZOS):
        self.resample = resample

    def decode(self, data: bytes) -> DecodedImage:
        try:
            image = Image.open(BytesIO(data))
            image.load()
        except (UnidentifiedImageError, OSError, ValueError) as e:
            logger.warning(f"Failed to decode image: {e}")
            raise DecodeError(f"Failed to decode image: {e}") from e
        return DecodedImage(width=image.width, height=image.height, handle=image)

    def resize(
        self, image: DecodedImage, width: int, height: int, preserve_aspect: bool = True
    ) -> DecodedImage:
        if preserve_aspect:
            scale = min(width / image.width, height / image.height)
            width = max(1, round(image.width * scale))
            height = max(1, round(image.height * scale))

        source = image.handle
        resized = source.resize((width, height), self.resample)
        # resize() drops the format, which encode() needs
        resized.format = source.format
        return DecodedImage(width=width, height=height, handle=resized)

    def encode(self, image: DecodedImage) -> bytes:
        handle = image.handle
        image_format = handle.format or DEFAULT_FORMAT
        if image_format == "JPEG" and handle.mode not in ("RGB", "L"):
            handle = handle.convert("RGB")

        buffer = BytesIO()
        handle.save(buffer, format=image_format)
        return buffer.getvalue()
