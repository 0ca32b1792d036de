"""Image saving with multi-resolution derivatives.

Derivatives of one image share a base name and differ only by a width tag
inserted before the extension::

    photo.jpg  ->  photo-w1600.jpg, photo-w800.jpg, photo-w400.jpg

Bulk deletion relies on this convention: from any one derivative name the
wildcard ``photo-w*.jpg`` matching all of them is rebuilt.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, Optional
from urllib.parse import unquote

from media_storage.exceptions import DecodeError, EmptyInputError, InvalidFileTypeError
from media_storage.file_store import FileStore, PostedFile, get_timestamped_file_name
from media_storage.paths import Filename, FilePath
from media_storage.storage.base import escape_wildcard
from media_storage.utils import Content, clone_list, read_content

from .codec import DecodedImage, ImageCodec, PillowImageCodec

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_TYPES = ["image/gif", "image/jpeg", "image/png"]
DEFAULT_IMAGE_SIZES = [1600, 800, 400, 200, 100]

WIDTH_TAG = "-w"
# Also matches derivatives of a sibling whose base name extends this one,
# e.g. img-w*.jpg covers img-wide-w800.jpg; timestamps usually keep them apart
WILDCARD_TAG = WIDTH_TAG + "*"
SRCSET_SEPARATOR = ", "

_TRAILING_WIDTH_TAG = re.compile(r"-w[0-9]+$")


def get_resized_file_name(filename: str, width: int) -> str:
    """Insert a width tag before the extension: ``img.jpg`` -> ``img-w800.jpg``."""
    name = Filename(filename)
    return f"{name.base_name}{WIDTH_TAG}{width}{name.extension}"


def get_wildcard_file_name(file_path: str) -> str:
    """Glob matching every derivative of an image, from any one of its names.

    A trailing width tag in the base name is replaced with ``-w*``; a name
    without one gets ``-w*`` appended. The filename is percent-decoded, as
    saved URLs encode it, and glob characters in it are escaped so they
    match literally. The folder part is kept, including its separator style.

    Example:
        ``folder/img-w800.jpg`` -> ``folder/img-w*.jpg``
        ``folder/img%5B1%5D-w800.jpg`` -> ``folder/img[[]1]-w*.jpg``
    """
    path = FilePath(file_path)
    name = Filename(unquote(path.filename))
    base_name = _TRAILING_WIDTH_TAG.sub("", name.base_name)
    name.base_name = escape_wildcard(base_name) + WILDCARD_TAG
    name.extension = escape_wildcard(name.extension)
    path.filename = str(name)
    return str(path)


def adjust_size_list(sizes: Iterable[int], original_width: int) -> list[int]:
    """Drop target widths the original image is too small for.

    Kept widths stay in input order. If any width was dropped, the original
    width is appended once at the end so the largest possible derivative
    is still produced.

    Example:
        ``adjust_size_list([1600, 800, 400], 1000)`` -> ``[800, 400, 1000]``
    """
    adjusted = []
    undersized = False
    for size in sizes:
        if size <= original_width:
            adjusted.append(size)
        else:
            undersized = True
    if undersized:
        adjusted.append(original_width)
    return adjusted


@dataclass
class Derivative:
    width: int
    url: str

    def __str__(self) -> str:
        return f"{self.url} {self.width}w"


@dataclass
class DerivativeSet:
    """Derivatives produced for one source image, in generation order."""

    widths: list[int]
    derivatives: list[Derivative] = field(default_factory=list)

    @property
    def srcset(self) -> str:
        """``srcset`` attribute value: ``"<url> <width>w, ..."``."""
        return SRCSET_SEPARATOR.join(str(derivative) for derivative in self.derivatives)


class ImageDerivativeEngine:
    """Saves images, optionally resized, through a FileStore.

    Adds content-type validation, downscaling to a maximum width and
    generation of a set of width-tagged derivatives on top of the plain
    file save. Images are never upscaled.
    """

    def __init__(
        self,
        file_store: FileStore,
        valid_image_types: Optional[list[str]] = None,
        image_sizes: Optional[list[int]] = None,
        codec: Optional[ImageCodec] = None,
    ):
        """Initialize the engine.

        Args:
            file_store: Store the images are saved through.
            valid_image_types: Accepted content types; an empty list accepts
                all. Defaults to GIF, JPEG and PNG.
            image_sizes: Default derivative widths, sorted descending here.
            codec: Image codec; Pillow unless given.
        """
        self.file_store = file_store
        self.valid_image_types = clone_list(
            DEFAULT_IMAGE_TYPES if valid_image_types is None else valid_image_types
        )
        self.image_sizes = sorted(
            DEFAULT_IMAGE_SIZES if image_sizes is None else image_sizes, reverse=True
        )
        self.codec = codec or PillowImageCodec()

    def validate_content_type(self, content_type: Optional[str]) -> None:
        """Raise InvalidFileTypeError unless the type is allowed."""
        if self.valid_image_types and content_type not in self.valid_image_types:
            logger.warning(f"Rejected image with content type: {content_type!r}")
            raise InvalidFileTypeError(content_type)

    def decode(self, content: bytes) -> DecodedImage:
        """Decode an image and require a positive width."""
        image = self.codec.decode(content)
        if image.width <= 0 or image.height <= 0:
            raise DecodeError(f"Image has invalid dimensions {image.width}x{image.height}")
        return image

    def save_image(
        self,
        data: Content,
        name: str,
        content_type: Optional[str] = None,
        max_width: Optional[int] = None,
        timestamped: bool = True,
        timestamp: Optional[str] = None,
        validate: bool = True,
    ) -> str:
        """Save an image, downscaled to at most ``max_width`` pixels wide.

        With ``max_width`` the saved name carries a width tag holding the
        final width: ``max_width`` when the image was resized, otherwise the
        source width.

        Args:
            data: Image bytes or binary stream.
            name: Filename to store under.
            content_type: MIME type checked against the allow-list.
            max_width: Maximum width in pixels; no resizing when None.
            timestamped: Prefix the name with a timestamp.
            timestamp: Explicit timestamp overriding the current time.
            validate: Check ``content_type`` against the allow-list.

        Returns:
            str: URL by which the saved image is accessible.

        Raises:
            InvalidFileTypeError: If the content type is not allowed.
            EmptyInputError: If there is no data.
            DecodeError: If ``max_width`` is given and the data is not a
                readable image.
        """
        if validate:
            self.validate_content_type(content_type)

        if timestamped:
            name = get_timestamped_file_name(name, timestamp)

        content = read_content(data)
        if not content:
            logger.warning(f"Rejected empty image: {name}")
            raise EmptyInputError()

        if max_width is not None:
            content, name = self._resize(self.decode(content), content, name, max_width)

        # Already timestamped above
        return self.file_store.save_file(content, name, timestamped=False)

    def _resize(
        self, image: DecodedImage, content: bytes, name: str, max_width: int
    ) -> tuple[bytes, str]:
        width = image.width
        if width > max_width:
            aspect_ratio = image.width / image.height
            height = round(image.width / aspect_ratio)
            resized = self.codec.resize(image, max_width, height, preserve_aspect=True)
            content = self.codec.encode(resized)
            width = max_width
            logger.debug(f"Resized {name} from {image.width}px to {max_width}px")
        return content, get_resized_file_name(name, width)

    def build_derivative_set(
        self,
        data: Content,
        name: str,
        sizes: Optional[list[int]] = None,
        timestamped: bool = True,
        timestamp: Optional[str] = None,
    ) -> DerivativeSet:
        """Save one derivative of an image per adjusted target width.

        All derivatives share a single timestamp. Widths larger than the
        source are replaced by one derivative at the source width.

        If one derivative fails to save, the ones already saved stay.

        Raises:
            EmptyInputError: If there is no data.
            DecodeError: If the data is not a readable image.
        """
        if timestamped:
            name = get_timestamped_file_name(name, timestamp)

        content = read_content(data)
        if not content:
            logger.warning(f"Rejected empty image: {name}")
            raise EmptyInputError()

        image = self.decode(content)
        widths = adjust_size_list(self.image_sizes if sizes is None else sizes, image.width)

        derivative_set = DerivativeSet(widths=widths)
        for width in widths:
            resized, resized_name = self._resize(image, content, name, width)
            url = self.file_store.save_file(resized, resized_name, timestamped=False)
            derivative_set.derivatives.append(Derivative(width=width, url=url))

        logger.info(f"Saved {len(widths)} derivatives of {name}")
        return derivative_set

    def save_image_multiple_sizes(
        self,
        data: Content,
        name: str,
        sizes: Optional[list[int]] = None,
        timestamped: bool = True,
        timestamp: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> str:
        """Save an image at multiple widths.

        Args:
            data: Image bytes or binary stream.
            name: Base filename; each derivative gets a width tag.
            sizes: Descending target widths; the engine defaults when None.
            timestamped: Prefix the names with one shared timestamp.
            timestamp: Explicit timestamp overriding the current time.
            content_type: MIME type checked against the allow-list when given.

        Returns:
            str: ``srcset`` value listing every derivative URL and width.
        """
        if content_type is not None:
            self.validate_content_type(content_type)
        return self.build_derivative_set(data, name, sizes, timestamped, timestamp).srcset

    def save_upload(
        self,
        upload: PostedFile,
        max_width: Optional[int] = None,
        timestamped: bool = True,
        timestamp: Optional[str] = None,
    ) -> str:
        """Save an uploaded image, validating its declared content type."""
        return self.save_image(
            upload.file,
            upload.filename or "",
            content_type=upload.content_type,
            max_width=max_width,
            timestamped=timestamped,
            timestamp=timestamp,
        )

    def save_upload_multiple_sizes(
        self,
        upload: PostedFile,
        sizes: Optional[list[int]] = None,
        timestamped: bool = True,
        timestamp: Optional[str] = None,
    ) -> str:
        """Save an uploaded image at multiple widths, validating its content type."""
        self.validate_content_type(upload.content_type)
        return self.save_image_multiple_sizes(
            upload.file, upload.filename or "", sizes, timestamped, timestamp
        )

    def delete_image_with_multiple_sizes(self, file_path: str) -> None:
        """Delete every derivative of an image given any one of its names.

        Args:
            file_path: Name or URL of one derivative, e.g. ``folder/img-w800.jpg``.
        """
        pattern = get_wildcard_file_name(file_path)
        logger.debug(f"Deleting derivatives matching {pattern}")
        self.file_store.delete_files_with_wildcard(pattern)

    def set_namespace(self, name: str) -> None:
        self.file_store.set_namespace(name)

    def delete_file(self, url: str) -> None:
        self.file_store.delete_file(url)

    def delete_files_with_wildcard(self, pattern: str) -> None:
        self.file_store.delete_files_with_wildcard(pattern)
