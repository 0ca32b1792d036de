"""Image codec and derivative generation."""

from .codec import DecodedImage, ImageCodec, PillowImageCodec
from .engine import (
    DerivativeSet,
    ImageDerivativeEngine,
    adjust_size_list,
    get_resized_file_name,
    get_wildcard_file_name,
)

__all__ = [
    "DecodedImage",
    "ImageCodec",
    "PillowImageCodec",
    "DerivativeSet",
    "ImageDerivativeEngine",
    "adjust_size_list",
    "get_resized_file_name",
    "get_wildcard_file_name",
]
