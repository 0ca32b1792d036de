"""Helpers for streams and lists."""

import shutil
from io import BytesIO
from typing import BinaryIO, TypeVar, Union

T = TypeVar("T")

Content = Union[bytes, bytearray, BinaryIO]


def clone_to_buffer(stream: BinaryIO) -> BytesIO:
    """Copy a whole stream into an in-memory buffer.

    The source position is restored afterwards and the returned buffer is
    positioned at its start, so the source can still be read by the caller.

    Args:
        stream: Seekable binary stream.

    Returns:
        BytesIO: Independent copy of the stream's full contents.
    """
    original_position = stream.tell()
    stream.seek(0)
    buffer = BytesIO()
    shutil.copyfileobj(stream, buffer)
    stream.seek(original_position)
    buffer.seek(0)
    return buffer


def read_content(data: Content) -> bytes:
    """Return the full contents of bytes or a binary stream."""
    if isinstance(data, (bytes, bytearray)):
        return bytes(data)
    return clone_to_buffer(data).getvalue()


def clone_list(items: list[T]) -> list[T]:
    """Shallow copy of a list."""
    return list(items)
