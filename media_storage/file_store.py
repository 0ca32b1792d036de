"""File store wrapping a storage backend."""

import logging
import re
from datetime import datetime
from typing import BinaryIO, Optional, Protocol

from media_storage.exceptions import EmptyInputError
from media_storage.storage.base import StorageBackend
from media_storage.utils import Content, read_content

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"
TIMESTAMP_SEPARATOR = "-"

_TIMESTAMP = re.compile(r"^[0-9]{14}$")
_WHITESPACE = re.compile(r"\s")


class PostedFile(Protocol):
    """An uploaded file as handed over by a web framework."""

    filename: Optional[str]
    content_type: Optional[str]
    file: BinaryIO


def get_timestamp(now: Optional[datetime] = None) -> str:
    """Local-time ``YYYYMMDDHHMMSS`` timestamp."""
    return (now or datetime.now()).strftime(TIMESTAMP_FORMAT)


def get_timestamped_file_name(name: str, timestamp: Optional[str] = None) -> str:
    """Prefix a name with a timestamp, e.g. ``20240131235959-photo.jpg``.

    Args:
        name: Filename to prefix.
        timestamp: Explicit 14-digit timestamp; the current time when omitted.

    Raises:
        ValueError: If an explicit timestamp is not 14 digits.
    """
    if not timestamp:
        timestamp = get_timestamp()
    elif not _TIMESTAMP.match(timestamp):
        raise ValueError(f"Timestamp must be 14 digits (YYYYMMDDHHMMSS), got {timestamp!r}")
    return f"{timestamp}{TIMESTAMP_SEPARATOR}{name}"


class FileStore:
    """Saves files through a storage backend.

    Before delegating a save, the store timestamps the name to avoid
    collisions, rejects empty data and replaces whitespace in the name with
    underscores so the returned URL is usable as-is. Deletes and namespace
    selection pass straight through.

    Two saves of the same name within the same second produce the same
    timestamped name; the later one overwrites the earlier.
    """

    def __init__(self, backend: StorageBackend, namespace: Optional[str] = None):
        """Initialize the file store.

        Args:
            backend: Backend the files are stored on.
            namespace: Optional namespace to select on the backend.
        """
        self.backend = backend
        if namespace:
            self.set_namespace(namespace)

    def set_namespace(self, name: str) -> None:
        self.backend.set_namespace(name)

    def save_file(
        self,
        data: Content,
        name: str,
        timestamped: bool = True,
        timestamp: Optional[str] = None,
    ) -> str:
        """Save bytes or a binary stream under a name.

        Args:
            data: File contents. Streams are read in full from the start
                and their position is left unchanged.
            name: Filename to store under.
            timestamped: Prefix the name with a timestamp.
            timestamp: Explicit timestamp overriding the current time.

        Returns:
            str: URL by which the saved file is accessible.

        Raises:
            EmptyInputError: If there is no data.
            BackendError: If the backend fails to store the file.
        """
        if timestamped:
            name = get_timestamped_file_name(name, timestamp)

        content = read_content(data)
        if not content:
            logger.warning(f"Rejected empty file: {name}")
            raise EmptyInputError()

        name = _WHITESPACE.sub("_", name)

        url = self.backend.save_file(content, name)
        logger.debug(f"Saved {name} ({len(content)} bytes) to {url}")
        return url

    def save_upload(
        self,
        upload: PostedFile,
        timestamped: bool = True,
        timestamp: Optional[str] = None,
    ) -> str:
        """Save an uploaded file under its original filename.

        Raises:
            EmptyInputError: If the upload has no data.
        """
        return self.save_file(
            upload.file, upload.filename or "", timestamped=timestamped, timestamp=timestamp
        )

    def delete_file(self, url: str) -> None:
        self.backend.delete_file(url)

    def delete_files_with_wildcard(self, pattern: str) -> None:
        self.backend.delete_files_with_wildcard(pattern)
