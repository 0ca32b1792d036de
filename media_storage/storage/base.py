"""Storage backend interface for media persistence."""

import re
from fnmatch import fnmatchcase
from typing import Protocol, runtime_checkable
from urllib.parse import quote, unquote

_INVALID_NAMESPACE_CHARS = re.compile(r"[^a-z0-9]+")
_WILDCARD_CHARS = re.compile(r"([*?[])")


@runtime_checkable
class StorageBackend(Protocol):
    """Abstract interface for storing files on a physical medium.

    A backend operates against one namespace at a time: a folder on disk,
    an S3 bucket or an Azure blob container. Implementations exist for the
    local filesystem, S3 and Azure Blob Storage.

    Backends may assume ``save_file`` receives non-empty data; emptiness
    is rejected by the caller before delegation.
    """

    def set_namespace(self, name: str) -> None:
        """Select the namespace to operate in, creating it if absent.

        Idempotent and safe to race: an already existing namespace is
        reused rather than reported as an error. The name is sanitized
        into characters the medium allows.

        Args:
            name: Folder, bucket or container name.

        Raises:
            BackendError: If the namespace cannot be created.
        """
        ...

    def save_file(self, data: bytes, name: str) -> str:
        """Write data under a name in the current namespace.

        Args:
            data: Raw file bytes, never empty.
            name: Object key / filename.

        Returns:
            str: Publicly resolvable URL of the saved file, with the name
                percent-encoded in its last path segment.

        Raises:
            BackendError: If the file cannot be written.
        """
        ...

    def delete_file(self, url: str) -> None:
        """Delete the file whose key is the trailing path segment of a URL.

        A missing file is not an error.

        Args:
            url: URL (or plain name) returned by ``save_file``.

        Raises:
            BackendError: If the delete request fails.
        """
        ...

    def delete_files_with_wildcard(self, pattern: str) -> None:
        """Delete every file in the namespace whose name matches a glob.

        Args:
            pattern: Path whose filename part is a glob pattern over raw,
                not percent-encoded, names (``*``, ``?``, ``[...]``), e.g.
                ``/media/photos/img-w*.jpg``.

        Raises:
            BackendError: If listing or deleting fails.
        """
        ...


def sanitize_namespace(name: str, filler: str = "-", max_length: int = 63) -> str:
    """Normalize a name into lowercase letters, digits and a filler.

    Every run of other characters (separators, dots, whitespace and other
    punctuation) collapses into a single filler character. This satisfies
    both S3 bucket and Azure container naming rules.

    Args:
        name: Raw namespace name.
        filler: Character substituted for illegal runs.
        max_length: Maximum length of the result.

    Returns:
        str: The sanitized name.

    Raises:
        ValueError: If nothing legal remains.
    """
    sanitized = _INVALID_NAMESPACE_CHARS.sub(filler, name.lower()).strip(filler)
    sanitized = sanitized[:max_length].rstrip(filler)
    if not sanitized:
        raise ValueError(f"Namespace {name!r} contains no usable characters")
    return sanitized


def matches_wildcard(name: str, pattern: str) -> bool:
    """Case-sensitive glob match of a key against a pattern."""
    return fnmatchcase(name, pattern)


def escape_wildcard(text: str) -> str:
    """Quote glob characters so they match literally: ``a[1]`` -> ``a[[]1]``."""
    return _WILDCARD_CHARS.sub(r"[\1]", text)


def key_from_url(url: str) -> str:
    """Resolve the object key from the trailing path segment of a URL."""
    return unquote(url.split("?", 1)[0].rstrip("/").rsplit("/", 1)[-1])


def quote_key(key: str) -> str:
    return quote(key, safe="")
