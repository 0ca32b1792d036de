"""Local filesystem implementation of StorageBackend."""
import logging
import re
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlsplit

from media_storage.exceptions import BackendError, ScopeViolationError
from media_storage.paths import FilePath

from .base import StorageBackend, matches_wildcard, quote_key

logger = logging.getLogger(__name__)

_INVALID_SEGMENT_CHARS = re.compile(r"[^A-Za-z0-9_-]+")


class LocalFilesystemBackend(StorageBackend):
    """Local filesystem storage implementation.

    Files are written to ``<base_disk_path>/<namespace>/<name>`` and served
    from ``<base_url_path>/<namespace>/<name>``. Deletions are confined to
    the namespace directory; targets outside it raise ``ScopeViolationError``.
    """

    def __init__(
        self,
        base_url_path: str,
        base_disk_path: str | Path,
        namespace: Optional[str] = None,
    ):
        """Initialize local filesystem backend.

        Args:
            base_url_path: URL path prefix under which files are served.
            base_disk_path: Directory under which namespaces are created.
            namespace: Optional namespace to select immediately.
        """
        self.base_url_path = base_url_path.rstrip("/")
        self.base_disk_path = Path(base_disk_path)
        self.namespace = ""
        self.url_path = self.base_url_path
        self.disk_path = self.base_disk_path
        logger.info(f"Initialized LocalFilesystemBackend with root: {self.base_disk_path}")

        if namespace:
            self.set_namespace(namespace)

    @staticmethod
    def sanitize_folder(folder: str) -> str:
        """Normalize a folder name into safe path segments.

        Backslashes become separators, empty, ``.`` and ``..`` segments are
        dropped and any other punctuation in a segment collapses to ``_``.
        """
        segments = []
        for segment in folder.replace("\\", "/").split("/"):
            if segment in ("", ".", ".."):
                continue
            cleaned = _INVALID_SEGMENT_CHARS.sub("_", segment).strip("_")
            if cleaned:
                segments.append(cleaned)
        return "/".join(segments)

    def set_namespace(self, name: str) -> None:
        """Select a folder below the base directory, creating it if absent."""
        folder = self.sanitize_folder(name)
        url_path = f"{self.base_url_path}/{folder}" if folder else self.base_url_path
        disk_path = self.base_disk_path / folder if folder else self.base_disk_path

        try:
            disk_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Failed to create storage directory {disk_path}: {e}")
            raise BackendError(f"Failed to create storage directory: {e}", cause=e) from e

        self.namespace = folder
        self.url_path = url_path
        self.disk_path = disk_path
        logger.debug(f"Using storage directory: {self.disk_path}")

    def _target(self, name: str) -> Path:
        """Resolve a bare filename inside the namespace directory."""
        if not name or name in (".", "..") or "/" in name or "\\" in name:
            logger.warning(f"Rejected filename outside namespace: {name!r}")
            raise ScopeViolationError(name, self.url_path)
        return self.disk_path / name

    def _check_scope(self, path: FilePath) -> None:
        """Ensure a path's folder is empty or the namespace URL path."""
        folder = path.folder
        if not folder:
            return
        folder_path = urlsplit(folder).path.rstrip("/")
        if folder_path != self.url_path:
            logger.warning(f"Rejected path outside namespace: {path}")
            raise ScopeViolationError(str(path), self.url_path)

    def save_file(self, data: bytes, name: str) -> str:
        """Save data to the namespace directory.

        Returns:
            str: URL path of the saved file.

        Raises:
            ScopeViolationError: If the name is not a bare filename.
            BackendError: If the file cannot be written.
        """
        file_path = self._target(name)
        try:
            file_path.write_bytes(data)
        except OSError as e:
            logger.error(f"Failed to save file {file_path}: {e}")
            raise BackendError(f"Failed to save file: {e}", cause=e) from e

        logger.debug(f"Saved file to: {file_path}")
        return f"{self.url_path}/{quote_key(name)}"

    def delete_file(self, url: str) -> None:
        """Delete a file by URL, absolute URL or bare filename.

        Raises:
            ScopeViolationError: If the URL points outside the namespace.
            BackendError: If the file exists but cannot be removed.
        """
        path = FilePath(url)
        self._check_scope(path)
        file_path = self._target(unquote(path.filename))
        try:
            file_path.unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"Failed to delete file {file_path}: {e}")
            raise BackendError(f"Failed to delete file: {e}", cause=e) from e
        logger.debug(f"Deleted file: {file_path}")

    def delete_files_with_wildcard(self, pattern: str) -> None:
        """Delete all files in the namespace directory matching a glob.

        Raises:
            ScopeViolationError: If the pattern's folder is not the namespace.
            BackendError: If listing or removing files fails.
        """
        path = FilePath(pattern)
        self._check_scope(path)
        try:
            for entry in self.disk_path.iterdir():
                if entry.is_file() and matches_wildcard(entry.name, path.filename):
                    entry.unlink(missing_ok=True)
                    logger.debug(f"Deleted file: {entry}")
        except OSError as e:
            logger.error(f"Failed to delete files matching {pattern!r}: {e}")
            raise BackendError(f"Failed to delete files: {e}", cause=e) from e
