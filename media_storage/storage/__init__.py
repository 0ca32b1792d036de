"""Storage backends for media persistence."""

from .base import StorageBackend
from .factory import build_storage_backend
from .local import LocalFilesystemBackend

__all__ = ["StorageBackend", "LocalFilesystemBackend", "build_storage_backend"]
