"""Storage of uploaded media files and resized image derivatives."""

from .exceptions import (
    BackendError,
    DecodeError,
    EmptyInputError,
    ErrorKind,
    InvalidFileTypeError,
    ScopeViolationError,
    StorageError,
)
from .file_store import FileStore
from .images import ImageDerivativeEngine
from .paths import Filename, FilePath, parse_file_path, parse_filename
from .storage import LocalFilesystemBackend, StorageBackend, build_storage_backend

__all__ = [
    "BackendError",
    "DecodeError",
    "EmptyInputError",
    "ErrorKind",
    "InvalidFileTypeError",
    "ScopeViolationError",
    "StorageError",
    "FileStore",
    "ImageDerivativeEngine",
    "Filename",
    "FilePath",
    "parse_file_path",
    "parse_filename",
    "LocalFilesystemBackend",
    "StorageBackend",
    "build_storage_backend",
]
