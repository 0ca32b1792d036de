"""Error taxonomy for storage and image operations."""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Machine-readable category attached to every storage error."""

    EMPTY_INPUT = "empty_input"
    INVALID_FILE_TYPE = "invalid_file_type"
    SCOPE_VIOLATION = "scope_violation"
    DECODE_FAILURE = "decode_failure"
    BACKEND_FAILURE = "backend_failure"


class StorageError(Exception):
    """Base exception for storage-related errors."""

    kind: ErrorKind = ErrorKind.BACKEND_FAILURE

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class EmptyInputError(StorageError):
    """Raised when there is no data to save."""

    kind = ErrorKind.EMPTY_INPUT

    def __init__(self, message: str = "There is no data in this stream"):
        super().__init__(message)


class InvalidFileTypeError(StorageError):
    """Raised when a file's content type is not in the allow-list."""

    kind = ErrorKind.INVALID_FILE_TYPE

    def __init__(self, content_type: Optional[str]):
        self.content_type = content_type
        super().__init__(f"Invalid file type: {content_type!r}")


class ScopeViolationError(StorageError):
    """Raised when a target lies outside the backend's configured namespace."""

    kind = ErrorKind.SCOPE_VIOLATION

    def __init__(self, target: str, scope: str):
        self.target = target
        self.scope = scope
        super().__init__(f"{target!r} is outside of the storage scope {scope!r}")


class DecodeError(StorageError):
    """Raised when image data cannot be decoded or has unusable dimensions."""

    kind = ErrorKind.DECODE_FAILURE


class BackendError(StorageError):
    """Wraps a lower-level failure of the storage medium.

    The original exception is chained as ``__cause__`` by the raising code
    and also kept on ``cause`` for diagnostics.
    """

    kind = ErrorKind.BACKEND_FAILURE

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message)
