"""Wiring of file stores and image engines from settings."""

import logging
from typing import Optional

from config import Settings, get_settings
from media_storage.file_store import FileStore
from media_storage.images.engine import ImageDerivativeEngine
from media_storage.storage.factory import build_storage_backend

logger = logging.getLogger(__name__)


def get_file_store(
    settings: Optional[Settings] = None,
    namespace: Optional[str] = None,
) -> FileStore:
    """Build a FileStore on the backend selected by ``STORAGE_TYPE``.

    Each call builds a new backend; callers keep the returned store for
    the lifetime of their namespace.

    Args:
        settings: Application settings; the cached settings when omitted.
        namespace: Namespace to store into; ``STORAGE_NAMESPACE`` when omitted.

    Returns:
        FileStore: Store ready for use.
    """
    settings = settings or get_settings()
    backend = build_storage_backend(settings, namespace)
    logger.info(f"Created file store on {type(backend).__name__}")
    return FileStore(backend)


def get_image_engine(
    settings: Optional[Settings] = None,
    namespace: Optional[str] = None,
) -> ImageDerivativeEngine:
    """Build an ImageDerivativeEngine configured from settings."""
    settings = settings or get_settings()
    return ImageDerivativeEngine(
        get_file_store(settings, namespace),
        valid_image_types=settings.valid_image_types,
        image_sizes=settings.image_sizes,
    )
