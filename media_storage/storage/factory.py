"""Factory for creating storage backends based on configuration."""
import logging
from typing import Optional

from config import Settings

from .base import StorageBackend

logger = logging.getLogger(__name__)


def build_storage_backend(
    settings: Settings,
    namespace: Optional[str] = None,
) -> StorageBackend:
    """Create the storage backend selected by ``settings.storage_type``.

    Meant to be called once while wiring the application; the result is
    passed into ``FileStore`` / ``ImageDerivativeEngine`` constructors.

    Args:
        settings: Application settings.
        namespace: Namespace to select; defaults to ``settings.storage_namespace``.

    Returns:
        StorageBackend: Configured backend with its namespace set.
    """
    namespace = namespace or settings.storage_namespace

    if settings.storage_type == "s3":
        from .s3 import ObjectStoreBackend

        logger.info(f"Using S3 storage with bucket prefix: {settings.s3_bucket_prefix}")
        return ObjectStoreBackend(
            bucket_prefix=settings.s3_bucket_prefix,
            region_name=settings.s3_region,
            aws_access_key_id=settings.s3_access_key_id,
            aws_secret_access_key=settings.s3_secret_access_key,
            endpoint_url=settings.s3_endpoint_url,
            public_read=settings.s3_public_read,
            namespace=namespace,
        )

    if settings.storage_type == "azure":
        from .azure import BlobStoreBackend

        logger.info("Using Azure blob storage")
        return BlobStoreBackend(
            connection_string=settings.azure_connection_string,
            public_access=settings.azure_public_access,
            namespace=namespace,
        )

    from .local import LocalFilesystemBackend

    logger.info(f"Using local storage with root: {settings.storage_root}")
    return LocalFilesystemBackend(
        base_url_path=settings.storage_base_url,
        base_disk_path=settings.storage_root,
        namespace=namespace,
    )
