"""Azure Blob Storage implementation of StorageBackend."""
import logging
from typing import Any, Optional

from azure.core.exceptions import AzureError, ResourceExistsError, ResourceNotFoundError
from azure.storage.blob import BlobServiceClient

from media_storage.exceptions import BackendError
from media_storage.paths import FilePath

from .base import StorageBackend, key_from_url, matches_wildcard, sanitize_namespace

logger = logging.getLogger(__name__)


class BlobStoreBackend(StorageBackend):
    """Storage backend using Azure Blob Storage.

    Each namespace maps to a blob container. Containers are created with
    container-level public read access unless ``public_access`` is off.
    """

    def __init__(
        self,
        connection_string: Optional[str] = None,
        public_access: bool = True,
        namespace: Optional[str] = None,
        service_client: Any = None,
    ):
        """Initialize Azure Blob storage backend.

        Args:
            connection_string: Storage account connection string.
            public_access: Make created containers publicly readable.
            namespace: Optional namespace to select immediately.
            service_client: Pre-built ``BlobServiceClient``; built from the
                connection string if omitted.
        """
        if service_client is None:
            if not connection_string:
                raise ValueError("An Azure connection string is required for blob storage")
            service_client = BlobServiceClient.from_connection_string(connection_string)
        self.service_client = service_client
        self.public_access = public_access
        self.container_name: Optional[str] = None
        self._container: Any = None
        logger.info("Initialized BlobStoreBackend")

        if namespace:
            self.set_namespace(namespace)

    @property
    def container(self) -> Any:
        if self._container is None:
            raise RuntimeError("No namespace set; call set_namespace() first")
        return self._container

    def set_namespace(self, name: str) -> None:
        """Select the container for a namespace, creating it if absent."""
        container_name = sanitize_namespace(name)
        container = self.service_client.get_container_client(container_name)
        try:
            container.create_container(
                public_access="container" if self.public_access else None
            )
            logger.info(f"Created blob container: {container_name}")
        except ResourceExistsError:
            logger.debug(f"Blob container already exists: {container_name}")
        except AzureError as e:
            logger.error(f"Failed to create blob container {container_name}: {e}")
            raise BackendError(
                "Failure to create or configure blob storage service", cause=e
            ) from e

        self.container_name = container_name
        self._container = container

    def save_file(self, data: bytes, name: str) -> str:
        """Upload data as a block blob.

        Returns:
            str: Public URL of the blob.
        """
        blob = self.container.get_blob_client(name)
        try:
            blob.upload_blob(data, overwrite=True)
        except AzureError as e:
            logger.error(f"Failed to upload blob {name}: {e}")
            raise BackendError("Failure to upload file to blob", cause=e) from e

        logger.debug(f"Uploaded blob {name} to container {self.container_name}")
        return blob.url

    def list_keys(self) -> list[str]:
        """All blob names in the current container."""
        try:
            return [blob.name for blob in self.container.list_blobs()]
        except AzureError as e:
            logger.error(f"Failed to list container {self.container_name}: {e}")
            raise BackendError(f"Failed to list container {self.container_name}", cause=e) from e

    def _delete_blob(self, name: str) -> None:
        try:
            self.container.delete_blob(name)
        except ResourceNotFoundError:
            logger.debug(f"Blob already absent: {name}")
            return
        except AzureError as e:
            logger.error(f"Failed to delete blob {name}: {e}")
            raise BackendError(f"Failed to delete blob {name}", cause=e) from e
        logger.debug(f"Deleted blob {name} from container {self.container_name}")

    def delete_file(self, url: str) -> None:
        self._delete_blob(key_from_url(url))

    def delete_files_with_wildcard(self, pattern: str) -> None:
        blob_pattern = FilePath(pattern).filename
        for name in self.list_keys():
            if matches_wildcard(name, blob_pattern):
                self._delete_blob(name)
