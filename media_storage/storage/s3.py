"""AWS S3 implementation of StorageBackend."""
import logging
from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from media_storage.exceptions import BackendError
from media_storage.paths import FilePath

from .base import StorageBackend, key_from_url, matches_wildcard, quote_key, sanitize_namespace

logger = logging.getLogger(__name__)

PUBLIC_READ = "public-read"
# The default BucketOwnerEnforced ownership rejects every ACL
OBJECT_WRITER = "ObjectWriter"

# Error codes meaning the bucket already exists and belongs to us
_BUCKET_EXISTS_CODES = {"BucketAlreadyOwnedByYou"}
_NOT_FOUND_CODES = {"404", "NoSuchBucket", "NotFound"}
# S3-compatible services without public access block support
_UNSUPPORTED_CODES = {"NotImplemented", "MethodNotAllowed"}


class ObjectStoreBackend(StorageBackend):
    """Storage backend using AWS S3 or an S3-compatible service.

    Each namespace maps to its own bucket named ``<bucket_prefix>-<namespace>``
    so that buckets stay unique in the global S3 namespace. Objects are
    stored flat in the bucket under their filename.
    """

    def __init__(
        self,
        bucket_prefix: str,
        region_name: str = "us-east-1",
        aws_access_key_id: Optional[str] = None,
        aws_secret_access_key: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        public_read: bool = True,
        namespace: Optional[str] = None,
        client: Any = None,
    ):
        """Initialize S3 storage backend.

        Args:
            bucket_prefix: Domain-like prefix for bucket names.
            region_name: AWS region.
            aws_access_key_id: AWS access key (optional, uses env/IAM if not provided).
            aws_secret_access_key: AWS secret key.
            endpoint_url: Custom endpoint URL for S3-compatible services.
            public_read: Create buckets that accept ACLs with their public
                access block removed, and store objects public-read.
            namespace: Optional namespace to select immediately.
            client: Pre-built boto3 S3 client; built from the other arguments if omitted.
        """
        self.bucket_prefix = bucket_prefix
        self.region_name = region_name
        self.endpoint_url = endpoint_url.rstrip("/") if endpoint_url else None
        self.public_read = public_read
        self.bucket_name: Optional[str] = None

        if client is None:
            client_kwargs: dict[str, Any] = {"region_name": region_name}
            if endpoint_url:
                client_kwargs["endpoint_url"] = endpoint_url
            if aws_access_key_id and aws_secret_access_key:
                client_kwargs["aws_access_key_id"] = aws_access_key_id
                client_kwargs["aws_secret_access_key"] = aws_secret_access_key
            client = boto3.client("s3", **client_kwargs)
        self.client = client
        logger.info(f"Initialized ObjectStoreBackend in region: {region_name}")

        if namespace:
            self.set_namespace(namespace)

    @property
    def bucket(self) -> str:
        if self.bucket_name is None:
            raise RuntimeError("No namespace set; call set_namespace() first")
        return self.bucket_name

    def bucket_name_for(self, namespace: str) -> str:
        """Bucket name for a namespace, with separators and dots as dashes."""
        return sanitize_namespace(f"{self.bucket_prefix}/{namespace}")

    def set_namespace(self, name: str) -> None:
        """Select the bucket for a namespace, creating it if absent."""
        bucket_name = self.bucket_name_for(name)
        if not self._bucket_exists(bucket_name):
            self._create_bucket(bucket_name)
        self.bucket_name = bucket_name
        logger.debug(f"Using bucket: {bucket_name}")

    def _bucket_exists(self, bucket_name: str) -> bool:
        try:
            self.client.head_bucket(Bucket=bucket_name)
            return True
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in _NOT_FOUND_CODES:
                return False
            logger.error(f"Failed to look up bucket {bucket_name}: {e}")
            raise BackendError(f"Failed to look up bucket {bucket_name}", cause=e) from e
        except BotoCoreError as e:
            logger.error(f"Failed to look up bucket {bucket_name}: {e}")
            raise BackendError(f"Failed to look up bucket {bucket_name}", cause=e) from e

    def _create_bucket(self, bucket_name: str) -> None:
        kwargs: dict[str, Any] = {"Bucket": bucket_name}
        if self.public_read:
            kwargs["ObjectOwnership"] = OBJECT_WRITER
        # us-east-1 rejects an explicit location constraint
        if self.region_name != "us-east-1":
            kwargs["CreateBucketConfiguration"] = {"LocationConstraint": self.region_name}

        try:
            self.client.create_bucket(**kwargs)
            logger.info(f"Created bucket: {bucket_name}")
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in _BUCKET_EXISTS_CODES:
                logger.debug(f"Bucket created concurrently: {bucket_name}")
                return
            logger.error(f"Failed to create bucket {bucket_name}: {e}")
            raise BackendError(f"Failed to create bucket {bucket_name}", cause=e) from e
        except BotoCoreError as e:
            logger.error(f"Failed to create bucket {bucket_name}: {e}")
            raise BackendError(f"Failed to create bucket {bucket_name}", cause=e) from e

        if self.public_read:
            self._allow_public_access(bucket_name)

    def _allow_public_access(self, bucket_name: str) -> None:
        """Remove the default public access block, then grant public read.

        The public-read ACL is only accepted once the block is gone.
        """
        try:
            self._delete_public_access_block(bucket_name)
            self.client.put_bucket_acl(Bucket=bucket_name, ACL=PUBLIC_READ)
            logger.debug(f"Opened bucket for public read: {bucket_name}")
        except ClientError as e:
            logger.error(f"Failed to open bucket {bucket_name} for public read: {e}")
            raise BackendError(f"Failed to open bucket {bucket_name} for public read", cause=e) from e
        except BotoCoreError as e:
            logger.error(f"Failed to open bucket {bucket_name} for public read: {e}")
            raise BackendError(f"Failed to open bucket {bucket_name} for public read", cause=e) from e

    def _delete_public_access_block(self, bucket_name: str) -> None:
        try:
            self.client.delete_public_access_block(Bucket=bucket_name)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") not in _UNSUPPORTED_CODES:
                raise
            logger.debug(f"No public access block support for bucket: {bucket_name}")

    def get_url(self, key: str) -> str:
        """Path-style public URL of an object."""
        if self.endpoint_url:
            return f"{self.endpoint_url}/{self.bucket}/{quote_key(key)}"
        return f"https://s3.{self.region_name}.amazonaws.com/{self.bucket}/{quote_key(key)}"

    def save_file(self, data: bytes, name: str) -> str:
        """Upload data to the current bucket.

        Returns:
            str: Public URL of the uploaded object.
        """
        kwargs: dict[str, Any] = {"Bucket": self.bucket, "Key": name, "Body": data}
        if self.public_read:
            kwargs["ACL"] = PUBLIC_READ

        try:
            self.client.put_object(**kwargs)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to upload {name} to bucket {self.bucket}: {e}")
            raise BackendError("Failure to upload file", cause=e) from e

        logger.debug(f"Uploaded {name} to bucket {self.bucket}")
        return self.get_url(name)

    def list_keys(self) -> list[str]:
        """All object keys in the current bucket."""
        keys: list[str] = []
        try:
            paginator = self.client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self.bucket):
                keys.extend(obj["Key"] for obj in page.get("Contents", []))
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to list bucket {self.bucket}: {e}")
            raise BackendError(f"Failed to list bucket {self.bucket}", cause=e) from e
        return keys

    def _delete_key(self, key: str) -> None:
        try:
            # S3 reports success for missing keys
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to delete {key} from bucket {self.bucket}: {e}")
            raise BackendError(f"Failed to delete {key}", cause=e) from e
        logger.debug(f"Deleted {key} from bucket {self.bucket}")

    def delete_file(self, url: str) -> None:
        self._delete_key(key_from_url(url))

    def delete_files_with_wildcard(self, pattern: str) -> None:
        key_pattern = FilePath(pattern).filename
        for key in self.list_keys():
            if matches_wildcard(key, key_pattern):
                self._delete_key(key)
