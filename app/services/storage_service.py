"""Object storage adapter backed by the S3 API."""
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional
from urllib.parse import quote

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from app.core.config import settings
from app.models.document import ResourceKind
from app.utils.file_processor import FileProcessor

logger = logging.getLogger("app.services.storage")


class StorageError(Exception):
    """Raised when the storage service rejects or fails an operation."""


@dataclass(frozen=True)
class StoredObject:
    storage_key: str
    url: str


class StorageService:
    """Upload and delete document payloads in an S3 bucket.

    Objects are namespaced by resource kind (``<kind>/<storage_key>``), so a
    delete needs both the storage key and the kind the payload was stored
    under. The adapter knows nothing about document records.
    """

    def __init__(
        self,
        bucket: str,
        folder: str = "",
        client=None,
        region: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        public_base_url: Optional[str] = None,
        access_key: Optional[str] = None,
        secret_key: Optional[str] = None,
    ):
        self.bucket = bucket
        self.folder = folder.strip("/")
        self.region = region
        self.endpoint_url = endpoint_url
        self.public_base_url = public_base_url.rstrip("/") if public_base_url else None
        self.client = client or boto3.client(
            "s3",
            region_name=region,
            endpoint_url=endpoint_url,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
        )

    def make_storage_key(self, filename: str, timestamp_ms: Optional[int] = None) -> str:
        name = FileProcessor.build_storage_name(filename, timestamp_ms)
        return f"{self.folder}/{name}" if self.folder else name

    @staticmethod
    def object_key(storage_key: str, kind: ResourceKind) -> str:
        return f"{ResourceKind(kind).value}/{storage_key}"

    def public_url(self, object_key: str) -> str:
        path = quote(object_key)
        if self.public_base_url:
            return f"{self.public_base_url}/{path}"
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket}/{path}"
        return f"https://{self.bucket}.s3.{self.region or 'us-east-1'}.amazonaws.com/{path}"

    def upload(
        self,
        data: bytes,
        filename: str,
        content_type: Optional[str],
        kind: ResourceKind,
        timestamp_ms: Optional[int] = None,
    ) -> StoredObject:
        """
        Store ``data`` and return its storage key and retrieval URL.

        Raises:
            StorageError: If the bucket rejects the payload
        """
        storage_key = self.make_storage_key(filename, timestamp_ms)
        key = self.object_key(storage_key, kind)

        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type or "application/octet-stream",
            )
        except (BotoCoreError, ClientError) as e:
            logger.error("Storage upload failed for %s: %s", key, e)
            raise StorageError(f"Upload to storage failed: {e}") from e

        logger.info("Stored %s (%d bytes) in bucket %s", key, len(data), self.bucket)
        return StoredObject(storage_key=storage_key, url=self.public_url(key))

    def delete(self, storage_key: str, kind: ResourceKind) -> None:
        """Remove a stored payload; raises StorageError on failure."""
        key = self.object_key(storage_key, kind)
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"Delete from storage failed: {e}") from e
        logger.info("Deleted %s from bucket %s", key, self.bucket)


@lru_cache
def get_storage_service() -> StorageService:
    """FastAPI dependency returning the configured storage adapter."""
    return StorageService(
        bucket=settings.S3_BUCKET,
        folder=settings.STORAGE_FOLDER,
        region=settings.AWS_REGION,
        endpoint_url=settings.S3_ENDPOINT_URL,
        public_base_url=settings.STORAGE_PUBLIC_BASE_URL,
        access_key=settings.AWS_ACCESS_KEY_ID,
        secret_key=settings.AWS_SECRET_ACCESS_KEY,
    )
