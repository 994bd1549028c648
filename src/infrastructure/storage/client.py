"""
Object storage client for the browsed bucket.

Talks to Backblaze B2 through its S3-compatible API, with a mock mode
for local development. Any S3-compatible endpoint (AWS S3, R2, MinIO)
works the same way since only the endpoint URL changes.

boto3 is synchronous, so every call is pushed onto a worker thread with
asyncio.to_thread. A slow bucket then only slows down the request that
is waiting on it.

Mock mode keeps objects in memory, enabling API testing without
provisioning a bucket.
"""

import asyncio
import io
import logging
import shutil
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import BinaryIO, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ...core.files.errors import ObjectNotFoundError, StorageError
from ...core.files.models import SoftFailure, StoredObject
from ...core.files.naming import detect_content_type
from ...core.files.ports import ListedObject, ObjectStore

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}


@dataclass
class StorageConfig:
    """Configuration for B2/S3-compatible storage."""
    access_key_id: str
    secret_access_key: str
    bucket_name: str
    endpoint_url: str
    region: str = "us-west-004"


class S3ObjectStore:
    """
    B2 object store client over the S3-compatible API.

    Uses boto3 because B2 speaks S3. This abstraction means we could
    swap to actual S3, R2, or MinIO with only a configuration change.
    """

    def __init__(self, config: StorageConfig) -> None:
        self._config = config
        self.bucket_name = config.bucket_name

        boto_config = Config(
            signature_version='s3v4',
            s3={'addressing_style': 'path'},
        )

        self._s3_client = boto3.client(
            's3',
            endpoint_url=config.endpoint_url,
            aws_access_key_id=config.access_key_id,
            aws_secret_access_key=config.secret_access_key,
            region_name=config.region,
            config=boto_config,
        )

        logger.info(
            "Initialized S3 storage client",
            extra={
                "bucket": config.bucket_name,
                "endpoint": config.endpoint_url,
            }
        )

    async def list_objects(self, prefix: str = "") -> list[ListedObject]:
        """
        List every object under prefix.

        Entries whose attributes are missing from the listing come back
        as SoftFailure so the caller can drop them without losing the
        rest of the page.
        """
        try:
            pages = await asyncio.to_thread(self._list_pages, prefix)
        except (ClientError, BotoCoreError) as e:
            logger.error(
                "Failed to list objects",
                extra={"bucket": self.bucket_name, "error": str(e)}
            )
            raise StorageError(f"List failed: {e}")

        listed: list[ListedObject] = []
        for page in pages:
            for entry in page.get('Contents', []):
                listed.append(self._entry_to_object(entry))
        return listed

    async def stat_object(self, name: str) -> StoredObject:
        try:
            response = await asyncio.to_thread(
                self._s3_client.head_object,
                Bucket=self.bucket_name,
                Key=name,
            )
        except ClientError as e:
            if _is_not_found(e):
                raise ObjectNotFoundError(name)
            raise StorageError(f"Stat failed: {e}")
        except BotoCoreError as e:
            raise StorageError(f"Stat failed: {e}")

        return StoredObject(
            name=name,
            size=int(response['ContentLength']),
            uploaded_at=response['LastModified'],
        )

    async def get_object(self, name: str) -> bytes:
        try:
            return await asyncio.to_thread(self._read_body, name)
        except ClientError as e:
            if _is_not_found(e):
                raise ObjectNotFoundError(name)
            logger.error(
                "Failed to download object",
                extra={"object_name": name, "error": str(e)}
            )
            raise StorageError(f"Download failed: {e}")
        except BotoCoreError as e:
            raise StorageError(f"Download failed: {e}")

    async def download_to(self, name: str, fileobj: BinaryIO) -> None:
        try:
            await asyncio.to_thread(
                self._s3_client.download_fileobj,
                self.bucket_name,
                name,
                fileobj,
            )
        except ClientError as e:
            if _is_not_found(e):
                raise ObjectNotFoundError(name)
            logger.error(
                "Failed to download object",
                extra={"object_name": name, "error": str(e)}
            )
            raise StorageError(f"Download failed: {e}")
        except BotoCoreError as e:
            raise StorageError(f"Download failed: {e}")

    async def put_object(
        self,
        name: str,
        data: bytes,
        content_type: Optional[str] = None,
    ) -> None:
        try:
            await asyncio.to_thread(
                self._s3_client.put_object,
                Bucket=self.bucket_name,
                Key=name,
                Body=data,
                ContentType=content_type or detect_content_type(name),
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(
                "Failed to upload object",
                extra={"object_name": name, "error": str(e)}
            )
            raise StorageError(f"Upload failed: {e}")

        logger.debug(
            "Uploaded object",
            extra={"object_name": name, "size_bytes": len(data)}
        )

    async def upload_from(
        self,
        name: str,
        fileobj: BinaryIO,
        content_type: Optional[str] = None,
    ) -> None:
        try:
            await asyncio.to_thread(
                self._s3_client.upload_fileobj,
                fileobj,
                self.bucket_name,
                name,
                ExtraArgs={'ContentType': content_type or detect_content_type(name)},
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(
                "Failed to upload object",
                extra={"object_name": name, "error": str(e)}
            )
            raise StorageError(f"Upload failed: {e}")

    async def check_bucket(self) -> None:
        try:
            await asyncio.to_thread(
                self._s3_client.head_bucket,
                Bucket=self.bucket_name,
            )
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Bucket not reachable: {e}")

    def _list_pages(self, prefix: str) -> list[dict]:
        paginator = self._s3_client.get_paginator('list_objects_v2')
        return list(paginator.paginate(Bucket=self.bucket_name, Prefix=prefix))

    def _read_body(self, name: str) -> bytes:
        response = self._s3_client.get_object(
            Bucket=self.bucket_name,
            Key=name,
        )
        return response['Body'].read()

    @staticmethod
    def _entry_to_object(entry: dict) -> ListedObject:
        key = entry.get('Key', '')
        try:
            return StoredObject(
                name=key,
                size=int(entry['Size']),
                uploaded_at=entry['LastModified'],
            )
        except (KeyError, TypeError, ValueError) as e:
            return SoftFailure(operation="stat", target=key, error=repr(e))


def _is_not_found(error: ClientError) -> bool:
    code = str(error.response.get('Error', {}).get('Code', ''))
    return code in _NOT_FOUND_CODES


# ---------------------------------------------------------------------------
# Mock Storage for Local Development
# ---------------------------------------------------------------------------

@dataclass
class _MemoryObject:
    data: bytes
    content_type: str
    uploaded_at: datetime


class InMemoryObjectStore:
    """
    In-memory bucket for local development and tests.

    Objects live in a dict keyed by name and listings come back in key
    order, like S3. mark_unreadable() simulates an object whose
    attributes cannot be fetched.

    Not suitable for production, but perfect for development and testing.
    """

    def __init__(self, bucket_name: str = "mock-bucket") -> None:
        self.bucket_name = bucket_name
        self._objects: dict[str, _MemoryObject] = {}
        self._unreadable: set[str] = set()
        logger.info("Initialized mock storage client (in-memory)")

    def mark_unreadable(self, name: str) -> None:
        self._unreadable.add(name)

    def contains(self, name: str) -> bool:
        return name in self._objects

    def names(self) -> list[str]:
        return sorted(self._objects)

    async def list_objects(self, prefix: str = "") -> list[ListedObject]:
        listed: list[ListedObject] = []
        for name in sorted(self._objects):
            if not name.startswith(prefix):
                continue
            if name in self._unreadable:
                listed.append(SoftFailure(
                    operation="stat",
                    target=name,
                    error="attributes unavailable",
                ))
                continue
            obj = self._objects[name]
            listed.append(StoredObject(
                name=name,
                size=len(obj.data),
                uploaded_at=obj.uploaded_at,
            ))
        return listed

    async def stat_object(self, name: str) -> StoredObject:
        obj = self._lookup(name)
        if name in self._unreadable:
            raise StorageError(f"Stat failed: {name}")
        return StoredObject(name=name, size=len(obj.data), uploaded_at=obj.uploaded_at)

    async def get_object(self, name: str) -> bytes:
        return self._lookup(name).data

    async def download_to(self, name: str, fileobj: BinaryIO) -> None:
        fileobj.write(self._lookup(name).data)

    async def put_object(
        self,
        name: str,
        data: bytes,
        content_type: Optional[str] = None,
    ) -> None:
        self._objects[name] = _MemoryObject(
            data=bytes(data),
            content_type=content_type or detect_content_type(name),
            uploaded_at=datetime.now(timezone.utc),
        )
        logger.debug(
            "Stored object in mock storage",
            extra={"object_name": name, "size_bytes": len(data)}
        )

    async def upload_from(
        self,
        name: str,
        fileobj: BinaryIO,
        content_type: Optional[str] = None,
    ) -> None:
        buffer = io.BytesIO()
        shutil.copyfileobj(fileobj, buffer)
        await self.put_object(name, buffer.getvalue(), content_type)

    async def check_bucket(self) -> None:
        return None

    def _lookup(self, name: str) -> _MemoryObject:
        if name not in self._objects:
            raise ObjectNotFoundError(name)
        return self._objects[name]


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

def create_storage_client(
    config: Optional[StorageConfig] = None,
    mock_mode: bool = False,
) -> ObjectStore:
    """
    Create storage client based on configuration.

    Args:
        config: Storage configuration (required if not mock_mode)
        mock_mode: If True, return in-memory client for testing

    Returns:
        ObjectStore implementation (S3 or in-memory)
    """
    if mock_mode:
        return InMemoryObjectStore()

    if config is None:
        raise ValueError("config is required when not in mock mode")

    return S3ObjectStore(config)
