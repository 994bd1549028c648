"""
Upload ingestion.

An upload is spooled to a local temp file, sent to the bucket, and then
its thumbnail is generated straight away from the local copy so the
first page view doesn't pay for it. Thumbnail problems never fail the
upload; they are logged and reported on the receipt.
"""

import asyncio
import hashlib
import logging
import tempfile
from pathlib import Path
from typing import BinaryIO, Optional

from .errors import InvalidUploadError
from .models import (
    Placeholder,
    PlaceholderReason,
    SoftFailure,
    ThumbnailSource,
    UploadReceipt,
)
from .naming import classify, detect_content_type, extension_of, is_thumbnail_key, join_object_name
from .ports import ObjectStore
from .thumbnails import ThumbnailResolver

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


class UploadTooLargeError(InvalidUploadError):
    """Raised when an upload exceeds the configured size limit."""

    def __init__(self, limit_bytes: int) -> None:
        super().__init__(f"Upload exceeds {limit_bytes} bytes")
        self.limit_bytes = limit_bytes


def resolve_object_name(filename: str, folder: str = "", custom_name: str = "") -> str:
    """
    Decide the object name for an upload.

    custom_name replaces the uploaded file's own name when given; the
    folder, if any, is prepended with a slash.
    """
    name = join_object_name(folder or "", (custom_name or "").strip() or (filename or ""))
    if not name or name.endswith("/"):
        raise InvalidUploadError("Upload needs a file name")
    if is_thumbnail_key(name):
        raise InvalidUploadError("The thumb/ folder is reserved for thumbnails")
    return name


class UploadService:
    """Stores uploads and eagerly creates their thumbnails."""

    def __init__(
        self,
        store: ObjectStore,
        resolver: ThumbnailResolver,
        max_size_bytes: Optional[int] = None,
    ) -> None:
        self._store = store
        self._resolver = resolver
        self._max_size_bytes = max_size_bytes

    async def ingest(
        self,
        source: BinaryIO,
        filename: str,
        folder: str = "",
        custom_name: str = "",
    ) -> UploadReceipt:
        """
        Store one uploaded file.

        Raises:
            InvalidUploadError: no usable name, or name under thumb/
            UploadTooLargeError: the file is over the size limit
            StorageError: the original could not be written
        """
        name = resolve_object_name(filename, folder, custom_name)

        with tempfile.TemporaryDirectory(prefix="upload-") as workdir:
            local_path = Path(workdir) / ("upload" + extension_of(name).lower())

            size, sha1 = await asyncio.to_thread(self._spool, source, local_path)
            # not verified against anything; kept for the audit trail
            logger.info(
                "Upload received",
                extra={"object_name": name, "size_bytes": size, "sha1": sha1}
            )

            with open(local_path, "rb") as f:
                await self._store.upload_from(name, f, detect_content_type(name))

            receipt = UploadReceipt(name=name, size=size, sha1=sha1)

            if classify(name).has_thumbnail:
                await self._populate_thumbnail(receipt, local_path)

        return receipt

    async def _populate_thumbnail(self, receipt: UploadReceipt, local_path: Path) -> None:
        outcome = await self._resolver.populate(receipt.name, local_path)

        if isinstance(outcome, Placeholder):
            if outcome.reason is PlaceholderReason.GENERATION_FAILED:
                receipt.soft_failures.append(SoftFailure(
                    operation="generate",
                    target=receipt.name,
                    error=outcome.detail,
                ))
            return

        receipt.soft_failures.extend(outcome.soft_failures)

        if outcome.source is not ThumbnailSource.GENERATED:
            # undecodable image: the fallback bytes are for serving, not caching
            receipt.soft_failures.append(SoftFailure(
                operation="generate",
                target=receipt.name,
                error="image could not be decoded",
            ))
        elif not outcome.soft_failures:
            receipt.thumbnail_key = outcome.key
            logger.info(
                "Generated thumbnail",
                extra={"object_name": receipt.name, "thumbnail_key": outcome.key}
            )

        for failure in receipt.soft_failures:
            logger.warning(
                "Thumbnail not created for upload",
                extra={"object_name": receipt.name, "operation": failure.operation, "error": failure.error}
            )

    def _spool(self, source: BinaryIO, local_path: Path) -> tuple[int, str]:
        """Copy source to local_path, returning (size, sha1 hex)."""
        hasher = hashlib.sha1()
        size = 0
        with open(local_path, "wb") as out:
            chunk = source.read(CHUNK_SIZE)
            while chunk:
                size += len(chunk)
                if self._max_size_bytes is not None and size > self._max_size_bytes:
                    raise UploadTooLargeError(self._max_size_bytes)
                hasher.update(chunk)
                out.write(chunk)
                chunk = source.read(CHUNK_SIZE)
        return size, hasher.hexdigest()
