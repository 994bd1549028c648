"""
Thumbnail cache resolution.

Every image or video in the bucket has at most one thumbnail, stored in
the same bucket at thumb/<name without extension>.jpg. The bucket is the
only cache: if the thumbnail object exists it is served as-is, otherwise
it is generated from the original, written back, and served.

Cache policy:
- entries never expire and are not invalidated when the original is
  re-uploaded
- concurrent misses for the same key both generate and both write,
  last write wins (the content is the same)
- a failed write back does not fail the request, the fresh bytes are
  still served

Generation falls back differently per media kind. An image that cannot
be decoded is served as its original bytes. A video whose frame cannot
be extracted yields a Placeholder and the caller shows the file icon.
"""

import asyncio
import logging
import tempfile
from pathlib import Path
from typing import Optional

from .errors import GenerationError, ImageDecodeError, ObjectNotFoundError, StorageError
from .models import (
    JPEG_CONTENT_TYPE,
    THUMBNAIL_CACHE_CONTROL,
    MediaKind,
    Placeholder,
    PlaceholderReason,
    SoftFailure,
    ThumbnailOutcome,
    ThumbnailResult,
    ThumbnailSource,
)
from .naming import classify, extension_of, thumbnail_key
from .ports import ImageCodec, ObjectStore, Transcoder

logger = logging.getLogger(__name__)

DEFAULT_THUMBNAIL_WIDTH = 300
DEFAULT_FRAME_OFFSET_SECONDS = 1.0


class ThumbnailResolver:
    """
    Serves cached thumbnails and generates missing ones.

    Stateless apart from its collaborators, so one instance is shared by
    all requests for the life of the process.
    """

    def __init__(
        self,
        store: ObjectStore,
        codec: ImageCodec,
        transcoder: Transcoder,
        width: int = DEFAULT_THUMBNAIL_WIDTH,
        frame_offset_seconds: float = DEFAULT_FRAME_OFFSET_SECONDS,
        cache_control: str = THUMBNAIL_CACHE_CONTROL,
    ) -> None:
        if width <= 0:
            raise ValueError("Thumbnail width must be positive")
        self._store = store
        self._codec = codec
        self._transcoder = transcoder
        self._width = width
        self._frame_offset_seconds = frame_offset_seconds
        self._cache_control = cache_control

    async def resolve(self, name: str) -> ThumbnailOutcome:
        """
        Return the thumbnail for the object called name.

        Raises:
            InvalidObjectNameError: name is empty or already a thumbnail key
            ObjectNotFoundError: the original does not exist
            StorageError: the bucket could not be read
        """
        key = thumbnail_key(name)

        try:
            await self._store.stat_object(key)
        except ObjectNotFoundError:
            return await self._generate_missing(name, key)

        data = await self._store.get_object(key)
        return self._result(data, ThumbnailSource.CACHE, key)

    async def populate(self, name: str, local_path: Path) -> ThumbnailOutcome:
        """
        Generate the thumbnail for name from a copy already on local disk
        and write it to the bucket.

        Used on the miss path and right after an upload. Generation
        problems come back as ORIGINAL_FALLBACK or a Placeholder, never
        as an exception.
        """
        key = thumbnail_key(name)
        kind = classify(name)
        if not kind.has_thumbnail:
            return Placeholder(name=name, reason=PlaceholderReason.NOT_APPLICABLE)

        try:
            data = await self._render(local_path, kind)
        except ImageDecodeError as e:
            if kind is not MediaKind.IMAGE:
                return self._failed(name, kind, e)
            logger.warning(
                "Image decode failed, serving original",
                extra={"object_name": name, "error": str(e)}
            )
            original = await asyncio.to_thread(local_path.read_bytes)
            return self._result(original, ThumbnailSource.ORIGINAL_FALLBACK, key)
        except GenerationError as e:
            return self._failed(name, kind, e)

        result = self._result(data, ThumbnailSource.GENERATED, key)
        failure = await self._write_cache(key, data)
        if failure is not None:
            result.soft_failures.append(failure)
        return result

    async def _generate_missing(self, name: str, key: str) -> ThumbnailOutcome:
        if not classify(name).has_thumbnail:
            # raises ObjectNotFoundError when the original is gone
            await self._store.stat_object(name)
            return Placeholder(name=name, reason=PlaceholderReason.NOT_APPLICABLE)

        logger.info(
            "Generating missing thumbnail",
            extra={"object_name": name, "thumbnail_key": key}
        )

        # the original only lives on disk for the duration of this block
        with tempfile.TemporaryDirectory(prefix="thumb-") as workdir:
            local_path = Path(workdir) / ("original" + extension_of(name).lower())
            with open(local_path, "wb") as f:
                await self._store.download_to(name, f)
            return await self.populate(name, local_path)

    async def _render(self, local_path: Path, kind: MediaKind) -> bytes:
        if kind is not MediaKind.VIDEO:
            return await asyncio.to_thread(self._encode_thumbnail, local_path)

        with tempfile.TemporaryDirectory(prefix="frame-") as frame_dir:
            frame_path = Path(frame_dir) / "frame.jpg"
            await self._transcoder.extract_frame(
                local_path,
                frame_path,
                self._frame_offset_seconds,
            )
            try:
                return await asyncio.to_thread(self._encode_thumbnail, frame_path)
            except ImageDecodeError as e:
                # no original-bytes fallback for videos
                raise GenerationError(f"Extracted frame is unreadable: {e}")

    def _encode_thumbnail(self, path: Path) -> bytes:
        image = self._codec.decode(path)
        resized = self._codec.resize_to_width(image, self._width)
        return self._codec.encode_jpeg(resized)

    async def _write_cache(self, key: str, data: bytes) -> Optional[SoftFailure]:
        try:
            await self._store.put_object(key, data, JPEG_CONTENT_TYPE)
        except StorageError as e:
            logger.error(
                "Failed to save thumbnail",
                extra={"thumbnail_key": key, "error": str(e)}
            )
            return SoftFailure(operation="cache_write", target=key, error=str(e))
        return None

    def _result(self, data: bytes, source: ThumbnailSource, key: str) -> ThumbnailResult:
        return ThumbnailResult(
            data=data,
            source=source,
            key=key,
            cache_control=self._cache_control,
        )

    @staticmethod
    def _failed(name: str, kind: MediaKind, error: Exception) -> Placeholder:
        logger.warning(
            "Thumbnail generation failed",
            extra={"object_name": name, "kind": kind.value, "error": str(error)}
        )
        return Placeholder(
            name=name,
            reason=PlaceholderReason.GENERATION_FAILED,
            detail=str(error),
        )
