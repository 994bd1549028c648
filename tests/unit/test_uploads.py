"""
Unit tests for upload ingestion.
"""

import hashlib
import io

import pytest

from src.core.files.errors import InvalidUploadError
from src.core.files.thumbnails import ThumbnailResolver
from src.core.files.uploads import UploadService, UploadTooLargeError, resolve_object_name
from tests.fakes import FailingTranscoder, FailingWriteStore, image_size, make_image_bytes


@pytest.fixture
def uploads(store, resolver) -> UploadService:
    return UploadService(store=store, resolver=resolver)


class TestResolveObjectName:
    """Tests for choosing the stored name of an upload."""

    def test_uses_uploaded_filename(self):
        assert resolve_object_name("q.jpg") == "q.jpg"

    def test_folder_is_prepended(self):
        assert resolve_object_name("q.jpg", folder="reports") == "reports/q.jpg"

    def test_custom_name_replaces_filename(self):
        assert resolve_object_name("IMG_0001.JPG", folder="trips", custom_name="beach.jpg") == "trips/beach.jpg"

    def test_blank_custom_name_is_ignored(self):
        assert resolve_object_name("q.jpg", custom_name="   ") == "q.jpg"

    def test_rejects_missing_name(self):
        with pytest.raises(InvalidUploadError, match="file name"):
            resolve_object_name("", folder="reports")

    def test_rejects_thumbnail_folder(self):
        """Uploads may not land where thumbnails are cached."""
        with pytest.raises(InvalidUploadError, match="reserved"):
            resolve_object_name("a.jpg", folder="thumb")


@pytest.mark.asyncio
class TestIngest:
    """Tests for storing uploads and creating their thumbnails."""

    async def test_image_upload_creates_original_and_thumbnail(self, store, uploads):
        """Uploading reports/q.jpg leaves both reports/q.jpg and thumb/reports/q.jpg."""
        data = make_image_bytes((600, 400), fmt="JPEG")

        receipt = await uploads.ingest(io.BytesIO(data), "q.jpg", folder="reports")

        assert receipt.name == "reports/q.jpg"
        assert receipt.size == len(data)
        assert receipt.thumbnail_created
        assert receipt.thumbnail_key == "thumb/reports/q.jpg"
        assert receipt.soft_failures == []
        assert store.names() == ["reports/q.jpg", "thumb/reports/q.jpg"]
        assert await store.get_object("reports/q.jpg") == data
        assert image_size(await store.get_object("thumb/reports/q.jpg")) == (300, 200)

    async def test_receipt_carries_sha1(self, uploads):
        data = b"plain text body"

        receipt = await uploads.ingest(io.BytesIO(data), "notes.txt")

        assert receipt.sha1 == hashlib.sha1(data).hexdigest()

    async def test_non_media_upload_has_no_thumbnail(self, store, uploads):
        receipt = await uploads.ingest(io.BytesIO(b"%PDF-1.4"), "report.pdf", folder="docs")

        assert not receipt.thumbnail_created
        assert receipt.soft_failures == []
        assert store.names() == ["docs/report.pdf"]

    async def test_video_upload_creates_thumbnail(self, store, uploads):
        receipt = await uploads.ingest(io.BytesIO(b"fake video"), "trip.mp4", folder="videos")

        assert receipt.thumbnail_key == "thumb/videos/trip.jpg"
        assert store.contains("thumb/videos/trip.jpg")

    async def test_empty_file_is_stored(self, store, uploads):
        receipt = await uploads.ingest(io.BytesIO(b""), "empty.txt")

        assert receipt.size == 0
        assert store.contains("empty.txt")

    async def test_undecodable_image_still_uploads(self, store, uploads):
        """The original is kept; the missing thumbnail is only reported."""
        receipt = await uploads.ingest(io.BytesIO(b"not an image"), "broken.png")

        assert store.names() == ["broken.png"]
        assert not receipt.thumbnail_created
        assert [f.operation for f in receipt.soft_failures] == ["generate"]

    async def test_failed_video_thumbnail_still_uploads(self, store, codec):
        resolver = ThumbnailResolver(store=store, codec=codec, transcoder=FailingTranscoder())
        uploads = UploadService(store=store, resolver=resolver)

        receipt = await uploads.ingest(io.BytesIO(b"fake video"), "clip.mov")

        assert store.names() == ["clip.mov"]
        assert not receipt.thumbnail_created
        assert receipt.soft_failures[0].target == "clip.mov"

    async def test_failed_thumbnail_write_is_reported(self, codec, transcoder):
        store = FailingWriteStore()
        resolver = ThumbnailResolver(store=store, codec=codec, transcoder=transcoder)
        uploads = UploadService(store=store, resolver=resolver)

        receipt = await uploads.ingest(io.BytesIO(make_image_bytes()), "a.png")

        assert store.names() == ["a.png"]
        assert not receipt.thumbnail_created
        assert [f.operation for f in receipt.soft_failures] == ["cache_write"]

    async def test_size_limit(self, store, resolver):
        uploads = UploadService(store=store, resolver=resolver, max_size_bytes=10)

        with pytest.raises(UploadTooLargeError) as exc_info:
            await uploads.ingest(io.BytesIO(b"x" * 11), "big.bin")

        assert exc_info.value.limit_bytes == 10
        assert store.names() == []

    async def test_upload_at_limit_is_accepted(self, store, resolver):
        uploads = UploadService(store=store, resolver=resolver, max_size_bytes=10)

        receipt = await uploads.ingest(io.BytesIO(b"x" * 10), "exact.bin")

        assert receipt.size == 10

    async def test_thumbnail_folder_rejected_before_storing(self, store, uploads):
        with pytest.raises(InvalidUploadError):
            await uploads.ingest(io.BytesIO(b"data"), "a.jpg", folder="thumb/photos")

        assert store.names() == []

    async def test_no_leftovers_in_temp_dir(self, uploads, scratch_tempdir):
        await uploads.ingest(io.BytesIO(make_image_bytes()), "a.png")
        await uploads.ingest(io.BytesIO(b"fake video"), "b.mp4")

        assert list(scratch_tempdir.iterdir()) == []
