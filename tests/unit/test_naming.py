"""
Unit tests for object naming and classification.

Pure functions only: no store, no temp files.
"""

from datetime import datetime

import pytest

from src.core.files.errors import InvalidObjectNameError
from src.core.files.models import MediaKind
from src.core.files.naming import (
    classify,
    detect_content_type,
    extension_of,
    format_upload_date,
    human_readable_size,
    is_pdf,
    is_thumbnail_key,
    join_object_name,
    strip_extension,
    thumbnail_key,
)


# ---------------------------------------------------------------------------
# Thumbnail Key Tests
# ---------------------------------------------------------------------------

class TestThumbnailKey:
    """Tests for the original name -> thumb/ key mapping."""

    def test_image_keeps_folder_and_gets_jpg(self):
        """photos/x.png is cached at thumb/photos/x.jpg"""
        assert thumbnail_key("photos/x.png") == "thumb/photos/x.jpg"

    def test_jpeg_name_maps_to_same_basename(self):
        assert thumbnail_key("photos/vacation.jpg") == "thumb/photos/vacation.jpg"

    def test_video_extension_is_replaced(self):
        assert thumbnail_key("videos/trip.mp4") == "thumb/videos/trip.jpg"

    def test_only_last_extension_is_stripped(self):
        assert thumbnail_key("archive.tar.gz") == "thumb/archive.tar.jpg"

    def test_name_without_extension_gets_jpg_appended(self):
        assert thumbnail_key("README") == "thumb/README.jpg"

    def test_dot_in_folder_is_not_an_extension(self):
        """Only the last path segment is inspected for an extension."""
        assert thumbnail_key("v1.2/notes") == "thumb/v1.2/notes.jpg"

    def test_rejects_empty_name(self):
        with pytest.raises(InvalidObjectNameError, match="cannot be empty"):
            thumbnail_key("")

    def test_rejects_existing_thumbnail_key(self):
        """The mapping is never applied to its own output."""
        with pytest.raises(InvalidObjectNameError, match="already a thumbnail"):
            thumbnail_key("thumb/photos/x.jpg")

    def test_thumbnail_prefix_detection(self):
        assert is_thumbnail_key("thumb/a.jpg")
        assert not is_thumbnail_key("photos/thumb/a.jpg")
        assert not is_thumbnail_key("thumbnails.txt")


class TestExtensions:
    """Tests for extension parsing."""

    def test_extension_of_nested_name(self):
        assert extension_of("a/b.tar.gz") == ".gz"

    def test_extension_of_dotfile(self):
        assert extension_of(".env") == ".env"

    def test_no_extension(self):
        assert extension_of("a.b/readme") == ""
        assert strip_extension("a.b/readme") == "a.b/readme"

    def test_strip_extension_keeps_folder(self):
        assert strip_extension("clips/y.mp4") == "clips/y"


# ---------------------------------------------------------------------------
# Classification Tests
# ---------------------------------------------------------------------------

class TestClassify:
    """Tests for media kind detection by extension."""

    @pytest.mark.parametrize("name", ["a.jpg", "a.jpeg", "a.png", "a.gif", "a.webp"])
    def test_image_extensions(self, name):
        assert classify(name) is MediaKind.IMAGE

    @pytest.mark.parametrize("name", ["a.mp4", "a.mov", "a.mkv", "a.webm"])
    def test_video_extensions(self, name):
        assert classify(name) is MediaKind.VIDEO

    def test_classification_ignores_case(self):
        """Camera uploads often have upper-case extensions."""
        assert classify("DCIM/IMG_0001.JPG") is MediaKind.IMAGE
        assert classify("DCIM/MVI_0002.MOV") is MediaKind.VIDEO

    def test_other_files_have_no_thumbnail(self):
        kind = classify("docs/report.pdf")
        assert kind is MediaKind.OTHER
        assert not kind.has_thumbnail

    def test_pdf_detection(self):
        assert is_pdf("docs/Report.PDF")
        assert not is_pdf("docs/report.txt")


class TestContentType:
    """Tests for content type detection."""

    def test_known_image_type(self):
        assert detect_content_type("photos/x.png") == "image/png"

    def test_video_types(self):
        assert detect_content_type("clips/y.mp4") == "video/mp4"
        assert detect_content_type("clips/y.mkv") in ("video/x-matroska", "video/matroska")

    def test_unknown_type_falls_back_to_binary(self):
        assert detect_content_type("blob.zzz-unknown") == "application/octet-stream"
        assert detect_content_type("README") == "application/octet-stream"


# ---------------------------------------------------------------------------
# Formatting Tests
# ---------------------------------------------------------------------------

class TestHumanReadableSize:
    """Tests for byte count formatting."""

    @pytest.mark.parametrize(
        "size, expected",
        [
            (0, "0 B"),
            (500, "500 B"),
            (1023, "1023 B"),
            (1024, "1.00 KB"),
            (2048, "2.00 KB"),
            (1536, "1.50 KB"),
            (1048576, "1.00 MB"),
            (5242880, "5.00 MB"),
            (1073741824, "1.00 GB"),
            (3 * 1073741824, "3.00 GB"),
        ],
    )
    def test_formats(self, size, expected):
        assert human_readable_size(size) == expected


class TestUploadDate:
    def test_day_month_format(self):
        assert format_upload_date(datetime(2024, 1, 2, 15, 4, 5)) == "02 Jan"


class TestJoinObjectName:
    """Tests for building upload object names."""

    def test_no_folder(self):
        assert join_object_name("", "q.jpg") == "q.jpg"

    def test_folder_with_or_without_trailing_slash(self):
        assert join_object_name("reports", "q.jpg") == "reports/q.jpg"
        assert join_object_name("reports/", "q.jpg") == "reports/q.jpg"

    def test_surrounding_slashes_and_spaces_removed(self):
        assert join_object_name(" /reports/2024/ ", "/q.jpg") == "reports/2024/q.jpg"
