"""
Object naming and classification rules.

Object names always use forward slashes, whatever the host OS. These
functions are pure so they can be used from listing, thumbnail, and
upload code alike without touching the store.
"""

import mimetypes
import posixpath
from datetime import datetime

from .errors import InvalidObjectNameError
from .models import MediaKind


THUMBNAIL_PREFIX = "thumb/"

IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif", ".webp"})
VIDEO_EXTENSIONS = frozenset({".mp4", ".mov", ".mkv", ".webm"})

# mimetypes does not know every container on every platform
VIDEO_CONTENT_TYPES = {
    ".mp4": "video/mp4",
    ".mov": "video/quicktime",
    ".webm": "video/webm",
    ".mkv": "video/x-matroska",
}
DEFAULT_CONTENT_TYPE = "application/octet-stream"

_KB = 1 << 10
_MB = 1 << 20
_GB = 1 << 30


def extension_of(name: str) -> str:
    """
    Return the extension of the last path segment, dot included.

    "a/b.tar.gz" -> ".gz", "a.b/readme" -> "", ".env" -> ".env".
    """
    base = name.rsplit("/", 1)[-1]
    dot = base.rfind(".")
    if dot < 0:
        return ""
    return base[dot:]


def strip_extension(name: str) -> str:
    ext = extension_of(name)
    return name[: len(name) - len(ext)] if ext else name


def is_thumbnail_key(name: str) -> bool:
    """True for derived objects living under thumb/."""
    return name.startswith(THUMBNAIL_PREFIX)


def thumbnail_key(name: str) -> str:
    """
    Map an object name to the name of its cached thumbnail.

    "photos/vacation.jpg" -> "thumb/photos/vacation.jpg"
    "videos/trip.mp4"     -> "thumb/videos/trip.jpg"

    Thumbnails are always JPEG, so the original extension is replaced.
    The mapping is not meant to be applied to its own output.
    """
    if not name:
        raise InvalidObjectNameError("Object name cannot be empty")
    if is_thumbnail_key(name):
        raise InvalidObjectNameError(f"'{name}' is already a thumbnail key")
    return THUMBNAIL_PREFIX + strip_extension(name) + ".jpg"


def classify(name: str) -> MediaKind:
    """Classify by extension, case-insensitively."""
    ext = extension_of(name).lower()
    if ext in IMAGE_EXTENSIONS:
        return MediaKind.IMAGE
    if ext in VIDEO_EXTENSIONS:
        return MediaKind.VIDEO
    return MediaKind.OTHER


def is_pdf(name: str) -> bool:
    return extension_of(name).lower() == ".pdf"


def detect_content_type(name: str) -> str:
    """
    Guess a display content type from the extension.

    Falls back to a small table of video types, then to a generic
    binary type.
    """
    content_type, _ = mimetypes.guess_type(posixpath.basename(name))
    if content_type:
        return content_type
    return VIDEO_CONTENT_TYPES.get(extension_of(name).lower(), DEFAULT_CONTENT_TYPE)


def human_readable_size(size: int) -> str:
    """Format a byte count: 500 -> "500 B", 2048 -> "2.00 KB"."""
    if size >= _GB:
        return f"{size / _GB:.2f} GB"
    if size >= _MB:
        return f"{size / _MB:.2f} MB"
    if size >= _KB:
        return f"{size / _KB:.2f} KB"
    return f"{size} B"


def format_upload_date(uploaded_at: datetime) -> str:
    """Short day-month label used on the index page, e.g. "02 Jan"."""
    return uploaded_at.strftime("%d %b")


def join_object_name(folder: str, filename: str) -> str:
    """
    Build the object name for an upload.

    The folder is optional; slashes around it are normalized so
    "reports/" + "q.jpg" and "reports" + "q.jpg" agree.
    """
    folder = folder.strip().strip("/")
    filename = filename.strip().lstrip("/")
    if not folder:
        return filename
    return posixpath.join(folder, filename)
