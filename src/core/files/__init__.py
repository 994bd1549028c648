"""
Bucket browsing logic.

Contains the naming rules, domain models, listing, upload ingestion and
the thumbnail cache resolver.
"""

from .errors import (
    GenerationError,
    ImageDecodeError,
    ImageEncodeError,
    InvalidObjectNameError,
    InvalidUploadError,
    ObjectNotFoundError,
    StorageError,
    TranscoderError,
)
from .listing import Listing, describe_object, list_files
from .models import (
    FileEntry,
    MediaKind,
    ObjectDetails,
    Placeholder,
    PlaceholderReason,
    SoftFailure,
    StoredObject,
    ThumbnailResult,
    ThumbnailSource,
    UploadReceipt,
)
from .naming import classify, human_readable_size, thumbnail_key
from .thumbnails import ThumbnailResolver
from .uploads import UploadService, UploadTooLargeError

__all__ = [
    "GenerationError",
    "ImageDecodeError",
    "ImageEncodeError",
    "InvalidObjectNameError",
    "InvalidUploadError",
    "ObjectNotFoundError",
    "StorageError",
    "TranscoderError",
    "Listing",
    "describe_object",
    "list_files",
    "FileEntry",
    "MediaKind",
    "ObjectDetails",
    "Placeholder",
    "PlaceholderReason",
    "SoftFailure",
    "StoredObject",
    "ThumbnailResult",
    "ThumbnailSource",
    "UploadReceipt",
    "classify",
    "human_readable_size",
    "thumbnail_key",
    "ThumbnailResolver",
    "UploadService",
    "UploadTooLargeError",
]
