"""
Domain models for the bucket browser.

These models represent the core concepts: stored objects, the records
the pages render, and the outcomes of thumbnail resolution. They have
no dependencies on FastAPI, boto3, or Pillow.

Lenient side effects (a listing entry whose attributes could not be
read, a thumbnail that could not be written back to the bucket) are
returned as SoftFailure values instead of being swallowed, so callers
decide what to ignore and the decision shows up in the logs.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Union


JPEG_CONTENT_TYPE = "image/jpeg"
THUMBNAIL_CACHE_CONTROL = "public, max-age=604800"


class MediaKind(Enum):
    """How a file is treated when building its preview."""
    IMAGE = "image"
    VIDEO = "video"
    OTHER = "other"

    @property
    def has_thumbnail(self) -> bool:
        return self is not MediaKind.OTHER


class ThumbnailSource(Enum):
    """Where the bytes of a served thumbnail came from."""
    CACHE = "cache"                          # existing thumb/ object
    GENERATED = "generated"                  # decoded, resized, encoded just now
    ORIGINAL_FALLBACK = "original_fallback"  # image failed to decode, original bytes served


class PlaceholderReason(Enum):
    """Why no thumbnail bytes could be produced."""
    NOT_APPLICABLE = "not_applicable"        # neither image nor video
    GENERATION_FAILED = "generation_failed"  # frame extraction or encoding failed


@dataclass(frozen=True)
class StoredObject:
    """
    An object as reported by the store.

    Frozen because it is a snapshot of attributes at listing time,
    not a handle that tracks the object.
    """
    name: str
    size: int
    uploaded_at: datetime

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Object name cannot be empty")
        if self.size < 0:
            raise ValueError("Object size cannot be negative")


@dataclass(frozen=True)
class SoftFailure:
    """
    A failure the caller chose to tolerate.

    operation names the step ("stat", "cache_write", "generate"),
    target is the object name it concerned.
    """
    operation: str
    target: str
    error: str


@dataclass
class ThumbnailResult:
    """
    JPEG bytes ready to be served.

    content_type stays image/jpeg even for ORIGINAL_FALLBACK, where the
    bytes are the original file. Browsers sniff the real format, so this
    mirrors what clients have always received from the thumbnail route.
    """
    data: bytes
    source: ThumbnailSource
    key: str
    content_type: str = JPEG_CONTENT_TYPE
    cache_control: str = THUMBNAIL_CACHE_CONTROL
    soft_failures: list[SoftFailure] = field(default_factory=list)

    @property
    def cached(self) -> bool:
        return self.source is ThumbnailSource.CACHE


@dataclass(frozen=True)
class Placeholder:
    """Signals that the caller should show the generic file icon."""
    name: str
    reason: PlaceholderReason
    detail: str = ""


ThumbnailOutcome = Union[ThumbnailResult, Placeholder]


@dataclass(frozen=True)
class FileEntry:
    """One row of the index page."""
    name: str
    size: str
    uploaded: str
    content_type: str
    thumbnail_url: str
    kind: MediaKind


@dataclass(frozen=True)
class ObjectDetails:
    """Everything the viewer page needs about one object."""
    name: str
    size: str
    content_type: str
    kind: MediaKind
    is_pdf: bool

    @property
    def is_image(self) -> bool:
        return self.kind is MediaKind.IMAGE

    @property
    def is_video(self) -> bool:
        return self.kind is MediaKind.VIDEO


@dataclass
class UploadReceipt:
    """Result of a successful upload."""
    name: str
    size: int
    sha1: str
    thumbnail_key: Optional[str] = None
    soft_failures: list[SoftFailure] = field(default_factory=list)

    @property
    def thumbnail_created(self) -> bool:
        return self.thumbnail_key is not None
