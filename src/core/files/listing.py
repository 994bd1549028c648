"""
Bucket listing for the index and viewer pages.

Thumbnails live in the same bucket under thumb/ and are never shown.
Entries whose attributes could not be read are dropped from the page
rather than failing the whole listing.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable
from urllib.parse import quote

from .errors import ObjectNotFoundError, StorageError
from .models import FileEntry, ObjectDetails, SoftFailure, StoredObject
from .naming import (
    classify,
    detect_content_type,
    format_upload_date,
    human_readable_size,
    is_pdf,
    is_thumbnail_key,
)
from .ports import ListedObject, ObjectStore

logger = logging.getLogger(__name__)

FILE_ICON_URL = "/static/file-icon.svg"
UNKNOWN_SIZE = "Unknown size"


@dataclass
class Listing:
    """Visible entries plus the ones that had to be left out."""
    entries: list[FileEntry] = field(default_factory=list)
    skipped: list[SoftFailure] = field(default_factory=list)

    @property
    def names(self) -> list[str]:
        return [entry.name for entry in self.entries]


def thumbnail_url(name: str) -> str:
    """URL of the thumbnail route for an original object."""
    return "/thumb/" + quote(name, safe="/")


def to_file_entry(obj: StoredObject) -> FileEntry:
    kind = classify(obj.name)
    return FileEntry(
        name=obj.name,
        size=human_readable_size(obj.size),
        uploaded=format_upload_date(obj.uploaded_at),
        content_type=detect_content_type(obj.name),
        thumbnail_url=thumbnail_url(obj.name) if kind.has_thumbnail else FILE_ICON_URL,
        kind=kind,
    )


def build_listing(listed: Iterable[ListedObject]) -> Listing:
    """Turn raw store entries into page rows, keeping store order."""
    listing = Listing()
    for item in listed:
        if isinstance(item, SoftFailure):
            if not is_thumbnail_key(item.target):
                listing.skipped.append(item)
            continue
        if is_thumbnail_key(item.name):
            continue
        listing.entries.append(to_file_entry(item))
    return listing


async def list_files(store: ObjectStore) -> Listing:
    """
    List the bucket for the index page.

    Raises StorageError if the listing itself fails; individual
    unreadable entries only end up in Listing.skipped.
    """
    listing = build_listing(await store.list_objects())

    for failure in listing.skipped:
        logger.debug(
            "Skipping object with unreadable attributes",
            extra={"object_name": failure.target, "error": failure.error}
        )

    return listing


async def describe_object(store: ObjectStore, name: str) -> ObjectDetails:
    """
    Gather what the viewer page shows about one object.

    The page renders even when the attribute probe fails; the size then
    reads "Unknown size".
    """
    size = UNKNOWN_SIZE
    try:
        obj = await store.stat_object(name)
        size = human_readable_size(obj.size)
    except (ObjectNotFoundError, StorageError) as e:
        logger.info(
            "Could not read object attributes",
            extra={"object_name": name, "error": str(e)}
        )

    return ObjectDetails(
        name=name,
        size=size,
        content_type=detect_content_type(name),
        kind=classify(name),
        is_pdf=is_pdf(name),
    )
