"""
Protocols (interfaces) for the collaborators the browser depends on.

Using Protocols here means the thumbnail and listing logic doesn't know
or care whether it talks to B2, an in-memory bucket, FFmpeg, or a fake
in a test. The implementations live in src.infrastructure.
"""

from pathlib import Path
from typing import Any, BinaryIO, Optional, Protocol, Union

from .models import SoftFailure, StoredObject

ListedObject = Union[StoredObject, SoftFailure]


class ObjectStore(Protocol):
    """Bucket operations. The bucket is fixed for the life of the client."""

    bucket_name: str

    async def list_objects(self, prefix: str = "") -> list[ListedObject]:
        """List objects with attributes, in key order."""
        ...

    async def stat_object(self, name: str) -> StoredObject:
        """Return attributes of one object. Raises ObjectNotFoundError."""
        ...

    async def get_object(self, name: str) -> bytes:
        """Read an object fully into memory."""
        ...

    async def download_to(self, name: str, fileobj: BinaryIO) -> None:
        """Stream an object into a writable binary file."""
        ...

    async def put_object(
        self,
        name: str,
        data: bytes,
        content_type: Optional[str] = None,
    ) -> None:
        """Write an object, overwriting any existing one."""
        ...

    async def upload_from(
        self,
        name: str,
        fileobj: BinaryIO,
        content_type: Optional[str] = None,
    ) -> None:
        """Stream a readable binary file into an object."""
        ...

    async def check_bucket(self) -> None:
        """Raise StorageError if the bucket is not reachable."""
        ...


class Transcoder(Protocol):
    """Single-frame extraction from a local video file."""

    async def extract_frame(
        self,
        video_path: Path,
        output_path: Path,
        offset_seconds: float,
    ) -> None:
        """Write one still of video_path to output_path. Raises TranscoderError."""
        ...


class ImageCodec(Protocol):
    """
    Image operations thumbnails need.

    Images are passed around as opaque values; only the codec looks
    inside them.
    """

    def decode(self, path: Path) -> Any:
        """Raises ImageDecodeError."""
        ...

    def resize_to_width(self, image: Any, width: int) -> Any:
        ...

    def encode_jpeg(self, image: Any) -> bytes:
        """Raises ImageEncodeError."""
        ...
