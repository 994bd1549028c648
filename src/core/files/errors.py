"""
Error taxonomy for the bucket browser.

- StorageError: the bucket or local disk failed (transient I/O)
- ObjectNotFoundError: the object is absent
- ImageDecodeError: the file is not a readable image
- TranscoderError / ImageEncodeError: a thumbnail could not be produced
- InvalidObjectNameError: the name has no thumbnail key
- InvalidUploadError: the upload form was unusable

Infrastructure raises these; the HTTP layer maps them to status codes.
Nothing is retried.
"""


class StorageError(Exception):
    """Raised when storage operations fail."""
    pass


class ObjectNotFoundError(StorageError):
    """Raised when the requested object does not exist."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Object not found: {name}")
        self.name = name


class GenerationError(Exception):
    """Base for failures while producing a thumbnail."""
    pass


class TranscoderError(GenerationError):
    """Raised when a frame could not be extracted from a video."""
    pass


class ImageDecodeError(GenerationError):
    """Raised when a file is not a readable image."""
    pass


class ImageEncodeError(GenerationError):
    """Raised when a thumbnail could not be written as JPEG."""
    pass


class InvalidObjectNameError(ValueError):
    """Raised when a name cannot have a thumbnail key (empty, or already under thumb/)."""
    pass


class InvalidUploadError(ValueError):
    """Raised when an upload has no usable object name."""
    pass
