"""
Raster image decoding, resizing and JPEG encoding with Pillow.
"""

import io
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from ...core.files.errors import ImageDecodeError, ImageEncodeError

RESAMPLING_FILTER = Image.Resampling.LANCZOS


def proportional_height(size: tuple[int, int], width: int) -> int:
    """Height that keeps the aspect ratio at the given width (at least 1)."""
    src_width, src_height = size
    return max(1, int(src_height * width / src_width + 0.5))


class PillowImageCodec:
    """Image codec backed by Pillow."""

    def __init__(self, jpeg_quality: int = 75) -> None:
        self._jpeg_quality = jpeg_quality

    def decode(self, path: Path) -> Image.Image:
        """
        Fully decode the image at path.

        Image.open is lazy, so load() is forced here to surface truncated
        or corrupt files as ImageDecodeError instead of failing later
        during resize.
        """
        try:
            with Image.open(path) as opened:
                opened.load()
                return opened.copy()
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, EOFError, SyntaxError, ValueError) as e:
            raise ImageDecodeError(f"Cannot decode {path.name}: {e}")

    def resize_to_width(self, image: Image.Image, width: int) -> Image.Image:
        # Pillow resamples "P" and "1" images with NEAREST whatever the filter
        if image.mode == "P":
            image = image.convert("RGBA" if "transparency" in image.info else "RGB")
        elif image.mode == "1":
            image = image.convert("L")

        height = proportional_height(image.size, width)
        return image.resize((width, height), RESAMPLING_FILTER)

    def encode_jpeg(self, image: Image.Image) -> bytes:
        # JPEG holds neither alpha nor palettes
        if image.mode not in ("RGB", "L"):
            image = image.convert("RGB")

        buffer = io.BytesIO()
        try:
            image.save(buffer, "JPEG", quality=self._jpeg_quality)
        except OSError as e:
            raise ImageEncodeError(f"JPEG encoding failed: {e}")
        return buffer.getvalue()
