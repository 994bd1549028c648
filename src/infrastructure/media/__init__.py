"""
Media processing infrastructure.

Handles the tooling behind thumbnails:
- Frame extraction from videos using FFmpeg
- Image decode, resize and JPEG encode using Pillow
"""

from .codec import PillowImageCodec
from .transcoder import (
    FFmpegTranscoder,
    MockTranscoder,
    create_transcoder,
)

__all__ = [
    "PillowImageCodec",
    "FFmpegTranscoder",
    "MockTranscoder",
    "create_transcoder",
]
