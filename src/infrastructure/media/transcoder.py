"""
Video frame extraction using FFmpeg.

Video thumbnails start from a single still taken a little way into the
stream, since the very first frame is often black. FFmpeg does the
extraction because it handles every container we list (mp4, mov, mkv,
webm) and works best with file paths, so callers hand it paths on local
disk rather than bytes.
"""

import asyncio
import logging
import subprocess
from pathlib import Path

from PIL import Image

from ...core.files.errors import TranscoderError
from ...core.files.ports import Transcoder

logger = logging.getLogger(__name__)


def format_offset(seconds: float) -> str:
    """Format a seek offset as HH:MM:SS.mmm for ffmpeg's -ss option."""
    millis = int(round(seconds * 1000))
    hours, millis = divmod(millis, 3_600_000)
    minutes, millis = divmod(millis, 60_000)
    secs, millis = divmod(millis, 1000)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}.{millis:03d}"


class FFmpegTranscoder:
    """
    Frame extractor using the ffmpeg binary.

    The subprocess runs on a worker thread so a slow video only holds
    up the request that asked for it. No timeout is applied.
    """

    def __init__(self, ffmpeg_path: str = "ffmpeg"):
        """
        Initialize transcoder with the FFmpeg path.

        Args:
            ffmpeg_path: Path to ffmpeg binary (default assumes it's in PATH)
        """
        self._ffmpeg = ffmpeg_path

        # verify ffmpeg is available
        try:
            result = subprocess.run(
                [self._ffmpeg, "-version"],
                capture_output=True,
                text=True,
                timeout=5
            )
            if result.returncode != 0:
                raise RuntimeError("FFmpeg not working properly")
            logger.info("FFmpeg transcoder initialized")
        except FileNotFoundError:
            raise RuntimeError(
                "FFmpeg not found. Install it to generate video thumbnails."
            )

    def build_command(
        self,
        video_path: Path,
        output_path: Path,
        offset_seconds: float,
    ) -> list[str]:
        # -y to overwrite the (empty) temp file we were handed
        # -vframes 1 -f image2 for a single still
        return [
            self._ffmpeg,
            "-y",
            "-i", str(video_path),
            "-ss", format_offset(offset_seconds),
            "-vframes", "1",
            "-f", "image2",
            str(output_path),
        ]

    async def extract_frame(
        self,
        video_path: Path,
        output_path: Path,
        offset_seconds: float,
    ) -> None:
        cmd = self.build_command(video_path, output_path, offset_seconds)

        try:
            result = await asyncio.to_thread(
                subprocess.run,
                cmd,
                capture_output=True,
            )
        except OSError as e:
            raise TranscoderError(f"Could not run ffmpeg: {e}")

        if result.returncode != 0:
            stderr = result.stderr.decode(errors="replace")
            logger.warning(
                "FFmpeg failed",
                extra={"video_path": str(video_path), "stderr": stderr[-2000:]}
            )
            raise TranscoderError(f"ffmpeg exited with status {result.returncode}")

        if not output_path.exists() or output_path.stat().st_size == 0:
            raise TranscoderError("ffmpeg produced no frame")


class MockTranscoder:
    """
    Mock transcoder for local development without FFmpeg.

    Writes a flat grey frame instead of decoding the video. Useful for
    testing the upload and thumbnail flow without actual video tooling.
    """

    def __init__(self, size: tuple[int, int] = (640, 360)):
        self._size = size
        logger.info("Initialized mock transcoder")

    async def extract_frame(
        self,
        video_path: Path,
        output_path: Path,
        offset_seconds: float,
    ) -> None:
        frame = Image.new("RGB", self._size, (96, 96, 96))
        frame.save(output_path, "JPEG")


def create_transcoder(
    mock_mode: bool = False,
    ffmpeg_path: str = "ffmpeg",
) -> Transcoder:
    """
    Factory function for the frame extractor.

    Args:
        mock_mode: If True, return mock transcoder (no FFmpeg required)
        ffmpeg_path: ffmpeg binary for the real transcoder

    Returns:
        Transcoder implementation
    """
    if mock_mode:
        return MockTranscoder()

    return FFmpegTranscoder(ffmpeg_path=ffmpeg_path)
