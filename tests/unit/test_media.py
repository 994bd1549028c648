"""
Unit tests for the Pillow codec and the FFmpeg command line.

FFmpeg itself is not run; FFmpegTranscoder's binary check is skipped by
building the instance without __init__.
"""

from pathlib import Path

import pytest
from PIL import Image

from src.core.files.errors import ImageDecodeError, TranscoderError
from src.infrastructure.media.codec import PillowImageCodec, proportional_height
from src.infrastructure.media.transcoder import (
    FFmpegTranscoder,
    MockTranscoder,
    create_transcoder,
    format_offset,
)
from tests.fakes import image_format, image_size, make_image_bytes


def bare_transcoder(ffmpeg_path: str) -> FFmpegTranscoder:
    transcoder = FFmpegTranscoder.__new__(FFmpegTranscoder)
    transcoder._ffmpeg = ffmpeg_path
    return transcoder


class TestProportionalHeight:
    """Tests for the resize arithmetic."""

    def test_landscape(self):
        assert proportional_height((600, 400), 300) == 200

    def test_rounds_to_nearest(self):
        assert proportional_height((1280, 720), 300) == 169

    def test_never_zero(self):
        """A very wide strip still gets one row of pixels."""
        assert proportional_height((10000, 1), 300) == 1


class TestPillowImageCodec:
    """Tests for decode/resize/encode."""

    def test_decode_resize_encode(self, tmp_path):
        path = tmp_path / "a.png"
        path.write_bytes(make_image_bytes((600, 400)))
        codec = PillowImageCodec()

        data = codec.encode_jpeg(codec.resize_to_width(codec.decode(path), 300))

        assert image_format(data) == "JPEG"
        assert image_size(data) == (300, 200)

    def test_decode_rejects_garbage(self, tmp_path):
        path = tmp_path / "a.jpg"
        path.write_bytes(b"not an image at all")

        with pytest.raises(ImageDecodeError):
            PillowImageCodec().decode(path)

    def test_decode_rejects_missing_file(self, tmp_path):
        with pytest.raises(ImageDecodeError):
            PillowImageCodec().decode(tmp_path / "missing.png")

    @pytest.mark.parametrize("mode", ["P", "1"])
    def test_palette_and_bilevel_images_are_smoothed(self, tmp_path, mode):
        """1px black/white stripes halved in width blend to grey, as with any Lanczos resize."""
        stripes = Image.new("L", (600, 400), 0)
        for x in range(0, 600, 2):
            stripes.paste(255, (x, 0, x + 1, 400))
        path = tmp_path / "stripes.png"
        stripes.convert(mode).save(path, "PNG")
        codec = PillowImageCodec()

        image = codec.decode(path)
        assert image.mode == mode
        resized = codec.resize_to_width(image, 300)

        levels = {value for _, value in resized.convert("L").getcolors()}
        assert any(0 < value < 255 for value in levels)

    def test_palette_image_is_encoded(self):
        image = Image.new("P", (40, 20))

        data = PillowImageCodec().encode_jpeg(image)

        assert image_format(data) == "JPEG"

    def test_quality_changes_output(self):
        image = Image.effect_noise((200, 200), 64).convert("RGB")

        low = PillowImageCodec(jpeg_quality=20).encode_jpeg(image)
        high = PillowImageCodec(jpeg_quality=95).encode_jpeg(image)

        assert len(low) < len(high)


class TestFFmpegCommand:
    """Tests for how ffmpeg is invoked."""

    def test_format_offset(self):
        assert format_offset(1.0) == "00:00:01.000"
        assert format_offset(3725.5) == "01:02:05.500"

    def test_command_seeks_and_takes_one_frame(self):
        cmd = bare_transcoder("/usr/bin/ffmpeg").build_command(
            Path("/tmp/in.mp4"), Path("/tmp/out.jpg"), 1.0
        )

        assert cmd == [
            "/usr/bin/ffmpeg",
            "-y",
            "-i", "/tmp/in.mp4",
            "-ss", "00:00:01.000",
            "-vframes", "1",
            "-f", "image2",
            "/tmp/out.jpg",
        ]

    def test_missing_binary_fails_at_startup(self):
        with pytest.raises(RuntimeError, match="not found"):
            FFmpegTranscoder(ffmpeg_path="/nonexistent/ffmpeg-binary")

    @pytest.mark.asyncio
    async def test_extract_frame_reports_missing_binary(self, tmp_path):
        transcoder = bare_transcoder(str(tmp_path / "no-ffmpeg"))

        with pytest.raises(TranscoderError):
            await transcoder.extract_frame(tmp_path / "in.mp4", tmp_path / "out.jpg", 1.0)


class TestMockTranscoder:
    @pytest.mark.asyncio
    async def test_writes_a_decodable_frame(self, tmp_path):
        out = tmp_path / "frame.jpg"

        await MockTranscoder().extract_frame(tmp_path / "in.mp4", out, 1.0)

        assert image_size(out.read_bytes()) == (640, 360)

    def test_factory_returns_mock(self):
        assert isinstance(create_transcoder(mock_mode=True), MockTranscoder)
