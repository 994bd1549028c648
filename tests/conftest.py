"""
Shared fixtures.

Everything runs against the in-memory bucket; video frames come from
FrameTranscoder, so neither B2 nor FFmpeg is needed.
"""

import tempfile
from pathlib import Path

import pytest

from src.core.files.thumbnails import ThumbnailResolver
from src.infrastructure.storage.client import InMemoryObjectStore
from tests.fakes import CountingCodec, FrameTranscoder


@pytest.fixture
def store() -> InMemoryObjectStore:
    return InMemoryObjectStore(bucket_name="test-bucket")


@pytest.fixture
def codec() -> CountingCodec:
    return CountingCodec()


@pytest.fixture
def transcoder() -> FrameTranscoder:
    return FrameTranscoder()


@pytest.fixture
def resolver(store, codec, transcoder) -> ThumbnailResolver:
    return ThumbnailResolver(store=store, codec=codec, transcoder=transcoder)


@pytest.fixture
def scratch_tempdir(tmp_path, monkeypatch) -> Path:
    """Point tempfile at an empty directory so leftovers can be detected."""
    scratch = tmp_path / "scratch"
    scratch.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(scratch))
    return scratch
