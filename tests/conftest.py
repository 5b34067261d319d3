from typing import AsyncIterator, List, Optional, Sequence

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from tubefetch.core.errors import ProviderError
from tubefetch.main import app
from tubefetch.models.internal import FormatDescriptor, VideoMetadata
from tubefetch.services.provider import get_provider


def make_formats() -> List[FormatDescriptor]:
    # Best first, the order the provider returns
    return [
        FormatDescriptor(format_id="22", quality_label="720p", container="mp4", has_video=True,
                         has_audio=True, content_length=10 * 1024 * 1024, height=720, bitrate=1500),
        FormatDescriptor(format_id="136", quality_label="720p", container="mp4", has_video=True,
                         has_audio=False, content_length=8 * 1024 * 1024, height=720, bitrate=2000),
        FormatDescriptor(format_id="247", quality_label="720p", container="webm", has_video=True,
                         has_audio=False, height=720, bitrate=1800),
        FormatDescriptor(format_id="18", quality_label="360p", container="mp4", has_video=True,
                         has_audio=True, content_length=1536, height=360, bitrate=500),
        FormatDescriptor(format_id="243", quality_label="360p", container="webm", has_video=True,
                         has_audio=False, height=360, bitrate=400),
        FormatDescriptor(format_id="251", quality_label="audio", container="webm", has_video=False,
                         has_audio=True, content_length=3 * 1024 * 1024, audio_bitrate=160),
        FormatDescriptor(format_id="140", quality_label="audio", container="m4a", has_video=False,
                         has_audio=True, content_length=2 * 1024 * 1024, audio_bitrate=128),
    ]


def make_metadata(title: str = "Hello, World! \U0001F389 Part 2") -> VideoMetadata:
    return VideoMetadata(
        title=title,
        author="Test Channel",
        duration_seconds=125,
        thumbnail_url="https://i.ytimg.com/vi/dQw4w9WgXcQ/maxresdefault.jpg",
        formats=tuple(make_formats()),
    )


class FakeProvider:
    """In-memory ExtractionProvider"""

    def __init__(
        self,
        metadata: Optional[VideoMetadata] = None,
        error: Optional[Exception] = None,
        chunks: Sequence[bytes] = (b"chunk-1", b"chunk-2"),
        open_error: Optional[Exception] = None,
        stream_error: Optional[Exception] = None,
    ):
        self.metadata = metadata or make_metadata()
        self.error = error
        self.chunks = list(chunks)
        self.open_error = open_error
        self.stream_error = stream_error
        self.fetched: List[str] = []
        self.opened: List[tuple] = []

    async def fetch_metadata(self, url: str) -> VideoMetadata:
        self.fetched.append(url)
        if self.error:
            raise self.error
        return self.metadata

    async def open_stream(self, url: str, format_id: str) -> AsyncIterator[bytes]:
        self.opened.append((url, format_id))
        if self.open_error:
            raise self.open_error
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[bytes]:
        for chunk in self.chunks:
            yield chunk
        if self.stream_error:
            raise self.stream_error


@pytest.fixture
def provider():
    fake = FakeProvider()
    app.dependency_overrides[get_provider] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_provider, None)


@pytest.fixture
def failing_provider():
    fake = FakeProvider(error=ProviderError("ERROR: [youtube] dQw4w9WgXcQ: Sign in to confirm your age"))
    app.dependency_overrides[get_provider] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_provider, None)


@pytest_asyncio.fixture
async def client():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def install_provider():
    """Install a FakeProvider built from keyword arguments"""
    def install(**kwargs) -> FakeProvider:
        fake = FakeProvider(**kwargs)
        app.dependency_overrides[get_provider] = lambda: fake
        return fake

    yield install
    app.dependency_overrides.pop(get_provider, None)


@pytest.fixture
def formats() -> List[FormatDescriptor]:
    return make_formats()


@pytest.fixture
def metadata() -> VideoMetadata:
    return make_metadata()
