import asyncio
from urllib.parse import urlencode

import pytest

from tubefetch.api import download as download_api
from tubefetch.core.errors import ProviderError
from tubefetch.main import app

VIDEO_URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"


def disposition(response) -> str:
    return response.headers["content-disposition"]


@pytest.mark.asyncio
async def test_download_missing_url(client, provider):
    response = await client.get("/download")
    assert response.status_code == 400
    assert response.json() == {"error": "URL is required"}


@pytest.mark.asyncio
async def test_download_invalid_url(client, provider):
    response = await client.get("/download", params={"url": "https://example.com/watch?v=dQw4w9WgXcQ"})
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid YouTube URL"}


@pytest.mark.asyncio
async def test_download_defaults_to_highest_mp4(client, provider):
    response = await client.get("/download", params={"url": VIDEO_URL})
    assert response.status_code == 200
    assert response.content == b"chunk-1chunk-2"
    assert provider.opened == [(VIDEO_URL, "22")]
    assert disposition(response) == 'attachment; filename="Hello World  Part 2.mp4"'


@pytest.mark.asyncio
async def test_download_audio_mode_uses_mp3_extension(client, provider):
    response = await client.get("/download", params={"url": VIDEO_URL, "format": "audio"})
    assert response.status_code == 200
    assert provider.opened == [(VIDEO_URL, "251")]
    assert disposition(response).endswith('.mp3"')


@pytest.mark.asyncio
async def test_download_lowest_quality(client, provider):
    response = await client.get("/download", params={"url": VIDEO_URL, "quality": "lowest"})
    assert response.status_code == 200
    assert provider.opened == [(VIDEO_URL, "18")]


@pytest.mark.asyncio
async def test_download_quality_label(client, provider):
    response = await client.get("/download", params={"url": VIDEO_URL, "quality": "360p"})
    assert response.status_code == 200
    assert provider.opened == [(VIDEO_URL, "18")]


@pytest.mark.asyncio
async def test_download_unresolvable_quality(client, provider):
    response = await client.get("/download", params={"url": VIDEO_URL, "quality": "1080p"})
    assert response.status_code == 400
    assert response.json() == {"error": "Requested format not available"}
    assert provider.opened == []


@pytest.mark.asyncio
async def test_download_unsupported_container(client, provider):
    response = await client.get("/download", params={"url": VIDEO_URL, "format": "flv"})
    assert response.status_code == 400
    assert "flv" in response.json()["error"]
    assert provider.fetched == []


@pytest.mark.asyncio
async def test_download_provider_failure(client, failing_provider):
    response = await client.get("/download", params={"url": VIDEO_URL})
    assert response.status_code == 500
    assert response.json() == {"error": "Download failed"}


@pytest.mark.asyncio
async def test_download_fails_before_first_byte(client, install_provider):
    fake = install_provider(open_error=ProviderError("yt-dlp produced no data (exit 1)"))
    response = await client.get("/download-progressive", params={"url": VIDEO_URL, "itag": "18"})
    assert response.status_code == 500
    assert response.json() == {"error": "Download failed"}
    assert fake.opened == [(VIDEO_URL, "18")]


@pytest.mark.asyncio
async def test_progressive_missing_itag(client, provider):
    response = await client.get("/download-progressive", params={"url": VIDEO_URL})
    assert response.status_code == 400
    assert response.json() == {"error": "URL and itag are required"}


@pytest.mark.asyncio
async def test_progressive_missing_url(client, provider):
    response = await client.get("/download-progressive", params={"itag": "18"})
    assert response.status_code == 400
    assert response.json()["error"]


@pytest.mark.asyncio
async def test_progressive_invalid_url(client, provider):
    response = await client.get("/download-progressive", params={"url": "https://youtu.be/", "itag": "18"})
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid YouTube URL"}


@pytest.mark.asyncio
async def test_progressive_unknown_itag(client, provider):
    response = await client.get("/download-progressive", params={"url": VIDEO_URL, "itag": "9999"})
    assert response.status_code == 400
    assert response.json() == {"error": "Requested format not available"}
    # The provider is re-queried for every download
    assert provider.fetched == [VIDEO_URL]
    assert provider.opened == []


@pytest.mark.asyncio
@pytest.mark.parametrize("itag, extension", [
    ("22", "mp4"),
    ("247", "webm"),
    ("140", "mp4"),
    ("251", "webm"),
])
async def test_progressive_extension_follows_container(client, provider, itag, extension):
    response = await client.get("/download-progressive", params={"url": VIDEO_URL, "itag": itag})
    assert response.status_code == 200
    assert provider.opened == [(VIDEO_URL, itag)]
    assert disposition(response) == f'attachment; filename="Hello World  Part 2.{extension}"'


@pytest.mark.asyncio
async def test_progressive_streams_body(client, install_provider):
    install_provider(chunks=[b"a" * 10, b"b" * 5])
    response = await client.get("/download-progressive", params={"url": VIDEO_URL, "itag": "18"})
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/octet-stream"
    assert response.content == b"a" * 10 + b"b" * 5


@pytest.mark.asyncio
async def test_title_without_safe_characters_falls_back(client, install_provider, metadata):
    install_provider(metadata=metadata.model_copy(update={"title": "日本語!!"}))
    response = await client.get("/download-progressive", params={"url": VIDEO_URL, "itag": "18"})
    assert response.status_code == 200
    assert disposition(response).startswith('attachment; filename="video_')
    assert disposition(response).endswith('.mp4"')


@pytest.mark.asyncio
async def test_streamed_download_carries_request_id(client, provider):
    response = await client.get("/download-progressive", params={"url": VIDEO_URL, "itag": "18"})
    assert response.status_code == 200
    assert len(response.headers["x-request-id"]) == 8


@pytest.mark.asyncio
async def test_mid_stream_failure_is_logged_and_raised(client, install_provider, monkeypatch):
    errors = []
    monkeypatch.setattr(download_api, "log_error", lambda request, message, **kwargs: errors.append(message))
    install_provider(stream_error=ProviderError("yt-dlp exited with 1 mid-stream"))

    with pytest.raises(ProviderError):
        await client.get("/download-progressive", params={"url": VIDEO_URL, "itag": "18"})

    assert len(errors) == 1
    assert errors[0].startswith("Stream interrupted")
    assert "exited with 1 mid-stream" in errors[0]


@pytest.mark.asyncio
async def test_mid_stream_failure_never_completes_body(install_provider):
    install_provider(stream_error=ProviderError("yt-dlp exited with 1 mid-stream"))
    scope = {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": "GET",
        "scheme": "http",
        "path": "/download-progressive",
        "raw_path": b"/download-progressive",
        "root_path": "",
        "query_string": urlencode({"url": VIDEO_URL, "itag": "18"}).encode(),
        "headers": [(b"host", b"test")],
        "client": ("127.0.0.1", 50000),
        "server": ("test", 80),
    }
    requested = False
    messages = []

    async def receive():
        nonlocal requested
        if not requested:
            requested = True
            return {"type": "http.request", "body": b"", "more_body": False}
        # The client stays connected
        await asyncio.Event().wait()

    async def send(message):
        messages.append(message)

    with pytest.raises(ProviderError):
        await app(scope, receive, send)

    assert messages[0]["type"] == "http.response.start"
    assert messages[0]["status"] == 200
    bodies = [m for m in messages if m["type"] == "http.response.body"]
    assert b"".join(m.get("body", b"") for m in bodies) == b"chunk-1chunk-2"
    # Every body message announces more data; the response is never finished
    assert all(m.get("more_body", False) for m in bodies)
