import asyncio
import json
import logging
from collections import deque
from contextlib import suppress
from typing import Any, AsyncIterator, Deque, Dict, List, Optional, Protocol

from tubefetch.config.settings import config
from tubefetch.core.errors import ProviderError
from tubefetch.models.internal import FormatDescriptor, VideoMetadata
from tubefetch.services.ytdlp import SubprocessExecutor, YTDLPCommandBuilder

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024
STDERR_MAX_LINES = 50
STDERR_GRACE_SECONDS = 1.0


class ExtractionProvider(Protocol):
    """Narrow boundary to the extraction engine"""

    async def fetch_metadata(self, url: str) -> VideoMetadata:
        ...

    async def open_stream(self, url: str, format_id: str) -> AsyncIterator[bytes]:
        ...


def _has_codec(value: Optional[str]) -> bool:
    return bool(value) and value != "none"


def _quality_label(fmt: Dict[str, Any], has_video: bool) -> str:
    if not has_video:
        return "audio"
    height = fmt.get("height")
    if not height:
        return fmt.get("format_note") or fmt.get("format_id") or "video"
    fps = fmt.get("fps")
    if fps and fps > 30:
        return f"{height}p{int(round(fps))}"
    return f"{height}p"


def parse_format(fmt: Dict[str, Any]) -> Optional[FormatDescriptor]:
    """Map one yt-dlp format dict; None for variants carrying neither audio nor video"""
    has_video = _has_codec(fmt.get("vcodec"))
    has_audio = _has_codec(fmt.get("acodec"))
    if not has_video and not has_audio:
        return None

    size = fmt.get("filesize") or fmt.get("filesize_approx")
    return FormatDescriptor(
        format_id=str(fmt["format_id"]),
        quality_label=_quality_label(fmt, has_video),
        container=fmt.get("ext") or "unknown",
        has_video=has_video,
        has_audio=has_audio,
        content_length=int(size) if size else None,
        height=fmt.get("height"),
        bitrate=fmt.get("tbr") or fmt.get("vbr"),
        audio_bitrate=fmt.get("abr"),
    )


def parse_metadata(info: Dict[str, Any]) -> VideoMetadata:
    """Map yt-dlp's --dump-json document to VideoMetadata"""
    formats: List[FormatDescriptor] = []
    seen_ids = set()
    # yt-dlp lists formats worst to best
    for fmt in reversed(info.get("formats") or []):
        if not fmt.get("format_id"):
            continue
        descriptor = parse_format(fmt)
        if descriptor is None or descriptor.format_id in seen_ids:
            continue
        seen_ids.add(descriptor.format_id)
        formats.append(descriptor)

    return VideoMetadata(
        title=info.get("title") or "Unknown",
        author=info.get("uploader") or info.get("channel") or "Unknown",
        duration_seconds=max(int(info.get("duration") or 0), 0),
        thumbnail_url=info.get("thumbnail"),
        formats=tuple(formats),
    )


class YtDlpProvider:
    """ExtractionProvider backed by the yt-dlp CLI"""

    async def fetch_metadata(self, url: str) -> VideoMetadata:
        cmd = YTDLPCommandBuilder.build_info_command(url)

        try:
            result = await SubprocessExecutor.run(cmd, timeout=config.provider.info_timeout)
        except asyncio.TimeoutError:
            raise ProviderError(f"yt-dlp metadata fetch timed out after {config.provider.info_timeout}s")
        except OSError as e:
            raise ProviderError(f"Could not start yt-dlp: {e}") from e

        if result.returncode != 0:
            error_msg = result.stderr.decode(errors="replace").strip()
            raise ProviderError(f"yt-dlp exited with {result.returncode}: {error_msg[:500]}")

        try:
            info = json.loads(result.stdout.decode(errors="replace"))
            return parse_metadata(info)
        except (ValueError, KeyError, TypeError) as e:
            raise ProviderError(f"Unparsable yt-dlp output: {e}") from e

    async def open_stream(self, url: str, format_id: str) -> AsyncIterator[bytes]:
        """
        Start streaming one format and wait for the first chunk.
        Failures before any byte is produced raise here; later ones raise from the iterator.
        """
        cmd = YTDLPCommandBuilder.build_stream_command(url, format_id)
        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                stdin=asyncio.subprocess.DEVNULL
            )
        except OSError as e:
            raise ProviderError(f"Could not start yt-dlp: {e}") from e

        stderr_lines: Deque[str] = deque(maxlen=STDERR_MAX_LINES)
        stderr_task = asyncio.create_task(self._drain_stderr(process, stderr_lines))

        try:
            first_chunk = await process.stdout.read(CHUNK_SIZE)
            if not first_chunk:
                returncode = await process.wait()
                await asyncio.wait({stderr_task}, timeout=STDERR_GRACE_SECONDS)
                raise ProviderError(
                    f"yt-dlp produced no data (exit {returncode}): {self._summary(stderr_lines)}"
                )
        except BaseException:
            await self._terminate(process, stderr_task)
            raise

        return self._relay(process, first_chunk, stderr_task, stderr_lines)

    async def _relay(
        self,
        process: asyncio.subprocess.Process,
        first_chunk: bytes,
        stderr_task: asyncio.Task,
        stderr_lines: Deque[str],
    ) -> AsyncIterator[bytes]:
        """Relay stdout as it arrives; the process dies with the iterator"""
        try:
            yield first_chunk
            while True:
                chunk = await process.stdout.read(CHUNK_SIZE)
                if not chunk:
                    break
                yield chunk

            returncode = await process.wait()
            if returncode != 0:
                await asyncio.wait({stderr_task}, timeout=STDERR_GRACE_SECONDS)
                raise ProviderError(
                    f"yt-dlp exited with {returncode} mid-stream: {self._summary(stderr_lines)}"
                )
        finally:
            await self._terminate(process, stderr_task)

    @staticmethod
    async def _drain_stderr(process: asyncio.subprocess.Process, lines: Deque[str]) -> None:
        """Drain stderr to prevent buffer deadlock"""
        while True:
            try:
                line = await process.stderr.readline()
            except ValueError:
                # Over the stream limit; the reader already discarded it
                lines.append("<line too long>")
                continue
            if not line:
                break
            lines.append(line.decode(errors="replace").strip())

    @staticmethod
    async def _terminate(process: asyncio.subprocess.Process, stderr_task: asyncio.Task) -> None:
        if process.returncode is None:
            with suppress(ProcessLookupError):
                process.kill()
        stderr_task.cancel()
        await process.wait()
        with suppress(asyncio.CancelledError):
            await stderr_task

    @staticmethod
    def _summary(lines: Deque[str]) -> str:
        return "\n".join(lines)[-500:] or "no diagnostics"

    async def version(self) -> str:
        """yt-dlp version string, "unavailable" when the binary cannot run"""
        try:
            result = await SubprocessExecutor.run(YTDLPCommandBuilder.build_version_command(), timeout=10.0)
        except (OSError, asyncio.TimeoutError) as e:
            logger.warning(f"yt-dlp version probe failed: {e}")
            return "unavailable"
        if result.returncode != 0:
            return "unavailable"
        return result.stdout.decode(errors="replace").strip()


provider = YtDlpProvider()


def get_provider() -> ExtractionProvider:
    """FastAPI dependency returning the process-wide provider"""
    return provider
