from typing import AsyncIterator, Callable, Dict, Tuple

from tubefetch.core.errors import NotFound
from tubefetch.models.internal import DownloadIntent, DownloadRequest, FormatDescriptor
from tubefetch.services.format import FormatDecision
from tubefetch.services.provider import ExtractionProvider
from tubefetch.utils.filename import build_filename


class DownloadService:
    """Resolve download intents to a concrete format and open its stream"""

    @staticmethod
    async def resolve(
        intent: DownloadIntent,
        provider: ExtractionProvider,
        _: Callable[..., str],
    ) -> Tuple[DownloadRequest, FormatDescriptor]:
        """
        Re-query the provider and pick the format to stream.
        Explicit format ids must exist in the fresh metadata; quality hints go
        through the best-match policy.
        """
        metadata = await provider.fetch_metadata(intent.url)

        if intent.format_id is not None:
            fmt = metadata.find_format(intent.format_id)
        else:
            fmt = FormatDecision.choose(metadata.formats, intent)

        if fmt is None:
            raise NotFound(_("error.format_unavailable"))

        ext = FormatDecision.extension(fmt, intent.audio_only)
        download = DownloadRequest(
            source_url=intent.url,
            format_id=fmt.format_id,
            filename=build_filename(metadata.title, ext, intent.url),
        )
        return download, fmt

    @staticmethod
    async def open(
        download: DownloadRequest,
        provider: ExtractionProvider,
    ) -> Tuple[AsyncIterator[bytes], Dict[str, str]]:
        """
        Start the provider stream.
        Returns (chunks, headers)
        """
        chunks = await provider.open_stream(download.source_url, download.format_id)

        # Sanitized titles cannot contain quotes
        headers = {
            'Content-Disposition': f'attachment; filename="{download.filename}"',
            'X-Content-Type-Options': 'nosniff',
            'Cache-Control': 'no-cache',
            'Accept-Ranges': 'none',
        }
        return chunks, headers
