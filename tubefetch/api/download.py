import functools
from typing import AsyncIterator, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import StreamingResponse

from tubefetch.core.errors import UpstreamFailure
from tubefetch.core.logging import log_error, log_info
from tubefetch.i18n import i18n
from tubefetch.models.internal import DownloadIntent
from tubefetch.models.request import format_download_intent, quality_download_intent
from tubefetch.services.download import DownloadService
from tubefetch.services.provider import ExtractionProvider, get_provider
from tubefetch.utils.locale import get_locale, safe_url_for_log

router = APIRouter()


async def _stream_download(
    request: Request,
    intent: DownloadIntent,
    provider: ExtractionProvider,
    _,
) -> StreamingResponse:
    safe_url = safe_url_for_log(intent.url)

    try:
        download, fmt = await DownloadService.resolve(intent, provider, _)
        log_info(request, f"Resolved format {fmt.format_id} ({fmt.quality_label}, {fmt.container}) for {safe_url}")
        chunks, headers = await DownloadService.open(download, provider)
    except HTTPException:
        raise
    except Exception as e:
        log_error(request, f"Download error for {safe_url}: {e}")
        raise UpstreamFailure(_("error.download_failed"))

    log_info(request, f"Streaming {download.filename}")

    async def relay() -> AsyncIterator[bytes]:
        # Headers are already sent; a failure here can only cut the connection
        try:
            async for chunk in chunks:
                yield chunk
        except Exception as e:
            log_error(request, f"Stream interrupted for {safe_url}: {e}")
            raise
        log_info(request, f"Finished streaming {download.filename}")

    return StreamingResponse(
        relay(),
        media_type="application/octet-stream",
        headers=headers
    )


@router.get("/download")
async def download_video(
    request: Request,
    url: Optional[str] = Query(None, description="Video URL"),
    quality: Optional[str] = Query("highest", description="highest, lowest, highestvideo, highestaudio, a quality label or a format id"),
    container: Optional[str] = Query("mp4", alias="format", description="mp4 or audio"),
    provider: ExtractionProvider = Depends(get_provider),
):
    """Download the best match for a quality/container hint"""

    locale = get_locale(request.headers.get("accept-language"))
    _ = functools.partial(i18n.get, locale=locale)

    intent = quality_download_intent(url, quality, container, _)
    return await _stream_download(request, intent, provider, _)


@router.get("/download-progressive")
async def download_progressive(
    request: Request,
    url: Optional[str] = Query(None, description="Video URL"),
    itag: Optional[str] = Query(None, description="Format id returned by /video-info"),
    provider: ExtractionProvider = Depends(get_provider),
):
    """Download one explicit format"""

    locale = get_locale(request.headers.get("accept-language"))
    _ = functools.partial(i18n.get, locale=locale)

    intent = format_download_intent(url, itag, _)
    return await _stream_download(request, intent, provider, _)
