import functools
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from tubefetch.core.errors import UpstreamFailure
from tubefetch.core.logging import log_error, log_info
from tubefetch.core.validation import require_valid_url
from tubefetch.i18n import i18n
from tubefetch.models.response import VideoInfo
from tubefetch.services.info import VideoInfoService
from tubefetch.services.provider import ExtractionProvider, get_provider
from tubefetch.utils.locale import get_locale, safe_url_for_log

router = APIRouter()


@router.get("/video-info", response_model=VideoInfo)
async def get_video_info(
    request: Request,
    url: Optional[str] = Query(None, description="Video URL"),
    provider: ExtractionProvider = Depends(get_provider),
):
    """Get video information"""

    locale = get_locale(request.headers.get("accept-language"))
    _ = functools.partial(i18n.get, locale=locale)

    url = require_valid_url(url, _)

    safe_url = safe_url_for_log(url)
    log_info(request, f"Fetching info: {safe_url}")

    try:
        video_info = await VideoInfoService.fetch(url, provider)
    except HTTPException:
        raise
    except Exception as e:
        log_error(request, f"Video info error for {safe_url}: {e}")
        raise UpstreamFailure(_("error.fetch_info_failed"))

    log_info(request, f"Info retrieved: {video_info.title} ({len(video_info.formats)} qualities)")
    return video_info
