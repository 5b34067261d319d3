from typing import Callable, Optional

from tubefetch.core.errors import InvalidInput
from tubefetch.core.validation import require_valid_url
from tubefetch.models.internal import DownloadIntent

SUPPORTED_CONTAINERS = ("mp4", "audio")


def quality_download_intent(
    url: Optional[str],
    quality: Optional[str],
    container: Optional[str],
    _: Callable[..., str],
) -> DownloadIntent:
    """Intent for a download selected by quality/container hints"""
    url = require_valid_url(url, _)

    container = (container or "mp4").strip().lower()
    if container not in SUPPORTED_CONTAINERS:
        raise InvalidInput(_("error.unsupported_container", value=container))

    return DownloadIntent(
        url=url,
        quality=(quality or "highest").strip() or "highest",
        container=container,
    )


def format_download_intent(
    url: Optional[str],
    format_id: Optional[str],
    _: Callable[..., str],
) -> DownloadIntent:
    """Intent for a download of one explicit format id"""
    if not url or not url.strip() or not format_id or not format_id.strip():
        raise InvalidInput(_("error.url_and_itag_required"))

    url = require_valid_url(url, _)
    return DownloadIntent(url=url, format_id=format_id.strip())
