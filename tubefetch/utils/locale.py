from typing import Optional
from urllib.parse import parse_qs, urlparse

from tubefetch.config.settings import config


def get_locale(accept_language: Optional[str] = None) -> str:
    """Extract locale from Accept-Language header"""
    if not accept_language:
        return config.i18n.default_locale

    for lang in accept_language.split(","):
        locale = lang.strip().split(";")[0].split("-")[0].lower()
        if locale in config.i18n.supported_locales:
            return locale

    return config.i18n.default_locale


def safe_url_for_log(url: str) -> str:
    """
    Safe URL for logging.
    Only the video id survives from the query string unless logging at DEBUG.
    """
    try:
        parsed = urlparse(url)
    except ValueError:
        return "invalid_url"

    base_url = f"{parsed.scheme}://{parsed.netloc}{parsed.path}"
    if not parsed.query:
        return base_url

    if config.logging.level == "DEBUG":
        return f"{base_url}?{parsed.query}"

    video_id = parse_qs(parsed.query).get("v")
    if video_id:
        return f"{base_url}?v={video_id[0]}"
    return base_url
