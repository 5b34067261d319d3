import re
from enum import Enum, auto
from typing import Callable, Optional
from urllib.parse import parse_qs, urlparse

from tubefetch.core.errors import InvalidInput

VALID_HOSTS = frozenset({
    "youtube.com",
    "www.youtube.com",
    "m.youtube.com",
    "music.youtube.com",
    "gaming.youtube.com",
    "youtube-nocookie.com",
    "www.youtube-nocookie.com",
})
SHORT_HOSTS = frozenset({"youtu.be", "www.youtu.be"})
ID_PATH_PREFIXES = ("/embed/", "/v/", "/shorts/", "/live/", "/e/")
VIDEO_ID_RE = re.compile(r"^[A-Za-z0-9_-]{11}$")


class UrlValidationResult(Enum):
    """URL validation result without throwing exceptions"""
    OK = auto()
    MISSING = auto()
    INVALID = auto()


def extract_video_id(url: str) -> Optional[str]:
    """Return the 11 character video id of a platform URL, or None if the URL is not one"""
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return None

    if parsed.scheme not in ("http", "https"):
        return None

    host = (parsed.hostname or "").lower()
    if host in SHORT_HOSTS:
        candidate = parsed.path.lstrip("/").split("/")[0]
    elif host in VALID_HOSTS:
        candidate = parse_qs(parsed.query).get("v", [""])[0]
        if not candidate:
            for prefix in ID_PATH_PREFIXES:
                if parsed.path.startswith(prefix):
                    candidate = parsed.path[len(prefix):].split("/")[0]
                    break
    else:
        return None

    if candidate and VIDEO_ID_RE.match(candidate):
        return candidate
    return None


class UrlValidator:
    """Recognize the platform's video URL shapes"""

    @staticmethod
    def validate_url(url: Optional[str]) -> UrlValidationResult:
        if not url or not url.strip():
            return UrlValidationResult.MISSING
        if extract_video_id(url) is None:
            return UrlValidationResult.INVALID
        return UrlValidationResult.OK


def require_valid_url(url: Optional[str], _: Callable[..., str]) -> str:
    """Return the stripped URL or raise InvalidInput with a localized message"""
    result = UrlValidator.validate_url(url)
    if result == UrlValidationResult.MISSING:
        raise InvalidInput(_("error.url_required"))
    if result == UrlValidationResult.INVALID:
        raise InvalidInput(_("error.invalid_url"))
    return url.strip()
