import hashlib
import re

UNSAFE_TITLE_CHARS = re.compile(r"[^A-Za-z0-9 ]")


def sanitize_title(title: str) -> str:
    """Keep only ASCII letters, digits and spaces"""
    return UNSAFE_TITLE_CHARS.sub("", title or "")


def build_filename(title: str, ext: str, source_url: str) -> str:
    """Attachment filename for a download; falls back to a URL hash when the title has nothing usable"""
    stem = sanitize_title(title).strip()
    if not stem:
        stem = "video_" + hashlib.sha256(source_url.encode()).hexdigest()[:8]
    return f"{stem}.{ext}"
