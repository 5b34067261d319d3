from typing import Optional

SIZE_UNITS = ("Bytes", "KB", "MB", "GB")


def format_duration(seconds: Optional[int]) -> str:
    """Render seconds as m:ss (125 -> "2:05")"""
    if not seconds or seconds < 0:
        seconds = 0
    minutes, remaining = divmod(int(seconds), 60)
    return f"{minutes}:{remaining:02d}"


def format_file_size(size: Optional[int]) -> str:
    """Render a byte count in the largest unit keeping the value below 1024"""
    if not size:
        return "Unknown size"

    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(SIZE_UNITS) - 1:
        value /= 1024
        unit += 1

    return f"{round(value, 2):g} {SIZE_UNITS[unit]}"


def format_label(quality: str, container: str, size: Optional[int]) -> str:
    """Quality selector entry, e.g. "720p (mp4) - 12.5 MB" """
    return f"{quality} ({container}) - {format_file_size(size)}"
