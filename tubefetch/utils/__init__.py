from .display import format_duration, format_file_size, format_label
from .filename import build_filename, sanitize_title

__all__ = [
    "build_filename",
    "format_duration",
    "format_file_size",
    "format_label",
    "sanitize_title",
]
