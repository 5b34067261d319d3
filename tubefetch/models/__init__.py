from .internal import DownloadIntent, DownloadRequest, FormatDescriptor, VideoMetadata
from .response import FormatInfo, VideoInfo

__all__ = [
    "DownloadIntent",
    "DownloadRequest",
    "FormatDescriptor",
    "FormatInfo",
    "VideoInfo",
    "VideoMetadata",
]
