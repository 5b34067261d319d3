from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class FormatDescriptor(BaseModel):
    """One concrete encoded variant of a video"""
    model_config = ConfigDict(frozen=True)

    format_id: str
    quality_label: str
    container: str
    has_video: bool
    has_audio: bool
    content_length: Optional[int] = None
    # Ranking hints for best-match selection
    height: Optional[int] = None
    bitrate: Optional[float] = None
    audio_bitrate: Optional[float] = None

    @property
    def audio_only(self) -> bool:
        return self.has_audio and not self.has_video


class VideoMetadata(BaseModel):
    """Provider metadata for one source URL, formats ordered best first"""
    model_config = ConfigDict(frozen=True)

    title: str
    author: str
    duration_seconds: int = Field(default=0, ge=0)
    thumbnail_url: Optional[str] = None
    formats: Tuple[FormatDescriptor, ...] = ()

    def find_format(self, format_id: str) -> Optional[FormatDescriptor]:
        for fmt in self.formats:
            if fmt.format_id == format_id:
                return fmt
        return None


class DownloadIntent(BaseModel):
    """Internal download intent (separated from HTTP concerns)"""
    url: str
    format_id: Optional[str] = None
    quality: str = "highest"
    container: str = "mp4"

    @property
    def audio_only(self) -> bool:
        return self.format_id is None and self.container == "audio"


class DownloadRequest(BaseModel):
    """A resolved download, alive for the duration of one streaming response"""
    source_url: str
    format_id: str
    filename: str
