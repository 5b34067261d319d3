from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class FormatInfo(BaseModel):
    """Quality option offered to the client"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    quality: str
    container: str
    has_video: bool
    has_audio: bool
    itag: str
    content_length: Optional[int] = None
    label: str


class VideoInfo(BaseModel):
    """Video information response"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str
    duration: int
    duration_text: str
    thumbnail: Optional[str] = None
    author: str
    formats: List[FormatInfo] = []
