from tubefetch.models.internal import VideoMetadata
from tubefetch.models.response import FormatInfo, VideoInfo
from tubefetch.services.format import FormatDecision
from tubefetch.services.provider import ExtractionProvider
from tubefetch.utils.display import format_duration, format_label


class VideoInfoService:
    """Video info fetching service"""

    @staticmethod
    async def fetch(url: str, provider: ExtractionProvider) -> VideoInfo:
        """Fetch metadata from the provider and shape it for the client"""
        metadata = await provider.fetch_metadata(url)
        return VideoInfoService.to_response(metadata)

    @staticmethod
    def to_response(metadata: VideoMetadata) -> VideoInfo:
        formats = [
            FormatInfo(
                quality=f.quality_label,
                container=f.container,
                has_video=f.has_video,
                has_audio=f.has_audio,
                itag=f.format_id,
                content_length=f.content_length,
                label=format_label(f.quality_label, f.container, f.content_length),
            )
            for f in FormatDecision.dedupe_by_quality(metadata.formats)
        ]

        return VideoInfo(
            title=metadata.title,
            duration=metadata.duration_seconds,
            duration_text=format_duration(metadata.duration_seconds),
            thumbnail=metadata.thumbnail_url,
            author=metadata.author,
            formats=formats,
        )
