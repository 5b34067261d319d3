from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from tubefetch.models.internal import DownloadIntent, FormatDescriptor


def _overall_rank(f: FormatDescriptor) -> Tuple:
    return (
        f.has_video and f.has_audio,
        f.has_video,
        f.height or 0,
        f.bitrate or 0,
        f.audio_bitrate or 0,
    )


def _lowest_rank(f: FormatDescriptor) -> Tuple:
    # Smallest complete variant first
    return (
        not (f.has_video and f.has_audio),
        f.height or 0,
        f.bitrate or 0,
        f.audio_bitrate or 0,
    )


def _video_rank(f: FormatDescriptor) -> Tuple:
    return (f.height or 0, f.bitrate or 0)


def _audio_rank(f: FormatDescriptor) -> Tuple:
    return (f.audio_bitrate or 0, f.bitrate or 0)


# quality hint -> (candidate filter, rank key, pick highest)
QUALITY_PRESETS = {
    "highest": (lambda f: True, _overall_rank, True),
    "lowest": (lambda f: True, _lowest_rank, False),
    "highestvideo": (lambda f: f.has_video, _video_rank, True),
    "lowestvideo": (lambda f: f.has_video, _video_rank, False),
    "highestaudio": (lambda f: f.has_audio, _audio_rank, True),
    "lowestaudio": (lambda f: f.has_audio, _audio_rank, False),
}


class FormatDecision:
    """Make format decisions"""

    @staticmethod
    def candidates(formats: Iterable[FormatDescriptor], container: str) -> List[FormatDescriptor]:
        """Apply the container filter: mp4 keeps mp4 variants with video, audio keeps audio-only ones"""
        if container == "audio":
            return [f for f in formats if f.audio_only]
        if container == "mp4":
            return [f for f in formats if f.container == "mp4" and f.has_video]
        raise ValueError(f"Unsupported container hint: {container}")

    @staticmethod
    def choose(formats: Sequence[FormatDescriptor], intent: DownloadIntent) -> Optional[FormatDescriptor]:
        """Best match for the intent's quality hint among the filtered candidates"""
        candidates = FormatDecision.candidates(formats, intent.container)
        quality = intent.quality.lower()

        preset = QUALITY_PRESETS.get(quality)
        if preset:
            keep, rank, highest = preset
            return FormatDecision._pick([f for f in candidates if keep(f)], rank, highest)

        for f in candidates:
            if f.format_id == intent.quality:
                return f

        labelled = [f for f in candidates if f.quality_label.lower() == quality]
        return FormatDecision._pick(labelled, _overall_rank, True)

    @staticmethod
    def _pick(
        formats: List[FormatDescriptor],
        rank: Callable[[FormatDescriptor], Tuple],
        highest: bool,
    ) -> Optional[FormatDescriptor]:
        if not formats:
            return None
        return max(formats, key=rank) if highest else min(formats, key=rank)

    @staticmethod
    def extension(fmt: FormatDescriptor, audio_only: bool) -> str:
        """File extension for the attachment name"""
        if audio_only:
            return "mp3"
        if fmt.container in ("mp4", "webm"):
            return fmt.container
        return "mp4"

    @staticmethod
    def dedupe_by_quality(formats: Iterable[FormatDescriptor]) -> List[FormatDescriptor]:
        """One entry per quality label, first seen wins"""
        seen = set()
        unique = []
        for f in formats:
            if f.quality_label in seen:
                continue
            seen.add(f.quality_label)
            unique.append(f)
        return unique
