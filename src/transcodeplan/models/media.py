"""Media descriptor model."""

from dataclasses import dataclass, field
from typing import Optional

from transcodeplan.models.track import Track, VideoTrack

DEFAULT_SOURCE_WIDTH = 1920
DEFAULT_SOURCE_HEIGHT = 1080


@dataclass(frozen=True)
class MediaDescriptor:
    """Describes the tracks and global metrics of one probed media file.

    Produced by the analyzer and treated as read-only for the lifetime of
    the file. Within each track list, position equals stream index.
    """

    container_format: str = "Unknown"
    duration_seconds: float = 0.0
    file_size_bytes: Optional[int] = None
    overall_bitrate_bps: Optional[float] = None
    video_tracks: list[VideoTrack] = field(default_factory=list)
    audio_tracks: list[Track] = field(default_factory=list)
    subtitle_tracks: list[Track] = field(default_factory=list)

    @property
    def source_dimensions(self) -> tuple[int, int]:
        """Dimensions of the first video track, or 1080p when unknown."""
        if self.video_tracks:
            first = self.video_tracks[0]
            if first.width > 0 and first.height > 0:
                return first.width, first.height
        return DEFAULT_SOURCE_WIDTH, DEFAULT_SOURCE_HEIGHT

    @property
    def is_source_efficient(self) -> bool:
        """Whether any video track is already HEVC."""
        return any(v.is_efficient for v in self.video_tracks)

    def subtitle(self, index: int) -> Optional[Track]:
        """Return the subtitle track at ``index`` if present."""
        if 0 <= index < len(self.subtitle_tracks):
            return self.subtitle_tracks[index]
        return None

    def __str__(self) -> str:
        """Human-readable representation."""
        return (
            f"{self.container_format} ({len(self.video_tracks)} video, "
            f"{len(self.audio_tracks)} audio, {len(self.subtitle_tracks)} subtitle tracks)"
        )
