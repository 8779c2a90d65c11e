"""Pydantic models for API requests and responses."""

from typing import List, Optional

from pydantic import BaseModel, Field

from transcodeplan.core.presets import Preset
from transcodeplan.models.encoding import EncodingConfig, TrackSelection
from transcodeplan.models.media import MediaDescriptor
from transcodeplan.models.plan import PlanResult
from transcodeplan.models.track import ExternalSubtitle, Track, VideoTrack
from transcodeplan.utils.language import normalize_language_code


class TrackModel(BaseModel):
    """Embedded audio or subtitle track."""

    codec_format: str
    language_code: str = "und"
    title: str = ""
    is_default: bool = False
    details: str = ""


class VideoTrackModel(BaseModel):
    """Embedded video track."""

    codec_format: str
    codec_id: str = ""
    width: int = 0
    height: int = 0
    frame_rate_text: str = ""
    bit_rate_text: str = "N/A"


class MediaDescriptorModel(BaseModel):
    """Probed media description.

    Track positions in each list are their per-type stream indices.
    """

    container_format: str = "Unknown"
    duration_seconds: Optional[float] = None
    file_size_bytes: Optional[int] = None
    overall_bitrate_bps: Optional[float] = None
    video_tracks: List[VideoTrackModel] = Field(default_factory=list)
    audio_tracks: List[TrackModel] = Field(default_factory=list)
    subtitle_tracks: List[TrackModel] = Field(default_factory=list)

    def to_descriptor(self) -> MediaDescriptor:
        """Convert to the core MediaDescriptor, numbering tracks by position."""
        return MediaDescriptor(
            container_format=self.container_format,
            duration_seconds=self.duration_seconds or 0.0,
            file_size_bytes=self.file_size_bytes,
            overall_bitrate_bps=self.overall_bitrate_bps,
            video_tracks=[VideoTrack(**v.model_dump()) for v in self.video_tracks],
            audio_tracks=[Track(index=i, **a.model_dump()) for i, a in enumerate(self.audio_tracks)],
            subtitle_tracks=[Track(index=i, **s.model_dump()) for i, s in enumerate(self.subtitle_tracks)],
        )

    @classmethod
    def from_descriptor(cls, descriptor: MediaDescriptor) -> "MediaDescriptorModel":
        """Convert a core MediaDescriptor for serialization."""

        def track(t: Track) -> TrackModel:
            return TrackModel(
                codec_format=t.codec_format,
                language_code=t.language_code,
                title=t.title,
                is_default=t.is_default,
                details=t.details,
            )

        return cls(
            container_format=descriptor.container_format,
            duration_seconds=descriptor.duration_seconds,
            file_size_bytes=descriptor.file_size_bytes,
            overall_bitrate_bps=descriptor.overall_bitrate_bps,
            video_tracks=[VideoTrackModel(**vars(v)) for v in descriptor.video_tracks],
            audio_tracks=[track(a) for a in descriptor.audio_tracks],
            subtitle_tracks=[track(s) for s in descriptor.subtitle_tracks],
        )


class ExternalSubtitleModel(BaseModel):
    """Subtitle file attached to the primary input."""

    id: Optional[str] = None
    source_ref: str
    language_code: str = "chi"
    title: Optional[str] = None


class AnalyzeRequest(BaseModel):
    """Media file to probe on the server."""

    path: str = Field(..., min_length=1, description="Path of the media file as seen by the server")


class SelectionModel(BaseModel):
    """Selected embedded track indices; omitted lists select every track."""

    audio: Optional[List[int]] = None
    subtitles: Optional[List[int]] = None


class PlanRequest(BaseModel):
    """Stateless plan request."""

    descriptor: Optional[MediaDescriptorModel] = None
    config: EncodingConfig = Field(default_factory=EncodingConfig)
    preset: Optional[str] = Field(default=None, description="Preset applied on top of config")
    selection: SelectionModel = Field(default_factory=SelectionModel)
    external_subtitles: List[ExternalSubtitleModel] = Field(default_factory=list)
    source_name: Optional[str] = None

    def to_selection(self, descriptor: Optional[MediaDescriptor]) -> TrackSelection:
        """Build the selection, defaulting to every track of the descriptor.

        Raises:
            ValueError: If an index is outside the descriptor's track lists
        """
        everything = TrackSelection.select_all(descriptor) if descriptor else TrackSelection()
        audio = set(self.selection.audio) if self.selection.audio is not None else everything.selected_audio
        subtitles = (
            set(self.selection.subtitles) if self.selection.subtitles is not None else everything.selected_subtitle
        )

        audio_count = len(descriptor.audio_tracks) if descriptor else 0
        subtitle_count = len(descriptor.subtitle_tracks) if descriptor else 0
        bad_audio = sorted(i for i in audio if not 0 <= i < audio_count)
        bad_subtitles = sorted(i for i in subtitles if not 0 <= i < subtitle_count)
        if bad_audio or bad_subtitles:
            raise ValueError(f"Track indices out of range: audio={bad_audio}, subtitles={bad_subtitles}")
        return TrackSelection(selected_audio=audio, selected_subtitle=subtitles)

    def to_external_subtitles(self) -> tuple[ExternalSubtitle, ...]:
        return tuple(
            ExternalSubtitle(
                id=sub.id or f"ext{position}",
                source_ref=sub.source_ref,
                language_code=normalize_language_code(sub.language_code) or "und",
                title=sub.title,
            )
            for position, sub in enumerate(self.external_subtitles)
        )


class WarningModel(BaseModel):
    """Advisory for a dropped track."""

    track_ref: str
    reason: str


class EstimateModel(BaseModel):
    """Size estimate."""

    text: str
    total_mb: float
    video_kbps: float
    audio_kbps: float


class PlanResponse(BaseModel):
    """Plan response."""

    command: str
    warnings: List[WarningModel]
    estimate: Optional[EstimateModel] = None
    target_width: Optional[int] = None
    target_height: Optional[int] = None
    active_presets: List[str] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: PlanResult, active_presets: List[str]) -> "PlanResponse":
        estimate = None
        if result.estimate is not None:
            estimate = EstimateModel(
                text=str(result.estimate),
                total_mb=round(result.estimate.total_mb, 2),
                video_kbps=round(result.estimate.video_kbps, 2),
                audio_kbps=round(result.estimate.audio_kbps, 2),
            )
        width, height = result.target_dimensions or (None, None)
        return cls(
            command=result.command,
            warnings=[WarningModel(track_ref=w.track_ref, reason=w.reason) for w in result.warnings],
            estimate=estimate,
            target_width=width,
            target_height=height,
            active_presets=active_presets,
        )


class PresetModel(BaseModel):
    """Catalog preset."""

    id: str
    title: str
    description: str
    icon: str
    snapshot: dict

    @classmethod
    def from_preset(cls, preset: Preset) -> "PresetModel":
        return cls(
            id=preset.id,
            title=preset.title,
            description=preset.description,
            icon=preset.icon,
            snapshot=preset.snapshot.model_dump(mode="json"),
        )


class PresetListResponse(BaseModel):
    """Preset catalog response."""

    version: int
    presets: List[PresetModel]


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "healthy"
    version: str
    uptime_seconds: float
