"""Encoding configuration and track selection models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from transcodeplan.models.media import MediaDescriptor

CRF_MIN = 0
CRF_MAX = 51
DEFAULT_CRF = 23
DEFAULT_CUSTOM_WIDTH = 1920


class ContainerFormat(str, Enum):
    """Output container formats."""

    MP4 = "mp4"
    MKV = "mkv"
    MOV = "mov"

    @property
    def is_mp4_family(self) -> bool:
        """MP4-family containers only take text subtitles (mov_text)."""
        return self in (ContainerFormat.MP4, ContainerFormat.MOV)

    @property
    def extension(self) -> str:
        return self.value


class ScaleMode(str, Enum):
    """Output resolution policy."""

    ORIGINAL = "original"
    CAP_720 = "cap720"
    CAP_1080 = "cap1080"
    CUSTOM_WIDTH = "customWidth"


# Tokens accepted in addition to the enum values
SCALE_MODE_ALIASES = {
    "720p": ScaleMode.CAP_720,
    "1080p": ScaleMode.CAP_1080,
    "custom": ScaleMode.CUSTOM_WIDTH,
    "custom_width": ScaleMode.CUSTOM_WIDTH,
    "customwidth": ScaleMode.CUSTOM_WIDTH,
}


class EncodingConfig(BaseModel):
    """User-chosen encoding settings.

    Out-of-range values are clamped or defaulted on construction and on
    every assignment, so downstream synthesis never sees them.
    ``custom_width`` is kept even while another scale mode is active.
    """

    model_config = ConfigDict(validate_assignment=True)

    container_format: ContainerFormat = Field(default=ContainerFormat.MP4, description="Output container")
    video_codec: str = Field(default="libx265", description="ffmpeg video encoder")
    audio_codec: str = Field(default="aac", description="ffmpeg audio encoder, 'copy' or 'none'")
    crf: int = Field(default=DEFAULT_CRF, description="Constant quality factor (0-51)")
    speed_preset: str = Field(default="medium", description="Encoder speed preset")
    scale_mode: ScaleMode = Field(default=ScaleMode.CAP_1080, description="Resolution policy")
    custom_width: int = Field(default=DEFAULT_CUSTOM_WIDTH, description="Width limit for customWidth mode")
    working_directory: str = Field(default="", description="Directory prefixed to every path")

    @field_validator("container_format", mode="before")
    @classmethod
    def default_container(cls, v: Any) -> ContainerFormat:
        """Fall back to mp4 for unknown containers."""
        try:
            return ContainerFormat(str(getattr(v, "value", v)).strip().lower())
        except ValueError:
            return ContainerFormat.MP4

    @field_validator("scale_mode", mode="before")
    @classmethod
    def default_scale_mode(cls, v: Any) -> ScaleMode:
        """Accept aliases and fall back to the original resolution."""
        raw = str(getattr(v, "value", v)).strip()
        try:
            return ScaleMode(raw)
        except ValueError:
            return SCALE_MODE_ALIASES.get(raw.lower(), ScaleMode.ORIGINAL)

    @field_validator("crf", mode="before")
    @classmethod
    def clamp_crf(cls, v: Any) -> int:
        """Clamp CRF into [0, 51]; non-numeric input becomes 23."""
        try:
            value = int(round(float(v)))
        except (TypeError, ValueError, OverflowError):
            return DEFAULT_CRF
        return max(CRF_MIN, min(CRF_MAX, value))

    @field_validator("custom_width", mode="before")
    @classmethod
    def default_custom_width(cls, v: Any) -> int:
        """Non-positive or non-numeric widths become 1920."""
        try:
            value = int(v)
        except (TypeError, ValueError, OverflowError):
            return DEFAULT_CUSTOM_WIDTH
        return value if value > 0 else DEFAULT_CUSTOM_WIDTH

    @field_validator("video_codec", "audio_codec", "speed_preset", mode="before")
    @classmethod
    def default_blank_codec(cls, v: Any, info) -> str:
        """Blank encoder or preset names fall back to the field default."""
        text = "" if v is None else str(v).strip()
        return text or cls.model_fields[info.field_name].default

    @field_validator("working_directory", mode="before")
    @classmethod
    def strip_directory(cls, v: Any) -> str:
        return "" if v is None else str(v).strip()


@dataclass
class TrackSelection:
    """Embedded audio and subtitle indices chosen for output."""

    selected_audio: set[int] = field(default_factory=set)
    selected_subtitle: set[int] = field(default_factory=set)

    @classmethod
    def select_all(cls, descriptor: MediaDescriptor) -> "TrackSelection":
        """Select every audio and subtitle track of ``descriptor``."""
        return cls(
            selected_audio=set(range(len(descriptor.audio_tracks))),
            selected_subtitle=set(range(len(descriptor.subtitle_tracks))),
        )

    @property
    def audio_indices(self) -> list[int]:
        """Selected audio indices in ascending order."""
        return sorted(self.selected_audio)

    @property
    def subtitle_indices(self) -> list[int]:
        """Selected subtitle indices in ascending order."""
        return sorted(self.selected_subtitle)

    def copy(self) -> "TrackSelection":
        return TrackSelection(set(self.selected_audio), set(self.selected_subtitle))
