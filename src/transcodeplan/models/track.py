"""Track data models."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Track:
    """Represents an embedded audio or subtitle track."""

    index: int  # Position within its track type (0-based, no gaps)
    codec_format: str  # Format name as reported by the analyzer (e.g., "aac", "hdmv_pgs_subtitle")
    language_code: str = "und"  # ISO 639-2 language code
    title: str = ""
    is_default: bool = False
    details: str = ""  # Free-form summary (e.g., "6ch 48.0kHz")

    def __str__(self) -> str:
        """Human-readable representation."""
        default_marker = " [DEFAULT]" if self.is_default else ""
        title_part = f" ({self.title})" if self.title else ""
        return f"#{self.index + 1}: {self.language_code} {self.codec_format}{title_part}{default_marker}"


@dataclass(frozen=True)
class VideoTrack:
    """Represents an embedded video track."""

    codec_format: str  # e.g., "h264", "hevc"
    codec_id: str = ""  # Codec tag (e.g., "avc1", "hvc1")
    width: int = 0
    height: int = 0
    frame_rate_text: str = ""
    bit_rate_text: str = "N/A"

    @property
    def is_efficient(self) -> bool:
        """Whether the track uses the high-efficiency (HEVC) family."""
        upper = self.codec_format.upper()
        return "HEVC" in upper or "265" in upper

    def __str__(self) -> str:
        """Human-readable representation."""
        return f"{self.codec_format} {self.width}x{self.height}"


@dataclass
class ExternalSubtitle:
    """A subtitle file attached alongside the primary media file.

    ``id`` is opaque and stays stable while language and title are edited.
    """

    id: str
    source_ref: str  # File name or path of the subtitle file
    language_code: str = "chi"
    title: Optional[str] = None

    def __post_init__(self) -> None:
        if self.title is None:
            self.title = self.source_ref
