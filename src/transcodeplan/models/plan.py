"""Plan result models."""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class PlanWarning:
    """Advisory raised for a track dropped from the output mapping."""

    track_ref: str  # e.g., "0:s:2"
    reason: str

    def __str__(self) -> str:
        return f"{self.track_ref}: {self.reason}"


@dataclass(frozen=True)
class SizeEstimate:
    """Predicted output size."""

    video_kbps: float
    audio_kbps: float
    total_mb: float

    @property
    def total_kbps(self) -> float:
        return self.video_kbps + self.audio_kbps

    def __str__(self) -> str:
        """Formatted as MB, or GB from 1024 MB upwards."""
        if self.total_mb >= 1024:
            return f"{self.total_mb / 1024:.2f} GB"
        return f"{self.total_mb:.1f} MB"


@dataclass(frozen=True)
class CommandPlan:
    """Output of one synthesis pass."""

    command: str
    warnings: list[PlanWarning] = field(default_factory=list)


@dataclass(frozen=True)
class PlanResult:
    """Command, warnings and estimate computed together in one pass."""

    command: str
    warnings: list[PlanWarning] = field(default_factory=list)
    estimate: Optional[SizeEstimate] = None
    target_dimensions: Optional[tuple[int, int]] = None

    @property
    def estimate_text(self) -> Optional[str]:
        return str(self.estimate) if self.estimate is not None else None
