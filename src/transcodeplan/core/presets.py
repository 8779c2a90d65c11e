"""Built-in encoding presets."""

from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, ConfigDict

from transcodeplan.models.encoding import ContainerFormat, EncodingConfig, ScaleMode
from transcodeplan.utils.logger import get_logger

logger = get_logger(__name__)

CATALOG_VERSION = 1

# Fields a preset overwrites. speed_preset is applied but not compared.
APPLIED_FIELDS = ("container_format", "video_codec", "crf", "speed_preset", "audio_codec", "scale_mode")
COMPARED_FIELDS = tuple(f for f in APPLIED_FIELDS if f != "speed_preset")


class UnknownPresetError(KeyError):
    """Raised when a preset id is not in the catalog."""


class PresetSnapshot(BaseModel):
    """Encoding fields captured by a preset."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    container_format: ContainerFormat
    video_codec: str
    crf: int
    speed_preset: str
    audio_codec: str
    scale_mode: ScaleMode


@dataclass(frozen=True)
class Preset:
    """A named configuration snapshot."""

    id: str
    title: str
    description: str
    icon: str
    snapshot: PresetSnapshot

    def __str__(self) -> str:
        return f"{self.id}: {self.title}"


PRESETS: tuple[Preset, ...] = (
    Preset(
        id="nas",
        title="NAS archive",
        description=(
            "H.265 (CRF 23) + MP4, capped at 1080p. Tuned for NAS libraries: sharp, "
            "thumbnail previews work and Apple devices play it directly."
        ),
        icon="server",
        snapshot=PresetSnapshot(
            container_format=ContainerFormat.MP4,
            video_codec="libx265",
            crf=23,
            speed_preset="medium",
            audio_codec="aac",
            scale_mode=ScaleMode.CAP_1080,
        ),
    ),
    Preset(
        id="compat",
        title="Compatibility first",
        description="H.264 (CRF 23) + MP4. Plays on old devices and directly in browsers; easy to share.",
        icon="smartphone",
        snapshot=PresetSnapshot(
            container_format=ContainerFormat.MP4,
            video_codec="libx264",
            crf=23,
            speed_preset="medium",
            audio_codec="aac",
            scale_mode=ScaleMode.ORIGINAL,
        ),
    ),
    Preset(
        id="compress",
        title="Maximum compression",
        description="H.265 (CRF 28). Trades some quality for the smallest file; suited to cold storage.",
        icon="zap",
        snapshot=PresetSnapshot(
            container_format=ContainerFormat.MP4,
            video_codec="libx265",
            crf=28,
            speed_preset="slow",
            audio_codec="aac",
            scale_mode=ScaleMode.ORIGINAL,
        ),
    ),
    Preset(
        id="high",
        title="Quality first",
        description="H.264 (CRF 18) + MKV. Visually near-lossless, keeps the original audio; larger files.",
        icon="monitor",
        snapshot=PresetSnapshot(
            container_format=ContainerFormat.MKV,
            video_codec="libx264",
            crf=18,
            speed_preset="slow",
            audio_codec="copy",
            scale_mode=ScaleMode.ORIGINAL,
        ),
    ),
)

DEFAULT_PRESET_ID = "nas"


def get_preset(preset_id: str) -> Preset:
    """Look up a preset by id.

    Raises:
        UnknownPresetError: If no preset has this id
    """
    for preset in PRESETS:
        if preset.id == preset_id:
            return preset
    raise UnknownPresetError(preset_id)


def apply_preset(preset: Preset, config: EncodingConfig) -> EncodingConfig:
    """Return ``config`` with the preset's fields overwritten.

    custom_width and working_directory are carried over unchanged. The
    result is built in one step, so no half-applied state exists.
    """
    updated = config.model_copy(update={name: getattr(preset.snapshot, name) for name in APPLIED_FIELDS})
    logger.debug("Preset applied", preset=preset.id)
    return updated


def is_preset_active(preset: Preset, config: EncodingConfig) -> bool:
    """Whether ``config`` matches the preset.

    Speed preset only changes encode time, so it is left out. custom_width
    is also left out: presets never set it.
    """
    return all(getattr(config, name) == getattr(preset.snapshot, name) for name in COMPARED_FIELDS)


def active_preset(config: EncodingConfig) -> Optional[Preset]:
    """First preset matching ``config``, if any."""
    return next((p for p in PRESETS if is_preset_active(p, config)), None)
