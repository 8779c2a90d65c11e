"""Codec catalog and family classification shared by synthesis and estimation."""

from typing import Optional

VIDEO_ENCODERS = ("libx264", "libx265", "h264_nvenc", "hevc_nvenc", "libvpx-vp9", "copy")
AUDIO_ENCODERS = ("aac", "libmp3lame", "ac3", "copy", "none")
SPEED_PRESETS = (
    "ultrafast",
    "superfast",
    "veryfast",
    "faster",
    "fast",
    "medium",
    "slow",
    "slower",
    "veryslow",
)

COPY = "copy"
NO_AUDIO = "none"

# NVENC speed preset; not user-selectable
HARDWARE_SPEED_PRESET = "p4"
PLAYBACK_PIXEL_FORMAT = "yuv420p"
HEVC_COMPAT_TAG = "hvc1"

REENCODE_AUDIO_KBPS = 128
COPY_AUDIO_KBPS = 192

SOFTWARE_CRF_ENCODERS = ("libx264", "libx265")
VP9_ENCODERS = ("libvpx-vp9",)


def is_stream_copy(codec: str) -> bool:
    return codec == COPY


def is_efficient_encoder(codec: str) -> bool:
    """HEVC family (libx265, hevc_nvenc, ...)."""
    return "265" in codec or "hevc" in codec


def is_hardware_encoder(codec: str) -> bool:
    """NVENC family."""
    return "nvenc" in codec


def needs_playback_pixel_format(codec: str) -> bool:
    """H.264 and HEVC output is forced to 4:2:0 for player compatibility."""
    return "264" in codec or is_efficient_encoder(codec)


def audio_bitrate_kbps(codec: str) -> Optional[int]:
    """Target bitrate for re-encoded audio, None for copy or muted output."""
    if codec in (COPY, NO_AUDIO) or not codec:
        return None
    return REENCODE_AUDIO_KBPS


def friendly_codec_name(codec_format: str) -> str:
    """Display name for a probed video format."""
    upper = codec_format.upper()
    if upper in ("AVC", "H264"):
        return "H.264 (AVC)"
    if upper in ("HEVC", "H265"):
        return "H.265 (HEVC)"
    if upper in ("VP9", "VP8"):
        return upper
    return codec_format
