"""Shared pytest fixtures for transcodeplan tests."""

import pytest

from transcodeplan.models.encoding import EncodingConfig, ScaleMode
from transcodeplan.models.media import MediaDescriptor
from transcodeplan.models.track import Track, VideoTrack


@pytest.fixture
def hevc_descriptor():
    """1080p HEVC file, 10 minutes at 5 Mb/s with one audio track."""
    return MediaDescriptor(
        container_format="matroska,webm",
        duration_seconds=600,
        file_size_bytes=375_000_000,
        overall_bitrate_bps=5_000_000,
        video_tracks=[VideoTrack(codec_format="hevc", codec_id="hev1", width=1920, height=1080)],
        audio_tracks=[Track(index=0, codec_format="aac", language_code="eng", is_default=True)],
    )


@pytest.fixture
def movie_descriptor():
    """1080p H.264 file with two audio tracks and mixed text/bitmap subtitles."""
    return MediaDescriptor(
        container_format="matroska,webm",
        duration_seconds=5400,
        file_size_bytes=4_500_000_000,
        overall_bitrate_bps=6_666_666,
        video_tracks=[VideoTrack(codec_format="h264", codec_id="avc1", width=1920, height=1080)],
        audio_tracks=[
            Track(index=0, codec_format="ac3", language_code="eng", title="English", is_default=True),
            Track(index=1, codec_format="aac", language_code="jpn", title="Japanese"),
        ],
        subtitle_tracks=[
            Track(index=0, codec_format="subrip", language_code="eng"),
            Track(index=1, codec_format="hdmv_pgs_subtitle", language_code="eng"),
            Track(index=2, codec_format="ass", language_code="jpn"),
            Track(index=3, codec_format="dvd_subtitle", language_code="fre"),
        ],
    )


@pytest.fixture
def nas_config():
    """Default settings (matching the NAS preset)."""
    return EncodingConfig()


@pytest.fixture
def original_copy_config():
    """HEVC at CRF 23, audio copied, original resolution."""
    return EncodingConfig(
        video_codec="libx265",
        audio_codec="copy",
        crf=23,
        scale_mode=ScaleMode.ORIGINAL,
    )
