"""Media analysis using ffprobe."""

import asyncio
import json
import math
import subprocess
from fractions import Fraction
from pathlib import Path
from typing import Any, Optional

from transcodeplan.models.media import MediaDescriptor
from transcodeplan.models.track import Track, VideoTrack
from transcodeplan.utils.logger import get_logger

logger = get_logger(__name__)


class AnalysisSuperseded(Exception):
    """Raised when a newer analysis was started before this one finished."""

    def __init__(self, file_path: Path):
        super().__init__(f"Analysis of {file_path} superseded by a newer request")
        self.file_path = file_path


def _to_float(value: Any) -> Optional[float]:
    """Parse an ffprobe number; "N/A", "nan" and "inf" become None."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _to_int(value: Any) -> Optional[int]:
    number = _to_float(value)
    return int(number) if number is not None else None


def _frame_rate_text(rate: Optional[str]) -> str:
    """'24000/1001' -> '23.976'."""
    if not rate or rate in ("0/0", "0"):
        return ""
    try:
        value = float(Fraction(rate))
    except (ValueError, ZeroDivisionError):
        return rate
    return f"{value:.3f}".rstrip("0").rstrip(".")


def _bit_rate_text(bit_rate: Any) -> str:
    bps = _to_int(bit_rate)
    return f"{bps // 1000} kb/s" if bps else "N/A"


def parse_probe_output(data: dict) -> MediaDescriptor:
    """Build a MediaDescriptor from ffprobe ``-show_format -show_streams`` JSON.

    Tracks are numbered per type in stream order, matching ffmpeg's
    ``0:a:N`` / ``0:s:N`` specifiers.

    Args:
        data: Decoded ffprobe output

    Returns:
        MediaDescriptor
    """
    fmt = data.get("format", {}) or {}
    streams = data.get("streams", []) or []

    duration = _to_float(fmt.get("duration")) or 0.0
    size = _to_int(fmt.get("size"))
    bitrate = _to_float(fmt.get("bit_rate"))
    if not bitrate and size and duration > 0:
        bitrate = size * 8 / duration

    video_tracks: list[VideoTrack] = []
    audio_tracks: list[Track] = []
    subtitle_tracks: list[Track] = []

    for stream in streams:
        codec_type = stream.get("codec_type")
        tags = stream.get("tags", {}) or {}
        disposition = stream.get("disposition", {}) or {}
        codec = stream.get("codec_name", "unknown")

        if codec_type == "video":
            video_tracks.append(
                VideoTrack(
                    codec_format=codec,
                    codec_id=stream.get("codec_tag_string", ""),
                    width=_to_int(stream.get("width")) or 0,
                    height=_to_int(stream.get("height")) or 0,
                    frame_rate_text=_frame_rate_text(stream.get("avg_frame_rate")),
                    bit_rate_text=_bit_rate_text(stream.get("bit_rate")),
                )
            )
        elif codec_type == "audio":
            sample_rate = _to_int(stream.get("sample_rate"))
            details = f"{stream.get('channels', '?')}ch"
            if sample_rate:
                details += f" {sample_rate / 1000:.1f}kHz"
            audio_tracks.append(
                Track(
                    index=len(audio_tracks),
                    codec_format=codec,
                    language_code=tags.get("language", "und"),
                    title=tags.get("title", ""),
                    is_default=disposition.get("default", 0) == 1,
                    details=details,
                )
            )
        elif codec_type == "subtitle":
            subtitle_tracks.append(
                Track(
                    index=len(subtitle_tracks),
                    codec_format=codec,
                    language_code=tags.get("language", "und"),
                    title=tags.get("title", ""),
                    is_default=disposition.get("default", 0) == 1,
                    details=tags.get("title", ""),
                )
            )

    return MediaDescriptor(
        container_format=fmt.get("format_name", "Unknown"),
        duration_seconds=duration,
        file_size_bytes=size,
        overall_bitrate_bps=bitrate,
        video_tracks=video_tracks,
        audio_tracks=audio_tracks,
        subtitle_tracks=subtitle_tracks,
    )


class MediaAnalyzer:
    """Probe media files with ffprobe."""

    def __init__(self, ffprobe_path: str = "ffprobe", timeout_seconds: int = 30):
        """Initialize analyzer.

        Args:
            ffprobe_path: ffprobe executable
            timeout_seconds: Probe timeout
        """
        self.ffprobe_path = ffprobe_path
        self.timeout_seconds = timeout_seconds

    def analyze(self, file_path: Path) -> MediaDescriptor:
        """Extract a MediaDescriptor from a media file.

        Args:
            file_path: Path to media file

        Returns:
            MediaDescriptor

        Raises:
            FileNotFoundError: If file doesn't exist
            subprocess.CalledProcessError: If ffprobe fails
            subprocess.TimeoutExpired: If ffprobe takes too long
            json.JSONDecodeError: If ffprobe output is not JSON
        """
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        logger.debug("Analyzing media", file=str(file_path))

        cmd = [
            self.ffprobe_path,
            "-v",
            "quiet",
            "-print_format",
            "json",
            "-show_format",
            "-show_streams",
            str(file_path),
        ]

        try:
            result = subprocess.run(
                cmd, capture_output=True, text=True, check=True, timeout=self.timeout_seconds
            )
            descriptor = parse_probe_output(json.loads(result.stdout))

        except subprocess.TimeoutExpired:
            logger.error("ffprobe timeout", file=str(file_path), timeout=self.timeout_seconds)
            raise
        except subprocess.CalledProcessError as e:
            logger.error(
                "ffprobe failed",
                file=str(file_path),
                returncode=e.returncode,
                stderr=e.stderr,
            )
            raise
        except json.JSONDecodeError as e:
            logger.error("Failed to parse ffprobe output", file=str(file_path), error=str(e))
            raise

        logger.info(
            "Media analyzed",
            file=str(file_path),
            container=descriptor.container_format,
            duration_seconds=descriptor.duration_seconds,
            video_tracks=len(descriptor.video_tracks),
            audio_tracks=len(descriptor.audio_tracks),
            subtitle_tracks=len(descriptor.subtitle_tracks),
        )
        return descriptor


class LatestAnalysis:
    """Run analyses off the event loop, keeping only the newest result.

    Starting a new analysis makes any analysis still in flight raise
    AnalysisSuperseded instead of returning a stale descriptor.
    """

    def __init__(self, analyzer: MediaAnalyzer):
        self.analyzer = analyzer
        self._generation = 0

    async def analyze(self, file_path: Path) -> MediaDescriptor:
        """Analyze ``file_path`` in a worker thread.

        Raises:
            AnalysisSuperseded: If another analysis started meanwhile
        """
        self._generation += 1
        generation = self._generation

        descriptor = await asyncio.to_thread(self.analyzer.analyze, file_path)

        if generation != self._generation:
            logger.info("Discarding superseded analysis", file=str(file_path))
            raise AnalysisSuperseded(file_path)
        return descriptor
