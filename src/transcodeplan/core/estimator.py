"""Output size estimation."""

import math
from typing import Optional

from transcodeplan.core import codecs
from transcodeplan.core.scaling import target_dimensions
from transcodeplan.models.encoding import EncodingConfig, TrackSelection
from transcodeplan.models.media import MediaDescriptor
from transcodeplan.models.plan import SizeEstimate
from transcodeplan.utils.logger import get_logger

logger = get_logger(__name__)

FALLBACK_VIDEO_KBPS = 3000.0
MIN_VIDEO_KBPS = 500.0
AUDIO_ALLOWANCE_PER_TRACK_KBPS = 128
MIN_AUDIO_ALLOWANCE_KBPS = 256

# HEVC -> H.264 needs more bits for the same quality, H.264 -> HEVC fewer
TO_INEFFICIENT_FACTOR = 1.6
TO_EFFICIENT_FACTOR = 0.6
HARDWARE_FACTOR = 1.2
REFERENCE_CRF = 23
CRF_DOUBLING_STEP = 6


def _is_known(value: Optional[float]) -> bool:
    """Positive and finite; NaN, infinities and None count as unknown."""
    return value is not None and math.isfinite(value) and value > 0


class SizeEstimator:
    """Heuristic output size model.

    The estimate multiplies a baseline video bitrate by codec, resolution,
    quality and hardware factors, then adds a per-track audio allowance.
    Resolution uses the same scale rule as the command synthesizer.
    """

    def baseline_video_kbps(self, descriptor: MediaDescriptor) -> float:
        """Source video bitrate with an allowance for its audio tracks removed."""
        if not _is_known(descriptor.overall_bitrate_bps):
            return FALLBACK_VIDEO_KBPS
        audio_allowance = max(
            AUDIO_ALLOWANCE_PER_TRACK_KBPS * len(descriptor.audio_tracks),
            MIN_AUDIO_ALLOWANCE_KBPS,
        )
        return max(MIN_VIDEO_KBPS, descriptor.overall_bitrate_bps / 1000 - audio_allowance)

    def codec_factor(self, descriptor: MediaDescriptor, config: EncodingConfig) -> float:
        """Adjustment for moving between the H.264 and HEVC families.

        Only applied when the baseline comes from a measured bitrate.
        """
        if not _is_known(descriptor.overall_bitrate_bps):
            return 1.0
        source_efficient = descriptor.is_source_efficient
        target_efficient = codecs.is_efficient_encoder(config.video_codec)
        if source_efficient and not target_efficient:
            return TO_INEFFICIENT_FACTOR
        if not source_efficient and target_efficient:
            return TO_EFFICIENT_FACTOR
        return 1.0

    def resolution_factor(self, descriptor: MediaDescriptor, config: EncodingConfig) -> float:
        """Pixel-count ratio between output and source."""
        source_width, source_height = descriptor.source_dimensions
        target_width, target_height = target_dimensions(source_width, source_height, config)
        return (target_width * target_height) / (source_width * source_height)

    def quality_factor(self, config: EncodingConfig) -> float:
        """2^((23 - crf) / 6): each 6 CRF steps down doubles the bitrate."""
        return 2 ** ((REFERENCE_CRF - config.crf) / CRF_DOUBLING_STEP)

    def video_kbps(self, descriptor: MediaDescriptor, config: EncodingConfig) -> float:
        """Predicted output video bitrate."""
        kbps = self.baseline_video_kbps(descriptor)
        # A stream copy keeps the source bitrate
        if codecs.is_stream_copy(config.video_codec):
            return kbps

        kbps *= self.codec_factor(descriptor, config)
        kbps *= self.resolution_factor(descriptor, config)
        kbps *= self.quality_factor(config)
        if codecs.is_hardware_encoder(config.video_codec):
            kbps *= HARDWARE_FACTOR
        return kbps

    def audio_kbps(self, config: EncodingConfig, selection: TrackSelection) -> float:
        """Predicted output audio bitrate."""
        if config.audio_codec == codecs.NO_AUDIO:
            return 0.0
        count = len(selection.selected_audio)
        if codecs.is_stream_copy(config.audio_codec):
            return float(codecs.COPY_AUDIO_KBPS * count)
        return float((codecs.audio_bitrate_kbps(config.audio_codec) or 0) * count)

    def estimate(
        self,
        descriptor: Optional[MediaDescriptor],
        config: EncodingConfig,
        selection: TrackSelection,
    ) -> Optional[SizeEstimate]:
        """Estimate output size.

        Args:
            descriptor: Probed media
            config: Encoding settings
            selection: Selected embedded tracks

        Returns:
            SizeEstimate, or None when there is no descriptor or its
            duration is unknown, non-finite or non-positive
        """
        if descriptor is None or not _is_known(descriptor.duration_seconds):
            return None

        video = self.video_kbps(descriptor, config)
        audio = self.audio_kbps(config, selection)
        total_mb = (video + audio) * descriptor.duration_seconds / 8 / 1024

        estimate = SizeEstimate(video_kbps=video, audio_kbps=audio, total_mb=total_mb)
        logger.debug(
            "Size estimated",
            video_kbps=round(video, 1),
            audio_kbps=round(audio, 1),
            estimate=str(estimate),
        )
        return estimate
