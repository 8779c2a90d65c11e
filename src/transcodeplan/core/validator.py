"""Subtitle compatibility checks against the output container."""

from typing import NamedTuple, Optional

from transcodeplan.models.encoding import ContainerFormat
from transcodeplan.models.plan import PlanWarning
from transcodeplan.models.track import Track
from transcodeplan.utils.logger import get_logger

logger = get_logger(__name__)

# Picture-based subtitle formats (Blu-ray PGS, DVD VobSub, DVB, DivX XSUB).
# Matched as substrings of the upper-cased format name.
BITMAP_SUBTITLE_TOKENS = ("PGS", "VOBSUB", "HDMV", "DVD", "DVB", "XSUB")


def is_bitmap_subtitle(codec_format: str) -> bool:
    """Check whether a subtitle format is stored as images rather than text."""
    upper = (codec_format or "").upper()
    return any(token in upper for token in BITMAP_SUBTITLE_TOKENS)


class SubtitleCheck(NamedTuple):
    """Result of checking one subtitle track."""

    admissible: bool
    warning: Optional[PlanWarning] = None


class SubtitleValidator:
    """Decide whether embedded subtitle tracks can be mapped into a container."""

    def check(self, track: Track, container: ContainerFormat) -> SubtitleCheck:
        """Check one subtitle track against the target container.

        MP4-family containers only accept text subtitles (remuxed to
        mov_text). Bitmap tracks are inadmissible there and produce a
        warning; every track is admissible in MKV.

        Args:
            track: Embedded subtitle track
            container: Output container

        Returns:
            SubtitleCheck with a warning when the track must be dropped
        """
        if not container.is_mp4_family or not is_bitmap_subtitle(track.codec_format):
            return SubtitleCheck(admissible=True)

        warning = PlanWarning(
            track_ref=f"0:s:{track.index}",
            reason=(
                f"Skipped embedded subtitle #{track.index + 1} ({track.codec_format}): "
                f"bitmap subtitles cannot be muxed into {container.value.upper()}."
            ),
        )
        logger.info(
            "Subtitle track dropped",
            track_index=track.index,
            codec_format=track.codec_format,
            container=container.value,
        )
        return SubtitleCheck(admissible=False, warning=warning)
