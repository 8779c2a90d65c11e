"""Scale-mode to target-dimension rule.

Both the command synthesizer and the size estimator go through this module,
so the filter written into the command and the resolution factor used for
the estimate always describe the same output.
"""

import math
from dataclasses import dataclass
from typing import Optional

from transcodeplan.core import codecs
from transcodeplan.models.encoding import EncodingConfig, ScaleMode

CAP_HEIGHTS = {
    ScaleMode.CAP_720: 720,
    ScaleMode.CAP_1080: 1080,
}


@dataclass(frozen=True)
class ScaleConstraint:
    """Upper bound on one output dimension."""

    dimension: str  # "height" or "width"
    limit: int


def nearest_even(value: float) -> int:
    """Round to the nearest even integer (halves away from zero), minimum 2."""
    return max(2, int(math.floor(value / 2 + 0.5)) * 2)


def resolve_constraint(config: EncodingConfig) -> Optional[ScaleConstraint]:
    """Constraint implied by ``config``, or None when no scaling applies.

    A stream-copied video cannot be filtered, so it never scales.
    """
    if codecs.is_stream_copy(config.video_codec):
        return None
    if config.scale_mode in CAP_HEIGHTS:
        return ScaleConstraint("height", CAP_HEIGHTS[config.scale_mode])
    if config.scale_mode == ScaleMode.CUSTOM_WIDTH:
        return ScaleConstraint("width", config.custom_width)
    return None


def target_dimensions(source_width: int, source_height: int, config: EncodingConfig) -> tuple[int, int]:
    """Output dimensions for a source of the given size.

    The constrained dimension becomes ``min(limit, source)``; the other one
    keeps the aspect ratio and is rounded to the nearest even value, which is
    what ffmpeg does for a ``-2`` size argument.
    """
    constraint = resolve_constraint(config)
    if constraint is None or source_width <= 0 or source_height <= 0:
        return source_width, source_height

    if constraint.dimension == "height":
        height = min(constraint.limit, source_height)
        width = nearest_even(source_width * height / source_height)
        return width, height

    width = min(constraint.limit, source_width)
    height = nearest_even(source_height * width / source_width)
    return width, height


def scale_filter(config: EncodingConfig) -> Optional[str]:
    """ffmpeg ``scale`` filter expression for ``config``, or None."""
    constraint = resolve_constraint(config)
    if constraint is None:
        return None
    # Commas inside filter arguments must be escaped
    if constraint.dimension == "height":
        return f"scale=-2:min({constraint.limit}\\,ih)"
    return f"scale=min({constraint.limit}\\,iw):-2"
