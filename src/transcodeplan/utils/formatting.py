"""Human-readable formatting of media metrics."""

import math
from typing import Optional

SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")


def format_duration(seconds: Optional[float]) -> str:
    """Format seconds as '1h 2m 3s' (hours omitted when zero)."""
    if seconds is None or math.isnan(seconds):
        return "Unknown"
    total = int(seconds)
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    prefix = f"{hours}h " if hours > 0 else ""
    return f"{prefix}{minutes}m {secs}s"


def format_size(size_bytes: Optional[int]) -> str:
    """Format a byte count with binary units, e.g. '1.5 GB'."""
    if size_bytes is None:
        return "Unknown"
    if size_bytes <= 0:
        return "0 B"
    value = float(size_bytes)
    for unit in SIZE_UNITS:
        if value < 1024 or unit == SIZE_UNITS[-1]:
            break
        value /= 1024
    return f"{round(value, 2):g} {unit}"
