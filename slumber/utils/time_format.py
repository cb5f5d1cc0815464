"""Clock-style labels for positions and countdowns."""

import math


def format_time(seconds: float) -> str:
    """Format a duration as ``m:ss``.

    Negative, NaN and infinite inputs render as ``0:00``.
    """
    if not math.isfinite(seconds) or seconds <= 0:
        return "0:00"
    total = int(seconds)
    return f"{total // 60}:{total % 60:02d}"
