"""ffmpeg progress translation."""

from __future__ import annotations
import math
import re
from typing import Optional

# ffmpeg stats lines: "... time=00:01:23.45 bitrate=..."; time=N/A never matches
_TIME_RE = re.compile(r"time=(\d+):(\d+):(\d+(?:\.\d+)?)")


def parse_elapsed(text: str) -> Optional[float]:
    """Seconds of the last time= marker in a chunk of ffmpeg stderr, if any."""
    matches = _TIME_RE.findall(text)
    if not matches:
        return None
    hours, minutes, seconds = matches[-1]
    return int(hours) * 3600 + int(minutes) * 60 + float(seconds)


class ProgressTracker:
    """Turns ffmpeg stderr chunks into integer percentages for one job.

    feed() returns a value only when it is higher than the last one returned,
    so a job sees a strictly increasing sequence within [0, 100].
    """

    def __init__(self, duration: float):
        self.duration = duration
        self.last_pct = -1

    def feed(self, chunk: str) -> Optional[int]:
        if self.duration <= 0:
            return None
        elapsed = parse_elapsed(chunk)
        if elapsed is None:
            return None
        ratio = max(0.0, min(1.0, elapsed / self.duration))
        pct = int(math.floor(ratio * 100))
        if pct <= self.last_pct:
            return None
        self.last_pct = pct
        return pct
