"""Progress composition.

A single job's progress is split into two halves: rasterization reports
0-50 and reconstruction reports 50-100. A batch of several jobs reports
coarse progress, one step per finished job.
"""

import math
from collections.abc import Callable

RASTER_SHARE = 50


def percent(value: float) -> int:
    """Round half up, so 12.5 reports as 13."""
    return math.floor(value + 0.5)


def raster_phase(done: int, total: int) -> int:
    """Map pages rasterized so far onto 0-50."""
    if total <= 0:
        return 0
    done = max(0, min(done, total))
    return percent(done / total * RASTER_SHARE)


def reconstruction_phase(fraction: float) -> int:
    """Map a reconstruction fraction in [0, 1] onto 50-100."""
    fraction = max(0.0, min(1.0, fraction))
    return RASTER_SHARE + percent(fraction * (100 - RASTER_SHARE))


def batch_phase(finished: int, total: int) -> int:
    """Coarse batch progress after ``finished`` of ``total`` jobs."""
    if total <= 0:
        return 0
    return percent(finished / total * 100)


class ProgressTracker:
    """Forward progress to a callback, keeping it monotonic and de-duplicated.

    Values are clamped to [0, 100]. A value lower than or equal to the last
    reported one is dropped, so every percentage is reported at most once.

    Attributes:
        value: Last reported percentage
    """

    def __init__(self, callback: Callable[[int], None] | None = None):
        self.callback = callback
        self.value = 0
        self._started = False

    def update(self, value: int) -> None:
        value = max(0, min(100, int(value)))
        if self._started and value <= self.value:
            return
        self._started = True
        self.value = value
        if self.callback:
            self.callback(value)

    def complete(self) -> None:
        self.update(100)
