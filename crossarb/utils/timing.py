"""Timing utilities for the scan pipeline.

Stage durations (fetch, normalize, match, evaluate) are recorded into a
``TimingTracker`` and logged once per cycle.
"""

import time
from contextlib import contextmanager
from typing import Dict, Iterator, Optional


class TimingTracker:
    """Track multiple timing intervals."""

    def __init__(self):
        self.timings: Dict[str, float] = {}

    def get(self, name: str) -> Optional[float]:
        """Get timing for a completed operation."""
        return self.timings.get(name)

    def summary(self) -> Dict[str, str]:
        """Get all timings formatted as strings."""
        return {name: format_duration(seconds) for name, seconds in self.timings.items()}


@contextmanager
def timer(name: str, tracker: Optional[TimingTracker] = None) -> Iterator[None]:
    """Context manager for timing code blocks.

    Example:
        with timer("match", tracker):
            candidates = matcher.build_candidates(a, b)
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        if tracker is not None:
            tracker.timings[name] = time.perf_counter() - start


def format_duration(seconds: float) -> str:
    """Format seconds into human-readable string (e.g. "1.23s", "123ms", "5m 32.0s")."""
    if seconds < 0.001:
        return f"{seconds * 1000000:.0f}μs"
    elif seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    elif seconds < 60:
        return f"{seconds:.2f}s"
    else:
        minutes = int(seconds // 60)
        secs = seconds % 60
        return f"{minutes}m {secs:.1f}s"
