"""UTC datetime and latency utilities."""

import time
from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def monotonic_ms() -> float:
    """Monotonic clock in milliseconds, for latency measurement only."""
    return time.perf_counter() * 1000


def elapsed_ms(start_ms: float) -> float:
    return monotonic_ms() - start_ms
