"""Calculation ID generator for settlement and cash-out results.

IDs look like ``calc_<n>`` where n is snowflake-style: strictly increasing
within a process, so results can be ordered by the ID alone. Thread-safe;
settlement calls may run on several threads at once.
"""

import threading
import time
from collections.abc import Callable


class CalculationIdGenerator:
    """Layout of n (63 bits):
      - 41 bits: millisecond timestamp (since custom epoch)
      - 10 bits: worker_id (0-1023)
      - 12 bits: sequence (0-4095 per millisecond)
    """

    _EPOCH_MS = 1_735_689_600_000  # 2025-01-01T00:00:00Z
    _WORKER_BITS = 10
    _SEQUENCE_BITS = 12
    _MAX_SEQUENCE = (1 << _SEQUENCE_BITS) - 1

    def __init__(
        self,
        worker_id: int = 0,
        prefix: str = "calc",
        clock_ms: Callable[[], int] | None = None,
    ) -> None:
        if not (0 <= worker_id < (1 << self._WORKER_BITS)):
            raise ValueError(f"worker_id must be 0-{(1 << self._WORKER_BITS) - 1}")
        self._worker_id = worker_id
        self._prefix = prefix
        self._clock_ms = clock_ms or (lambda: int(time.time() * 1000))
        self._sequence = 0
        self._last_ms = -1
        self._lock = threading.Lock()

    def next_id(self) -> str:
        with self._lock:
            now = self._clock_ms()
            if now < self._last_ms:
                # wall clock stepped back; keep the sequence monotonic
                now = self._last_ms
            if now == self._last_ms:
                self._sequence = (self._sequence + 1) & self._MAX_SEQUENCE
                if self._sequence == 0:
                    # sequence exhausted: advance the logical millisecond
                    now = self._last_ms + 1
            else:
                self._sequence = 0

            self._last_ms = now
            n = (
                ((now - self._EPOCH_MS) << (self._WORKER_BITS + self._SEQUENCE_BITS))
                | (self._worker_id << self._SEQUENCE_BITS)
                | self._sequence
            )
            return f"{self._prefix}_{n}"


_default_generator = CalculationIdGenerator()


def new_calculation_id() -> str:
    """Generate an ID from the module-level default generator."""
    return _default_generator.next_id()
