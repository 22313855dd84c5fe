"""In-process result cache for settlement calculations.

  - TTL-bounded (default 300s), oldest entry evicted past max_entries
  - Key: sha256 over operation + session id + canonical input encoding
  - Read: cache-aside (check cache -> compute on miss -> populate)

Never a source of truth: a miss, an eviction or no cache at all only costs a
recomputation. Owned by the caller and injected; there is no module-level
instance.
"""

import hashlib
import json
import threading
import time
from collections import OrderedDict
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from src.pl_ledger.domain.models import PlayerPosition


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    evictions: int = 0


def _position_key(p: PlayerPosition) -> list[Any]:
    return [
        p.player_id,
        p.player_name,
        str(p.total_buy_ins),
        str(p.total_cash_outs),
        str(p.current_chips),
        p.is_active,
    ]


def make_cache_key(
    operation: str,
    session_id: str,
    positions: Sequence[PlayerPosition],
    *extra: int | str | Decimal,
) -> str:
    """Deterministic key: identical inputs in any order hash identically."""
    payload = {
        "op": operation,
        "session": session_id,
        "positions": sorted(_position_key(p) for p in positions),
        "extra": [str(x) for x in extra],
    }
    encoded = json.dumps(payload, sort_keys=True, separators=(",", ":"))
    return f"{operation}:{hashlib.sha256(encoded.encode()).hexdigest()}"


class ResultCache:
    def __init__(
        self,
        ttl_seconds: float = 300.0,
        max_entries: int = 256,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, tuple[float, Any]] = OrderedDict()
        self._lock = threading.Lock()
        self.stats = CacheStats()

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.stats.misses += 1
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                self.stats.misses += 1
                return None
            self.stats.hits += 1
            return value

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._entries.pop(key, None)
            self._entries[key] = (self._clock() + self._ttl, value)
            while len(self._entries) > self._max_entries:
                self._entries.popitem(last=False)
                self.stats.evictions += 1

    def get_or_compute(self, key: str, compute: Callable[[], Any]) -> Any:
        """Return the cached value or compute and store it.

        compute runs outside the lock; two threads missing at once both
        compute and the later write wins, which is harmless for pure results.
        """
        cached = self.get(key)
        if cached is not None:
            return cached
        value = compute()
        self.set(key, value)
        return value

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
