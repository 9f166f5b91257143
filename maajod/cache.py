import threading
import time
from typing import Callable, Dict, Optional, Tuple

Key = Tuple[str, int, int]


class SummaryCache:
    """
    Read-through cache of monthly summaries keyed by (store_id, year, month).

    Entries older than ``ttl_seconds`` are treated as missing. Writers must
    call ``invalidate`` for the month they touched; a ttl of 0 disables
    the cache entirely.

    Readers take ``generation(store_id)`` before computing and hand it to
    ``put``; a value computed across an ``invalidate`` is dropped instead of
    being stored.
    """

    def __init__(self, ttl_seconds: float = 300.0, clock: Callable[[], float] = time.monotonic):
        self.ttl = float(ttl_seconds)
        self._clock = clock
        self._items: Dict[Key, Tuple[float, object]] = {}
        self._generations: Dict[str, int] = {}
        self._lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        return self.ttl > 0

    def get(self, store_id: str, year: int, month: int):
        if not self.enabled:
            return None
        key = (store_id, year, month)
        with self._lock:
            hit = self._items.get(key)
            if hit is None:
                return None
            stored_at, value = hit
            if self._clock() - stored_at >= self.ttl:
                del self._items[key]
                return None
            return value

    def generation(self, store_id: str) -> int:
        with self._lock:
            return self._generations.get(store_id, 0)

    def put(self, store_id: str, year: int, month: int, value, generation: Optional[int] = None) -> bool:
        if not self.enabled:
            return False
        with self._lock:
            if generation is not None and generation != self._generations.get(store_id, 0):
                return False
            self._items[(store_id, year, month)] = (self._clock(), value)
        return True

    def invalidate(self, store_id: str, year: Optional[int] = None, month: Optional[int] = None) -> int:
        with self._lock:
            self._generations[store_id] = self._generations.get(store_id, 0) + 1
            doomed = [
                k for k in self._items
                if k[0] == store_id and (year is None or k[1] == year) and (month is None or k[2] == month)
            ]
            for k in doomed:
                del self._items[k]
        return len(doomed)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def __len__(self) -> int:
        return len(self._items)
