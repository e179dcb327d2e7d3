"""Process-wide single-slot cache for the last complete readings payload."""

import logging
import time
from dataclasses import dataclass
from threading import Lock
from typing import Any, Dict, Optional

LOGGER = logging.getLogger(__name__)

CACHE_DURATION = 5 * 60  # seconds


@dataclass(frozen=True)
class CacheEntry:
    payload: Dict[str, Any]
    fetched_at: float


class ReadingCache:
    """One slot for the whole multi-device result, expired by age only.

    Writes are unconditional overwrites, so there is no check-then-act race
    between ``get`` and ``put``; the lock only keeps the slot consistent
    across request threads.
    """

    def __init__(self, ttl: float = CACHE_DURATION, clock=time.monotonic, logger=None):
        self.ttl = ttl
        self._clock = clock
        self._log = logger or LOGGER
        self._entry: Optional[CacheEntry] = None
        self._lock = Lock()

    def get(self, now: float = None) -> Optional[CacheEntry]:
        now = self._clock() if now is None else now
        with self._lock:
            entry = self._entry
        if entry is not None and now - entry.fetched_at < self.ttl:
            self._log.debug('[CACHE] Hit (age %.1fs)', now - entry.fetched_at)
            return entry
        self._log.debug('[CACHE] Stale or empty')
        return None

    def put(self, payload: Dict[str, Any], now: float = None) -> CacheEntry:
        if not payload:
            raise ValueError('refusing to cache an empty payload')
        entry = CacheEntry(payload, self._clock() if now is None else now)
        with self._lock:
            self._entry = entry
        return entry

    def age(self, now: float = None) -> Optional[float]:
        with self._lock:
            entry = self._entry
        if entry is None:
            return None
        return (self._clock() if now is None else now) - entry.fetched_at

    def clear(self):
        with self._lock:
            self._entry = None
