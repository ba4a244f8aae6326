"""In-memory, content-addressed response cache with a time-to-live."""

from __future__ import annotations

import hashlib
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from .analysis import DiffAnalysis

DEFAULT_TTL = 300.0

logger = logging.getLogger(__name__)


def fingerprint(text: str) -> str:
    """Stable, order-sensitive key for a (sanitized) diff."""
    digest = hashlib.sha256(text.encode("utf-8", "ignore")).hexdigest()
    return f"commit_{digest}"


@dataclass(frozen=True)
class CacheEntry:
    key: str
    response: str
    timestamp: float
    analysis: DiffAnalysis
    provider: str = ""

    def age(self, now: float) -> float:
        return now - self.timestamp


class ResponseCache:
    """Maps fingerprints to previously produced commit messages.

    Entries are valid while ``now - timestamp < ttl``. Expired entries are
    purged by :meth:`sweep_expired`, which :meth:`put` calls after every
    write. Nothing is persisted.
    """

    def __init__(
        self,
        ttl: float = DEFAULT_TTL,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self.ttl = ttl
        self._clock = clock or time.time
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get(key) is not None

    def _is_fresh(self, entry: CacheEntry, now: float) -> bool:
        return entry.age(now) < self.ttl

    def get(self, key: str) -> Optional[CacheEntry]:
        """Return a live entry or ``None`` (miss or stale)."""
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if not self._is_fresh(entry, now):
                return None
            return entry

    def put(
        self,
        key: str,
        response: str,
        analysis: DiffAnalysis,
        provider: str = "",
    ) -> CacheEntry:
        entry = CacheEntry(
            key=key,
            response=response,
            timestamp=self._clock(),
            analysis=analysis,
            provider=provider,
        )
        with self._lock:
            self._entries[key] = entry
        self.sweep_expired()
        return entry

    def sweep_expired(self) -> int:
        """Drop every entry older than the TTL; return how many were removed."""
        now = self._clock()
        with self._lock:
            stale = [
                key
                for key, entry in self._entries.items()
                if not self._is_fresh(entry, now)
            ]
            for key in stale:
                del self._entries[key]
        if stale:
            logger.debug("cache.sweep removed=%d", len(stale))
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
