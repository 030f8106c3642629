"""
Content-addressed theme cache.

Holds the most recently generated theme document keyed by the SHA-256
of its source. A run whose source hash matches the stored one returns
the cached document instead of recompiling.

The slot is only written after a successful run, with a compare-and-set
against the hash observed when that run started, so a slow run cannot
overwrite a result stored by a newer one. Concurrent requests for the
same hash share a single compilation.
"""

from __future__ import annotations

import hashlib
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def content_hash(*parts: str) -> str:
    """SHA-256 hex digest over ``parts``."""
    sha256 = hashlib.sha256()
    for part in parts:
        sha256.update(part.encode("utf-8"))
        sha256.update(b"\0")
    return sha256.hexdigest()


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    key: str
    value: T


class _Flight(Generic[T]):
    def __init__(self) -> None:
        self.done = threading.Event()
        self.value: T | None = None
        self.failed = False


class ContentCache(Generic[T]):
    """Single-slot cache with compare-and-set writes."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entry: CacheEntry[T] | None = None
        self._flights: dict[str, _Flight[T]] = {}

    @property
    def key(self) -> str | None:
        """Hash currently held in the slot."""
        with self._lock:
            return self._entry.key if self._entry else None

    def get(self, key: str) -> T | None:
        with self._lock:
            if self._entry is not None and self._entry.key == key:
                return self._entry.value
            return None

    def compare_and_set(self, expected: str | None, key: str, value: T) -> bool:
        """Store ``(key, value)`` only if the slot still holds ``expected``."""
        with self._lock:
            current = self._entry.key if self._entry else None
            if current != expected:
                logger.debug("Cache slot changed (%s != %s), not storing %s", current, expected, key)
                return False
            self._entry = CacheEntry(key, value)
            return True

    def clear(self) -> None:
        with self._lock:
            self._entry = None

    def fetch_or_compute(self, key: str, compute: Callable[[], T]) -> tuple[T, bool]:
        """Return ``(value, cached)`` for ``key``.

        Runs ``compute`` on a miss. If another thread is already computing
        the same key, waits for it and shares its result; if that thread
        failed, computes again here. Exceptions from ``compute`` propagate
        and leave the slot unchanged.
        """
        while True:
            with self._lock:
                if self._entry is not None and self._entry.key == key:
                    return self._entry.value, True
                flight = self._flights.get(key)
                leader = flight is None
                if leader:
                    flight = _Flight()
                    self._flights[key] = flight
                    expected = self._entry.key if self._entry else None

            if not leader:
                logger.debug("Waiting for in-flight compilation of %s", key)
                flight.done.wait()
                if not flight.failed:
                    return flight.value, True
                continue

            try:
                value = compute()
            except BaseException:
                flight.failed = True
                raise
            else:
                flight.value = value
                self.compare_and_set(expected, key, value)
                return value, False
            finally:
                with self._lock:
                    self._flights.pop(key, None)
                flight.done.set()


_cache: ContentCache | None = None
_cache_lock = threading.Lock()


def get_content_cache() -> ContentCache:
    """Get or create the process-wide theme cache."""
    global _cache
    if _cache is None:
        with _cache_lock:
            if _cache is None:
                _cache = ContentCache()
    return _cache
