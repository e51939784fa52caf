"""In-process TTL caches for the catalog read paths.

Expiry is lazy: freshness is re-checked on every read and nothing sweeps
stale entries in the background. Neither cache coordinates rebuilds, so two
concurrent misses may both rebuild and the last ``put`` wins.
"""
import threading
import time
from contextlib import contextmanager
from typing import Callable, Dict, Generic, Optional, TypeVar

T = TypeVar("T")

Clock = Callable[[], float]


class ReadWriteLock:
    """Many concurrent readers or a single writer."""

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writing = False
        self._writers_waiting = 0

    def acquire_read(self):
        with self._cond:
            # waiting writers go first so a busy read path cannot starve a put
            while self._writing or self._writers_waiting:
                self._cond.wait()
            self._readers += 1

    def release_read(self):
        with self._cond:
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self):
        with self._cond:
            self._writers_waiting += 1
            while self._writing or self._readers:
                self._cond.wait()
            self._writers_waiting -= 1
            self._writing = True

    def release_write(self):
        with self._cond:
            self._writing = False
            self._cond.notify_all()

    @contextmanager
    def read_locked(self):
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self):
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()


class _TimedCache:
    def __init__(self, ttl: float, clock: Clock = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._lock = ReadWriteLock()
        self._stamp: Optional[float] = None

    def _is_fresh(self, now: float) -> bool:
        return self._stamp is not None and now - self._stamp < self.ttl


class MenuCache(_TimedCache, Generic[T]):
    """Single-slot cache for the assembled catalog menu."""

    def __init__(self, ttl: float = 600, clock: Clock = time.monotonic):
        super().__init__(ttl, clock)
        self._value: Optional[T] = None

    def get(self) -> Optional[T]:
        with self._lock.read_locked():
            if self._value is not None and self._is_fresh(self._clock()):
                return self._value
        return None

    def put(self, value: T) -> None:
        now = self._clock()
        with self._lock.write_locked():
            self._value = value
            self._stamp = now


class SearchCache(_TimedCache, Generic[T]):
    """Keyed cache whose entries all share one "last populated" timestamp.

    A lookup misses once the shared timestamp is older than the TTL, whatever
    the age of the entry itself, and every ``put`` refreshes that timestamp
    for the whole map.
    """

    def __init__(self, ttl: float = 300, clock: Clock = time.monotonic):
        super().__init__(ttl, clock)
        self._entries: Dict[str, T] = {}

    @staticmethod
    def make_key(query: str, category: str) -> str:
        return f"{query}:{category}"

    def get(self, key: str) -> Optional[T]:
        with self._lock.read_locked():
            if not self._is_fresh(self._clock()):
                return None
            return self._entries.get(key)

    def put(self, key: str, value: T) -> None:
        now = self._clock()
        with self._lock.write_locked():
            if not self._is_fresh(now):
                # stale generation, reclaim it before starting a new one
                self._entries = {}
            self._entries[key] = value
            self._stamp = now

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._entries)
