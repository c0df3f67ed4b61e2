"""
Score cache with fixed time-to-live and lazy eviction.

Entries are stored as {timestamp, data} keyed by the exact URL string.
Expired entries are removed only when they are read; there is no
background sweep and no size bound.
"""
import asyncio
import json
import tempfile
import weakref
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Dict, Any

from soteria.errors import CacheUnavailableError
from soteria.schemas import CacheEntry, ScoreResult
from soteria.utils.clock import Clock, system_clock
from soteria import config


class CacheBackend(ABC):
    """Raw key-value storage for serialized cache entries."""

    @abstractmethod
    def read(self, key: str) -> Optional[Dict[str, Any]]:
        """Return the stored entry dict, or None if absent"""

    @abstractmethod
    def write(self, key: str, entry: Dict[str, Any]) -> None:
        """Store entry dict under key, overwriting"""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove key if present"""

    @abstractmethod
    def clear(self) -> None:
        """Remove all keys"""

    @abstractmethod
    def count(self) -> int:
        """Number of stored keys (expired included)"""


class MemoryBackend(CacheBackend):
    """Process-local dictionary backend."""

    def __init__(self):
        self._entries: Dict[str, Dict[str, Any]] = {}

    def read(self, key: str) -> Optional[Dict[str, Any]]:
        return self._entries.get(key)

    def write(self, key: str, entry: Dict[str, Any]) -> None:
        self._entries[key] = entry

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def count(self) -> int:
        return len(self._entries)


class JsonFileBackend(CacheBackend):
    """
    Durable backend: one JSON object on disk, {url: {timestamp, data}}.

    Owned by a single process. Each operation reads and rewrites the whole
    file synchronously, so writes from one event loop never interleave.
    Saves go through a uniquely named temp file and an atomic replace.

    OS and decode failures are reported as CacheUnavailableError. A file
    that cannot be decoded is reset to an empty cache before the error is
    raised, so the next write succeeds.
    """

    def __init__(self, path: Path = config.CACHE_FILE):
        self.path = path

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise CacheUnavailableError(f"Cannot read cache file {self.path}: {e}") from e

        try:
            data = json.loads(text or "{}")
        except ValueError as e:
            self._save({})
            raise CacheUnavailableError(f"Corrupt cache file {self.path} reset: {e}") from e

        if not isinstance(data, dict):
            self._save({})
            raise CacheUnavailableError(f"Cache file {self.path} is not a JSON object, reset")
        return data

    def _save(self, data: Dict[str, Any]) -> None:
        tmp_path = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=self.path.parent,
                prefix=f".{self.path.name}.", suffix=".tmp", delete=False
            ) as f:
                tmp_path = Path(f.name)
                json.dump(data, f)
            tmp_path.replace(self.path)
        except OSError as e:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            raise CacheUnavailableError(f"Cannot write cache file {self.path}: {e}") from e

    def read(self, key: str) -> Optional[Dict[str, Any]]:
        return self._load().get(key)

    def write(self, key: str, entry: Dict[str, Any]) -> None:
        data = self._load()
        data[key] = entry
        self._save(data)

    def delete(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)

    def clear(self) -> None:
        self._save({})

    def count(self) -> int:
        return len(self._load())


class ScoreCache:
    """
    TTL cache of ScoreResults keyed by URL.

    Operations on the same key are serialized by a per-key asyncio.Lock, so
    a read can never observe a half-evicted entry. Different keys never
    wait on each other. Locks are held weakly and disappear once no
    operation on the key is in flight.
    """

    def __init__(
        self,
        backend: Optional[CacheBackend] = None,
        ttl_ms: int = config.CACHE_TTL_MS,
        clock: Clock = system_clock
    ):
        self.backend = backend if backend is not None else JsonFileBackend()
        self.ttl_ms = ttl_ms
        self.clock = clock
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    def _lock_for(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    async def get(self, key: str) -> Optional[ScoreResult]:
        """
        Return cached result if still fresh.

        Expired entries are deleted as a side effect of the read.

        Raises:
            CacheUnavailableError: backend failure or unreadable entry
        """
        async with self._lock_for(key):
            raw = self.backend.read(key)
            if raw is None:
                return None

            try:
                entry = CacheEntry.model_validate(raw)
            except ValueError as e:
                self.backend.delete(key)
                raise CacheUnavailableError(f"Corrupt cache entry for {key}: {e}") from e

            if self.clock.now_ms() - entry.timestamp < self.ttl_ms:
                return entry.data

            self.backend.delete(key)
            return None

    async def set(self, key: str, value: ScoreResult) -> None:
        """
        Store value under key with the current timestamp, overwriting.

        Raises:
            CacheUnavailableError: backend failure
        """
        entry = CacheEntry(timestamp=self.clock.now_ms(), data=value)
        async with self._lock_for(key):
            self.backend.write(key, entry.model_dump())

    async def invalidate(self, key: str) -> None:
        """Drop a single key"""
        async with self._lock_for(key):
            self.backend.delete(key)

    def clear(self) -> None:
        """Drop every entry"""
        self.backend.clear()

    def size(self) -> int:
        """Number of stored entries, including expired ones not yet read"""
        return self.backend.count()


# Global instance
score_cache = ScoreCache()
