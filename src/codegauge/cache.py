"""
Result cache for codegauge.

Per-file results are keyed by content fingerprint and held in memory with
least-recently-used eviction. A directory may be given to persist entries
between runs with diskcache (SQLite-backed); the persistent layer is a pure
optimization and any failure in it degrades the cache to memory-only.
"""

from __future__ import annotations

import hashlib
import itertools
import json
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Iterable, Iterator, Optional

from diskcache import Cache

from .config import AnalysisConfig
from .exceptions import CacheError
from .logging_config import get_logger

logger = get_logger(__name__)

# Bump when result models or analyzer semantics change.
ANALYZER_VERSION = "2"

VERSION_KEY = "__codegauge_version__"


def compute_config_hash(config: dict) -> str:
    """
    Compute hash of configuration for cache invalidation.

    Args:
        config: Configuration dictionary

    Returns:
        First 16 hex digits of the SHA256 of the sorted JSON form
    """
    config_str = json.dumps(config, sort_keys=True)
    return hashlib.sha256(config_str.encode()).hexdigest()[:16]


def cache_version(config: AnalysisConfig) -> str:
    """Version tag for results computed under ``config``."""
    return f"{ANALYZER_VERSION}-{compute_config_hash(config.result_options())}"


@dataclass(frozen=True)
class CacheEntry:
    fingerprint: str
    result: Any
    version: str
    path: Optional[str] = None


class AnalysisCache:
    """
    Fingerprint-keyed store for FileAnalysisResults.

    Features:
    - At most one entry per fingerprint; re-putting under the same version
      is a no-op, a different version replaces the entry
    - LRU eviction once ``max_entries`` is exceeded
    - Lock-free reads; writes serialized under one lock
    - ``get_or_compute`` runs at most one computation per fingerprint
    - Optional write-through persistence in a diskcache directory
    """

    def __init__(
        self,
        version: str = ANALYZER_VERSION,
        max_entries: int = 10000,
        directory: Optional[str | Path] = None,
    ):
        """
        Initialize cache.

        Args:
            version: Version tag entries are stored and validated under
            max_entries: Capacity bound
            directory: Directory for persistent storage (None = memory only)
        """
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.version = version
        self.max_entries = max_entries

        self._entries: dict[str, CacheEntry] = {}
        self._recency: dict[str, int] = {}
        self._tick = itertools.count()
        self._write_lock = threading.Lock()
        self._flight_guard = threading.Lock()
        self._flights: dict[str, tuple[threading.Lock, int]] = {}

        self._disk: Optional[Cache] = None
        self._claimed = False
        self._claim_lock = threading.Lock()
        self.directory = str(directory) if directory is not None else None
        if directory is not None:
            try:
                self._disk = self._open(self.directory)
                logger.debug(f"Cache initialized at {self.directory} (version {version})")
            except CacheError as error:
                self._degrade(error)
        else:
            logger.debug("Cache held in memory only")

    @classmethod
    def from_config(
        cls, config: AnalysisConfig, directory: Optional[str | Path] = None
    ) -> AnalysisCache:
        """Build a cache versioned for ``config``, persisting to ``directory`` or ``cache_path``."""
        return cls(
            version=cache_version(config),
            max_entries=config.cache_max_entries,
            directory=directory if directory is not None else config.cache_path,
        )

    @property
    def persistent(self) -> bool:
        return self._disk is not None

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, fingerprint: str) -> bool:
        entry = self._entries.get(fingerprint)
        return entry is not None and entry.version == self.version

    # ── Reads ────────────────────────────────────────────────────

    def get(self, fingerprint: str) -> Optional[Any]:
        """
        Get a result from the cache.

        Returns:
            Cached result, or None when absent or stored under another version
        """
        entry = self._entries.get(fingerprint)
        if entry is None or entry.version != self.version:
            return None
        self._recency[fingerprint] = next(self._tick)
        return entry.result

    def entry(self, fingerprint: str) -> Optional[CacheEntry]:
        return self._entries.get(fingerprint)

    # ── Writes ───────────────────────────────────────────────────

    def put(self, fingerprint: str, result: Any, path: Optional[str] = None) -> bool:
        """
        Store a result.

        Returns:
            True if the entry was written, False if an entry with the current
            version already existed
        """
        with self._write_lock:
            existing = self._entries.get(fingerprint)
            if existing is not None and existing.version == self.version:
                return False
            self._entries[fingerprint] = CacheEntry(fingerprint, result, self.version, path)
            self._recency[fingerprint] = next(self._tick)
            evicted = self._evict()

        if self._disk is not None:
            try:
                self._claim_disk()
                self._disk_op("write", lambda disk: disk.set(fingerprint, (path, result)))
                for key in evicted:
                    self._disk_op("evict", lambda disk: disk.delete(key))
            except CacheError as error:
                self._degrade(error)
        return True

    def get_or_compute(
        self, fingerprint: str, compute: Callable[[], Any], path: Optional[str] = None
    ) -> tuple[Any, bool]:
        """
        Return the cached result or compute and store it.

        Concurrent callers for the same fingerprint wait for the first
        computation instead of repeating it. An exception from ``compute``
        propagates and nothing is stored.

        Returns:
            (result, computed) where ``computed`` is False on a hit
        """
        result = self.get(fingerprint)
        if result is not None:
            return result, False

        with self._in_flight(fingerprint):
            result = self.get(fingerprint)
            if result is not None:
                return result, False
            result = compute()
            self.put(fingerprint, result, path)
            return result, True

    def rebind(self, version: str) -> None:
        """Switch to another version tag.

        Entries stored under the old tag stop matching and are replaced on
        their next put; a persistent store is cleared and re-tagged.
        """
        if version == self.version:
            return
        logger.debug(f"Cache version changed: {self.version} -> {version}")
        self.version = version
        if self._disk is not None:
            try:
                self._reset_disk()
            except CacheError as error:
                self._degrade(error)

    def _evict(self) -> list[str]:
        evicted = []
        while len(self._entries) > self.max_entries:
            # Copy first: lock-free readers may touch recency concurrently.
            recency = self._recency.copy()
            oldest = min(recency, key=recency.__getitem__)
            self._recency.pop(oldest, None)
            if self._entries.pop(oldest, None) is not None:
                evicted.append(oldest)
        return evicted

    @contextmanager
    def _in_flight(self, fingerprint: str) -> Iterator[None]:
        with self._flight_guard:
            lock, waiters = self._flights.get(fingerprint, (None, 0))
            if lock is None:
                lock = threading.Lock()
            self._flights[fingerprint] = (lock, waiters + 1)
        try:
            with lock:
                yield
        finally:
            with self._flight_guard:
                lock, waiters = self._flights[fingerprint]
                if waiters == 1:
                    del self._flights[fingerprint]
                else:
                    self._flights[fingerprint] = (lock, waiters - 1)

    # ── Persistence ──────────────────────────────────────────────

    def load(self, present_paths: Optional[Iterable[str]] = None) -> int:
        """
        Load persisted entries into memory.

        A store written under another version is discarded wholesale.
        Entries whose recorded path is not in ``present_paths`` are pruned.

        Returns:
            Number of entries loaded
        """
        if self._disk is None:
            return 0
        try:
            return self._load(None if present_paths is None else set(present_paths))
        except CacheError as error:
            self._degrade(error)
            return 0

    def _load(self, present: Optional[set[str]]) -> int:
        if self._claim_disk():
            return 0

        keys = self._disk_op("read", lambda disk: sorted(k for k in disk if k != VERSION_KEY))
        loaded = pruned = 0
        for key in keys:
            record = self._disk_op("read", lambda disk: disk.get(key))
            if record is None:
                continue
            path, result = record
            if present is not None and path not in present:
                self._disk_op("prune", lambda disk: disk.delete(key))
                pruned += 1
                continue
            with self._write_lock:
                self._entries[key] = CacheEntry(key, result, self.version, path)
                self._recency[key] = next(self._tick)
            loaded += 1

        with self._write_lock:
            evicted = self._evict()
        for key in evicted:
            self._disk_op("evict", lambda disk: disk.delete(key))

        logger.debug(f"Loaded {loaded} cached results, pruned {pruned}")
        return loaded - len(evicted)

    def _open(self, directory: str) -> Cache:
        try:
            return Cache(directory)
        except Exception as e:
            raise CacheError("open", str(e)) from e

    def _disk_op(self, operation: str, fn: Callable[[Cache], Any]) -> Any:
        disk = self._disk
        if disk is None:
            return None
        try:
            return fn(disk)
        except Exception as e:
            raise CacheError(operation, str(e)) from e

    def _claim_disk(self) -> bool:
        """Tag the store with our version before first use.

        Returns:
            True if the store held another version (or none) and was reset
        """
        with self._claim_lock:
            if self._claimed:
                return False
            stored = self._disk_op("read", lambda disk: disk.get(VERSION_KEY))
            self._claimed = True
            if stored == self.version:
                return False
            if stored is not None:
                logger.info(f"Discarding persisted cache written by version {stored}")
            self._reset_disk()
            return True

    def _reset_disk(self) -> None:
        self._disk_op("clear", lambda disk: disk.clear())
        self._disk_op("write", lambda disk: disk.set(VERSION_KEY, self.version))
        self._claimed = True

    def _degrade(self, error: CacheError) -> None:
        logger.warning(f"{error}; continuing with the in-memory cache only")
        disk, self._disk = self._disk, None
        if disk is not None:
            try:
                disk.close()
            except Exception as e:
                logger.debug(f"Cache close failed: {e}")

    # ── Maintenance ──────────────────────────────────────────────

    def clear(self) -> None:
        """Clear all cache entries, in memory and on disk."""
        with self._write_lock:
            self._entries.clear()
            self._recency.clear()
        if self._disk is not None:
            try:
                self._reset_disk()
            except CacheError as error:
                self._degrade(error)
        logger.info("Cache cleared")

    def stats(self) -> dict:
        """
        Get cache statistics.

        Returns:
            Dictionary with cache stats
        """
        stats = {
            "entries": len(self._entries),
            "capacity": self.max_entries,
            "version": self.version,
            "persistent": self._disk is not None,
            "directory": self.directory,
        }
        if self._disk is not None:
            try:
                stats["disk_entries"] = self._disk_op(
                    "stats", lambda disk: sum(1 for k in disk if k != VERSION_KEY)
                )
                stats["volume"] = self._disk_op("stats", lambda disk: disk.volume())
            except CacheError as error:
                self._degrade(error)
                stats["persistent"] = False
        return stats

    def close(self) -> None:
        """Close cache (cleanup)."""
        disk, self._disk = self._disk, None
        if disk is not None:
            disk.close()
