"""
Project Context Cache

Per-project memoization of assembled context with a time-to-live.

Rebuilds are single-flight per project: when several requests miss on the
same expired key, one walks the tree and the others wait for and reuse its
bundle. Each invalidation bumps a generation counter, and a rebuild that
started under an older generation is handed back to its caller but never
stored, so nothing built before an invalidate() is served after it.
"""

import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from repochat.configs.logging import get_logger
from repochat.projects.models import ContextBundle

logger = get_logger("cache")

ContextLoader = Callable[[str], ContextBundle]


@dataclass(frozen=True)
class CacheEntry:
    bundle: ContextBundle
    created_at: float  # clock() reading when the rebuild started


class ContextCache:
    """
    Owns the project id -> ContextBundle mapping for the process.

    Args:
        loader: Builds a fresh bundle for a project id (walker + assembler).
                Errors it raises (e.g. ProjectNotFoundError) propagate to get().
        ttl_seconds: Maximum age of a bundle before it is rebuilt
        clock: Monotonic time source, injectable for tests
    """

    def __init__(
        self,
        loader: ContextLoader,
        ttl_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._loader = loader
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._generations: dict[str, int] = {}
        self._key_locks: dict[str, threading.Lock] = {}
        self._lock = threading.Lock()

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def _key_lock(self, project_id: str) -> threading.Lock:
        with self._lock:
            lock = self._key_locks.get(project_id)
            if lock is None:
                lock = self._key_locks[project_id] = threading.Lock()
            return lock

    def _fresh_entry(self, project_id: str) -> Optional[CacheEntry]:
        """Return the entry if it is younger than the TTL. Caller holds self._lock."""
        entry = self._entries.get(project_id)
        if entry is None:
            return None
        if self._clock() - entry.created_at < self._ttl:
            return entry
        return None

    def get(self, project_id: str) -> ContextBundle:
        """Return a bundle no older than the TTL, rebuilding it if needed."""
        with self._lock:
            entry = self._fresh_entry(project_id)
        if entry is not None:
            return entry.bundle

        with self._key_lock(project_id):
            # Another caller may have rebuilt while we waited
            with self._lock:
                entry = self._fresh_entry(project_id)
                generation = self._generations.get(project_id, 0)
            if entry is not None:
                return entry.bundle

            started = self._clock()
            logger.debug(f"Rebuilding context for {project_id}")
            bundle = self._loader(project_id)

            with self._lock:
                if self._generations.get(project_id, 0) == generation:
                    self._entries[project_id] = CacheEntry(bundle, started)
                else:
                    logger.debug(f"Discarding rebuild of {project_id}: invalidated while loading")
            return bundle

    def invalidate(self, project_id: str) -> bool:
        """
        Drop the entry for a project.

        Returns:
            True if an entry was present
        """
        with self._lock:
            self._generations[project_id] = self._generations.get(project_id, 0) + 1
            removed = self._entries.pop(project_id, None) is not None
        if removed:
            logger.info(f"Cleared cache for {project_id}")
        return removed

    def invalidate_all(self) -> None:
        with self._lock:
            for project_id in list(self._entries) + list(self._generations):
                self._generations[project_id] = self._generations.get(project_id, 0) + 1
            self._entries.clear()

    def refresh(self, project_id: str) -> ContextBundle:
        """Invalidate and rebuild a project's context immediately."""
        self.invalidate(project_id)
        return self.get(project_id)

    def peek(self, project_id: str) -> Optional[ContextBundle]:
        """Return the fresh cached bundle, or None, without rebuilding."""
        with self._lock:
            entry = self._fresh_entry(project_id)
        return entry.bundle if entry else None

    def __contains__(self, project_id: str) -> bool:
        return self.peek(project_id) is not None
