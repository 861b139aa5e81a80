"""Change-aware caches for dependency graphs and task scores."""

import hashlib
import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, Iterator, Optional
from uuid import UUID

from ..config.models import SelectionConfig, SelectionStrategy
from ..tasks.models import Task
from .graph import DependencyGraph

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReadWriteLock:
    """Many concurrent readers or one exclusive writer.

    A waiting writer blocks new readers, so readers cannot starve it.
    """

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writers_waiting = 0
        self._writing = False

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writing or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writing or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writing = True
        try:
            yield
        finally:
            with self._cond:
                self._writing = False
                self._cond.notify_all()


def snapshot_digest(tasks: Iterable[Task]) -> str:
    """Hash every task field that affects graph structure or scoring.

    Args:
        tasks: Task snapshot

    Returns:
        Hex sha256 digest, independent of input order
    """
    lines = []
    for task in tasks:
        deps = ",".join(str(d) for d in task.dependencies)
        lines.append(
            "|".join(
                [
                    str(task.id),
                    task.state.value,
                    task.priority.value,
                    str(task.parent_id or ""),
                    deps,
                    task.created_at.isoformat(),
                    task.title,
                ]
            )
        )
    digest = hashlib.sha256()
    for line in sorted(lines):
        digest.update(line.encode("utf-8"))
        digest.update(b"\n")
    return digest.hexdigest()


@dataclass(frozen=True)
class CacheKey:
    """Identity of a cached graph."""

    project_id: Optional[UUID]
    task_hash: str
    strategy: SelectionStrategy
    config_hash: str


@dataclass
class CacheEntry:
    graph: DependencyGraph
    computed_at: datetime
    expires_at: datetime


class GraphCache:
    """TTL cache of dependency graphs, disabled when ``cache_graphs`` is off."""

    def __init__(self, config: SelectionConfig, clock: Clock = _utcnow):
        """Initialize graph cache.

        Args:
            config: Configuration providing the enable flag and TTL
            clock: Source of the current time
        """
        self.config = config
        self._clock = clock
        self._entries: dict[CacheKey, CacheEntry] = {}
        self._lock = ReadWriteLock()

    @property
    def enabled(self) -> bool:
        return self.config.advanced.cache_graphs

    def get(self, key: CacheKey) -> Optional[DependencyGraph]:
        """Return the cached graph, or None when missing, expired or disabled."""
        if not self.enabled:
            return None

        with self._lock.read():
            entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() > entry.expires_at:
            with self._lock.write():
                if self._entries.get(key) is entry:
                    del self._entries[key]
            return None
        return entry.graph

    def put(self, key: CacheKey, graph: DependencyGraph) -> None:
        if not self.enabled:
            return

        now = self._clock()
        entry = CacheEntry(
            graph=graph,
            computed_at=now,
            expires_at=now + timedelta(seconds=self.config.advanced.cache_duration_sec),
        )
        with self._lock.write():
            self._prune_expired(now)
            self._entries[key] = entry

    def invalidate(self, project_id: Optional[UUID]) -> int:
        """Drop every entry of a project.

        Returns:
            Number of entries removed
        """
        with self._lock.write():
            stale = [key for key in self._entries if key.project_id == project_id]
            for key in stale:
                del self._entries[key]
        if stale:
            logger.debug(f"Invalidated {len(stale)} cached graph(s) for project {project_id}")
        return len(stale)

    def cleanup(self) -> int:
        """Drop expired entries.

        Returns:
            Number of entries removed
        """
        with self._lock.write():
            return self._prune_expired(self._clock())

    def _prune_expired(self, now: datetime) -> int:
        # Caller holds the write lock.
        expired = [key for key, entry in self._entries.items() if now > entry.expires_at]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def size(self) -> int:
        with self._lock.read():
            return len(self._entries)

    def clear(self) -> None:
        with self._lock.write():
            self._entries.clear()


@dataclass
class ScoreEntry:
    value: float
    computed_at: datetime
    fingerprint: str


class ScoreCache:
    """Per-task strategy score memo, valid while the fingerprint matches.

    Only the scalar score is kept. Callers wrap it in a fresh TaskScore
    around their own Task.
    """

    def __init__(self, clock: Clock = _utcnow):
        self._clock = clock
        self._entries: dict[UUID, ScoreEntry] = {}
        self._lock = ReadWriteLock()

    def get(self, task_id: UUID, fingerprint: str) -> Optional[float]:
        with self._lock.read():
            entry = self._entries.get(task_id)
        if entry is None or entry.fingerprint != fingerprint:
            return None
        return entry.value

    def put(self, task_id: UUID, value: float, fingerprint: str) -> None:
        entry = ScoreEntry(value=value, computed_at=self._clock(), fingerprint=fingerprint)
        with self._lock.write():
            self._entries[task_id] = entry

    def size(self) -> int:
        with self._lock.read():
            return len(self._entries)

    def clear(self) -> None:
        with self._lock.write():
            self._entries.clear()
