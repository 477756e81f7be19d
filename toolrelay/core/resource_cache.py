import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from toolrelay.config.schema import CacheConfig, ResourceConfig

logger = logging.getLogger(__name__)


class ResourceType(Enum):
    CONFIG = "config"
    PROMPT_TEMPLATE = "prompt_template"
    KNOWLEDGE_BASE = "knowledge_base"
    DATA = "data"
    MODEL = "model"


@dataclass(frozen=True)
class Resource:
    id: str
    type: ResourceType
    name: str
    content: str
    metadata: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_config(cls, config: ResourceConfig) -> "Resource":
        return cls(
            id=config.id,
            type=ResourceType(config.type.lower()),
            name=config.name,
            content=config.content,
            metadata=dict(config.metadata),
        )


@dataclass
class CachedResource:
    resource: Resource
    cached_at: float
    access_count: int = 0


@dataclass(frozen=True)
class CacheStats:
    total_resources: int
    total_accesses: int
    average_access_count: float
    most_accessed: str | None


class ResourceCache:
    """Bounded in-memory resource cache.

    Entries record their insertion time and access count. Nothing is
    evicted implicitly except the oldest entry when the cache is full;
    stale entries go only through ``sweep``.
    """

    def __init__(
        self,
        max_entries: int = 128,
        max_age_seconds: float = 7200.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._max_entries = max_entries
        self._max_age = max_age_seconds
        self._clock = clock
        self._entries: dict[str, CachedResource] = {}

    @classmethod
    def from_config(cls, config: CacheConfig) -> "ResourceCache":
        return cls(max_entries=config.max_entries, max_age_seconds=config.max_age_seconds)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, resource_id: str) -> bool:
        return resource_id in self._entries

    def put(self, resource: Resource) -> None:
        """Cache a resource, replacing any entry with the same id."""
        self._entries.pop(resource.id, None)
        while len(self._entries) >= self._max_entries:
            oldest = next(iter(self._entries))
            logger.info(f"Evicting cached resource to make room: {oldest}")
            del self._entries[oldest]
        self._entries[resource.id] = CachedResource(resource=resource, cached_at=self._clock())

    def get(self, resource_id: str) -> Resource | None:
        cached = self._entries.get(resource_id)
        if cached is None:
            logger.debug(f"Resource cache miss: {resource_id}")
            return None
        cached.access_count += 1
        logger.debug(f"Resource cache hit: {resource_id} (access count: {cached.access_count})")
        return cached.resource

    def remove(self, resource_id: str) -> bool:
        return self._entries.pop(resource_id, None) is not None

    def resources(self, resource_type: ResourceType | None = None) -> list[Resource]:
        """Cached resources in insertion order. Does not count as an access."""
        return [
            c.resource for c in self._entries.values()
            if resource_type is None or c.resource.type is resource_type
        ]

    def stats(self) -> CacheStats:
        total = len(self._entries)
        accesses = sum(c.access_count for c in self._entries.values())
        most = max(self._entries.items(), key=lambda item: item[1].access_count, default=None)
        return CacheStats(
            total_resources=total,
            total_accesses=accesses,
            average_access_count=accesses / total if total else 0.0,
            most_accessed=most[0] if most else None,
        )

    def sweep(self, now: float | None = None) -> list[str]:
        """Remove entries older than the max age that were never accessed."""
        now = self._clock() if now is None else now
        expired = [
            resource_id for resource_id, cached in self._entries.items()
            if now - cached.cached_at > self._max_age and cached.access_count == 0
        ]
        for resource_id in expired:
            logger.info(f"Removing old cached resource: {resource_id}")
            del self._entries[resource_id]
        return expired


class ResourceCacheSweeper:
    """Runs ``ResourceCache.sweep`` on an ``asyncio.Task`` every ``interval`` seconds."""

    def __init__(self, cache: ResourceCache, interval: float) -> None:
        self._cache = cache
        self._interval = interval
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(), name="resource-cache-sweeper")
        logger.info(f"Resource cache sweeper started (interval={self._interval}s)")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Resource cache sweeper stopped")

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                self._tick()
            except Exception:
                logger.exception("Resource cache sweep failed")

    def _tick(self) -> None:
        stats = self._cache.stats()
        logger.info(
            f"Cache statistics: resources={stats.total_resources}, "
            f"accesses={stats.total_accesses}, "
            f"average={stats.average_access_count:.1f}, "
            f"most accessed={stats.most_accessed or 'N/A'}"
        )
        self._cache.sweep()
