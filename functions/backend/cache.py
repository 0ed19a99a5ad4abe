"""
Page payload cache with path-based invalidation.

Supports an in-memory fallback for tests/local runs and a Redis-backed
implementation for production, so several server processes share one view
of what has been invalidated.

Every path carries a generation counter that `invalidate` bumps. A payload
is only stored if the generation it was built under is still current, so a
page rebuilt from data read before a concurrent write is never cached.
"""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass, field
from typing import Optional, Protocol

import redis
from redis import exceptions as redis_exceptions

logger = logging.getLogger(__name__)


class PageCache(Protocol):
    """Minimal cache interface keyed by page path."""

    def get(self, path: str) -> Optional[dict]:
        ...

    def generation(self, path: str) -> Optional[int]:
        ...

    def set(self, path: str, payload: dict, generation: Optional[int]) -> bool:
        ...

    def invalidate(self, path: str) -> None:
        ...


@dataclass
class InMemoryPageCache:
    """Simple dict cache for testing/dev."""

    entries: dict[str, dict] = field(default_factory=dict)
    generations: dict[str, int] = field(default_factory=dict)
    invalidations: list[str] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def get(self, path: str) -> Optional[dict]:
        return self.entries.get(path)

    def generation(self, path: str) -> Optional[int]:
        with self._lock:
            return self.generations.get(path, 0)

    def set(self, path: str, payload: dict, generation: Optional[int]) -> bool:
        with self._lock:
            if generation is None or self.generations.get(path, 0) != generation:
                return False
            self.entries[path] = payload
            return True

    def invalidate(self, path: str) -> None:
        with self._lock:
            self.invalidations.append(path)
            self.generations[path] = self.generations.get(path, 0) + 1
            self.entries.pop(path, None)


@dataclass
class RedisPageCache:
    """Redis-backed cache storing JSON payloads with a TTL."""

    url: str
    key_prefix: str = "band:page:"
    generation_prefix: str = "band:page-gen:"
    ttl_seconds: int = 3600

    def __post_init__(self):
        self.client = redis.Redis.from_url(self.url)

    def _key(self, path: str) -> str:
        return f"{self.key_prefix}{path}"

    def _generation_key(self, path: str) -> str:
        return f"{self.generation_prefix}{path}"

    def _reconnect(self) -> None:
        self.client = redis.Redis.from_url(self.url)

    def get(self, path: str) -> Optional[dict]:
        try:
            raw = self.client.get(self._key(path))
        except redis_exceptions.ConnectionError as e:
            logger.warning("Page cache unavailable, rebuilding %s: %s", path, e)
            self._reconnect()
            return None
        if raw is None:
            return None
        return json.loads(raw)

    def generation(self, path: str) -> Optional[int]:
        """Returns None when Redis is unreachable; the page is then not cached."""
        try:
            raw = self.client.get(self._generation_key(path))
        except redis_exceptions.ConnectionError as e:
            logger.warning("Page cache unavailable for %s: %s", path, e)
            self._reconnect()
            return None
        return int(raw or 0)

    def set(self, path: str, payload: dict, generation: Optional[int]) -> bool:
        if generation is None:
            return False
        generation_key = self._generation_key(path)
        try:
            with self.client.pipeline() as pipe:
                # WATCH aborts the write if an invalidation lands in between.
                pipe.watch(generation_key)
                if int(pipe.get(generation_key) or 0) != generation:
                    pipe.unwatch()
                    return False
                pipe.multi()
                pipe.set(
                    self._key(path),
                    json.dumps(payload, default=str),
                    ex=self.ttl_seconds,
                )
                pipe.execute()
                return True
        except redis_exceptions.WatchError:
            return False
        except redis_exceptions.ConnectionError as e:
            logger.warning("Could not cache page %s: %s", path, e)
            self._reconnect()
            return False

    def invalidate(self, path: str) -> None:
        # Connection errors propagate to the action that wrote the content.
        with self.client.pipeline() as pipe:
            pipe.delete(self._key(path))
            pipe.incr(self._generation_key(path))
            pipe.execute()


def revalidate_paths(cache: PageCache, *paths: str) -> None:
    for path in paths:
        cache.invalidate(path)
        logger.debug("Revalidated %s", path)
