from __future__ import annotations

import json
import logging
import threading
from collections.abc import Callable

from redis import Redis
from redis.exceptions import RedisError

from sampleduct.config.settings import settings
from sampleduct.schemas.sample import Sample
from sampleduct.sources.base import SampleSource

logger = logging.getLogger(__name__)


def _get_client() -> Redis:
    return Redis.from_url(settings.redis_url)


class SampleCache:
    """Samples of a single source, stored in Redis with a per-entry TTL."""

    def __init__(self, namespace: str, client: Redis, prefix: str | None = None) -> None:
        self.namespace = namespace
        self._client = client
        self._prefix = prefix or settings.cache_key_prefix

    def _redis_key(self, key: str) -> str:
        return f"{self._prefix}:{self.namespace}:{key}"

    def get(self, key: str) -> Sample | None:
        try:
            raw = self._client.get(self._redis_key(key))
        except RedisError as exc:
            logger.warning("Cache read failed for %s, source %s: %s", key, self.namespace, exc)
            return None

        if not raw:
            return None

        try:
            payload = json.loads(raw)
            return Sample(**payload)
        except (json.JSONDecodeError, TypeError, ValueError):
            logger.warning("Discarding unreadable cache entry %s, source %s", key, self.namespace)
            return None

    def set(self, key: str, sample: Sample, ttl_millis: int) -> None:
        if ttl_millis <= 0:
            return
        try:
            self._client.psetex(self._redis_key(key), ttl_millis, sample.model_dump_json())
        except RedisError as exc:
            logger.warning("Cache write failed for %s, source %s: %s", key, self.namespace, exc)


class CacheRegistry:
    """Hands out one SampleCache per source client, created on first use."""

    def __init__(self, client_factory: Callable[[], Redis] | None = None) -> None:
        self._client_factory = client_factory
        self._caches: dict[SampleSource, SampleCache] = {}
        self._lock = threading.Lock()

    def get_or_create(self, source: SampleSource) -> SampleCache:
        with self._lock:
            cache = self._caches.get(source)
            if cache is None:
                factory = self._client_factory or _get_client
                cache = SampleCache(source.source_id, factory())
                self._caches[source] = cache
            return cache

    def discard(self, source: SampleSource) -> None:
        with self._lock:
            self._caches.pop(source, None)
