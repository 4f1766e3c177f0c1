import json
import logging
import threading
import time
from collections import OrderedDict
from typing import Any, Optional, Tuple

import redis

from cricket_predictor.config import (
    CACHE_ENABLED,
    CACHE_MAX_ENTRIES,
    CACHE_NAMESPACE,
    CACHE_SWEEP_INTERVAL,
    CACHE_VERSION,
    REDIS_URL,
)

logger = logging.getLogger(__name__)


class _LocalStore:
    """In-process TTL store, bounded in size.

    Expired entries are swept from ``put`` at most once per ``sweep_interval``;
    past ``max_entries`` the oldest writes are evicted first.
    """

    def __init__(self, max_entries: int = CACHE_MAX_ENTRIES, sweep_interval: float = CACHE_SWEEP_INTERVAL) -> None:
        self.max_entries = max_entries
        self.sweep_interval = sweep_interval
        self._entries: "OrderedDict[str, Tuple[float, Any]]" = OrderedDict()
        self._next_sweep = 0.0
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def fetch(self, key: str) -> Optional[Any]:
        now = time.time()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if expires_at and expires_at <= now:
                del self._entries[key]
                return None
            return value

    def put(self, key: str, value: Any, ttl: int) -> None:
        now = time.time()
        with self._lock:
            if now >= self._next_sweep:
                self._sweep(now)
                self._next_sweep = now + self.sweep_interval
            self._entries.pop(key, None)
            self._entries[key] = (now + ttl if ttl else 0, value)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def _sweep(self, now: float) -> None:
        expired = [k for k, (expires_at, _) in self._entries.items() if expires_at and expires_at <= now]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug("Swept %d expired cache entries", len(expired))


class CacheClient:
    """Namespaced TTL cache for upstream responses.

    Uses Redis when ``REDIS_URL`` is set and reachable, process memory otherwise.
    Values must be JSON-serializable so both backends return the same shapes.
    A Redis failure while serving is a cache miss, never an error for the caller.
    """

    def __init__(
        self,
        enabled: bool = CACHE_ENABLED,
        redis_url: Optional[str] = REDIS_URL,
        local: Optional[_LocalStore] = None,
    ) -> None:
        self.enabled = enabled
        self.local = local or _LocalStore()
        self._redis = None
        if enabled and redis_url:
            try:
                self._redis = redis.Redis.from_url(redis_url, decode_responses=True)
                self._redis.ping()
                logger.info("Caching upstream responses in Redis")
            except redis.RedisError as e:
                logger.warning("Redis unavailable at %s, using in-memory cache: %s", redis_url, e)
                self._redis = None

    def namespaced(self, key: str) -> str:
        return f"{CACHE_NAMESPACE}:{CACHE_VERSION}:{key}"

    def get(self, key: str) -> Optional[Any]:
        if not self.enabled:
            return None
        full_key = self.namespaced(key)
        if self._redis is None:
            return self.local.fetch(full_key)
        try:
            raw = self._redis.get(full_key)
        except redis.RedisError as e:
            logger.warning("Redis read failed for %s, treating as miss: %s", key, e)
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Discarding undecodable cache entry %s", key)
            return None

    def set(self, key: str, value: Any, ttl: int) -> None:
        if not self.enabled:
            return
        full_key = self.namespaced(key)
        if self._redis is None:
            self.local.put(full_key, value, ttl)
            return
        try:
            self._redis.set(full_key, json.dumps(value), ex=ttl)
        except redis.RedisError as e:
            logger.warning("Redis write failed for %s, not cached: %s", key, e)


cache = CacheClient()
