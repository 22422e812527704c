"""
Key/Value Cache for SocialProof
===============================

JSON key/value store backed by Redis, or by an in-process dictionary when
the memory backend is selected or Redis cannot be reached.

Features:
- Namespace prefixing for key isolation
- TTL-based expiration (both backends)
- JSON serialization
- Injectable clock for the memory backend

Usage:
    cache = RedisCache(backend="memory")
    cache.set("analysis:P001", {"summary": "..."}, ttl_seconds=1800)
    cache.get("analysis:P001")
"""

import json
import logging
import time
from typing import Optional, Dict, Any, Tuple, Callable

import redis

logger = logging.getLogger(__name__)


class RedisCache:
    """
    Redis-backed cache with an in-memory backend.

    ``backend="memory"`` never touches the network. ``backend="redis"`` connects
    on construction and switches to memory if the server does not answer PING.
    """

    def __init__(
        self,
        redis_url: Optional[str] = None,
        prefix: str = "socialproof",
        backend: str = "memory",
        clock: Callable[[], float] = time.time,
    ):
        self.prefix = prefix
        self._clock = clock
        self._redis: Optional[redis.Redis] = None
        self._memory_cache: Dict[str, Tuple[Optional[float], Any]] = {}
        self._use_memory = True

        if backend == "redis":
            self._connect(redis_url)

    def _connect(self, redis_url: Optional[str]) -> None:
        """Establish Redis connection."""
        url = redis_url or "redis://localhost:6379/0"
        try:
            client = redis.from_url(
                url,
                decode_responses=True,
                socket_timeout=5,
                socket_connect_timeout=5,
            )
            client.ping()
        except redis.RedisError as e:
            logger.warning(f"Redis connection failed: {e}. Using in-memory cache.")
            return

        self._redis = client
        self._use_memory = False
        logger.info(f"Redis cache connected: {url.split('@')[-1]}")

    def _make_key(self, key: str) -> str:
        return f"{self.prefix}:{key}"

    @property
    def backend(self) -> str:
        return "memory" if self._use_memory else "redis"

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None when missing or expired."""
        full_key = self._make_key(key)

        if self._use_memory:
            return self._memory_get(full_key)

        try:
            value = self._redis.get(full_key)
        except redis.RedisError as e:
            logger.warning(f"Redis get failed: {e}")
            return self._memory_get(full_key)
        if value is None:
            return None
        return json.loads(value)

    def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> bool:
        """
        Store a JSON serializable value.

        Args:
            key: Cache key (without prefix)
            value: JSON serializable value
            ttl_seconds: Optional time to live

        Returns:
            True if stored
        """
        full_key = self._make_key(key)

        if self._use_memory:
            return self._memory_set(full_key, value, ttl_seconds)

        try:
            serialized = json.dumps(value, ensure_ascii=False)
            if ttl_seconds:
                self._redis.setex(full_key, ttl_seconds, serialized)
            else:
                self._redis.set(full_key, serialized)
            return True
        except redis.RedisError as e:
            logger.warning(f"Redis set failed: {e}")
            return self._memory_set(full_key, value, ttl_seconds)

    def delete(self, key: str) -> bool:
        """Delete a key. Returns True if it existed."""
        full_key = self._make_key(key)

        if self._use_memory:
            return self._memory_cache.pop(full_key, None) is not None

        try:
            return self._redis.delete(full_key) > 0
        except redis.RedisError as e:
            logger.warning(f"Redis delete failed: {e}")
            return self._memory_cache.pop(full_key, None) is not None

    def exists(self, key: str) -> bool:
        full_key = self._make_key(key)

        if self._use_memory:
            return self._memory_get(full_key) is not None

        try:
            return self._redis.exists(full_key) > 0
        except redis.RedisError as e:
            logger.warning(f"Redis exists failed: {e}")
            return self._memory_get(full_key) is not None

    def keys(self, prefix: str = "") -> list:
        """Live keys (without namespace prefix) starting with ``prefix``."""
        full_prefix = self._make_key(prefix)
        strip = len(self.prefix) + 1

        if self._use_memory:
            live = [k for k in list(self._memory_cache) if k.startswith(full_prefix)
                    and self._memory_get(k) is not None]
            return [k[strip:] for k in live]

        try:
            return [k[strip:] for k in self._redis.scan_iter(match=f"{full_prefix}*")]
        except redis.RedisError as e:
            logger.warning(f"Redis keys failed: {e}")
            return []

    def clear_prefix(self, prefix: str) -> int:
        """Delete all keys starting with ``prefix``. Returns the count."""
        full_prefix = self._make_key(prefix)

        if self._use_memory:
            doomed = [k for k in self._memory_cache if k.startswith(full_prefix)]
            for k in doomed:
                del self._memory_cache[k]
            return len(doomed)

        try:
            keys = list(self._redis.scan_iter(match=f"{full_prefix}*"))
            if keys:
                return self._redis.delete(*keys)
            return 0
        except redis.RedisError as e:
            logger.warning(f"Redis clear_prefix failed: {e}")
            return 0

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        stats = {
            "backend": self.backend,
            "connected": self._redis is not None and not self._use_memory,
        }

        if self._use_memory:
            stats["memory_keys"] = len(self._memory_cache)
        else:
            try:
                info = self._redis.info("memory")
                stats["redis_memory_used"] = info.get("used_memory_human", "N/A")
                stats["redis_keys"] = self._redis.dbsize()
            except redis.RedisError as e:
                logger.debug(f"Redis info failed: {e}")

        return stats

    # =========================================================================
    # MEMORY BACKEND
    # =========================================================================

    def _memory_get(self, key: str) -> Optional[Any]:
        entry = self._memory_cache.get(key)
        if entry is None:
            return None

        expires_at, value = entry
        if expires_at is not None and self._clock() >= expires_at:
            del self._memory_cache[key]
            return None
        return value

    def _memory_set(self, key: str, value: Any, ttl_seconds: Optional[int]) -> bool:
        expires_at = self._clock() + ttl_seconds if ttl_seconds else None
        self._memory_cache[key] = (expires_at, value)
        return True

    def close(self) -> None:
        """Close Redis connection."""
        if self._redis is not None:
            self._redis.close()
            self._redis = None
        self._use_memory = True
