"""
Redis-based caching for Sportfolio read models.

Layout data (album summaries, filter options) is cached with a flat TTL.
There is no invalidation protocol beyond expiry and explicit flushes.
"""

import json
import logging
import hashlib
import os
import pickle
from typing import Any, Callable, Dict, Optional

import redis

logger = logging.getLogger(__name__)

LAYOUT_TTL_SECONDS = 300


class SportfolioCache:
    """
    Redis cache with namespaced keys and per-entry TTL.

    When Redis cannot be reached the cache disables itself and every
    lookup is a miss.
    """

    def __init__(self, redis_url: Optional[str] = "redis://localhost:6379/0",
                 default_ttl: int = LAYOUT_TTL_SECONDS, client=None):
        """
        Initialize the cache.

        Args:
            redis_url: Redis connection URL
            default_ttl: Default TTL in seconds (5 minutes)
            client: Pre-built Redis client, mostly for tests
        """
        self.redis_client = client
        if self.redis_client is None and redis_url:
            try:
                self.redis_client = redis.from_url(redis_url, decode_responses=False)
                self.redis_client.ping()
                logger.info(f"Connected to Redis at {redis_url}")
            except redis.RedisError as e:
                logger.warning(f"Redis unavailable, layout cache disabled: {e}")
                self.redis_client = None

        self.default_ttl = default_ttl
        self.enabled = self.redis_client is not None

        self.prefixes = {
            'layout': 'sf:layout:',
            'albums': 'sf:albums:',
            'filters': 'sf:filters:',
            'query': 'sf:query:',
        }

    def _generate_key(self, prefix: str, identifier: str,
                      params: Optional[Dict] = None) -> str:
        """Generate cache key with optional parameter hashing."""
        base_key = f"{self.prefixes[prefix]}{identifier}"

        if params:
            param_str = json.dumps(params, sort_keys=True, default=str)
            param_hash = hashlib.md5(param_str.encode()).hexdigest()[:8]
            base_key += f":{param_hash}"

        return base_key

    def get(self, prefix: str, identifier: str,
            params: Optional[Dict] = None) -> Optional[Any]:
        """Get cached value."""
        if not self.enabled:
            return None

        key = self._generate_key(prefix, identifier, params)
        try:
            cached_data = self.redis_client.get(key)
            if cached_data:
                return pickle.loads(cached_data)
        except redis.RedisError as e:
            logger.warning(f"Cache get error for key {key}: {e}")

        return None

    def set(self, prefix: str, identifier: str, value: Any,
            ttl: Optional[int] = None, params: Optional[Dict] = None) -> bool:
        """Set cached value with TTL."""
        if not self.enabled:
            return False

        key = self._generate_key(prefix, identifier, params)
        ttl = ttl or self.default_ttl

        try:
            self.redis_client.setex(key, ttl, pickle.dumps(value))
            return True
        except redis.RedisError as e:
            logger.warning(f"Cache set error for key {key}: {e}")
            return False

    def delete(self, prefix: str, identifier: str,
               params: Optional[Dict] = None) -> bool:
        if not self.enabled:
            return False

        key = self._generate_key(prefix, identifier, params)
        try:
            self.redis_client.delete(key)
            return True
        except redis.RedisError as e:
            logger.warning(f"Cache delete error for key {key}: {e}")
            return False

    def delete_pattern(self, pattern: str) -> int:
        """Delete all keys matching pattern."""
        if not self.enabled:
            return 0

        try:
            keys = self.redis_client.keys(pattern)
            if keys:
                return self.redis_client.delete(*keys)
            return 0
        except redis.RedisError as e:
            logger.warning(f"Cache pattern delete error for {pattern}: {e}")
            return 0

    def get_or_load(self, prefix: str, identifier: str, loader: Callable[[], Any],
                    ttl: Optional[int] = None, params: Optional[Dict] = None) -> Any:
        """Return the cached value, or call loader() and cache its result."""
        cached = self.get(prefix, identifier, params)
        if cached is not None:
            logger.debug(f"Cache hit for {prefix}:{identifier}")
            return cached

        value = loader()
        self.set(prefix, identifier, value, ttl, params)
        logger.debug(f"Cache miss for {prefix}:{identifier}, result cached")
        return value

    def invalidate_layout(self) -> int:
        """Drop every layout entry (album summaries and filter options)."""
        removed = 0
        for prefix in ('layout', 'albums', 'filters'):
            removed += self.delete_pattern(f"{self.prefixes[prefix]}*")
        logger.debug(f"Invalidated {removed} layout cache entries")
        return removed


# Global cache instance
_cache_instance = None


def get_cache(config: Optional[Dict[str, Any]] = None) -> SportfolioCache:
    """Get the global cache instance."""
    global _cache_instance
    if _cache_instance is None:
        cache_config = (config or {}).get('cache', {})
        redis_url = cache_config.get('redis_url') or os.getenv('REDIS_URL')
        if redis_url and redis_url.startswith('${'):
            redis_url = None
        ttl = int(cache_config.get('layout_ttl', LAYOUT_TTL_SECONDS))
        _cache_instance = SportfolioCache(redis_url, ttl)
    return _cache_instance


def reset_cache() -> None:
    """Forget the global cache instance."""
    global _cache_instance
    _cache_instance = None
