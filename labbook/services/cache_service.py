# labbook/services/cache_service.py
"""
Read-path cache for the booking core.

Backed by Redis when ``REDIS_URL`` is configured, otherwise by an
in-process dictionary with per-key expiry. Every mutation in the booking
services invalidates the affected keys synchronously, so a user never
reads a cached view older than their own last write.
"""

from datetime import datetime, timedelta
import fnmatch
import json
import logging
from typing import Any, Dict, Optional

import redis
from redis import Redis
from redis.exceptions import RedisError
from sqlalchemy.orm import Session

from ..core.config import settings
from .base import BaseService

logger = logging.getLogger(__name__)


class CacheService(BaseService):
    """
    Key/value cache with TTL and pattern invalidation.

    Values must be JSON-serializable; Redis stores them as JSON strings and
    the memory fallback keeps them as-is.
    """

    def __init__(self, db: Optional[Session] = None, redis_client: Optional[Redis] = None):
        super().__init__(db)  # type: ignore[arg-type]
        self.logger = logging.getLogger(__name__)

        self._memory_cache: Dict[str, Any] = {}
        self._memory_expiry: Dict[str, datetime] = {}
        self.redis: Optional[Redis] = redis_client

        self._stats: Dict[str, int] = self._initialize_stats()

    @classmethod
    def from_settings(cls) -> "CacheService":
        """Connect to Redis when configured; fall back to memory when unreachable."""
        if not settings.redis_url:
            return cls()

        try:
            client = redis.from_url(
                settings.redis_url,
                decode_responses=True,
                socket_connect_timeout=5,
                retry_on_timeout=True,
            )
            client.ping()
            logger.info("Connected to Redis cache")
            return cls(redis_client=client)
        except RedisError as e:
            logger.warning(f"Redis not available: {e}. Using in-memory fallback.")
            return cls()

    def _initialize_stats(self) -> Dict[str, int]:
        return {"hits": 0, "misses": 0, "sets": 0, "deletes": 0, "errors": 0}

    @property
    def backend(self) -> str:
        return "redis" if self.redis is not None else "memory"

    @BaseService.measure_operation("cache_get")
    def get(self, key: str) -> Optional[Any]:
        """Get value from cache; errors count as a miss."""
        try:
            if self.redis is not None:
                raw = self.redis.get(key)
                if raw is not None:
                    self._stats["hits"] += 1
                    return json.loads(raw)
            elif key in self._memory_cache:
                expires_at = self._memory_expiry.get(key)
                if expires_at is None or datetime.now() < expires_at:
                    self._stats["hits"] += 1
                    return self._memory_cache[key]
                # Expired
                self._memory_cache.pop(key, None)
                self._memory_expiry.pop(key, None)

            self._stats["misses"] += 1
            return None

        except (RedisError, ValueError) as e:
            logger.error(f"Cache get error for key {key}: {e}")
            self._stats["errors"] += 1
            return None

    @BaseService.measure_operation("cache_set")
    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """Set value with a TTL in seconds (defaults to the booking cache TTL)."""
        if ttl is None:
            ttl = settings.booking_cache_ttl_seconds
        if ttl <= 0:
            return False

        try:
            if self.redis is not None:
                self.redis.setex(key, ttl, json.dumps(value, default=str))
            else:
                self._memory_cache[key] = value
                self._memory_expiry[key] = datetime.now() + timedelta(seconds=ttl)
            self._stats["sets"] += 1
            return True

        except (RedisError, TypeError, ValueError) as e:
            logger.error(f"Cache set error for key {key}: {e}")
            self._stats["errors"] += 1
            return False

    @BaseService.measure_operation("cache_delete")
    def delete(self, key: str) -> bool:
        try:
            if self.redis is not None:
                result = bool(self.redis.delete(key))
            else:
                result = key in self._memory_cache
                self._memory_cache.pop(key, None)
                self._memory_expiry.pop(key, None)
            if result:
                self._stats["deletes"] += 1
            return result

        except RedisError as e:
            logger.error(f"Cache delete error for key {key}: {e}")
            self._stats["errors"] += 1
            return False

    @BaseService.measure_operation("cache_delete_pattern")
    def delete_pattern(self, pattern: str) -> int:
        """Delete all keys matching a glob pattern."""
        count = 0
        try:
            if self.redis is not None:
                for key in self.redis.scan_iter(match=pattern):
                    if self.redis.delete(key):
                        count += 1
            else:
                for key in [k for k in self._memory_cache if fnmatch.fnmatch(k, pattern)]:
                    self._memory_cache.pop(key, None)
                    self._memory_expiry.pop(key, None)
                    count += 1

            self._stats["deletes"] += count
            logger.debug(f"Deleted {count} keys matching pattern: {pattern}")
            return count

        except RedisError as e:
            logger.error(f"Cache delete pattern error: {e}")
            self._stats["errors"] += 1
            return 0

    def get_stats(self) -> Dict[str, Any]:
        total = self._stats["hits"] + self._stats["misses"]
        return {
            **self._stats,
            "backend": self.backend,
            "hit_rate": (self._stats["hits"] / total) if total else 0.0,
        }

    def clear(self) -> None:
        """Drop every key held by the memory backend."""
        self._memory_cache.clear()
        self._memory_expiry.clear()
