"""
Token verification caches

A cache only ever saves a signature check. Every backend fails open: if it
cannot answer, the caller verifies the token again.
"""

import json
import logging
import os
import time
from threading import Lock
from typing import Optional

import redis

from .config import TOKEN_CACHE_BACKEND

logger = logging.getLogger(__name__)

# Redis connection
redis_client: Optional[redis.Redis] = None

MEMORY_CACHE_CLEANUP_INTERVAL = 60  # Clean up expired entries every 60 seconds


def get_redis_client() -> redis.Redis:
    """
    Get or create Redis client
    Uses REDIS_URL when set, otherwise individual host settings
    """
    global redis_client

    if redis_client is None:
        logger.info("🔄 Initializing Redis connection for token cache...")

        redis_url = os.getenv("REDIS_URL")

        try:
            if redis_url:
                redis_client = redis.from_url(
                    redis_url,
                    decode_responses=True,
                    socket_connect_timeout=5,
                    socket_timeout=5,
                    retry_on_timeout=True,
                    health_check_interval=30,
                )
            else:
                redis_client = redis.Redis(
                    host=os.getenv("REDIS_HOST", "localhost"),
                    port=int(os.getenv("REDIS_PORT", "6379")),
                    password=os.getenv("REDIS_PASSWORD", None),
                    db=int(os.getenv("REDIS_DB", "0")),
                    ssl=os.getenv("REDIS_SSL", "false").lower() == "true",
                    decode_responses=True,
                    socket_connect_timeout=5,
                    socket_timeout=5,
                    retry_on_timeout=True,
                    health_check_interval=30,
                )
            redis_client.ping()
            logger.info("Redis connected successfully")
        except Exception as e:
            redis_client = None
            logger.error(f"❌ Failed to connect to Redis: {str(e)}")
            raise

    return redis_client


class TokenCache:
    """No-op cache: every lookup misses"""

    def get(self, key: str) -> Optional[dict]:
        return None

    def put(self, key: str, value: dict, expires_at: float) -> bool:
        return False

    def expire(self, key: str) -> bool:
        return False


class NullTokenCache(TokenCache):
    pass


class MemoryTokenCache(TokenCache):
    """Process-local cache keyed by raw token, entries die at expires_at"""

    def __init__(self, clock=time.time):
        self._clock = clock
        self._entries: dict[str, tuple[dict, float]] = {}
        self._lock = Lock()
        self._last_cleanup = 0.0

    def get(self, key: str) -> Optional[dict]:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                logger.debug("❌ Token cache MISS")
                return None
            value, expires_at = entry
            if expires_at <= now:
                del self._entries[key]
                return None
            logger.debug("✅ Token cache HIT")
            return dict(value)

    def put(self, key: str, value: dict, expires_at: float) -> bool:
        now = self._clock()
        if expires_at <= now:
            return False
        with self._lock:
            self._cleanup(now)
            self._entries[key] = (dict(value), expires_at)
        return True

    def expire(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def _cleanup(self, now: float) -> None:
        if now - self._last_cleanup < MEMORY_CACHE_CLEANUP_INTERVAL:
            return
        expired = [k for k, (_, expires_at) in self._entries.items() if expires_at <= now]
        for k in expired:
            del self._entries[k]
        if expired:
            logger.debug(f"🧹 Cleaned up {len(expired)} expired token cache entries")
        self._last_cleanup = now


class RedisTokenCache(TokenCache):
    """Redis cache wrapper with automatic serialization"""

    def __init__(self, client: Optional[redis.Redis] = None, key_prefix: str = "review_token"):
        self.redis_client = client
        self.key_prefix = key_prefix

    def _get_client(self):
        """Lazy load Redis client"""
        if self.redis_client is None:
            try:
                self.redis_client = get_redis_client()
            except Exception as e:
                logger.warning(f"⚠️ Redis token cache unavailable: {e}")
                return None
        return self.redis_client

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}:{key}"

    def get(self, key: str) -> Optional[dict]:
        client = self._get_client()
        if not client:
            return None

        try:
            value = client.get(self._key(key))
            if value:
                logger.debug("✅ Token cache HIT")
                return json.loads(value)
            logger.debug("❌ Token cache MISS")
            return None
        except Exception as e:
            logger.error(f"❌ Token cache get error: {e}")
            return None

    def put(self, key: str, value: dict, expires_at: float) -> bool:
        # Whole seconds, rounded down so the entry never outlives the token
        ttl = int(expires_at - time.time())
        if ttl <= 0:
            return False

        client = self._get_client()
        if not client:
            return False

        try:
            client.setex(self._key(key), ttl, json.dumps(value))
            return True
        except Exception as e:
            logger.error(f"❌ Token cache set error: {e}")
            return False

    def expire(self, key: str) -> bool:
        client = self._get_client()
        if not client:
            return False

        try:
            return bool(client.delete(self._key(key)))
        except Exception as e:
            logger.error(f"❌ Token cache delete error: {e}")
            return False


def build_token_cache(backend: Optional[str] = None) -> TokenCache:
    """Build the cache selected by TOKEN_CACHE_BACKEND"""
    backend = (backend or TOKEN_CACHE_BACKEND).lower()
    if backend == "redis":
        return RedisTokenCache()
    if backend == "memory":
        return MemoryTokenCache()
    if backend != "none":
        logger.warning(f"⚠️ Unknown token cache backend '{backend}', caching disabled")
    return NullTokenCache()
