"""
Caching and rate limiting utilities.

Both are plain objects built at startup (see utils/deps.py) and injected into
services, so tests can swap the clock or the backend.
"""
import json
import logging
import math
import threading
import time
import uuid
from collections import deque
from datetime import datetime
from typing import Any, Callable, Deque, Dict, Optional, Tuple

import redis

from scoring.errors import RateLimitExceeded

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


# ─── Cache keys ─────────────────────────────────────────────────────────────────

class CacheKeys:
    @staticmethod
    def leaderboard(
        crew_id: str,
        challenge_id: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> str:
        key = f"leaderboard:{crew_id}:{challenge_id or 'all'}"
        if start or end:
            key += f":{start.isoformat() if start else ''}~{end.isoformat() if end else ''}"
        return key

    @staticmethod
    def leaderboard_prefix(crew_id: str) -> str:
        return f"leaderboard:{crew_id}:"

    @staticmethod
    def challenges(crew_id: Optional[str]) -> str:
        return f"challenges:{crew_id or 'all'}"

    @staticmethod
    def user_stats(user_id: str) -> str:
        return f"user_stats:{user_id}"

    @staticmethod
    def crew_stats(crew_id: str) -> str:
        return f"crew_stats:{crew_id}"

    @staticmethod
    def challenge_stats(challenge_id: str) -> str:
        return f"challenge_stats:{challenge_id}"


# ─── Backends ───────────────────────────────────────────────────────────────────

class MemoryCacheBackend:
    """key -> (data, timestamp). Entries older than their TTL read as misses."""

    def __init__(self, clock: Clock = time.monotonic):
        self.clock = clock
        self._store: Dict[str, Tuple[Any, float, int]] = {}

    def get(self, key: str) -> Optional[Any]:
        entry = self._store.get(key)
        if entry is None:
            return None
        data, timestamp, ttl = entry
        if self.clock() - timestamp >= ttl:
            self._store.pop(key, None)
            return None
        return data

    def set(self, key: str, value: Any, expiry_seconds: int) -> bool:
        self._store[key] = (value, self.clock(), expiry_seconds)
        return True

    def delete(self, key: str) -> bool:
        return self._store.pop(key, None) is not None

    def delete_prefix(self, prefix: str) -> int:
        keys = [k for k in self._store if k.startswith(prefix)]
        for k in keys:
            del self._store[k]
        return len(keys)


class RedisCacheBackend:
    """JSON values stored with SETEX."""

    def __init__(self, client: redis.Redis, namespace: str = "cache"):
        self.client = client
        self.namespace = namespace

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    def get(self, key: str) -> Optional[Any]:
        cached_value = self.client.get(self._key(key))
        if cached_value:
            return json.loads(cached_value)
        return None

    def set(self, key: str, value: Any, expiry_seconds: int) -> bool:
        serialized_value = json.dumps(value, default=str)
        return bool(self.client.setex(self._key(key), expiry_seconds, serialized_value))

    def delete(self, key: str) -> bool:
        return bool(self.client.delete(self._key(key)))

    def delete_prefix(self, prefix: str) -> int:
        keys = list(self.client.scan_iter(match=f"{self._key(prefix)}*"))
        if keys:
            return self.client.delete(*keys)
        return 0


# ─── Manager ────────────────────────────────────────────────────────────────────

class CacheManager:
    """
    Read-through cache. Stale data may be served for up to the TTL; concurrent
    writes to the same key are last-write-wins. Backend failures are logged
    and treated as misses so a cache outage never fails a request.
    """

    def __init__(self, backend, default_ttl: int = 300):
        self.backend = backend
        self.default_ttl = default_ttl

    def get(self, key: str) -> Optional[Any]:
        try:
            return self.backend.get(key)
        except (redis.RedisError, json.JSONDecodeError):
            logger.warning("cache get failed for %s", key, exc_info=True)
            return None

    def set(self, key: str, value: Any, expiry_seconds: Optional[int] = None) -> bool:
        try:
            return self.backend.set(key, value, expiry_seconds or self.default_ttl)
        except (redis.RedisError, TypeError):
            logger.warning("cache set failed for %s", key, exc_info=True)
            return False

    def delete(self, key: str) -> bool:
        try:
            return self.backend.delete(key)
        except redis.RedisError:
            logger.warning("cache delete failed for %s", key, exc_info=True)
            return False

    def delete_prefix(self, prefix: str) -> int:
        try:
            return self.backend.delete_prefix(prefix)
        except redis.RedisError:
            logger.warning("cache prefix delete failed for %s", prefix, exc_info=True)
            return 0

    def get_or_set(self, key: str, factory: Callable[[], Any], expiry_seconds: Optional[int] = None) -> Any:
        cached = self.get(key)
        if cached is not None:
            logger.debug("cache hit %s", key)
            return cached
        logger.debug("cache miss %s", key)
        value = factory()
        self.set(key, value, expiry_seconds)
        return value


def build_cache_manager(redis_url: Optional[str], default_ttl: int) -> CacheManager:
    """Redis when configured, otherwise an in-process cache."""
    if redis_url:
        client = redis.from_url(redis_url, decode_responses=True)
        return CacheManager(RedisCacheBackend(client), default_ttl)
    return CacheManager(MemoryCacheBackend(), default_ttl)


# ─── Rate limiting ──────────────────────────────────────────────────────────────

class RateLimiter:
    """
    Sliding window of recent submission timestamps per key, held in process.
    Suitable for a single worker and for tests; multi-worker deployments use
    RedisRateLimiter so every worker shares one window.
    """

    def __init__(self, limit: int = 5, window_seconds: float = 60, clock: Clock = time.monotonic):
        self.limit = limit
        self.window_seconds = window_seconds
        self.clock = clock
        self._hits: Dict[str, Deque[float]] = {}
        self._lock = threading.Lock()

    @staticmethod
    def submission_key(user_id: str, challenge_id: str) -> str:
        return f"{user_id}:{challenge_id}"

    def _prune(self, key: str, now: float) -> Deque[float]:
        hits = self._hits.get(key)
        if hits is None:
            return deque()
        while hits and now - hits[0] >= self.window_seconds:
            hits.popleft()
        if not hits:
            del self._hits[key]
        return hits

    def is_allowed(self, key: str) -> bool:
        with self._lock:
            return len(self._prune(key, self.clock())) < self.limit

    def hit(self, key: str) -> float:
        """
        Count one attempt against `key`, or raise RateLimitExceeded without
        counting it. Returns a token for release().
        """
        with self._lock:
            now = self.clock()
            hits = self._prune(key, now)
            if len(hits) >= self.limit:
                raise RateLimitExceeded(key, self.limit, self.window_seconds - (now - hits[0]))
            self._hits.setdefault(key, hits).append(now)
            return now

    def release(self, key: str, token: float) -> None:
        """Give back a hit whose submission was not stored."""
        with self._lock:
            hits = self._hits.get(key)
            if hits is None:
                return
            try:
                hits.remove(token)
            except ValueError:
                return
            if not hits:
                del self._hits[key]

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()


class RedisRateLimiter:
    """
    The same sliding window kept in a Redis sorted set per key, so all
    workers share it. Each hit is a member scored by its timestamp; the
    add-then-count runs in one MULTI block. Redis outages fail open.
    """

    def __init__(
        self,
        client: redis.Redis,
        limit: int = 5,
        window_seconds: float = 60,
        clock: Clock = time.time,
        namespace: str = "rate_limit",
    ):
        self.client = client
        self.limit = limit
        self.window_seconds = window_seconds
        self.clock = clock
        self.namespace = namespace

    submission_key = staticmethod(RateLimiter.submission_key)

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    def is_allowed(self, key: str) -> bool:
        now = self.clock()
        try:
            count = self.client.zcount(self._key(key), now - self.window_seconds, "+inf")
        except redis.RedisError:
            logger.warning("rate limit lookup failed for %s", key, exc_info=True)
            return True
        return count < self.limit

    def hit(self, key: str) -> Optional[str]:
        now = self.clock()
        redis_key = self._key(key)
        token = f"{now:.6f}:{uuid.uuid4().hex}"
        try:
            pipe = self.client.pipeline()
            pipe.zremrangebyscore(redis_key, "-inf", now - self.window_seconds)
            pipe.zadd(redis_key, {token: now})
            pipe.zcard(redis_key)
            pipe.expire(redis_key, int(math.ceil(self.window_seconds)) + 1)
            _, _, count, _ = pipe.execute()
            if count <= self.limit:
                return token
            # over the limit: take this attempt back out before reporting
            pipe.zrem(redis_key, token)
            pipe.zrange(redis_key, 0, 0, withscores=True)
            _, oldest = pipe.execute()
        except redis.RedisError:
            logger.warning("rate limit check failed for %s, allowing", key, exc_info=True)
            return None
        oldest_at = oldest[0][1] if oldest else now
        raise RateLimitExceeded(key, self.limit, self.window_seconds - (now - oldest_at))

    def release(self, key: str, token: Optional[str]) -> None:
        if token is None:
            return
        try:
            self.client.zrem(self._key(key), token)
        except redis.RedisError:
            logger.warning("rate limit release failed for %s", key, exc_info=True)

    def reset(self) -> None:
        keys = list(self.client.scan_iter(match=f"{self.namespace}:*"))
        if keys:
            self.client.delete(*keys)


def build_rate_limiter(redis_url: Optional[str], limit: int, window_seconds: float):
    """Redis when configured, otherwise an in-process limiter."""
    if redis_url:
        client = redis.from_url(redis_url, decode_responses=True)
        return RedisRateLimiter(client, limit, window_seconds)
    return RateLimiter(limit, window_seconds)
