"""Redis-backed sliding window limiter shared by all user-service replicas."""

from __future__ import annotations

import time
from typing import Final

from redis import Redis
from redis.exceptions import ResponseError


class RedisSlidingWindowRateLimiter:
    """Distributed sliding window limiter built on a Redis sorted set per key.

    Trimming, counting and recording a hit run as one Lua script, so
    concurrent registrations from several replicas see a consistent count and
    rejected requests never consume budget.
    """

    _SCRIPT: Final[str] = """
    local key = KEYS[1]
    local seq_key = key .. ':seq'
    local window_ms = tonumber(ARGV[1])
    local limit = tonumber(ARGV[2])
    local now_ms = tonumber(ARGV[3])

    redis.call('ZREMRANGEBYSCORE', key, 0, now_ms - window_ms)
    if redis.call('ZCARD', key) >= limit then
        return 0
    end
    local seq = redis.call('INCR', seq_key)
    redis.call('ZADD', key, now_ms, now_ms .. ':' .. seq)
    redis.call('PEXPIRE', key, window_ms)
    redis.call('PEXPIRE', seq_key, window_ms)
    return 1
    """

    def __init__(
        self,
        client: Redis,
        *,
        max_requests: int,
        window_seconds: int,
        key_prefix: str = "user-service:rate",
    ) -> None:
        self._client = client
        self._max_requests = max_requests
        self._window_ms = window_seconds * 1000
        self._key_prefix = key_prefix
        self._script = client.register_script(self._SCRIPT)

    def allow(self, key: str) -> bool:
        """Return ``True`` when the key is still within the distributed rate limit."""
        now_ms = int(time.time() * 1000)
        redis_key = f"{self._key_prefix}:{key}"
        try:
            result = self._script(keys=[redis_key], args=[self._window_ms, self._max_requests, now_ms])
        except ResponseError as exc:
            message = str(exc).lower()
            if "unknown command" in message and "eval" in message:
                return self._allow_without_scripting(redis_key, now_ms)
            raise
        return int(result) == 1

    def _allow_without_scripting(self, redis_key: str, now_ms: int) -> bool:
        """Same steps as the script, for servers without Lua support; not atomic."""
        self._client.zremrangebyscore(redis_key, 0, now_ms - self._window_ms)
        if self._client.zcard(redis_key) >= self._max_requests:
            return False
        seq = self._client.incr(f"{redis_key}:seq")
        self._client.zadd(redis_key, {f"{now_ms}:{seq}": now_ms})
        self._client.pexpire(redis_key, self._window_ms)
        self._client.pexpire(f"{redis_key}:seq", self._window_ms)
        return True
