"""Redis-backed identity storage."""

import json
from collections.abc import Iterable
from functools import lru_cache
from typing import Any

import structlog
from redis import ConnectionPool, Redis

from usertrack.storage.backends import KeyValueStore

logger = structlog.get_logger(__name__)


@lru_cache
def get_redis_pool(redis_url: str) -> ConnectionPool:
    """Get a cached Redis connection pool for a URL."""
    return ConnectionPool.from_url(
        redis_url,
        decode_responses=True,
        max_connections=10,
    )


def get_redis_connection(redis_url: str) -> Redis:
    """Get a Redis connection from the pool."""
    pool = get_redis_pool(redis_url)
    return Redis(connection_pool=pool)


class RedisStore(KeyValueStore):
    """
    Store identity values in Redis.

    Values are JSON-encoded so ints, bools and strings round-trip with their
    types intact. Keys live under ``namespace`` to stay clear of unrelated data.
    """

    def __init__(self, redis: Redis, namespace: str = "usertrack:"):
        self.redis = redis
        self._namespace = namespace

    def _key(self, key: str) -> str:
        return f"{self._namespace}{key}"

    def get(self, key: str) -> Any | None:
        data = self.redis.get(self._key(key))
        if data is None:
            return None
        try:
            return json.loads(data)
        except json.JSONDecodeError as e:
            logger.warning("redis_value_decode_failed", key=self._key(key), error=str(e))
            return None

    def set(self, key: str, value: Any) -> None:
        self.redis.set(self._key(key), json.dumps(value))

    def clear(self, keys: Iterable[str]) -> None:
        names = [self._key(key) for key in keys]
        if names:
            self.redis.delete(*names)
