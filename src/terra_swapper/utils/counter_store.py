"""Durable counter storage backed by Redis."""

import logging
from typing import Protocol

from redis.asyncio import Redis

logger = logging.getLogger(__name__)


class CounterStore(Protocol):
    """Minimal key-value contract used for the last acted height."""

    async def get(self, key: str) -> str | None:
        ...

    async def set(self, key: str, value: str) -> None:
        ...


class RedisCounterStore:
    """
    Redis-backed key-value store with a fixed key prefix.

    All keys are namespaced with the prefix so several tools can share
    one Redis database.
    """

    def __init__(self, client: Redis, prefix: str = "swapper_") -> None:
        """
        Initialize the store.

        Args:
            client: Redis client (decode_responses is not required)
            prefix: Prefix prepended to every key
        """
        self.client = client
        self.prefix = prefix

    @classmethod
    def from_url(cls, redis_url: str, prefix: str = "swapper_") -> "RedisCounterStore":
        """Create a store with its own connection pool from a Redis URL."""
        return cls(Redis.from_url(redis_url, decode_responses=True), prefix=prefix)

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    async def get(self, key: str) -> str | None:
        value = await self.client.get(self._key(key))
        if isinstance(value, bytes):
            return value.decode()
        return value

    async def set(self, key: str, value: str) -> None:
        await self.client.set(self._key(key), value)
        logger.debug(f"Stored {self._key(key)}={value}")

    async def close(self) -> None:
        await self.client.aclose()
