"""
Key-value storage backends for the cart snapshot.

The store only needs two operations on a single key: read the raw
snapshot and overwrite it.
"""
from typing import Dict, Optional, Protocol, Union

from upstash_redis.asyncio import Redis as AsyncRedis

from cartstore.config import CartSettings, BACKEND_REDIS
from cartstore.errors import ERROR_STORAGE_NOT_CONFIGURED
from cartstore.logging import get_logger

logger = get_logger(__name__)


class CartStorage(Protocol):
    """
    Durable asynchronous key-value storage.

    get may return bytes; decoding belongs to the snapshot layer.
    """

    async def get(self, key: str) -> Optional[Union[str, bytes]]:
        ...

    async def set(self, key: str, value: str) -> None:
        ...


class RedisCartStorage:
    """Upstash Redis (REST) backend."""

    def __init__(self, client: AsyncRedis, ttl_seconds: Optional[int] = None):
        self.client = client
        self.ttl_seconds = ttl_seconds

    @classmethod
    def from_settings(cls, settings: CartSettings) -> "RedisCartStorage":
        if not settings.redis_url or not settings.redis_token:
            raise ValueError(ERROR_STORAGE_NOT_CONFIGURED)
        client = AsyncRedis(url=settings.redis_url, token=settings.redis_token)
        return cls(client, ttl_seconds=settings.ttl_seconds)

    async def get(self, key: str) -> Optional[Union[str, bytes]]:
        value = await self.client.get(key)
        if value is None or isinstance(value, (str, bytes)):
            return value
        return str(value)

    async def set(self, key: str, value: str) -> None:
        if self.ttl_seconds:
            await self.client.set(key, value, ex=self.ttl_seconds)
        else:
            await self.client.set(key, value)


class MemoryCartStorage:
    """Process-local storage for development and tests. Not durable."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        self.data[key] = value


def create_storage(settings: CartSettings) -> CartStorage:
    """Storage backend selected by settings."""
    if settings.storage_backend == BACKEND_REDIS:
        logger.info("Cart storage: Upstash Redis")
        return RedisCartStorage.from_settings(settings)
    logger.warning("Cart storage: in-memory, cart will not survive restarts")
    return MemoryCartStorage()
