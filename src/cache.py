import asyncio
import logging
from typing import Awaitable, List, Optional, TypeVar

from redis.asyncio import Redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError

from src.exceptions import Internal, Unavailable

logger = logging.getLogger(__name__)

BACKEND = "Redis"

T = TypeVar("T")


class URLCache:
    """Time-bounded copy of id -> URL mappings. Never authoritative.

    Keys are the short id as-is and values are the original URL. The
    client is expected to be built with ``decode_responses=True``.
    """

    def __init__(self, redis: Redis, timeout: float):
        self.redis = redis
        self.timeout = timeout

    async def _call(self, operation: str, awaitable: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(awaitable, self.timeout)
        except (RedisConnectionError, RedisTimeoutError, asyncio.TimeoutError) as exc:
            raise Unavailable(BACKEND, f"{operation}: {exc!r}") from exc
        except RedisError as exc:
            raise Internal(BACKEND, f"{operation}: {exc!r}") from exc

    async def put(self, key: str, value: str, ttl: int) -> None:
        await self._call("put", self.redis.setex(key, ttl, value))

    async def get(self, key: str) -> Optional[str]:
        return await self._call("get", self.redis.get(key))

    async def get_many(self, keys: List[str]) -> List[Optional[str]]:
        if not keys:
            return []
        return await self._call("get_many", self.redis.mget(keys))

    async def delete(self, key: str) -> None:
        await self._call("delete", self.redis.delete(key))

    async def health_check(self) -> bool:
        try:
            return bool(await self._call("ping", self.redis.ping()))
        except (Unavailable, Internal) as exc:
            logger.warning(f"Redis health check failed: {exc}")
            return False

    async def get_with_retry(
        self, key: str, max_retries: int, retry_delay: float
    ) -> Optional[str]:
        """Probe the cache, retrying a flaky backend before calling it a miss."""

        attempt = 0
        while True:
            try:
                return await self.get(key)
            except (Unavailable, Internal) as exc:
                if attempt >= max_retries:
                    logger.warning(
                        f"Cache get for {key} failed after {attempt + 1} attempts, "
                        f"treating as miss: {exc}"
                    )
                    return None
                attempt += 1
                await asyncio.sleep(retry_delay)
