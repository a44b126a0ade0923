import logging
from typing import Optional, Protocol

from src.exceptions import (
    Conflict,
    ExhaustedRetries,
    Internal,
    InvalidInput,
    NotFound,
    Unavailable,
)
from src.helpers import RandomSlugGenerator, SlugGenerator

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_CACHE_TTL = 30 * 24 * 60 * 60


class MappingStore(Protocol):
    async def insert(self, slug: str, original_url: str) -> None: ...

    async def lookup(self, slug: str) -> Optional[str]: ...


class MappingCache(Protocol):
    async def put(self, key: str, value: str, ttl: int) -> None: ...

    async def get(self, key: str) -> Optional[str]: ...

    async def get_with_retry(
        self, key: str, max_retries: int, retry_delay: float
    ) -> Optional[str]: ...

    async def health_check(self) -> bool: ...


class ShortenerService:
    """Creates short ids and resolves them with a cache-aside read path.

    The store is the source of truth: its errors surface to the caller.
    The cache is an optimization: its errors are logged and the service
    falls back to the store (on reads) or skips population (on writes).
    """

    def __init__(
        self,
        store: MappingStore,
        cache: MappingCache,
        generator: Optional[SlugGenerator] = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        cache_ttl: int = DEFAULT_CACHE_TTL,
        cache_read_retries: int = 0,
        cache_retry_delay: float = 0.05,
    ):
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be positive, got {max_attempts}")
        self.store = store
        self.cache = cache
        self.generator = generator or RandomSlugGenerator()
        self.max_attempts = max_attempts
        self.cache_ttl = cache_ttl
        self.cache_read_retries = cache_read_retries
        self.cache_retry_delay = cache_retry_delay

    async def shorten(self, original_url: str) -> str:
        if not original_url or not original_url.strip():
            raise InvalidInput("original_url", "must not be empty")

        for attempt in range(1, self.max_attempts + 1):
            slug = self.generator.generate()
            try:
                await self.store.insert(slug, original_url)
            except Conflict:
                logger.info(
                    f"Short id collision on {slug} "
                    f"(attempt {attempt}/{self.max_attempts})"
                )
                continue

            await self._populate(slug, original_url)
            logger.info(f"URL shortened: {original_url} -> {slug}")
            return slug

        logger.error(
            f"Gave up generating a short id for {original_url} "
            f"after {self.max_attempts} collisions"
        )
        raise ExhaustedRetries(self.max_attempts)

    async def resolve(self, slug: str) -> str:
        cached_url = await self._probe(slug)
        if cached_url is not None:
            logger.info(f"Cache hit - Redirecting: {slug} -> {cached_url}")
            return cached_url

        original_url = await self.store.lookup(slug)
        if original_url is None:
            logger.info(f"Cannot find matching URL for id: {slug}")
            raise NotFound("Original URL", slug)

        await self._populate(slug, original_url)
        logger.info(f"Cache miss, found in store - Redirecting: {slug} -> {original_url}")
        return original_url

    async def cache_healthy(self) -> bool:
        return await self.cache.health_check()

    async def _probe(self, slug: str) -> Optional[str]:
        if self.cache_read_retries > 0:
            return await self.cache.get_with_retry(
                slug, self.cache_read_retries, self.cache_retry_delay
            )
        try:
            return await self.cache.get(slug)
        except (Unavailable, Internal) as exc:
            logger.warning(f"Cache probe for {slug} failed, using store: {exc}")
            return None

    async def _populate(self, slug: str, original_url: str) -> None:
        # TTL is fixed at write time; hits do not extend it.
        try:
            await self.cache.put(slug, original_url, self.cache_ttl)
        except (Unavailable, Internal) as exc:
            logger.warning(f"Could not cache {slug}, continuing without it: {exc}")
