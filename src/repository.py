import asyncio
import logging
from typing import Optional

import asyncpg
from asyncpg import Pool

from src.exceptions import Conflict, Internal, Unavailable

logger = logging.getLogger(__name__)

BACKEND = "Postgres"

# Failures that mean the database could not be reached, as opposed to
# the database rejecting the statement.
CONNECTION_ERRORS = (
    asyncpg.PostgresConnectionError,
    asyncpg.CannotConnectNowError,
    asyncpg.TooManyConnectionsError,
    OSError,
    asyncio.TimeoutError,
)


class URLMappingRepository:
    """Authoritative id -> URL storage backed by the `urls` table."""

    def __init__(self, pool: Pool, timeout: float, slug_length: int = 6):
        self.pool = pool
        self.timeout = timeout
        self.slug_length = slug_length

    async def ensure_schema(self) -> None:
        await self.pool.execute(
            f"""
            CREATE TABLE IF NOT EXISTS urls (
                id CHAR({int(self.slug_length)}) PRIMARY KEY,
                original_url TEXT NOT NULL
            )
            """
        )

    async def insert(self, slug: str, original_url: str) -> None:
        try:
            await asyncio.wait_for(
                self.pool.execute(
                    """
                    INSERT INTO urls (id, original_url)
                    VALUES ($1, $2)
                    """,
                    slug,
                    original_url,
                ),
                self.timeout,
            )
        except asyncpg.UniqueViolationError as exc:
            raise Conflict(slug) from exc
        except CONNECTION_ERRORS as exc:
            logger.error(f"Insert of {slug} failed, store unreachable: {exc!r}")
            raise Unavailable(BACKEND, repr(exc)) from exc
        except (asyncpg.PostgresError, asyncpg.InterfaceError) as exc:
            logger.error(f"Insert of {slug} failed: {exc!r}")
            raise Internal(BACKEND, repr(exc)) from exc

    async def lookup(self, slug: str) -> Optional[str]:
        try:
            result = await asyncio.wait_for(
                self.pool.fetchrow(
                    """
                    SELECT original_url FROM urls WHERE id = $1
                    """,
                    slug,
                ),
                self.timeout,
            )
        except CONNECTION_ERRORS as exc:
            logger.error(f"Lookup of {slug} failed, store unreachable: {exc!r}")
            raise Unavailable(BACKEND, repr(exc)) from exc
        except (asyncpg.PostgresError, asyncpg.InterfaceError) as exc:
            logger.error(f"Lookup of {slug} failed: {exc!r}")
            raise Internal(BACKEND, repr(exc)) from exc

        if result:
            return result["original_url"]
        return None
