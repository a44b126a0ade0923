import logging
from logging.handlers import TimedRotatingFileHandler
from typing import List

import asyncpg
from fastapi import FastAPI
from redis.asyncio import Redis

from src import config
from src.cache import URLCache
from src.controller import router
from src.helpers import RandomSlugGenerator
from src.repository import URLMappingRepository
from src.services import ShortenerService

# Logging
handlers: List[logging.Handler] = [logging.StreamHandler()]
if config.LOG_FILE:
    handlers.append(
        TimedRotatingFileHandler(
            filename=config.LOG_FILE,
            when="W0",
            interval=1,
            backupCount=4,
            encoding="utf-8",
        )
    )

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(levelname)s - %(asctime)s - %(name)s - %(message)s",
    handlers=handlers,
)
logger = logging.getLogger(__name__)

# Set up app
app = FastAPI(title="URL Shortener")
app.include_router(router)


# App lifecycle
@app.on_event("startup")
async def startup_event():
    config.check_timeouts(config.STORE_TIMEOUT_SECONDS, config.CACHE_TIMEOUT_SECONDS)

    app.state.db_pool = await asyncpg.create_pool(
        config.DATABASE_URL,
        min_size=config.DB_POOL_MIN_SIZE,
        max_size=config.DB_POOL_MAX_SIZE,
    )
    app.state.redis = Redis.from_url(
        config.REDIS_URL, encoding="utf-8", decode_responses=True
    )

    store = URLMappingRepository(
        app.state.db_pool, config.STORE_TIMEOUT_SECONDS, config.SLUG_LENGTH
    )
    await store.ensure_schema()

    app.state.shortener = ShortenerService(
        store=store,
        cache=URLCache(app.state.redis, config.CACHE_TIMEOUT_SECONDS),
        generator=RandomSlugGenerator(config.SLUG_LENGTH),
        max_attempts=config.MAX_SHORTEN_ATTEMPTS,
        cache_ttl=config.CACHE_TTL_SECONDS,
        cache_read_retries=config.CACHE_READ_RETRIES,
        cache_retry_delay=config.CACHE_RETRY_DELAY_SECONDS,
    )
    logger.info("Application started, postgres database and redis initialized")


@app.on_event("shutdown")
async def shutdown_event():
    await app.state.db_pool.close()
    await app.state.redis.aclose()
    logger.info("Application shut down, postgres database and redis connections closed")
