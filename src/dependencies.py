from typing import AsyncGenerator

from src.services import ShortenerService


async def get_shortener() -> AsyncGenerator[ShortenerService, None]:
    from src.app import app

    yield app.state.shortener
