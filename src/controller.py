import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse, RedirectResponse

from src.config import BASE_URL
from src.dependencies import get_shortener
from src.exceptions import (
    ExhaustedRetries,
    InvalidInput,
    NotFound,
    Unavailable,
)
from src.models import ShortenRequest, ShortenResponse
from src.services import ShortenerService

logger = logging.getLogger(__name__)
router = APIRouter()


def error_response(status_code: int, error: str, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "detail": str(exc)},
    )


# Routes
@router.get("/health")
async def health_check(
    shortener: Annotated[ShortenerService, Depends(get_shortener)],
):
    cache_up = await shortener.cache_healthy()
    health_status = {"status": "healthy", "cache": "up" if cache_up else "down"}
    logger.info(f"Health Check: OK (cache {health_status['cache']})")
    return JSONResponse(content=health_status, status_code=status.HTTP_200_OK)


@router.post("/api/shorten", response_model=ShortenResponse)
async def shorten(
    shortener: Annotated[ShortenerService, Depends(get_shortener)],
    payload: ShortenRequest,
):
    try:
        slug = await shortener.shorten(payload.original_url)
        return ShortenResponse(
            id=slug,
            original_url=payload.original_url,
            short_url=f"{BASE_URL.rstrip('/')}/{slug}",
        )

    except InvalidInput as exc:
        return error_response(status.HTTP_400_BAD_REQUEST, "Invalid input", exc)

    except (ExhaustedRetries, Unavailable) as exc:
        logger.error(f"Error shortening URL: {str(exc)}")
        return error_response(
            status.HTTP_503_SERVICE_UNAVAILABLE, "Service unavailable", exc
        )

    except Exception as exc:
        logger.error(f"Error shortening URL: {str(exc)}")
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", exc
        )


@router.get("/{slug}")
async def redirect(
    shortener: Annotated[ShortenerService, Depends(get_shortener)],
    slug: str,
):
    try:
        original_url = await shortener.resolve(slug)
        return RedirectResponse(url=original_url)

    except NotFound as exc:
        return error_response(status.HTTP_404_NOT_FOUND, "Content not found", exc)

    except Unavailable as exc:
        logger.error(f"Error redirecting URL: {str(exc)}")
        return error_response(
            status.HTTP_503_SERVICE_UNAVAILABLE, "Service unavailable", exc
        )

    except Exception as exc:
        logger.error(f"Error redirecting URL: {str(exc)}")
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", exc
        )
