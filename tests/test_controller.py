from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI, status
from httpx import ASGITransport, AsyncClient

from src.config import BASE_URL
from src.controller import router
from src.dependencies import get_shortener
from src.exceptions import (
    ExhaustedRetries,
    Internal,
    InvalidInput,
    NotFound,
    Unavailable,
)
from src.services import ShortenerService

TEST_BASE_URL = "http://test"
EXAMPLE_URL = "https://example.com"
TEST_SLUG = "abc123"


# Fixtures
@pytest.fixture
def mock_shortener():
    return AsyncMock(spec=ShortenerService)


@pytest.fixture
def test_app(mock_shortener):
    app = FastAPI()
    app.include_router(router)
    app.dependency_overrides.update({get_shortener: lambda: mock_shortener})
    return app


@pytest.fixture
async def async_client(test_app):
    async with AsyncClient(
        transport=ASGITransport(app=test_app), base_url=TEST_BASE_URL
    ) as client:
        yield client


# Test routes
@pytest.mark.asyncio
@pytest.mark.parametrize("cache_up, expected", [(True, "up"), (False, "down")])
async def test_health_check(async_client, mock_shortener, cache_up, expected):
    mock_shortener.cache_healthy.return_value = cache_up

    response = await async_client.get(f"{TEST_BASE_URL}/health")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"status": "healthy", "cache": expected}


@pytest.mark.asyncio
async def test_redirect_success(async_client, mock_shortener):
    mock_shortener.resolve.return_value = EXAMPLE_URL

    response = await async_client.get(f"{TEST_BASE_URL}/{TEST_SLUG}")

    mock_shortener.resolve.assert_awaited_once_with(TEST_SLUG)
    assert response.status_code == status.HTTP_307_TEMPORARY_REDIRECT
    assert response.headers["location"] == EXAMPLE_URL


@pytest.mark.asyncio
async def test_redirect_not_found(async_client, mock_shortener):
    mock_shortener.resolve.side_effect = NotFound("Original URL", "000000")

    response = await async_client.get(f"{TEST_BASE_URL}/000000")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert (
        "Original URL not found for identifier: 000000" in response.json()["detail"]
    )


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error, expected_status",
    [
        (Unavailable("Postgres", "timeout"), status.HTTP_503_SERVICE_UNAVAILABLE),
        (Internal("Postgres", "boom"), status.HTTP_500_INTERNAL_SERVER_ERROR),
    ],
)
async def test_redirect_store_failure(
    async_client, mock_shortener, error, expected_status
):
    mock_shortener.resolve.side_effect = error

    response = await async_client.get(f"{TEST_BASE_URL}/{TEST_SLUG}")

    assert response.status_code == expected_status


@pytest.mark.asyncio
async def test_shorten_url_success(async_client, mock_shortener):
    mock_shortener.shorten.return_value = TEST_SLUG

    response = await async_client.post(
        f"{TEST_BASE_URL}/api/shorten", json={"original_url": EXAMPLE_URL}
    )

    mock_shortener.shorten.assert_awaited_once_with(EXAMPLE_URL)
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {
        "id": TEST_SLUG,
        "original_url": EXAMPLE_URL,
        "short_url": f"{BASE_URL.rstrip('/')}/{TEST_SLUG}",
    }


@pytest.mark.asyncio
async def test_shorten_url_invalid_input(async_client, mock_shortener):
    mock_shortener.shorten.side_effect = InvalidInput("original_url", "must not be empty")

    response = await async_client.post(
        f"{TEST_BASE_URL}/api/shorten", json={"original_url": ""}
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "must not be empty" in response.json()["detail"]


@pytest.mark.asyncio
async def test_shorten_url_missing_field(async_client, mock_shortener):
    response = await async_client.post(f"{TEST_BASE_URL}/api/shorten", json={})

    assert response.status_code == 422
    mock_shortener.shorten.assert_not_called()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error, expected_status",
    [
        (ExhaustedRetries(5), status.HTTP_503_SERVICE_UNAVAILABLE),
        (Unavailable("Postgres", "down"), status.HTTP_503_SERVICE_UNAVAILABLE),
        (Internal("Postgres", "boom"), status.HTTP_500_INTERNAL_SERVER_ERROR),
    ],
)
async def test_shorten_url_failure(async_client, mock_shortener, error, expected_status):
    mock_shortener.shorten.side_effect = error

    response = await async_client.post(
        f"{TEST_BASE_URL}/api/shorten", json={"original_url": EXAMPLE_URL}
    )

    assert response.status_code == expected_status
    assert response.json()["detail"] == str(error)


@pytest.mark.asyncio
async def test_redirect_unexpected_error(async_client, mock_shortener):
    mock_shortener.resolve.side_effect = RuntimeError("boom")

    response = await async_client.get(f"{TEST_BASE_URL}/{TEST_SLUG}")

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {"error": "Internal server error", "detail": "boom"}


@pytest.mark.asyncio
async def test_shorten_url_unexpected_error(async_client, mock_shortener):
    mock_shortener.shorten.side_effect = RuntimeError("boom")

    response = await async_client.post(
        f"{TEST_BASE_URL}/api/shorten", json={"original_url": EXAMPLE_URL}
    )

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {"error": "Internal server error", "detail": "boom"}
