"""
Shared fixtures for unit tests.

The embedding client and ranker are mocked so tests run in isolation
without network access.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from tests.factories import create_mock_embedding, create_test_image
from visual_search.services.ranker import RankedResult

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Generator


@pytest.fixture
def mock_embeddings_client() -> AsyncMock:
    """Create a mock embeddings client."""
    client = AsyncMock()
    client.health_check.return_value = "healthy"
    client.get_embedding.return_value = create_mock_embedding(2)
    client.close = AsyncMock()
    return client


@pytest.fixture
def mock_ranker() -> AsyncMock:
    """Create a mock similarity ranker returning two results."""
    ranker = AsyncMock()
    ranker.search.return_value = [
        RankedResult(id="a", display_url="https://img.example/a.jpg", score=1.0),
        RankedResult(id="c", display_url="https://img.example/c.jpg", score=0.7),
    ]
    return ranker


@pytest.fixture
def mock_app_state(
    mock_embeddings_client: AsyncMock,
    mock_ranker: AsyncMock,
) -> MagicMock:
    """Create mock app state with mock collaborators."""
    mock_state = MagicMock()
    mock_state.embeddings_client = mock_embeddings_client
    mock_state.ranker = mock_ranker
    mock_state.store_connected = True
    mock_state.store_load_error = None
    mock_state.vector_store.count = 3
    mock_state.vector_store.dimension = 2
    mock_state.uptime_seconds = 123.45
    mock_state.uptime_formatted = "2m 3s"
    return mock_state


@pytest.fixture
def test_client(mock_app_state: MagicMock) -> Generator[TestClient, None, None]:
    """Create a test client with mocked dependencies."""
    from visual_search.config import get_settings  # noqa: PLC0415
    from visual_search.core.exceptions import register_exception_handlers  # noqa: PLC0415
    from visual_search.routers import health, info, search  # noqa: PLC0415

    @asynccontextmanager
    async def mock_lifespan(_app: FastAPI) -> AsyncIterator[None]:
        yield

    settings = get_settings()

    app = FastAPI(title=f"{settings.service.name} Service", lifespan=mock_lifespan)
    register_exception_handlers(app)
    app.include_router(health.router)
    app.include_router(info.router)
    app.include_router(search.router)

    with (
        patch("visual_search.routers.health.get_app_state", return_value=mock_app_state),
        patch("visual_search.routers.info.get_app_state", return_value=mock_app_state),
        patch("visual_search.routers.search.get_app_state", return_value=mock_app_state),
        TestClient(app, raise_server_exceptions=False) as client,
    ):
        yield client


@pytest.fixture
def sample_image() -> bytes:
    """Create a sample JPEG image."""
    return create_test_image(64, 64, "gold", "JPEG")
