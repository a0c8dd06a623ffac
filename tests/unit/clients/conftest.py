"""Fixtures for client unit tests."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Callable
    from typing import Any

    from visual_search.clients.base import BackendClient
    from visual_search.clients.embeddings import EmbeddingsClient


@pytest.fixture
def mock_httpx_client() -> AsyncMock:
    """Create a mock httpx.AsyncClient for testing client methods."""
    return AsyncMock(spec=httpx.AsyncClient)


@pytest.fixture
def make_response() -> Callable[..., MagicMock]:
    """Build mock httpx responses with a JSON body."""

    def _make(json_body: Any = None, status_code: int = 200) -> MagicMock:
        response = MagicMock(spec=httpx.Response)
        response.status_code = status_code
        response.json.return_value = json_body
        response.raise_for_status = MagicMock()
        return response

    return _make


@pytest.fixture
async def embeddings_client(
    mock_httpx_client: AsyncMock,
) -> AsyncGenerator[EmbeddingsClient, None]:
    """Create an EmbeddingsClient with a mocked httpx client."""
    from visual_search.clients.embeddings import EmbeddingsClient  # noqa: PLC0415

    client = EmbeddingsClient(
        base_url="http://embeddings.test",
        timeout=5.0,
        connect_timeout=1.0,
        service_name="embeddings",
    )
    real_client = client.client
    client.client = mock_httpx_client
    yield client
    await real_client.aclose()


@pytest.fixture
async def backend_client(mock_httpx_client: AsyncMock) -> AsyncGenerator[BackendClient, None]:
    """Create a generic BackendClient with a mocked httpx client."""
    from visual_search.clients.base import BackendClient  # noqa: PLC0415

    client = BackendClient(
        base_url="http://backend.test",
        timeout=5.0,
        connect_timeout=1.0,
        service_name="test_backend",
    )
    real_client = client.client
    client.client = mock_httpx_client
    yield client
    await real_client.aclose()
