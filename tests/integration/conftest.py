"""
Shared fixtures for integration tests.

Integration tests run the real application, including its lifespan, against
the temporary collection file. The embedding service is mocked at the HTTP
layer with respx.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import pytest
import respx
from fastapi.testclient import TestClient

from tests.conftest import EMBEDDINGS_URL
from tests.factories import create_test_image
from visual_search.app import create_app
from visual_search.core.state import reset_app_state

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture
def client() -> Iterator[TestClient]:
    """
    Create a test client with the real application.

    The context manager runs the lifespan, so the collection is loaded and
    the embedding client is created exactly as in production.
    """
    app = create_app()
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    reset_app_state()


@pytest.fixture
def sample_image() -> bytes:
    """Create a sample JPEG image."""
    return create_test_image(64, 64, "silver", "JPEG")


@pytest.fixture
def embeddings_service() -> Iterator[respx.MockRouter]:
    """Mock the embedding service; tests register the responses they need."""
    with respx.mock(base_url=EMBEDDINGS_URL, assert_all_called=False) as router:
        router.get("/health").mock(return_value=httpx.Response(200, json={"status": "healthy"}))
        yield router


@pytest.fixture
def embedding_returns(embeddings_service: respx.MockRouter):  # noqa: ANN201
    """Register a fixed embedding for POST /generate-embedding."""

    def _register(embedding: object) -> respx.Route:
        return embeddings_service.post("/generate-embedding").mock(
            return_value=httpx.Response(200, json={"embedding": embedding})
        )

    return _register
