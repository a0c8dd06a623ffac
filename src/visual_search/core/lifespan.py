"""
Application lifecycle management.

Handles startup (client creation, collection loading) and shutdown (cleanup)
events for proper resource management.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING

from visual_search.clients import EmbeddingsClient
from visual_search.config import Settings, get_settings
from visual_search.core.state import init_app_state
from visual_search.logging import get_logger, setup_logging
from visual_search.services.ranker import SimilarityRanker
from visual_search.services.vector_store import JSONVectorStore, StoreLoadError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fastapi import FastAPI


def try_load_store(store: JSONVectorStore, settings: Settings) -> str | None:
    """
    Load the embedding collection if auto_load is enabled.

    A failed load is logged and reported, never raised: the service still
    starts and answers searches with store_unavailable.

    Returns:
        Error message if loading was attempted and failed, otherwise None
    """
    logger = get_logger()

    if not settings.store.auto_load:
        logger.info("Auto-load disabled, embedding collection not loaded")
        return None

    try:
        count = store.load()
    except StoreLoadError as e:
        error_message = str(e)
        logger.error(
            "Failed to load embedding collection",
            extra={"error": error_message, "store_path": str(store.path)},
        )
        return error_message

    logger.info(
        "Loaded embedding collection",
        extra={
            "store_path": str(store.path),
            "count": count,
            "rejected": store.rejected_count,
            "dimension": store.dimension,
        },
    )
    return None


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """
    Manage application lifecycle.

    Startup:
    - Initialize logging
    - Initialize application state
    - Create the embedding service client
    - Load the embedding collection and bind the ranker to it

    Shutdown:
    - Log shutdown with uptime
    - Close the HTTP client
    """
    # === STARTUP ===
    settings = get_settings()

    setup_logging(settings.server.log_level, settings.service.name)
    logger = get_logger()

    state = init_app_state()

    logger.info(
        "Service starting",
        extra={
            "service": settings.service.name,
            "version": settings.service.version,
            "host": settings.server.host,
            "port": settings.server.port,
        },
    )

    logger.info(
        "Initializing embedding client",
        extra={
            "embeddings_url": settings.embeddings.url,
            "timeout": settings.embeddings.timeout_seconds,
        },
    )
    state.embeddings_client = EmbeddingsClient(
        base_url=settings.embeddings.url,
        timeout=settings.embeddings.timeout_seconds,
        connect_timeout=settings.embeddings.connect_timeout_seconds,
        service_name="embeddings",
    )

    store = JSONVectorStore(
        path=Path(settings.store.path),
        embedding_dimension=settings.store.embedding_dimension,
    )
    state.store_load_error = try_load_store(store, settings)
    state.vector_store = store
    state.ranker = SimilarityRanker(store)

    logger.info(
        "Service ready to accept requests",
        extra={"store_connected": state.store_connected, "store_count": store.count},
    )

    yield  # Application runs here

    # === SHUTDOWN ===
    logger.info(
        "Service shutting down",
        extra={
            "uptime_seconds": state.uptime_seconds,
            "uptime": state.uptime_formatted,
        },
    )

    await state.embeddings_client.close()

    logger.info("Service shutdown complete")
