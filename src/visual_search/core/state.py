"""
Application state management.

Tracks runtime state like uptime, and holds the shared embedding client,
vector store and ranker built during startup.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from visual_search.clients import EmbeddingsClient
    from visual_search.services.ranker import SimilarityRanker
    from visual_search.services.vector_store import VectorStore


@dataclass
class AppState:
    """
    Runtime application state.

    Attributes:
        start_time: When the application started (UTC)
        store_load_error: Reason the collection failed to load at startup, if it did
        _embeddings_client: HTTP client for the embedding service (internal)
        _vector_store: Loaded embedding collection (internal)
        _ranker: Ranker bound to the vector store (internal)
    """

    start_time: datetime = field(default_factory=lambda: datetime.now(UTC))
    store_load_error: str | None = None
    _embeddings_client: EmbeddingsClient | None = field(default=None, repr=False)
    _vector_store: VectorStore | None = field(default=None, repr=False)
    _ranker: SimilarityRanker | None = field(default=None, repr=False)

    @property
    def embeddings_client(self) -> EmbeddingsClient:
        """Get the embeddings client. Raises RuntimeError if not initialized."""
        if self._embeddings_client is None:
            raise RuntimeError("Embeddings client not initialized")
        return self._embeddings_client

    @embeddings_client.setter
    def embeddings_client(self, value: EmbeddingsClient) -> None:
        self._embeddings_client = value

    @property
    def vector_store(self) -> VectorStore:
        """Get the vector store. Raises RuntimeError if not initialized."""
        if self._vector_store is None:
            raise RuntimeError("Vector store not initialized")
        return self._vector_store

    @vector_store.setter
    def vector_store(self, value: VectorStore) -> None:
        self._vector_store = value

    @property
    def ranker(self) -> SimilarityRanker:
        """Get the similarity ranker. Raises RuntimeError if not initialized."""
        if self._ranker is None:
            raise RuntimeError("Similarity ranker not initialized")
        return self._ranker

    @ranker.setter
    def ranker(self, value: SimilarityRanker) -> None:
        self._ranker = value

    @property
    def store_connected(self) -> bool:
        """Whether the embedding collection is loaded and searchable."""
        return self._vector_store is not None and self._vector_store.is_loaded

    @property
    def uptime_seconds(self) -> float:
        """Calculate uptime in seconds."""
        delta = datetime.now(UTC) - self.start_time
        return delta.total_seconds()

    @property
    def uptime_formatted(self) -> str:
        """
        Format uptime as human-readable string.

        Returns:
            String like "2d 3h 15m 42s" or "15m 42s"
        """
        seconds = int(self.uptime_seconds)
        days, remainder = divmod(seconds, 86400)
        hours, remainder = divmod(remainder, 3600)
        minutes, secs = divmod(remainder, 60)

        parts = []
        if days > 0:
            parts.append(f"{days}d")
        if hours > 0:
            parts.append(f"{hours}h")
        if minutes > 0:
            parts.append(f"{minutes}m")
        parts.append(f"{secs}s")

        return " ".join(parts)


# Initialized in lifespan context
_app_state: AppState | None = None


def get_app_state() -> AppState:
    """
    Get the current application state.

    Raises:
        RuntimeError: If called before app startup
    """
    if _app_state is None:
        raise RuntimeError("Application state not initialized")
    return _app_state


def init_app_state() -> AppState:
    """Initialize application state. Called during startup."""
    global _app_state  # noqa: PLW0603 - one state per process
    _app_state = AppState()
    return _app_state


def reset_app_state() -> None:
    """Reset application state. Used in testing."""
    global _app_state  # noqa: PLW0603 - one state per process
    _app_state = None
