"""HTTP clients for backend services."""

from visual_search.clients.base import BackendClient
from visual_search.clients.embeddings import EmbeddingsClient

__all__ = [
    "BackendClient",
    "EmbeddingsClient",
]
