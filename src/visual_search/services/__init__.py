"""Embedding storage and similarity ranking."""

from visual_search.services.ranker import (
    DimensionMismatchError,
    RankedResult,
    RankingError,
    SimilarityRanker,
    rank,
)
from visual_search.services.vector_store import (
    InMemoryVectorStore,
    JSONVectorStore,
    StoredItem,
    StoreLoadError,
    StoreNotLoadedError,
    VectorStore,
    VectorStoreError,
)

__all__ = [
    "DimensionMismatchError",
    "InMemoryVectorStore",
    "JSONVectorStore",
    "RankedResult",
    "RankingError",
    "SimilarityRanker",
    "StoreLoadError",
    "StoreNotLoadedError",
    "StoredItem",
    "VectorStore",
    "VectorStoreError",
    "rank",
]
