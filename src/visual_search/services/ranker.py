"""
Exact similarity ranking over stored embeddings.

Scores are the raw inner product of query and stored vector. They are NOT
cosine-normalized: stored vectors are expected to be unit length already if
cosine similarity is wanted. Normalizing here would reorder results whenever
that expectation does not hold.

Ranking is an exact linear scan (O(n*d) scoring plus a sort), which is only
appropriate while the collection stays small.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from collections.abc import Sequence

    from visual_search.services.vector_store import StoredItem, VectorStore


@dataclass(frozen=True)
class RankedResult:
    """A stored item with its score for one query."""

    id: str
    display_url: str
    score: float


class RankingError(Exception):
    """Base exception for ranking operations."""

    pass


class DimensionMismatchError(RankingError):
    """Raised when a stored vector's length differs from the query's."""

    def __init__(self, expected: int, received: int, item_id: str) -> None:
        self.expected = expected
        self.received = received
        self.item_id = item_id
        super().__init__(
            f"Stored item '{item_id}' has dimension {received}, "
            f"query has dimension {expected}"
        )


def rank(
    query: Sequence[float],
    items: Sequence[StoredItem],
    k: int,
) -> list[RankedResult]:
    """
    Rank stored items by dot product with the query.

    Equal scores keep their input order. Nothing is returned unless every
    item has the query's dimension.

    Args:
        query: Query embedding
        items: Stored items to score (not modified)
        k: Maximum number of results; k <= 0 yields no results

    Returns:
        Up to k results ordered by descending score

    Raises:
        DimensionMismatchError: If any item's vector length differs from the query's
    """
    if k <= 0 or not items:
        return []

    expected = len(query)
    for item in items:
        if len(item.vector) != expected:
            raise DimensionMismatchError(
                expected=expected,
                received=len(item.vector),
                item_id=item.id,
            )

    matrix = np.asarray([item.vector for item in items], dtype=np.float64)
    scores = matrix @ np.asarray(query, dtype=np.float64)

    # stable sort on negated scores keeps input order for ties
    order = np.argsort(-scores, kind="stable")[:k]

    return [
        RankedResult(
            id=items[i].id,
            display_url=items[i].display_url,
            score=float(scores[i]),
        )
        for i in order
    ]


class SimilarityRanker:
    """
    Ranks the contents of one vector store against query embeddings.

    Attributes:
        store: Store the candidates are read from
    """

    def __init__(self, store: VectorStore) -> None:
        self.store = store

    async def search(self, query: Sequence[float], k: int) -> list[RankedResult]:
        """
        Rank every stored item against the query.

        Raises:
            VectorStoreError: If the store cannot be read
            DimensionMismatchError: If stored and query dimensions differ
        """
        if k <= 0:
            return []
        items = await self.store.fetch_all()
        return rank(query, items, k)
