"""
Read-only stores of precomputed image embeddings.

Records are validated into typed StoredItem values at load time so scoring
never sees loosely shaped documents.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from visual_search.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from pathlib import Path


@dataclass(frozen=True)
class StoredItem:
    """A precomputed embedding and the image it was computed from."""

    id: str
    vector: tuple[float, ...]
    display_url: str


class VectorStoreError(Exception):
    """Base exception for vector store operations."""

    pass


class StoreLoadError(VectorStoreError):
    """Raised when the embedding collection cannot be loaded."""

    pass


class StoreNotLoadedError(VectorStoreError):
    """Raised when items are requested before a successful load."""

    pass


class VectorStore(Protocol):
    """Anything the ranker can read stored items from."""

    @property
    def is_loaded(self) -> bool: ...

    @property
    def count(self) -> int: ...

    @property
    def dimension(self) -> int | None: ...

    async def fetch_all(self) -> Sequence[StoredItem]: ...


class StoredDocument(BaseModel):
    """
    One exported document of the embedding collection.

    Matches the mongoexport --jsonArray shape, where ``_id`` is either a plain
    string or an ``{"$oid": "..."}`` wrapper.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str = Field(alias="_id", min_length=1)
    embedding: list[float] = Field(min_length=1)
    image_url: str = Field(alias="imageUrl")

    @field_validator("id", mode="before")
    @classmethod
    def unwrap_object_id(cls, value: Any) -> Any:
        if isinstance(value, dict) and "$oid" in value:
            return value["$oid"]
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("embedding")
    @classmethod
    def require_finite(cls, value: list[float]) -> list[float]:
        if not all(math.isfinite(x) for x in value):
            raise ValueError("embedding contains NaN or infinite values")
        return value

    def to_item(self) -> StoredItem:
        return StoredItem(id=self.id, vector=tuple(self.embedding), display_url=self.image_url)


def parse_documents(
    documents: Iterable[Any],
    embedding_dimension: int | None,
) -> tuple[list[StoredItem], int]:
    """
    Validate raw documents into stored items.

    Malformed documents and documents whose vector length disagrees with
    ``embedding_dimension`` are logged and dropped.

    Args:
        documents: Raw decoded JSON documents
        embedding_dimension: Required vector length, or None to accept any

    Returns:
        Tuple of (valid items, rejected count)
    """
    logger = get_logger()
    items: list[StoredItem] = []
    rejected = 0

    for position, raw in enumerate(documents):
        try:
            document = StoredDocument.model_validate(raw)
        except ValidationError as e:
            rejected += 1
            logger.warning(
                "Rejected malformed stored document",
                extra={"position": position, "errors": e.errors(include_url=False)},
            )
            continue

        if embedding_dimension is not None and len(document.embedding) != embedding_dimension:
            rejected += 1
            logger.warning(
                "Rejected stored document with wrong embedding dimension",
                extra={
                    "position": position,
                    "item_id": document.id,
                    "expected": embedding_dimension,
                    "received": len(document.embedding),
                },
            )
            continue

        items.append(document.to_item())

    return items, rejected


class InMemoryVectorStore:
    """Vector store over an already built sequence of items."""

    def __init__(self, items: Iterable[StoredItem], dimension: int | None = None) -> None:
        self._items: tuple[StoredItem, ...] = tuple(items)
        self._dimension = dimension

    @property
    def is_loaded(self) -> bool:
        return True

    @property
    def count(self) -> int:
        return len(self._items)

    @property
    def dimension(self) -> int | None:
        if self._dimension is not None:
            return self._dimension
        if self._items:
            return len(self._items[0].vector)
        return None

    async def fetch_all(self) -> Sequence[StoredItem]:
        return self._items


class JSONVectorStore:
    """
    Embedding collection exported to a JSON file.

    The file is read once by ``load()``; afterwards the store is read-only and
    safe to share between concurrent requests.

    Attributes:
        path: Location of the JSON export
        embedding_dimension: Required vector length, or None
    """

    def __init__(self, path: Path, embedding_dimension: int | None) -> None:
        self.path = path
        self.embedding_dimension = embedding_dimension
        self._items: tuple[StoredItem, ...] | None = None
        self.rejected_count = 0

    @property
    def is_loaded(self) -> bool:
        """Whether a load has succeeded."""
        return self._items is not None

    @property
    def count(self) -> int:
        """Number of stored items (0 before loading)."""
        if self._items is None:
            return 0
        return len(self._items)

    @property
    def dimension(self) -> int | None:
        """Configured dimension, else the length of the first stored vector."""
        if self.embedding_dimension is not None:
            return self.embedding_dimension
        if self._items:
            return len(self._items[0].vector)
        return None

    def load(self) -> int:
        """
        Read and validate the collection file.

        Returns:
            Number of items loaded

        Raises:
            StoreLoadError: If the file is missing, not JSON, or has the wrong shape
        """
        if not self.path.exists():
            raise StoreLoadError(f"Embedding collection not found: {self.path}")

        try:
            with self.path.open(encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise StoreLoadError(f"Invalid JSON in {self.path}: {e}") from e
        except OSError as e:
            raise StoreLoadError(f"Failed to read {self.path}: {e}") from e

        if isinstance(data, dict):
            if "items" not in data:
                raise StoreLoadError("Collection object missing required 'items' field")
            data = data["items"]

        if not isinstance(data, list):
            raise StoreLoadError(
                f"Collection must be a JSON array of documents, got {type(data).__name__}"
            )

        items, rejected = parse_documents(data, self.embedding_dimension)
        self._items = tuple(items)
        self.rejected_count = rejected
        return len(items)

    async def fetch_all(self) -> Sequence[StoredItem]:
        """
        Return every stored item.

        Raises:
            StoreNotLoadedError: If ``load()`` has not succeeded
        """
        if self._items is None:
            raise StoreNotLoadedError(f"Embedding collection not loaded: {self.path}")
        return self._items
