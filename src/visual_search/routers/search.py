"""
Image similarity search endpoint.

Pipeline:
1. Read the uploaded image
2. Obtain its embedding from the embedding service
3. Rank the stored collection against the embedding
4. Return the top matches
"""

from __future__ import annotations

import time

from fastapi import APIRouter, File, Query, UploadFile

from visual_search.config import get_settings
from visual_search.core.exceptions import (
    DimensionMismatchServiceError,
    NoInputProvidedError,
    StoreUnavailableError,
)
from visual_search.core.state import get_app_state
from visual_search.logging import get_logger
from visual_search.schemas import ErrorResponse, SearchResponse, SearchResultItem
from visual_search.services.ranker import DimensionMismatchError
from visual_search.services.vector_store import VectorStoreError

router = APIRouter()


def resolve_k(requested: int | None, default_k: int, max_k: int) -> int:
    """Apply the configured default and upper bound to a requested result count."""
    if requested is None:
        return default_k
    return min(requested, max_k)


@router.post(
    "/api/search",
    response_model=SearchResponse,
    responses={
        400: {"model": ErrorResponse, "description": "No image uploaded"},
        500: {"model": ErrorResponse, "description": "Stored vector dimension mismatch"},
        502: {"model": ErrorResponse, "description": "Embedding service failed"},
        503: {"model": ErrorResponse, "description": "Embedding collection not loaded"},
        504: {"model": ErrorResponse, "description": "Embedding service timed out"},
    },
)
async def search_similar(
    image: UploadFile | None = File(default=None, description="Image to search with"),
    k: int | None = Query(default=None, ge=0, description="Number of results to return"),
) -> SearchResponse:
    """
    Find the stored items most similar to an uploaded image.

    Returns:
        Up to k matches ordered by descending score

    Raises:
        ServiceError: On missing input, embedding service failure,
            unavailable collection or dimension mismatch
    """
    logger = get_logger()
    settings = get_settings()
    state = get_app_state()

    if image is None:
        raise NoInputProvidedError(
            message="No image uploaded",
            details={"field": "image"},
        )

    image_bytes = await image.read()
    filename = image.filename or "upload"
    if not image_bytes:
        raise NoInputProvidedError(
            message="Uploaded image is empty",
            details={"field": "image", "filename": filename},
        )

    if not state.store_connected:
        raise StoreUnavailableError(
            message="Embedding collection is not loaded",
            details={"store_path": settings.store.path, "reason": state.store_load_error},
        )

    effective_k = resolve_k(k, settings.search.default_k, settings.search.max_k)

    logger.info(
        "Starting similarity search",
        extra={"upload_filename": filename, "image_bytes": len(image_bytes), "k": effective_k},
    )

    start = time.perf_counter()
    embedding = await state.embeddings_client.get_embedding(
        image_bytes,
        filename,
        content_type=image.content_type,
    )
    embedding_ms = (time.perf_counter() - start) * 1000

    logger.debug(
        "Embedding generated",
        extra={"dimension": len(embedding), "time_ms": round(embedding_ms, 3)},
    )

    t0 = time.perf_counter()
    try:
        ranked = await state.ranker.search(embedding, effective_k)
    except DimensionMismatchError as e:
        raise DimensionMismatchServiceError(
            message=str(e),
            details={"expected": e.expected, "received": e.received, "item_id": e.item_id},
        ) from e
    except VectorStoreError as e:
        raise StoreUnavailableError(
            message="Embedding collection could not be read",
            details={"store_path": settings.store.path, "reason": str(e)},
        ) from e
    ranking_ms = (time.perf_counter() - t0) * 1000

    logger.info(
        "Similarity search complete",
        extra={
            "candidates": state.vector_store.count,
            "results": len(ranked),
            "top_id": ranked[0].id if ranked else None,
            "embedding_ms": round(embedding_ms, 3),
            "ranking_ms": round(ranking_ms, 3),
        },
    )

    return SearchResponse(
        results=[
            SearchResultItem(id=r.id, display_url=r.display_url, score=r.score) for r in ranked
        ]
    )
