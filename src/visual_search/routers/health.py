"""
Health check endpoint.

Provides service health status for container orchestration
(Docker health checks, Kubernetes probes).
"""

from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Query

from visual_search.core.state import get_app_state
from visual_search.schemas import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(
    check_backends: bool = Query(
        default=False,
        description="Whether to also probe the embedding service",
    ),
) -> HealthResponse:
    """
    Check service health.

    Health semantics:
    - healthy: collection loaded (and embedding service healthy, when probed)
    - degraded: collection not loaded; searches fail with store_unavailable
    - unhealthy: embedding service probed and not healthy
    """
    state = get_app_state()
    status: Literal["healthy", "degraded", "unhealthy"] = "healthy"
    embeddings_status: str | None = None

    if not state.store_connected:
        status = "degraded"

    if check_backends:
        embeddings_status = await state.embeddings_client.health_check()
        if embeddings_status != "healthy":
            status = "unhealthy"

    return HealthResponse(
        status=status,
        store="connected" if state.store_connected else "disconnected",
        embeddings=embeddings_status,
    )
