"""
Pydantic response models for the visual search API.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class SearchResultItem(BaseModel):
    """A stored item ranked against the uploaded image."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    """Identifier of the stored item."""

    display_url: str = Field(alias="displayUrl")
    """URL of the stored item's image."""

    score: float
    """Raw dot product of the query and stored embeddings."""


class SearchResponse(BaseModel):
    """Response model for POST /api/search."""

    results: list[SearchResultItem]
    """Matches ordered by descending score."""


class HealthResponse(BaseModel):
    """Response model for GET /health endpoint."""

    status: Literal["healthy", "degraded", "unhealthy"]
    """Overall health: degraded when the collection is not loaded."""

    store: Literal["connected", "disconnected"]
    """Whether the embedding collection is loaded."""

    embeddings: str | None = None
    """Embedding service status (if check_backends=true)."""


class StoreInfo(BaseModel):
    """Embedding collection summary for /info endpoint."""

    path: str
    connected: bool
    count: int
    dimension: int | None
    load_error: str | None = None


class SearchSettingsInfo(BaseModel):
    """Search configuration for /info endpoint."""

    default_k: int
    max_k: int
    scoring: Literal["dot_product"] = "dot_product"


class BackendInfo(BaseModel):
    """Backend service info for /info endpoint."""

    url: str
    status: str


class InfoResponse(BaseModel):
    """Response model for GET /info endpoint."""

    service: str
    version: str
    uptime: str
    search: SearchSettingsInfo
    store: StoreInfo
    embeddings: BackendInfo


class ErrorResponse(BaseModel):
    """Standard error response model."""

    error: str
    """Machine-readable error code."""

    message: str
    """Human-readable error description."""

    details: dict[str, Any]
    """Additional error context."""
