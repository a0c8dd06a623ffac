"""
Service information endpoint.

Exposes service configuration, collection summary and backend status.
"""

from __future__ import annotations

from fastapi import APIRouter

from visual_search.config import get_settings
from visual_search.core.state import get_app_state
from visual_search.schemas import BackendInfo, InfoResponse, SearchSettingsInfo, StoreInfo

router = APIRouter()


@router.get("/info", response_model=InfoResponse)
async def get_info() -> InfoResponse:
    """Get service information and configuration."""
    settings = get_settings()
    state = get_app_state()
    store = state.vector_store

    embeddings_status = await state.embeddings_client.health_check()

    return InfoResponse(
        service=settings.service.name,
        version=settings.service.version,
        uptime=state.uptime_formatted,
        search=SearchSettingsInfo(
            default_k=settings.search.default_k,
            max_k=settings.search.max_k,
        ),
        store=StoreInfo(
            path=settings.store.path,
            connected=state.store_connected,
            count=store.count,
            dimension=store.dimension,
            load_error=state.store_load_error,
        ),
        embeddings=BackendInfo(
            url=settings.embeddings.url,
            status=embeddings_status,
        ),
    )
