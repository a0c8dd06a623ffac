"""API routers for the visual search service."""

from visual_search.routers import health, info, search

__all__ = ["health", "info", "search"]
