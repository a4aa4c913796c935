"""opcbridge API v1 endpoints."""

from opcbridge.api.v1.crawler import router as crawler_router

__all__ = [
    "crawler_router",
]
