"""Pydantic schemas for the opcbridge REST API."""

from opcbridge.api.schemas.crawler import (
    CrawlerStatusResponse,
    DiscoveredNodeResponse,
)

__all__ = [
    "CrawlerStatusResponse",
    "DiscoveredNodeResponse",
]
