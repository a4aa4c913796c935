"""Pydantic schemas for crawler diagnostics."""

from pydantic import BaseModel


class CrawlerStatusResponse(BaseModel):
    """Summary of the crawler's current run."""

    running: bool
    dry: bool
    endpoint_url: str | None = None
    roots: list[str]
    nodes_discovered: int
    subscriptions: int


class DiscoveredNodeResponse(BaseModel):
    """One node found by the crawl."""

    node_id: str
    display_name: str | None = None
    node_class: str
    depth: int
    subscribed: bool
