"""Crawler diagnostics REST endpoints.

Exposes the state of the current crawl run: whether it is running, what it
discovered and which nodes carry a live subscription.
"""

from fastapi import APIRouter, Depends

from opcbridge.api.deps import get_crawler
from opcbridge.api.schemas.crawler import CrawlerStatusResponse, DiscoveredNodeResponse
from opcbridge.opcua.crawler import AddressSpaceCrawler

router = APIRouter(prefix="/api/v1/crawler", tags=["crawler"])


@router.get("/status", response_model=CrawlerStatusResponse)
async def get_crawler_status(
    crawler: AddressSpaceCrawler = Depends(get_crawler),
) -> CrawlerStatusResponse:
    """Return run state and counters of the crawler."""
    return CrawlerStatusResponse(
        running=crawler.is_running,
        dry=crawler.options.dry,
        endpoint_url=getattr(crawler.session, "endpoint_url", None),
        roots=crawler.options.roots,
        nodes_discovered=len(crawler.discovered),
        subscriptions=len(crawler.bindings),
    )


@router.get("/nodes", response_model=list[DiscoveredNodeResponse])
async def list_discovered_nodes(
    crawler: AddressSpaceCrawler = Depends(get_crawler),
) -> list[DiscoveredNodeResponse]:
    """List every discovered node in crawl order."""
    bindings = crawler.bindings
    return [
        DiscoveredNodeResponse(
            node_id=node.node_id,
            display_name=node.display_name,
            node_class=node.node_class,
            depth=depth,
            subscribed=node.node_id in bindings,
        )
        for depth, node in crawler.discovered
    ]
