"""FastAPI dependency injection functions."""

from fastapi import HTTPException, Request, status

from opcbridge.opcua.crawler import AddressSpaceCrawler


def get_crawler(request: Request) -> AddressSpaceCrawler:
    """Return the crawler stored on app state by the lifespan handler.

    Raises:
        HTTPException: 503 if the crawler has not been created
    """
    crawler = getattr(request.app.state, "crawler", None)
    if crawler is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Crawler not available",
        )
    return crawler
