"""opcbridge FastAPI application."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI

from opcbridge.api.v1 import crawler_router
from opcbridge.core.config import Settings, get_settings
from opcbridge.core.logging import configure_logging
from opcbridge.opcua import AddressSpaceCrawler, CrawlerOptions, OPCUAConfig, OPCUASession
from opcbridge.publish import EventPublisher, create_publisher

logger = structlog.get_logger(__name__)


def build_crawler(settings: Settings, publisher: EventPublisher) -> AddressSpaceCrawler:
    """Assemble a crawler and its OPC-UA session from settings."""
    session = OPCUASession(
        OPCUAConfig(
            endpoint_url=settings.opcua_endpoint,
            username=settings.opcua_username,
            password=settings.opcua_password,
            connect_timeout=settings.opcua_timeout,
            publishing_interval=settings.publishing_interval,
        )
    )
    options = CrawlerOptions(
        root=settings.root_list,
        source=settings.source,
        id_prefix=settings.id_prefix,
        name_prefix=settings.name_prefix,
        blacklist=settings.blacklist_list,
        dry=settings.dry,
        sampling_interval=settings.sampling_interval,
        queue_size=settings.queue_size,
    )
    return AddressSpaceCrawler(
        publisher,
        session,
        options,
        logger=logger.bind(endpoint=settings.opcua_endpoint),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    settings = get_settings()
    configure_logging(settings.log_format, settings.log_level)

    # Startup
    logger.info("Starting opcbridge", version=settings.app_version)

    publisher = create_publisher(settings)
    crawler = build_crawler(settings, publisher)

    app.state.publisher = publisher
    app.state.crawler = crawler

    if await crawler.start():
        logger.info("opcbridge startup complete")
    else:
        logger.warning("opcbridge started without a running crawler")

    yield

    # Shutdown
    logger.info("Shutting down opcbridge")

    await crawler.stop()
    await publisher.close()

    logger.info("opcbridge shutdown complete")


app = FastAPI(
    title="opcbridge",
    description="OPC-UA address-space crawler forwarding value changes to a message broker",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(crawler_router)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}
