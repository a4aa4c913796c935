"""Lazily connected publisher base built on the connection Waiter.

Construction schedules the connect sequence in the background and returns
immediately. publish() and close() wait for the connection instead of
failing, so events submitted during startup are delivered once it is ready.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Generic, TypeVar

import structlog

from opcbridge.core.errors import PublisherClosedError, PublisherConnectError
from opcbridge.core.events import NormalizedEvent
from opcbridge.core.waiter import Waiter
from opcbridge.publish.protocol import ConnectionState

logger = structlog.get_logger(__name__)

R = TypeVar("R")


class WaitingPublisher(ABC, Generic[R]):
    """Owns one broker resource R from connect to close.

    Subclasses implement _open(), _send() and _release(). _open() runs
    exactly once per instance, so exchange or topic setup done there is
    never repeated per publish.
    """

    def __init__(self) -> None:
        self._waiter: Waiter[R] = Waiter()
        self._state = ConnectionState.ESTABLISHING
        self._closed = False
        self._inflight: set[asyncio.Future[None]] = set()
        self._connect_task = asyncio.get_running_loop().create_task(self._connect())

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_closed(self) -> bool:
        return self._closed

    async def publish(self, event: NormalizedEvent) -> None:
        """Serialize and publish one event.

        Raises:
            PublisherClosedError: If close() was already called
            PublisherConnectError: If the connection could not be established
        """
        if self._closed:
            raise PublisherClosedError("Publisher has been closed")

        done: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._inflight.add(done)
        try:
            resource = await self._waiter.get()
            await self._send(resource, event.to_json_bytes())
        finally:
            self._inflight.discard(done)
            done.set_result(None)

    async def close(self) -> None:
        """Wait for the connection, then release it. Safe to call multiple times."""
        if self._closed:
            return
        self._closed = True

        try:
            resource = await self._waiter.get()
        except PublisherConnectError:
            self._state = ConnectionState.ABSENT
            return

        # Publishes released by the waiter before us finish first
        if self._inflight:
            await asyncio.wait(set(self._inflight))

        try:
            await self._release(resource)
        finally:
            self._state = ConnectionState.ABSENT
            logger.info("publisher_closed", publisher=type(self).__name__)

    async def _connect(self) -> None:
        try:
            resource = await self._open()
        except Exception as e:
            self._state = ConnectionState.ABSENT
            logger.error(
                "publisher_connect_failed",
                publisher=type(self).__name__,
                error=str(e),
            )
            self._waiter.fail(PublisherConnectError(str(e)))
            return

        self._state = ConnectionState.READY
        logger.info("publisher_ready", publisher=type(self).__name__)
        self._waiter.set(resource)

    @abstractmethod
    async def _open(self) -> R:
        """Connect and prepare the broker resource."""

    @abstractmethod
    async def _send(self, resource: R, body: bytes) -> None:
        """Hand one serialized event to the broker client."""

    @abstractmethod
    async def _release(self, resource: R) -> None:
        """Close the broker resource."""
