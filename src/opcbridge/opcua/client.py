"""OPC-UA session wrapper used by the address-space crawler.

This module provides OPCUASession, a thin layer over asyncua.Client that
exposes exactly the operations the crawler needs: connect, create a
subscription, browse one reference kind, create a monitored item and close.
"""

from dataclasses import dataclass
from typing import Any, Protocol

import structlog
from asyncua import Client, ua
from asyncua.common.subscription import Subscription

from opcbridge.core.errors import IllegalStateError
from opcbridge.opcua.browsing import RemoteNode

logger = structlog.get_logger(__name__)


@dataclass
class OPCUAConfig:
    """Configuration for the OPC-UA session.

    Attributes:
        endpoint_url: OPC-UA server endpoint URL (opc.tcp://...)
        username: Optional username for authentication
        password: Optional password for authentication
        connect_timeout: Request timeout in seconds
        publishing_interval: Subscription publishing interval in ms
        lifetime_count: Requested subscription lifetime count
        max_keep_alive_count: Requested max keep-alive count
        max_notifications_per_publish: Notifications per publish response
        priority: Subscription priority
    """

    endpoint_url: str = "opc.tcp://localhost:4840"
    username: str | None = None
    password: str | None = None
    connect_timeout: float = 10.0
    publishing_interval: int = 1000
    lifetime_count: int = 100
    max_keep_alive_count: int = 10
    max_notifications_per_publish: int = 100
    priority: int = 10


class RemoteSession(Protocol):
    """Operations the crawler consumes from an OPC-UA session."""

    async def connect(self) -> None: ...

    async def create_subscription(self, handler: Any) -> Any: ...

    async def browse(self, node_id: str, reference_type: int) -> list[RemoteNode]: ...

    async def create_monitored_item(
        self, node_id: str, sampling_interval: int, queue_size: int
    ) -> int: ...

    async def close(self) -> None: ...


class OPCUASession:
    """asyncua-backed implementation of RemoteSession.

    Example:
        >>> session = OPCUASession(OPCUAConfig(endpoint_url="opc.tcp://plc:4840"))
        >>> await session.connect()
        >>> await session.create_subscription(handler)
        >>> children = await session.browse("i=85", ua.ObjectIds.Organizes)
        >>> await session.close()
    """

    def __init__(self, config: OPCUAConfig):
        self._config = config
        self._client: Client | None = None
        self._subscription: Subscription | None = None

    @property
    def endpoint_url(self) -> str:
        return self._config.endpoint_url

    @property
    def is_connected(self) -> bool:
        """Check if a session is currently open."""
        return self._client is not None

    @property
    def has_subscription(self) -> bool:
        return self._subscription is not None

    # --- Connection lifecycle ---

    async def connect(self) -> None:
        """Connect to the server and activate a session.

        Raises:
            Whatever asyncua raises on socket, channel or session failure.
        """
        client = Client(url=self._config.endpoint_url, timeout=self._config.connect_timeout)
        if self._config.username:
            client.set_user(self._config.username)
            client.set_password(self._config.password or "")

        await client.connect()
        self._client = client
        logger.info("opcua_connected", url=self._config.endpoint_url)

    async def create_subscription(self, handler: Any) -> Subscription:
        """Create the single subscription all monitored items attach to.

        Args:
            handler: asyncua subscription handler receiving
                datachange_notification / status_change_notification

        Raises:
            IllegalStateError: If no session is open
        """
        client = self._require_client()

        params = ua.CreateSubscriptionParameters()
        params.RequestedPublishingInterval = float(self._config.publishing_interval)
        params.RequestedLifetimeCount = self._config.lifetime_count
        params.RequestedMaxKeepAliveCount = self._config.max_keep_alive_count
        params.MaxNotificationsPerPublish = self._config.max_notifications_per_publish
        params.PublishingEnabled = True
        params.Priority = self._config.priority

        self._subscription = await client.create_subscription(params, handler)
        logger.info(
            "opcua_subscription_started",
            publishing_interval=self._config.publishing_interval,
        )
        return self._subscription

    async def close(self) -> None:
        """Delete the subscription and disconnect. Safe to call multiple times."""
        if self._subscription:
            try:
                await self._subscription.delete()
            except Exception as e:
                logger.warning("opcua_sub_delete_error", error=str(e))
            self._subscription = None

        if self._client:
            try:
                await self._client.disconnect()
            except Exception as e:
                logger.warning("opcua_disconnect_error", error=str(e))
            self._client = None

    # --- Address space ---

    async def browse(self, node_id: str, reference_type: int) -> list[RemoteNode]:
        """Return the forward references of one kind (and its subtypes).

        Args:
            node_id: NodeId string of the node to browse
            reference_type: Numeric ReferenceTypeId, e.g. ua.ObjectIds.Organizes

        Raises:
            IllegalStateError: If no session is open
        """
        client = self._require_client()
        node = client.get_node(node_id)
        refs = await node.get_references(
            refs=reference_type,
            direction=ua.BrowseDirection.Forward,
            includesubtypes=True,
        )
        return [RemoteNode.from_reference(ref) for ref in refs]

    async def create_monitored_item(
        self, node_id: str, sampling_interval: int, queue_size: int
    ) -> int:
        """Monitor the Value attribute of a node.

        The server-side queue is bounded by queue_size and discards the
        oldest notification when full.

        Returns:
            Monitored item handle usable for unsubscribe

        Raises:
            IllegalStateError: If no subscription exists
        """
        if self._subscription is None or self._client is None:
            raise IllegalStateError("OPC-UA subscription is unavailable")

        node = self._client.get_node(node_id)
        return await self._subscription.subscribe_data_change(
            node,
            attr=ua.AttributeIds.Value,
            queuesize=queue_size,
            sampling_interval=float(sampling_interval),
        )

    def _require_client(self) -> Client:
        if self._client is None:
            raise IllegalStateError("OPC-UA session is unavailable")
        return self._client
