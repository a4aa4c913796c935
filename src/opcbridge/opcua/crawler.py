"""OPC-UA address-space crawler and live subscription manager.

This module provides AddressSpaceCrawler, which walks the reference graph
below one or more root nodes exactly once per node, subscribes to the
value of every Variable (or Unspecified) node it finds, and forwards each
change notification as a NormalizedEvent to an EventPublisher.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any

import structlog
from asyncua import ua

from opcbridge.core.errors import IllegalStateError
from opcbridge.core.events import NormalizedEvent
from opcbridge.opcua.browsing import CRAWL_REFERENCE_TYPES, RemoteNode
from opcbridge.opcua.client import RemoteSession
from opcbridge.opcua.mapping import (
    map_value,
    map_value_type,
    timestamp_to_millis,
    variant_to_json,
)
from opcbridge.publish.protocol import EventPublisher


@dataclass
class CrawlerOptions:
    """Crawl and event-naming options.

    Attributes:
        root: Node id (or list of node ids) to start crawling from
        source: Logical source tag stamped on every event
        id_prefix: Prefix applied to event ids
        name_prefix: Prefix applied to event names
        blacklist: Node ids excluded from traversal and subscription
        dry: Discover only, install no subscriptions
        sampling_interval: Monitored item sampling interval in ms
        queue_size: Server-side notification queue size per monitored item
    """

    root: str | list[str] = "i=85"  # ObjectsFolder
    source: str = "opcua"
    id_prefix: str = "opcua~"
    name_prefix: str = "OPC UA: "
    blacklist: list[str] = field(default_factory=list)
    dry: bool = False
    sampling_interval: int = 100
    queue_size: int = 10

    @property
    def roots(self) -> list[str]:
        if isinstance(self.root, str):
            return [self.root]
        return list(self.root)


@dataclass(frozen=True)
class SubscriptionBinding:
    """Node identity captured when its monitored item was created.

    Attributes:
        node_id: OPC-UA NodeId string
        display_name: Display name at subscribe time, None if absent
        handle: Monitored item handle returned by the session
    """

    node_id: str
    display_name: str | None
    handle: int


class AddressSpaceCrawler:
    """Discovers nodes below the configured roots and keeps them subscribed.

    The crawler owns the remote session. start() runs the whole
    initialization sequence; any failure there is logged and leaves the
    crawler non-running without retry.

    Example:
        >>> crawler = AddressSpaceCrawler(publisher, session, CrawlerOptions(blacklist=["i=2253"]))
        >>> await crawler.start()
        True
        >>> print("\\n".join(crawler.tree_lines()))
        >>> await crawler.stop()
    """

    def __init__(
        self,
        publisher: EventPublisher,
        session: RemoteSession,
        options: CrawlerOptions | None = None,
        logger: Any = None,
    ):
        self._publisher = publisher
        self._session = session
        self._options = options or CrawlerOptions()
        self._blacklist = frozenset(self._options.blacklist)
        self._log = logger or structlog.get_logger(__name__)

        self._session_ready = False
        self._subscription_ready = False
        self._running = False

        self._visited: set[str] = set()
        self._discovered: list[tuple[int, RemoteNode]] = []
        self._bindings: dict[str, SubscriptionBinding] = {}
        self._publish_tasks: set[asyncio.Task[None]] = set()

    # --- Properties ---

    @property
    def options(self) -> CrawlerOptions:
        return self._options

    @property
    def session(self) -> RemoteSession:
        return self._session

    @property
    def is_running(self) -> bool:
        """True once start() completed successfully and until stop()."""
        return self._running

    @property
    def visited(self) -> frozenset[str]:
        return frozenset(self._visited)

    @property
    def discovered(self) -> list[tuple[int, RemoteNode]]:
        """Discovered nodes with their crawl depth, in discovery order."""
        return list(self._discovered)

    @property
    def bindings(self) -> dict[str, SubscriptionBinding]:
        return dict(self._bindings)

    # --- Lifecycle ---

    async def start(self) -> bool:
        """Connect, create the subscription and crawl every root.

        Returns:
            True if the crawler is running, False if initialization failed
        """
        self._visited.clear()
        self._discovered.clear()
        self._bindings.clear()

        try:
            await self._session.connect()
            self._session_ready = True

            await self._session.create_subscription(_DataChangeHandler(self, self._log))
            self._subscription_ready = True

            for root in self._options.roots:
                if root in self._visited or root in self._blacklist:
                    self._log.debug("opcua_root_skipped", node_id=root)
                    continue
                self._visited.add(root)
                await self.crawl(root)
        except Exception as e:
            self._log.error("opcua_crawler_init_failed", error=str(e), exc_info=True)
            await self._close_session()
            return False

        self._running = True
        self._log.info(
            "opcua_crawl_complete",
            nodes=len(self._discovered),
            subscriptions=len(self._bindings),
            dry=self._options.dry,
        )
        self._log.debug("opcua_crawl_tree", tree="\n".join(self.tree_lines()))
        return True

    async def stop(self) -> None:
        """Tear down the session and wait for in-flight publishes."""
        self._running = False
        await self._close_session()

        if self._publish_tasks:
            await asyncio.gather(*self._publish_tasks, return_exceptions=True)

    # --- Crawl ---

    async def crawl(self, root: str, depth: int = 0) -> None:
        """Browse root and process every node it references.

        Args:
            root: NodeId string of the node whose children are crawled
            depth: Nesting depth, used for diagnostics only

        Raises:
            IllegalStateError: If the session is unavailable
        """
        if not self._session_ready:
            raise IllegalStateError("OPC-UA session is unavailable")

        for reference_type in CRAWL_REFERENCE_TYPES:
            for node in await self._session.browse(root, reference_type):
                await self._crawl_node(node, depth)

    async def _crawl_node(self, node: RemoteNode, depth: int) -> None:
        # Checked before expansion so cyclic graphs terminate
        if node.node_id in self._visited or node.node_id in self._blacklist:
            return

        self._visited.add(node.node_id)
        self._discovered.append((depth, node))

        try:
            await self.crawl(node.node_id, depth + 1)
        except ua.UaStatusCodeError as e:
            self._log.warning("opcua_browse_failed", node_id=node.node_id, error=str(e))

        if self._options.dry or not node.is_subscribable:
            return

        try:
            await self.install_subscription(node)
        except IllegalStateError:
            raise
        except Exception as e:
            self._log.error("opcua_subscribe_failed", node_id=node.node_id, error=str(e))

    # --- Subscriptions ---

    def binding_for(self, node_id: str) -> SubscriptionBinding | None:
        return self._bindings.get(node_id)

    async def install_subscription(self, node: RemoteNode) -> SubscriptionBinding:
        """Create a monitored item for the node's Value attribute.

        Returns:
            The binding for the node; the existing one if already subscribed

        Raises:
            IllegalStateError: If the subscription is unavailable
        """
        if not self._subscription_ready:
            raise IllegalStateError("OPC-UA subscription is unavailable")

        existing = self._bindings.get(node.node_id)
        if existing is not None:
            return existing

        handle = await self._session.create_monitored_item(
            node.node_id,
            sampling_interval=self._options.sampling_interval,
            queue_size=self._options.queue_size,
        )
        binding = SubscriptionBinding(
            node_id=node.node_id,
            display_name=node.display_name,
            handle=handle,
        )
        self._bindings[node.node_id] = binding
        self._log.debug("opcua_subscribed", node_id=node.node_id, handle=handle)
        return binding

    # --- Change notifications ---

    def build_event(
        self, binding: SubscriptionBinding, data_value: ua.DataValue
    ) -> NormalizedEvent:
        """Map one change notification of a bound node to a NormalizedEvent."""
        if not binding.display_name:
            self._log.warning("opcua_missing_display_name", node_id=binding.node_id)

        variant = data_value.Value if data_value.Value is not None else ua.Variant()
        return NormalizedEvent(
            id=self._options.id_prefix + binding.node_id,
            name=self._options.name_prefix + (binding.display_name or ""),
            source=self._options.source,
            meta={"opcuaDataValue": variant_to_json(variant)},
            value_type=map_value_type(variant),
            timestamp=timestamp_to_millis(data_value.ServerTimestamp),
            value=[map_value(variant)],
        )

    async def publish_value(
        self, binding: SubscriptionBinding, data_value: ua.DataValue
    ) -> None:
        """Build the event and hand it to the publisher without awaiting delivery."""
        event = self.build_event(binding, data_value)
        task = asyncio.create_task(self._safe_publish(event))
        self._publish_tasks.add(task)
        task.add_done_callback(self._publish_tasks.discard)

    async def _safe_publish(self, event: NormalizedEvent) -> None:
        try:
            await self._publisher.publish(event)
        except Exception as e:
            self._log.error("event_publish_failed", event_id=event.id, error=str(e))

    # --- Diagnostics ---

    def tree_lines(self) -> list[str]:
        """Render the discovered nodes as an indented tree."""
        return [
            f"{'  ' * depth}{node.node_id}: {node.display_name or ''} ({node.node_class})"
            for depth, node in self._discovered
        ]

    async def _close_session(self) -> None:
        self._session_ready = False
        self._subscription_ready = False
        try:
            await self._session.close()
        except Exception as e:
            self._log.warning("opcua_session_close_error", error=str(e))


class _DataChangeHandler:
    """asyncua SubscriptionHandler that routes notifications to bindings.

    Each notification is dispatched with the binding captured at subscribe
    time for that node id.
    """

    def __init__(self, crawler: AddressSpaceCrawler, log: Any):
        self._crawler = crawler
        self._log = log

    async def datachange_notification(self, node, val, data) -> None:
        """Handle data change notifications from the asyncua subscription."""
        node_id = node.nodeid.to_string()
        binding = self._crawler.binding_for(node_id)
        if binding is None:
            return
        try:
            await self._crawler.publish_value(binding, data.monitored_item.Value)
        except Exception as e:
            self._log.error(
                "opcua_callback_error",
                node_id=node_id,
                error=str(e),
            )

    def status_change_notification(self, status) -> None:
        """Handle subscription status change notifications."""
        self._log.warning("opcua_status_change", status=str(status))
