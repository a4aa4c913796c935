"""Fake collaborators for crawler and publisher tests."""

from __future__ import annotations

from collections import defaultdict

from opcbridge.core.events import NormalizedEvent
from opcbridge.opcua.browsing import HAS_COMPONENT, ORGANIZES, RemoteNode


class FakeSession:
    """In-memory stand-in for an OPC-UA session.

    The address space is a mapping (parent id, reference type) -> children,
    so cycles and diamonds are expressed by listing a node under several
    parents.
    """

    def __init__(self, fail_on: str | None = None) -> None:
        self.references: dict[tuple[str, int], list[RemoteNode]] = defaultdict(list)
        self.fail_on = fail_on
        self.handler = None
        self.connected = False
        self.close_calls = 0
        self.browse_calls: list[tuple[str, int]] = []
        self.monitored: list[tuple[str, int, int]] = []

    def add(self, parent: str, *children: RemoteNode, reference_type: int = ORGANIZES) -> None:
        self.references[(parent, reference_type)].extend(children)

    def add_component(self, parent: str, *children: RemoteNode) -> None:
        self.add(parent, *children, reference_type=HAS_COMPONENT)

    async def connect(self) -> None:
        if self.fail_on == "connect":
            raise ConnectionError("connection refused")
        self.connected = True

    async def create_subscription(self, handler) -> None:
        if self.fail_on == "subscription":
            raise RuntimeError("BadTooManySubscriptions")
        self.handler = handler

    async def browse(self, node_id: str, reference_type: int) -> list[RemoteNode]:
        self.browse_calls.append((node_id, reference_type))
        return list(self.references.get((node_id, reference_type), []))

    async def create_monitored_item(
        self, node_id: str, sampling_interval: int, queue_size: int
    ) -> int:
        if self.fail_on == f"monitor:{node_id}":
            raise RuntimeError("BadNodeIdUnknown")
        self.monitored.append((node_id, sampling_interval, queue_size))
        return len(self.monitored)

    async def close(self) -> None:
        self.close_calls += 1
        self.connected = False

    @property
    def browsed_ids(self) -> list[str]:
        return [node_id for node_id, _ in self.browse_calls]

    @property
    def monitored_ids(self) -> list[str]:
        return [node_id for node_id, _, _ in self.monitored]


class RecordingPublisher:
    """EventPublisher that records events instead of sending them."""

    def __init__(self, error: Exception | None = None) -> None:
        self.events: list[NormalizedEvent] = []
        self.error = error
        self.closed = False

    async def publish(self, event: NormalizedEvent) -> None:
        if self.error is not None:
            raise self.error
        self.events.append(event)

    async def close(self) -> None:
        self.closed = True


def variable(node_id: str, name: str | None = None) -> RemoteNode:
    return RemoteNode(node_id=node_id, display_name=name, node_class="Variable")


def folder(node_id: str, name: str | None = None) -> RemoteNode:
    return RemoteNode(node_id=node_id, display_name=name, node_class="Object")


