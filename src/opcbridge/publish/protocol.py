"""EventPublisher protocol and connection state shared by all publishers."""

from enum import Enum
from typing import Protocol

from opcbridge.core.events import NormalizedEvent


class ConnectionState(str, Enum):
    """Broker connection lifecycle: absent -> establishing -> ready."""

    ABSENT = "absent"
    ESTABLISHING = "establishing"
    READY = "ready"


class EventPublisher(Protocol):
    """Protocol for event sinks (AMQP, MQTT, ...).

    Example:
        >>> publisher = AMQPPublisher(AMQPConfig(url="amqp://broker/"))
        >>> await publisher.publish(event)
        >>> await publisher.close()
    """

    async def publish(self, event: NormalizedEvent) -> None:
        """Deliver one event, waiting for the connection if necessary."""
        ...

    async def close(self) -> None:
        """Release the broker connection. The publisher is not reusable."""
        ...
