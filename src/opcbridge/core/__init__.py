"""Core building blocks: settings, logging, errors, events and the connection waiter."""

from opcbridge.core.errors import (
    BridgeError,
    IllegalStateError,
    PublisherClosedError,
    PublisherConnectError,
    WaiterAlreadySetError,
)
from opcbridge.core.events import NormalizedEvent, ValueType, to_epoch_millis
from opcbridge.core.waiter import Waiter

__all__ = [
    "BridgeError",
    "IllegalStateError",
    "NormalizedEvent",
    "PublisherClosedError",
    "PublisherConnectError",
    "ValueType",
    "Waiter",
    "WaiterAlreadySetError",
    "to_epoch_millis",
]
