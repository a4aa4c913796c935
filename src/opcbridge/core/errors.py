"""Exception hierarchy for the bridge."""


class BridgeError(Exception):
    """Base class for all bridge errors."""


class IllegalStateError(BridgeError):
    """A session, subscription or publisher was used before it was ready."""


class WaiterAlreadySetError(BridgeError):
    """A Waiter was resolved a second time."""


class PublisherConnectError(BridgeError):
    """The broker connection could not be established."""


class PublisherClosedError(BridgeError):
    """publish() was called on a publisher that has been closed."""
