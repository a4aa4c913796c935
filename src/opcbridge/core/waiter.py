"""Single-assignment, multi-reader future for resources still being established.

A Waiter holds a value that becomes available exactly once. Any number of
coroutines may await it before that happens; they are released in the
order they started waiting when the single writer calls set().
"""

import asyncio
from collections import deque
from typing import Generic, TypeVar

from opcbridge.core.errors import WaiterAlreadySetError

T = TypeVar("T")


class Waiter(Generic[T]):
    """One-shot broadcast of a value to every current and future reader.

    Example:
        >>> waiter: Waiter[str] = Waiter()
        >>> task = asyncio.create_task(waiter.get())
        >>> waiter.set("ready")
        >>> await task
        'ready'

    Thread Safety:
        Designed for use within a single asyncio event loop.
    """

    def __init__(self) -> None:
        self._resolved = False
        self._value: T | None = None
        self._error: BaseException | None = None
        self._waiting: deque[asyncio.Future[T]] = deque()

    @property
    def is_set(self) -> bool:
        """True once set() or fail() has been called."""
        return self._resolved

    async def get(self) -> T:
        """Return the value, suspending until it has been set.

        Raises:
            The exception passed to fail(), if the waiter was failed.
        """
        if self._resolved:
            if self._error is not None:
                raise self._error
            return self._value  # type: ignore[return-value]

        future: asyncio.Future[T] = asyncio.get_running_loop().create_future()
        self._waiting.append(future)
        # Cancelling the reader cancels its future; set() skips it
        return await future

    def set(self, value: T) -> None:
        """Assign the value and release every waiting reader in FIFO order.

        Raises:
            WaiterAlreadySetError: If the waiter was already resolved.
        """
        self._resolve()
        self._value = value
        while self._waiting:
            future = self._waiting.popleft()
            if not future.done():
                future.set_result(value)

    def fail(self, error: BaseException) -> None:
        """Resolve the waiter with an error raised to every reader.

        Raises:
            WaiterAlreadySetError: If the waiter was already resolved.
        """
        self._resolve()
        self._error = error
        while self._waiting:
            future = self._waiting.popleft()
            if not future.done():
                future.set_exception(error)

    def _resolve(self) -> None:
        if self._resolved:
            raise WaiterAlreadySetError("Waiter value can only be assigned once")
        self._resolved = True
