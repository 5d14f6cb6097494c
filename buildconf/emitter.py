"""Event emitter utilities for buildconf.

Provides a synchronous multi-subscriber emitter used for the active
configuration change streams.
"""

import asyncio
import logging
from collections.abc import Callable
from typing import Generic
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Listener = Callable[[T], None]
Unsubscribe = Callable[[], None]


class Emitter(Generic[T]):
    """Emitter that delivers events to callbacks and queues.

    Callbacks run synchronously inside ``fire`` in registration order.
    Queue subscribers each get their own unbounded queue so a slow consumer
    never blocks the emitter.

    Example:
        >>> emitter: Emitter[int] = Emitter()
        >>> seen = []
        >>> dispose = emitter.on(seen.append)
        >>> emitter.fire(1)
        >>> dispose()
        >>> emitter.fire(2)
        >>> seen
        [1]
    """

    def __init__(self: "Emitter[T]") -> None:
        self.listeners: list[Listener[T]] = []
        self.queues: list[asyncio.Queue[T]] = []

    def on(self: "Emitter[T]", listener: Listener[T]) -> Unsubscribe:
        """Register a callback.

        Args:
            listener: Called with every fired event

        Returns:
            Callable removing the listener again
        """
        self.listeners.append(listener)

        def dispose() -> None:
            if listener in self.listeners:
                self.listeners.remove(listener)

        return dispose

    def subscribe(self: "Emitter[T]") -> asyncio.Queue[T]:
        """Create new subscriber queue.

        Returns:
            asyncio.Queue that will receive all fired events
        """
        queue: asyncio.Queue[T] = asyncio.Queue()
        self.queues.append(queue)
        return queue

    def unsubscribe(self: "Emitter[T]", queue: asyncio.Queue[T]) -> None:
        """Remove subscriber queue.

        Args:
            queue: Queue to remove
        """
        if queue in self.queues:
            self.queues.remove(queue)

    def fire(self: "Emitter[T]", event: T) -> None:
        """Deliver event to all listeners and subscriber queues.

        Args:
            event: Event payload
        """
        for listener in list(self.listeners):
            try:
                listener(event)
            except Exception as e:
                logger.error(f"Event listener {listener!r} failed: {e}")
        for queue in self.queues:
            queue.put_nowait(event)

    def map(self: "Emitter[T]", project: Callable[[T], object]) -> Callable[[Listener], Unsubscribe]:
        """Derive a listener registration that receives ``project(event)``.

        Args:
            project: Projection applied to each event before delivery

        Returns:
            Registration function with the same contract as ``on``
        """

        def register(listener: Listener) -> Unsubscribe:
            return self.on(lambda event: listener(project(event)))

        return register
