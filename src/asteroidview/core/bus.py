"""In-process publish/subscribe bus for pose, frame, and marker messages.

Publishing enqueues a message on every subscription of the topic; handlers run
only when the owning loop calls `spin_once`, so each loop dispatches its events
from its own thread. `publish` is atomic per call, and two loops running in
separate threads may share one bus.
"""

from __future__ import annotations

import itertools
import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable

from asteroidview.config.schema import BusUnavailableError

logger = logging.getLogger(__name__)

# Topic carrying TransformStamped records
TF_TOPIC = "tf"

DEFAULT_SUBSCRIBER_QUEUE = 10

Handler = Callable[[Any], None]


@dataclass
class Subscription:
    """Handler plus its bounded inbox. When full, the oldest message is dropped."""
    topic: str
    handler: Handler
    queue_size: int = DEFAULT_SUBSCRIBER_QUEUE
    pending: deque = field(init=False, repr=False)
    dropped: int = 0

    def __post_init__(self):
        if self.queue_size < 1:
            raise ValueError(f"queue_size must be >= 1, got {self.queue_size}")
        self.pending = deque(maxlen=self.queue_size)


class Publisher:
    """Handle bound to one topic, passed to components that publish."""

    def __init__(self, bus: MessageBus, topic: str):
        self._bus = bus
        self.topic = topic

    def publish(self, message: Any) -> None:
        self._bus.publish(self.topic, message)

    def __repr__(self) -> str:
        return f"Publisher(topic={self.topic!r})"


class MessageBus:
    """Topic-keyed message bus with per-subscription queues."""

    def __init__(self):
        self._lock = threading.Lock()
        self._subscriptions: dict[str, list[Subscription]] = {}
        self._seq = itertools.count()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def advertise(self, topic: str) -> Publisher:
        """
        Return a publisher handle for a topic.

        Args:
            topic: Topic name

        Returns:
            Publisher bound to this bus and topic

        Raises:
            BusUnavailableError: If the bus has been closed
        """
        if self._closed:
            raise BusUnavailableError(f"Cannot advertise '{topic}': bus is closed")
        logger.debug(f"Advertising topic: {topic}")
        return Publisher(self, topic)

    def subscribe(
        self,
        topic: str,
        handler: Handler,
        queue_size: int = DEFAULT_SUBSCRIBER_QUEUE,
    ) -> Subscription:
        """
        Register a handler for a topic.

        Args:
            topic: Topic name
            handler: Called with each message during spin_once
            queue_size: Maximum pending messages before the oldest is dropped

        Returns:
            The new Subscription
        """
        sub = Subscription(topic=topic, handler=handler, queue_size=queue_size)
        with self._lock:
            self._subscriptions.setdefault(topic, []).append(sub)
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        with self._lock:
            subs = self._subscriptions.get(sub.topic, [])
            if sub in subs:
                subs.remove(sub)

    def publish(self, topic: str, message: Any) -> None:
        """
        Enqueue a message for every subscriber of a topic.

        Raises:
            BusUnavailableError: If the bus has been closed
        """
        with self._lock:
            if self._closed:
                raise BusUnavailableError(f"Cannot publish on '{topic}': bus is closed")
            seq = next(self._seq)
            for sub in self._subscriptions.get(topic, ()):
                if len(sub.pending) == sub.queue_size:
                    sub.dropped += 1
                sub.pending.append((seq, message))

    def spin_once(self, subscriptions: list[Subscription] | None = None) -> int:
        """
        Dispatch messages pending at call time, in publish order.

        Messages published by handlers during this call wait for the next call.

        Args:
            subscriptions: Only service these subscriptions (default: all)

        Returns:
            Number of messages dispatched
        """
        with self._lock:
            if subscriptions is None:
                subscriptions = [s for subs in self._subscriptions.values() for s in subs]
            batch = []
            for sub in subscriptions:
                while sub.pending:
                    seq, message = sub.pending.popleft()
                    batch.append((seq, sub, message))
        batch.sort(key=lambda item: item[0])
        for _, sub, message in batch:
            sub.handler(message)
        return len(batch)

    def close(self) -> None:
        """Refuse further publishes and drop pending messages."""
        with self._lock:
            self._closed = True
            for subs in self._subscriptions.values():
                for sub in subs:
                    sub.pending.clear()
