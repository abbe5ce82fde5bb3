"""
Event fan-out (process-local publish/subscribe) and heartbeat.

Views that cache lead data subscribe to topics here so they converge when a
lead is created or updated elsewhere in the same process. This is a local
observer registry, not a network protocol:

- delivery is synchronous, in registration order, within one topic;
- there is no ordering between topics and nothing survives a restart;
- `last_update` is an observability signal only.

A `Heartbeat` publishes the `heartbeat` topic on a fixed interval, standing in
for a real connection check when no transport is attached.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from domain.time import utc_now

logger = logging.getLogger(__name__)

LEAD_CREATED = "lead:created"
LEAD_UPDATED = "lead:updated"
HEARTBEAT = "heartbeat"

DEFAULT_HEARTBEAT_SECONDS = 10.0

Handler = Callable[[Any], None]


class _Registration:
    # Identity object so the same handler can be registered twice and
    # each unsubscribe removes only its own registration.
    __slots__ = ("handler",)

    def __init__(self, handler: Handler) -> None:
        self.handler = handler


class EventBus:
    def __init__(self, clock: Callable[[], datetime] = utc_now) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._topics: Dict[str, List[_Registration]] = {}
        self._last_update: Optional[datetime] = None

    @property
    def last_update(self) -> Optional[datetime]:
        return self._last_update

    def subscribe(self, topic: str, handler: Handler) -> Callable[[], None]:
        """
        Register `handler` for `topic`.

        Returns:
            A function that removes exactly this registration. Calling it more
            than once has no further effect.
        """
        registration = _Registration(handler)
        with self._lock:
            self._topics.setdefault(topic, []).append(registration)

        def unsubscribe() -> None:
            with self._lock:
                registrations = self._topics.get(topic)
                if not registrations:
                    return
                try:
                    registrations.remove(registration)
                except ValueError:
                    return
                if not registrations:
                    del self._topics[topic]

        return unsubscribe

    def subscriber_count(self, topic: str) -> int:
        with self._lock:
            return len(self._topics.get(topic, ()))

    def publish(self, topic: str, payload: Any = None) -> None:
        """
        Invoke every handler currently registered for `topic`, in registration order.

        A handler that raises is logged and does not stop delivery to the rest.
        """
        with self._lock:
            registrations = list(self._topics.get(topic, ()))

        for registration in registrations:
            try:
                registration.handler(payload)
            except Exception:
                logger.exception("Event handler failed", extra={"topic": topic})

        self._last_update = self._clock()


class Heartbeat:
    """
    Publishes `heartbeat` every `interval_seconds` on a background daemon thread.

    Runs regardless of how many subscribers the topic has.
    """

    def __init__(
        self,
        bus: EventBus,
        interval_seconds: float = DEFAULT_HEARTBEAT_SECONDS,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._bus = bus
        self._interval = interval_seconds
        self._clock = clock
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def tick(self) -> None:
        self._bus.publish(HEARTBEAT, {"timestamp": self._clock()})

    def start(self) -> None:
        if self.is_running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="heartbeat", daemon=True)
        self._thread.start()
        logger.info("Heartbeat started", extra={"interval_seconds": self._interval})

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
            logger.info("Heartbeat stopped")

    def _run(self) -> None:
        while not self._stop.wait(self._interval):
            self.tick()


__all__ = [
    "DEFAULT_HEARTBEAT_SECONDS",
    "EventBus",
    "HEARTBEAT",
    "Heartbeat",
    "LEAD_CREATED",
    "LEAD_UPDATED",
]
