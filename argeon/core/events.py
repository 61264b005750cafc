"""
A minimal publish/subscribe channel between the installer and whoever displays it.
"""

import logging
from collections import defaultdict
from typing import Callable

from argeon.models.events import InstallEvent

log = logging.getLogger(__name__)

EventHandler = Callable[[InstallEvent], None]


class EventBus:
    """
    Fire-and-forget event dispatch.

    Handlers are called synchronously in subscription order. A failing handler
    is logged and skipped; it never reaches the publisher.
    """

    ALL = "*"

    def __init__(self):
        self._handlers: dict[str, list[EventHandler]] = defaultdict(list)

    def subscribe(self, event_name: str, handler: EventHandler) -> Callable[[], None]:
        """
        Registers a handler for one event name, or ``EventBus.ALL``.

        Returns:
            A callable that removes the subscription.
        """
        self._handlers[event_name].append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers[event_name]:
                self._handlers[event_name].remove(handler)

        return unsubscribe

    def publish(self, event: InstallEvent) -> None:
        handlers = [*self._handlers[event.event_name], *self._handlers[self.ALL]]
        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                log.debug(
                    f"Event handler for '{event.event_name}' raised: {e}",
                    exc_info=True,
                )


class EventRecorder:
    """Subscriber that keeps every event it sees. Handy for callers and tests."""

    def __init__(self, bus: EventBus):
        self.events: list[InstallEvent] = []
        self._unsubscribe = bus.subscribe(EventBus.ALL, self.events.append)

    def of_type(self, event_type: type[InstallEvent]) -> list[InstallEvent]:
        return [e for e in self.events if isinstance(e, event_type)]

    def close(self) -> None:
        self._unsubscribe()
