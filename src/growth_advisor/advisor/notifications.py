"""Notification sinks the advisor emits events to."""

import logging
from collections import deque
from typing import Deque, List, Protocol

from ..models import NotificationEvent


logger = logging.getLogger(__name__)


class NotificationSink(Protocol):
    """Fire-and-forget receiver of notification events."""

    def emit(self, event: NotificationEvent) -> None:
        ...


class InMemoryNotificationSink:
    """Keeps the most recent events, newest first."""

    def __init__(self, max_events: int = 50):
        self._events: Deque[NotificationEvent] = deque(maxlen=max_events)

    def emit(self, event: NotificationEvent) -> None:
        self._events.appendleft(event)

    @property
    def events(self) -> List[NotificationEvent]:
        return list(self._events)

    def clear(self):
        self._events.clear()


class LoggingNotificationSink:
    """Writes events to the log."""

    def emit(self, event: NotificationEvent) -> None:
        logger.info(
            f"{event.title}: {event.message}",
            extra={
                "kind": event.kind.value,
                "category": event.category.value,
                "link_ref": event.link_ref,
            }
        )
