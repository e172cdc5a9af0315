"""
Comptoir Event Layer — Subscriber Registry
============================================
Which callables hear which logged events (reports, audit trails,
UI refresh hooks).

    registry.register_subscriber("commerce.payment.recorded.v1", handler, "reports")
    registry.register_subscriber(ALL_EVENTS, handler, "audit")

Event types follow engine.aggregate.action.vN. The same handler may
not be registered twice for one event type.
"""

from __future__ import annotations

import logging
import re
from threading import Lock
from typing import Callable, List, NamedTuple, Tuple

from core.events.errors import (
    DuplicateSubscriberError,
    EventBusError,
    InvalidEventTypeFormat,
)

logger = logging.getLogger("comptoir.events")

ALL_EVENTS = "*"

EVENT_TYPE_PATTERN = re.compile(r"^[a-z_]+(\.[a-z_]+){2,}\.v\d+$")


def is_valid_event_type(event_type) -> bool:
    return isinstance(event_type, str) and bool(EVENT_TYPE_PATTERN.match(event_type))


class Subscription(NamedTuple):
    event_type: str
    handler: Callable
    subscriber_name: str

    @property
    def handler_name(self) -> str:
        return getattr(self.handler, "__qualname__", repr(self.handler))


class SubscriberRegistry:
    """In-memory, registration order preserved."""

    def __init__(self):
        self._subscriptions: List[Subscription] = []
        self._lock = Lock()

    def register_subscriber(
        self,
        event_type: str,
        handler: Callable,
        subscriber_name: str,
    ) -> Subscription:
        if event_type != ALL_EVENTS and not is_valid_event_type(event_type):
            raise InvalidEventTypeFormat(event_type or "")
        if not callable(handler):
            raise EventBusError(f"Handler must be callable, got {type(handler)}.")

        subscription = Subscription(event_type, handler, subscriber_name)
        with self._lock:
            if any(
                s.event_type == event_type and s.handler is handler
                for s in self._subscriptions
            ):
                raise DuplicateSubscriberError(event_type, subscription.handler_name)
            self._subscriptions.append(subscription)

        logger.info(
            f"Subscriber registered: {subscription.handler_name} → {event_type} "
            f"(subscriber: {subscriber_name})"
        )
        return subscription

    def subscriptions_for(self, event_type: str) -> Tuple[Subscription, ...]:
        """Type-specific subscriptions, then wildcard ones."""
        with self._lock:
            snapshot = tuple(self._subscriptions)
        return (
            tuple(s for s in snapshot if s.event_type == event_type)
            + tuple(s for s in snapshot if s.event_type == ALL_EVENTS)
        )

    def get_subscribers(self, event_type: str) -> List[Tuple[Callable, str]]:
        return [(s.handler, s.subscriber_name) for s in self.subscriptions_for(event_type)]

    def has_subscribers(self, event_type: str) -> bool:
        return bool(self.subscriptions_for(event_type))

    def subscriber_count(self, event_type: str) -> int:
        return len(self.subscriptions_for(event_type))
