"""
Comptoir Event Layer — Dispatcher
===================================
Hands every logged event (business or rejection) to its subscribers,
type-specific ones first, then wildcard ones.

A failing subscriber is logged and reported; it never stops the
others and never undoes the event or the committed state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Tuple

from core.events.log import LedgerEvent
from core.events.registry import SubscriberRegistry

logger = logging.getLogger("comptoir.events")


@dataclass(frozen=True)
class SubscriberFailure:
    handler: str
    subscriber: str
    error: str
    error_type: str


@dataclass(frozen=True)
class DispatchReport:
    event_type: str
    sequence: int
    notified: int
    failures: Tuple[SubscriberFailure, ...] = ()

    @property
    def failed(self) -> int:
        return len(self.failures)


def dispatch(event: LedgerEvent, registry: SubscriberRegistry) -> DispatchReport:
    """Deliver one event. Never raises."""
    notified = 0
    failures: List[SubscriberFailure] = []

    for subscription in registry.subscriptions_for(event.event_type):
        try:
            subscription.handler(event)
        except Exception as exc:
            failures.append(SubscriberFailure(
                handler=subscription.handler_name,
                subscriber=subscription.subscriber_name,
                error=str(exc),
                error_type=type(exc).__name__,
            ))
            logger.error(
                f"Subscriber {subscription.subscriber_name} failed on "
                f"{event.event_type} #{event.sequence}: {exc}",
                exc_info=True,
            )
        else:
            notified += 1

    if not notified and not failures:
        logger.debug(f"No subscribers for {event.event_type} #{event.sequence}")

    return DispatchReport(
        event_type=event.event_type,
        sequence=event.sequence,
        notified=notified,
        failures=tuple(failures),
    )
