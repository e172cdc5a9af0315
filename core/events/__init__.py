"""
Comptoir Event Layer — Public API
===================================
The event log records what happened; the dispatcher tells
subscribers about it afterwards.
"""

from core.events.dispatcher import DispatchReport, SubscriberFailure, dispatch
from core.events.errors import (
    DuplicateSubscriberError,
    EventBusError,
    InvalidEventTypeFormat,
    UnknownEventTypeError,
)
from core.events.log import EventLog, LedgerEvent
from core.events.registry import ALL_EVENTS, SubscriberRegistry, Subscription

__all__ = [
    "dispatch",
    "DispatchReport",
    "SubscriberFailure",
    "EventLog",
    "LedgerEvent",
    "SubscriberRegistry",
    "Subscription",
    "ALL_EVENTS",
    "EventBusError",
    "InvalidEventTypeFormat",
    "DuplicateSubscriberError",
    "UnknownEventTypeError",
]
