"""
Comptoir Event Layer — In-Memory Event Log
============================================
One total-order, append-only log of everything that happened.

Every accepted command appends exactly one business event; every
rejected command appends one rejection event. The log is the audit
trail and the replay source: folding its events through the reducer
from the empty state reproduces the live state.

This module does NOT:
- Persist anything (durability is out of scope)
- Interpret payload meaning
- Dispatch to subscribers
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterator, List, Optional, Tuple


# ══════════════════════════════════════════════════════════════
# EVENT ENVELOPE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class LedgerEvent:
    """
    Immutable event envelope.

    Fields:
        sequence:       1-based position in the log.
        event_type:     engine.domain.action.vN
        payload:        Business data (JSON-compatible dict).
        occurred_at:    When the event was appended.
        actor_id:       Who caused it.
        command_id:     Originating command.
        correlation_id: Story grouping.
        event_id:       Unique identifier.
    """
    sequence: int
    event_type: str
    payload: dict
    occurred_at: datetime
    actor_id: str
    command_id: Optional[uuid.UUID] = None
    correlation_id: Optional[uuid.UUID] = None
    event_id: uuid.UUID = field(default_factory=uuid.uuid4)

    def __post_init__(self):
        if not isinstance(self.sequence, int) or self.sequence < 1:
            raise ValueError("sequence must be a positive integer.")
        if not self.event_type or not isinstance(self.event_type, str):
            raise ValueError("event_type must be a non-empty string.")
        if not isinstance(self.payload, dict):
            raise TypeError("payload must be a dict.")

    @property
    def is_rejection(self) -> bool:
        return ".rejected." in self.event_type

    def to_dict(self) -> dict:
        return {
            "event_id": str(self.event_id),
            "sequence": self.sequence,
            "event_type": self.event_type,
            "payload": self.payload,
            "occurred_at": self.occurred_at.isoformat(),
            "actor_id": self.actor_id,
            "command_id": str(self.command_id) if self.command_id else None,
            "correlation_id": (
                str(self.correlation_id) if self.correlation_id else None
            ),
        }


# ══════════════════════════════════════════════════════════════
# EVENT LOG
# ══════════════════════════════════════════════════════════════

class EventLog:
    """Append-only, in-memory, strictly ordered."""

    def __init__(self):
        self._events: List[LedgerEvent] = []

    def append(
        self,
        *,
        event_type: str,
        payload: dict,
        occurred_at: datetime,
        actor_id: str,
        command_id: Optional[uuid.UUID] = None,
        correlation_id: Optional[uuid.UUID] = None,
    ) -> LedgerEvent:
        event = LedgerEvent(
            sequence=len(self._events) + 1,
            event_type=event_type,
            payload=payload,
            occurred_at=occurred_at,
            actor_id=actor_id,
            command_id=command_id,
            correlation_id=correlation_id,
        )
        self._events.append(event)
        return event

    def __iter__(self) -> Iterator[LedgerEvent]:
        return iter(tuple(self._events))

    def __len__(self) -> int:
        return len(self._events)

    @property
    def last_sequence(self) -> int:
        return len(self._events)

    def events(self, *, include_rejections: bool = True) -> Tuple[LedgerEvent, ...]:
        if include_rejections:
            return tuple(self._events)
        return tuple(e for e in self._events if not e.is_rejection)

    def since(self, sequence: int) -> Tuple[LedgerEvent, ...]:
        """Events strictly after the given sequence number."""
        return tuple(self._events[max(sequence, 0):])

    def of_type(self, event_type: str) -> Tuple[LedgerEvent, ...]:
        return tuple(e for e in self._events if e.event_type == event_type)
