"""
Comptoir Command Layer — Command Base Contract
================================================
Every state change begins as a Command: a frozen request that the
commerce service either applies (one business event) or rejects
(one rejection event).

Command type grammar:
    <engine>.<aggregate>.<action>.request
    e.g. commerce.cash_session.open.request

Event naming law:
    accepted → COMMAND_TO_EVENT_TYPE (engines.commerce.events)
    rejected → <engine>.<aggregate>.<action>.rejected.v1
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import NamedTuple

REQUEST_SUFFIX = ".request"
REJECTION_SUFFIX = ".rejected.v1"

VALID_ACTOR_TYPES = frozenset({"HUMAN", "SYSTEM"})


# ══════════════════════════════════════════════════════════════
# COMMAND TYPE GRAMMAR
# ══════════════════════════════════════════════════════════════

class CommandTypeParts(NamedTuple):
    engine: str
    aggregate: str
    action: str

    @property
    def base(self) -> str:
        return f"{self.engine}.{self.aggregate}.{self.action}"


def parse_command_type(command_type: str) -> CommandTypeParts:
    """
    Split a command type into engine / aggregate / action.

    Raises ValueError when the suffix or the segment count is wrong.
    Aggregates may themselves be dotted (engine.a.b.action.request).
    """
    if not command_type or not isinstance(command_type, str):
        raise ValueError("command_type must be a non-empty string.")
    if not command_type.endswith(REQUEST_SUFFIX):
        raise ValueError(
            f"command_type '{command_type}' must end with "
            f"'{REQUEST_SUFFIX}' (e.g. 'commerce.payment.record.request')."
        )
    segments = command_type[: -len(REQUEST_SUFFIX)].split(".")
    if len(segments) < 3 or not all(segments):
        raise ValueError(
            f"command_type '{command_type}' must follow "
            f"engine.aggregate.action.request (minimum 4 segments)."
        )
    return CommandTypeParts(
        engine=segments[0],
        aggregate=".".join(segments[1:-1]),
        action=segments[-1],
    )


def derive_rejection_event_type(command_type: str) -> str:
    """commerce.payment.record.request → commerce.payment.record.rejected.v1"""
    return parse_command_type(command_type).base + REJECTION_SUFFIX


def derive_source_engine(command_type: str) -> str:
    """commerce.payment.record.request → commerce"""
    return parse_command_type(command_type).engine


# ══════════════════════════════════════════════════════════════
# COMMAND
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Command:
    """
    Fields:
        command_id:     UUID, echoed by the outcome and the logged event.
        command_type:   See grammar above.
        actor_type:     HUMAN | SYSTEM.
        actor_id:       user_id of the operator (or a system name).
        payload:        JSON-compatible request data.
        issued_at:      Decision timestamp; stamped into time-dependent
                        payloads so replay never reads a clock.
        correlation_id: Groups the commands of one user action.
        source_engine:  Must equal the command type's engine segment.
    """

    command_id: uuid.UUID
    command_type: str
    actor_type: str
    actor_id: str
    payload: dict
    issued_at: datetime
    correlation_id: uuid.UUID
    source_engine: str

    def __post_init__(self):
        if not isinstance(self.command_id, uuid.UUID):
            raise ValueError(
                f"command_id must be UUID, got {type(self.command_id).__name__}"
            )

        parts = parse_command_type(self.command_type)
        if parts.engine != self.source_engine:
            raise ValueError(
                f"command_type namespace '{parts.engine}' does not match "
                f"source_engine '{self.source_engine}'."
            )

        if self.actor_type not in VALID_ACTOR_TYPES:
            raise ValueError(
                f"actor_type '{self.actor_type}' not valid. "
                f"Must be one of: {sorted(VALID_ACTOR_TYPES)}"
            )
        if not self.actor_id or not isinstance(self.actor_id, str):
            raise ValueError("actor_id must be a non-empty string.")
        if not isinstance(self.payload, dict):
            raise TypeError("payload must be a dict.")
        if not isinstance(self.issued_at, datetime):
            raise ValueError("issued_at must be a datetime.")
        if not isinstance(self.correlation_id, uuid.UUID):
            raise ValueError("correlation_id must be UUID.")

    @property
    def parts(self) -> CommandTypeParts:
        return parse_command_type(self.command_type)
