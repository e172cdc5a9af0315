"""
Comptoir Command Layer — Public API
=====================================
Commands in, outcomes out. A REJECTED command is recorded in the
event log just like an accepted one.
"""

from core.commands.base import (
    Command,
    CommandTypeParts,
    VALID_ACTOR_TYPES,
    derive_rejection_event_type,
    derive_source_engine,
    parse_command_type,
)
from core.commands.outcomes import (
    CommandOutcome,
    CommandStatus,
)
from core.commands.rejection import (
    ReasonCode,
    RejectionReason,
)

__all__ = [
    "Command",
    "CommandTypeParts",
    "VALID_ACTOR_TYPES",
    "parse_command_type",
    "derive_rejection_event_type",
    "derive_source_engine",
    "CommandOutcome",
    "CommandStatus",
    "RejectionReason",
    "ReasonCode",
]
