"""
Comptoir Command Layer — Command Outcome
==========================================
What CommerceService.handle returns for every command.

    ACCEPTED → state committed, business event logged
    REJECTED → state untouched, rejection event logged, reason set

Either way the outcome points at the logged event (event_type,
sequence) so callers can correlate it with the audit trail.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from core.commands.rejection import RejectionReason


class CommandStatus(Enum):
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


@dataclass(frozen=True)
class CommandOutcome:
    command_id: uuid.UUID
    status: CommandStatus
    reason: Optional[RejectionReason]
    occurred_at: datetime
    event_type: Optional[str] = None
    sequence: Optional[int] = None

    def __post_init__(self):
        if not isinstance(self.command_id, uuid.UUID):
            raise ValueError("command_id must be UUID.")
        if not isinstance(self.status, CommandStatus):
            raise ValueError(
                f"status must be CommandStatus, got {type(self.status).__name__}."
            )
        if not isinstance(self.occurred_at, datetime):
            raise ValueError("occurred_at must be a datetime.")

        has_reason = self.reason is not None
        if self.status == CommandStatus.REJECTED and not has_reason:
            raise ValueError(
                "REJECTED outcome needs a RejectionReason. No silent rejections."
            )
        if self.status == CommandStatus.ACCEPTED and has_reason:
            raise ValueError("ACCEPTED outcome must NOT carry a RejectionReason.")

    @property
    def is_accepted(self) -> bool:
        return self.status == CommandStatus.ACCEPTED

    @property
    def is_rejected(self) -> bool:
        return self.status == CommandStatus.REJECTED

    @property
    def reason_code(self) -> Optional[str]:
        return self.reason.code if self.reason is not None else None

    @classmethod
    def accepted(
        cls,
        command_id: uuid.UUID,
        occurred_at: datetime,
        *,
        event_type: Optional[str] = None,
        sequence: Optional[int] = None,
    ) -> CommandOutcome:
        return cls(command_id, CommandStatus.ACCEPTED, None, occurred_at, event_type, sequence)

    @classmethod
    def rejected(
        cls,
        command_id: uuid.UUID,
        occurred_at: datetime,
        reason: RejectionReason,
        *,
        event_type: Optional[str] = None,
        sequence: Optional[int] = None,
    ) -> CommandOutcome:
        return cls(command_id, CommandStatus.REJECTED, reason, occurred_at, event_type, sequence)
