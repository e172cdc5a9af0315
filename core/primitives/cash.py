"""
Comptoir Cash Primitive — Cash Drawer Session
===============================================
A CashSession tracks the physical cash drawer between an explicit
open and an explicit close.

Lifecycle:
    OPEN   — totals grow with every cash payment / cash expense
    CLOSED — terminal, immutable history

RULES:
- At most one OPEN session at any time (enforced by the cash engine)
- theoretical balance = opening + total_in - total_out
- On close: closing_balance = theoretical, difference = actual - closing
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class CashSessionStatus(Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"


@dataclass(frozen=True)
class CashSession:
    session_id: str
    opened_at: datetime
    opening_balance: float
    total_in: float = 0.0
    total_out: float = 0.0
    status: CashSessionStatus = CashSessionStatus.OPEN
    closed_at: Optional[datetime] = None
    closing_balance: Optional[float] = None
    actual_balance: Optional[float] = None
    difference: Optional[float] = None

    def __post_init__(self):
        if not self.session_id or not isinstance(self.session_id, str):
            raise ValueError("session_id must be a non-empty string.")
        if not isinstance(self.opened_at, datetime):
            raise TypeError("opened_at must be a datetime.")
        if isinstance(self.opening_balance, bool) or not isinstance(
            self.opening_balance, (int, float)
        ):
            raise TypeError("opening_balance must be a number.")
        if self.opening_balance < 0:
            raise ValueError("opening_balance cannot be negative.")
        if not isinstance(self.status, CashSessionStatus):
            raise ValueError("status must be CashSessionStatus enum.")
        if self.status == CashSessionStatus.CLOSED and self.closed_at is None:
            raise ValueError("A closed session requires closed_at.")

    @property
    def is_open(self) -> bool:
        return self.status == CashSessionStatus.OPEN

    @property
    def theoretical_balance(self) -> float:
        return self.opening_balance + self.total_in - self.total_out

    def to_dict(self) -> dict:
        return {
            "session_id": self.session_id,
            "opened_at": self.opened_at.isoformat(),
            "opening_balance": self.opening_balance,
            "total_in": self.total_in,
            "total_out": self.total_out,
            "status": self.status.value,
            "closed_at": self.closed_at.isoformat() if self.closed_at else None,
            "closing_balance": self.closing_balance,
            "actual_balance": self.actual_balance,
            "difference": self.difference,
        }

    @classmethod
    def from_dict(cls, data: dict) -> CashSession:
        return cls(
            session_id=data["session_id"],
            opened_at=datetime.fromisoformat(data["opened_at"]),
            opening_balance=data["opening_balance"],
            total_in=data.get("total_in", 0.0),
            total_out=data.get("total_out", 0.0),
            status=CashSessionStatus(data.get("status", "OPEN")),
            closed_at=(
                datetime.fromisoformat(data["closed_at"])
                if data.get("closed_at") else None
            ),
            closing_balance=data.get("closing_balance"),
            actual_balance=data.get("actual_balance"),
            difference=data.get("difference"),
        )
