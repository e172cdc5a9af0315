"""
Comptoir Payment Primitive — Payments & Expenses
==================================================
A Payment settles (or refunds) money with one partner, optionally
against one document. An Expense is money spent outside any partner
ledger (rent, fuel, supplies).

RULES:
- amount > 0 for both (direction comes from nature / partner type)
- A CHECK payment requires a due_date
- Checks start PENDING; every other method starts CLEARED
- Check status moves freely between PENDING, CLEARED and REJECTED
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from enum import Enum
from typing import Optional


# ══════════════════════════════════════════════════════════════
# ENUMS
# ══════════════════════════════════════════════════════════════

class PaymentMethod(Enum):
    CASH = "CASH"
    CHECK = "CHECK"
    TRANSFER = "TRANSFER"
    CARD = "CARD"


class PaymentNature(Enum):
    PAYMENT = "PAYMENT"
    REFUND = "REFUND"


class PaymentStatus(Enum):
    PENDING = "PENDING"
    CLEARED = "CLEARED"
    REJECTED = "REJECTED"


def _require_positive_amount(amount) -> None:
    if isinstance(amount, bool) or not isinstance(amount, (int, float)):
        raise TypeError("amount must be a number.")
    if amount <= 0:
        raise ValueError(f"amount must be positive, got {amount}.")


def _is_day(value) -> bool:
    return isinstance(value, date) and not isinstance(value, datetime)


# ══════════════════════════════════════════════════════════════
# PAYMENT
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Payment:
    payment_id: str
    partner_id: str
    amount: float
    paid_on: date
    method: PaymentMethod
    nature: PaymentNature = PaymentNature.PAYMENT
    status: PaymentStatus = PaymentStatus.CLEARED
    document_id: Optional[str] = None
    due_date: Optional[date] = None
    reference: Optional[str] = None
    note: Optional[str] = None

    def __post_init__(self):
        if not self.payment_id or not isinstance(self.payment_id, str):
            raise ValueError("payment_id must be a non-empty string.")
        if not self.partner_id or not isinstance(self.partner_id, str):
            raise ValueError("partner_id must be a non-empty string.")
        _require_positive_amount(self.amount)
        if not _is_day(self.paid_on):
            raise TypeError("paid_on must be a date, not a datetime.")
        if not isinstance(self.method, PaymentMethod):
            raise ValueError("method must be PaymentMethod enum.")
        if not isinstance(self.nature, PaymentNature):
            raise ValueError("nature must be PaymentNature enum.")
        if not isinstance(self.status, PaymentStatus):
            raise ValueError("status must be PaymentStatus enum.")
        if self.method == PaymentMethod.CHECK and self.due_date is None:
            raise ValueError("A check payment requires a due_date.")
        if self.due_date is not None and not _is_day(self.due_date):
            raise TypeError("due_date must be a date, not a datetime.")

    @classmethod
    def create(
        cls,
        *,
        payment_id: str,
        partner_id: str,
        amount: float,
        paid_on: date,
        method: PaymentMethod,
        nature: PaymentNature = PaymentNature.PAYMENT,
        document_id: Optional[str] = None,
        due_date: Optional[date] = None,
        reference: Optional[str] = None,
        note: Optional[str] = None,
    ) -> Payment:
        """New payment with its initial status derived from the method."""
        status = (
            PaymentStatus.PENDING
            if method == PaymentMethod.CHECK
            else PaymentStatus.CLEARED
        )
        return cls(
            payment_id=payment_id,
            partner_id=partner_id,
            amount=amount,
            paid_on=paid_on,
            method=method,
            nature=nature,
            status=status,
            document_id=document_id,
            due_date=due_date,
            reference=reference,
            note=note,
        )

    @property
    def is_check(self) -> bool:
        return self.method == PaymentMethod.CHECK

    @property
    def is_pending_check(self) -> bool:
        return self.is_check and self.status == PaymentStatus.PENDING

    @property
    def tracking_date(self) -> date:
        """Date a check is expected to clear (payment date when absent)."""
        return self.due_date or self.paid_on

    def with_status(self, status: PaymentStatus) -> Payment:
        return replace(self, status=status)

    def to_dict(self) -> dict:
        return {
            "payment_id": self.payment_id,
            "partner_id": self.partner_id,
            "amount": self.amount,
            "paid_on": self.paid_on.isoformat(),
            "method": self.method.value,
            "nature": self.nature.value,
            "status": self.status.value,
            "document_id": self.document_id,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "reference": self.reference,
            "note": self.note,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Payment:
        return cls(
            payment_id=data["payment_id"],
            partner_id=data["partner_id"],
            amount=data["amount"],
            paid_on=date.fromisoformat(data["paid_on"]),
            method=PaymentMethod(data["method"]),
            nature=PaymentNature(data.get("nature", PaymentNature.PAYMENT.value)),
            status=PaymentStatus(data.get("status", PaymentStatus.CLEARED.value)),
            document_id=data.get("document_id"),
            due_date=(
                date.fromisoformat(data["due_date"])
                if data.get("due_date") else None
            ),
            reference=data.get("reference"),
            note=data.get("note"),
        )


# ══════════════════════════════════════════════════════════════
# EXPENSE
# ══════════════════════════════════════════════════════════════

EXPENSE_CATEGORIES = (
    "RENT",
    "ELECTRICITY",
    "WATER",
    "INTERNET",
    "TRANSPORT",
    "SALARIES",
    "SUPPLIES",
    "MEALS",
    "MARKETING",
    "OTHER",
)


@dataclass(frozen=True)
class Expense:
    """Money spent outside any partner ledger. Immutable; only deletable."""
    expense_id: str
    amount: float
    spent_on: date
    method: PaymentMethod
    category: str = "OTHER"
    description: Optional[str] = None

    def __post_init__(self):
        if not self.expense_id or not isinstance(self.expense_id, str):
            raise ValueError("expense_id must be a non-empty string.")
        _require_positive_amount(self.amount)
        if not _is_day(self.spent_on):
            raise TypeError("spent_on must be a date, not a datetime.")
        if not isinstance(self.method, PaymentMethod):
            raise ValueError("method must be PaymentMethod enum.")
        if self.category not in EXPENSE_CATEGORIES:
            raise ValueError(
                f"category '{self.category}' not valid. "
                f"Must be one of: {list(EXPENSE_CATEGORIES)}"
            )

    def to_dict(self) -> dict:
        return {
            "expense_id": self.expense_id,
            "amount": self.amount,
            "spent_on": self.spent_on.isoformat(),
            "method": self.method.value,
            "category": self.category,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Expense:
        return cls(
            expense_id=data["expense_id"],
            amount=data["amount"],
            spent_on=date.fromisoformat(data["spent_on"]),
            method=PaymentMethod(data["method"]),
            category=data.get("category", "OTHER"),
            description=data.get("description"),
        )
