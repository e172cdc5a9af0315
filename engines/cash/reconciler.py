"""
Comptoir Cash Engine — Session Reconciler
===========================================
Pure state transitions for the cash drawer session.

    open_session        → OPEN, totals at zero
    apply_cash_payment  → total_in or total_out grows (CASH method only)
    apply_cash_expense  → total_out grows (CASH method only)
    close_session       → CLOSED, theoretical balance frozen,
                          difference = actual - theoretical

A CLOSED session is terminal: every function returns it unchanged.
Guarding "only one OPEN session" is a policy concern
(see engines.cash.policies), not a reconciler concern.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Iterable, Optional, Tuple

from core.primitives.cash import CashSession, CashSessionStatus
from core.primitives.ledger import is_incoming
from core.primitives.party import PartnerType
from core.primitives.payment import Expense, Payment, PaymentMethod
from core.time.temporal import DatePeriod


def open_session(
    session_id: str,
    opening_balance: float,
    opened_at: datetime,
) -> CashSession:
    return CashSession(
        session_id=session_id,
        opened_at=opened_at,
        opening_balance=opening_balance,
    )


def apply_cash_payment(
    session: CashSession,
    payment: Payment,
    partner_type: Optional[PartnerType],
) -> CashSession:
    """
    Add a payment to the drawer totals.

    partner_type is None when the partner lookup failed; such flows
    are classified as non-client (see is_incoming).
    """
    if not session.is_open or payment.method != PaymentMethod.CASH:
        return session
    if is_incoming(partner_type, payment.nature):
        return replace(session, total_in=session.total_in + payment.amount)
    return replace(session, total_out=session.total_out + payment.amount)


def apply_cash_expense(session: CashSession, expense: Expense) -> CashSession:
    if not session.is_open or expense.method != PaymentMethod.CASH:
        return session
    return replace(session, total_out=session.total_out + expense.amount)


def close_session(
    session: CashSession,
    actual_balance: float,
    closed_at: datetime,
) -> CashSession:
    if not session.is_open:
        return session
    closing_balance = session.theoretical_balance
    return replace(
        session,
        status=CashSessionStatus.CLOSED,
        closed_at=closed_at,
        closing_balance=closing_balance,
        actual_balance=actual_balance,
        difference=actual_balance - closing_balance,
    )


def find_open_session(sessions: Iterable[CashSession]) -> Optional[CashSession]:
    for session in sessions:
        if session.is_open:
            return session
    return None


def closed_sessions_in(
    sessions: Iterable[CashSession],
    period: DatePeriod,
) -> Tuple[CashSession, ...]:
    """Closed sessions opened within the period, most recent first."""
    history = [
        s for s in sessions
        if not s.is_open and period.contains(s.opened_at)
    ]
    history.sort(key=lambda s: s.opened_at, reverse=True)
    return tuple(history)
