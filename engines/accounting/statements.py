"""
Comptoir Accounting Engine — Partner Balances & Statements
============================================================
Turns a partner's documents and payments into a balance and a
dated statement with a running balance.

Balance formula:
    invoiced = Σ TTC of INVOICE / PURCHASE
    credits  = Σ TTC of CREDIT_NOTE / PURCHASE_CREDIT_NOTE
    paid     = Σ amount of every payment of the partner
    balance  = initial_balance + invoiced - (paid + credits)

Only documents counting in the ledger (not DRAFT, not CANCELLED) are
used. Payments are summed regardless of nature or check status.
Positive balance = the partner owes the business.

Statement over [start, end]:
    opening  = balance using entries dated strictly before start
    lines    = entries dated within [start, end], end day inclusive,
               stable-sorted by date (same-day order: invoices,
               credit notes, then payments)
    running  = opening, then += debit - credit per line

Consistency law: a statement starting before the first entry closes
at current_balance(..., as_of=end).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

from core.primitives.document import Document, DocumentType
from core.primitives.ledger import DebitCredit, ledger_side
from core.primitives.party import Partner
from core.primitives.payment import Payment
from core.time.temporal import DatePeriod


DOCUMENT_LABELS: Dict[DocumentType, str] = {
    DocumentType.INVOICE: "Invoice",
    DocumentType.PURCHASE: "Purchase invoice",
    DocumentType.CREDIT_NOTE: "Credit note",
    DocumentType.PURCHASE_CREDIT_NOTE: "Purchase credit note",
}


# ══════════════════════════════════════════════════════════════
# LEDGER ENTRIES
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class LedgerEntry:
    """One debit or credit movement in a partner ledger."""
    source_id: str
    entry_date: date
    reference: str
    label: str
    debit: float = 0.0
    credit: float = 0.0


def ledger_entries(
    partner_id: str,
    documents: Iterable[Document],
    payments: Iterable[Payment],
) -> List[LedgerEntry]:
    """
    All ledger entries of a partner, in tie-break order:
    debit documents, credit documents, payments.
    """
    debits: List[LedgerEntry] = []
    credits: List[LedgerEntry] = []
    for document in documents:
        if document.partner_id != partner_id or not document.counts_in_ledger:
            continue
        side = ledger_side(document.document_type)
        if side is None:
            continue
        amount = document.total_ttc
        entry = LedgerEntry(
            source_id=document.document_id,
            entry_date=document.issued_on,
            reference=document.reference,
            label=DOCUMENT_LABELS[document.document_type],
            debit=amount if side == DebitCredit.DEBIT else 0.0,
            credit=amount if side == DebitCredit.CREDIT else 0.0,
        )
        if side == DebitCredit.DEBIT:
            debits.append(entry)
        else:
            credits.append(entry)

    settlements = [
        LedgerEntry(
            source_id=payment.payment_id,
            entry_date=payment.paid_on,
            reference=payment.reference or "-",
            label=f"Payment ({payment.method.value})",
            credit=payment.amount,
        )
        for payment in payments
        if payment.partner_id == partner_id
    ]
    return debits + credits + settlements


def _balance_of(initial_balance: float, entries: Iterable[LedgerEntry]) -> float:
    total_debit = 0.0
    total_credit = 0.0
    for entry in entries:
        total_debit += entry.debit
        total_credit += entry.credit
    return initial_balance + total_debit - total_credit


# ══════════════════════════════════════════════════════════════
# BALANCE
# ══════════════════════════════════════════════════════════════

def current_balance(
    partner: Partner,
    documents: Iterable[Document],
    payments: Iterable[Payment],
    as_of: Optional[date] = None,
) -> float:
    """Partner balance, optionally cut off at the end of as_of."""
    entries = ledger_entries(partner.partner_id, documents, payments)
    if as_of is not None:
        entries = [e for e in entries if e.entry_date <= as_of]
    return _balance_of(partner.initial_balance, entries)


def balances_by_partner(
    partners: Iterable[Partner],
    documents: Iterable[Document],
    payments: Iterable[Payment],
) -> Dict[str, float]:
    documents = tuple(documents)
    payments = tuple(payments)
    return {
        partner.partner_id: current_balance(partner, documents, payments)
        for partner in partners
    }


# ══════════════════════════════════════════════════════════════
# STATEMENT
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class StatementLine:
    source_id: str
    entry_date: date
    reference: str
    label: str
    debit: float
    credit: float
    balance: float


@dataclass(frozen=True)
class PartnerStatement:
    partner_id: str
    partner_name: str
    period: DatePeriod
    opening_balance: float
    lines: Tuple[StatementLine, ...]
    total_debit: float
    total_credit: float
    closing_balance: float

    def to_dict(self) -> dict:
        return {
            "partner_id": self.partner_id,
            "partner_name": self.partner_name,
            "period_start": self.period.start.isoformat(),
            "period_end": self.period.end.isoformat(),
            "opening_balance": self.opening_balance,
            "lines": [
                {
                    "source_id": line.source_id,
                    "date": line.entry_date.isoformat(),
                    "reference": line.reference,
                    "label": line.label,
                    "debit": line.debit,
                    "credit": line.credit,
                    "balance": line.balance,
                }
                for line in self.lines
            ],
            "total_debit": self.total_debit,
            "total_credit": self.total_credit,
            "closing_balance": self.closing_balance,
        }


def build_statement(
    partner: Partner,
    documents: Iterable[Document],
    payments: Iterable[Payment],
    period: DatePeriod,
) -> PartnerStatement:
    entries = ledger_entries(partner.partner_id, documents, payments)

    opening_balance = _balance_of(
        partner.initial_balance,
        (e for e in entries if period.is_before(e.entry_date)),
    )

    in_period = [e for e in entries if period.contains(e.entry_date)]
    in_period.sort(key=lambda e: e.entry_date)

    running = opening_balance
    total_debit = 0.0
    total_credit = 0.0
    lines: List[StatementLine] = []
    for entry in in_period:
        running += entry.debit - entry.credit
        total_debit += entry.debit
        total_credit += entry.credit
        lines.append(StatementLine(
            source_id=entry.source_id,
            entry_date=entry.entry_date,
            reference=entry.reference,
            label=entry.label,
            debit=entry.debit,
            credit=entry.credit,
            balance=running,
        ))

    return PartnerStatement(
        partner_id=partner.partner_id,
        partner_name=partner.name,
        period=period,
        opening_balance=opening_balance,
        lines=tuple(lines),
        total_debit=total_debit,
        total_credit=total_credit,
        closing_balance=running,
    )
