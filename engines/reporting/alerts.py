"""
Comptoir Reporting Engine — Dashboard & Check Alerts
======================================================
Read-only aggregates over the ledger state for the home dashboard
and the check tracking screen. Nothing here changes state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from core.config.settings import DEFAULT_SETTINGS
from core.primitives.document import Document, DocumentStatus, DocumentType
from core.primitives.item import Product
from core.primitives.party import Partner, PartnerType
from core.primitives.payment import Payment


UNPAID_STATUSES = frozenset({DocumentStatus.UNPAID, DocumentStatus.VALIDATED})


# ══════════════════════════════════════════════════════════════
# ALERT LISTS
# ══════════════════════════════════════════════════════════════

def pending_checks(
    payments: Iterable[Payment],
    limit: Optional[int] = DEFAULT_SETTINGS.alert_limit,
) -> Tuple[Payment, ...]:
    """Pending checks, earliest due date first."""
    checks = sorted(
        (p for p in payments if p.is_pending_check),
        key=lambda p: p.tracking_date,
    )
    return tuple(checks[:limit] if limit is not None else checks)


def unpaid_invoices(
    documents: Iterable[Document],
    limit: Optional[int] = DEFAULT_SETTINGS.alert_limit,
) -> Tuple[Document, ...]:
    """Validated or unpaid invoices, oldest first."""
    invoices = sorted(
        (
            d for d in documents
            if d.document_type == DocumentType.INVOICE
            and d.status in UNPAID_STATUSES
        ),
        key=lambda d: d.issued_on,
    )
    return tuple(invoices[:limit] if limit is not None else invoices)


# ══════════════════════════════════════════════════════════════
# CHECK SUMMARY
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class CheckSummary:
    pending_count: int
    to_collect: float
    to_pay: float


def check_summary(
    payments: Iterable[Payment],
    partners: Iterable[Partner],
) -> CheckSummary:
    """
    Pending checks split by direction.

    Checks from clients are to collect, checks to suppliers are to pay.
    Checks whose partner cannot be found are counted but not split.
    """
    partner_types = {p.partner_id: p.partner_type for p in partners}
    count = 0
    to_collect = 0.0
    to_pay = 0.0
    for payment in payments:
        if not payment.is_pending_check:
            continue
        count += 1
        partner_type = partner_types.get(payment.partner_id)
        if partner_type == PartnerType.CLIENT:
            to_collect += payment.amount
        elif partner_type == PartnerType.SUPPLIER:
            to_pay += payment.amount
    return CheckSummary(pending_count=count, to_collect=to_collect, to_pay=to_pay)


# ══════════════════════════════════════════════════════════════
# DASHBOARD
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class DashboardSnapshot:
    sales_total: float
    stock_value: float
    low_stock_count: int
    pending_checks: Tuple[Payment, ...]
    unpaid_invoices: Tuple[Document, ...]


def sales_total(documents: Iterable[Document]) -> float:
    """Σ TTC of invoices counting in the ledger."""
    return sum(
        (
            d.total_ttc for d in documents
            if d.document_type == DocumentType.INVOICE and d.counts_in_ledger
        ),
        0.0,
    )


def stock_value(products: Iterable[Product]) -> float:
    return sum((p.stock_value for p in products), 0.0)


def low_stock_products(products: Iterable[Product]) -> Tuple[Product, ...]:
    return tuple(p for p in products if p.is_low_stock)


def build_dashboard(
    documents: Iterable[Document],
    products: Iterable[Product],
    payments: Iterable[Payment],
    limit: int = DEFAULT_SETTINGS.alert_limit,
) -> DashboardSnapshot:
    documents = tuple(documents)
    products = tuple(products)
    return DashboardSnapshot(
        sales_total=sales_total(documents),
        stock_value=stock_value(products),
        low_stock_count=len(low_stock_products(products)),
        pending_checks=pending_checks(payments, limit),
        unpaid_invoices=unpaid_invoices(documents, limit),
    )
