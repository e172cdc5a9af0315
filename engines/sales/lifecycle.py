"""
Comptoir Sales Engine — Document Lifecycle & Conversion
=========================================================
Status:
    DRAFT → VALIDATED / UNPAID / PAID → CANCELLED
    Any status may be set from any other; there is no enforced graph.

Automatic transition:
    When payments linked to a document reach its TTC total (within
    the payment tolerance), the document is forced to PAID.

Conversion:
    A new document is derived from a source document: same partner,
    same lines, new identity, draft reference, new date, DRAFT status.
    Amounts stay positive for credit-note targets.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from typing import Dict, FrozenSet, Iterable, Optional

from core.config.rules import resolve_product_tax_rate
from core.config.settings import DEFAULT_SETTINGS
from core.primitives.document import (
    PURCHASE_SIDE_DOCUMENT_TYPES,
    Document,
    DocumentStatus,
    DocumentType,
    LineItem,
)
from core.primitives.item import Product
from core.primitives.payment import Payment


# ══════════════════════════════════════════════════════════════
# CONVERSION MAP
# ══════════════════════════════════════════════════════════════

ALLOWED_CONVERSIONS: Dict[DocumentType, FrozenSet[DocumentType]] = {
    DocumentType.QUOTE: frozenset({DocumentType.INVOICE, DocumentType.DELIVERY_NOTE}),
    DocumentType.DELIVERY_NOTE: frozenset({DocumentType.INVOICE}),
    DocumentType.INVOICE: frozenset({DocumentType.CREDIT_NOTE}),
    DocumentType.PURCHASE: frozenset({DocumentType.PURCHASE_CREDIT_NOTE}),
}


def can_convert(source_type: DocumentType, target_type: DocumentType) -> bool:
    return target_type in ALLOWED_CONVERSIONS.get(source_type, frozenset())


def convert_document(
    source: Document,
    target_type: DocumentType,
    *,
    document_id: str,
    issued_on: date,
    reference: str = DEFAULT_SETTINGS.draft_reference,
) -> Document:
    """
    Derive a new document from source.

    No conversion-map check here: callers enforce ALLOWED_CONVERSIONS
    through conversion_supported_policy.
    """
    return replace(
        source,
        document_id=document_id,
        document_type=target_type,
        reference=reference,
        issued_on=issued_on,
        status=DocumentStatus.DRAFT,
    )


def set_status(document: Document, status: DocumentStatus) -> Document:
    """Any status may follow any other, CANCELLED and PAID included."""
    return document.with_status(status)


# ══════════════════════════════════════════════════════════════
# PAYMENT PROGRESS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class PaymentProgress:
    total_ttc: float
    paid: float
    remaining: float
    ratio: float

    @property
    def is_settled(self) -> bool:
        return self.remaining <= 0


def amount_paid(document: Document, payments: Iterable[Payment]) -> float:
    """Σ amounts of every payment linked to the document."""
    return sum(
        (p.amount for p in payments if p.document_id == document.document_id),
        0.0,
    )


def remaining_due(document: Document, payments: Iterable[Payment]) -> float:
    return document.total_ttc - amount_paid(document, payments)


def payment_progress(document: Document, payments: Iterable[Payment]) -> PaymentProgress:
    total_ttc = document.total_ttc
    paid = amount_paid(document, payments)
    ratio = 1.0 if total_ttc <= 0 else min(paid / total_ttc, 1.0)
    return PaymentProgress(
        total_ttc=total_ttc,
        paid=paid,
        remaining=max(total_ttc - paid, 0.0),
        ratio=ratio,
    )


def is_fully_paid(
    document: Document,
    payments: Iterable[Payment],
    tolerance: float = DEFAULT_SETTINGS.payment_tolerance,
) -> bool:
    return amount_paid(document, payments) >= document.total_ttc - tolerance


def settle_if_fully_paid(
    document: Document,
    payments: Iterable[Payment],
    tolerance: float = DEFAULT_SETTINGS.payment_tolerance,
) -> Document:
    """Force PAID when linked payments cover the TTC total."""
    if document.status == DocumentStatus.PAID:
        return document
    if is_fully_paid(document, payments, tolerance):
        return document.with_status(DocumentStatus.PAID)
    return document


# ══════════════════════════════════════════════════════════════
# LINE PRICING FROM CATALOG
# ══════════════════════════════════════════════════════════════

def line_for_product(
    line_id: str,
    product: Product,
    document_type: DocumentType,
    *,
    quantity: float = 1,
    discount: float = 0.0,
    default_tax_rate: float = DEFAULT_SETTINGS.default_tax_rate,
) -> LineItem:
    """
    New line for a picked product.

    Purchase-side documents are priced at cost, sales-side at the
    selling price.
    """
    unit_price = (
        product.cost
        if document_type in PURCHASE_SIDE_DOCUMENT_TYPES
        else product.price
    )
    return LineItem(
        line_id=line_id,
        description=product.name,
        quantity=quantity,
        unit_price=unit_price,
        discount=discount,
        tax_rate=resolve_product_tax_rate(product, default_tax_rate),
        product_id=product.product_id,
    )


def find_document(
    documents: Iterable[Document], document_id: str,
) -> Optional[Document]:
    for document in documents:
        if document.document_id == document_id:
            return document
    return None
