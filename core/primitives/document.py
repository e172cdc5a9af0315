"""
Comptoir Document Primitive — Sales & Purchase Documents
==========================================================
A Document is an ordered collection of LineItems plus identity
(reference, date, partner) and a lifecycle status.

Document types:
    QUOTE, ORDER                       — never enter balances or stock
    INVOICE, PURCHASE                  — ledger debits
    CREDIT_NOTE, PURCHASE_CREDIT_NOTE  — ledger credits
    DELIVERY_NOTE                      — stock only, payable

RULES:
- Totals are derived from lines, never stored
- tax = total_ttc - total_ht (never summed per line)
- DRAFT and CANCELLED documents are excluded from balances,
  statements and stock
- Amounts are positive for every type, including credit notes
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from enum import Enum
from typing import Iterable, Optional, Tuple

from core.primitives.pricing import LineTotals, compute_line, unit_price_from_ttc, ttc_unit_price


# ══════════════════════════════════════════════════════════════
# ENUMS
# ══════════════════════════════════════════════════════════════

class DocumentType(Enum):
    QUOTE = "QUOTE"
    INVOICE = "INVOICE"
    ORDER = "ORDER"
    PURCHASE = "PURCHASE"
    DELIVERY_NOTE = "DELIVERY_NOTE"
    CREDIT_NOTE = "CREDIT_NOTE"
    PURCHASE_CREDIT_NOTE = "PURCHASE_CREDIT_NOTE"


class DocumentStatus(Enum):
    DRAFT = "DRAFT"
    VALIDATED = "VALIDATED"
    UNPAID = "UNPAID"
    PAID = "PAID"
    CANCELLED = "CANCELLED"


PAYABLE_DOCUMENT_TYPES = frozenset({
    DocumentType.INVOICE,
    DocumentType.PURCHASE,
    DocumentType.DELIVERY_NOTE,
    DocumentType.CREDIT_NOTE,
    DocumentType.PURCHASE_CREDIT_NOTE,
})

# Lines on these documents are priced at product cost instead of selling price.
PURCHASE_SIDE_DOCUMENT_TYPES = frozenset({
    DocumentType.PURCHASE,
    DocumentType.ORDER,
    DocumentType.PURCHASE_CREDIT_NOTE,
})

EXCLUDED_STATUSES = frozenset({DocumentStatus.DRAFT, DocumentStatus.CANCELLED})


def _require_number(name: str, value) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"{name} must be a number.")


# ══════════════════════════════════════════════════════════════
# LINE ITEM
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class LineItem:
    """
    One sale/purchase line.

    Fields:
        line_id:      Unique within the document.
        description:  Free text (usually the product name).
        quantity:     >= 0
        unit_price:   Tax-exclusive unit price, >= 0
        discount:     Percentage, 0..100
        tax_rate:     Percentage, >= 0
        product_id:   Catalog link (optional, free-text lines allowed)
    """
    line_id: str
    description: str
    quantity: float
    unit_price: float
    discount: float = 0.0
    tax_rate: float = 0.0
    product_id: Optional[str] = None

    def __post_init__(self):
        if not self.line_id or not isinstance(self.line_id, str):
            raise ValueError("line_id must be a non-empty string.")
        for name in ("quantity", "unit_price", "discount", "tax_rate"):
            _require_number(name, getattr(self, name))
        if self.quantity < 0:
            raise ValueError("quantity cannot be negative.")
        if self.unit_price < 0:
            raise ValueError("unit_price cannot be negative.")
        if not 0 <= self.discount <= 100:
            raise ValueError(
                f"discount must be between 0 and 100, got {self.discount}."
            )
        if self.tax_rate < 0:
            raise ValueError("tax_rate cannot be negative.")

    @property
    def totals(self) -> LineTotals:
        return compute_line(
            self.quantity, self.unit_price, self.discount, self.tax_rate,
        )

    @property
    def total_ht(self) -> float:
        return self.totals.total_ht

    @property
    def total_ttc(self) -> float:
        return self.totals.total_ttc

    @property
    def ttc_unit_price(self) -> float:
        return ttc_unit_price(self.unit_price, self.tax_rate)

    def with_ttc_unit_price(self, ttc: float) -> LineItem:
        """Return a copy whose HT price is back-solved from a TTC unit price."""
        return replace(self, unit_price=unit_price_from_ttc(ttc, self.tax_rate))

    def to_dict(self) -> dict:
        return {
            "line_id": self.line_id,
            "description": self.description,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "discount": self.discount,
            "tax_rate": self.tax_rate,
            "product_id": self.product_id,
        }

    @classmethod
    def from_dict(cls, data: dict) -> LineItem:
        return cls(
            line_id=data["line_id"],
            description=data.get("description", ""),
            quantity=data["quantity"],
            unit_price=data["unit_price"],
            discount=data.get("discount", 0.0),
            tax_rate=data.get("tax_rate", 0.0),
            product_id=data.get("product_id"),
        )


# ══════════════════════════════════════════════════════════════
# DOCUMENT TOTALS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class DocumentTotals:
    total_ht: float
    tax: float
    total_ttc: float


def compute_document_totals(lines: Iterable[LineItem]) -> DocumentTotals:
    """
    Sum line totals into HT / tax / TTC.

    tax is derived as TTC - HT so no per-line rounding drift
    can accumulate. Empty input yields zeros.
    """
    total_ht = 0.0
    total_ttc = 0.0
    for line in lines:
        totals = line.totals
        total_ht += totals.total_ht
        total_ttc += totals.total_ttc
    return DocumentTotals(
        total_ht=total_ht,
        tax=total_ttc - total_ht,
        total_ttc=total_ttc,
    )


# ══════════════════════════════════════════════════════════════
# DOCUMENT
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Document:
    """
    A quote, invoice, order, purchase, delivery note or credit note.

    A document belongs to exactly one partner. partner_name is a
    display copy taken when the document is saved.
    """
    document_id: str
    document_type: DocumentType
    reference: str
    issued_on: date
    partner_id: str
    lines: Tuple[LineItem, ...] = ()
    status: DocumentStatus = DocumentStatus.DRAFT
    partner_name: str = ""
    notes: Optional[str] = None

    def __post_init__(self):
        if not self.document_id or not isinstance(self.document_id, str):
            raise ValueError("document_id must be a non-empty string.")
        if not isinstance(self.document_type, DocumentType):
            raise ValueError("document_type must be DocumentType enum.")
        if not isinstance(self.status, DocumentStatus):
            raise ValueError("status must be DocumentStatus enum.")
        if not self.reference or not isinstance(self.reference, str):
            raise ValueError("reference must be a non-empty string.")
        if isinstance(self.issued_on, datetime) or not isinstance(self.issued_on, date):
            raise TypeError("issued_on must be a date, not a datetime.")
        if not self.partner_id or not isinstance(self.partner_id, str):
            raise ValueError("partner_id must be a non-empty string.")
        if not isinstance(self.lines, tuple):
            object.__setattr__(self, "lines", tuple(self.lines))
        for line in self.lines:
            if not isinstance(line, LineItem):
                raise TypeError("lines must contain LineItem instances.")
        line_ids = [line.line_id for line in self.lines]
        if len(line_ids) != len(set(line_ids)):
            raise ValueError("line_id values must be unique within a document.")

    @property
    def totals(self) -> DocumentTotals:
        return compute_document_totals(self.lines)

    @property
    def total_ht(self) -> float:
        return self.totals.total_ht

    @property
    def tax(self) -> float:
        return self.totals.tax

    @property
    def total_ttc(self) -> float:
        return self.totals.total_ttc

    @property
    def is_payable(self) -> bool:
        return self.document_type in PAYABLE_DOCUMENT_TYPES

    @property
    def is_purchase_side(self) -> bool:
        return self.document_type in PURCHASE_SIDE_DOCUMENT_TYPES

    @property
    def counts_in_ledger(self) -> bool:
        return self.status not in EXCLUDED_STATUSES

    def with_status(self, status: DocumentStatus) -> Document:
        return replace(self, status=status)

    def to_dict(self) -> dict:
        return {
            "document_id": self.document_id,
            "document_type": self.document_type.value,
            "reference": self.reference,
            "issued_on": self.issued_on.isoformat(),
            "partner_id": self.partner_id,
            "partner_name": self.partner_name,
            "lines": [line.to_dict() for line in self.lines],
            "status": self.status.value,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Document:
        return cls(
            document_id=data["document_id"],
            document_type=DocumentType(data["document_type"]),
            reference=data["reference"],
            issued_on=date.fromisoformat(data["issued_on"]),
            partner_id=data["partner_id"],
            partner_name=data.get("partner_name", ""),
            lines=tuple(LineItem.from_dict(line) for line in data.get("lines", ())),
            status=DocumentStatus(data.get("status", DocumentStatus.DRAFT.value)),
            notes=data.get("notes"),
        )
