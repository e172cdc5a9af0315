"""
Comptoir Inventory Primitive — Stock Journal & Inventory Counts
=================================================================
Two read/adjust views over stock:

1. Stock journal: every non-draft, non-cancelled document line that
   references a product becomes one StockMovement.
       IN   — PURCHASE, CREDIT_NOTE (goods back from a client)
       OUT  — DELIVERY_NOTE, PURCHASE_CREDIT_NOTE (goods back to a supplier)
   Invoices are excluded (goods leave with the delivery note).

2. Inventory counts: a physical count compares expected and counted
   quantities per product. Validating the count sets each product's
   stock to the counted quantity.

This file contains NO persistence logic.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from core.primitives.document import Document, DocumentType
from core.primitives.item import Product
from core.time.temporal import DatePeriod


# ══════════════════════════════════════════════════════════════
# STOCK JOURNAL
# ══════════════════════════════════════════════════════════════

class StockDirection(Enum):
    IN = "IN"
    OUT = "OUT"


MOVEMENT_DIRECTION: Dict[DocumentType, StockDirection] = {
    DocumentType.PURCHASE: StockDirection.IN,
    DocumentType.CREDIT_NOTE: StockDirection.IN,
    DocumentType.DELIVERY_NOTE: StockDirection.OUT,
    DocumentType.PURCHASE_CREDIT_NOTE: StockDirection.OUT,
}


@dataclass(frozen=True)
class StockMovement:
    document_id: str
    reference: str
    document_type: DocumentType
    partner_name: str
    product_id: str
    description: str
    quantity: float
    direction: StockDirection
    moved_on: date

    @property
    def signed_quantity(self) -> float:
        if self.direction == StockDirection.IN:
            return self.quantity
        return -self.quantity


def stock_movements(
    documents: Iterable[Document],
    period: Optional[DatePeriod] = None,
) -> Tuple[StockMovement, ...]:
    """
    Stock journal over an optional period, newest first.

    Lines without a product are not stock-tracked and are skipped.
    """
    movements: List[StockMovement] = []
    for document in documents:
        if not document.counts_in_ledger:
            continue
        direction = MOVEMENT_DIRECTION.get(document.document_type)
        if direction is None:
            continue
        if period is not None and not period.contains(document.issued_on):
            continue
        for line in document.lines:
            if line.product_id is None:
                continue
            movements.append(StockMovement(
                document_id=document.document_id,
                reference=document.reference,
                document_type=document.document_type,
                partner_name=document.partner_name,
                product_id=line.product_id,
                description=line.description,
                quantity=line.quantity,
                direction=direction,
                moved_on=document.issued_on,
            ))
    movements.sort(key=lambda m: m.moved_on, reverse=True)
    return tuple(movements)


def net_stock_flow(movements: Iterable[StockMovement]) -> Dict[str, float]:
    """product_id → signed quantity moved."""
    flow: Dict[str, float] = {}
    for movement in movements:
        flow[movement.product_id] = (
            flow.get(movement.product_id, 0.0) + movement.signed_quantity
        )
    return flow


# ══════════════════════════════════════════════════════════════
# INVENTORY COUNT
# ══════════════════════════════════════════════════════════════

class InventoryCountStatus(Enum):
    DRAFT = "DRAFT"
    VALIDATED = "VALIDATED"


@dataclass(frozen=True)
class InventoryCountLine:
    product_id: str
    expected: float
    counted: float

    def __post_init__(self):
        if not self.product_id or not isinstance(self.product_id, str):
            raise ValueError("product_id must be a non-empty string.")
        if self.counted < 0:
            raise ValueError("counted quantity cannot be negative.")

    @property
    def difference(self) -> float:
        return self.counted - self.expected

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "expected": self.expected,
            "counted": self.counted,
        }

    @classmethod
    def from_dict(cls, data: dict) -> InventoryCountLine:
        return cls(
            product_id=data["product_id"],
            expected=data["expected"],
            counted=data["counted"],
        )


@dataclass(frozen=True)
class InventoryCount:
    count_id: str
    counted_on: date
    lines: Tuple[InventoryCountLine, ...] = ()
    status: InventoryCountStatus = InventoryCountStatus.DRAFT
    note: Optional[str] = None

    def __post_init__(self):
        if not self.count_id or not isinstance(self.count_id, str):
            raise ValueError("count_id must be a non-empty string.")
        if not isinstance(self.counted_on, date):
            raise TypeError("counted_on must be a date.")
        if not isinstance(self.status, InventoryCountStatus):
            raise ValueError("status must be InventoryCountStatus enum.")
        if not isinstance(self.lines, tuple):
            object.__setattr__(self, "lines", tuple(self.lines))
        product_ids = [line.product_id for line in self.lines]
        if len(product_ids) != len(set(product_ids)):
            raise ValueError("A product may appear only once per count.")

    @property
    def is_validated(self) -> bool:
        return self.status == InventoryCountStatus.VALIDATED

    @property
    def total_difference(self) -> float:
        return sum(line.difference for line in self.lines)

    def to_dict(self) -> dict:
        return {
            "count_id": self.count_id,
            "counted_on": self.counted_on.isoformat(),
            "lines": [line.to_dict() for line in self.lines],
            "status": self.status.value,
            "note": self.note,
        }

    @classmethod
    def from_dict(cls, data: dict) -> InventoryCount:
        return cls(
            count_id=data["count_id"],
            counted_on=date.fromisoformat(data["counted_on"]),
            lines=tuple(
                InventoryCountLine.from_dict(line) for line in data.get("lines", ())
            ),
            status=InventoryCountStatus(data.get("status", "DRAFT")),
            note=data.get("note"),
        )


def start_inventory_count(
    count_id: str,
    counted_on: date,
    products: Iterable[Product],
) -> InventoryCount:
    """Draft count pre-filled from current stock (counted floored at zero)."""
    return InventoryCount(
        count_id=count_id,
        counted_on=counted_on,
        lines=tuple(
            InventoryCountLine(
                product_id=product.product_id,
                expected=product.stock,
                counted=max(product.stock, 0.0),
            )
            for product in products
        ),
    )


def apply_inventory_count(
    products: Iterable[Product],
    count: InventoryCount,
) -> Tuple[Product, ...]:
    """
    Products with stock set to counted quantities.

    A draft count leaves stock untouched. Count lines for unknown
    products are ignored.
    """
    if not count.is_validated:
        return tuple(products)
    counted = {line.product_id: line.counted for line in count.lines}
    return tuple(
        product.with_stock(counted[product.product_id])
        if product.product_id in counted else product
        for product in products
    )
