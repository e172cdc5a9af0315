"""
Comptoir Commerce Engine — Ledger State Snapshot
==================================================
The whole in-memory state of the business as one immutable value.

Every collection is a tuple in insertion order; the reducer builds
a new LedgerState for every event and never mutates an old one.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Tuple

from core.config.rules import DEFAULT_TAX_RATES, TaxRate
from core.primitives.actor import User
from core.primitives.cash import CashSession
from core.primitives.document import Document
from core.primitives.inventory import InventoryCount
from core.primitives.item import Product, TaxonomyNode
from core.primitives.party import CompanySettings, Partner
from core.primitives.payment import Expense, Payment


# ══════════════════════════════════════════════════════════════
# COLLECTION HELPERS
# ══════════════════════════════════════════════════════════════

def find(records: Tuple[Any, ...], key: str, value: Any) -> Optional[Any]:
    for record in records:
        if getattr(record, key) == value:
            return record
    return None


def upsert(records: Tuple[Any, ...], record: Any, key: str) -> Tuple[Any, ...]:
    """Replace the record with the same key in place, or append it."""
    value = getattr(record, key)
    replaced = False
    result = []
    for existing in records:
        if getattr(existing, key) == value:
            result.append(record)
            replaced = True
        else:
            result.append(existing)
    if not replaced:
        result.append(record)
    return tuple(result)


def remove(records: Tuple[Any, ...], key: str, value: Any) -> Tuple[Any, ...]:
    return tuple(r for r in records if getattr(r, key) != value)


# ══════════════════════════════════════════════════════════════
# LEDGER STATE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class LedgerState:
    documents: Tuple[Document, ...] = ()
    products: Tuple[Product, ...] = ()
    partners: Tuple[Partner, ...] = ()
    payments: Tuple[Payment, ...] = ()
    expenses: Tuple[Expense, ...] = ()
    cash_sessions: Tuple[CashSession, ...] = ()
    taxonomy: Tuple[TaxonomyNode, ...] = ()
    tax_rates: Tuple[TaxRate, ...] = ()
    users: Tuple[User, ...] = ()
    inventory_counts: Tuple[InventoryCount, ...] = ()
    company: Optional[CompanySettings] = None

    @classmethod
    def seeded(cls) -> LedgerState:
        """Empty business with the standard tax rate table."""
        return cls(tax_rates=DEFAULT_TAX_RATES)

    # ── Lookups ───────────────────────────────────────────────

    def find_document(self, document_id: str) -> Optional[Document]:
        return find(self.documents, "document_id", document_id)

    def find_product(self, product_id: str) -> Optional[Product]:
        return find(self.products, "product_id", product_id)

    def find_partner(self, partner_id: str) -> Optional[Partner]:
        return find(self.partners, "partner_id", partner_id)

    def find_payment(self, payment_id: str) -> Optional[Payment]:
        return find(self.payments, "payment_id", payment_id)

    def find_expense(self, expense_id: str) -> Optional[Expense]:
        return find(self.expenses, "expense_id", expense_id)

    def find_session(self, session_id: str) -> Optional[CashSession]:
        return find(self.cash_sessions, "session_id", session_id)

    def find_node(self, node_id: str) -> Optional[TaxonomyNode]:
        return find(self.taxonomy, "node_id", node_id)

    def find_tax_rate(self, tax_rate_id: str) -> Optional[TaxRate]:
        return find(self.tax_rates, "tax_rate_id", tax_rate_id)

    def find_user(self, user_id: str) -> Optional[User]:
        return find(self.users, "user_id", user_id)

    def find_inventory_count(self, count_id: str) -> Optional[InventoryCount]:
        return find(self.inventory_counts, "count_id", count_id)

    def open_session(self) -> Optional[CashSession]:
        return find(self.cash_sessions, "is_open", True)

    def payments_for_document(self, document_id: str) -> Tuple[Payment, ...]:
        return tuple(p for p in self.payments if p.document_id == document_id)

    def partner_reference_count(self, partner_id: str) -> int:
        """Documents and payments still pointing at a partner."""
        return (
            sum(1 for d in self.documents if d.partner_id == partner_id)
            + sum(1 for p in self.payments if p.partner_id == partner_id)
        )
