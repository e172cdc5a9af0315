"""
Comptoir Pricing Primitive — Line Tax & Discount Arithmetic
=============================================================
Converts between tax-exclusive (HT) and tax-inclusive (TTC) amounts
and computes the totals of a single sale/purchase line.

Formulas:
    raw_total       = quantity * unit_price
    discount_amount = raw_total * discount / 100
    total_ht        = raw_total - discount_amount
    total_ttc       = total_ht * (1 + tax_rate / 100)

Inverse path (operator types a TTC unit price):
    unit_price = round_money(ttc / (1 + tax_rate / 100))
    then the forward formula is re-applied on the rounded HT price.

Rounding happens only at the edges (HT price entry, display).
Line and document totals are never rounded internally.

This layer does NOT validate its inputs: negative values pass through.
Records (LineItem) reject them at construction.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal


# ══════════════════════════════════════════════════════════════
# ROUNDING
# ══════════════════════════════════════════════════════════════

MONEY_QUANTUM = Decimal("0.01")


def round_money(amount: float) -> float:
    """Round half-up to 2 decimals (via the decimal repr, not binary float)."""
    return float(Decimal(str(amount)).quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP))


# ══════════════════════════════════════════════════════════════
# LINE TOTALS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class LineTotals:
    """Derived totals of one line. Never stored, always recomputed."""
    total_ht: float
    total_ttc: float

    @property
    def tax(self) -> float:
        return self.total_ttc - self.total_ht


def compute_line(
    quantity: float,
    unit_price: float,
    discount: float,
    tax_rate: float,
) -> LineTotals:
    raw_total = quantity * unit_price
    discount_amount = raw_total * discount / 100
    total_ht = raw_total - discount_amount
    total_ttc = total_ht * (1 + tax_rate / 100)
    return LineTotals(total_ht=total_ht, total_ttc=total_ttc)


# ══════════════════════════════════════════════════════════════
# HT <-> TTC UNIT PRICE
# ══════════════════════════════════════════════════════════════

def unit_price_from_ttc(ttc_unit_price: float, tax_rate: float) -> float:
    """
    Back-solve the HT unit price from an entered TTC unit price.

    The result is rounded to 2 decimals before any forward computation.
    """
    return round_money(ttc_unit_price / (1 + tax_rate / 100))


def ttc_unit_price(unit_price: float, tax_rate: float) -> float:
    """Displayed TTC unit price."""
    return round_money(unit_price * (1 + tax_rate / 100))
