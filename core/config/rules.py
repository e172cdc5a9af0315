"""
Comptoir Core Config — Tax Rate Reference Data
================================================
Tax rates are operator-managed reference data, never hardcoded in
engine logic. Engines only consume them to resolve a line's rate
when a product is picked.

Resolution order for a product line:
    1. the product's own tax_rate
    2. the configured default rate (EngineSettings.default_tax_rate)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from core.primitives.item import Product
from core.primitives.pricing import round_money


# ══════════════════════════════════════════════════════════════
# TAX RATE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TaxRate:
    """
    A named VAT rate.

    rate is a percentage: 20.0 means 20%.
    """

    tax_rate_id: str
    name: str
    rate: float

    def __post_init__(self) -> None:
        if not self.tax_rate_id or not isinstance(self.tax_rate_id, str):
            raise ValueError("tax_rate_id must be a non-empty string.")
        if not self.name or not isinstance(self.name, str):
            raise ValueError("name must be a non-empty string.")
        if not 0 <= self.rate <= 100:
            raise ValueError(f"Tax rate must be between 0 and 100, got {self.rate}.")

    def compute_tax(self, amount_ht: float) -> float:
        """Tax amount for a tax-exclusive base, rounded to cents."""
        return round_money(amount_ht * self.rate / 100)

    def to_dict(self) -> dict:
        return {
            "tax_rate_id": self.tax_rate_id,
            "name": self.name,
            "rate": self.rate,
        }

    @classmethod
    def from_dict(cls, data: dict) -> TaxRate:
        return cls(
            tax_rate_id=data["tax_rate_id"],
            name=data["name"],
            rate=data["rate"],
        )


DEFAULT_TAX_RATES: Tuple[TaxRate, ...] = (
    TaxRate(tax_rate_id="vat-20", name="Standard rate", rate=20.0),
    TaxRate(tax_rate_id="vat-10", name="Intermediate rate", rate=10.0),
    TaxRate(tax_rate_id="vat-5.5", name="Reduced rate", rate=5.5),
    TaxRate(tax_rate_id="vat-0", name="Exempt", rate=0.0),
)


# ══════════════════════════════════════════════════════════════
# LOOKUPS
# ══════════════════════════════════════════════════════════════

def find_tax_rate(
    tax_rates: Iterable[TaxRate], tax_rate_id: str,
) -> Optional[TaxRate]:
    for tax_rate in tax_rates:
        if tax_rate.tax_rate_id == tax_rate_id:
            return tax_rate
    return None


def resolve_product_tax_rate(
    product: Optional[Product], default_rate: float,
) -> float:
    """Tax rate for a line on this product (default for unknown products)."""
    if product is None or product.tax_rate is None:
        return default_rate
    return product.tax_rate
