"""
Comptoir Item Primitive — Catalog Products & Taxonomy
=======================================================
Products carry a selling price and a cost (both tax-exclusive), a
default tax rate and a stock level. The taxonomy is a flat three
level tree: family → category → subcategory.

Stock is changed only by product saves and validated inventory
counts. Documents never move stock directly; the stock journal is
a read-only view over them (see core.primitives.inventory).
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional


# ══════════════════════════════════════════════════════════════
# TAXONOMY
# ══════════════════════════════════════════════════════════════

class TaxonomyLevel(Enum):
    FAMILY = "FAMILY"
    CATEGORY = "CATEGORY"
    SUBCATEGORY = "SUBCATEGORY"


# Level whose node a parent_id must reference.
PARENT_LEVEL = {
    TaxonomyLevel.FAMILY: None,
    TaxonomyLevel.CATEGORY: TaxonomyLevel.FAMILY,
    TaxonomyLevel.SUBCATEGORY: TaxonomyLevel.CATEGORY,
}


@dataclass(frozen=True)
class TaxonomyNode:
    """
    One family, category or subcategory.

    Families have no parent; categories point to a family and
    subcategories point to a category.
    """
    node_id: str
    level: TaxonomyLevel
    name: str
    parent_id: Optional[str] = None

    def __post_init__(self):
        if not self.node_id or not isinstance(self.node_id, str):
            raise ValueError("node_id must be a non-empty string.")
        if not isinstance(self.level, TaxonomyLevel):
            raise ValueError("level must be TaxonomyLevel enum.")
        if not self.name or not isinstance(self.name, str):
            raise ValueError("name must be a non-empty string.")
        if self.level == TaxonomyLevel.FAMILY and self.parent_id is not None:
            raise ValueError("A family cannot have a parent.")
        if self.level != TaxonomyLevel.FAMILY and not self.parent_id:
            raise ValueError(f"A {self.level.value.lower()} requires a parent_id.")

    def renamed(self, name: str) -> TaxonomyNode:
        return replace(self, name=name)

    def to_dict(self) -> dict:
        return {
            "node_id": self.node_id,
            "level": self.level.value,
            "name": self.name,
            "parent_id": self.parent_id,
        }

    @classmethod
    def from_dict(cls, data: dict) -> TaxonomyNode:
        return cls(
            node_id=data["node_id"],
            level=TaxonomyLevel(data["level"]),
            name=data["name"],
            parent_id=data.get("parent_id"),
        )


# ══════════════════════════════════════════════════════════════
# PRODUCT
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Product:
    """
    Fields:
        product_id:   Unique identifier
        reference:    SKU / internal code
        name:         Display name
        price:        Selling price HT
        cost:         Purchase cost HT
        tax_rate:     Percentage; None means "use the default rate"
        stock:        Quantity on hand (may go negative)
        min_stock:    Low-stock alert threshold
    """
    product_id: str
    reference: str
    name: str
    price: float = 0.0
    cost: float = 0.0
    tax_rate: Optional[float] = None
    stock: float = 0.0
    min_stock: float = 0.0
    family_id: Optional[str] = None
    category_id: Optional[str] = None
    subcategory_id: Optional[str] = None

    def __post_init__(self):
        if not self.product_id or not isinstance(self.product_id, str):
            raise ValueError("product_id must be a non-empty string.")
        if not self.reference or not isinstance(self.reference, str):
            raise ValueError("reference must be a non-empty string.")
        if not self.name or not isinstance(self.name, str):
            raise ValueError("name must be a non-empty string.")
        if self.price < 0:
            raise ValueError("price cannot be negative.")
        if self.cost < 0:
            raise ValueError("cost cannot be negative.")
        if self.tax_rate is not None and self.tax_rate < 0:
            raise ValueError("tax_rate cannot be negative.")
        if self.min_stock < 0:
            raise ValueError("min_stock cannot be negative.")

    @property
    def stock_value(self) -> float:
        return self.cost * self.stock

    @property
    def is_low_stock(self) -> bool:
        return self.stock <= self.min_stock

    def with_stock(self, stock: float) -> Product:
        return replace(self, stock=stock)

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "reference": self.reference,
            "name": self.name,
            "price": self.price,
            "cost": self.cost,
            "tax_rate": self.tax_rate,
            "stock": self.stock,
            "min_stock": self.min_stock,
            "family_id": self.family_id,
            "category_id": self.category_id,
            "subcategory_id": self.subcategory_id,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Product:
        return cls(
            product_id=data["product_id"],
            reference=data["reference"],
            name=data["name"],
            price=data.get("price", 0.0),
            cost=data.get("cost", 0.0),
            tax_rate=data.get("tax_rate"),
            stock=data.get("stock", 0.0),
            min_stock=data.get("min_stock", 0.0),
            family_id=data.get("family_id"),
            category_id=data.get("category_id"),
            subcategory_id=data.get("subcategory_id"),
        )
