"""
Comptoir Party Primitive — Partners & Company Profile
=======================================================
A Partner is a client or a supplier. Its initial_balance is the
signed amount owed at ledger start (positive = partner owes us).

CompanySettings is the issuing company profile printed on documents.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


# ══════════════════════════════════════════════════════════════
# ENUMS
# ══════════════════════════════════════════════════════════════

class PartnerType(Enum):
    CLIENT = "CLIENT"
    SUPPLIER = "SUPPLIER"


UNKNOWN_PARTNER_NAME = "Unknown partner"


# ══════════════════════════════════════════════════════════════
# PARTNER
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Partner:
    partner_id: str
    partner_type: PartnerType
    name: str
    initial_balance: float = 0.0
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    tax_id: Optional[str] = None

    def __post_init__(self):
        if not self.partner_id or not isinstance(self.partner_id, str):
            raise ValueError("partner_id must be a non-empty string.")
        if not isinstance(self.partner_type, PartnerType):
            raise ValueError("partner_type must be PartnerType enum.")
        if not self.name or not isinstance(self.name, str):
            raise ValueError("name must be a non-empty string.")
        if isinstance(self.initial_balance, bool) or not isinstance(
            self.initial_balance, (int, float)
        ):
            raise TypeError("initial_balance must be a number.")

    @property
    def is_client(self) -> bool:
        return self.partner_type == PartnerType.CLIENT

    def to_dict(self) -> dict:
        return {
            "partner_id": self.partner_id,
            "partner_type": self.partner_type.value,
            "name": self.name,
            "initial_balance": self.initial_balance,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "tax_id": self.tax_id,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Partner:
        return cls(
            partner_id=data["partner_id"],
            partner_type=PartnerType(data["partner_type"]),
            name=data["name"],
            initial_balance=data.get("initial_balance", 0.0),
            email=data.get("email"),
            phone=data.get("phone"),
            address=data.get("address"),
            tax_id=data.get("tax_id"),
        )


def partner_display_name(partner: Optional[Partner]) -> str:
    """Name of a looked-up partner, or the unknown fallback."""
    return partner.name if partner is not None else UNKNOWN_PARTNER_NAME


# ══════════════════════════════════════════════════════════════
# COMPANY SETTINGS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class CompanySettings:
    name: str
    address: str = ""
    phone: str = ""
    email: str = ""
    tax_id: str = ""
    currency: str = "EUR"
    footer: str = ""

    def __post_init__(self):
        if not self.name or not isinstance(self.name, str):
            raise ValueError("name must be a non-empty string.")
        if not self.currency or len(self.currency) != 3:
            raise ValueError("currency must be 3-letter ISO 4217 code.")

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "address": self.address,
            "phone": self.phone,
            "email": self.email,
            "tax_id": self.tax_id,
            "currency": self.currency,
            "footer": self.footer,
        }

    @classmethod
    def from_dict(cls, data: dict) -> CompanySettings:
        return cls(
            name=data["name"],
            address=data.get("address", ""),
            phone=data.get("phone", ""),
            email=data.get("email", ""),
            tax_id=data.get("tax_id", ""),
            currency=data.get("currency", "EUR"),
            footer=data.get("footer", ""),
        )
