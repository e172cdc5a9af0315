"""
Comptoir Commerce Engine — Request Commands
=============================================
Typed requests that convert into canonical Command objects.

Requests are the caller-side validation boundary: building one with
a missing field, a non-positive amount or a check without due date
raises ValueError/TypeError before anything reaches the engine.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import ClassVar

from core.commands.base import Command, derive_source_engine
from core.config.rules import TaxRate
from core.config.settings import DEFAULT_SETTINGS
from core.primitives.actor import User
from core.primitives.document import Document, DocumentStatus, DocumentType
from core.primitives.inventory import InventoryCount
from core.primitives.item import Product, TaxonomyNode
from core.primitives.party import CompanySettings, Partner
from core.primitives.payment import Expense, Payment, PaymentStatus


# ══════════════════════════════════════════════════════════════
# COMMAND TYPE CONSTANTS
# ══════════════════════════════════════════════════════════════

DOCUMENT_SAVE_REQUEST = "commerce.document.save.request"
DOCUMENT_CONVERT_REQUEST = "commerce.document.convert.request"
DOCUMENT_SET_STATUS_REQUEST = "commerce.document.set_status.request"
PRODUCT_SAVE_REQUEST = "commerce.product.save.request"
PARTNER_SAVE_REQUEST = "commerce.partner.save.request"
PARTNER_DELETE_REQUEST = "commerce.partner.delete.request"
TAXONOMY_NODE_ADD_REQUEST = "commerce.taxonomy_node.add.request"
TAXONOMY_NODE_RENAME_REQUEST = "commerce.taxonomy_node.rename.request"
TAX_RATE_ADD_REQUEST = "commerce.tax_rate.add.request"
TAX_RATE_DELETE_REQUEST = "commerce.tax_rate.delete.request"
COMPANY_UPDATE_REQUEST = "commerce.company.update.request"
USER_SAVE_REQUEST = "commerce.user.save.request"
USER_DELETE_REQUEST = "commerce.user.delete.request"
PAYMENT_RECORD_REQUEST = "commerce.payment.record.request"
PAYMENT_DELETE_REQUEST = "commerce.payment.delete.request"
PAYMENT_SET_STATUS_REQUEST = "commerce.payment.set_status.request"
EXPENSE_RECORD_REQUEST = "commerce.expense.record.request"
EXPENSE_DELETE_REQUEST = "commerce.expense.delete.request"
CASH_SESSION_OPEN_REQUEST = "commerce.cash_session.open.request"
CASH_SESSION_CLOSE_REQUEST = "commerce.cash_session.close.request"
INVENTORY_COUNT_SAVE_REQUEST = "commerce.inventory_count.save.request"

COMMERCE_COMMAND_TYPES = frozenset({
    DOCUMENT_SAVE_REQUEST,
    DOCUMENT_CONVERT_REQUEST,
    DOCUMENT_SET_STATUS_REQUEST,
    PRODUCT_SAVE_REQUEST,
    PARTNER_SAVE_REQUEST,
    PARTNER_DELETE_REQUEST,
    TAXONOMY_NODE_ADD_REQUEST,
    TAXONOMY_NODE_RENAME_REQUEST,
    TAX_RATE_ADD_REQUEST,
    TAX_RATE_DELETE_REQUEST,
    COMPANY_UPDATE_REQUEST,
    USER_SAVE_REQUEST,
    USER_DELETE_REQUEST,
    PAYMENT_RECORD_REQUEST,
    PAYMENT_DELETE_REQUEST,
    PAYMENT_SET_STATUS_REQUEST,
    EXPENSE_RECORD_REQUEST,
    EXPENSE_DELETE_REQUEST,
    CASH_SESSION_OPEN_REQUEST,
    CASH_SESSION_CLOSE_REQUEST,
    INVENTORY_COUNT_SAVE_REQUEST,
})


def _require_id(name: str, value) -> None:
    if not value or not isinstance(value, str):
        raise ValueError(f"{name} must be a non-empty string.")


def _require_instance(name: str, value, cls) -> None:
    if not isinstance(value, cls):
        raise TypeError(f"{name} must be {cls.__name__}.")


# ══════════════════════════════════════════════════════════════
# REQUEST BASE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class CommerceRequest:
    """Shared to_command for every commerce request."""

    command_type: ClassVar[str] = ""

    def payload(self) -> dict:
        raise NotImplementedError

    def to_command(
        self,
        *,
        actor_id: str,
        command_id: uuid.UUID,
        correlation_id: uuid.UUID,
        issued_at: datetime,
        actor_type: str = "HUMAN",
    ) -> Command:
        return Command(
            command_id=command_id,
            command_type=self.command_type,
            actor_type=actor_type,
            actor_id=actor_id,
            payload=self.payload(),
            issued_at=issued_at,
            correlation_id=correlation_id,
            source_engine=derive_source_engine(self.command_type),
        )


# ══════════════════════════════════════════════════════════════
# DOCUMENTS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class DocumentSaveRequest(CommerceRequest):
    """Create or replace a document (lines included)."""
    command_type: ClassVar[str] = DOCUMENT_SAVE_REQUEST
    document: Document

    def __post_init__(self):
        _require_instance("document", self.document, Document)

    def payload(self) -> dict:
        return {"document": self.document.to_dict()}


@dataclass(frozen=True)
class DocumentConvertRequest(CommerceRequest):
    command_type: ClassVar[str] = DOCUMENT_CONVERT_REQUEST
    source_document_id: str
    target_type: DocumentType
    document_id: str
    reference: str = DEFAULT_SETTINGS.draft_reference

    def __post_init__(self):
        _require_id("source_document_id", self.source_document_id)
        _require_id("document_id", self.document_id)
        _require_id("reference", self.reference)
        _require_instance("target_type", self.target_type, DocumentType)
        if self.document_id == self.source_document_id:
            raise ValueError("A converted document needs a new document_id.")

    def payload(self) -> dict:
        return {
            "source_document_id": self.source_document_id,
            "target_type": self.target_type.value,
            "document_id": self.document_id,
            "reference": self.reference,
        }


@dataclass(frozen=True)
class DocumentSetStatusRequest(CommerceRequest):
    command_type: ClassVar[str] = DOCUMENT_SET_STATUS_REQUEST
    document_id: str
    status: DocumentStatus

    def __post_init__(self):
        _require_id("document_id", self.document_id)
        _require_instance("status", self.status, DocumentStatus)

    def payload(self) -> dict:
        return {"document_id": self.document_id, "status": self.status.value}


# ══════════════════════════════════════════════════════════════
# CATALOG & REFERENCE DATA
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ProductSaveRequest(CommerceRequest):
    command_type: ClassVar[str] = PRODUCT_SAVE_REQUEST
    product: Product

    def __post_init__(self):
        _require_instance("product", self.product, Product)

    def payload(self) -> dict:
        return {"product": self.product.to_dict()}


@dataclass(frozen=True)
class TaxonomyNodeAddRequest(CommerceRequest):
    command_type: ClassVar[str] = TAXONOMY_NODE_ADD_REQUEST
    node: TaxonomyNode

    def __post_init__(self):
        _require_instance("node", self.node, TaxonomyNode)

    def payload(self) -> dict:
        return {"node": self.node.to_dict()}


@dataclass(frozen=True)
class TaxonomyNodeRenameRequest(CommerceRequest):
    command_type: ClassVar[str] = TAXONOMY_NODE_RENAME_REQUEST
    node_id: str
    name: str

    def __post_init__(self):
        _require_id("node_id", self.node_id)
        _require_id("name", self.name)

    def payload(self) -> dict:
        return {"node_id": self.node_id, "name": self.name}


@dataclass(frozen=True)
class TaxRateAddRequest(CommerceRequest):
    command_type: ClassVar[str] = TAX_RATE_ADD_REQUEST
    tax_rate: TaxRate

    def __post_init__(self):
        _require_instance("tax_rate", self.tax_rate, TaxRate)

    def payload(self) -> dict:
        return {"tax_rate": self.tax_rate.to_dict()}


@dataclass(frozen=True)
class TaxRateDeleteRequest(CommerceRequest):
    command_type: ClassVar[str] = TAX_RATE_DELETE_REQUEST
    tax_rate_id: str

    def __post_init__(self):
        _require_id("tax_rate_id", self.tax_rate_id)

    def payload(self) -> dict:
        return {"tax_rate_id": self.tax_rate_id}


@dataclass(frozen=True)
class CompanyUpdateRequest(CommerceRequest):
    command_type: ClassVar[str] = COMPANY_UPDATE_REQUEST
    company: CompanySettings

    def __post_init__(self):
        _require_instance("company", self.company, CompanySettings)

    def payload(self) -> dict:
        return {"company": self.company.to_dict()}


@dataclass(frozen=True)
class UserSaveRequest(CommerceRequest):
    command_type: ClassVar[str] = USER_SAVE_REQUEST
    user: User

    def __post_init__(self):
        _require_instance("user", self.user, User)

    def payload(self) -> dict:
        return {"user": self.user.to_dict()}


@dataclass(frozen=True)
class UserDeleteRequest(CommerceRequest):
    command_type: ClassVar[str] = USER_DELETE_REQUEST
    user_id: str

    def __post_init__(self):
        _require_id("user_id", self.user_id)

    def payload(self) -> dict:
        return {"user_id": self.user_id}


# ══════════════════════════════════════════════════════════════
# PARTNERS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class PartnerSaveRequest(CommerceRequest):
    command_type: ClassVar[str] = PARTNER_SAVE_REQUEST
    partner: Partner

    def __post_init__(self):
        _require_instance("partner", self.partner, Partner)

    def payload(self) -> dict:
        return {"partner": self.partner.to_dict()}


@dataclass(frozen=True)
class PartnerDeleteRequest(CommerceRequest):
    command_type: ClassVar[str] = PARTNER_DELETE_REQUEST
    partner_id: str

    def __post_init__(self):
        _require_id("partner_id", self.partner_id)

    def payload(self) -> dict:
        return {"partner_id": self.partner_id}


# ══════════════════════════════════════════════════════════════
# PAYMENTS & EXPENSES
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class PaymentRecordRequest(CommerceRequest):
    command_type: ClassVar[str] = PAYMENT_RECORD_REQUEST
    payment: Payment

    def __post_init__(self):
        _require_instance("payment", self.payment, Payment)

    def payload(self) -> dict:
        return {"payment": self.payment.to_dict()}


@dataclass(frozen=True)
class PaymentDeleteRequest(CommerceRequest):
    command_type: ClassVar[str] = PAYMENT_DELETE_REQUEST
    payment_id: str

    def __post_init__(self):
        _require_id("payment_id", self.payment_id)

    def payload(self) -> dict:
        return {"payment_id": self.payment_id}


@dataclass(frozen=True)
class PaymentSetStatusRequest(CommerceRequest):
    command_type: ClassVar[str] = PAYMENT_SET_STATUS_REQUEST
    payment_id: str
    status: PaymentStatus

    def __post_init__(self):
        _require_id("payment_id", self.payment_id)
        _require_instance("status", self.status, PaymentStatus)

    def payload(self) -> dict:
        return {"payment_id": self.payment_id, "status": self.status.value}


@dataclass(frozen=True)
class ExpenseRecordRequest(CommerceRequest):
    command_type: ClassVar[str] = EXPENSE_RECORD_REQUEST
    expense: Expense

    def __post_init__(self):
        _require_instance("expense", self.expense, Expense)

    def payload(self) -> dict:
        return {"expense": self.expense.to_dict()}


@dataclass(frozen=True)
class ExpenseDeleteRequest(CommerceRequest):
    command_type: ClassVar[str] = EXPENSE_DELETE_REQUEST
    expense_id: str

    def __post_init__(self):
        _require_id("expense_id", self.expense_id)

    def payload(self) -> dict:
        return {"expense_id": self.expense_id}


# ══════════════════════════════════════════════════════════════
# CASH REGISTER
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class CashSessionOpenRequest(CommerceRequest):
    command_type: ClassVar[str] = CASH_SESSION_OPEN_REQUEST
    session_id: str
    opening_balance: float

    def __post_init__(self):
        _require_id("session_id", self.session_id)
        if isinstance(self.opening_balance, bool) or not isinstance(
            self.opening_balance, (int, float)
        ):
            raise TypeError("opening_balance must be a number.")
        if self.opening_balance < 0:
            raise ValueError("opening_balance cannot be negative.")

    def payload(self) -> dict:
        return {
            "session_id": self.session_id,
            "opening_balance": self.opening_balance,
        }


@dataclass(frozen=True)
class CashSessionCloseRequest(CommerceRequest):
    command_type: ClassVar[str] = CASH_SESSION_CLOSE_REQUEST
    session_id: str
    actual_balance: float

    def __post_init__(self):
        _require_id("session_id", self.session_id)
        if isinstance(self.actual_balance, bool) or not isinstance(
            self.actual_balance, (int, float)
        ):
            raise TypeError("actual_balance must be a number.")
        if self.actual_balance < 0:
            raise ValueError("actual_balance cannot be negative.")

    def payload(self) -> dict:
        return {
            "session_id": self.session_id,
            "actual_balance": self.actual_balance,
        }


# ══════════════════════════════════════════════════════════════
# INVENTORY
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class InventoryCountSaveRequest(CommerceRequest):
    """Save a draft count, or a validated one (which updates stock)."""
    command_type: ClassVar[str] = INVENTORY_COUNT_SAVE_REQUEST
    count: InventoryCount

    def __post_init__(self):
        _require_instance("count", self.count, InventoryCount)

    def payload(self) -> dict:
        return {"count": self.count.to_dict()}
