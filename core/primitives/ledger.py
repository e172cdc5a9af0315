"""
Comptoir Ledger Primitive — Flow Classification
=================================================
Decides the direction of every money flow in a partner ledger.

Payments (cash drawer view):
    | partner type | nature  | incoming? |
    |--------------|---------|-----------|
    | CLIENT       | PAYMENT | yes       |
    | CLIENT       | REFUND  | no        |
    | SUPPLIER     | PAYMENT | no        |
    | SUPPLIER     | REFUND  | yes       |

An unknown partner (failed lookup) is classified like a supplier.

Documents (balance view):
    INVOICE, PURCHASE                  → DEBIT  (increases what is owed)
    CREDIT_NOTE, PURCHASE_CREDIT_NOTE  → CREDIT (decreases what is owed)
    QUOTE, ORDER, DELIVERY_NOTE        → never enter balances
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional

from core.primitives.document import DocumentType
from core.primitives.party import PartnerType
from core.primitives.payment import PaymentNature


# ══════════════════════════════════════════════════════════════
# ENUMS
# ══════════════════════════════════════════════════════════════

class DebitCredit(Enum):
    """Ledger side. Debit increases the balance, credit decreases it."""
    DEBIT = "DEBIT"
    CREDIT = "CREDIT"


LEDGER_SIDE: Dict[DocumentType, DebitCredit] = {
    DocumentType.INVOICE: DebitCredit.DEBIT,
    DocumentType.PURCHASE: DebitCredit.DEBIT,
    DocumentType.CREDIT_NOTE: DebitCredit.CREDIT,
    DocumentType.PURCHASE_CREDIT_NOTE: DebitCredit.CREDIT,
}


# ══════════════════════════════════════════════════════════════
# CLASSIFIERS
# ══════════════════════════════════════════════════════════════

def is_incoming(
    partner_type: Optional[PartnerType],
    nature: PaymentNature,
) -> bool:
    """True when the flow brings money into the business."""
    if partner_type == PartnerType.CLIENT:
        return nature == PaymentNature.PAYMENT
    return nature == PaymentNature.REFUND


def ledger_side(document_type: DocumentType) -> Optional[DebitCredit]:
    """Ledger side of a document type, None when it never enters balances."""
    return LEDGER_SIDE.get(document_type)


def is_debit(document_type: DocumentType) -> bool:
    return ledger_side(document_type) == DebitCredit.DEBIT


def is_credit(document_type: DocumentType) -> bool:
    return ledger_side(document_type) == DebitCredit.CREDIT
