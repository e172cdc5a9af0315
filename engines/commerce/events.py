"""
Comptoir Commerce Engine — Event Types and Payload Builders
=============================================================
The closed set of business events the ledger reducer understands.
Every accepted command maps to exactly one event type.

Payload builders copy the command payload and stamp the values that
must be fixed at decision time (dates, timestamps) so that replaying
the log never consults a clock.
"""

from __future__ import annotations

from typing import Callable, Dict, Optional

from core.commands.base import Command
from engines.commerce.commands import (
    CASH_SESSION_CLOSE_REQUEST,
    CASH_SESSION_OPEN_REQUEST,
    COMPANY_UPDATE_REQUEST,
    DOCUMENT_CONVERT_REQUEST,
    DOCUMENT_SAVE_REQUEST,
    DOCUMENT_SET_STATUS_REQUEST,
    EXPENSE_DELETE_REQUEST,
    EXPENSE_RECORD_REQUEST,
    INVENTORY_COUNT_SAVE_REQUEST,
    PARTNER_DELETE_REQUEST,
    PARTNER_SAVE_REQUEST,
    PAYMENT_DELETE_REQUEST,
    PAYMENT_RECORD_REQUEST,
    PAYMENT_SET_STATUS_REQUEST,
    PRODUCT_SAVE_REQUEST,
    TAX_RATE_ADD_REQUEST,
    TAX_RATE_DELETE_REQUEST,
    TAXONOMY_NODE_ADD_REQUEST,
    TAXONOMY_NODE_RENAME_REQUEST,
    USER_DELETE_REQUEST,
    USER_SAVE_REQUEST,
)


# ══════════════════════════════════════════════════════════════
# EVENT TYPE CONSTANTS
# ══════════════════════════════════════════════════════════════

DOCUMENT_SAVED_V1 = "commerce.document.saved.v1"
DOCUMENT_CONVERTED_V1 = "commerce.document.converted.v1"
DOCUMENT_STATUS_CHANGED_V1 = "commerce.document.status_changed.v1"
PRODUCT_SAVED_V1 = "commerce.product.saved.v1"
PARTNER_SAVED_V1 = "commerce.partner.saved.v1"
PARTNER_DELETED_V1 = "commerce.partner.deleted.v1"
TAXONOMY_NODE_ADDED_V1 = "commerce.taxonomy_node.added.v1"
TAXONOMY_NODE_RENAMED_V1 = "commerce.taxonomy_node.renamed.v1"
TAX_RATE_ADDED_V1 = "commerce.tax_rate.added.v1"
TAX_RATE_DELETED_V1 = "commerce.tax_rate.deleted.v1"
COMPANY_UPDATED_V1 = "commerce.company.updated.v1"
USER_SAVED_V1 = "commerce.user.saved.v1"
USER_DELETED_V1 = "commerce.user.deleted.v1"
PAYMENT_RECORDED_V1 = "commerce.payment.recorded.v1"
PAYMENT_DELETED_V1 = "commerce.payment.deleted.v1"
PAYMENT_STATUS_CHANGED_V1 = "commerce.payment.status_changed.v1"
EXPENSE_RECORDED_V1 = "commerce.expense.recorded.v1"
EXPENSE_DELETED_V1 = "commerce.expense.deleted.v1"
CASH_SESSION_OPENED_V1 = "commerce.cash_session.opened.v1"
CASH_SESSION_CLOSED_V1 = "commerce.cash_session.closed.v1"
INVENTORY_COUNT_SAVED_V1 = "commerce.inventory_count.saved.v1"

COMMERCE_EVENT_TYPES = (
    DOCUMENT_SAVED_V1,
    DOCUMENT_CONVERTED_V1,
    DOCUMENT_STATUS_CHANGED_V1,
    PRODUCT_SAVED_V1,
    PARTNER_SAVED_V1,
    PARTNER_DELETED_V1,
    TAXONOMY_NODE_ADDED_V1,
    TAXONOMY_NODE_RENAMED_V1,
    TAX_RATE_ADDED_V1,
    TAX_RATE_DELETED_V1,
    COMPANY_UPDATED_V1,
    USER_SAVED_V1,
    USER_DELETED_V1,
    PAYMENT_RECORDED_V1,
    PAYMENT_DELETED_V1,
    PAYMENT_STATUS_CHANGED_V1,
    EXPENSE_RECORDED_V1,
    EXPENSE_DELETED_V1,
    CASH_SESSION_OPENED_V1,
    CASH_SESSION_CLOSED_V1,
    INVENTORY_COUNT_SAVED_V1,
)


# ══════════════════════════════════════════════════════════════
# COMMAND → EVENT MAPPING
# ══════════════════════════════════════════════════════════════

COMMAND_TO_EVENT_TYPE = {
    DOCUMENT_SAVE_REQUEST: DOCUMENT_SAVED_V1,
    DOCUMENT_CONVERT_REQUEST: DOCUMENT_CONVERTED_V1,
    DOCUMENT_SET_STATUS_REQUEST: DOCUMENT_STATUS_CHANGED_V1,
    PRODUCT_SAVE_REQUEST: PRODUCT_SAVED_V1,
    PARTNER_SAVE_REQUEST: PARTNER_SAVED_V1,
    PARTNER_DELETE_REQUEST: PARTNER_DELETED_V1,
    TAXONOMY_NODE_ADD_REQUEST: TAXONOMY_NODE_ADDED_V1,
    TAXONOMY_NODE_RENAME_REQUEST: TAXONOMY_NODE_RENAMED_V1,
    TAX_RATE_ADD_REQUEST: TAX_RATE_ADDED_V1,
    TAX_RATE_DELETE_REQUEST: TAX_RATE_DELETED_V1,
    COMPANY_UPDATE_REQUEST: COMPANY_UPDATED_V1,
    USER_SAVE_REQUEST: USER_SAVED_V1,
    USER_DELETE_REQUEST: USER_DELETED_V1,
    PAYMENT_RECORD_REQUEST: PAYMENT_RECORDED_V1,
    PAYMENT_DELETE_REQUEST: PAYMENT_DELETED_V1,
    PAYMENT_SET_STATUS_REQUEST: PAYMENT_STATUS_CHANGED_V1,
    EXPENSE_RECORD_REQUEST: EXPENSE_RECORDED_V1,
    EXPENSE_DELETE_REQUEST: EXPENSE_DELETED_V1,
    CASH_SESSION_OPEN_REQUEST: CASH_SESSION_OPENED_V1,
    CASH_SESSION_CLOSE_REQUEST: CASH_SESSION_CLOSED_V1,
    INVENTORY_COUNT_SAVE_REQUEST: INVENTORY_COUNT_SAVED_V1,
}


def resolve_commerce_event_type(command_type: str) -> Optional[str]:
    return COMMAND_TO_EVENT_TYPE.get(command_type)


# ══════════════════════════════════════════════════════════════
# PAYLOAD BUILDERS
# ══════════════════════════════════════════════════════════════

def build_copied_payload(command: Command) -> dict:
    return dict(command.payload)


def build_document_converted_payload(command: Command) -> dict:
    payload = dict(command.payload)
    payload["issued_on"] = command.issued_at.date().isoformat()
    return payload


def build_session_opened_payload(command: Command) -> dict:
    payload = dict(command.payload)
    payload["opened_at"] = command.issued_at.isoformat()
    return payload


def build_session_closed_payload(command: Command) -> dict:
    payload = dict(command.payload)
    payload["closed_at"] = command.issued_at.isoformat()
    return payload


PAYLOAD_BUILDERS: Dict[str, Callable[[Command], dict]] = {
    command_type: build_copied_payload for command_type in COMMAND_TO_EVENT_TYPE
}
PAYLOAD_BUILDERS.update({
    DOCUMENT_CONVERT_REQUEST: build_document_converted_payload,
    CASH_SESSION_OPEN_REQUEST: build_session_opened_payload,
    CASH_SESSION_CLOSE_REQUEST: build_session_closed_payload,
})


def build_rejection_payload(command: Command, reason) -> dict:
    return {
        "command_id": str(command.command_id),
        "command_type": command.command_type,
        "reason": reason.to_dict(),
        "request": dict(command.payload),
    }
