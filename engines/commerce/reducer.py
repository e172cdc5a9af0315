"""
Comptoir Commerce Engine — Ledger Reducer
===========================================
(LedgerState, event) → LedgerState

Rules:
- Pure: no clock, no I/O, no global state; settings passed explicitly
- Total over COMMERCE_EVENT_TYPES: business conditions never raise
  (closing a closed session, deleting a missing record → same state)
- Rejection events (*.rejected.vN) leave the state unchanged
- Any other event type raises UnknownEventTypeError
- replay(events) folds a log from an initial state; same log, same state

Side effects of a recorded payment:
    1. appended to payments (a known payment_id is ignored)
    2. CASH + an OPEN session → drawer totals updated (by partner type)
    3. linked document → forced to PAID once fully covered
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, Dict, Iterable, Optional

from core.config.rules import TaxRate
from core.config.settings import DEFAULT_SETTINGS, EngineSettings
from core.events.errors import UnknownEventTypeError
from core.events.log import LedgerEvent
from core.primitives.actor import User
from core.primitives.document import Document, DocumentStatus, DocumentType
from core.primitives.inventory import InventoryCount, apply_inventory_count
from core.primitives.item import Product, TaxonomyNode
from core.primitives.party import CompanySettings, Partner, partner_display_name
from core.primitives.payment import Expense, Payment, PaymentStatus
from engines.cash.reconciler import (
    apply_cash_expense,
    apply_cash_payment,
    close_session,
    open_session,
)
from engines.commerce import events as ev
from engines.commerce.state import LedgerState, remove, upsert
from engines.sales.lifecycle import convert_document, set_status, settle_if_fully_paid

logger = logging.getLogger("comptoir.reducer")

Handler = Callable[[LedgerState, dict, EngineSettings], LedgerState]


# ══════════════════════════════════════════════════════════════
# DOCUMENTS
# ══════════════════════════════════════════════════════════════

def _document_saved(state: LedgerState, payload: dict, settings: EngineSettings) -> LedgerState:
    document = Document.from_dict(payload["document"])
    if not document.partner_name:
        partner = state.find_partner(document.partner_id)
        document = replace(document, partner_name=partner_display_name(partner))
    return replace(state, documents=upsert(state.documents, document, "document_id"))


def _document_converted(state: LedgerState, payload: dict, settings: EngineSettings) -> LedgerState:
    source = state.find_document(payload["source_document_id"])
    if source is None:
        logger.debug(f"Conversion source {payload['source_document_id']} not found")
        return state
    if state.find_document(payload["document_id"]) is not None:
        logger.warning(f"Ignoring conversion onto existing document {payload['document_id']}")
        return state
    converted = convert_document(
        source,
        DocumentType(payload["target_type"]),
        document_id=payload["document_id"],
        issued_on=date.fromisoformat(payload["issued_on"]),
        reference=payload.get("reference", settings.draft_reference),
    )
    return replace(state, documents=upsert(state.documents, converted, "document_id"))


def _document_status_changed(state: LedgerState, payload: dict, settings: EngineSettings) -> LedgerState:
    document = state.find_document(payload["document_id"])
    if document is None:
        return state
    updated = set_status(document, DocumentStatus(payload["status"]))
    return replace(state, documents=upsert(state.documents, updated, "document_id"))


# ══════════════════════════════════════════════════════════════
# CATALOG & REFERENCE DATA
# ══════════════════════════════════════════════════════════════

def _product_saved(state: LedgerState, payload: dict, settings: EngineSettings) -> LedgerState:
    product = Product.from_dict(payload["product"])
    return replace(state, products=upsert(state.products, product, "product_id"))


def _taxonomy_node_added(state: LedgerState, payload: dict, settings: EngineSettings) -> LedgerState:
    node = TaxonomyNode.from_dict(payload["node"])
    return replace(state, taxonomy=upsert(state.taxonomy, node, "node_id"))


def _taxonomy_node_renamed(state: LedgerState, payload: dict, settings: EngineSettings) -> LedgerState:
    node = state.find_node(payload["node_id"])
    if node is None:
        return state
    renamed = node.renamed(payload["name"])
    return replace(state, taxonomy=upsert(state.taxonomy, renamed, "node_id"))


def _tax_rate_added(state: LedgerState, payload: dict, settings: EngineSettings) -> LedgerState:
    tax_rate = TaxRate.from_dict(payload["tax_rate"])
    return replace(state, tax_rates=upsert(state.tax_rates, tax_rate, "tax_rate_id"))


def _tax_rate_deleted(state: LedgerState, payload: dict, settings: EngineSettings) -> LedgerState:
    return replace(
        state, tax_rates=remove(state.tax_rates, "tax_rate_id", payload["tax_rate_id"]),
    )


def _company_updated(state: LedgerState, payload: dict, settings: EngineSettings) -> LedgerState:
    return replace(state, company=CompanySettings.from_dict(payload["company"]))


def _user_saved(state: LedgerState, payload: dict, settings: EngineSettings) -> LedgerState:
    user = User.from_dict(payload["user"])
    return replace(state, users=upsert(state.users, user, "user_id"))


def _user_deleted(state: LedgerState, payload: dict, settings: EngineSettings) -> LedgerState:
    return replace(state, users=remove(state.users, "user_id", payload["user_id"]))


# ══════════════════════════════════════════════════════════════
# PARTNERS
# ══════════════════════════════════════════════════════════════

def _partner_saved(state: LedgerState, payload: dict, settings: EngineSettings) -> LedgerState:
    partner = Partner.from_dict(payload["partner"])
    return replace(state, partners=upsert(state.partners, partner, "partner_id"))


def _partner_deleted(state: LedgerState, payload: dict, settings: EngineSettings) -> LedgerState:
    return replace(
        state, partners=remove(state.partners, "partner_id", payload["partner_id"]),
    )


# ══════════════════════════════════════════════════════════════
# PAYMENTS & EXPENSES
# ══════════════════════════════════════════════════════════════

def _payment_recorded(state: LedgerState, payload: dict, settings: EngineSettings) -> LedgerState:
    payment = Payment.from_dict(payload["payment"])
    if state.find_payment(payment.payment_id) is not None:
        logger.warning(f"Ignoring repeated payment {payment.payment_id}")
        return state
    payments = state.payments + (payment,)

    cash_sessions = state.cash_sessions
    session = state.open_session()
    if session is not None:
        partner = state.find_partner(payment.partner_id)
        partner_type = partner.partner_type if partner is not None else None
        updated = apply_cash_payment(session, payment, partner_type)
        if updated is not session:
            cash_sessions = upsert(cash_sessions, updated, "session_id")

    documents = state.documents
    if payment.document_id:
        document = state.find_document(payment.document_id)
        if document is not None:
            linked = tuple(p for p in payments if p.document_id == document.document_id)
            settled = settle_if_fully_paid(document, linked, settings.payment_tolerance)
            if settled is not document:
                logger.debug(f"Document {document.document_id} settled by {payment.payment_id}")
                documents = upsert(documents, settled, "document_id")

    return replace(
        state, payments=payments, cash_sessions=cash_sessions, documents=documents,
    )


def _payment_deleted(state: LedgerState, payload: dict, settings: EngineSettings) -> LedgerState:
    # Drawer totals and document status are left as they are.
    return replace(
        state, payments=remove(state.payments, "payment_id", payload["payment_id"]),
    )


def _payment_status_changed(state: LedgerState, payload: dict, settings: EngineSettings) -> LedgerState:
    payment = state.find_payment(payload["payment_id"])
    if payment is None:
        return state
    updated = payment.with_status(PaymentStatus(payload["status"]))
    return replace(state, payments=upsert(state.payments, updated, "payment_id"))


def _expense_recorded(state: LedgerState, payload: dict, settings: EngineSettings) -> LedgerState:
    expense = Expense.from_dict(payload["expense"])
    if state.find_expense(expense.expense_id) is not None:
        logger.warning(f"Ignoring repeated expense {expense.expense_id}")
        return state
    cash_sessions = state.cash_sessions
    session = state.open_session()
    if session is not None:
        updated = apply_cash_expense(session, expense)
        if updated is not session:
            cash_sessions = upsert(cash_sessions, updated, "session_id")
    return replace(
        state,
        expenses=state.expenses + (expense,),
        cash_sessions=cash_sessions,
    )


def _expense_deleted(state: LedgerState, payload: dict, settings: EngineSettings) -> LedgerState:
    return replace(
        state, expenses=remove(state.expenses, "expense_id", payload["expense_id"]),
    )


# ══════════════════════════════════════════════════════════════
# CASH REGISTER
# ══════════════════════════════════════════════════════════════

def _cash_session_opened(state: LedgerState, payload: dict, settings: EngineSettings) -> LedgerState:
    current = state.open_session()
    if current is not None:
        logger.warning(
            f"Ignoring open of {payload['session_id']}: "
            f"session {current.session_id} is still open"
        )
        return state
    if state.find_session(payload["session_id"]) is not None:
        return state
    session = open_session(
        payload["session_id"],
        payload["opening_balance"],
        datetime.fromisoformat(payload["opened_at"]),
    )
    return replace(state, cash_sessions=state.cash_sessions + (session,))


def _cash_session_closed(state: LedgerState, payload: dict, settings: EngineSettings) -> LedgerState:
    session = state.find_session(payload["session_id"])
    if session is None or not session.is_open:
        logger.debug(f"Close of {payload['session_id']} ignored (missing or closed)")
        return state
    closed = close_session(
        session,
        payload["actual_balance"],
        datetime.fromisoformat(payload["closed_at"]),
    )
    return replace(state, cash_sessions=upsert(state.cash_sessions, closed, "session_id"))


# ══════════════════════════════════════════════════════════════
# INVENTORY
# ══════════════════════════════════════════════════════════════

def _inventory_count_saved(state: LedgerState, payload: dict, settings: EngineSettings) -> LedgerState:
    count = InventoryCount.from_dict(payload["count"])
    existing = state.find_inventory_count(count.count_id)
    if existing is not None and existing.is_validated:
        return state
    return replace(
        state,
        inventory_counts=upsert(state.inventory_counts, count, "count_id"),
        products=apply_inventory_count(state.products, count),
    )


# ══════════════════════════════════════════════════════════════
# DISPATCH TABLE
# ══════════════════════════════════════════════════════════════

HANDLERS: Dict[str, Handler] = {
    ev.DOCUMENT_SAVED_V1: _document_saved,
    ev.DOCUMENT_CONVERTED_V1: _document_converted,
    ev.DOCUMENT_STATUS_CHANGED_V1: _document_status_changed,
    ev.PRODUCT_SAVED_V1: _product_saved,
    ev.PARTNER_SAVED_V1: _partner_saved,
    ev.PARTNER_DELETED_V1: _partner_deleted,
    ev.TAXONOMY_NODE_ADDED_V1: _taxonomy_node_added,
    ev.TAXONOMY_NODE_RENAMED_V1: _taxonomy_node_renamed,
    ev.TAX_RATE_ADDED_V1: _tax_rate_added,
    ev.TAX_RATE_DELETED_V1: _tax_rate_deleted,
    ev.COMPANY_UPDATED_V1: _company_updated,
    ev.USER_SAVED_V1: _user_saved,
    ev.USER_DELETED_V1: _user_deleted,
    ev.PAYMENT_RECORDED_V1: _payment_recorded,
    ev.PAYMENT_DELETED_V1: _payment_deleted,
    ev.PAYMENT_STATUS_CHANGED_V1: _payment_status_changed,
    ev.EXPENSE_RECORDED_V1: _expense_recorded,
    ev.EXPENSE_DELETED_V1: _expense_deleted,
    ev.CASH_SESSION_OPENED_V1: _cash_session_opened,
    ev.CASH_SESSION_CLOSED_V1: _cash_session_closed,
    ev.INVENTORY_COUNT_SAVED_V1: _inventory_count_saved,
}


def is_rejection_event(event_type: str) -> bool:
    return ".rejected." in event_type


def reduce_event(
    state: LedgerState,
    event_type: str,
    payload: dict,
    settings: EngineSettings = DEFAULT_SETTINGS,
) -> LedgerState:
    if is_rejection_event(event_type):
        return state
    handler = HANDLERS.get(event_type)
    if handler is None:
        raise UnknownEventTypeError(event_type)
    return handler(state, payload, settings)


def replay(
    events: Iterable[LedgerEvent],
    initial: Optional[LedgerState] = None,
    settings: EngineSettings = DEFAULT_SETTINGS,
) -> LedgerState:
    state = initial if initial is not None else LedgerState()
    for event in events:
        state = reduce_event(state, event.event_type, event.payload, settings)
    return state
