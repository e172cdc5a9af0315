"""
Comptoir Commerce Engine — Application Service
================================================
Single entry point for every state change and every read model.

Flow of handle(command):
    1. Resolve the event type (unknown command → REJECTED)
    2. Run policies against the current state (first rejection wins)
    3. Build the event payload and reduce it into a candidate state
       (a payload that fails to decode in 2 or 3 → REJECTED)
    4. Append the event to the log, commit the candidate state
    5. Dispatch the logged event to subscribers

A REJECTED command appends a rejection event and leaves the state
untouched. Commands are handled strictly one after another.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Optional, Tuple

from core.commands.base import Command, derive_rejection_event_type
from core.commands.outcomes import CommandOutcome
from core.commands.rejection import ReasonCode, RejectionReason
from core.config.settings import DEFAULT_SETTINGS, EngineSettings
from core.events.dispatcher import dispatch
from core.events.log import EventLog
from core.events.registry import SubscriberRegistry
from core.primitives.cash import CashSession
from core.primitives.document import DocumentType, LineItem
from core.primitives.inventory import StockMovement, stock_movements
from core.time.clock import Clock, SystemClock
from core.time.temporal import DatePeriod, month_to_date
from engines.accounting.statements import PartnerStatement, build_statement, current_balance
from engines.cash.policies import no_open_session_policy, session_must_be_open_policy
from engines.cash.reconciler import closed_sessions_in
from engines.commerce.commands import (
    CASH_SESSION_CLOSE_REQUEST,
    CASH_SESSION_OPEN_REQUEST,
    DOCUMENT_CONVERT_REQUEST,
    DOCUMENT_SET_STATUS_REQUEST,
    EXPENSE_RECORD_REQUEST,
    INVENTORY_COUNT_SAVE_REQUEST,
    PARTNER_DELETE_REQUEST,
    PAYMENT_RECORD_REQUEST,
    PAYMENT_SET_STATUS_REQUEST,
    TAXONOMY_NODE_ADD_REQUEST,
)
from engines.commerce.events import (
    PAYLOAD_BUILDERS,
    build_rejection_payload,
    resolve_commerce_event_type,
)
from engines.commerce.policies import (
    expense_must_be_new_policy,
    inventory_count_must_be_open_policy,
    partner_must_not_be_referenced_policy,
    payment_must_be_new_policy,
    taxonomy_parent_must_exist_policy,
)
from engines.commerce.reducer import reduce_event, replay
from engines.commerce.state import LedgerState
from engines.reporting.alerts import CheckSummary, DashboardSnapshot, build_dashboard, check_summary
from engines.sales.lifecycle import PaymentProgress, line_for_product, payment_progress
from engines.sales.policies import (
    conversion_supported_policy,
    document_must_exist_policy,
    document_must_not_exist_policy,
    payment_document_must_match_policy,
    payment_must_be_check_policy,
)

logger = logging.getLogger("comptoir.commands")


class CommerceService:
    """Commerce engine application service."""

    def __init__(
        self,
        *,
        settings: EngineSettings | None = None,
        clock: Clock | None = None,
        subscriber_registry: SubscriberRegistry | None = None,
        initial_state: LedgerState | None = None,
    ):
        self._settings = settings or DEFAULT_SETTINGS
        self._clock = clock or SystemClock()
        self._registry = subscriber_registry or SubscriberRegistry()
        self._initial_state = (
            initial_state if initial_state is not None else LedgerState.seeded()
        )
        self._state = self._initial_state
        self._event_log = EventLog()

    # ══════════════════════════════════════════════════════════
    # PROPERTIES
    # ══════════════════════════════════════════════════════════

    @property
    def state(self) -> LedgerState:
        return self._state

    @property
    def event_log(self) -> EventLog:
        return self._event_log

    @property
    def settings(self) -> EngineSettings:
        return self._settings

    def subscribe(self, event_type: str, handler: Callable, subscriber_name: str) -> None:
        self._registry.register_subscriber(event_type, handler, subscriber_name)

    # ══════════════════════════════════════════════════════════
    # POLICIES
    # ══════════════════════════════════════════════════════════

    def _run_policies(self, command: Command) -> Optional[RejectionReason]:
        state = self._state
        command_type = command.command_type

        if command_type == CASH_SESSION_OPEN_REQUEST:
            return no_open_session_policy(
                command, open_session_lookup=state.open_session,
            )

        if command_type == CASH_SESSION_CLOSE_REQUEST:
            return session_must_be_open_policy(
                command, session_lookup=state.find_session,
            )

        if command_type == PARTNER_DELETE_REQUEST:
            return partner_must_not_be_referenced_policy(
                command, reference_count_lookup=state.partner_reference_count,
            )

        if command_type == DOCUMENT_CONVERT_REQUEST:
            return (
                document_must_exist_policy(
                    command,
                    document_lookup=state.find_document,
                    key="source_document_id",
                )
                or document_must_not_exist_policy(
                    command, document_lookup=state.find_document,
                )
                or conversion_supported_policy(
                    command, document_lookup=state.find_document,
                )
            )

        if command_type == DOCUMENT_SET_STATUS_REQUEST:
            return document_must_exist_policy(
                command, document_lookup=state.find_document,
            )

        if command_type == PAYMENT_RECORD_REQUEST:
            return (
                payment_must_be_new_policy(
                    command, payment_lookup=state.find_payment,
                )
                or payment_document_must_match_policy(
                    command, document_lookup=state.find_document,
                )
            )

        if command_type == EXPENSE_RECORD_REQUEST:
            return expense_must_be_new_policy(
                command, expense_lookup=state.find_expense,
            )

        if command_type == PAYMENT_SET_STATUS_REQUEST:
            return payment_must_be_check_policy(
                command, payment_lookup=state.find_payment,
            )

        if command_type == TAXONOMY_NODE_ADD_REQUEST:
            return taxonomy_parent_must_exist_policy(
                command, node_lookup=state.find_node,
            )

        if command_type == INVENTORY_COUNT_SAVE_REQUEST:
            return inventory_count_must_be_open_policy(
                command, count_lookup=state.find_inventory_count,
            )

        return None

    # ══════════════════════════════════════════════════════════
    # HANDLE
    # ══════════════════════════════════════════════════════════

    def handle(self, command: Command) -> CommandOutcome:
        occurred_at = self._clock.now_utc()

        event_type = resolve_commerce_event_type(command.command_type)
        if event_type is None:
            return self._reject(
                command,
                RejectionReason(
                    code=ReasonCode.UNKNOWN_COMMAND_TYPE,
                    message=f"Unsupported commerce command type: {command.command_type}",
                    policy_name="command_type_must_be_known_policy",
                ),
                occurred_at,
            )

        try:
            rejection = self._run_policies(command)
            if rejection is not None:
                return self._reject(command, rejection, occurred_at)

            payload = PAYLOAD_BUILDERS[command.command_type](command)
            candidate = reduce_event(self._state, event_type, payload, self._settings)
        except (KeyError, TypeError, ValueError) as exc:
            return self._reject(
                command,
                RejectionReason(
                    code=ReasonCode.INVALID_PAYLOAD,
                    message=f"Malformed {command.command_type} payload: {exc!r}",
                    policy_name="payload_must_decode_policy",
                ),
                occurred_at,
            )

        event = self._event_log.append(
            event_type=event_type,
            payload=payload,
            occurred_at=occurred_at,
            actor_id=command.actor_id,
            command_id=command.command_id,
            correlation_id=command.correlation_id,
        )
        self._state = candidate
        logger.info(
            f"Command accepted: {command.command_type} → {event_type} "
            f"(sequence: {event.sequence}, actor: {command.actor_id})"
        )

        dispatch(event, self._registry)

        return CommandOutcome.accepted(
            command.command_id,
            occurred_at,
            event_type=event_type,
            sequence=event.sequence,
        )

    def _reject(
        self,
        command: Command,
        reason: RejectionReason,
        occurred_at,
    ) -> CommandOutcome:
        event_type = derive_rejection_event_type(command.command_type)
        event = self._event_log.append(
            event_type=event_type,
            payload=build_rejection_payload(command, reason),
            occurred_at=occurred_at,
            actor_id=command.actor_id,
            command_id=command.command_id,
            correlation_id=command.correlation_id,
        )
        logger.warning(
            f"Command rejected: {command.command_type} "
            f"[{reason.code}] {reason.message}"
        )
        dispatch(event, self._registry)
        return CommandOutcome.rejected(
            command.command_id,
            occurred_at,
            reason,
            event_type=event_type,
            sequence=event.sequence,
        )

    def rebuild(self) -> LedgerState:
        """Replay the whole log from the initial state."""
        return replay(self._event_log, self._initial_state, self._settings)

    # ══════════════════════════════════════════════════════════
    # READ MODELS
    # ══════════════════════════════════════════════════════════

    def partner_balance(
        self, partner_id: str, as_of: Optional[date] = None,
    ) -> Optional[float]:
        partner = self._state.find_partner(partner_id)
        if partner is None:
            return None
        return current_balance(
            partner, self._state.documents, self._state.payments, as_of,
        )

    def partner_statement(
        self, partner_id: str, period: DatePeriod,
    ) -> Optional[PartnerStatement]:
        partner = self._state.find_partner(partner_id)
        if partner is None:
            return None
        return build_statement(
            partner, self._state.documents, self._state.payments, period,
        )

    def current_cash_session(self) -> Optional[CashSession]:
        return self._state.open_session()

    def cash_history(
        self, period: Optional[DatePeriod] = None,
    ) -> Tuple[CashSession, ...]:
        """Closed sessions, newest first; the current month by default."""
        if period is None:
            period = month_to_date(self._clock.today())
        return closed_sessions_in(self._state.cash_sessions, period)

    def document_progress(self, document_id: str) -> Optional[PaymentProgress]:
        document = self._state.find_document(document_id)
        if document is None:
            return None
        return payment_progress(
            document, self._state.payments_for_document(document_id),
        )

    def dashboard(self) -> DashboardSnapshot:
        return build_dashboard(
            self._state.documents,
            self._state.products,
            self._state.payments,
            self._settings.alert_limit,
        )

    def check_summary(self) -> CheckSummary:
        return check_summary(self._state.payments, self._state.partners)

    def stock_journal(
        self, period: Optional[DatePeriod] = None,
    ) -> Tuple[StockMovement, ...]:
        return stock_movements(self._state.documents, period)

    def line_for_product(
        self,
        line_id: str,
        product_id: str,
        document_type: DocumentType,
        quantity: float = 1,
    ) -> Optional[LineItem]:
        product = self._state.find_product(product_id)
        if product is None:
            return None
        return line_for_product(
            line_id,
            product,
            document_type,
            quantity=quantity,
            default_tax_rate=self._settings.default_tax_rate,
        )
