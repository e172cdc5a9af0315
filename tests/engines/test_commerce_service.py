"""
Comptoir Commerce Service — Tests
===================================
Command handling end to end: policies, event log, state commit,
subscriber dispatch and read models.
"""

import uuid
from datetime import date, datetime, timezone

import pytest

NOW = datetime(2026, 2, 19, 8, 0, 0, tzinfo=timezone.utc)
TODAY = date(2026, 2, 19)


# ══════════════════════════════════════════════════════════════
# TEST INFRASTRUCTURE
# ══════════════════════════════════════════════════════════════

def _service(**kwargs):
    from core.time.clock import FixedClock
    from engines.commerce.services import CommerceService
    clock = FixedClock(NOW)
    return CommerceService(clock=clock, **kwargs), clock


def _send(service, clock, request):
    return service.handle(request.to_command(
        actor_id="user-1",
        command_id=uuid.uuid4(),
        correlation_id=uuid.uuid4(),
        issued_at=clock.now_utc(),
    ))


def _partner(partner_id="p1", partner_type="CLIENT", initial_balance=0.0):
    from core.primitives.party import Partner, PartnerType
    return Partner(
        partner_id=partner_id,
        partner_type=PartnerType(partner_type),
        name=f"Partner {partner_id}",
        initial_balance=initial_balance,
    )


def _document(document_id="inv-1", document_type="INVOICE", status="UNPAID",
              quantity=12, partner_id="p1", product_id=None):
    """quantity × 100 HT at 20%."""
    from core.primitives.document import Document, DocumentStatus, DocumentType, LineItem
    return Document(
        document_id=document_id,
        document_type=DocumentType(document_type),
        reference=document_id.upper(),
        issued_on=date(2026, 2, 1),
        partner_id=partner_id,
        status=DocumentStatus(status),
        lines=(
            LineItem(
                line_id="l1", description="Desk", quantity=quantity,
                unit_price=100.0, tax_rate=20.0, product_id=product_id,
            ),
        ),
    )


def _payment(payment_id, amount, *, method="CASH", document_id="inv-1", partner_id="p1"):
    from core.primitives.payment import Payment, PaymentMethod
    method = PaymentMethod(method)
    return Payment.create(
        payment_id=payment_id,
        partner_id=partner_id,
        amount=amount,
        paid_on=TODAY,
        method=method,
        document_id=document_id,
        due_date=date(2026, 3, 15) if method == PaymentMethod.CHECK else None,
    )


def _with_invoice(initial_balance=0.0):
    from engines.commerce.commands import DocumentSaveRequest, PartnerSaveRequest
    service, clock = _service()
    _send(service, clock, PartnerSaveRequest(partner=_partner(initial_balance=initial_balance)))
    _send(service, clock, DocumentSaveRequest(document=_document()))
    return service, clock


# ══════════════════════════════════════════════════════════════
# ACCEPT / REJECT CONTRACT
# ══════════════════════════════════════════════════════════════

class TestCommandHandling:
    def test_accepted_appends_event_and_commits(self):
        from engines.commerce.commands import PartnerSaveRequest
        service, clock = _service()
        outcome = _send(service, clock, PartnerSaveRequest(partner=_partner()))
        assert outcome.is_accepted
        assert outcome.event_type == "commerce.partner.saved.v1"
        assert outcome.sequence == 1
        assert outcome.occurred_at == NOW
        assert service.state.find_partner("p1") is not None
        assert [e.event_type for e in service.event_log] == ["commerce.partner.saved.v1"]

    def test_request_stamps_source_engine(self):
        from engines.commerce.commands import PartnerDeleteRequest
        command = PartnerDeleteRequest(partner_id="p1").to_command(
            actor_id="user-1",
            command_id=uuid.uuid4(),
            correlation_id=uuid.uuid4(),
            issued_at=NOW,
        )
        assert command.source_engine == "commerce"
        assert command.command_type == "commerce.partner.delete.request"

    def test_seeded_with_default_tax_rates(self):
        service, _ = _service()
        assert service.state.find_tax_rate("vat-20").rate == 20.0

    def test_rejection_is_logged_and_state_untouched(self):
        from engines.commerce.commands import CashSessionCloseRequest
        service, clock = _service()
        before = service.state
        outcome = _send(service, clock, CashSessionCloseRequest(session_id="none", actual_balance=0.0))
        assert outcome.is_rejected
        assert outcome.reason.code == "CASH_SESSION_NOT_FOUND"
        assert outcome.event_type == "commerce.cash_session.close.rejected.v1"
        assert service.state is before
        event = service.event_log.events()[-1]
        assert event.is_rejection
        assert event.payload["reason"]["code"] == "CASH_SESSION_NOT_FOUND"
        assert event.payload["request"] == {"session_id": "none", "actual_balance": 0.0}

    def test_unknown_command_type(self):
        from core.commands.base import Command
        service, _ = _service()
        outcome = service.handle(Command(
            command_id=uuid.uuid4(),
            command_type="commerce.widget.frobnicate.request",
            actor_type="HUMAN",
            actor_id="user-1",
            payload={},
            issued_at=NOW,
            correlation_id=uuid.uuid4(),
            source_engine="commerce",
        ))
        assert outcome.reason.code == "UNKNOWN_COMMAND_TYPE"
        assert outcome.event_type == "commerce.widget.frobnicate.rejected.v1"

    def test_malformed_payload(self):
        from core.commands.base import Command
        from engines.commerce.commands import PAYMENT_RECORD_REQUEST, TAXONOMY_NODE_ADD_REQUEST
        service, _ = _service()
        before = service.state
        for command_type, payload in (
            (PAYMENT_RECORD_REQUEST, {"payment": {"payment_id": "x"}}),
            (TAXONOMY_NODE_ADD_REQUEST, {}),
        ):
            outcome = service.handle(Command(
                command_id=uuid.uuid4(),
                command_type=command_type,
                actor_type="SYSTEM",
                actor_id="importer",
                payload=payload,
                issued_at=NOW,
                correlation_id=uuid.uuid4(),
                source_engine="commerce",
            ))
            assert outcome.reason.code == "INVALID_PAYLOAD"
        assert service.state is before

    def test_subscribers_receive_events(self):
        from core.events.registry import ALL_EVENTS
        from engines.commerce.commands import PartnerDeleteRequest, PartnerSaveRequest
        service, clock = _service()
        seen = []

        def broken(event):
            raise RuntimeError("report offline")

        service.subscribe(ALL_EVENTS, lambda event: seen.append(event.event_type), "audit")
        service.subscribe("commerce.partner.saved.v1", broken, "reports")

        outcome = _send(service, clock, PartnerSaveRequest(partner=_partner()))
        _send(service, clock, PartnerDeleteRequest(partner_id="p1"))

        assert outcome.is_accepted
        assert seen == ["commerce.partner.saved.v1", "commerce.partner.deleted.v1"]

    def test_rebuild_matches_live_state(self):
        from engines.commerce.commands import (
            CashSessionOpenRequest, DocumentConvertRequest, PaymentRecordRequest,
        )
        from core.primitives.document import DocumentType
        service, clock = _with_invoice()
        _send(service, clock, CashSessionOpenRequest(session_id="s1", opening_balance=100.0))
        _send(service, clock, CashSessionOpenRequest(session_id="s2", opening_balance=100.0))
        _send(service, clock, PaymentRecordRequest(payment=_payment("pay-1", 1440.0)))
        clock.advance(days=1)
        _send(service, clock, DocumentConvertRequest(
            source_document_id="inv-1", target_type=DocumentType.CREDIT_NOTE, document_id="cn-1",
        ))
        assert service.rebuild() == service.state


# ══════════════════════════════════════════════════════════════
# BALANCES & SETTLEMENT
# ══════════════════════════════════════════════════════════════

class TestBalances:
    def test_paid_invoice_returns_to_initial_balance(self):
        from core.primitives.document import DocumentStatus
        from engines.commerce.commands import PaymentRecordRequest
        service, clock = _with_invoice(initial_balance=150.0)
        assert service.partner_balance("p1") == pytest.approx(1590.0)
        _send(service, clock, PaymentRecordRequest(payment=_payment("pay-1", 1440.0, method="TRANSFER")))
        assert service.partner_balance("p1") == pytest.approx(150.0)
        assert service.state.find_document("inv-1").status == DocumentStatus.PAID

    def test_settlement_tolerance(self):
        from core.primitives.document import DocumentStatus
        from engines.commerce.commands import PaymentRecordRequest
        service, clock = _with_invoice()
        _send(service, clock, PaymentRecordRequest(payment=_payment("pay-1", 1000.0, method="CARD")))
        assert service.state.find_document("inv-1").status == DocumentStatus.UNPAID
        _send(service, clock, PaymentRecordRequest(payment=_payment("pay-2", 430.0, method="CARD")))
        assert service.state.find_document("inv-1").status == DocumentStatus.UNPAID
        assert service.document_progress("inv-1").remaining == pytest.approx(10.0)
        _send(service, clock, PaymentRecordRequest(payment=_payment("pay-3", 9.995, method="CARD")))
        assert service.state.find_document("inv-1").status == DocumentStatus.PAID

    def test_cancelled_invoice_excluded(self):
        from core.primitives.document import DocumentStatus
        from engines.commerce.commands import DocumentSetStatusRequest
        service, clock = _with_invoice()
        _send(service, clock, DocumentSetStatusRequest(
            document_id="inv-1", status=DocumentStatus.CANCELLED,
        ))
        assert service.partner_balance("p1") == 0.0
        assert service.dashboard().sales_total == 0.0

    def test_statement_closes_at_balance(self):
        from core.time.temporal import DatePeriod
        from engines.commerce.commands import PaymentRecordRequest
        service, clock = _with_invoice(initial_balance=150.0)
        _send(service, clock, PaymentRecordRequest(payment=_payment("pay-1", 400.0, method="TRANSFER")))
        statement = service.partner_statement("p1", DatePeriod(date(2026, 2, 1), TODAY))
        assert statement.opening_balance == 150.0
        assert [line.source_id for line in statement.lines] == ["inv-1", "pay-1"]
        assert statement.closing_balance == pytest.approx(service.partner_balance("p1", TODAY))

    def test_unknown_partner_queries(self):
        from core.time.temporal import DatePeriod
        service, _ = _service()
        assert service.partner_balance("ghost") is None
        assert service.partner_statement("ghost", DatePeriod(TODAY, TODAY)) is None
        assert service.document_progress("ghost") is None


# ══════════════════════════════════════════════════════════════
# CASH REGISTER
# ══════════════════════════════════════════════════════════════

class TestCashRegister:
    def test_open_pay_close(self):
        from core.primitives.cash import CashSessionStatus
        from core.time.temporal import DatePeriod
        from engines.commerce.commands import (
            CashSessionCloseRequest, CashSessionOpenRequest, PaymentRecordRequest,
        )
        service, clock = _with_invoice()
        _send(service, clock, CashSessionOpenRequest(session_id="s1", opening_balance=500.0))
        _send(service, clock, PaymentRecordRequest(payment=_payment("pay-1", 200.0)))

        session = service.current_cash_session()
        assert session.total_in == 200.0
        assert session.theoretical_balance == 700.0

        clock.advance(hours=10)
        outcome = _send(service, clock, CashSessionCloseRequest(session_id="s1", actual_balance=695.0))
        assert outcome.is_accepted
        closed = service.state.find_session("s1")
        assert closed.status == CashSessionStatus.CLOSED
        assert closed.difference == pytest.approx(-5.0)
        assert closed.closed_at == datetime(2026, 2, 19, 18, 0, 0, tzinfo=timezone.utc)
        assert service.current_cash_session() is None

        again = _send(service, clock, CashSessionCloseRequest(session_id="s1", actual_balance=695.0))
        assert again.reason.code == "CASH_SESSION_NOT_OPEN"

        history = service.cash_history(DatePeriod(TODAY, TODAY))
        assert [s.session_id for s in history] == ["s1"]

    def test_second_open_rejected(self):
        from engines.commerce.commands import CashSessionOpenRequest
        service, clock = _service()
        _send(service, clock, CashSessionOpenRequest(session_id="s1", opening_balance=500.0))
        outcome = _send(service, clock, CashSessionOpenRequest(session_id="s2", opening_balance=50.0))
        assert outcome.reason.code == "CASH_SESSION_ALREADY_OPEN"
        assert [s.session_id for s in service.state.cash_sessions] == ["s1"]

    def test_supplier_payment_and_expense_go_out(self):
        from core.primitives.payment import Expense, PaymentMethod
        from engines.commerce.commands import (
            CashSessionOpenRequest, ExpenseRecordRequest, PartnerSaveRequest, PaymentRecordRequest,
        )
        service, clock = _service()
        _send(service, clock, PartnerSaveRequest(partner=_partner("s1", "SUPPLIER")))
        _send(service, clock, CashSessionOpenRequest(session_id="cash-1", opening_balance=500.0))
        _send(service, clock, PaymentRecordRequest(
            payment=_payment("out-1", 120.0, partner_id="s1", document_id=None),
        ))
        _send(service, clock, ExpenseRecordRequest(expense=Expense(
            expense_id="e1", amount=30.0, spent_on=TODAY, method=PaymentMethod.CASH,
        )))
        assert service.current_cash_session().total_out == 150.0
        assert service.current_cash_session().theoretical_balance == 350.0

    def test_repeated_payment_counted_once(self):
        from engines.commerce.commands import CashSessionOpenRequest, PaymentRecordRequest
        service, clock = _with_invoice()
        _send(service, clock, CashSessionOpenRequest(session_id="s1", opening_balance=500.0))
        first = _send(service, clock, PaymentRecordRequest(payment=_payment("pay-1", 200.0)))
        second = _send(service, clock, PaymentRecordRequest(payment=_payment("pay-1", 200.0)))

        assert first.is_accepted
        assert second.reason.code == "PAYMENT_ALREADY_RECORDED"
        assert len(service.state.payments) == 1
        assert service.current_cash_session().total_in == 200.0
        assert service.current_cash_session().theoretical_balance == 700.0
        assert service.rebuild() == service.state

    def test_repeated_expense_counted_once(self):
        from core.primitives.payment import Expense, PaymentMethod
        from engines.commerce.commands import CashSessionOpenRequest, ExpenseRecordRequest
        service, clock = _service()
        _send(service, clock, CashSessionOpenRequest(session_id="s1", opening_balance=500.0))
        expense = Expense(expense_id="e1", amount=30.0, spent_on=TODAY, method=PaymentMethod.CASH)
        _send(service, clock, ExpenseRecordRequest(expense=expense))
        again = _send(service, clock, ExpenseRecordRequest(expense=expense))

        assert again.reason.code == "EXPENSE_ALREADY_RECORDED"
        assert len(service.state.expenses) == 1
        assert service.current_cash_session().total_out == 30.0

    def test_cash_history_defaults_to_current_month(self):
        from core.time.temporal import DatePeriod
        from engines.commerce.commands import CashSessionCloseRequest, CashSessionOpenRequest
        service, clock = _service()
        _send(service, clock, CashSessionOpenRequest(session_id="s1", opening_balance=100.0))
        _send(service, clock, CashSessionCloseRequest(session_id="s1", actual_balance=100.0))
        clock.advance(days=1)
        _send(service, clock, CashSessionOpenRequest(session_id="s2", opening_balance=100.0))
        _send(service, clock, CashSessionCloseRequest(session_id="s2", actual_balance=100.0))

        assert [s.session_id for s in service.cash_history()] == ["s2", "s1"]
        clock.advance(days=10)
        assert service.cash_history() == ()
        everything = service.cash_history(DatePeriod(date(2026, 1, 1), date(2026, 3, 31)))
        assert len(everything) == 2


# ══════════════════════════════════════════════════════════════
# DOCUMENTS, PARTNERS & CHECKS
# ══════════════════════════════════════════════════════════════

class TestDocumentsAndPartners:
    def test_convert_quote_to_invoice(self):
        from core.primitives.document import DocumentStatus, DocumentType
        from engines.commerce.commands import DocumentConvertRequest, DocumentSaveRequest
        service, clock = _with_invoice()
        _send(service, clock, DocumentSaveRequest(document=_document("q-1", "QUOTE", "VALIDATED")))
        outcome = _send(service, clock, DocumentConvertRequest(
            source_document_id="q-1", target_type=DocumentType.INVOICE, document_id="inv-2",
        ))
        assert outcome.is_accepted
        invoice = service.state.find_document("inv-2")
        assert invoice.document_type == DocumentType.INVOICE
        assert invoice.status == DocumentStatus.DRAFT
        assert invoice.reference == "DRAFT"
        assert invoice.issued_on == TODAY

    def test_conversion_rules(self):
        from core.primitives.document import DocumentType
        from engines.commerce.commands import DocumentConvertRequest
        service, clock = _with_invoice()
        backwards = _send(service, clock, DocumentConvertRequest(
            source_document_id="inv-1", target_type=DocumentType.QUOTE, document_id="q-9",
        ))
        assert backwards.reason.code == "CONVERSION_NOT_SUPPORTED"
        missing = _send(service, clock, DocumentConvertRequest(
            source_document_id="nope", target_type=DocumentType.INVOICE, document_id="inv-9",
        ))
        assert missing.reason.code == "DOCUMENT_NOT_FOUND"

    def test_conversion_never_overwrites_a_document(self):
        from core.primitives.document import DocumentStatus, DocumentType
        from engines.commerce.commands import DocumentConvertRequest, DocumentSaveRequest
        service, clock = _with_invoice()
        _send(service, clock, DocumentSaveRequest(document=_document("inv-2", quantity=5)))
        before = service.partner_balance("p1")

        outcome = _send(service, clock, DocumentConvertRequest(
            source_document_id="inv-1", target_type=DocumentType.CREDIT_NOTE, document_id="inv-2",
        ))

        assert outcome.reason.code == "DOCUMENT_ALREADY_EXISTS"
        kept = service.state.find_document("inv-2")
        assert kept.document_type == DocumentType.INVOICE
        assert kept.status == DocumentStatus.UNPAID
        assert service.partner_balance("p1") == before

    def test_status_can_move_back_from_cancelled(self):
        from core.primitives.document import DocumentStatus
        from engines.commerce.commands import DocumentSetStatusRequest
        service, clock = _with_invoice()
        _send(service, clock, DocumentSetStatusRequest(
            document_id="inv-1", status=DocumentStatus.CANCELLED,
        ))
        assert service.partner_balance("p1") == 0.0
        outcome = _send(service, clock, DocumentSetStatusRequest(
            document_id="inv-1", status=DocumentStatus.DRAFT,
        ))
        assert outcome.is_accepted
        assert service.state.find_document("inv-1").status == DocumentStatus.DRAFT

    def test_referenced_partner_cannot_be_deleted(self):
        from engines.commerce.commands import PartnerDeleteRequest, PartnerSaveRequest
        service, clock = _with_invoice()
        _send(service, clock, PartnerSaveRequest(partner=_partner("p2")))

        in_use = _send(service, clock, PartnerDeleteRequest(partner_id="p1"))
        assert in_use.reason.code == "PARTNER_IN_USE"
        assert service.state.find_partner("p1") is not None

        free = _send(service, clock, PartnerDeleteRequest(partner_id="p2"))
        assert free.is_accepted
        assert service.state.find_partner("p2") is None

    def test_payment_on_foreign_document_rejected(self):
        from engines.commerce.commands import PaymentRecordRequest
        service, clock = _with_invoice()
        outcome = _send(service, clock, PaymentRecordRequest(
            payment=_payment("pay-1", 10.0, partner_id="p2"),
        ))
        assert outcome.reason.code == "DOCUMENT_PARTNER_MISMATCH"
        assert service.state.payments == ()

    def test_check_tracking(self):
        from core.primitives.payment import PaymentStatus
        from engines.commerce.commands import PaymentRecordRequest, PaymentSetStatusRequest
        service, clock = _with_invoice()
        _send(service, clock, PaymentRecordRequest(payment=_payment("chk-1", 500.0, method="CHECK")))
        _send(service, clock, PaymentRecordRequest(payment=_payment("tr-1", 100.0, method="TRANSFER")))

        summary = service.check_summary()
        assert summary.pending_count == 1
        assert summary.to_collect == 500.0

        cleared = _send(service, clock, PaymentSetStatusRequest(
            payment_id="chk-1", status=PaymentStatus.CLEARED,
        ))
        assert cleared.is_accepted
        assert service.state.find_payment("chk-1").status == PaymentStatus.CLEARED
        assert service.check_summary().pending_count == 0

        transfer = _send(service, clock, PaymentSetStatusRequest(
            payment_id="tr-1", status=PaymentStatus.REJECTED,
        ))
        assert transfer.reason.code == "PAYMENT_NOT_A_CHECK"


# ══════════════════════════════════════════════════════════════
# CATALOG & INVENTORY
# ══════════════════════════════════════════════════════════════

class TestCatalogAndInventory:
    def _with_product(self, stock=10):
        from core.primitives.item import Product
        from engines.commerce.commands import ProductSaveRequest
        service, clock = _service()
        _send(service, clock, ProductSaveRequest(product=Product(
            product_id="prod-1", reference="SKU-1", name="Desk",
            price=250.0, cost=140.0, stock=stock, min_stock=2,
        )))
        return service, clock

    def test_taxonomy_requires_parent(self):
        from core.primitives.item import TaxonomyLevel, TaxonomyNode
        from engines.commerce.commands import TaxonomyNodeAddRequest, TaxonomyNodeRenameRequest
        service, clock = _service()
        chairs = TaxonomyNode(
            node_id="c1", level=TaxonomyLevel.CATEGORY, name="Chairs", parent_id="f1",
        )
        orphan = _send(service, clock, TaxonomyNodeAddRequest(node=chairs))
        assert orphan.reason.code == "PARENT_NODE_NOT_FOUND"

        _send(service, clock, TaxonomyNodeAddRequest(node=TaxonomyNode(
            node_id="f1", level=TaxonomyLevel.FAMILY, name="Furniture",
        )))
        assert _send(service, clock, TaxonomyNodeAddRequest(node=chairs)).is_accepted
        _send(service, clock, TaxonomyNodeRenameRequest(node_id="c1", name="Seating"))
        assert service.state.find_node("c1").name == "Seating"

    def test_line_for_product_uses_default_rate(self):
        from core.primitives.document import DocumentType
        service, _ = self._with_product()
        line = service.line_for_product("l1", "prod-1", DocumentType.INVOICE, quantity=2)
        assert line.unit_price == 250.0
        assert line.tax_rate == 20.0
        assert line.total_ttc == pytest.approx(600.0)
        assert service.line_for_product("l1", "ghost", DocumentType.INVOICE) is None

    def test_stock_journal(self):
        from core.primitives.inventory import StockDirection
        from engines.commerce.commands import DocumentSaveRequest, PartnerSaveRequest
        service, clock = self._with_product()
        _send(service, clock, PartnerSaveRequest(partner=_partner()))
        _send(service, clock, DocumentSaveRequest(document=_document(
            "bl-1", "DELIVERY_NOTE", "VALIDATED", quantity=3, product_id="prod-1",
        )))
        journal = service.stock_journal()
        assert len(journal) == 1
        assert journal[0].direction == StockDirection.OUT
        assert journal[0].partner_name == "Partner p1"
        assert service.state.find_product("prod-1").stock == 10

    def test_validated_count_updates_stock(self):
        from core.primitives.inventory import InventoryCountStatus, start_inventory_count
        from dataclasses import replace
        from engines.commerce.commands import InventoryCountSaveRequest
        service, clock = self._with_product(stock=10)
        draft = start_inventory_count("count-1", TODAY, service.state.products)
        counted = replace(
            draft,
            lines=(replace(draft.lines[0], counted=1),),
            status=InventoryCountStatus.VALIDATED,
        )
        assert _send(service, clock, InventoryCountSaveRequest(count=counted)).is_accepted
        assert service.state.find_product("prod-1").stock == 1
        assert service.dashboard().low_stock_count == 1

        again = _send(service, clock, InventoryCountSaveRequest(count=draft))
        assert again.reason.code == "INVENTORY_COUNT_VALIDATED"
        assert service.state.find_product("prod-1").stock == 1
