"""
Comptoir Core Primitives — Test Suite
=======================================
Tests for: pricing, document, ledger classifier, party, payment,
cash session, item, inventory, actor primitives.
"""

from datetime import date, datetime, timezone

import pytest

NOW = datetime(2026, 2, 19, 12, 0, 0, tzinfo=timezone.utc)
TODAY = date(2026, 2, 19)


def _line(line_id="l1", quantity=1, unit_price=100.0, discount=0.0, tax_rate=20.0, product_id=None):
    from core.primitives.document import LineItem
    return LineItem(
        line_id=line_id,
        description="Item",
        quantity=quantity,
        unit_price=unit_price,
        discount=discount,
        tax_rate=tax_rate,
        product_id=product_id,
    )


def _document(document_type, status, lines=(), issued_on=TODAY, document_id="d1"):
    from core.primitives.document import Document
    return Document(
        document_id=document_id,
        document_type=document_type,
        reference=f"REF-{document_id}",
        issued_on=issued_on,
        partner_id="p1",
        partner_name="Acme",
        lines=tuple(lines),
        status=status,
    )


# ══════════════════════════════════════════════════════════════
# PRICING
# ══════════════════════════════════════════════════════════════

class TestComputeLine:
    def test_discount_then_tax(self):
        from core.primitives.pricing import compute_line
        totals = compute_line(2, 50.0, 10, 20)
        assert totals.total_ht == pytest.approx(90.0)
        assert totals.total_ttc == pytest.approx(108.0)
        assert totals.tax == pytest.approx(18.0)

    def test_matches_closed_form(self):
        from core.primitives.pricing import compute_line
        for quantity in (0, 1, 3, 2.5):
            for unit_price in (0.0, 9.99, 1234.5):
                for discount in (0, 12.5, 100):
                    for tax_rate in (0, 5.5, 20):
                        totals = compute_line(quantity, unit_price, discount, tax_rate)
                        expected = (
                            quantity * unit_price
                            * (1 - discount / 100) * (1 + tax_rate / 100)
                        )
                        assert totals.total_ttc == pytest.approx(expected, rel=1e-9, abs=1e-9)

    def test_zero_tax_keeps_ht(self):
        from core.primitives.pricing import compute_line
        totals = compute_line(3, 12.34, 5, 0)
        assert totals.total_ttc == totals.total_ht

    def test_zero_quantity_or_full_discount(self):
        from core.primitives.pricing import compute_line
        assert compute_line(0, 80.0, 0, 20).total_ht == 0
        assert compute_line(4, 80.0, 100, 20).total_ht == 0

    def test_negative_inputs_pass_through(self):
        from core.primitives.pricing import compute_line
        assert compute_line(-1, 10.0, 0, 0).total_ht == pytest.approx(-10.0)


class TestTtcConversion:
    def test_round_trip_from_ttc(self):
        from core.primitives.pricing import compute_line, unit_price_from_ttc
        unit_price = unit_price_from_ttc(120, 20)
        assert unit_price == 100.0
        assert compute_line(1, unit_price, 0, 20).total_ttc == pytest.approx(120.0)

    def test_back_solved_price_is_rounded_before_reuse(self):
        from core.primitives.pricing import compute_line, unit_price_from_ttc
        unit_price = unit_price_from_ttc(10, 5.5)
        assert unit_price == 9.48
        assert compute_line(1, unit_price, 0, 5.5).total_ttc == pytest.approx(10.0014)

    def test_displayed_ttc_unit_price(self):
        from core.primitives.pricing import ttc_unit_price
        assert ttc_unit_price(9.48, 5.5) == 10.0
        assert ttc_unit_price(100, 20) == 120.0

    def test_round_money_is_half_up(self):
        from core.primitives.pricing import round_money
        assert round_money(2.675) == 2.68
        assert round_money(1439.995) == 1440.0
        assert round_money(-1.005) == -1.01


# ══════════════════════════════════════════════════════════════
# DOCUMENT
# ══════════════════════════════════════════════════════════════

class TestLineItem:
    def test_totals_are_derived(self):
        line = _line(quantity=2, unit_price=50.0, discount=10, tax_rate=20)
        assert line.total_ht == pytest.approx(90.0)
        assert line.total_ttc == pytest.approx(108.0)

    def test_discount_out_of_range_rejected(self):
        with pytest.raises(ValueError, match="discount"):
            _line(discount=120)

    def test_negative_quantity_rejected(self):
        with pytest.raises(ValueError, match="quantity"):
            _line(quantity=-1)

    def test_negative_tax_rejected(self):
        with pytest.raises(ValueError, match="tax_rate"):
            _line(tax_rate=-5)

    def test_non_numeric_price_rejected(self):
        with pytest.raises(TypeError, match="unit_price"):
            _line(unit_price="100")

    def test_with_ttc_unit_price(self):
        line = _line(unit_price=0.0, tax_rate=20).with_ttc_unit_price(120)
        assert line.unit_price == 100.0
        assert line.ttc_unit_price == 120.0


class TestDocumentTotals:
    def test_sums_lines_and_derives_tax(self):
        from core.primitives.document import DocumentStatus, DocumentType
        doc = _document(
            DocumentType.INVOICE,
            DocumentStatus.UNPAID,
            lines=[
                _line("l1", quantity=2, unit_price=50.0, discount=10, tax_rate=20),
                _line("l2", quantity=1, unit_price=10.0, tax_rate=5.5),
            ],
        )
        assert doc.total_ht == pytest.approx(100.0)
        assert doc.total_ttc == pytest.approx(118.55)
        assert doc.tax == pytest.approx(doc.total_ttc - doc.total_ht)
        assert doc.total_ht == pytest.approx(sum(l.total_ht for l in doc.lines))

    def test_empty_document_is_zero(self):
        from core.primitives.document import compute_document_totals
        totals = compute_document_totals([])
        assert (totals.total_ht, totals.tax, totals.total_ttc) == (0.0, 0.0, 0.0)

    def test_order_independent(self):
        from core.primitives.document import compute_document_totals
        lines = [_line("a", 3, 19.99, 5, 20), _line("b", 1, 7.5, 0, 10)]
        forward = compute_document_totals(lines)
        backward = compute_document_totals(list(reversed(lines)))
        assert forward.total_ttc == pytest.approx(backward.total_ttc)

    def test_duplicate_line_ids_rejected(self):
        from core.primitives.document import DocumentStatus, DocumentType
        with pytest.raises(ValueError, match="unique"):
            _document(
                DocumentType.QUOTE, DocumentStatus.DRAFT,
                lines=[_line("same"), _line("same")],
            )

    def test_issued_on_must_be_a_calendar_day(self):
        from core.primitives.document import DocumentStatus, DocumentType
        with pytest.raises(TypeError, match="not a datetime"):
            _document(DocumentType.INVOICE, DocumentStatus.UNPAID, issued_on=NOW)

    def test_ledger_participation(self):
        from core.primitives.document import DocumentStatus, DocumentType
        assert not _document(DocumentType.INVOICE, DocumentStatus.DRAFT).counts_in_ledger
        assert not _document(DocumentType.INVOICE, DocumentStatus.CANCELLED).counts_in_ledger
        assert _document(DocumentType.INVOICE, DocumentStatus.VALIDATED).counts_in_ledger

    def test_payable_and_purchase_side(self):
        from core.primitives.document import DocumentStatus, DocumentType
        assert _document(DocumentType.DELIVERY_NOTE, DocumentStatus.DRAFT).is_payable
        assert not _document(DocumentType.QUOTE, DocumentStatus.DRAFT).is_payable
        assert _document(DocumentType.ORDER, DocumentStatus.DRAFT).is_purchase_side
        assert not _document(DocumentType.INVOICE, DocumentStatus.DRAFT).is_purchase_side

    def test_serialization(self):
        from core.primitives.document import Document, DocumentStatus, DocumentType
        doc = _document(
            DocumentType.PURCHASE, DocumentStatus.VALIDATED,
            lines=[_line(product_id="prod-1")],
        )
        restored = Document.from_dict(doc.to_dict())
        assert restored == doc
        assert restored.lines[0].product_id == "prod-1"


# ══════════════════════════════════════════════════════════════
# LEDGER CLASSIFIER
# ══════════════════════════════════════════════════════════════

class TestFlowClassification:
    @pytest.mark.parametrize(
        "partner_type, nature, expected",
        [
            ("CLIENT", "PAYMENT", True),
            ("CLIENT", "REFUND", False),
            ("SUPPLIER", "PAYMENT", False),
            ("SUPPLIER", "REFUND", True),
        ],
    )
    def test_truth_table(self, partner_type, nature, expected):
        from core.primitives.ledger import is_incoming
        from core.primitives.party import PartnerType
        from core.primitives.payment import PaymentNature
        assert is_incoming(PartnerType(partner_type), PaymentNature(nature)) is expected

    def test_unknown_partner_classified_as_non_client(self):
        from core.primitives.ledger import is_incoming
        from core.primitives.payment import PaymentNature
        assert is_incoming(None, PaymentNature.PAYMENT) is False
        assert is_incoming(None, PaymentNature.REFUND) is True

    def test_debit_and_credit_documents(self):
        from core.primitives.document import DocumentType
        from core.primitives.ledger import is_credit, is_debit
        assert is_debit(DocumentType.INVOICE)
        assert is_debit(DocumentType.PURCHASE)
        assert not is_debit(DocumentType.CREDIT_NOTE)
        assert not is_debit(DocumentType.PURCHASE_CREDIT_NOTE)
        assert is_credit(DocumentType.PURCHASE_CREDIT_NOTE)

    def test_non_ledger_documents(self):
        from core.primitives.document import DocumentType
        from core.primitives.ledger import ledger_side
        for document_type in (
            DocumentType.QUOTE, DocumentType.ORDER, DocumentType.DELIVERY_NOTE,
        ):
            assert ledger_side(document_type) is None


# ══════════════════════════════════════════════════════════════
# PARTY
# ══════════════════════════════════════════════════════════════

class TestPartner:
    def test_name_required(self):
        from core.primitives.party import Partner, PartnerType
        with pytest.raises(ValueError, match="name"):
            Partner(partner_id="p1", partner_type=PartnerType.CLIENT, name="")

    def test_display_name_fallback(self):
        from core.primitives.party import (
            UNKNOWN_PARTNER_NAME, Partner, PartnerType, partner_display_name,
        )
        partner = Partner(partner_id="p1", partner_type=PartnerType.SUPPLIER, name="Metro")
        assert partner_display_name(partner) == "Metro"
        assert partner_display_name(None) == UNKNOWN_PARTNER_NAME

    def test_company_currency_checked(self):
        from core.primitives.party import CompanySettings
        with pytest.raises(ValueError, match="3-letter"):
            CompanySettings(name="Comptoir SARL", currency="EURO")


# ══════════════════════════════════════════════════════════════
# PAYMENT
# ══════════════════════════════════════════════════════════════

class TestPayment:
    def _create(self, **overrides):
        from core.primitives.payment import Payment, PaymentMethod
        kwargs = dict(
            payment_id="pay-1",
            partner_id="p1",
            amount=100.0,
            paid_on=TODAY,
            method=PaymentMethod.CASH,
        )
        kwargs.update(overrides)
        return Payment.create(**kwargs)

    def test_non_check_starts_cleared(self):
        from core.primitives.payment import PaymentMethod, PaymentNature, PaymentStatus
        for method in (PaymentMethod.CASH, PaymentMethod.CARD, PaymentMethod.TRANSFER):
            payment = self._create(method=method)
            assert payment.status == PaymentStatus.CLEARED
            assert payment.nature == PaymentNature.PAYMENT

    def test_check_starts_pending(self):
        from core.primitives.payment import PaymentMethod, PaymentStatus
        payment = self._create(method=PaymentMethod.CHECK, due_date=date(2026, 3, 1))
        assert payment.status == PaymentStatus.PENDING
        assert payment.is_pending_check
        assert payment.tracking_date == date(2026, 3, 1)

    def test_check_requires_due_date(self):
        from core.primitives.payment import PaymentMethod
        with pytest.raises(ValueError, match="due_date"):
            self._create(method=PaymentMethod.CHECK)

    def test_amount_must_be_positive(self):
        with pytest.raises(ValueError, match="positive"):
            self._create(amount=0)
        with pytest.raises(ValueError, match="positive"):
            self._create(amount=-5)

    def test_status_transition_is_free(self):
        from core.primitives.payment import PaymentMethod, PaymentStatus
        check = self._create(method=PaymentMethod.CHECK, due_date=TODAY)
        rejected = check.with_status(PaymentStatus.REJECTED)
        assert rejected.with_status(PaymentStatus.PENDING).status == PaymentStatus.PENDING

    def test_expense_category_checked(self):
        from core.primitives.payment import Expense, PaymentMethod
        with pytest.raises(ValueError, match="category"):
            Expense(
                expense_id="e1", amount=10.0, spent_on=TODAY,
                method=PaymentMethod.CASH, category="CASINO",
            )

    def test_day_fields_reject_datetimes(self):
        from core.primitives.payment import Expense, PaymentMethod
        with pytest.raises(TypeError, match="paid_on"):
            self._create(paid_on=NOW)
        with pytest.raises(TypeError, match="due_date"):
            self._create(method=PaymentMethod.CHECK, due_date=NOW)
        with pytest.raises(TypeError, match="spent_on"):
            Expense(expense_id="e1", amount=10.0, spent_on=NOW, method=PaymentMethod.CASH)


# ══════════════════════════════════════════════════════════════
# CASH SESSION
# ══════════════════════════════════════════════════════════════

class TestCashSession:
    def test_theoretical_balance(self):
        from core.primitives.cash import CashSession
        session = CashSession(
            session_id="s1", opened_at=NOW, opening_balance=500.0,
            total_in=200.0, total_out=35.5,
        )
        assert session.is_open
        assert session.theoretical_balance == pytest.approx(664.5)

    def test_closed_requires_timestamp(self):
        from core.primitives.cash import CashSession, CashSessionStatus
        with pytest.raises(ValueError, match="closed_at"):
            CashSession(
                session_id="s1", opened_at=NOW, opening_balance=0.0,
                status=CashSessionStatus.CLOSED,
            )


# ══════════════════════════════════════════════════════════════
# ITEM
# ══════════════════════════════════════════════════════════════

class TestItem:
    def test_product_stock_helpers(self):
        from core.primitives.item import Product
        product = Product(
            product_id="prod-1", reference="SKU-1", name="Chair",
            price=80.0, cost=45.0, stock=3, min_stock=5,
        )
        assert product.stock_value == pytest.approx(135.0)
        assert product.is_low_stock

    def test_taxonomy_parents(self):
        from core.primitives.item import TaxonomyLevel, TaxonomyNode
        with pytest.raises(ValueError, match="parent"):
            TaxonomyNode(node_id="c1", level=TaxonomyLevel.CATEGORY, name="Chairs")
        with pytest.raises(ValueError, match="cannot have a parent"):
            TaxonomyNode(
                node_id="f1", level=TaxonomyLevel.FAMILY, name="Furniture",
                parent_id="x",
            )
        family = TaxonomyNode(node_id="f1", level=TaxonomyLevel.FAMILY, name="Furniture")
        assert family.renamed("Home").name == "Home"


# ══════════════════════════════════════════════════════════════
# INVENTORY
# ══════════════════════════════════════════════════════════════

class TestStockJournal:
    def _documents(self):
        from core.primitives.document import DocumentStatus, DocumentType
        return [
            _document(DocumentType.PURCHASE, DocumentStatus.VALIDATED,
                      [_line(quantity=5, product_id="prod-1")],
                      issued_on=date(2026, 2, 10), document_id="purchase"),
            _document(DocumentType.DELIVERY_NOTE, DocumentStatus.UNPAID,
                      [_line(quantity=2, product_id="prod-1"), _line("free", quantity=9)],
                      issued_on=date(2026, 2, 12), document_id="delivery"),
            _document(DocumentType.INVOICE, DocumentStatus.UNPAID,
                      [_line(quantity=2, product_id="prod-1")],
                      issued_on=date(2026, 2, 12), document_id="invoice"),
            _document(DocumentType.PURCHASE, DocumentStatus.DRAFT,
                      [_line(quantity=50, product_id="prod-1")],
                      issued_on=date(2026, 2, 13), document_id="draft"),
            _document(DocumentType.CREDIT_NOTE, DocumentStatus.VALIDATED,
                      [_line(quantity=1, product_id="prod-1")],
                      issued_on=date(2026, 2, 11), document_id="credit"),
        ]

    def test_directions_and_order(self):
        from core.primitives.inventory import StockDirection, stock_movements
        movements = stock_movements(self._documents())
        assert [m.document_id for m in movements] == ["delivery", "credit", "purchase"]
        assert [m.direction for m in movements] == [
            StockDirection.OUT, StockDirection.IN, StockDirection.IN,
        ]

    def test_net_flow(self):
        from core.primitives.inventory import net_stock_flow, stock_movements
        assert net_stock_flow(stock_movements(self._documents())) == {"prod-1": 4.0}

    def test_period_filter(self):
        from core.primitives.inventory import stock_movements
        from core.time.temporal import DatePeriod
        period = DatePeriod(date(2026, 2, 11), date(2026, 2, 11))
        assert [m.document_id for m in stock_movements(self._documents(), period)] == ["credit"]


class TestInventoryCount:
    def _products(self):
        from core.primitives.item import Product
        return (
            Product(product_id="a", reference="A", name="A", stock=10),
            Product(product_id="b", reference="B", name="B", stock=-2),
        )

    def test_start_prefills_lines(self):
        from core.primitives.inventory import start_inventory_count
        count = start_inventory_count("inv-1", TODAY, self._products())
        assert [(l.expected, l.counted) for l in count.lines] == [(10, 10), (-2, 0.0)]
        assert count.lines[1].difference == pytest.approx(2.0)

    def test_validated_count_sets_stock(self):
        from core.primitives.inventory import (
            InventoryCount, InventoryCountLine, InventoryCountStatus, apply_inventory_count,
        )
        count = InventoryCount(
            count_id="inv-1",
            counted_on=TODAY,
            lines=(InventoryCountLine(product_id="a", expected=10, counted=7),),
            status=InventoryCountStatus.VALIDATED,
        )
        products = apply_inventory_count(self._products(), count)
        assert [p.stock for p in products] == [7, -2]
        assert count.total_difference == pytest.approx(-3)

    def test_draft_count_changes_nothing(self):
        from core.primitives.inventory import (
            InventoryCount, InventoryCountLine, apply_inventory_count,
        )
        count = InventoryCount(
            count_id="inv-1",
            counted_on=TODAY,
            lines=(InventoryCountLine(product_id="a", expected=10, counted=7),),
        )
        assert apply_inventory_count(self._products(), count) == self._products()

    def test_product_listed_once(self):
        from core.primitives.inventory import InventoryCount, InventoryCountLine
        line = InventoryCountLine(product_id="a", expected=1, counted=1)
        with pytest.raises(ValueError, match="once"):
            InventoryCount(count_id="inv-1", counted_on=TODAY, lines=(line, line))


# ══════════════════════════════════════════════════════════════
# ACTOR
# ══════════════════════════════════════════════════════════════

class TestUser:
    def test_email_checked(self):
        from core.primitives.actor import User
        with pytest.raises(ValueError, match="email"):
            User(user_id="u1", name="Sam", email="sam")

    def test_serialization(self):
        from core.primitives.actor import Role, User
        user = User(user_id="u1", name="Sam", email="sam@example.com", role=Role.ADMIN)
        assert User.from_dict(user.to_dict()) == user
        assert user.is_admin
