"""Status derivation: settled (persisted) vs effective (read-time) status."""
from datetime import date, timedelta
from decimal import Decimal

import pytest

from models.invoice import InvoiceStatus
from services.status import can_transition, effective_status, is_overdue, settle_status

TODAY = date(2026, 3, 1)
PAST = TODAY - timedelta(days=1)
FUTURE = TODAY + timedelta(days=1)


class TestSettleStatus:

    @pytest.mark.parametrize("current", [InvoiceStatus.SENT, InvoiceStatus.DRAFT, InvoiceStatus.PARTIALLY_PAID])
    def test_full_payment_is_paid(self, current):
        assert settle_status(current, Decimal("1000.00"), Decimal("1000.00")) == InvoiceStatus.PAID

    def test_partial_payment(self):
        assert settle_status(InvoiceStatus.SENT, Decimal("1000.00"), Decimal("400.00")) == InvoiceStatus.PARTIALLY_PAID

    def test_no_payment_keeps_draft(self):
        assert settle_status(InvoiceStatus.DRAFT, Decimal("1000.00"), Decimal("0.00")) == InvoiceStatus.DRAFT

    @pytest.mark.parametrize(
        "current",
        [InvoiceStatus.SENT, InvoiceStatus.PARTIALLY_PAID, InvoiceStatus.PAID, InvoiceStatus.OVERDUE],
    )
    def test_no_payment_falls_back_to_sent(self, current):
        assert settle_status(current, Decimal("1000.00"), Decimal("0.00")) == InvoiceStatus.SENT

    def test_cancelled_is_terminal(self):
        assert settle_status(InvoiceStatus.CANCELLED, Decimal("100.00"), Decimal("100.00")) == InvoiceStatus.CANCELLED

    def test_total_raised_above_paid_reopens_paid_invoice(self):
        assert settle_status(InvoiceStatus.PAID, Decimal("1200.00"), Decimal("1000.00")) == InvoiceStatus.PARTIALLY_PAID


class TestEffectiveStatus:

    def test_past_due_with_balance_is_overdue(self):
        assert effective_status(InvoiceStatus.SENT, Decimal("200.00"), PAST, TODAY) == InvoiceStatus.OVERDUE
        assert effective_status(InvoiceStatus.PARTIALLY_PAID, Decimal("1.00"), PAST, TODAY) == InvoiceStatus.OVERDUE

    def test_due_today_is_not_overdue(self):
        assert effective_status(InvoiceStatus.SENT, Decimal("200.00"), TODAY, TODAY) == InvoiceStatus.SENT

    def test_paid_wins_over_overdue(self):
        assert effective_status(InvoiceStatus.PAID, Decimal("0.00"), PAST, TODAY) == InvoiceStatus.PAID

    @pytest.mark.parametrize("stored", [InvoiceStatus.DRAFT, InvoiceStatus.CANCELLED])
    def test_draft_and_cancelled_never_overdue(self, stored):
        assert effective_status(stored, Decimal("200.00"), PAST, TODAY) == stored

    def test_stored_overdue_is_recomputed(self):
        assert effective_status(InvoiceStatus.OVERDUE, Decimal("200.00"), FUTURE, TODAY) == InvoiceStatus.SENT
        assert effective_status(InvoiceStatus.OVERDUE, Decimal("200.00"), PAST, TODAY) == InvoiceStatus.OVERDUE

    def test_is_overdue(self):
        assert is_overdue(InvoiceStatus.SENT, Decimal("5.00"), PAST, TODAY)
        assert not is_overdue(InvoiceStatus.SENT, Decimal("5.00"), FUTURE, TODAY)


class TestTransitions:

    def test_draft_can_be_sent_or_cancelled(self):
        assert can_transition(InvoiceStatus.DRAFT, InvoiceStatus.SENT)
        assert can_transition(InvoiceStatus.DRAFT, InvoiceStatus.CANCELLED)

    def test_paid_cannot_be_cancelled(self):
        assert not can_transition(InvoiceStatus.PAID, InvoiceStatus.CANCELLED)

    def test_cancelled_is_terminal(self):
        for target in InvoiceStatus:
            assert not can_transition(InvoiceStatus.CANCELLED, target)

    def test_sent_cannot_go_back_to_draft(self):
        assert not can_transition(InvoiceStatus.SENT, InvoiceStatus.DRAFT)
