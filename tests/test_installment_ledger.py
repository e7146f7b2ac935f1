"""Tests for the installment ledger."""

import asyncio
from decimal import Decimal

import pytest

from committee_manager.ledger import LedgerError, NotFoundError, ValidationError
from committee_manager.models import InstallmentStatus, NotificationType
from committee_manager.state import INSTALLMENTS


def _add(app, total="10000", advance="2000", duration=12):
    return asyncio.run(app.installments.add_installment(
        buyer_name="Sara Khan",
        total_payment=Decimal(total),
        advance_payment=Decimal(advance),
        monthly_installment=Decimal("1000"),
        mobile_name="Phone X",
        duration=duration,
    ))


def _pay(app, installment_id, amount):
    return asyncio.run(app.installments.add_installment_payment(installment_id, Decimal(amount)))


def _types(app):
    return [n.type for n in app.state.notifications]


class TestAddInstallment:
    def test_new_installment_is_open(self, app, store):
        installment = _add(app)
        assert installment.status == InstallmentStatus.OPEN
        assert installment.payments == []
        assert store.dump()[INSTALLMENTS][installment.id]["status"] == "Open"

    def test_open_even_when_advance_covers_total(self, app):
        installment = _add(app, total="5000", advance="5000")
        assert installment.status == InstallmentStatus.OPEN

    def test_store_failure_raises(self, app, store):
        store.fail_writes = True
        with pytest.raises(LedgerError):
            _add(app)
        assert app.state.installments == []


class TestInstallmentStatus:
    def test_closes_exactly_on_last_payment(self, app):
        """10000 total, 2000 advance: Closed after 3000 + 5000, not before."""
        installment = _add(app)

        after_first = _pay(app, installment.id, "3000")
        assert after_first.status == InstallmentStatus.OPEN

        after_second = _pay(app, installment.id, "5000")
        assert after_second.status == InstallmentStatus.CLOSED
        assert app.state.get_installment(installment.id).status == InstallmentStatus.CLOSED

    def test_stays_open_below_total(self, app):
        installment = _add(app)
        _pay(app, installment.id, "3000")
        result = _pay(app, installment.id, "4000")
        assert result.total_paid == Decimal("9000")
        assert result.status == InstallmentStatus.OPEN

    def test_payment_and_closed_notifications_are_edge_triggered(self, app):
        installment = _add(app)
        _pay(app, installment.id, "3000")
        assert _types(app) == [NotificationType.INSTALLMENT_UPDATE]

        closed = _pay(app, installment.id, "5000")
        assert _types(app).count(NotificationType.INSTALLMENT_CLOSED) == 1

        # saving again without a new payment emits nothing
        asyncio.run(app.installments.update_installment(closed.model_copy(update={"phone": "0300"})))
        assert len(app.state.notifications) == 3

    def test_deleting_payment_reopens(self, app):
        installment = _add(app)
        _pay(app, installment.id, "3000")
        closed = _pay(app, installment.id, "5000")

        reopened = asyncio.run(
            app.installments.delete_installment_payment(installment.id, closed.payments[-1].id)
        )
        assert reopened.status == InstallmentStatus.OPEN
        assert reopened.remaining_balance == Decimal("5000")

    def test_status_from_caller_is_ignored(self, app):
        installment = _add(app)
        result = asyncio.run(app.installments.update_installment(
            installment.model_copy(update={"status": InstallmentStatus.CLOSED})
        ))
        assert result.status == InstallmentStatus.OPEN


class TestInstallmentPayments:
    def test_rejects_non_positive_amount(self, app):
        installment = _add(app)
        with pytest.raises(ValidationError, match="greater than zero"):
            _pay(app, installment.id, "0")

    def test_rejects_amount_above_balance(self, app):
        installment = _add(app)
        with pytest.raises(ValidationError, match="8000.00"):
            _pay(app, installment.id, "8000.01")
        assert app.state.get_installment(installment.id).payments == []

    def test_unknown_installment(self, app):
        with pytest.raises(NotFoundError):
            _pay(app, "missing", "100")

    def test_edit_payment_may_use_freed_balance(self, app):
        installment = _add(app)
        paid = _pay(app, installment.id, "3000")
        payment_id = paid.payments[0].id

        edited = asyncio.run(
            app.installments.edit_installment_payment(installment.id, payment_id, Decimal("8000"))
        )
        assert edited.payments[0].amount_paid == Decimal("8000")
        assert edited.status == InstallmentStatus.CLOSED

    def test_edit_payment_above_freed_balance_rejected(self, app):
        installment = _add(app)
        paid = _pay(app, installment.id, "3000")
        with pytest.raises(ValidationError):
            asyncio.run(app.installments.edit_installment_payment(
                installment.id, paid.payments[0].id, Decimal("8001")
            ))

    def test_remaining_installments(self, app):
        installment = _add(app, duration=2)
        _pay(app, installment.id, "1000")
        _pay(app, installment.id, "1000")
        result = _pay(app, installment.id, "1000")
        assert app.installments.remaining_installments(result) == 0
        assert app.installments.remaining_balance(result) == Decimal("5000")


class TestDeleteInstallment:
    def test_delete(self, app, store):
        installment = _add(app)
        assert asyncio.run(app.installments.delete_installment(installment.id)) is True
        assert app.state.installments == []
        assert installment.id not in store.dump()[INSTALLMENTS]

    def test_delete_unknown(self, app):
        assert asyncio.run(app.installments.delete_installment("missing")) is False
