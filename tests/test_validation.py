"""Tests for input validators."""

import json
from decimal import Decimal

from committee_manager.models import (
    AuthMethod,
    Committee,
    CommitteePayment,
    Language,
    PaymentStatus,
    PinLength,
)
from committee_manager.validation import BackupValidator, PaymentValidator, PinChangeValidator


class TestPinChangeValidator:
    def test_valid_pin(self):
        assert PinChangeValidator.validate("123456", "123456", AuthMethod.PIN, PinLength.SIX) is None

    def test_pin_length_follows_setting(self):
        message = PinChangeValidator.validate("1234", "1234", AuthMethod.PIN, PinLength.EIGHT)
        assert message == "PIN must be exactly 8 digits."

    def test_password_needs_no_digits(self):
        assert PinChangeValidator.validate("abcdef", "abcdef", AuthMethod.PASSWORD, PinLength.FOUR) is None

    def test_password_mismatch(self):
        message = PinChangeValidator.validate("abcdef", "abcdeg", AuthMethod.PASSWORD, PinLength.FOUR)
        assert message == "Passwords do not match."

    def test_urdu_message(self):
        message = PinChangeValidator.validate("12x4", "12x4", AuthMethod.PIN, PinLength.FOUR, Language.UR)
        assert message == "پن صرف نمبروں پر مشتمل ہونا چاہیے۔"


class TestPaymentValidator:
    def _committee(self, payments=()):
        return Committee(
            id="c1",
            title="Pool",
            amount_per_member=Decimal("1000"),
            member_ids=["a", "a", "b"],
            payments=list(payments),
        )

    def test_max_allowed_counts_shares_and_cleared_payments(self):
        committee = self._committee([
            CommitteePayment(id="p1", member_id="a", month_index=0, amount_paid=Decimal("500")),
            CommitteePayment(
                id="p2", member_id="a", month_index=0, amount_paid=Decimal("700"), status=PaymentStatus.PENDING
            ),
        ])
        assert PaymentValidator.max_allowed(committee, "a", 0) == Decimal("1500")
        assert PaymentValidator.max_allowed(committee, "a", 1) == Decimal("2000")

    def test_payment_within_cap(self):
        assert PaymentValidator.check_payment(self._committee(), "b", 0, Decimal("1000")) is None

    def test_payment_above_cap(self):
        message = PaymentValidator.check_payment(self._committee(), "b", 0, Decimal("1000.01"))
        assert "Maximum allowed for this installment: PKR 1000.00" in message

    def test_non_positive_payment(self):
        message = PaymentValidator.check_payment(self._committee(), "b", 0, Decimal("0"))
        assert message == "Amount must be greater than zero."

    def test_installment_payment(self):
        assert PaymentValidator.check_installment_payment(Decimal("10"), Decimal("10")) is None
        assert PaymentValidator.check_installment_payment(Decimal("11"), Decimal("10")) is not None


class TestBackupValidator:
    def _payload(self, **overrides):
        payload = {"committees": [], "members": [], "userProfile": {}, "settings": {}}
        payload.update(overrides)
        return payload

    def test_valid_payload(self):
        payload, error = BackupValidator.parse(json.dumps(self._payload()))
        assert error is None
        assert payload["committees"] == []

    def test_invalid_json(self):
        payload, error = BackupValidator.parse("{not json")
        assert payload is None
        assert error == "Invalid backup file."

    def test_missing_key_named(self):
        data = self._payload()
        del data["userProfile"]
        _, error = BackupValidator.parse(json.dumps(data))
        assert error == 'Invalid backup file: "userProfile" is missing.'

    def test_wrong_shape(self):
        _, error = BackupValidator.parse(json.dumps(self._payload(committees={})))
        assert error == "Invalid backup file."

    def test_top_level_must_be_object(self):
        _, error = BackupValidator.parse("[]")
        assert error == "Invalid backup file."
