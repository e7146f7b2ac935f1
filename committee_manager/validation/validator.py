"""
Input Validators

DESIGN DECISION: Validators never mutate anything and never raise.
Each check returns None when the input is acceptable, or a localized
message the caller shows to the owner (or wraps in a ValidationError).

Three checks live here:
- PIN / password change rules
- the per-period payment cap used by the payment form
- the shape of a backup file before any destructive restore step

IMPORTANT: The payment cap is a caller-layer check. The committee ledger
records whatever it is given; over-collection is only prevented where
PaymentValidator is consulted first.
"""

import json
from decimal import Decimal
from typing import Any, Optional

from committee_manager.i18n import translate
from committee_manager.models import AuthMethod, Committee, Language
from committee_manager.queries.periods import amount_due, cleared_amount


MIN_PASSWORD_LENGTH = 6

BACKUP_KEYS = ("committees", "members", "userProfile", "settings")


class PinChangeValidator:
    """Rules for a new PIN or password."""

    @staticmethod
    def validate(
        new_credential: str,
        confirmation: str,
        auth_method: AuthMethod,
        pin_length: int,
        language: Language = Language.EN,
    ) -> Optional[str]:
        """
        Check a new credential and its confirmation.

        PIN: digits only, exactly `pin_length` long.
        Password: at least 6 characters.
        Both: confirmation must match.
        """
        if auth_method == AuthMethod.PIN:
            if not new_credential.isdigit():
                return translate("pinDigitsOnly", language)
            if len(new_credential) != int(pin_length):
                return translate("pinWrongLength", language, length=int(pin_length))
            if new_credential != confirmation:
                return translate("pinMismatch", language)
            return None

        if len(new_credential) < MIN_PASSWORD_LENGTH:
            return translate("passwordTooShort", language)
        if new_credential != confirmation:
            return translate("passwordMismatch", language)
        return None


class PaymentValidator:
    """Amount checks for committee and installment payments."""

    @staticmethod
    def max_allowed(committee: Committee, member_id: str, month_index: int) -> Decimal:
        """What a member may still pay for a period: shares * amount minus Cleared payments."""
        remaining = amount_due(committee, member_id) - cleared_amount(committee, member_id, month_index)
        return remaining if remaining > 0 else Decimal("0")

    @classmethod
    def check_payment(
        cls,
        committee: Committee,
        member_id: str,
        month_index: int,
        amount: Decimal,
        language: Language = Language.EN,
    ) -> Optional[str]:
        if amount <= 0:
            return translate("amountMustBePositive", language)

        allowed = cls.max_allowed(committee, member_id, month_index)
        if amount > allowed:
            return translate(
                "maxInstallmentReached",
                language,
                amount=f"{amount_due(committee, member_id):.2f}",
                maxAllowed=f"{allowed:.2f}",
            )
        return None

    @staticmethod
    def check_installment_payment(
        amount: Decimal,
        remaining: Decimal,
        language: Language = Language.EN,
    ) -> Optional[str]:
        if amount <= 0:
            return translate("amountMustBePositive", language)
        if amount > remaining:
            return translate("amountExceedsBalance", language, remaining=f"{remaining:.2f}")
        return None


class BackupValidator:
    """Checks a backup file before restore touches the store."""

    @staticmethod
    def parse(text: str, language: Language = Language.EN) -> tuple[Optional[dict[str, Any]], Optional[str]]:
        """
        Parse backup JSON and check that every top-level key is present.

        Returns:
            (payload, None) when valid, (None, message) otherwise
        """
        try:
            payload = json.loads(text)
        except (json.JSONDecodeError, TypeError):
            return None, translate("restoreInvalidFile", language)

        if not isinstance(payload, dict):
            return None, translate("restoreInvalidFile", language)

        for key in BACKUP_KEYS:
            if key not in payload:
                return None, translate("restoreMissingKey", language, field=key)

        if not isinstance(payload["committees"], list) or not isinstance(payload["members"], list):
            return None, translate("restoreInvalidFile", language)
        if not isinstance(payload["settings"], dict):
            return None, translate("restoreInvalidFile", language)

        return payload, None
