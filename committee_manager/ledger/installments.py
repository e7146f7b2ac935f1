"""
Installment Ledger

Tracks buyers paying off goods over time, independently of committees.

DESIGN DECISION: Status is recomputed on every update from
advance + sum(payments) >= total, never taken from the caller. The
"payment received" and "installment closed" notifications are
edge-triggered: they fire on the update that adds a payment or that moves
the installment from Open to Closed, not on every later save.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from committee_manager.audit import AuditLogger, get_logger
from committee_manager.i18n import translate
from committee_manager.ledger.errors import LedgerError, NotFoundError, ValidationError
from committee_manager.ledger.ids import generate_id
from committee_manager.ledger.notifications import NotificationCenter
from committee_manager.models import (
    AuditEventType,
    Installment,
    InstallmentPayment,
    InstallmentStatus,
    NotificationType,
    derive_installment_status,
)
from committee_manager.services.storage import DocumentStore, StorageError
from committee_manager.state import INSTALLMENTS, AppState
from committee_manager.validation import PaymentValidator


logger = get_logger(__name__)


class InstallmentLedger:
    """Installment plans and their payments."""

    def __init__(
        self,
        state: AppState,
        store: DocumentStore,
        notifications: NotificationCenter,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._state = state
        self._store = store
        self._notifications = notifications
        self._audit = audit_logger or AuditLogger()

    def get_installment(self, installment_id: str) -> Optional[Installment]:
        return self._state.get_installment(installment_id)

    def list_installments(self) -> list[Installment]:
        return list(self._state.installments)

    @staticmethod
    def remaining_balance(installment: Installment) -> Decimal:
        return installment.remaining_balance

    @staticmethod
    def remaining_installments(installment: Installment) -> int:
        """Planned payments not yet made, never negative."""
        return max(installment.duration - len(installment.payments), 0)

    # =========================================================================
    # INSTALLMENT LIFECYCLE
    # =========================================================================

    async def add_installment(
        self,
        buyer_name: str,
        total_payment: Decimal,
        advance_payment: Decimal = Decimal("0"),
        monthly_installment: Decimal = Decimal("0"),
        mobile_name: str = "",
        phone: str = "",
        cnic: str = "",
        address: Optional[str] = None,
        start_date: Optional[date] = None,
        duration: int = 12,
        profile_picture_url: Optional[str] = None,
        cnic_image_url: Optional[str] = None,
    ) -> Installment:
        """
        Create and persist an installment plan.

        A new plan always starts Open, even when the advance already covers
        the total; the first update recomputes the status.

        Raises:
            LedgerError: If the store rejects the write
        """
        installment = Installment(
            id=generate_id(),
            buyer_name=buyer_name,
            phone=phone,
            cnic=cnic,
            address=address,
            profile_picture_url=profile_picture_url,
            cnic_image_url=cnic_image_url,
            mobile_name=mobile_name,
            advance_payment=advance_payment,
            total_payment=total_payment,
            monthly_installment=monthly_installment,
            start_date=start_date or date.today(),
            duration=duration,
            payments=[],
            status=InstallmentStatus.OPEN,
        )

        try:
            await self._store.set(INSTALLMENTS, installment.id, installment.to_document())
        except StorageError as e:
            await self._audit.log_persistence_failure("add_installment", "installment", installment.id, e)
            raise LedgerError(translate("genericError", self._language)) from e

        self._state.installments = [*self._state.installments, installment]
        await self._audit.log_change(
            AuditEventType.INSTALLMENT_CREATED,
            "installment",
            installment.id,
            f"Installment for '{installment.buyer_name}' created",
            {"total_payment": str(total_payment), "advance_payment": str(advance_payment)},
        )
        return installment

    async def update_installment(self, installment: Installment) -> Installment:
        """
        Persist an edited installment with its status recomputed.

        Returns:
            The stored installment, or the previous one if the write failed
        """
        existing = self._state.get_installment(installment.id)
        if existing is None:
            logger.warning("installment_not_found", installment_id=installment.id, operation="update_installment")
            return installment

        installment = installment.model_copy(
            update={"status": derive_installment_status(installment)}
        )

        try:
            await self._store.set(INSTALLMENTS, installment.id, installment.to_document())
        except StorageError as e:
            await self._audit.log_persistence_failure("update_installment", "installment", installment.id, e)
            return existing

        self._state.replace_installment(installment)
        await self._audit.log_change(
            AuditEventType.INSTALLMENT_UPDATED,
            "installment",
            installment.id,
            f"Installment for '{installment.buyer_name}' updated",
            {"status": installment.status.value, "payments": len(installment.payments)},
        )

        if len(installment.payments) > len(existing.payments):
            latest = installment.payments[-1]
            self._notify(
                installment,
                NotificationType.INSTALLMENT_UPDATE,
                ("payment", latest.id),
                "installmentPaymentTitle",
                "installmentPaymentMessage",
                amount=f"{latest.amount_paid:.2f}",
            )

        if existing.status == InstallmentStatus.OPEN and installment.status == InstallmentStatus.CLOSED:
            await self._audit.log_change(
                AuditEventType.INSTALLMENT_CLOSED,
                "installment",
                installment.id,
                f"Installment for '{installment.buyer_name}' fully paid",
            )
            self._notify(
                installment,
                NotificationType.INSTALLMENT_CLOSED,
                ("closed", len(installment.payments), str(installment.total_paid)),
                "installmentClosedTitle",
                "installmentClosedMessage",
            )

        return installment

    async def delete_installment(self, installment_id: str) -> bool:
        existing = self._state.get_installment(installment_id)
        if existing is None:
            logger.warning("installment_not_found", installment_id=installment_id, operation="delete_installment")
            return False

        try:
            await self._store.delete(INSTALLMENTS, installment_id)
        except StorageError as e:
            await self._audit.log_persistence_failure("delete_installment", "installment", installment_id, e)
            return False

        self._state.installments = [i for i in self._state.installments if i.id != installment_id]
        await self._audit.log_change(
            AuditEventType.INSTALLMENT_DELETED,
            "installment",
            installment_id,
            f"Installment for '{existing.buyer_name}' deleted",
        )
        return True

    # =========================================================================
    # PAYMENTS
    # =========================================================================

    async def add_installment_payment(
        self,
        installment_id: str,
        amount: Decimal,
        payment_date: Optional[date] = None,
    ) -> Installment:
        """
        Record a payment towards an installment.

        Raises:
            NotFoundError: If the installment does not exist
            ValidationError: If the amount is not positive or exceeds the
                remaining balance
        """
        installment = self._require(installment_id)
        error = PaymentValidator.check_installment_payment(
            amount, installment.remaining_balance, self._language
        )
        if error:
            raise ValidationError(error)

        payment = InstallmentPayment(
            id=generate_id(),
            amount_paid=amount,
            payment_date=payment_date or date.today(),
        )
        return await self.update_installment(
            installment.model_copy(update={"payments": [*installment.payments, payment]})
        )

    async def edit_installment_payment(
        self,
        installment_id: str,
        payment_id: str,
        amount: Decimal,
        payment_date: Optional[date] = None,
    ) -> Installment:
        """
        Change the amount or date of an existing payment.

        The edited amount may use the balance freed by the old amount.
        """
        installment = self._require(installment_id)
        current = next((p for p in installment.payments if p.id == payment_id), None)
        if current is None:
            logger.info("installment_payment_not_found", installment_id=installment_id, payment_id=payment_id)
            return installment

        available = installment.total_payment - installment.total_paid + current.amount_paid
        error = PaymentValidator.check_installment_payment(amount, available, self._language)
        if error:
            raise ValidationError(error)

        edited = current.model_copy(
            update={"amount_paid": amount, "payment_date": payment_date or current.payment_date}
        )
        payments = [edited if p.id == payment_id else p for p in installment.payments]
        return await self.update_installment(installment.model_copy(update={"payments": payments}))

    async def delete_installment_payment(self, installment_id: str, payment_id: str) -> Installment:
        """Remove a payment; a Closed installment may reopen."""
        installment = self._require(installment_id)
        payments = [p for p in installment.payments if p.id != payment_id]
        if len(payments) == len(installment.payments):
            logger.info("installment_payment_not_found", installment_id=installment_id, payment_id=payment_id)
            return installment
        return await self.update_installment(installment.model_copy(update={"payments": payments}))

    # =========================================================================
    # HELPERS
    # =========================================================================

    @property
    def _language(self):
        return self._state.preferences.language

    def _require(self, installment_id: str) -> Installment:
        installment = self._state.get_installment(installment_id)
        if installment is None:
            raise NotFoundError(f"Installment {installment_id} not found")
        return installment

    def _notify(
        self,
        installment: Installment,
        notification_type: NotificationType,
        key_parts: tuple,
        title_key: str,
        message_key: str,
        **substitutions,
    ) -> None:
        language = self._language
        try:
            self._notifications.emit(
                notification_type,
                (installment.id, *key_parts),
                title=translate(title_key, language),
                message=translate(
                    message_key,
                    language,
                    buyerName=installment.buyer_name,
                    item=installment.mobile_name,
                    **substitutions,
                ),
                installment_id=installment.id,
                action_url=f"/installments/{installment.id}",
            )
        except Exception as e:
            logger.warning("notification_failed", installment_id=installment.id, error_type=type(e).__name__)
