"""
Committee Ledger

Owns every mutation of committees: creation, membership, payments and
payout turns.

DESIGN DECISION: Store first, state second.
Each operation computes the new committee synchronously, awaits the
document store, and only after the store confirms replaces the committee
in AppState. A rejected write leaves local state exactly as it was.

DESIGN DECISION: Failures are quiet except on creation.
A persistence failure is logged (class name only) and the operation
returns the unchanged committee. `create_committee` is the exception: a
committee that silently failed to exist would confuse the owner, so it
raises LedgerError.
"""

import random
from datetime import date
from decimal import Decimal
from typing import Optional

from committee_manager.audit import AuditLogger, get_logger
from committee_manager.config.settings import AppSettings
from committee_manager.i18n import translate
from committee_manager.ledger.errors import LedgerError, ValidationError
from committee_manager.ledger.ids import generate_id
from committee_manager.ledger.notifications import NotificationCenter
from committee_manager.ledger.payout_turns import compute_turns
from committee_manager.models import (
    AuditEventType,
    Committee,
    CommitteePayment,
    CommitteeType,
    NotificationType,
    PaymentStatus,
    PayoutMethod,
    PayoutTurn,
)
from committee_manager.services.storage import DocumentStore, StorageError
from committee_manager.state import COMMITTEES, AppState


logger = get_logger(__name__)


def _turn_documents(turns: list[PayoutTurn]) -> list[dict]:
    return [t.model_dump(mode="json") for t in turns]


def _payment_documents(payments: list[CommitteePayment]) -> list[dict]:
    return [p.model_dump(mode="json") for p in payments]


def _turn_position(turns: list[PayoutTurn], turn: PayoutTurn) -> Optional[int]:
    """Index of the turn to change: the first match whose paid state differs, else the first match."""
    matches = [i for i, t in enumerate(turns) if t.key == turn.key]
    if not matches:
        return None
    for i in matches:
        if turns[i].paid_out != turn.paid_out:
            return i
    return matches[0]


class CommitteeLedger:
    """
    Committee mutations with persistence, notifications and audit events.

    Usage:
        ledger = CommitteeLedger(state, store, notifications)
        committee = await ledger.create_committee("Family Pool", member_ids=["m1", "m2"])
        await ledger.record_payment(committee.id, "m1", 0, Decimal("1000"))
    """

    def __init__(
        self,
        state: AppState,
        store: DocumentStore,
        notifications: NotificationCenter,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[AppSettings] = None,
        rng: Optional[random.Random] = None,
    ):
        self._state = state
        self._store = store
        self._notifications = notifications
        self._audit = audit_logger or AuditLogger()
        self._settings = settings or AppSettings()
        self._rng = rng

    # =========================================================================
    # READS
    # =========================================================================

    def get_committee(self, committee_id: str) -> Optional[Committee]:
        return self._state.get_committee(committee_id)

    def list_committees(self) -> list[Committee]:
        return list(self._state.committees)

    def get_payments_for_member_by_month(
        self,
        committee_id: str,
        member_id: str,
        month_index: int,
    ) -> list[CommitteePayment]:
        """Cleared payments of one member for one period. Pending ones are excluded."""
        committee = self._state.get_committee(committee_id)
        if committee is None:
            return []
        return [
            p for p in committee.payments
            if p.member_id == member_id
            and p.month_index == month_index
            and p.status == PaymentStatus.CLEARED
        ]

    # =========================================================================
    # COMMITTEE LIFECYCLE
    # =========================================================================

    async def create_committee(
        self,
        title: str,
        member_ids: Optional[list[str]] = None,
        payout_method: PayoutMethod = PayoutMethod.MANUAL,
        type: CommitteeType = CommitteeType.MONTHLY,
        duration: int = 12,
        amount_per_member: Decimal = Decimal("1000"),
        start_date: Optional[date] = None,
        auto_reminder_days: Optional[int] = None,
    ) -> Committee:
        """
        Create and persist a new committee.

        Payout turns are computed from `member_ids` using `payout_method`.

        Returns:
            The stored committee

        Raises:
            ValidationError: If duration or share count is out of range
            LedgerError: If the store rejects the write
        """
        member_ids = list(member_ids or [])
        self._check_limits(duration, member_ids)

        committee = Committee(
            id=generate_id(),
            title=title,
            type=type,
            start_date=start_date or date.today(),
            duration=duration,
            amount_per_member=amount_per_member,
            payout_method=payout_method,
            member_ids=member_ids,
            payments=[],
            payout_turns=compute_turns(member_ids, payout_method, duration, self._rng),
            auto_reminder_days=auto_reminder_days,
        )

        try:
            await self._store.set(COMMITTEES, committee.id, committee.to_document())
        except StorageError as e:
            await self._audit.log_persistence_failure("create_committee", "committee", committee.id, e)
            raise LedgerError(translate("genericError", self._language)) from e

        self._state.committees = [*self._state.committees, committee]

        await self._audit.log_change(
            AuditEventType.COMMITTEE_CREATED,
            "committee",
            committee.id,
            f"Committee '{committee.title}' created",
            {"shares": len(member_ids), "payout_method": payout_method.value},
        )
        self._notify(
            committee,
            ("created",),
            "committeeCreatedTitle",
            "committeeCreatedMessage",
            members=len(member_ids),
        )
        return committee

    async def update_committee(self, committee: Committee) -> Committee:
        """
        Persist an edited committee.

        Membership is compared as an ordered sequence against the stored
        committee:
        - unchanged membership, unchanged method: saved as given
        - unchanged membership, changed method: previous turns are kept
        - changed membership: turns are recomputed from scratch

        Returns:
            The committee as stored, or the previous one if the write failed
        """
        existing = self._state.get_committee(committee.id)
        if existing is None:
            logger.warning("committee_not_found", committee_id=committee.id, operation="update_committee")
            return committee

        self._check_limits(committee.duration, committee.member_ids)

        if committee.member_ids == existing.member_ids:
            if committee.payout_method != existing.payout_method:
                committee = committee.model_copy(
                    update={"payout_turns": [t.model_copy() for t in existing.payout_turns]}
                )
        else:
            committee = committee.model_copy(
                update={
                    "payout_turns": compute_turns(
                        committee.member_ids, committee.payout_method, committee.duration, self._rng
                    )
                }
            )

        try:
            await self._store.set(COMMITTEES, committee.id, committee.to_document())
        except StorageError as e:
            await self._audit.log_persistence_failure("update_committee", "committee", committee.id, e)
            return existing

        self._state.replace_committee(committee)
        await self._audit.log_change(
            AuditEventType.COMMITTEE_UPDATED,
            "committee",
            committee.id,
            f"Committee '{committee.title}' updated",
        )
        return committee

    async def delete_committee(self, committee_id: str) -> bool:
        """Remove a committee from the store and from state."""
        existing = self._state.get_committee(committee_id)
        if existing is None:
            logger.warning("committee_not_found", committee_id=committee_id, operation="delete_committee")
            return False

        try:
            await self._store.delete(COMMITTEES, committee_id)
        except StorageError as e:
            await self._audit.log_persistence_failure("delete_committee", "committee", committee_id, e)
            return False

        self._state.committees = [c for c in self._state.committees if c.id != committee_id]
        await self._audit.log_change(
            AuditEventType.COMMITTEE_DELETED,
            "committee",
            committee_id,
            f"Committee '{existing.title}' deleted",
        )
        self._notify(
            existing,
            ("deleted",),
            "committeeDeletedTitle",
            "committeeDeletedMessage",
            link=False,
        )
        return True

    # =========================================================================
    # MEMBERSHIP
    # =========================================================================

    async def add_member_to_committee(self, committee_id: str, member_id: str) -> Optional[Committee]:
        """
        Append one share for a member.

        Adding a member who is already present gives them another share.
        """
        committee = self._state.get_committee(committee_id)
        if committee is None:
            logger.warning("committee_not_found", committee_id=committee_id, operation="add_member_to_committee")
            return None

        member_ids = [*committee.member_ids, member_id]
        self._check_limits(committee.duration, member_ids)

        updated = await self._save_membership(
            committee, member_ids, committee.payments, "add_member_to_committee"
        )
        if updated is committee:
            return committee

        await self._audit.log_change(
            AuditEventType.MEMBER_ADDED_TO_COMMITTEE,
            "committee",
            committee_id,
            "Share added",
            {"member_id": member_id, "shares": updated.shares_of(member_id)},
        )
        self._notify(
            updated,
            ("member_added", member_id, generate_id()),
            "memberAddedTitle",
            "memberAddedMessage",
            member_id=member_id,
        )
        return updated

    async def remove_member_from_committee(self, committee_id: str, member_id: str) -> Optional[Committee]:
        """Remove every share of a member and prune their payments."""
        committee = self._state.get_committee(committee_id)
        if committee is None:
            logger.warning("committee_not_found", committee_id=committee_id, operation="remove_member_from_committee")
            return None
        if member_id not in committee.member_ids:
            logger.info("member_not_in_committee", committee_id=committee_id, member_id=member_id)
            return committee

        member_ids = [m for m in committee.member_ids if m != member_id]
        payments = [p for p in committee.payments if p.member_id != member_id]

        updated = await self._save_membership(
            committee, member_ids, payments, "remove_member_from_committee"
        )
        if updated is committee:
            return committee

        await self._audit.log_change(
            AuditEventType.MEMBER_REMOVED_FROM_COMMITTEE,
            "committee",
            committee_id,
            "Member removed",
            {"member_id": member_id, "payments_pruned": len(committee.payments) - len(payments)},
        )
        self._notify(
            updated,
            ("member_removed", member_id, generate_id()),
            "memberRemovedTitle",
            "memberRemovedMessage",
            member_id=member_id,
        )
        return updated

    async def remove_one_share_from_committee(self, committee_id: str, member_id: str) -> Optional[Committee]:
        """
        Remove the first occurrence of a member's id.

        The member's payments are pruned only when their last share goes.
        """
        committee = self._state.get_committee(committee_id)
        if committee is None:
            logger.warning("committee_not_found", committee_id=committee_id, operation="remove_one_share_from_committee")
            return None
        if member_id not in committee.member_ids:
            logger.info("member_not_in_committee", committee_id=committee_id, member_id=member_id)
            return committee

        member_ids = list(committee.member_ids)
        member_ids.remove(member_id)

        payments = committee.payments
        if member_id not in member_ids:
            payments = [p for p in committee.payments if p.member_id != member_id]

        updated = await self._save_membership(
            committee, member_ids, payments, "remove_one_share_from_committee"
        )
        if updated is committee:
            return committee

        await self._audit.log_change(
            AuditEventType.SHARE_REMOVED,
            "committee",
            committee_id,
            "Share removed",
            {"member_id": member_id, "shares_left": updated.shares_of(member_id)},
        )
        self._notify(
            updated,
            ("share_removed", member_id, generate_id()),
            "shareRemovedTitle",
            "shareRemovedMessage",
            member_id=member_id,
        )
        return updated

    async def _save_membership(
        self,
        committee: Committee,
        member_ids: list[str],
        payments: list[CommitteePayment],
        operation: str,
    ) -> Committee:
        """Recompute turns for new membership and persist. Returns `committee` itself on failure."""
        turns = compute_turns(member_ids, committee.payout_method, committee.duration, self._rng)
        fields = {
            "member_ids": member_ids,
            "payout_turns": _turn_documents(turns),
        }
        if payments is not committee.payments:
            fields["payments"] = _payment_documents(payments)

        try:
            await self._store.update(COMMITTEES, committee.id, fields)
        except StorageError as e:
            await self._audit.log_persistence_failure(operation, "committee", committee.id, e)
            return committee

        updated = committee.model_copy(
            update={"member_ids": member_ids, "payments": list(payments), "payout_turns": turns}
        )
        self._state.replace_committee(updated)
        return updated

    # =========================================================================
    # PAYMENTS AND PAYOUTS
    # =========================================================================

    async def record_payment(
        self,
        committee_id: str,
        member_id: str,
        month_index: int,
        amount_paid: Decimal,
        payment_date: Optional[date] = None,
        status: Optional[PaymentStatus] = None,
        receipt_generated: bool = False,
    ) -> Optional[CommitteePayment]:
        """
        Append a payment to a committee's payment log.

        Status is Cleared unless Pending is given explicitly. No cap is
        applied against the amount due; callers that want one use
        PaymentValidator.check_payment first.

        Returns:
            The recorded payment, or None if nothing was stored
        """
        committee = self._state.get_committee(committee_id)
        if committee is None:
            logger.warning("committee_not_found", committee_id=committee_id, operation="record_payment")
            return None

        payment = CommitteePayment(
            id=generate_id(),
            member_id=member_id,
            month_index=month_index,
            amount_paid=amount_paid,
            payment_date=payment_date or date.today(),
            status=PaymentStatus.PENDING if status == PaymentStatus.PENDING else PaymentStatus.CLEARED,
            receipt_generated=receipt_generated,
        )
        payments = [*committee.payments, payment]

        try:
            await self._store.update(COMMITTEES, committee_id, {"payments": _payment_documents(payments)})
        except StorageError as e:
            await self._audit.log_persistence_failure("record_payment", "committee", committee_id, e)
            return None

        self._state.replace_committee(committee.model_copy(update={"payments": payments}))
        await self._audit.log_change(
            AuditEventType.PAYMENT_RECORDED,
            "committee",
            committee_id,
            "Payment recorded",
            {
                "payment_id": payment.id,
                "member_id": member_id,
                "month_index": month_index,
                "amount": str(payment.amount_paid),
                "status": payment.status.value,
            },
        )
        self._notify(
            committee,
            ("payment", payment.id),
            "paymentRecordedTitle",
            "paymentRecordedMessage",
            member_id=member_id,
            amount=f"{payment.amount_paid:.2f}",
        )
        return payment

    async def update_payout_turn(self, committee_id: str, turn: PayoutTurn) -> Optional[Committee]:
        """
        Mark a payout turn paid or unpaid.

        The turn is matched by (member_id, turn_month_index). A paid turn
        gets the incoming payout date or today; an unpaid turn loses its date.
        Unknown turns are ignored. When shares outnumber periods several turns
        share one key; only one of them changes per call.
        """
        committee = self._state.get_committee(committee_id)
        if committee is None:
            logger.warning("committee_not_found", committee_id=committee_id, operation="update_payout_turn")
            return None

        position = _turn_position(committee.payout_turns, turn)
        if position is None:
            logger.info(
                "payout_turn_not_found",
                committee_id=committee_id,
                member_id=turn.member_id,
                turn_month_index=turn.turn_month_index,
            )
            return committee

        replacement = PayoutTurn(
            member_id=turn.member_id,
            turn_month_index=turn.turn_month_index,
            paid_out=turn.paid_out,
            payout_date=(turn.payout_date or date.today()) if turn.paid_out else None,
        )
        turns = list(committee.payout_turns)
        turns[position] = replacement

        try:
            await self._store.update(COMMITTEES, committee_id, {"payout_turns": _turn_documents(turns)})
        except StorageError as e:
            await self._audit.log_persistence_failure("update_payout_turn", "committee", committee_id, e)
            return committee

        updated = committee.model_copy(update={"payout_turns": turns})
        self._state.replace_committee(updated)
        await self._audit.log_change(
            AuditEventType.PAYOUT_TURN_UPDATED,
            "committee",
            committee_id,
            "Payout turn updated",
            {
                "member_id": turn.member_id,
                "turn_month_index": turn.turn_month_index,
                "paid_out": turn.paid_out,
            },
        )
        if turn.paid_out:
            self._notify(
                updated,
                ("payout", turn.member_id, turn.turn_month_index, replacement.payout_date.isoformat()),
                "payoutCompletedTitle",
                "payoutCompletedMessage",
                member_id=turn.member_id,
                period=turn.turn_month_index + 1,
            )
        return updated

    # =========================================================================
    # HELPERS
    # =========================================================================

    @property
    def _language(self):
        return self._state.preferences.language

    def _check_limits(self, duration: int, member_ids: list[str]) -> None:
        if not 1 <= duration <= self._settings.max_duration:
            raise ValidationError(
                translate("durationOutOfRange", self._language, max=self._settings.max_duration)
            )
        if len(member_ids) > self._settings.max_members_per_committee:
            raise ValidationError(
                translate("tooManyShares", self._language, max=self._settings.max_members_per_committee)
            )

    def _notify(
        self,
        committee: Committee,
        key_parts: tuple,
        title_key: str,
        message_key: str,
        member_id: Optional[str] = None,
        link: bool = True,
        **substitutions,
    ) -> None:
        """Emit a committee_update notification; failures never undo the mutation."""
        language = self._language
        try:
            self._notifications.emit(
                NotificationType.COMMITTEE_UPDATE,
                (committee.id, *key_parts),
                title=translate(title_key, language),
                message=translate(
                    message_key,
                    language,
                    title=committee.title,
                    memberName=self._state.member_name(
                        member_id or "", translate("unknownMember", language)
                    ),
                    **substitutions,
                ),
                committee_id=committee.id,
                member_id=member_id,
                action_url=f"/committees/{committee.id}" if link else None,
            )
        except Exception as e:
            logger.warning("notification_failed", committee_id=committee.id, error_type=type(e).__name__)
