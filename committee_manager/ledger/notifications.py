"""
Notification Deriver and Notification Center

The deriver is a pure function of committee/member state: it never
touches the store and never reads existing notifications. The center owns
the notification list in AppState and is the only place that inserts
into it.

DEDUPLICATION RULE:
A notification's id is its key (see ids.notification_key). A key that is
already present - read or unread - is never inserted again. The key, not
the content, is authoritative.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Iterable, Optional

from committee_manager.audit import get_logger
from committee_manager.i18n import translate
from committee_manager.ledger.ids import notification_key
from committee_manager.models import (
    Committee,
    Language,
    Member,
    Notification,
    NotificationType,
)
from committee_manager.queries.periods import (
    DEFAULT_PERIOD_LENGTH_DAYS,
    amount_due,
    cleared_amount,
    current_period_index,
    period_start_date,
)
from committee_manager.state import AppState


logger = get_logger(__name__)


def _money(amount: Decimal) -> str:
    return f"{amount:.2f}"


class NotificationDeriver:
    """
    Synthesizes overdue-payment and upcoming-payout alerts.

    Overdue: in the current period a member has paid (Cleared only) less
    than amount_per_member * shares, and the grace period after the
    period start has passed.

    Upcoming: an unpaid payout turn whose payout date lies within the next
    `upcoming_days` days.
    """

    def __init__(
        self,
        period_length_days: int = DEFAULT_PERIOD_LENGTH_DAYS,
        grace_days: int = 7,
        upcoming_days: int = 7,
    ):
        self.period_length_days = period_length_days
        self.grace_days = grace_days
        self.upcoming_days = upcoming_days

    def derive(
        self,
        committees: Iterable[Committee],
        members: Iterable[Member],
        today: Optional[date] = None,
        language: Language = Language.EN,
    ) -> list[Notification]:
        today = today or date.today()
        names = {m.id: m.name for m in members}
        derived: list[Notification] = []
        for committee in committees:
            derived.extend(self._overdue(committee, names, today, language))
            derived.extend(self._upcoming(committee, names, today, language))
        return derived

    def _overdue(
        self,
        committee: Committee,
        names: dict[str, str],
        today: date,
        language: Language,
    ) -> list[Notification]:
        period = current_period_index(committee, today, self.period_length_days)
        if period < 0 or period >= committee.duration:
            return []

        overdue_after = period_start_date(committee, period, self.period_length_days) + timedelta(days=self.grace_days)
        if today <= overdue_after:
            return []

        notifications = []
        for member_id in committee.unique_member_ids():
            expected = amount_due(committee, member_id)
            paid = cleared_amount(committee, member_id, period)
            if paid >= expected:
                continue

            member_name = names.get(member_id, translate("unknownMember", language))
            notifications.append(Notification(
                id=notification_key(
                    NotificationType.PAYMENT_OVERDUE,
                    committee.id,
                    member_id,
                    period,
                    _money(expected),
                ),
                type=NotificationType.PAYMENT_OVERDUE,
                title=translate("paymentOverdueTitle", language),
                message=translate(
                    "paymentOverdueMessage",
                    language,
                    memberName=member_name,
                    paid=_money(paid),
                    expected=_money(expected),
                    period=period + 1,
                    title=committee.title,
                ),
                committee_id=committee.id,
                member_id=member_id,
                action_url=f"/committees/{committee.id}",
            ))
        return notifications

    def _upcoming(
        self,
        committee: Committee,
        names: dict[str, str],
        today: date,
        language: Language,
    ) -> list[Notification]:
        horizon = today + timedelta(days=self.upcoming_days)
        notifications = []
        for turn in committee.payout_turns:
            if turn.paid_out:
                continue
            payout_on = period_start_date(committee, turn.turn_month_index, self.period_length_days)
            if not today <= payout_on <= horizon:
                continue

            notifications.append(Notification(
                id=notification_key(
                    NotificationType.PAYOUT_UPCOMING,
                    committee.id,
                    turn.member_id,
                    turn.turn_month_index,
                ),
                type=NotificationType.PAYOUT_UPCOMING,
                title=translate("payoutUpcomingTitle", language),
                message=translate(
                    "payoutUpcomingMessage",
                    language,
                    memberName=names.get(turn.member_id, translate("unknownMember", language)),
                    title=committee.title,
                    date=payout_on.isoformat(),
                ),
                committee_id=committee.id,
                member_id=turn.member_id,
                action_url=f"/committees/{committee.id}",
            ))
        return notifications


class NotificationCenter:
    """Owns `state.notifications`; every change is one list replacement."""

    def __init__(
        self,
        state: AppState,
        deriver: Optional[NotificationDeriver] = None,
    ):
        self._state = state
        self._deriver = deriver or NotificationDeriver()

    @property
    def notifications(self) -> list[Notification]:
        return list(self._state.notifications)

    @property
    def unread_count(self) -> int:
        return sum(1 for n in self._state.notifications if not n.is_read)

    def merge(self, incoming: Iterable[Notification]) -> list[Notification]:
        """
        Union incoming notifications with the existing ones.

        Returns the notifications that were actually inserted.
        """
        seen = {n.id for n in self._state.notifications}
        added = []
        for notification in incoming:
            if notification.id in seen:
                continue
            seen.add(notification.id)
            added.append(notification)

        if added:
            self._state.notifications = [*self._state.notifications, *added]
        return added

    def emit(
        self,
        notification_type: NotificationType,
        key_parts: tuple,
        title: str,
        message: str,
        committee_id: Optional[str] = None,
        member_id: Optional[str] = None,
        installment_id: Optional[str] = None,
        action_url: Optional[str] = None,
    ) -> Optional[Notification]:
        """Build a keyed notification for a ledger event and insert it."""
        notification = Notification(
            id=notification_key(notification_type, *key_parts),
            type=notification_type,
            title=title,
            message=message,
            timestamp=datetime.now(),
            committee_id=committee_id,
            member_id=member_id,
            installment_id=installment_id,
            action_url=action_url,
        )
        added = self.merge([notification])
        return added[0] if added else None

    def derive_alerts(self, today: Optional[date] = None) -> list[Notification]:
        """Run the deriver over the current state and merge its output."""
        derived = self._deriver.derive(
            self._state.committees,
            self._state.members,
            today=today,
            language=self._state.preferences.language,
        )
        added = self.merge(derived)
        if added:
            logger.info("alerts_derived", derived=len(derived), added=len(added))
        return added

    def mark_read(self, notification_id: str) -> None:
        self._state.notifications = [
            n.model_copy(update={"is_read": True}) if n.id == notification_id else n
            for n in self._state.notifications
        ]

    def mark_all_read(self) -> None:
        self._state.notifications = [
            n.model_copy(update={"is_read": True}) for n in self._state.notifications
        ]

    def delete(self, notification_id: str) -> None:
        self._state.notifications = [
            n for n in self._state.notifications if n.id != notification_id
        ]

    def clear_all(self) -> None:
        self._state.notifications = []
