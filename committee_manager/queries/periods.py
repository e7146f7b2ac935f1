"""
Period Arithmetic and Collection Queries

DESIGN DECISION: A period is a fixed number of days (30 by default) for
every committee type. Calendar-exact month/week/day boundaries are not
used; the alert scan and the dashboard share this single rule so they
always agree on which period is "current".

All functions here are pure: they read committees and return numbers
or plain rows for the dashboard and the exporters.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Optional

from committee_manager.models.committee import Committee, PaymentStatus


DEFAULT_PERIOD_LENGTH_DAYS = 30


def current_period_index(
    committee: Committee,
    today: Optional[date] = None,
    period_length_days: int = DEFAULT_PERIOD_LENGTH_DAYS,
) -> int:
    """
    floor((today - start_date) / period_length).

    Negative before the committee starts; may exceed duration - 1 after
    it ends. Use `is_running` or `dashboard_period_index` for bounded values.
    """
    today = today or date.today()
    return (today - committee.start_date).days // period_length_days


def is_running(
    committee: Committee,
    today: Optional[date] = None,
    period_length_days: int = DEFAULT_PERIOD_LENGTH_DAYS,
) -> bool:
    """True while the current period is one of the committee's periods."""
    index = current_period_index(committee, today, period_length_days)
    return 0 <= index < committee.duration


def dashboard_period_index(
    committee: Committee,
    today: Optional[date] = None,
    period_length_days: int = DEFAULT_PERIOD_LENGTH_DAYS,
) -> int:
    """Current period clamped into 0..duration-1, or -1 before the start."""
    index = current_period_index(committee, today, period_length_days)
    if index < 0:
        return -1
    return min(index, committee.duration - 1)


def period_start_date(
    committee: Committee,
    period_index: int,
    period_length_days: int = DEFAULT_PERIOD_LENGTH_DAYS,
) -> date:
    return committee.start_date + timedelta(days=period_index * period_length_days)


def cleared_amount(committee: Committee, member_id: str, period_index: int) -> Decimal:
    """Sum of Cleared payments of one member for one period. Pending never counts."""
    return sum(
        (
            p.amount_paid
            for p in committee.payments
            if p.member_id == member_id
            and p.month_index == period_index
            and p.status == PaymentStatus.CLEARED
        ),
        Decimal("0"),
    )


def amount_due(committee: Committee, member_id: str) -> Decimal:
    """What a member owes per period: amount per member times shares held."""
    return committee.amount_per_member * committee.shares_of(member_id)


def calculate_total_pool(committee: Committee) -> Decimal:
    """Pool over the whole duration."""
    return committee.amount_per_member * len(committee.member_ids) * committee.duration


def calculate_total_collected(committee: Committee) -> Decimal:
    return sum(
        (p.amount_paid for p in committee.payments if p.status == PaymentStatus.CLEARED),
        Decimal("0"),
    )


def calculate_remaining_collection_for_period(committee: Committee, period_index: int) -> Decimal:
    """Outstanding amount for one period across all shares, floored at zero."""
    due = committee.amount_per_member * len(committee.member_ids)
    paid = sum(
        (cleared_amount(committee, member_id, period_index) for member_id in committee.unique_member_ids()),
        Decimal("0"),
    )
    remaining = due - paid
    return remaining if remaining > 0 else Decimal("0")


def upcoming_payouts(
    committees: Iterable[Committee],
    limit: int = 5,
    period_length_days: int = DEFAULT_PERIOD_LENGTH_DAYS,
) -> list[dict]:
    """
    Unpaid payout turns across committees, soonest first.

    Rows carry committee_id, committee_title, member_id,
    turn_month_index, payout_date and amount (the pool of one period).
    """
    rows = []
    for committee in committees:
        pool = committee.amount_per_member * len(committee.member_ids)
        for turn in committee.payout_turns:
            if turn.paid_out:
                continue
            rows.append({
                "committee_id": committee.id,
                "committee_title": committee.title,
                "member_id": turn.member_id,
                "turn_month_index": turn.turn_month_index,
                "payout_date": period_start_date(committee, turn.turn_month_index, period_length_days),
                "amount": pool,
            })
    rows.sort(key=lambda row: row["payout_date"])
    return rows[:limit]
