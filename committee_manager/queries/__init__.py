"""Committee period and collection queries."""

from committee_manager.queries.periods import (
    DEFAULT_PERIOD_LENGTH_DAYS,
    amount_due,
    calculate_remaining_collection_for_period,
    calculate_total_collected,
    calculate_total_pool,
    cleared_amount,
    current_period_index,
    dashboard_period_index,
    is_running,
    period_start_date,
    upcoming_payouts,
)

__all__ = [
    "DEFAULT_PERIOD_LENGTH_DAYS",
    "amount_due",
    "calculate_remaining_collection_for_period",
    "calculate_total_collected",
    "calculate_total_pool",
    "cleared_amount",
    "current_period_index",
    "dashboard_period_index",
    "is_running",
    "period_start_date",
    "upcoming_payouts",
]
