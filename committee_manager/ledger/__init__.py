"""
Ledger Package

Committee, member and installment mutations plus notification handling.
Every ledger writes to the document store before it touches AppState.
"""

from committee_manager.ledger.committees import CommitteeLedger
from committee_manager.ledger.errors import LedgerError, NotFoundError, ValidationError
from committee_manager.ledger.ids import generate_id, notification_key
from committee_manager.ledger.installments import InstallmentLedger
from committee_manager.ledger.members import MemberDirectory
from committee_manager.ledger.notifications import NotificationCenter, NotificationDeriver
from committee_manager.ledger.payout_turns import compute_turns, shuffle_member_ids

__all__ = [
    # Ledgers
    "CommitteeLedger",
    "InstallmentLedger",
    "MemberDirectory",
    # Notifications
    "NotificationCenter",
    "NotificationDeriver",
    # Turns and ids
    "compute_turns",
    "generate_id",
    "notification_key",
    "shuffle_member_ids",
    # Errors
    "LedgerError",
    "NotFoundError",
    "ValidationError",
]
