"""
Notification Models

Notifications are created by ledger mutations or synthesized by the
periodic alert scan. Their id is derived from the event's natural key
(see committee_manager.ledger.ids.notification_key) so deriving the same
alert twice never produces two entries.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class NotificationType(str, Enum):
    """Kinds of notifications shown to the shop owner."""
    PAYMENT_OVERDUE = "payment_overdue"
    PAYOUT_UPCOMING = "payout_upcoming"
    COMMITTEE_UPDATE = "committee_update"
    INSTALLMENT_UPDATE = "installment_update"
    INSTALLMENT_CLOSED = "installment_closed"


class Notification(BaseModel):
    """A single notification. Only `is_read` changes after creation."""

    id: str = Field(..., min_length=1, description="Deterministic key of the event")
    type: NotificationType
    title: str
    message: str
    timestamp: datetime = Field(default_factory=datetime.now)
    is_read: bool = False

    committee_id: Optional[str] = None
    member_id: Optional[str] = None
    installment_id: Optional[str] = None
    action_url: Optional[str] = Field(
        default=None,
        description="Where the UI navigates when the notification is opened"
    )
