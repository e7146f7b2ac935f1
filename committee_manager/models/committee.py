"""
Core Committee Models

These models define the schemas for everything a committee owns:
members (referenced by id), payments and payout turns.

DESIGN DECISION: Committees never embed members by value.
A member may hold several shares in a committee, so the committee keeps
an ordered list of member ids in which duplicates are allowed.

DESIGN DECISION: Models serialize to plain JSON-compatible documents
(`to_document`) so any document store can hold them.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    model_serializer,
    model_validator,
)


# =============================================================================
# ENUMS
# =============================================================================

class CommitteeType(str, Enum):
    """How often members contribute."""
    MONTHLY = "Monthly"
    WEEKLY = "Weekly"
    DAILY = "Daily"


class PayoutMethod(str, Enum):
    """
    How payout turns are assigned.

    BIDDING starts from the sequential order; the actual winner of each
    period is assigned later through payout-turn updates.
    """
    MANUAL = "Manual"
    RANDOM = "Random"
    BIDDING = "Bidding"


class PaymentStatus(str, Enum):
    """Status of a single committee installment."""
    CLEARED = "Cleared"
    PENDING = "Pending"


# =============================================================================
# MEMBER
# =============================================================================

class Member(BaseModel):
    """A person who can hold shares in committees."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(..., min_length=1, description="Unique, immutable member id")
    name: str = Field(..., min_length=1, max_length=200)
    phone: str = Field(default="", max_length=30)
    cnic: str = Field(default="", max_length=30, description="National identity number")
    address: Optional[str] = Field(default=None, max_length=500)
    joining_date: date = Field(default_factory=date.today)
    emergency_contact: Optional[str] = Field(default=None, max_length=100)
    notes: Optional[str] = Field(default=None, max_length=1000)
    profile_picture_url: Optional[str] = None

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


# =============================================================================
# PAYMENTS AND PAYOUT TURNS
# =============================================================================

class CommitteePayment(BaseModel):
    """
    One installment paid by a member towards one period.

    Several partial payments for the same member and period are allowed;
    they are summed when checking what was collected.
    """

    id: str = Field(..., min_length=1)
    member_id: str = Field(..., min_length=1)
    month_index: int = Field(..., ge=0, description="0-based period this payment applies to")
    amount_paid: Decimal = Field(..., ge=0, decimal_places=2)
    payment_date: date = Field(default_factory=date.today)
    status: PaymentStatus = Field(default=PaymentStatus.CLEARED)
    receipt_generated: bool = False


class PayoutTurn(BaseModel):
    """
    Assignment of a payout period to one share.

    A turn is identified by (member_id, turn_month_index), never by its
    position in the committee's turn list.
    """

    member_id: str = Field(..., min_length=1)
    turn_month_index: int = Field(..., ge=0)
    paid_out: bool = False
    payout_date: Optional[date] = None

    @model_validator(mode='after')
    def drop_date_when_unpaid(self) -> 'PayoutTurn':
        """An unpaid turn never carries a payout date."""
        if not self.paid_out and self.payout_date is not None:
            self.payout_date = None
        return self

    @model_serializer(mode="wrap")
    def omit_missing_payout_date(self, handler) -> dict[str, Any]:
        data = handler(self)
        if data.get("payout_date") is None:
            data.pop("payout_date", None)
        return data

    @property
    def key(self) -> tuple[str, int]:
        return (self.member_id, self.turn_month_index)


# =============================================================================
# COMMITTEE
# =============================================================================

class Committee(BaseModel):
    """
    A rotating-savings group.

    INVARIANT: len(payout_turns) == len(member_ids) after every mutation
    that touches membership. The ledger recomputes turns to keep it.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1, max_length=200)
    type: CommitteeType = Field(default=CommitteeType.MONTHLY)
    start_date: date = Field(default_factory=date.today)
    duration: int = Field(default=12, ge=1, description="Number of periods")
    amount_per_member: Decimal = Field(
        default=Decimal("1000"),
        ge=0,
        decimal_places=2,
        description="Contribution due per share per period"
    )
    payout_method: PayoutMethod = Field(default=PayoutMethod.MANUAL)
    member_ids: list[str] = Field(default_factory=list)
    payments: list[CommitteePayment] = Field(default_factory=list)
    payout_turns: list[PayoutTurn] = Field(default_factory=list)
    auto_reminder_days: Optional[int] = Field(default=None, ge=0)

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json")

    def shares_of(self, member_id: str) -> int:
        """Number of shares a member holds in this committee."""
        return self.member_ids.count(member_id)

    def unique_member_ids(self) -> list[str]:
        """Member ids in first-appearance order, without duplicates."""
        return list(dict.fromkeys(self.member_ids))
