"""
Installment Models

An installment is a buyer's payment plan for an item bought from the shop.
It is tracked independently of committees.

DESIGN DECISION: Status is derived, not settable.
Closed iff advance + sum(payments) >= total. The ledger recomputes it on
every update; the stored value is only a cache of that rule.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class InstallmentStatus(str, Enum):
    """Open while a balance remains."""
    OPEN = "Open"
    CLOSED = "Closed"


class InstallmentPayment(BaseModel):
    """A single payment towards an installment plan."""

    id: str = Field(..., min_length=1)
    amount_paid: Decimal = Field(..., ge=0, decimal_places=2)
    payment_date: date = Field(default_factory=date.today)


class Installment(BaseModel):
    """A buyer's installment plan."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(..., min_length=1)

    # Buyer identity
    buyer_name: str = Field(..., min_length=1, max_length=200)
    phone: str = Field(default="", max_length=30)
    cnic: str = Field(default="", max_length=30)
    address: Optional[str] = Field(default=None, max_length=500)
    profile_picture_url: Optional[str] = None
    cnic_image_url: Optional[str] = None

    # What was sold
    mobile_name: str = Field(default="", max_length=200, description="Item description")

    # Amounts
    advance_payment: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=2)
    total_payment: Decimal = Field(..., ge=0, decimal_places=2)
    monthly_installment: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=2)

    start_date: date = Field(default_factory=date.today)
    duration: int = Field(default=12, ge=1, description="Planned number of monthly payments")

    payments: list[InstallmentPayment] = Field(default_factory=list)
    status: InstallmentStatus = Field(default=InstallmentStatus.OPEN)

    @property
    def total_paid(self) -> Decimal:
        """Advance plus every recorded payment."""
        return self.advance_payment + sum(
            (p.amount_paid for p in self.payments), Decimal("0")
        )

    @property
    def remaining_balance(self) -> Decimal:
        remaining = self.total_payment - self.total_paid
        return remaining if remaining > 0 else Decimal("0")

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


def derive_installment_status(installment: Installment) -> InstallmentStatus:
    """Closed iff advance + sum(payments) >= total."""
    if installment.total_paid >= installment.total_payment:
        return InstallmentStatus.CLOSED
    return InstallmentStatus.OPEN
