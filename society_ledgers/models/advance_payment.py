"""
Advance payment model - funds requested ahead of, or against, a bill.

Invariants:
- 0 <= requested_amount <= total_amount_needed
- approved_amount, received_amount within [0, total_amount_needed] when set
- remaining is derived, never stored
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from society_ledgers.models.base import MongoModel


class AdvancePaymentStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    PARTIALLY_APPROVED = "Partially Approved"


# Statuses that grant money; reserved for non-Manager reviewers
GRANTING_STATUSES = frozenset({
    AdvancePaymentStatus.APPROVED,
    AdvancePaymentStatus.PARTIALLY_APPROVED,
})


def remaining_amount(
    total_amount_needed: float,
    approved_amount: Optional[float] = None,
    received_amount: Optional[float] = None,
) -> float:
    """Receiving supersedes approval, so the larger of the two is deducted."""
    return total_amount_needed - max(approved_amount or 0, received_amount or 0)


class AdvancePayment(MongoModel):
    society_id: str
    bill_id: Optional[str] = None
    total_amount_needed: float
    requested_amount: float
    approved_amount: Optional[float] = None
    received_amount: Optional[float] = None
    status: AdvancePaymentStatus = AdvancePaymentStatus.PENDING
    requested_by: str
    approved_by: Optional[str] = None
    remarks: Optional[str] = None
    updated_at: Optional[datetime] = None

    @property
    def remaining(self) -> float:
        return remaining_amount(
            self.total_amount_needed, self.approved_amount, self.received_amount
        )
