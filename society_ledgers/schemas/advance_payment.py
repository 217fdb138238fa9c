from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, computed_field

from society_ledgers.models.advance_payment import (
    AdvancePayment,
    AdvancePaymentStatus,
    remaining_amount,
)


class AdvancePaymentCreate(BaseModel):
    society_id: str = Field(..., min_length=1)
    bill_id: Optional[str] = None
    total_amount_needed: float = Field(..., gt=0)
    requested_amount: float = Field(..., ge=0)
    remarks: Optional[str] = None


class AdvancePaymentReview(BaseModel):
    status: AdvancePaymentStatus
    approved_amount: Optional[float] = Field(None, ge=0)
    received_amount: Optional[float] = Field(None, ge=0)
    remarks: Optional[str] = None


class AdvancePaymentResponse(BaseModel):
    id: str
    society_id: str
    bill_id: Optional[str] = None
    total_amount_needed: float
    requested_amount: float
    approved_amount: Optional[float] = None
    received_amount: Optional[float] = None
    status: AdvancePaymentStatus
    requested_by: str
    approved_by: Optional[str] = None
    remarks: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    @computed_field
    @property
    def remaining(self) -> float:
        return remaining_amount(
            self.total_amount_needed, self.approved_amount, self.received_amount
        )

    @classmethod
    def from_payment(cls, payment: AdvancePayment) -> "AdvancePaymentResponse":
        return cls.model_validate({**payment.model_dump(), "id": str(payment.id)})
