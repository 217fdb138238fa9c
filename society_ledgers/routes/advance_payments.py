from typing import List, Optional

from fastapi import APIRouter, Depends, status

from society_ledgers.core.auth import require_roles
from society_ledgers.db.mongo import get_db
from society_ledgers.models.user import ALL_ROLES, OFFICER_ROLES, Principal, UserRole
from society_ledgers.schemas.advance_payment import (
    AdvancePaymentCreate,
    AdvancePaymentResponse,
    AdvancePaymentReview,
)
from society_ledgers.services.advance_payment_service import AdvancePaymentService

router = APIRouter(prefix="/advance-payments", tags=["advance-payments"])

any_role = require_roles(*ALL_ROLES)
requesters = require_roles(UserRole.ADMIN, *OFFICER_ROLES)


@router.post("", response_model=AdvancePaymentResponse, status_code=status.HTTP_201_CREATED)
async def request_advance_payment(
    payment_in: AdvancePaymentCreate,
    principal: Principal = Depends(requesters),
    db = Depends(get_db)
):
    payment = await AdvancePaymentService(db).request_advance_payment(principal, payment_in)
    return AdvancePaymentResponse.from_payment(payment)


@router.get("", response_model=List[AdvancePaymentResponse])
async def list_advance_payments(
    society_id: Optional[str] = None,
    principal: Principal = Depends(any_role),
    db = Depends(get_db)
):
    payments = await AdvancePaymentService(db).list_advance_payments(principal, society_id)
    return [AdvancePaymentResponse.from_payment(payment) for payment in payments]


@router.get("/{payment_id}", response_model=AdvancePaymentResponse)
async def get_advance_payment(
    payment_id: str,
    principal: Principal = Depends(any_role),
    db = Depends(get_db)
):
    payment = await AdvancePaymentService(db).get_advance_payment(principal, payment_id)
    return AdvancePaymentResponse.from_payment(payment)


@router.put("/{payment_id}", response_model=AdvancePaymentResponse)
async def review_advance_payment(
    payment_id: str,
    review: AdvancePaymentReview,
    principal: Principal = Depends(any_role),
    db = Depends(get_db)
):
    """Set the review outcome; Managers cannot approve or partially approve."""
    payment = await AdvancePaymentService(db).review_advance_payment(principal, payment_id, review)
    return AdvancePaymentResponse.from_payment(payment)
