"""
Advance payment engine.

A request asks for part (or all) of ``total_amount_needed`` up front.
Reviewers then approve, partially approve or reject it and may record what
was actually received. Managers can review but never grant money.
"""
import logging
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from society_ledgers.core.config import settings
from society_ledgers.core.exceptions import Forbidden, NotFound, ValidationError
from society_ledgers.models.advance_payment import AdvancePayment, GRANTING_STATUSES
from society_ledgers.models.user import ALL_ROLES, OFFICER_ROLES, Principal, UserRole
from society_ledgers.repositories.advance_payment_repo import AdvancePaymentRepository
from society_ledgers.repositories.bill_repo import BillRepository
from society_ledgers.schemas.advance_payment import AdvancePaymentCreate, AdvancePaymentReview
from society_ledgers.services.access_service import (
    ensure_role,
    ensure_society_access,
    narrow_scope,
    resolve_accessible_societies,
)

logger = logging.getLogger(__name__)

REQUEST_ROLES = OFFICER_ROLES | {UserRole.ADMIN}
REVIEW_ROLES = ALL_ROLES


def _check_amount_bound(name: str, value: Optional[float], total: float) -> None:
    if value is None:
        return
    if value < 0 or value > total:
        raise ValidationError(
            f"{name} must be between 0 and total_amount_needed ({total})",
            field=name,
        )


class AdvancePaymentService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.repo = AdvancePaymentRepository(db)

    async def request_advance_payment(self, principal: Principal, payment_in: AdvancePaymentCreate) -> AdvancePayment:
        ensure_role(principal, REQUEST_ROLES)
        scope = await resolve_accessible_societies(self.db, principal)
        ensure_society_access(scope, payment_in.society_id)

        if payment_in.total_amount_needed <= 0:
            raise ValidationError("total_amount_needed must be positive", field="total_amount_needed")
        _check_amount_bound("requested_amount", payment_in.requested_amount, payment_in.total_amount_needed)

        if payment_in.bill_id and settings.ENFORCE_ADVANCE_BILL_LINK:
            bill = await BillRepository(self.db).get_bill(payment_in.bill_id)
            if bill is None or bill.society_id != payment_in.society_id:
                raise ValidationError("bill_id must reference a bill of the same society", field="bill_id")

        payment = await self.repo.create_payment(payment_in, requested_by=principal.id)
        logger.info(
            "Advance payment requested",
            extra={"payment_id": str(payment.id), "society_id": payment.society_id, "actor_id": principal.id},
        )
        return payment

    async def get_advance_payment(self, principal: Principal, payment_id: str) -> AdvancePayment:
        payment = await self.repo.get_payment(payment_id)
        if payment is None:
            raise NotFound("Advance payment not found")
        scope = await resolve_accessible_societies(self.db, principal)
        ensure_society_access(scope, payment.society_id, "Access denied to this advance payment")
        return payment

    async def list_advance_payments(self, principal: Principal, society_id: Optional[str] = None) -> List[AdvancePayment]:
        scope = await resolve_accessible_societies(self.db, principal)
        return await self.repo.list_payments(narrow_scope(scope, society_id))

    async def review_advance_payment(
        self,
        principal: Principal,
        payment_id: str,
        review: AdvancePaymentReview,
    ) -> AdvancePayment:
        ensure_role(principal, REVIEW_ROLES)
        payment = await self.get_advance_payment(principal, payment_id)

        if principal.role == UserRole.MANAGER and review.status in GRANTING_STATUSES:
            raise Forbidden("Managers cannot approve advance payments")

        total = payment.total_amount_needed
        _check_amount_bound("approved_amount", review.approved_amount, total)
        _check_amount_bound("received_amount", review.received_amount, total)

        update_data = {"status": review.status.value}
        if review.approved_amount is not None:
            update_data["approved_amount"] = review.approved_amount
        if review.received_amount is not None:
            update_data["received_amount"] = review.received_amount
        if review.remarks is not None:
            update_data["remarks"] = review.remarks
        if review.status in GRANTING_STATUSES:
            update_data["approved_by"] = principal.id

        updated = await self.repo.apply_review(payment_id, update_data)
        if updated is None:
            raise NotFound("Advance payment not found")

        logger.info(
            "Advance payment reviewed",
            extra={
                "payment_id": payment_id,
                "from_status": payment.status.value,
                "to_status": review.status.value,
                "remaining": updated.remaining,
                "actor_id": principal.id,
            },
        )
        return updated
