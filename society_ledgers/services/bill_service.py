"""
Bill workflow engine.

Any authorized reviewer may move a bill to any status; every move is
recorded as a remark in the same atomic update that sets the status.
"""
import logging
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from society_ledgers.core.config import settings
from society_ledgers.core.exceptions import Conflict, Forbidden, NotFound, ValidationError
from society_ledgers.models.bill import Bill, BillStatus, Remark, TERMINAL_BILL_STATUSES
from society_ledgers.models.user import ALL_ROLES, OFFICER_ROLES, Principal, UserRole
from society_ledgers.repositories.bill_repo import BillRepository
from society_ledgers.schemas.bill import BillCreate
from society_ledgers.services.access_service import (
    ensure_role,
    ensure_society_access,
    narrow_scope,
    resolve_accessible_societies,
)
from society_ledgers.services.notification_service import NotificationEvent, NotificationService

logger = logging.getLogger(__name__)

CREATE_ROLES = OFFICER_ROLES | {UserRole.ADMIN}
REVIEW_ROLES = ALL_ROLES


class BillService:
    def __init__(self, db: AsyncIOMotorDatabase, notifier: Optional[NotificationService] = None):
        self.db = db
        self.repo = BillRepository(db)
        self.notifier = notifier or NotificationService(db)

    async def create_bill(self, principal: Principal, bill_in: BillCreate) -> Bill:
        ensure_role(principal, CREATE_ROLES)
        scope = await resolve_accessible_societies(self.db, principal)
        ensure_society_access(scope, bill_in.society_id)

        bill = await self.repo.create_bill(bill_in, submitted_by=principal.id)
        logger.info(
            "Bill created",
            extra={"bill_id": str(bill.id), "society_id": bill.society_id, "actor_id": principal.id},
        )
        await self.notifier.notify(NotificationEvent.BILL_CREATED, bill)
        return bill

    async def get_bill(self, principal: Principal, bill_id: str) -> Bill:
        """Fetch a bill; NotFound when absent, AccessDenied when out of scope."""
        bill = await self.repo.get_bill(bill_id)
        if bill is None:
            raise NotFound("Bill not found")
        scope = await resolve_accessible_societies(self.db, principal)
        ensure_society_access(scope, bill.society_id, "Access denied to this bill")
        return bill

    async def list_bills(
        self,
        principal: Principal,
        society_id: Optional[str] = None,
        status: Optional[BillStatus] = None,
        q: Optional[str] = None,
    ) -> List[Bill]:
        scope = await resolve_accessible_societies(self.db, principal)
        return await self.repo.list_bills(
            narrow_scope(scope, society_id), status=status, vendor_contains=q
        )

    async def list_society_bills(self, principal: Principal, society_id: str) -> List[Bill]:
        scope = await resolve_accessible_societies(self.db, principal)
        ensure_society_access(scope, society_id, "Access denied to this society's bills")
        return await self.repo.list_bills([society_id])

    async def list_remarks(self, principal: Principal, bill_id: str) -> List[Remark]:
        bill = await self.get_bill(principal, bill_id)
        return bill.remarks

    async def update_status(
        self,
        principal: Principal,
        bill_id: str,
        new_status: BillStatus,
        remark: Optional[str] = None,
        expected_version: Optional[int] = None,
    ) -> Bill:
        ensure_role(principal, REVIEW_ROLES)
        bill = await self.get_bill(principal, bill_id)

        if principal.role == UserRole.MANAGER and new_status == BillStatus.APPROVED:
            raise Forbidden("Managers cannot grant final approval")

        if (
            settings.LOCK_TERMINAL_BILLS
            and bill.status in TERMINAL_BILL_STATUSES
            and new_status != bill.status
            and principal.role != UserRole.ADMIN
        ):
            raise Forbidden(f"Only an Admin can reopen a bill that is {bill.status.value}")

        entry = Remark(
            text=remark or "",
            author_id=principal.id,
            author_role=principal.role.value,
            previous_status=bill.status,
            new_status=new_status,
        )
        updated = await self.repo.apply_status_change(bill_id, new_status, entry, expected_version)
        if updated is None:
            if expected_version is not None:
                raise Conflict("Bill was modified by another request; reload and retry")
            raise NotFound("Bill not found")

        logger.info(
            "Bill status changed",
            extra={
                "bill_id": bill_id,
                "from_status": bill.status.value,
                "to_status": new_status.value,
                "actor_id": principal.id,
            },
        )
        await self.notifier.notify(NotificationEvent.REMARK_ADDED, updated, entry)
        return updated

    async def add_remark(self, principal: Principal, bill_id: str, text: str) -> Bill:
        if not text or not text.strip():
            raise ValidationError("Remark text must not be empty", field="text")
        bill = await self.get_bill(principal, bill_id)

        entry = Remark(
            text=text,
            author_id=principal.id,
            author_role=principal.role.value,
            previous_status=bill.status,
        )
        updated = await self.repo.append_remark(bill_id, entry)
        if updated is None:
            raise NotFound("Bill not found")

        logger.info("Remark added", extra={"bill_id": bill_id, "actor_id": principal.id})
        await self.notifier.notify(NotificationEvent.REMARK_ADDED, updated, entry)
        return updated
