from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from society_ledgers.core.auth import require_roles
from society_ledgers.db.mongo import get_db
from society_ledgers.models.bill import BillStatus
from society_ledgers.models.user import ALL_ROLES, OFFICER_ROLES, Principal, UserRole
from society_ledgers.schemas.bill import (
    BillCreate,
    BillResponse,
    BillStatusUpdate,
    RemarkCreate,
    RemarkResponse,
)
from society_ledgers.schemas.common import CreatedResponse, OkResponse
from society_ledgers.services.bill_service import BillService

router = APIRouter(prefix="/bills", tags=["bills"])

any_role = require_roles(*ALL_ROLES)
submitters = require_roles(UserRole.ADMIN, *OFFICER_ROLES)
remark_authors = require_roles(UserRole.AGENT, *OFFICER_ROLES)


@router.post("", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_bill(
    bill_in: BillCreate,
    principal: Principal = Depends(submitters),
    db = Depends(get_db)
):
    """Submit a vendor bill; it starts in Pending."""
    bill = await BillService(db).create_bill(principal, bill_in)
    return CreatedResponse(id=str(bill.id))


@router.get("", response_model=List[BillResponse])
async def list_bills(
    society_id: Optional[str] = None,
    status_filter: Optional[BillStatus] = Query(None, alias="status"),
    q: Optional[str] = None,
    principal: Principal = Depends(any_role),
    db = Depends(get_db)
):
    """Bills in the caller's scope, newest first."""
    bills = await BillService(db).list_bills(principal, society_id=society_id, status=status_filter, q=q)
    return [BillResponse.from_bill(bill) for bill in bills]


@router.get("/society/{society_id}", response_model=List[BillResponse])
async def list_society_bills(
    society_id: str,
    principal: Principal = Depends(any_role),
    db = Depends(get_db)
):
    bills = await BillService(db).list_society_bills(principal, society_id)
    return [BillResponse.from_bill(bill) for bill in bills]


@router.get("/{bill_id}", response_model=BillResponse)
async def get_bill(
    bill_id: str,
    principal: Principal = Depends(any_role),
    db = Depends(get_db)
):
    return BillResponse.from_bill(await BillService(db).get_bill(principal, bill_id))


@router.put("/{bill_id}/status", response_model=OkResponse)
async def update_bill_status(
    bill_id: str,
    payload: BillStatusUpdate,
    principal: Principal = Depends(any_role),
    db = Depends(get_db)
):
    """
    Move the bill to any status and record the move as a remark.

    Managers cannot approve. Send ``expected_version`` to reject the update
    when someone else changed the bill first.
    """
    await BillService(db).update_status(
        principal,
        bill_id,
        payload.status,
        remark=payload.remark,
        expected_version=payload.expected_version,
    )
    return OkResponse()


@router.post("/{bill_id}/remarks", response_model=OkResponse)
async def add_remark(
    bill_id: str,
    payload: RemarkCreate,
    principal: Principal = Depends(remark_authors),
    db = Depends(get_db)
):
    await BillService(db).add_remark(principal, bill_id, payload.text)
    return OkResponse()


@router.get("/{bill_id}/remarks", response_model=List[RemarkResponse])
async def list_remarks(
    bill_id: str,
    principal: Principal = Depends(any_role),
    db = Depends(get_db)
):
    remarks = await BillService(db).list_remarks(principal, bill_id)
    return [RemarkResponse.from_remark(remark) for remark in remarks]
