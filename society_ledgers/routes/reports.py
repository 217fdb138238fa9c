from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from society_ledgers.core.auth import require_roles
from society_ledgers.db.mongo import get_db
from society_ledgers.models.bill import BillStatus
from society_ledgers.models.user import ALL_ROLES, Principal
from society_ledgers.schemas.report import ExpenseReport, SummaryCounts
from society_ledgers.services.report_service import ReportService

router = APIRouter(prefix="/reports", tags=["reports"])

any_role = require_roles(*ALL_ROLES)


@router.get("", response_model=SummaryCounts)
async def get_summary_counts(principal: Principal = Depends(any_role), db = Depends(get_db)):
    return await ReportService(db).get_summary_counts(principal)


@router.get("/expense", response_model=ExpenseReport)
async def get_expense_report(
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    society_id: Optional[str] = None,
    status_filter: Optional[BillStatus] = Query(None, alias="status"),
    principal: Principal = Depends(any_role),
    db = Depends(get_db)
):
    return await ReportService(db).get_expense_report(
        principal,
        start_date=start_date,
        end_date=end_date,
        society_id=society_id,
        status=status_filter,
    )
