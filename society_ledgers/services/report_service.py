"""Read-only rollups over bills within the caller's scope."""
from collections import defaultdict
from datetime import datetime
from typing import Dict, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from society_ledgers.models.bill import BillStatus
from society_ledgers.models.user import Principal
from society_ledgers.repositories.bill_repo import BillRepository
from society_ledgers.repositories.society_repo import SocietyRepository
from society_ledgers.schemas.bill import BillResponse
from society_ledgers.schemas.report import DateRange, ExpenseReport, ExpenseSummary, SummaryCounts
from society_ledgers.services.access_service import narrow_scope, resolve_accessible_societies


class ReportService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.bills = BillRepository(db)

    async def get_summary_counts(self, principal: Principal) -> SummaryCounts:
        scope = await resolve_accessible_societies(self.db, principal)
        if not scope:
            return SummaryCounts()
        return SummaryCounts(
            pending=await self.bills.count_by_status(scope, BillStatus.PENDING),
            approved=await self.bills.count_by_status(scope, BillStatus.APPROVED),
        )

    async def get_expense_report(
        self,
        principal: Principal,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        society_id: Optional[str] = None,
        status: Optional[BillStatus] = None,
    ) -> ExpenseReport:
        """
        Totals, average and two rollups for bills created in
        ``[start_date, end_date]`` (both inclusive, both optional).

        ``by_society`` is keyed by society display name. The amounts in
        ``by_status`` and ``by_society`` each add up to ``total_amount``.
        """
        date_range = DateRange(start_date=start_date, end_date=end_date)
        scope = narrow_scope(await resolve_accessible_societies(self.db, principal), society_id)
        if not scope:
            return ExpenseReport(date_range=date_range)

        bills = await self.bills.list_bills(
            scope, status=status, created_from=start_date, created_to=end_date
        )

        total_amount = sum(bill.amount for bill in bills)
        total_bills = len(bills)
        average_amount = round(total_amount / total_bills, 2) if total_bills else 0

        by_status: Dict[str, float] = defaultdict(float)
        by_society_id: Dict[str, float] = defaultdict(float)
        for bill in bills:
            by_status[bill.status.value] += bill.amount
            by_society_id[bill.society_id] += bill.amount

        names = await SocietyRepository(self.db).get_names(by_society_id.keys())
        by_society: Dict[str, float] = defaultdict(float)
        for sid, amount in by_society_id.items():
            # Same-named societies share a key; sums stay consistent
            by_society[names.get(sid, sid)] += amount

        return ExpenseReport(
            summary=ExpenseSummary(
                total_amount=total_amount,
                total_bills=total_bills,
                average_amount=average_amount,
            ),
            bills=[BillResponse.from_bill(bill) for bill in bills],
            by_status=dict(by_status),
            by_society=dict(by_society),
            date_range=date_range,
        )
