from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel

from society_ledgers.schemas.bill import BillResponse


class SummaryCounts(BaseModel):
    pending: int = 0
    approved: int = 0


class ExpenseSummary(BaseModel):
    total_amount: float = 0
    total_bills: int = 0
    average_amount: float = 0


class DateRange(BaseModel):
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class ExpenseReport(BaseModel):
    summary: ExpenseSummary = ExpenseSummary()
    bills: List[BillResponse] = []
    by_status: Dict[str, float] = {}
    by_society: Dict[str, float] = {}
    date_range: DateRange = DateRange()
