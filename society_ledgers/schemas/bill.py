from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from society_ledgers.models.bill import Bill, BillStatus, Remark


class AttachmentIn(BaseModel):
    file_name: str = Field(..., min_length=1)
    file_url: str = Field(..., min_length=1)


class VendorContactIn(BaseModel):
    phone: Optional[str] = None
    email: Optional[str] = None


class BillCreate(BaseModel):
    society_id: str = Field(..., min_length=1)
    vendor_name: str = Field(..., min_length=1, max_length=200)
    vendor_contact: Optional[VendorContactIn] = None
    transaction_nature: str = Field(..., min_length=1, max_length=200)
    amount: float = Field(..., gt=0)
    due_date: datetime
    attachments: List[AttachmentIn] = []


class BillStatusUpdate(BaseModel):
    status: BillStatus
    remark: Optional[str] = None
    # Optimistic locking; omitted means last writer wins
    expected_version: Optional[int] = Field(None, ge=1)


class RemarkCreate(BaseModel):
    text: str = Field(..., min_length=1)


class RemarkResponse(BaseModel):
    text: str
    author_id: str
    author_role: str
    timestamp: datetime
    previous_status: BillStatus
    new_status: Optional[BillStatus] = None

    @classmethod
    def from_remark(cls, remark: Remark) -> "RemarkResponse":
        return cls.model_validate(remark.model_dump())


class BillResponse(BaseModel):
    id: str
    society_id: str
    vendor_name: str
    vendor_contact: Optional[VendorContactIn] = None
    transaction_nature: str
    amount: float
    due_date: datetime
    status: BillStatus
    attachments: List[AttachmentIn]
    submitted_by: str
    remarks: List[RemarkResponse]
    version: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_bill(cls, bill: Bill) -> "BillResponse":
        return cls.model_validate({**bill.model_dump(), "id": str(bill.id)})
