from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from society_ledgers.models.base import MongoModel, utcnow


class BillStatus(str, Enum):
    PENDING = "Pending"
    UNDER_REVIEW = "Under Review"
    CLARIFICATION_REQUIRED = "Clarification Required"
    APPROVED = "Approved"
    REJECTED = "Rejected"


TERMINAL_BILL_STATUSES = frozenset({BillStatus.APPROVED, BillStatus.REJECTED})


# Embedded documents don't need MongoModel (no separate _id)
class Attachment(BaseModel):
    file_name: str
    file_url: str


class VendorContact(BaseModel):
    phone: Optional[str] = None
    email: Optional[str] = None


class Remark(BaseModel):
    text: str = ""
    author_id: str
    author_role: str
    timestamp: datetime = Field(default_factory=utcnow)
    previous_status: BillStatus
    new_status: Optional[BillStatus] = None

    # Stored as an embedded document, so keep plain strings
    model_config = ConfigDict(use_enum_values=True)


class Bill(MongoModel):
    society_id: str
    vendor_name: str
    vendor_contact: Optional[VendorContact] = None
    transaction_nature: str
    amount: float
    due_date: datetime
    status: BillStatus = BillStatus.PENDING
    attachments: List[Attachment] = []
    submitted_by: str
    remarks: List[Remark] = []

    version: int = 1
