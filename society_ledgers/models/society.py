from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel

from society_ledgers.models.base import MongoModel


class ApprovalStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class Address(BaseModel):
    street: str
    city: str
    state: str
    zip: str


class ContactInfo(BaseModel):
    phone: Optional[str] = None
    email: Optional[str] = None


class Society(MongoModel):
    name: str
    address: Address
    contact_info: ContactInfo = ContactInfo()
    is_active: bool = True
    approval_status: ApprovalStatus = ApprovalStatus.PENDING
    assigned_agent_id: Optional[str] = None
    # Staged officer edit; live fields only change through admin operations
    pending_update: Optional[Dict[str, Any]] = None
