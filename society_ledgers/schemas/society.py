from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from society_ledgers.models.society import ApprovalStatus, Society
from society_ledgers.models.user import UserRole


class AddressIn(BaseModel):
    street: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    zip: str = Field(..., min_length=1)

    model_config = ConfigDict(extra="forbid")


class ContactInfoIn(BaseModel):
    phone: Optional[str] = None
    email: Optional[EmailStr] = None


class SocietyCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    address: AddressIn
    contact_info: ContactInfoIn = ContactInfoIn()


class SocietyUpdate(BaseModel):
    """Partial update of live society fields (admin only)."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    address: Optional[AddressIn] = None
    contact_info: Optional[ContactInfoIn] = None
    is_active: Optional[bool] = None

    model_config = ConfigDict(extra="forbid")


class SocietyResponse(BaseModel):
    id: str
    name: str
    address: AddressIn
    contact_info: ContactInfoIn
    is_active: bool
    approval_status: ApprovalStatus
    assigned_agent_id: Optional[str] = None
    pending_update: Optional[Dict[str, Any]] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_society(cls, society: Society) -> "SocietyResponse":
        return cls.model_validate({**society.model_dump(), "id": str(society.id)})


class AssignAgentRequest(BaseModel):
    agent_id: str = Field(..., min_length=1)


class MemberAdd(BaseModel):
    email: EmailStr
    role: UserRole
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    password: Optional[str] = Field(None, min_length=8)


class MemberResponse(BaseModel):
    user_id: str
    email: str
    name: Optional[str] = None
    role: UserRole
    is_active: bool
    joined_at: datetime
