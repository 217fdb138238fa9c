from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from society_ledgers.models.invitation import Invitation
from society_ledgers.models.user import UserRole


class InvitationCreate(BaseModel):
    email: EmailStr
    role: UserRole


class InvitationAccept(BaseModel):
    token: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=8)


class InvitationCreated(BaseModel):
    id: str
    token: str
    expires_at: datetime


class InvitationResponse(BaseModel):
    """Pending invite as shown to society officers; never carries the token."""
    id: str
    email: str
    role: UserRole
    society_id: str
    invited_by: str
    expires_at: datetime
    created_at: datetime

    @classmethod
    def from_invitation(cls, invitation: Invitation) -> "InvitationResponse":
        return cls(
            id=str(invitation.id),
            email=invitation.email,
            role=invitation.role,
            society_id=invitation.society_id,
            invited_by=invitation.invited_by,
            expires_at=invitation.expires_at,
            created_at=invitation.created_at,
        )
