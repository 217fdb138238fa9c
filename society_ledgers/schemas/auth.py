from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field

from society_ledgers.models.user import User, UserRole


class SignInRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserResponse(BaseModel):
    """User response schema."""
    id: str
    email: str
    name: Optional[str] = None
    role: UserRole
    associated_society_id: Optional[str] = None
    assigned_societies: List[str] = []
    is_active: bool
    created_at: datetime

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=str(user.id),
            email=user.email,
            name=user.name,
            role=user.role,
            associated_society_id=user.associated_society_id,
            assigned_societies=user.assigned_societies,
            is_active=user.is_active,
            created_at=user.created_at,
        )


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
