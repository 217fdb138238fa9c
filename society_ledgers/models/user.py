from datetime import datetime
from enum import Enum
from typing import FrozenSet, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from society_ledgers.models.base import MongoModel


class UserRole(str, Enum):
    ADMIN = "Admin"
    MANAGER = "Manager"
    TREASURER = "Treasurer"
    SECRETARY = "Secretary"
    PRESIDENT = "President"
    AGENT = "Agent"


OFFICER_ROLES: FrozenSet[UserRole] = frozenset({
    UserRole.MANAGER,
    UserRole.TREASURER,
    UserRole.SECRETARY,
    UserRole.PRESIDENT,
})

ALL_ROLES: FrozenSet[UserRole] = frozenset(UserRole)


class User(MongoModel):
    """
    Stored account.

    Officers carry ``associated_society_id``, agents carry
    ``assigned_societies``, admins carry neither.
    """
    email: str
    name: Optional[str] = None
    role: UserRole
    password_hash: str = ""
    associated_society_id: Optional[str] = None
    assigned_societies: List[str] = []
    is_active: bool = True
    terminated_at: Optional[datetime] = None

    @property
    def is_officer(self) -> bool:
        return self.role in OFFICER_ROLES


class Principal(BaseModel):
    """Resolved identity for one request. Never persisted."""
    id: str
    role: UserRole
    email: Optional[str] = None
    assigned_society_ids: List[str] = Field(default_factory=list)
    home_society_id: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_user(cls, user: User) -> "Principal":
        return cls(
            id=str(user.id),
            role=user.role,
            email=user.email,
            assigned_society_ids=list(user.assigned_societies) if user.role == UserRole.AGENT else [],
            home_society_id=user.associated_society_id if user.is_officer else None,
        )

    @property
    def is_officer(self) -> bool:
        return self.role in OFFICER_ROLES
