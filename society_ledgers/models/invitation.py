from datetime import datetime, timezone
from typing import Optional

from society_ledgers.models.base import MongoModel, utcnow
from society_ledgers.models.user import UserRole


class Invitation(MongoModel):
    """
    Pending officer invite for one society.

    ``token`` is the secret the invitee presents to create their account.
    """
    email: str
    role: UserRole
    society_id: str
    invited_by: str
    token: str
    is_accepted: bool = False
    expires_at: datetime
    accepted_at: Optional[datetime] = None

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        # Mongo hands back naive UTC datetimes
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return expires_at <= (now or utcnow())

    def is_live(self, now: Optional[datetime] = None) -> bool:
        return not self.is_accepted and not self.is_expired(now)
