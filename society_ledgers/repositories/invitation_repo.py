import secrets
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from society_ledgers.core.config import settings
from society_ledgers.models.invitation import Invitation
from society_ledgers.models.user import UserRole


class InvitationRepository:
    """Invitation database operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["invitations"]

    async def create_invitation(
        self,
        email: str,
        role: UserRole,
        society_id: str,
        invited_by: str,
    ) -> Invitation:
        now = datetime.now(timezone.utc)
        invitation_dict = {
            "email": email.lower(),
            "role": role.value,
            "society_id": society_id,
            "invited_by": invited_by,
            "token": secrets.token_hex(32),
            "is_accepted": False,
            "expires_at": now + timedelta(days=settings.INVITATION_EXPIRE_DAYS),
            "accepted_at": None,
            "created_at": now,
            "updated_at": now,
        }
        result = await self.collection.insert_one(invitation_dict)
        invitation_dict["_id"] = result.inserted_id
        return Invitation(**invitation_dict)

    async def find_live(self, email: str, society_id: str) -> Optional[Invitation]:
        """Unaccepted, unexpired invite for this email and society, if any."""
        cursor = self.collection.find({
            "email": email.lower(),
            "society_id": society_id,
            "is_accepted": False,
        })
        for doc in await cursor.to_list(None):
            invitation = Invitation(**doc)
            if invitation.is_live():
                return invitation
        return None

    async def get_live_by_token(self, token: str) -> Optional[Invitation]:
        doc = await self.collection.find_one({"token": token, "is_accepted": False})
        if doc is None:
            return None
        invitation = Invitation(**doc)
        return invitation if invitation.is_live() else None

    async def mark_accepted(self, token: str) -> Optional[Invitation]:
        """Flip an open invite to accepted; None when it was already taken."""
        now = datetime.now(timezone.utc)
        doc = await self.collection.find_one_and_update(
            {"token": token, "is_accepted": False},
            {"$set": {"is_accepted": True, "accepted_at": now, "updated_at": now}},
            return_document=ReturnDocument.AFTER
        )
        if doc:
            return Invitation(**doc)
        return None

    async def list_pending(self, society_id: str) -> List[Invitation]:
        cursor = self.collection.find({
            "society_id": society_id,
            "is_accepted": False,
        }).sort("created_at", -1)
        invitations = [Invitation(**doc) for doc in await cursor.to_list(None)]
        return [invitation for invitation in invitations if invitation.is_live()]
