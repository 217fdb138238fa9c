from datetime import datetime, timezone
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from society_ledgers.core.exceptions import Conflict
from society_ledgers.core.security import hash_password
from society_ledgers.models.base import to_object_id
from society_ledgers.models.user import OFFICER_ROLES, User, UserRole


class UserRepository:
    """User database operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["users"]

    async def create_user(
        self,
        email: str,
        password: str,
        role: UserRole,
        name: Optional[str] = None,
        associated_society_id: Optional[str] = None,
        assigned_societies: Optional[List[str]] = None,
    ) -> User:
        """Create a new user. Raises Conflict when the email is taken."""
        if await self.get_user_by_email(email):
            raise Conflict("Email already registered")

        now = datetime.now(timezone.utc)
        user_dict = {
            "email": email.lower(),
            "name": name or email.split("@")[0],
            "role": role.value,
            "password_hash": hash_password(password),
            "associated_society_id": associated_society_id if role in OFFICER_ROLES else None,
            "assigned_societies": list(assigned_societies or []) if role == UserRole.AGENT else [],
            "is_active": True,
            "created_at": now,
            "updated_at": now,
        }

        try:
            result = await self.collection.insert_one(user_dict)
        except DuplicateKeyError:
            raise Conflict("Email already registered")
        user_dict["_id"] = result.inserted_id
        return User(**user_dict)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        """Get user by email."""
        doc = await self.collection.find_one({"email": email.lower()})
        if doc:
            return User(**doc)
        return None

    async def get_user_by_id(self, user_id: str) -> Optional[User]:
        """Get user by ID."""
        oid = to_object_id(user_id)
        if oid is None:
            return None
        doc = await self.collection.find_one({"_id": oid})
        if doc:
            return User(**doc)
        return None

    async def list_by_role(self, role: UserRole) -> List[User]:
        cursor = self.collection.find({"role": role.value}).sort("created_at", -1)
        return [User(**doc) for doc in await cursor.to_list(None)]

    async def list_society_members(self, society_id: str) -> List[User]:
        """Officer users tied to a society."""
        cursor = self.collection.find({
            "associated_society_id": society_id,
            "role": {"$in": [role.value for role in OFFICER_ROLES]},
        }).sort("created_at", 1)
        return [User(**doc) for doc in await cursor.to_list(None)]

    async def list_society_recipients(self, society_id: str) -> List[User]:
        """Active officers of the society plus agents assigned to it."""
        cursor = self.collection.find({
            "$or": [
                {"associated_society_id": society_id},
                {"assigned_societies": society_id},
            ],
            "is_active": True,
        })
        return [User(**doc) for doc in await cursor.to_list(None)]

    async def update_user(self, user_id: str, update_data: dict) -> Optional[User]:
        """Update user fields atomically and return the new document."""
        oid = to_object_id(user_id)
        if oid is None:
            return None
        doc = await self.collection.find_one_and_update(
            {"_id": oid},
            {"$set": {**update_data, "updated_at": datetime.now(timezone.utc)}},
            return_document=ReturnDocument.AFTER
        )
        if doc:
            return User(**doc)
        return None

    async def add_assigned_society(self, user_id: str, society_id: str) -> bool:
        oid = to_object_id(user_id)
        if oid is None:
            return False
        result = await self.collection.update_one(
            {"_id": oid, "role": UserRole.AGENT.value},
            {"$addToSet": {"assigned_societies": society_id},
             "$set": {"updated_at": datetime.now(timezone.utc)}}
        )
        return result.matched_count > 0

    async def remove_assigned_society(self, user_id: str, society_id: str) -> bool:
        oid = to_object_id(user_id)
        if oid is None:
            return False
        result = await self.collection.update_one(
            {"_id": oid, "role": UserRole.AGENT.value},
            {"$pull": {"assigned_societies": society_id},
             "$set": {"updated_at": datetime.now(timezone.utc)}}
        )
        return result.matched_count > 0

    async def detach_from_society(self, user_id: str, society_id: str) -> bool:
        """Drop an officer's society association."""
        oid = to_object_id(user_id)
        if oid is None:
            return False
        result = await self.collection.update_one(
            {"_id": oid, "associated_society_id": society_id},
            {"$set": {"associated_society_id": None,
                      "updated_at": datetime.now(timezone.utc)}}
        )
        return result.matched_count > 0
