from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from society_ledgers.models.base import to_object_id
from society_ledgers.models.society import ApprovalStatus, Society
from society_ledgers.schemas.society import SocietyCreate


class SocietyRepository:
    """Society database operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["societies"]

    async def create_society(
        self,
        society_data: SocietyCreate,
        approval_status: ApprovalStatus = ApprovalStatus.APPROVED,
    ) -> Society:
        now = datetime.now(timezone.utc)
        society_dict = {
            "name": society_data.name,
            "address": society_data.address.model_dump(),
            "contact_info": society_data.contact_info.model_dump(),
            "is_active": True,
            "approval_status": approval_status.value,
            "assigned_agent_id": None,
            "pending_update": None,
            "created_at": now,
            "updated_at": now,
        }
        result = await self.collection.insert_one(society_dict)
        society_dict["_id"] = result.inserted_id
        return Society(**society_dict)

    async def get_society(self, society_id: str) -> Optional[Society]:
        oid = to_object_id(society_id)
        if oid is None:
            return None
        doc = await self.collection.find_one({"_id": oid})
        if doc:
            return Society(**doc)
        return None

    async def list_all_ids(self) -> List[str]:
        cursor = self.collection.find({}, {"_id": 1})
        return [str(doc["_id"]) for doc in await cursor.to_list(None)]

    async def list_societies(self, society_ids: Iterable[str]) -> List[Society]:
        oids = [oid for oid in (to_object_id(sid) for sid in society_ids) if oid is not None]
        if not oids:
            return []
        cursor = self.collection.find({"_id": {"$in": oids}}).sort("created_at", -1)
        return [Society(**doc) for doc in await cursor.to_list(None)]

    async def get_names(self, society_ids: Iterable[str]) -> Dict[str, str]:
        """Map society id to display name for the given ids."""
        oids = [oid for oid in (to_object_id(sid) for sid in society_ids) if oid is not None]
        if not oids:
            return {}
        cursor = self.collection.find({"_id": {"$in": oids}}, {"name": 1})
        return {str(doc["_id"]): doc["name"] for doc in await cursor.to_list(None)}

    async def update_society(self, society_id: str, update_data: dict) -> Optional[Society]:
        """Apply an admin-approved change to live fields."""
        oid = to_object_id(society_id)
        if oid is None:
            return None
        doc = await self.collection.find_one_and_update(
            {"_id": oid},
            {"$set": {**update_data, "updated_at": datetime.now(timezone.utc)}},
            return_document=ReturnDocument.AFTER
        )
        if doc:
            return Society(**doc)
        return None

    async def set_assigned_agent(self, society_id: str, agent_id: Optional[str]) -> Optional[Society]:
        """Pointer update; assigning the same agent twice is a no-op."""
        return await self.update_society(society_id, {"assigned_agent_id": agent_id})

    async def clear_agent(self, agent_id: str, keep: Iterable[str] = ()) -> int:
        """Unset ``assigned_agent_id`` wherever it names this agent, except ``keep``."""
        query: dict = {"assigned_agent_id": agent_id}
        keep_oids = [oid for oid in (to_object_id(sid) for sid in keep) if oid is not None]
        if keep_oids:
            query["_id"] = {"$nin": keep_oids}
        result = await self.collection.update_many(
            query,
            {"$set": {"assigned_agent_id": None, "updated_at": datetime.now(timezone.utc)}}
        )
        return result.modified_count
