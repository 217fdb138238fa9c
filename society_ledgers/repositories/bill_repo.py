import re
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from society_ledgers.models.base import to_object_id
from society_ledgers.models.bill import Bill, BillStatus, Remark
from society_ledgers.schemas.bill import BillCreate


class BillRepository:
    """Bill database operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["bills"]

    async def create_bill(self, bill_data: BillCreate, submitted_by: str) -> Bill:
        """Insert a new bill in Pending status with an empty remark trail."""
        now = datetime.now(timezone.utc)
        bill_dict = {
            "society_id": bill_data.society_id,
            "vendor_name": bill_data.vendor_name,
            "vendor_contact": bill_data.vendor_contact.model_dump() if bill_data.vendor_contact else None,
            "transaction_nature": bill_data.transaction_nature,
            "amount": bill_data.amount,
            "due_date": bill_data.due_date,
            "status": BillStatus.PENDING.value,
            "attachments": [a.model_dump() for a in bill_data.attachments],
            "submitted_by": submitted_by,
            "remarks": [],
            "version": 1,
            "created_at": now,
            "updated_at": now,
        }
        result = await self.collection.insert_one(bill_dict)
        bill_dict["_id"] = result.inserted_id
        return Bill(**bill_dict)

    async def get_bill(self, bill_id: str) -> Optional[Bill]:
        oid = to_object_id(bill_id)
        if oid is None:
            return None
        doc = await self.collection.find_one({"_id": oid})
        if doc:
            return Bill(**doc)
        return None

    async def list_bills(
        self,
        society_ids: Iterable[str],
        status: Optional[BillStatus] = None,
        vendor_contains: Optional[str] = None,
        created_from: Optional[datetime] = None,
        created_to: Optional[datetime] = None,
    ) -> List[Bill]:
        """Bills of the given societies, newest first."""
        society_ids = list(society_ids)
        if not society_ids:
            return []

        query: dict = {"society_id": {"$in": society_ids}}
        if status is not None:
            query["status"] = status.value
        if vendor_contains:
            query["vendor_name"] = {"$regex": re.escape(vendor_contains), "$options": "i"}
        if created_from is not None or created_to is not None:
            query["created_at"] = {}
            if created_from is not None:
                query["created_at"]["$gte"] = created_from
            if created_to is not None:
                query["created_at"]["$lte"] = created_to

        cursor = self.collection.find(query).sort("created_at", -1)
        return [Bill(**doc) for doc in await cursor.to_list(None)]

    async def count_by_status(self, society_ids: Iterable[str], status: BillStatus) -> int:
        society_ids = list(society_ids)
        if not society_ids:
            return 0
        return await self.collection.count_documents({
            "society_id": {"$in": society_ids},
            "status": status.value,
        })

    async def apply_status_change(
        self,
        bill_id: str,
        new_status: BillStatus,
        remark: Remark,
        expected_version: Optional[int] = None,
    ) -> Optional[Bill]:
        """
        Set the status and append the remark in one document update.

        With ``expected_version`` the update only matches that version; a
        None return then means the bill moved on (or vanished).
        """
        oid = to_object_id(bill_id)
        if oid is None:
            return None
        query: dict = {"_id": oid}
        if expected_version is not None:
            query["version"] = expected_version
        doc = await self.collection.find_one_and_update(
            query,
            {
                "$set": {"status": new_status.value, "updated_at": datetime.now(timezone.utc)},
                "$push": {"remarks": remark.model_dump()},
                "$inc": {"version": 1},
            },
            return_document=ReturnDocument.AFTER
        )
        if doc:
            return Bill(**doc)
        return None

    async def append_remark(self, bill_id: str, remark: Remark) -> Optional[Bill]:
        """Append a discussion remark without touching the status."""
        oid = to_object_id(bill_id)
        if oid is None:
            return None
        doc = await self.collection.find_one_and_update(
            {"_id": oid},
            {
                "$push": {"remarks": remark.model_dump()},
                "$set": {"updated_at": datetime.now(timezone.utc)},
                "$inc": {"version": 1},
            },
            return_document=ReturnDocument.AFTER
        )
        if doc:
            return Bill(**doc)
        return None
