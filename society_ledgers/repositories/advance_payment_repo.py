from datetime import datetime, timezone
from typing import Iterable, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from society_ledgers.models.advance_payment import AdvancePayment, AdvancePaymentStatus
from society_ledgers.models.base import to_object_id
from society_ledgers.schemas.advance_payment import AdvancePaymentCreate


class AdvancePaymentRepository:
    """Advance payment database operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["advance_payments"]

    async def create_payment(self, payment_data: AdvancePaymentCreate, requested_by: str) -> AdvancePayment:
        payment_dict = {
            "society_id": payment_data.society_id,
            "bill_id": payment_data.bill_id,
            "total_amount_needed": payment_data.total_amount_needed,
            "requested_amount": payment_data.requested_amount,
            "approved_amount": None,
            "received_amount": None,
            "status": AdvancePaymentStatus.PENDING.value,
            "requested_by": requested_by,
            "approved_by": None,
            "remarks": payment_data.remarks,
            "created_at": datetime.now(timezone.utc),
            "updated_at": None,
        }
        result = await self.collection.insert_one(payment_dict)
        payment_dict["_id"] = result.inserted_id
        return AdvancePayment(**payment_dict)

    async def get_payment(self, payment_id: str) -> Optional[AdvancePayment]:
        oid = to_object_id(payment_id)
        if oid is None:
            return None
        doc = await self.collection.find_one({"_id": oid})
        if doc:
            return AdvancePayment(**doc)
        return None

    async def list_payments(self, society_ids: Iterable[str]) -> List[AdvancePayment]:
        society_ids = list(society_ids)
        if not society_ids:
            return []
        cursor = self.collection.find({"society_id": {"$in": society_ids}}).sort("created_at", -1)
        return [AdvancePayment(**doc) for doc in await cursor.to_list(None)]

    async def apply_review(self, payment_id: str, update_data: dict) -> Optional[AdvancePayment]:
        """Write all reviewed fields in one document update."""
        oid = to_object_id(payment_id)
        if oid is None:
            return None
        doc = await self.collection.find_one_and_update(
            {"_id": oid},
            {"$set": {**update_data, "updated_at": datetime.now(timezone.utc)}},
            return_document=ReturnDocument.AFTER
        )
        if doc:
            return AdvancePayment(**doc)
        return None
