import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING

from society_ledgers.core.config import settings

logger = logging.getLogger(__name__)


class MongoDatabase:
    """MongoDB connection manager."""

    client: AsyncIOMotorClient = None
    db: AsyncIOMotorDatabase = None

mongodb = MongoDatabase()

async def connect_to_mongo():
    """Connect to MongoDB."""
    mongodb.client = AsyncIOMotorClient(settings.MONGODB_URI)
    mongodb.db = mongodb.client[settings.MONGODB_DB]

    await create_indexes(mongodb.db)
    logger.info("Connected to MongoDB", extra={"database": settings.MONGODB_DB})

async def disconnect_from_mongo():
    """Disconnect from MongoDB."""
    if mongodb.client is not None:
        mongodb.client.close()
    logger.info("Disconnected from MongoDB")

async def create_indexes(db: AsyncIOMotorDatabase):
    """Create database indexes."""
    await db["users"].create_index("email", unique=True)
    await db["users"].create_index("associated_society_id")
    await db["users"].create_index("assigned_societies")

    await db["bills"].create_index([("society_id", ASCENDING), ("created_at", DESCENDING)])
    await db["bills"].create_index("status")

    await db["advance_payments"].create_index([("society_id", ASCENDING), ("created_at", DESCENDING)])

    await db["invitations"].create_index("token", unique=True)
    await db["invitations"].create_index([("society_id", ASCENDING), ("email", ASCENDING)])

def get_db() -> AsyncIOMotorDatabase:
    """Get database instance."""
    return mongodb.db
