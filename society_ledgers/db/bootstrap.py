import logging

from motor.motor_asyncio import AsyncIOMotorDatabase

from society_ledgers.core.config import settings
from society_ledgers.core.exceptions import Conflict
from society_ledgers.models.user import UserRole
from society_ledgers.repositories.user_repo import UserRepository

logger = logging.getLogger(__name__)


async def ensure_admin(db: AsyncIOMotorDatabase) -> bool:
    """Create the configured admin account if it does not exist yet."""
    if not settings.ADMIN_EMAIL or not settings.ADMIN_PASSWORD:
        return False

    repo = UserRepository(db)
    if await repo.get_user_by_email(settings.ADMIN_EMAIL):
        return False

    try:
        await repo.create_user(
            email=settings.ADMIN_EMAIL,
            password=settings.ADMIN_PASSWORD,
            role=UserRole.ADMIN,
            name="Admin",
        )
    except Conflict:
        # Another worker created it first
        return False
    logger.info("Bootstrap admin created", extra={"email": settings.ADMIN_EMAIL})
    return True
