"""Society scope resolution for an authenticated principal."""
from typing import Iterable, Optional, Set

from motor.motor_asyncio import AsyncIOMotorDatabase

from society_ledgers.core.exceptions import AccessDenied, Forbidden
from society_ledgers.models.user import Principal, UserRole
from society_ledgers.repositories.society_repo import SocietyRepository


async def resolve_accessible_societies(db: AsyncIOMotorDatabase, principal: Principal) -> Set[str]:
    """
    Societies the principal may see or act on.

    Admin -> every society, Agent -> assigned societies, officer -> home
    society. Resolve once per operation and reuse the set for every entity.
    """
    if principal.role == UserRole.ADMIN:
        return set(await SocietyRepository(db).list_all_ids())
    if principal.role == UserRole.AGENT:
        return set(principal.assigned_society_ids)
    if principal.is_officer:
        return {principal.home_society_id} if principal.home_society_id else set()
    return set()


def ensure_society_access(scope: Set[str], society_id: str, detail: Optional[str] = None) -> None:
    if society_id not in scope:
        raise AccessDenied(detail or "Access denied to this society")


def ensure_role(principal: Principal, allowed: Iterable[UserRole]) -> None:
    if principal.role not in set(allowed):
        raise Forbidden(f"Role {principal.role.value} may not perform this action")


def narrow_scope(scope: Set[str], society_id: Optional[str]) -> Set[str]:
    """Intersect scope with an optional society filter; out-of-scope yields empty."""
    if society_id is None:
        return scope
    return scope & {society_id}
