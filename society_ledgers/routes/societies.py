from typing import List

from fastapi import APIRouter, Depends, status

from society_ledgers.core.auth import get_current_principal, require_roles
from society_ledgers.core.exceptions import Conflict, NotFound, ValidationError
from society_ledgers.db.mongo import get_db
from society_ledgers.models.society import ApprovalStatus, Society
from society_ledgers.models.user import OFFICER_ROLES, Principal, User, UserRole
from society_ledgers.repositories.society_repo import SocietyRepository
from society_ledgers.repositories.user_repo import UserRepository
from society_ledgers.schemas.common import CreatedResponse, OkResponse
from society_ledgers.schemas.society import (
    AssignAgentRequest,
    MemberAdd,
    MemberResponse,
    SocietyCreate,
    SocietyResponse,
    SocietyUpdate,
)
from society_ledgers.services.access_service import ensure_society_access, resolve_accessible_societies

router = APIRouter(prefix="/societies", tags=["societies"])

admin_only = require_roles(UserRole.ADMIN)


async def _get_society_or_404(repo: SocietyRepository, society_id: str) -> Society:
    society = await repo.get_society(society_id)
    if society is None:
        raise NotFound("Society not found")
    return society


def _to_member_response(user: User) -> MemberResponse:
    return MemberResponse(
        user_id=str(user.id),
        email=user.email,
        name=user.name,
        role=user.role,
        is_active=user.is_active,
        joined_at=user.created_at,
    )


@router.post("", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_society(
    society_in: SocietyCreate,
    principal: Principal = Depends(admin_only),
    db = Depends(get_db)
):
    """Admin-created societies skip onboarding review."""
    society = await SocietyRepository(db).create_society(society_in, ApprovalStatus.APPROVED)
    return CreatedResponse(id=str(society.id))


@router.get("", response_model=List[SocietyResponse])
async def list_societies(principal: Principal = Depends(get_current_principal), db = Depends(get_db)):
    scope = await resolve_accessible_societies(db, principal)
    societies = await SocietyRepository(db).list_societies(scope)
    return [SocietyResponse.from_society(society) for society in societies]


@router.get("/{society_id}", response_model=SocietyResponse)
async def get_society(
    society_id: str,
    principal: Principal = Depends(get_current_principal),
    db = Depends(get_db)
):
    repo = SocietyRepository(db)
    if principal.role == UserRole.ADMIN:
        return SocietyResponse.from_society(await _get_society_or_404(repo, society_id))

    scope = await resolve_accessible_societies(db, principal)
    ensure_society_access(scope, society_id)
    return SocietyResponse.from_society(await _get_society_or_404(repo, society_id))


@router.put("/{society_id}", response_model=SocietyResponse)
async def update_society(
    society_id: str,
    update_in: SocietyUpdate,
    principal: Principal = Depends(admin_only),
    db = Depends(get_db)
):
    """Apply an admin change to live society fields."""
    repo = SocietyRepository(db)
    updates = update_in.model_dump(exclude_unset=True)
    if not updates:
        return SocietyResponse.from_society(await _get_society_or_404(repo, society_id))

    society = await repo.update_society(society_id, updates)
    if society is None:
        raise NotFound("Society not found")
    return SocietyResponse.from_society(society)


@router.put("/{society_id}/assign-agent", response_model=OkResponse)
async def assign_agent(
    society_id: str,
    payload: AssignAgentRequest,
    principal: Principal = Depends(admin_only),
    db = Depends(get_db)
):
    society_repo = SocietyRepository(db)
    user_repo = UserRepository(db)
    society = await _get_society_or_404(society_repo, society_id)

    agent = await user_repo.get_user_by_id(payload.agent_id)
    if agent is None or agent.role != UserRole.AGENT:
        raise NotFound("Agent not found")
    if not agent.is_active:
        raise ValidationError("Agent has been terminated", field="agent_id")

    previous = society.assigned_agent_id
    if previous and previous != payload.agent_id:
        await user_repo.remove_assigned_society(previous, society_id)
    await society_repo.set_assigned_agent(society_id, payload.agent_id)
    await user_repo.add_assigned_society(payload.agent_id, society_id)
    return OkResponse()


@router.delete("/{society_id}/assign-agent", response_model=OkResponse)
async def unassign_agent(
    society_id: str,
    principal: Principal = Depends(admin_only),
    db = Depends(get_db)
):
    society_repo = SocietyRepository(db)
    society = await _get_society_or_404(society_repo, society_id)
    if society.assigned_agent_id:
        await UserRepository(db).remove_assigned_society(society.assigned_agent_id, society_id)
        await society_repo.set_assigned_agent(society_id, None)
    return OkResponse()


@router.get("/{society_id}/members", response_model=List[MemberResponse])
async def list_members(
    society_id: str,
    principal: Principal = Depends(admin_only),
    db = Depends(get_db)
):
    await _get_society_or_404(SocietyRepository(db), society_id)
    members = await UserRepository(db).list_society_members(society_id)
    return [_to_member_response(member) for member in members]


@router.post("/{society_id}/members", response_model=MemberResponse, status_code=status.HTTP_201_CREATED)
async def add_member(
    society_id: str,
    member_in: MemberAdd,
    principal: Principal = Depends(admin_only),
    db = Depends(get_db)
):
    """
    Attach an officer to the society.

    - Role must be an officer role
    - An existing account is re-used unless it already belongs to a society
      or is an Admin/Agent account
    - New accounts need a password
    """
    if member_in.role not in OFFICER_ROLES:
        raise ValidationError("Members must hold an officer role", field="role")
    await _get_society_or_404(SocietyRepository(db), society_id)

    user_repo = UserRepository(db)
    existing = await user_repo.get_user_by_email(member_in.email)
    if existing:
        if not existing.is_officer:
            raise Conflict(f"{existing.role.value} accounts cannot join a society")
        if existing.associated_society_id:
            raise Conflict("User is already associated with a society")
        member = await user_repo.update_user(str(existing.id), {
            "associated_society_id": society_id,
            "role": member_in.role.value,
            "name": member_in.name or existing.name,
        })
        return _to_member_response(member)

    if not member_in.password:
        raise ValidationError("Password is required for new members", field="password")
    member = await user_repo.create_user(
        email=member_in.email,
        password=member_in.password,
        role=member_in.role,
        name=member_in.name,
        associated_society_id=society_id,
    )
    return _to_member_response(member)


@router.delete("/{society_id}/members/{user_id}", response_model=OkResponse)
async def remove_member(
    society_id: str,
    user_id: str,
    principal: Principal = Depends(admin_only),
    db = Depends(get_db)
):
    removed = await UserRepository(db).detach_from_society(user_id, society_id)
    if not removed:
        raise NotFound("Member not found in this society")
    return OkResponse()
