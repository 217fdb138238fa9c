from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter, Depends, status

from society_ledgers.core.auth import require_roles
from society_ledgers.core.exceptions import NotFound
from society_ledgers.db.mongo import get_db
from society_ledgers.models.user import Principal, User, UserRole
from society_ledgers.repositories.society_repo import SocietyRepository
from society_ledgers.repositories.user_repo import UserRepository
from society_ledgers.schemas.agent import AgentCreate, AgentSocietiesUpdate, AgentTerminate
from society_ledgers.schemas.auth import UserResponse
from society_ledgers.schemas.common import CreatedResponse, OkResponse

router = APIRouter(prefix="/agents", tags=["agents"])

admin_only = require_roles(UserRole.ADMIN)


async def _get_agent(repo: UserRepository, agent_id: str) -> User:
    agent = await repo.get_user_by_id(agent_id)
    if agent is None or agent.role != UserRole.AGENT:
        raise NotFound("Agent not found")
    return agent


@router.post("", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_agent(
    agent_in: AgentCreate,
    principal: Principal = Depends(admin_only),
    db = Depends(get_db)
):
    agent = await UserRepository(db).create_user(
        email=agent_in.email,
        password=agent_in.password,
        role=UserRole.AGENT,
        name=agent_in.name,
        assigned_societies=agent_in.assigned_societies,
    )
    return CreatedResponse(id=str(agent.id))


@router.get("", response_model=List[UserResponse])
async def list_agents(principal: Principal = Depends(admin_only), db = Depends(get_db)):
    agents = await UserRepository(db).list_by_role(UserRole.AGENT)
    return [UserResponse.from_user(agent) for agent in agents]


@router.put("/{agent_id}/societies", response_model=UserResponse)
async def update_agent_societies(
    agent_id: str,
    payload: AgentSocietiesUpdate,
    principal: Principal = Depends(admin_only),
    db = Depends(get_db)
):
    """Replace the agent's assigned societies."""
    repo = UserRepository(db)
    await _get_agent(repo, agent_id)
    assigned = list(dict.fromkeys(payload.assigned_societies))
    updated = await repo.update_user(agent_id, {"assigned_societies": assigned})
    # Societies dropped from the list no longer point at this agent
    await SocietyRepository(db).clear_agent(agent_id, keep=assigned)
    return UserResponse.from_user(updated)


@router.put("/{agent_id}/terminate", response_model=OkResponse)
async def terminate_agent(
    agent_id: str,
    payload: AgentTerminate,
    principal: Principal = Depends(admin_only),
    db = Depends(get_db)
):
    """Deactivate the agent and drop all of its society assignments."""
    repo = UserRepository(db)
    await _get_agent(repo, agent_id)
    await repo.update_user(agent_id, {
        "is_active": False,
        "assigned_societies": [],
        "terminated_at": datetime.now(timezone.utc),
        "termination_reason": payload.reason,
    })
    await SocietyRepository(db).clear_agent(agent_id)
    return OkResponse()
