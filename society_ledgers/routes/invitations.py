from typing import List

from fastapi import APIRouter, Depends, status

from society_ledgers.core.auth import create_access_token, require_roles
from society_ledgers.db.mongo import get_db
from society_ledgers.models.user import OFFICER_ROLES, Principal
from society_ledgers.schemas.auth import TokenResponse, UserResponse
from society_ledgers.schemas.invitation import (
    InvitationAccept,
    InvitationCreate,
    InvitationCreated,
    InvitationResponse,
)
from society_ledgers.services.invitation_service import InvitationService

router = APIRouter(tags=["invitations"])

officers = require_roles(*OFFICER_ROLES)


@router.post(
    "/societies/{society_id}/invite-member",
    response_model=InvitationCreated,
    status_code=status.HTTP_201_CREATED,
)
async def invite_member(
    society_id: str,
    invite_in: InvitationCreate,
    principal: Principal = Depends(officers),
    db = Depends(get_db)
):
    """Invite an officer into the caller's own society."""
    invitation = await InvitationService(db).invite_member(principal, society_id, invite_in)
    return InvitationCreated(
        id=str(invitation.id),
        token=invitation.token,
        expires_at=invitation.expires_at,
    )


@router.post("/accept-invitation", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def accept_invitation(accept_in: InvitationAccept, db = Depends(get_db)):
    """Redeem an invitation token; creates the account and signs it in."""
    user = await InvitationService(db).accept_invitation(accept_in)
    return TokenResponse(
        access_token=create_access_token(user),
        user=UserResponse.from_user(user)
    )


@router.get("/invitations/pending", response_model=List[InvitationResponse])
async def list_pending_invitations(principal: Principal = Depends(officers), db = Depends(get_db)):
    invitations = await InvitationService(db).list_pending(principal)
    return [InvitationResponse.from_invitation(invitation) for invitation in invitations]
