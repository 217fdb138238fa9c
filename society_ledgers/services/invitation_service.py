"""
Officer invitations.

An officer invites an email into their own society; the invitee redeems
the token once, before it expires, to create an account tied to that
society.
"""
import logging
from typing import List

from motor.motor_asyncio import AsyncIOMotorDatabase

from society_ledgers.core.exceptions import AccessDenied, Conflict, ValidationError
from society_ledgers.models.invitation import Invitation
from society_ledgers.models.user import OFFICER_ROLES, Principal, User
from society_ledgers.repositories.invitation_repo import InvitationRepository
from society_ledgers.repositories.user_repo import UserRepository
from society_ledgers.schemas.invitation import InvitationAccept, InvitationCreate
from society_ledgers.services.access_service import ensure_role

logger = logging.getLogger(__name__)


class InvitationService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.repo = InvitationRepository(db)
        self.users = UserRepository(db)

    async def invite_member(self, principal: Principal, society_id: str, invite_in: InvitationCreate) -> Invitation:
        ensure_role(principal, OFFICER_ROLES)
        if principal.home_society_id != society_id:
            raise AccessDenied("You can only invite members to your own society")
        if invite_in.role not in OFFICER_ROLES:
            raise ValidationError("Invitations are for officer roles only", field="role")

        if await self.users.get_user_by_email(invite_in.email):
            raise Conflict("Email already registered")
        if await self.repo.find_live(invite_in.email, society_id):
            raise Conflict("Invitation already sent to this email")

        invitation = await self.repo.create_invitation(
            email=invite_in.email,
            role=invite_in.role,
            society_id=society_id,
            invited_by=principal.id,
        )
        logger.info(
            "Invitation created",
            extra={"invitation_id": str(invitation.id), "society_id": society_id, "actor_id": principal.id},
        )
        return invitation

    async def accept_invitation(self, accept_in: InvitationAccept) -> User:
        invitation = await self.repo.get_live_by_token(accept_in.token)
        if invitation is None:
            raise ValidationError("Invalid or expired invitation", field="token")
        if await self.users.get_user_by_email(invitation.email):
            raise Conflict("Email already registered")

        # Unique email index stops a concurrent second redemption here
        user = await self.users.create_user(
            email=invitation.email,
            password=accept_in.password,
            role=invitation.role,
            name=accept_in.name,
            associated_society_id=invitation.society_id,
        )
        await self.repo.mark_accepted(accept_in.token)
        logger.info(
            "Invitation accepted",
            extra={"invitation_id": str(invitation.id), "society_id": invitation.society_id, "user_id": str(user.id)},
        )
        return user

    async def list_pending(self, principal: Principal) -> List[Invitation]:
        ensure_role(principal, OFFICER_ROLES)
        if not principal.home_society_id:
            raise AccessDenied("You must be associated with a society")
        return await self.repo.list_pending(principal.home_society_id)
