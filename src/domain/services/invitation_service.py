"""Invitation service layer with business logic."""

import secrets
from collections.abc import Callable
from datetime import datetime
from uuid import UUID

import structlog

from core.exceptions import (
    AlreadyAMemberError,
    DuplicateInvitationError,
    InvitationExpiredError,
    InvitationNotFoundError,
    InvalidRoleError,
    PermissionDeniedError,
)
from domain.entities.invitation import Invitation, InvitationStatus
from domain.entities.team import MemberStatus, Membership, MembershipRole
from domain.permissions import Capability
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.access import require_capability, require_team

logger = structlog.get_logger()


class InvitationService:
    """Service layer for token-addressed team invitations."""

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def create_invitation(
        self,
        team_id: UUID,
        user_id: UUID,
        email: str,
        role_suggestion: MembershipRole = MembershipRole.MEMBER,
        message: str | None = None,
    ) -> Invitation:
        """Invite someone by email.

        Args:
            team_id: The team to invite to.
            user_id: The inviting member (needs invite_members).
            email: Address the token is sent to.
            role_suggestion: Role granted on acceptance, admin or member.
            message: Optional note shown with the invitation.

        Returns:
            The created invitation, including its token.

        Raises:
            TeamNotFoundError: If the team does not exist.
            InsufficientPermissionsError: If the caller cannot invite.
            InvalidRoleError: If the suggested role is owner.
            PermissionDeniedError: If a non-owner suggests admin.
            DuplicateInvitationError: If a pending invitation already exists.
        """
        async with self._uow_factory() as uow:
            await require_team(uow, team_id)
            inviter = await require_capability(uow, team_id, user_id, Capability.INVITE_MEMBERS)

            if role_suggestion == MembershipRole.OWNER:
                raise InvalidRoleError("Invitations cannot grant the owner role")
            if role_suggestion == MembershipRole.ADMIN and inviter.role != MembershipRole.OWNER:
                raise PermissionDeniedError("Only the owner can invite admins")

            normalized = email.lower().strip()
            existing = await uow.invitations.get_pending_for_team_email(team_id, normalized)
            if existing:
                raise DuplicateInvitationError(normalized)

            invitation = Invitation(
                team_id=team_id,
                email=normalized,
                token=secrets.token_hex(32),
                invited_by=user_id,
                role_suggestion=role_suggestion,
                message=message,
            )
            created = await uow.invitations.create(invitation)
            await uow.commit()
            return created  # type: ignore[no-any-return]

    async def get_by_token(self, token: str) -> Invitation:
        """Look up a pending invitation. Expired ones are marked expired on read."""
        async with self._uow_factory() as uow:
            invitation = await uow.invitations.get_by_token(token)
            if not invitation:
                raise InvitationNotFoundError()
            await self._ensure_pending(uow, invitation)
            return invitation

    async def accept_invitation(self, token: str, user_id: UUID) -> Membership:
        """Accept an invitation and join its team with the suggested role.

        An inactive membership from an earlier stay is reactivated.

        Raises:
            InvitationNotFoundError: If the token is unknown or no longer pending.
            InvitationExpiredError: If the invitation has expired.
            AlreadyAMemberError: If the user is already an active member.
        """
        async with self._uow_factory() as uow:
            invitation = await uow.invitations.get_by_token(token)
            if not invitation:
                raise InvitationNotFoundError()
            await self._ensure_pending(uow, invitation)

            existing = await uow.teams.get_member(invitation.team_id, user_id)
            if existing and existing.is_active:
                # Consume the invitation so it cannot be reused
                invitation.accept()
                await uow.invitations.update(invitation)
                await uow.commit()
                raise AlreadyAMemberError(str(user_id))

            if existing:
                existing.status = MemberStatus.ACTIVE
                existing.role = invitation.role_suggestion
                existing.joined_at = datetime.utcnow()
                member = await uow.teams.update_member(existing)
            else:
                member = await uow.teams.add_member(
                    Membership(
                        team_id=invitation.team_id,
                        user_id=user_id,
                        role=invitation.role_suggestion,
                    )
                )

            invitation.accept()
            await uow.invitations.update(invitation)
            await uow.commit()
            logger.info(
                "invitation_accepted",
                team_id=str(invitation.team_id),
                invitation_id=str(invitation.id),
                user_id=str(user_id),
            )
            return member  # type: ignore[no-any-return]

    async def cancel_invitation(self, team_id: UUID, invitation_id: UUID, user_id: UUID) -> Invitation:
        """Cancel a pending invitation. Requires invite_members."""
        async with self._uow_factory() as uow:
            await require_team(uow, team_id)
            await require_capability(uow, team_id, user_id, Capability.INVITE_MEMBERS)

            invitation = await uow.invitations.get_by_id(invitation_id)
            if not invitation or invitation.team_id != team_id:
                raise InvitationNotFoundError(str(invitation_id))
            if invitation.status != InvitationStatus.PENDING:
                raise InvitationNotFoundError(str(invitation_id))

            invitation.cancel()
            updated = await uow.invitations.update(invitation)
            await uow.commit()
            return updated  # type: ignore[no-any-return]

    async def get_team_invitations(self, team_id: UUID, user_id: UUID) -> list[Invitation]:
        """List a team's invitations. Requires invite_members."""
        async with self._uow_factory() as uow:
            await require_team(uow, team_id)
            await require_capability(uow, team_id, user_id, Capability.INVITE_MEMBERS)
            return await uow.invitations.get_for_team(team_id)  # type: ignore[no-any-return]

    async def get_user_pending_invitations(self, email: str) -> list[Invitation]:
        """Pending invitations addressed to an email, shown after sign-in."""
        async with self._uow_factory() as uow:
            return await uow.invitations.get_pending_for_email(  # type: ignore[no-any-return]
                email.lower().strip()
            )

    # --- Internal helpers ---

    async def _ensure_pending(self, uow: IUnitOfWork, invitation: Invitation) -> None:
        if invitation.status != InvitationStatus.PENDING:
            raise InvitationNotFoundError()
        if invitation.is_expired:
            invitation.expire()
            await uow.invitations.update(invitation)
            await uow.commit()
            raise InvitationExpiredError()
