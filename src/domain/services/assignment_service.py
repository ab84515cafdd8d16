"""Assignment service layer with business logic."""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date
from uuid import UUID

import structlog

from core.exceptions import (
    AssignmentNotFoundError,
    CrossTeamReferenceError,
    DuplicateAssignmentError,
    MemberNotFoundError,
    PermissionDeniedError,
    RoleNotFoundError,
    ServiceNotFoundError,
    ValidationError,
)
from domain.entities.assignment import Assignment, AssignmentDetail, AssignmentStatus
from domain.entities.service import Service
from domain.permissions import Capability, has_permission, require_permission
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.access import require_capability, require_member

logger = structlog.get_logger()


@dataclass(frozen=True)
class AssignmentRequest:
    """One (member, role) pair to put on a service."""

    team_member_id: UUID
    role_id: UUID
    notes: str | None = None


class AssignmentService:
    """Service layer for putting members on services and recording their answers."""

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def list_for_service(self, service_id: UUID, user_id: UUID) -> list[AssignmentDetail]:
        """Roster of a service. Members only see rosters of published services."""
        async with self._uow_factory() as uow:
            service = await self._get_service(uow, service_id)
            member = await require_member(uow, service.team_id, user_id)
            require_permission(member.role, Capability.VIEW_ASSIGNMENTS)
            if not service.visible_to_members and not has_permission(member.role, Capability.EDIT_SERVICES):
                raise PermissionDeniedError("Service not available")
            return await uow.assignments.get_for_service(service_id)  # type: ignore[no-any-return]

    async def create(
        self,
        service_id: UUID,
        user_id: UUID,
        team_member_id: UUID,
        role_id: UUID,
        notes: str | None = None,
    ) -> Assignment:
        """Assign one member to one role on a service."""
        created = await self.bulk_create(
            service_id, user_id, [AssignmentRequest(team_member_id, role_id, notes)]
        )
        return created[0]

    async def bulk_create(
        self,
        service_id: UUID,
        user_id: UUID,
        requests: Sequence[AssignmentRequest],
    ) -> list[Assignment]:
        """Assign several members at once, all or nothing.

        Raises:
            ServiceNotFoundError: If the service does not exist.
            InsufficientPermissionsError: If the caller cannot assign members.
            MemberNotFoundError: If a member is unknown or inactive.
            CrossTeamReferenceError: If a member or role belongs to another team.
            DuplicateAssignmentError: If a (member, role) pair is already on the service.
        """
        if not requests:
            raise ValidationError("At least one assignment is required")

        async with self._uow_factory() as uow:
            service = await self._get_service(uow, service_id)
            await require_capability(uow, service.team_id, user_id, Capability.ASSIGN_MEMBERS)

            seen: set[tuple[UUID, UUID]] = set()
            assignments: list[Assignment] = []
            for request in requests:
                pair = (request.team_member_id, request.role_id)
                if pair in seen or await uow.assignments.exists(service_id, *pair):
                    raise DuplicateAssignmentError()
                seen.add(pair)

                await self._check_member(uow, service.team_id, request.team_member_id)
                await self._check_role(uow, service.team_id, request.role_id)
                assignments.append(
                    Assignment(
                        service_id=service_id,
                        team_member_id=request.team_member_id,
                        role_id=request.role_id,
                        assigned_by=user_id,
                        notes=request.notes,
                    )
                )

            created = await uow.assignments.create_many(assignments)
            await uow.commit()
            logger.info("assignments_created", service_id=str(service_id), count=len(created))
            return created  # type: ignore[no-any-return]

    async def delete(self, assignment_id: UUID, user_id: UUID) -> bool:
        async with self._uow_factory() as uow:
            assignment = await self._get_assignment(uow, assignment_id)
            service = await self._get_service(uow, assignment.service_id)
            await require_capability(uow, service.team_id, user_id, Capability.ASSIGN_MEMBERS)
            deleted = await uow.assignments.delete(assignment_id)
            await uow.commit()
            return deleted  # type: ignore[no-any-return]

    async def respond(
        self,
        assignment_id: UUID,
        user_id: UUID,
        status: AssignmentStatus,
        decline_reason: str | None = None,
    ) -> Assignment:
        """Confirm or decline an assignment. Only the assigned member may respond.

        Teams with ``require_decline_reason`` set reject declines without a reason.
        """
        if status == AssignmentStatus.PENDING:
            raise ValidationError("Response must be confirmed or declined")

        async with self._uow_factory() as uow:
            assignment = await self._get_assignment(uow, assignment_id)
            service = await self._get_service(uow, assignment.service_id)
            member = await require_capability(
                uow, service.team_id, user_id, Capability.RESPOND_TO_ASSIGNMENTS
            )
            if member.id != assignment.team_member_id:
                raise PermissionDeniedError("Only the assigned member can respond")

            reason = (decline_reason or "").strip() or None
            if status == AssignmentStatus.DECLINED and reason is None:
                team = await uow.teams.get(service.team_id)
                if team and team.settings.get("require_decline_reason"):
                    raise ValidationError("A reason is required to decline")

            assignment.respond(status, reason)
            updated = await uow.assignments.update(assignment)
            await uow.commit()
            logger.info(
                "assignment_responded",
                assignment_id=str(assignment_id),
                status=status.value,
            )
            return updated  # type: ignore[no-any-return]

    async def my_assignments(
        self,
        team_id: UUID,
        user_id: UUID,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[Assignment]:
        """The caller's own assignments in a team."""
        async with self._uow_factory() as uow:
            member = await require_capability(uow, team_id, user_id, Capability.VIEW_ASSIGNMENTS)
            return await uow.assignments.get_for_member(  # type: ignore[no-any-return]
                member.id, start_date, end_date
            )

    # --- Internal helpers ---

    async def _get_service(self, uow: IUnitOfWork, service_id: UUID) -> Service:
        service = await uow.services.get(service_id)
        if not service:
            raise ServiceNotFoundError(str(service_id))
        return service

    async def _get_assignment(self, uow: IUnitOfWork, assignment_id: UUID) -> Assignment:
        assignment = await uow.assignments.get(assignment_id)
        if not assignment:
            raise AssignmentNotFoundError(str(assignment_id))
        return assignment

    async def _check_member(self, uow: IUnitOfWork, team_id: UUID, team_member_id: UUID) -> None:
        member = await uow.teams.get_member_by_id(team_member_id)
        if not member:
            raise MemberNotFoundError(str(team_member_id))
        if member.team_id != team_id:
            raise CrossTeamReferenceError("team_member")
        if not member.is_active:
            raise MemberNotFoundError(str(team_member_id))

    async def _check_role(self, uow: IUnitOfWork, team_id: UUID, role_id: UUID) -> None:
        role = await uow.roles.get(role_id)
        if not role:
            raise RoleNotFoundError(str(role_id))
        if role.team_id != team_id:
            raise CrossTeamReferenceError("role")
