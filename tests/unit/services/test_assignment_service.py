"""Unit tests for AssignmentService."""

from datetime import date
from uuid import UUID, uuid4

import pytest

from core.exceptions import (
    AssignmentNotFoundError,
    CrossTeamReferenceError,
    DuplicateAssignmentError,
    InsufficientPermissionsError,
    MemberNotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from domain.entities.assignment import Assignment, AssignmentStatus
from domain.entities.role import Role
from domain.entities.service import Service, ServiceStatus
from domain.entities.team import MemberStatus, Membership, MembershipRole, Team
from domain.services.assignment_service import AssignmentRequest, AssignmentService
from tests.unit.conftest import FakeUnitOfWork, as_member


@pytest.fixture
def service(uow: FakeUnitOfWork) -> AssignmentService:
    return AssignmentService(lambda: uow)


@pytest.fixture
def worship(uow: FakeUnitOfWork, team_id: UUID) -> Service:
    svc = Service(
        team_id=team_id,
        name="3/15 Sunday Worship",
        service_date=date(2026, 3, 15),
        created_by=uuid4(),
    )
    uow.services.get.return_value = svc
    return svc


@pytest.fixture
def singer(uow: FakeUnitOfWork, team_id: UUID) -> Membership:
    member = Membership(team_id=team_id, user_id=uuid4())
    uow.teams.get_member_by_id.return_value = member
    return member


@pytest.fixture
def vocals(uow: FakeUnitOfWork, team_id: UUID) -> Role:
    role = Role(team_id=team_id, name="Vocals")
    uow.roles.get.return_value = role
    return role


class TestBulkCreate:
    @pytest.mark.asyncio
    async def test_creates_all(
        self, service: AssignmentService, uow: FakeUnitOfWork, team_id, user_id, worship, singer, vocals
    ):
        as_member(uow, team_id, user_id, MembershipRole.ADMIN)
        uow.assignments.exists.return_value = False
        uow.assignments.create_many.side_effect = lambda items: items

        created = await service.create(worship.id, user_id, singer.id, vocals.id, notes="Lead")

        assert created.assigned_by == user_id
        assert created.status == AssignmentStatus.PENDING
        assert created.notes == "Lead"
        assert uow.committed

    @pytest.mark.asyncio
    async def test_empty_batch(self, service: AssignmentService, user_id):
        with pytest.raises(ValidationError):
            await service.bulk_create(uuid4(), user_id, [])

    @pytest.mark.asyncio
    async def test_duplicate_inside_batch(
        self, service: AssignmentService, uow: FakeUnitOfWork, team_id, user_id, worship, singer, vocals
    ):
        as_member(uow, team_id, user_id, MembershipRole.ADMIN)
        uow.assignments.exists.return_value = False
        pair = AssignmentRequest(singer.id, vocals.id)

        with pytest.raises(DuplicateAssignmentError):
            await service.bulk_create(worship.id, user_id, [pair, pair])
        uow.assignments.create_many.assert_not_called()

    @pytest.mark.asyncio
    async def test_duplicate_existing(
        self, service: AssignmentService, uow: FakeUnitOfWork, team_id, user_id, worship, singer, vocals
    ):
        as_member(uow, team_id, user_id, MembershipRole.ADMIN)
        uow.assignments.exists.return_value = True
        with pytest.raises(DuplicateAssignmentError):
            await service.create(worship.id, user_id, singer.id, vocals.id)

    @pytest.mark.asyncio
    async def test_inactive_member(
        self, service: AssignmentService, uow: FakeUnitOfWork, team_id, user_id, worship, singer, vocals
    ):
        as_member(uow, team_id, user_id, MembershipRole.ADMIN)
        uow.assignments.exists.return_value = False
        singer.status = MemberStatus.INACTIVE
        with pytest.raises(MemberNotFoundError):
            await service.create(worship.id, user_id, singer.id, vocals.id)

    @pytest.mark.asyncio
    async def test_role_from_other_team(
        self, service: AssignmentService, uow: FakeUnitOfWork, team_id, user_id, worship, singer
    ):
        as_member(uow, team_id, user_id, MembershipRole.ADMIN)
        uow.assignments.exists.return_value = False
        uow.roles.get.return_value = Role(team_id=uuid4(), name="Bass")
        with pytest.raises(CrossTeamReferenceError):
            await service.create(worship.id, user_id, singer.id, uuid4())

    @pytest.mark.asyncio
    async def test_member_cannot_assign(
        self, service: AssignmentService, uow: FakeUnitOfWork, team_id, user_id, worship
    ):
        as_member(uow, team_id, user_id)
        with pytest.raises(InsufficientPermissionsError):
            await service.create(worship.id, user_id, uuid4(), uuid4())


class TestRespond:
    @pytest.mark.asyncio
    async def test_assigned_member_confirms(
        self, service: AssignmentService, uow: FakeUnitOfWork, team_id, user_id, worship
    ):
        me = as_member(uow, team_id, user_id)
        assignment = Assignment(service_id=worship.id, team_member_id=me.id, role_id=uuid4())
        uow.assignments.get.return_value = assignment
        uow.assignments.update.side_effect = lambda a: a

        result = await service.respond(assignment.id, user_id, AssignmentStatus.CONFIRMED)

        assert result.status == AssignmentStatus.CONFIRMED
        assert result.responded_at is not None

    @pytest.mark.asyncio
    async def test_someone_else_cannot_respond(
        self, service: AssignmentService, uow: FakeUnitOfWork, team_id, user_id, worship
    ):
        as_member(uow, team_id, user_id, MembershipRole.ADMIN)
        uow.assignments.get.return_value = Assignment(
            service_id=worship.id, team_member_id=uuid4(), role_id=uuid4()
        )
        with pytest.raises(PermissionDeniedError):
            await service.respond(uuid4(), user_id, AssignmentStatus.CONFIRMED)

    @pytest.mark.asyncio
    async def test_pending_is_not_a_response(self, service: AssignmentService, user_id):
        with pytest.raises(ValidationError):
            await service.respond(uuid4(), user_id, AssignmentStatus.PENDING)

    @pytest.mark.asyncio
    async def test_decline_reason_required_by_team_setting(
        self, service: AssignmentService, uow: FakeUnitOfWork, team_id, user_id, worship
    ):
        me = as_member(uow, team_id, user_id)
        team = Team(id=team_id, name="Grace", owner_id=uuid4(), invite_code="ABCD2345")
        team.settings["require_decline_reason"] = True
        uow.teams.get.return_value = team
        uow.assignments.get.return_value = Assignment(
            service_id=worship.id, team_member_id=me.id, role_id=uuid4()
        )

        with pytest.raises(ValidationError):
            await service.respond(uuid4(), user_id, AssignmentStatus.DECLINED, decline_reason="   ")

    @pytest.mark.asyncio
    async def test_missing_assignment(self, service: AssignmentService, uow: FakeUnitOfWork, user_id):
        uow.assignments.get.return_value = None
        with pytest.raises(AssignmentNotFoundError):
            await service.respond(uuid4(), user_id, AssignmentStatus.CONFIRMED)


class TestListForService:
    @pytest.mark.asyncio
    async def test_member_cannot_see_draft_roster(
        self, service: AssignmentService, uow: FakeUnitOfWork, team_id, user_id, worship
    ):
        as_member(uow, team_id, user_id)
        with pytest.raises(PermissionDeniedError):
            await service.list_for_service(worship.id, user_id)

    @pytest.mark.asyncio
    async def test_member_sees_published_roster(
        self, service: AssignmentService, uow: FakeUnitOfWork, team_id, user_id, worship
    ):
        as_member(uow, team_id, user_id)
        worship.status = ServiceStatus.PUBLISHED
        uow.assignments.get_for_service.return_value = []

        assert await service.list_for_service(worship.id, user_id) == []


class TestMyAssignments:
    @pytest.mark.asyncio
    async def test_uses_membership_id(self, service: AssignmentService, uow: FakeUnitOfWork, team_id, user_id):
        me = as_member(uow, team_id, user_id)
        uow.assignments.get_for_member.return_value = []

        await service.my_assignments(team_id, user_id)

        uow.assignments.get_for_member.assert_called_once_with(me.id, None, None)
