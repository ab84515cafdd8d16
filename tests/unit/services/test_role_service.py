"""Unit tests for RoleService."""

from uuid import UUID, uuid4

import pytest

from core.exceptions import (
    CrossTeamReferenceError,
    DuplicateRoleError,
    InsufficientPermissionsError,
    MemberNotFoundError,
    RoleNotFoundError,
)
from domain.entities.role import MemberRole, Proficiency, Role
from domain.entities.team import Membership, MembershipRole
from domain.services.role_service import RoleService
from tests.unit.conftest import FakeUnitOfWork, as_member


@pytest.fixture
def service(uow: FakeUnitOfWork) -> RoleService:
    return RoleService(lambda: uow)


@pytest.fixture
def keys(team_id: UUID) -> Role:
    return Role(team_id=team_id, name="Keys", name_ko="건반", display_order=3)


class TestCreateRole:
    @pytest.mark.asyncio
    async def test_appends_display_order(
        self, service: RoleService, uow: FakeUnitOfWork, team_id: UUID, user_id: UUID, keys: Role
    ):
        as_member(uow, team_id, user_id, MembershipRole.ADMIN)
        uow.roles.get_by_name.return_value = None
        uow.roles.get_for_team.return_value = [keys]
        uow.roles.create.side_effect = lambda role: role

        role = await service.create_role(team_id, user_id, "Drums")

        assert role.display_order == 4
        assert uow.committed

    @pytest.mark.asyncio
    async def test_duplicate_name(
        self, service: RoleService, uow: FakeUnitOfWork, team_id: UUID, user_id: UUID, keys: Role
    ):
        as_member(uow, team_id, user_id, MembershipRole.ADMIN)
        uow.roles.get_by_name.return_value = keys
        with pytest.raises(DuplicateRoleError):
            await service.create_role(team_id, user_id, "Keys")

    @pytest.mark.asyncio
    async def test_member_cannot_manage_roles(
        self, service: RoleService, uow: FakeUnitOfWork, team_id: UUID, user_id: UUID
    ):
        as_member(uow, team_id, user_id)
        with pytest.raises(InsufficientPermissionsError):
            await service.create_role(team_id, user_id, "Drums")


class TestUpdateRole:
    @pytest.mark.asyncio
    async def test_ignores_none_and_protected_fields(
        self, service: RoleService, uow: FakeUnitOfWork, team_id: UUID, user_id: UUID, keys: Role
    ):
        as_member(uow, team_id, user_id, MembershipRole.ADMIN)
        uow.roles.get.return_value = keys
        uow.roles.update.side_effect = lambda role: role

        updated = await service.update_role(
            team_id, user_id, keys.id, color="#ff0000", description=None, id=uuid4()
        )

        assert updated.color == "#ff0000"
        assert updated.id == keys.id

    @pytest.mark.asyncio
    async def test_role_from_other_team(self, service: RoleService, uow: FakeUnitOfWork, team_id: UUID, user_id: UUID):
        as_member(uow, team_id, user_id, MembershipRole.ADMIN)
        uow.roles.get.return_value = Role(team_id=uuid4(), name="Bass")
        with pytest.raises(RoleNotFoundError):
            await service.delete_role(team_id, user_id, uuid4())


class TestAssignRole:
    @pytest.mark.asyncio
    async def test_adds_link_and_clears_other_primaries(
        self, service: RoleService, uow: FakeUnitOfWork, team_id: UUID, user_id: UUID, keys: Role
    ):
        as_member(uow, team_id, user_id, MembershipRole.ADMIN)
        member = Membership(team_id=team_id, user_id=uuid4())
        uow.teams.get_member_by_id.return_value = member
        uow.roles.get.return_value = keys
        uow.roles.get_member_roles.return_value = []
        uow.roles.add_member_role.side_effect = lambda link: link

        link = await service.assign_role(
            team_id, user_id, member.id, keys.id, Proficiency.EXPERT, is_primary=True
        )

        uow.roles.clear_primary.assert_called_once_with(member.id)
        assert link.proficiency == Proficiency.EXPERT
        assert link.is_primary

    @pytest.mark.asyncio
    async def test_reassign_updates_existing_link(
        self, service: RoleService, uow: FakeUnitOfWork, team_id: UUID, user_id: UUID, keys: Role
    ):
        as_member(uow, team_id, user_id, MembershipRole.ADMIN)
        member = Membership(team_id=team_id, user_id=uuid4())
        existing = MemberRole(team_member_id=member.id, role_id=keys.id)
        uow.teams.get_member_by_id.return_value = member
        uow.roles.get.return_value = keys
        uow.roles.get_member_roles.return_value = [existing]
        uow.roles.update_member_role.side_effect = lambda link: link

        link = await service.assign_role(team_id, user_id, member.id, keys.id, Proficiency.BEGINNER)

        assert link.id == existing.id
        assert link.proficiency == Proficiency.BEGINNER
        uow.roles.add_member_role.assert_not_called()
        uow.roles.clear_primary.assert_not_called()

    @pytest.mark.asyncio
    async def test_role_from_other_team(self, service: RoleService, uow: FakeUnitOfWork, team_id: UUID, user_id: UUID):
        as_member(uow, team_id, user_id, MembershipRole.ADMIN)
        uow.teams.get_member_by_id.return_value = Membership(team_id=team_id, user_id=uuid4())
        uow.roles.get.return_value = Role(team_id=uuid4(), name="Bass")
        with pytest.raises(CrossTeamReferenceError):
            await service.assign_role(team_id, user_id, uuid4(), uuid4())

    @pytest.mark.asyncio
    async def test_member_from_other_team(self, service: RoleService, uow: FakeUnitOfWork, team_id: UUID, user_id: UUID):
        as_member(uow, team_id, user_id, MembershipRole.ADMIN)
        uow.teams.get_member_by_id.return_value = Membership(team_id=uuid4(), user_id=uuid4())
        with pytest.raises(MemberNotFoundError):
            await service.assign_role(team_id, user_id, uuid4(), uuid4())
