"""Unit tests for ScheduleService."""

from datetime import date, time
from unittest.mock import AsyncMock
from uuid import UUID, uuid4

import pytest

from core.exceptions import (
    CrossTeamReferenceError,
    DuplicateServiceTypeError,
    InsufficientPermissionsError,
    InvalidTransitionError,
    PermissionDeniedError,
    ServiceNotFoundError,
)
from domain.entities.service import Service, ServiceStats, ServiceStatus, ServiceType
from domain.entities.team import MembershipRole
from domain.scheduling.aggregator import DateStatus
from domain.scheduling.matcher import request_key
from domain.services.schedule_service import ScheduleService, default_service_name
from tests.unit.conftest import FakeUnitOfWork, as_member

SUNDAY = date(2026, 3, 15)
NEXT_SUNDAY = date(2026, 3, 22)
MONDAY = date(2026, 3, 16)
WINDOW = (date(2026, 3, 1), date(2026, 4, 30))


@pytest.fixture
def notifier() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def service(uow: FakeUnitOfWork, notifier: AsyncMock) -> ScheduleService:
    return ScheduleService(lambda: uow, notifier=notifier)


@pytest.fixture
def sunday_type(team_id: UUID) -> ServiceType:
    return ServiceType(
        team_id=team_id, name="Sunday Worship", default_weekday=0, service_time=time(11, 0), display_order=1
    )


def make_service(team_id: UUID, day: date, service_type: ServiceType | None = None, **kwargs) -> Service:
    return Service(
        team_id=team_id,
        name=default_service_name(day, service_type.name) if service_type else "Service",
        service_date=day,
        created_by=uuid4(),
        service_type_id=service_type.id if service_type else None,
        **kwargs,
    )


def test_default_service_name():
    assert default_service_name(SUNDAY, "Sunday Worship") == "3/15 Sunday Worship"


# --- service types ---


class TestServiceTypes:
    @pytest.mark.asyncio
    async def test_first_type_is_primary(
        self, service: ScheduleService, uow: FakeUnitOfWork, team_id: UUID, user_id: UUID
    ):
        as_member(uow, team_id, user_id, MembershipRole.ADMIN)
        uow.services.get_type_by_name.return_value = None
        uow.services.get_types.return_value = []
        uow.services.create_type.side_effect = lambda t: t

        created = await service.create_service_type(team_id, user_id, "Sunday Worship", default_weekday=0)

        assert created.is_primary
        assert created.display_order == 1

    @pytest.mark.asyncio
    async def test_duplicate_name(
        self, service: ScheduleService, uow: FakeUnitOfWork, team_id: UUID, user_id: UUID, sunday_type
    ):
        as_member(uow, team_id, user_id, MembershipRole.ADMIN)
        uow.services.get_type_by_name.return_value = sunday_type
        with pytest.raises(DuplicateServiceTypeError):
            await service.create_service_type(team_id, user_id, "Sunday Worship")

    @pytest.mark.asyncio
    async def test_update_revalidates_weekday(
        self, service: ScheduleService, uow: FakeUnitOfWork, team_id: UUID, user_id: UUID, sunday_type
    ):
        as_member(uow, team_id, user_id, MembershipRole.OWNER)
        uow.services.get_type.return_value = sunday_type
        with pytest.raises(ValueError):
            await service.update_service_type(team_id, user_id, sunday_type.id, default_weekday=9)


# --- create / list ---


class TestCreateService:
    @pytest.mark.asyncio
    async def test_typed_service_gets_generated_name_and_time(
        self, service: ScheduleService, uow: FakeUnitOfWork, team_id: UUID, user_id: UUID, sunday_type
    ):
        as_member(uow, team_id, user_id, MembershipRole.ADMIN)
        uow.services.get_type.return_value = sunday_type
        uow.services.create.side_effect = lambda s: s

        created = await service.create_service(team_id, user_id, SUNDAY, service_type_id=sunday_type.id)

        assert created.name == "3/15 Sunday Worship"
        assert created.start_time == time(11, 0)
        assert created.status == ServiceStatus.DRAFT

    @pytest.mark.asyncio
    async def test_type_from_other_team(
        self, service: ScheduleService, uow: FakeUnitOfWork, team_id: UUID, user_id: UUID
    ):
        as_member(uow, team_id, user_id, MembershipRole.ADMIN)
        uow.services.get_type.return_value = ServiceType(team_id=uuid4(), name="Other")
        with pytest.raises(CrossTeamReferenceError):
            await service.create_service(team_id, user_id, SUNDAY, service_type_id=uuid4())

    @pytest.mark.asyncio
    async def test_member_cannot_create(
        self, service: ScheduleService, uow: FakeUnitOfWork, team_id: UUID, user_id: UUID
    ):
        as_member(uow, team_id, user_id)
        with pytest.raises(InsufficientPermissionsError):
            await service.create_service(team_id, user_id, SUNDAY)


class TestListServices:
    @pytest.mark.asyncio
    async def test_members_only_see_published_and_completed(
        self, service: ScheduleService, uow: FakeUnitOfWork, team_id: UUID, user_id: UUID
    ):
        as_member(uow, team_id, user_id)
        uow.services.get_for_team.return_value = []
        uow.services.get_stats.return_value = {}

        await service.list_services(team_id, user_id)

        statuses = uow.services.get_for_team.call_args.args[3]
        assert statuses == {ServiceStatus.PUBLISHED, ServiceStatus.COMPLETED}

    @pytest.mark.asyncio
    async def test_member_asking_for_drafts_gets_nothing(
        self, service: ScheduleService, uow: FakeUnitOfWork, team_id: UUID, user_id: UUID
    ):
        as_member(uow, team_id, user_id)
        assert await service.list_services(team_id, user_id, status=ServiceStatus.DRAFT) == []
        uow.services.get_for_team.assert_not_called()

    @pytest.mark.asyncio
    async def test_attaches_stats(
        self, service: ScheduleService, uow: FakeUnitOfWork, team_id: UUID, user_id: UUID, sunday_type
    ):
        as_member(uow, team_id, user_id, MembershipRole.ADMIN)
        a = make_service(team_id, SUNDAY, sunday_type)
        b = make_service(team_id, NEXT_SUNDAY, sunday_type)
        uow.services.get_for_team.return_value = [a, b]
        uow.services.get_stats.return_value = {a.id: ServiceStats(assignment_count=3, confirmed_count=2)}

        result = await service.list_services(team_id, user_id)

        assert uow.services.get_for_team.call_args.args[3] is None
        assert result[0].stats.assignment_count == 3
        assert result[1].stats.assignment_count == 0


class TestGetService:
    @pytest.mark.asyncio
    async def test_member_cannot_see_draft(
        self, service: ScheduleService, uow: FakeUnitOfWork, team_id: UUID, user_id: UUID
    ):
        as_member(uow, team_id, user_id)
        uow.services.get.return_value = make_service(team_id, SUNDAY)
        with pytest.raises(PermissionDeniedError):
            await service.get_service(uuid4(), user_id)

    @pytest.mark.asyncio
    async def test_missing(self, service: ScheduleService, uow: FakeUnitOfWork, user_id: UUID):
        uow.services.get.return_value = None
        with pytest.raises(ServiceNotFoundError):
            await service.get_service(uuid4(), user_id)


# --- sync_requested_dates ---


class TestSyncRequestedDates:
    @pytest.mark.asyncio
    async def test_adds_removes_and_keeps_assigned_drafts(
        self, service: ScheduleService, uow: FakeUnitOfWork, team_id: UUID, user_id: UUID, sunday_type
    ):
        as_member(uow, team_id, user_id, MembershipRole.ADMIN)
        kept = make_service(team_id, SUNDAY, sunday_type)
        dropped = make_service(team_id, date(2026, 3, 29), sunday_type)
        staffed = make_service(team_id, date(2026, 4, 5), sunday_type)
        uow.services.get_types.return_value = [sunday_type]
        uow.services.get_for_team.return_value = [kept, dropped, staffed]
        uow.services.get_stats.return_value = {staffed.id: ServiceStats(assignment_count=2)}

        result = await service.sync_requested_dates(
            team_id, user_id, [SUNDAY, NEXT_SUNDAY, MONDAY, date(2026, 6, 7)], *WINDOW
        )

        key = lambda d: request_key(d, str(sunday_type.id))  # noqa: E731
        assert result.added == [key(NEXT_SUNDAY)]
        assert result.removed == [key(date(2026, 3, 29))]
        assert set(result.kept) == {key(SUNDAY), key(date(2026, 4, 5))}

        created = uow.services.create.call_args.args[0]
        assert created.name == "3/22 Sunday Worship"
        assert created.service_type_id == sunday_type.id
        uow.services.delete.assert_called_once_with(dropped.id)
        assert uow.committed

    @pytest.mark.asyncio
    async def test_only_drafts_are_touched(
        self, service: ScheduleService, uow: FakeUnitOfWork, team_id: UUID, user_id: UUID, sunday_type
    ):
        as_member(uow, team_id, user_id, MembershipRole.ADMIN)
        uow.services.get_types.return_value = [sunday_type]
        uow.services.get_for_team.return_value = []

        await service.sync_requested_dates(team_id, user_id, [], *WINDOW)

        assert uow.services.get_for_team.call_args.args[3] == {ServiceStatus.DRAFT}


# --- lifecycle ---


class TestPublish:
    @pytest.mark.asyncio
    async def test_publishes_and_notifies(
        self,
        service: ScheduleService,
        uow: FakeUnitOfWork,
        notifier: AsyncMock,
        team_id: UUID,
        user_id: UUID,
    ):
        as_member(uow, team_id, user_id, MembershipRole.ADMIN)
        draft = make_service(team_id, SUNDAY)
        uow.services.get.return_value = draft
        uow.services.update.side_effect = lambda s: s

        published = await service.publish_service(draft.id, user_id)

        assert published.status == ServiceStatus.PUBLISHED
        notifier.send_assignment_notifications.assert_awaited_once_with(draft.id)

    @pytest.mark.asyncio
    async def test_notification_failure_is_swallowed(
        self,
        service: ScheduleService,
        uow: FakeUnitOfWork,
        notifier: AsyncMock,
        team_id: UUID,
        user_id: UUID,
    ):
        as_member(uow, team_id, user_id, MembershipRole.ADMIN)
        draft = make_service(team_id, SUNDAY)
        uow.services.get.return_value = draft
        uow.services.update.side_effect = lambda s: s
        notifier.send_assignment_notifications.side_effect = RuntimeError("edge down")

        published = await service.publish_service(draft.id, user_id)

        assert published.status == ServiceStatus.PUBLISHED
        assert uow.committed

    @pytest.mark.asyncio
    async def test_cannot_publish_twice(
        self, service: ScheduleService, uow: FakeUnitOfWork, team_id: UUID, user_id: UUID
    ):
        as_member(uow, team_id, user_id, MembershipRole.ADMIN)
        uow.services.get.return_value = make_service(team_id, SUNDAY, status=ServiceStatus.PUBLISHED)
        with pytest.raises(InvalidTransitionError):
            await service.publish_service(uuid4(), user_id)


class TestCompleteAndCancel:
    @pytest.mark.asyncio
    async def test_complete_published(
        self, service: ScheduleService, uow: FakeUnitOfWork, team_id: UUID, user_id: UUID
    ):
        as_member(uow, team_id, user_id, MembershipRole.ADMIN)
        uow.services.get.return_value = make_service(team_id, SUNDAY, status=ServiceStatus.PUBLISHED)
        uow.services.update.side_effect = lambda s: s

        assert (await service.complete_service(uuid4(), user_id)).status == ServiceStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_cancel_completed_fails(
        self, service: ScheduleService, uow: FakeUnitOfWork, team_id: UUID, user_id: UUID
    ):
        as_member(uow, team_id, user_id, MembershipRole.ADMIN)
        uow.services.get.return_value = make_service(team_id, SUNDAY, status=ServiceStatus.COMPLETED)
        with pytest.raises(InvalidTransitionError):
            await service.cancel_service(uuid4(), user_id)


class TestUpdateService:
    @pytest.mark.asyncio
    async def test_status_cannot_be_edited_directly(
        self, service: ScheduleService, uow: FakeUnitOfWork, team_id: UUID, user_id: UUID
    ):
        as_member(uow, team_id, user_id, MembershipRole.ADMIN)
        draft = make_service(team_id, SUNDAY)
        uow.services.get.return_value = draft
        uow.services.update.side_effect = lambda s: s

        updated = await service.update_service(
            draft.id, user_id, status=ServiceStatus.COMPLETED, location="Main Hall"
        )

        assert updated.status == ServiceStatus.DRAFT
        assert updated.location == "Main Hall"


# --- dates_overview ---


class TestDatesOverview:
    @pytest.mark.asyncio
    async def test_roster_counts_for_visible_services(
        self, service: ScheduleService, uow: FakeUnitOfWork, team_id: UUID, user_id: UUID, sunday_type
    ):
        as_member(uow, team_id, user_id, MembershipRole.ADMIN)
        published = make_service(team_id, SUNDAY, sunday_type, status=ServiceStatus.PUBLISHED)
        draft = make_service(team_id, NEXT_SUNDAY, sunday_type)
        uow.services.get_types.return_value = [sunday_type]
        uow.services.get_for_team.return_value = [published, draft]
        uow.services.get_stats.return_value = {draft.id: ServiceStats(assignment_count=0)}
        uow.assignments.get_for_service.return_value = [object(), object()]

        overviews = await service.dates_overview(
            team_id,
            user_id,
            *WINDOW,
            dates=[date(2026, 3, 29), date(2026, 7, 5)],
            local_counts={request_key(date(2026, 3, 29), str(sunday_type.id)): 1},
        )

        assert [o.date for o in overviews] == [SUNDAY, NEXT_SUNDAY, date(2026, 3, 29)]
        assert [o.status for o in overviews] == [DateStatus.COMPLETE, DateStatus.PENDING, DateStatus.COMPLETE]
        uow.assignments.get_for_service.assert_called_once_with(published.id)

    @pytest.mark.asyncio
    async def test_member_cannot_view_overview(
        self, service: ScheduleService, uow: FakeUnitOfWork, team_id: UUID, user_id: UUID
    ):
        as_member(uow, team_id, user_id)
        with pytest.raises(InsufficientPermissionsError):
            await service.dates_overview(team_id, user_id, *WINDOW)
