"""Unit tests for CalendarService."""

from datetime import date, time
from uuid import UUID, uuid4

import pytest

from core.exceptions import ValidationError
from domain.entities.assignment import Assignment, AssignmentDetail
from domain.entities.availability import Availability
from domain.entities.calendar import CalendarEntryType
from domain.entities.service import MEMBER_VISIBLE_STATUSES, Service, ServiceStatus
from domain.entities.team import MembershipRole, Team, TeamSummary
from domain.services.calendar_service import CalendarService
from tests.unit.conftest import FakeUnitOfWork

SUNDAY = date(2026, 3, 15)
SATURDAY = date(2026, 3, 14)
MONDAY = date(2026, 3, 16)


@pytest.fixture
def service(uow: FakeUnitOfWork) -> CalendarService:
    return CalendarService(lambda: uow)


def _teams(uow: FakeUnitOfWork, *teams: Team) -> None:
    uow.teams.get_all_for_user.return_value = [
        TeamSummary(team=t, role=MembershipRole.MEMBER, member_count=3) for t in teams
    ]


def _team(name: str = "Grace Worship") -> Team:
    return Team(name=name, owner_id=uuid4(), invite_code="ABCD2345")


def _published(team: Team, on: date = SUNDAY, **kwargs) -> Service:
    return Service(
        team_id=team.id,
        name="Sunday Worship",
        service_date=on,
        created_by=team.owner_id,
        status=ServiceStatus.PUBLISHED,
        **kwargs,
    )


def _detail(service: Service, user_id: UUID, role_name: str = "Keys") -> AssignmentDetail:
    return AssignmentDetail(
        assignment=Assignment(service_id=service.id, team_member_id=uuid4(), role_id=uuid4()),
        user_id=user_id,
        role_name=role_name,
    )


class TestUpcomingServices:
    @pytest.mark.asyncio
    async def test_no_teams_skips_service_query(
        self, service: CalendarService, uow: FakeUnitOfWork, user_id: UUID
    ):
        _teams(uow)

        assert await service.upcoming_services(user_id) == []
        uow.services.get_for_teams.assert_not_called()

    @pytest.mark.asyncio
    async def test_published_only_from_today(
        self, service: CalendarService, uow: FakeUnitOfWork, user_id: UUID
    ):
        team = _team()
        _teams(uow, team)
        uow.services.get_for_teams.return_value = []
        uow.assignments.get_for_user.return_value = []

        await service.upcoming_services(user_id, limit=3, today=MONDAY)

        uow.services.get_for_teams.assert_awaited_once_with(
            [team.id], start_date=MONDAY, statuses=[ServiceStatus.PUBLISHED], limit=3
        )

    @pytest.mark.asyncio
    async def test_first_assignment_per_service_and_team_attached(
        self, service: CalendarService, uow: FakeUnitOfWork, user_id: UUID
    ):
        grace, youth = _team(), _team("Youth Band")
        _teams(uow, grace, youth)
        sunday = _published(grace)
        friday = _published(youth, on=date(2026, 3, 20))
        keys, vocals = _detail(sunday, user_id), _detail(sunday, user_id, "Vocals")
        uow.services.get_for_teams.return_value = [sunday, friday]
        uow.assignments.get_for_user.return_value = [keys, vocals]

        upcoming = await service.upcoming_services(user_id, today=SATURDAY)

        assert [u.team.name for u in upcoming] == ["Grace Worship", "Youth Band"]
        assert upcoming[0].my_assignment is keys
        assert upcoming[1].my_assignment is None
        uow.assignments.get_for_user.assert_awaited_once_with(user_id, [sunday.id, friday.id])

    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit", [0, 51])
    async def test_limit_bounds(self, service: CalendarService, user_id: UUID, limit: int):
        with pytest.raises(ValidationError):
            await service.upcoming_services(user_id, limit=limit)


class TestPersonalCalendar:
    @pytest.mark.asyncio
    async def test_reversed_range(self, service: CalendarService, user_id: UUID):
        with pytest.raises(ValidationError) as exc:
            await service.personal_calendar(user_id, MONDAY, SUNDAY)
        assert exc.value.details == {"start_date": "2026-03-16", "end_date": "2026-03-15"}

    @pytest.mark.asyncio
    async def test_range_limited_to_a_year(self, service: CalendarService, user_id: UUID):
        with pytest.raises(ValidationError):
            await service.personal_calendar(user_id, date(2026, 1, 1), date(2027, 1, 2))

    @pytest.mark.asyncio
    async def test_single_day_range_is_allowed(
        self, service: CalendarService, uow: FakeUnitOfWork, user_id: UUID
    ):
        _teams(uow)

        assert await service.personal_calendar(user_id, SUNDAY, SUNDAY) == []

    @pytest.mark.asyncio
    async def test_entries_for_services_rehearsals_and_unavailable_days(
        self, service: CalendarService, uow: FakeUnitOfWork, user_id: UUID
    ):
        team = _team()
        _teams(uow, team)
        sunday = _published(
            team, start_time=time(10), rehearsal_date=SATURDAY, rehearsal_time=time(19)
        )
        unassigned = _published(team, on=MONDAY)
        detail = _detail(sunday, user_id)
        uow.services.get_for_teams.return_value = [sunday, unassigned]
        uow.assignments.get_for_user.return_value = [detail]
        away = Availability(team_id=team.id, user_id=user_id, date=MONDAY, is_available=False)
        free = Availability(team_id=team.id, user_id=user_id, date=SUNDAY, is_available=True)
        uow.availability.get_for_user_in_teams.return_value = [away, free]

        entries = await service.personal_calendar(user_id, SATURDAY, MONDAY)

        assert [(e.type, e.date) for e in entries] == [
            (CalendarEntryType.REHEARSAL, SATURDAY),
            (CalendarEntryType.SERVICE, SUNDAY),
            (CalendarEntryType.AVAILABILITY, MONDAY),
        ]
        rehearsal, sunday_entry, away_entry = entries
        assert rehearsal.title == "Rehearsal: Sunday Worship"
        assert rehearsal.start_time == time(19)
        assert sunday_entry.key == f"service-{sunday.id}-{detail.assignment.id}"
        assert sunday_entry.assignment is detail
        assert away_entry.key == f"availability-{away.id}"
        assert away_entry.title == "Unavailable"
        uow.services.get_for_teams.assert_awaited_once_with(
            [team.id], SATURDAY, MONDAY, statuses=MEMBER_VISIBLE_STATUSES
        )

    @pytest.mark.asyncio
    async def test_one_entry_per_assignment_on_a_service(
        self, service: CalendarService, uow: FakeUnitOfWork, user_id: UUID
    ):
        team = _team()
        _teams(uow, team)
        sunday = _published(team)
        uow.services.get_for_teams.return_value = [sunday]
        uow.assignments.get_for_user.return_value = [
            _detail(sunday, user_id),
            _detail(sunday, user_id, "Vocals"),
        ]
        uow.availability.get_for_user_in_teams.return_value = []

        entries = await service.personal_calendar(user_id, SUNDAY, SUNDAY)

        assert [e.assignment.role_name for e in entries] == ["Keys", "Vocals"]
        assert len({e.key for e in entries}) == 2

    @pytest.mark.asyncio
    async def test_timed_entries_sort_before_untimed_on_same_day(
        self, service: CalendarService, uow: FakeUnitOfWork, user_id: UUID
    ):
        team = _team()
        _teams(uow, team)
        evening = _published(team, start_time=time(18))
        untimed = _published(team)
        morning = _published(team, start_time=time(9))
        services = [evening, untimed, morning]
        uow.services.get_for_teams.return_value = services
        uow.assignments.get_for_user.return_value = [_detail(s, user_id) for s in services]
        uow.availability.get_for_user_in_teams.return_value = []

        entries = await service.personal_calendar(user_id, SUNDAY, SUNDAY)

        assert [e.start_time for e in entries] == [time(9), time(18), None]
