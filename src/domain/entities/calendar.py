"""Cross-team personal schedule entities."""

from dataclasses import dataclass
from datetime import date, time
from enum import StrEnum

from domain.entities.assignment import AssignmentDetail
from domain.entities.availability import Availability
from domain.entities.service import Service
from domain.entities.team import Team


class CalendarEntryType(StrEnum):
    SERVICE = "service"
    REHEARSAL = "rehearsal"
    AVAILABILITY = "availability"


@dataclass
class CalendarEntry:
    """One line of a member's personal calendar.

    Service and rehearsal entries carry the service and the member's
    assignment on it; availability entries carry the availability row.
    """

    key: str
    type: CalendarEntryType
    title: str
    date: date
    team: Team
    start_time: time | None = None
    end_time: time | None = None
    service: Service | None = None
    assignment: AssignmentDetail | None = None
    availability: Availability | None = None

    @property
    def sort_key(self) -> tuple[date, bool, time]:
        # Timed entries first within a day
        return (self.date, self.start_time is None, self.start_time or time.min)


@dataclass
class UpcomingService:
    """A published service in one of the member's teams, with their assignment if any."""

    service: Service
    team: Team
    my_assignment: AssignmentDetail | None = None
