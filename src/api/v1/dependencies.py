"""Dependency injection factories for API v1."""

from functools import lru_cache
from typing import Annotated, Callable

from fastapi import Depends

from api.dependencies.auth import get_current_user
from core.config import settings
from domain.services.assignment_service import AssignmentService
from domain.services.availability_service import AvailabilityService
from domain.services.calendar_service import CalendarService
from domain.services.invitation_service import InvitationService
from domain.services.ownership_service import OwnershipService
from domain.services.profile_service import ProfileService
from domain.services.role_service import RoleService
from domain.services.schedule_service import ScheduleService
from domain.services.team_service import TeamService
from infrastructure.auth.provider import TokenUser
from infrastructure.database.session import async_session_factory
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork
from infrastructure.notifications.edge_function import EdgeFunctionNotifier


def get_uow_factory() -> Callable[[], SQLAlchemyUnitOfWork]:
    """Factory for creating Unit of Work instances."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(async_session_factory)

    return factory


@lru_cache
def get_assignment_notifier() -> EdgeFunctionNotifier:
    """Get the edge-function notifier used when services are published."""
    return EdgeFunctionNotifier(
        function_url=settings.notification_function_url,
        api_key=settings.supabase_service_role_key or settings.supabase_anon_key,
        timeout=settings.notification_timeout_seconds,
    )


@lru_cache
def get_profile_service() -> ProfileService:
    """Get Profile service instance."""
    return ProfileService(get_uow_factory())


@lru_cache
def get_team_service() -> TeamService:
    """Get Team service instance."""
    return TeamService(get_uow_factory())


@lru_cache
def get_ownership_service() -> OwnershipService:
    """Get Ownership transfer service instance."""
    return OwnershipService(get_uow_factory())


@lru_cache
def get_invitation_service() -> InvitationService:
    """Get Invitation service instance."""
    return InvitationService(get_uow_factory())


@lru_cache
def get_role_service() -> RoleService:
    """Get Role service instance."""
    return RoleService(get_uow_factory())


@lru_cache
def get_schedule_service() -> ScheduleService:
    """Get Schedule service instance."""
    return ScheduleService(get_uow_factory(), notifier=get_assignment_notifier())


@lru_cache
def get_assignment_service() -> AssignmentService:
    """Get Assignment service instance."""
    return AssignmentService(get_uow_factory())


@lru_cache
def get_availability_service() -> AvailabilityService:
    """Get Availability service instance."""
    return AvailabilityService(get_uow_factory())


@lru_cache
def get_calendar_service() -> CalendarService:
    """Get personal Calendar service instance."""
    return CalendarService(get_uow_factory())


async def get_initialized_user(
    user: Annotated[TokenUser, Depends(get_current_user)],
    profile_service: ProfileService = Depends(get_profile_service),
) -> TokenUser:
    """Current user with a profile row guaranteed to exist.

    Used by routes that create rows referencing the user (teams, memberships).
    """
    await profile_service.ensure_profile(user.id, user.email, user.display_name)
    return user


InitializedUser = Annotated[TokenUser, Depends(get_initialized_user)]
