"""API v1 router configuration."""

from fastapi import APIRouter

from api.v1.routes.assignments import router as assignments_router
from api.v1.routes.availability import router as availability_router
from api.v1.routes.calendar import router as calendar_router
from api.v1.routes.invitations import invitations_router, team_invitations_router
from api.v1.routes.profiles import router as profiles_router
from api.v1.routes.roles import router as roles_router
from api.v1.routes.services import services_router, team_services_router
from api.v1.routes.teams import router as teams_router

router = APIRouter()
router.include_router(profiles_router)
router.include_router(teams_router)
router.include_router(roles_router)
router.include_router(team_services_router)
router.include_router(services_router)
router.include_router(assignments_router)
router.include_router(availability_router)
router.include_router(calendar_router)
router.include_router(team_invitations_router)
router.include_router(invitations_router)
