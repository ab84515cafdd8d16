"""Custom exceptions and error codes."""

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Standardized error codes for the API."""

    # Authentication errors (401)
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_TOKEN = "INVALID_TOKEN"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"

    # Authorization errors (403)
    FORBIDDEN = "FORBIDDEN"
    NOT_A_MEMBER = "NOT_A_MEMBER"
    INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"

    # Not found errors (404)
    NOT_FOUND = "NOT_FOUND"
    PROFILE_NOT_FOUND = "PROFILE_NOT_FOUND"
    TEAM_NOT_FOUND = "TEAM_NOT_FOUND"
    MEMBER_NOT_FOUND = "MEMBER_NOT_FOUND"
    ROLE_NOT_FOUND = "ROLE_NOT_FOUND"
    SERVICE_NOT_FOUND = "SERVICE_NOT_FOUND"
    SERVICE_TYPE_NOT_FOUND = "SERVICE_TYPE_NOT_FOUND"
    ASSIGNMENT_NOT_FOUND = "ASSIGNMENT_NOT_FOUND"
    INVITATION_NOT_FOUND = "INVITATION_NOT_FOUND"
    TRANSFER_NOT_FOUND = "TRANSFER_NOT_FOUND"
    INVALID_INVITE_CODE = "INVALID_INVITE_CODE"

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    INVALID_ROLE = "INVALID_ROLE"
    CROSS_TEAM_REFERENCE = "CROSS_TEAM_REFERENCE"
    OWNER_CANNOT_LEAVE = "OWNER_CANNOT_LEAVE"
    INVITATION_EXPIRED = "INVITATION_EXPIRED"
    TRANSFER_EXPIRED = "TRANSFER_EXPIRED"

    # Conflict errors (409)
    ALREADY_A_MEMBER = "ALREADY_A_MEMBER"
    DUPLICATE_INVITATION = "DUPLICATE_INVITATION"
    DUPLICATE_ASSIGNMENT = "DUPLICATE_ASSIGNMENT"
    DUPLICATE_ROLE = "DUPLICATE_ROLE"
    DUPLICATE_SERVICE_TYPE = "DUPLICATE_SERVICE_TYPE"
    TRANSFER_ALREADY_PENDING = "TRANSFER_ALREADY_PENDING"

    # Client-side errors
    TIMEOUT = "TIMEOUT"
    NETWORK_ERROR = "NETWORK_ERROR"

    # Rate limiting (429)
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Server errors (500)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Any | None = None,
    ) -> None:
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class AuthenticationError(AppException):
    """Authentication failed."""

    def __init__(
        self,
        message: str = "Authentication required",
        error_code: ErrorCode = ErrorCode.UNAUTHORIZED,
    ) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=401,
        )


class PermissionDeniedError(AppException):
    """The caller's role does not grant the requested capability."""

    def __init__(
        self,
        message: str = "Access denied",
        error_code: ErrorCode = ErrorCode.FORBIDDEN,
        details: Any | None = None,
    ) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=403,
            details=details,
        )


class NotAMemberError(PermissionDeniedError):
    """User is not an active member of the team."""

    def __init__(self, team_id: str) -> None:
        super().__init__(
            message="You are not a member of this team",
            error_code=ErrorCode.NOT_A_MEMBER,
            details={"team_id": team_id},
        )


class InsufficientPermissionsError(PermissionDeniedError):
    """User's role lacks a capability."""

    def __init__(self, capability: str) -> None:
        super().__init__(
            message=f"Insufficient permissions: {capability}",
            error_code=ErrorCode.INSUFFICIENT_PERMISSIONS,
            details={"capability": capability},
        )


class NotFoundError(AppException):
    """Base class for missing resources."""

    def __init__(self, error_code: ErrorCode, resource: str, resource_id: str = "") -> None:
        message = f"{resource} not found"
        if resource_id:
            message = f"{message}: {resource_id}"
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=404,
            details={"id": resource_id} if resource_id else None,
        )


class ProfileNotFoundError(NotFoundError):
    def __init__(self, user_id: str) -> None:
        super().__init__(ErrorCode.PROFILE_NOT_FOUND, "Profile", user_id)


class TeamNotFoundError(NotFoundError):
    def __init__(self, team_id: str) -> None:
        super().__init__(ErrorCode.TEAM_NOT_FOUND, "Team", team_id)


class MemberNotFoundError(NotFoundError):
    def __init__(self, member_id: str) -> None:
        super().__init__(ErrorCode.MEMBER_NOT_FOUND, "Team member", member_id)


class RoleNotFoundError(NotFoundError):
    def __init__(self, role_id: str) -> None:
        super().__init__(ErrorCode.ROLE_NOT_FOUND, "Role", role_id)


class ServiceNotFoundError(NotFoundError):
    def __init__(self, service_id: str) -> None:
        super().__init__(ErrorCode.SERVICE_NOT_FOUND, "Service", service_id)


class ServiceTypeNotFoundError(NotFoundError):
    def __init__(self, service_type_id: str) -> None:
        super().__init__(ErrorCode.SERVICE_TYPE_NOT_FOUND, "Service type", service_type_id)


class AssignmentNotFoundError(NotFoundError):
    def __init__(self, assignment_id: str) -> None:
        super().__init__(ErrorCode.ASSIGNMENT_NOT_FOUND, "Assignment", assignment_id)


class InvitationNotFoundError(NotFoundError):
    def __init__(self, invitation_id: str = "") -> None:
        super().__init__(ErrorCode.INVITATION_NOT_FOUND, "Invitation", invitation_id)


class TransferNotFoundError(NotFoundError):
    def __init__(self, transfer_id: str = "") -> None:
        super().__init__(ErrorCode.TRANSFER_NOT_FOUND, "Ownership transfer", transfer_id)


class InvalidInviteCodeError(NotFoundError):
    """No team matches the invite code."""

    def __init__(self, code: str) -> None:
        super().__init__(ErrorCode.INVALID_INVITE_CODE, "Team for invite code", code)


class ValidationError(AppException):
    """Request data failed a domain rule."""

    def __init__(self, message: str, details: Any | None = None) -> None:
        super().__init__(
            error_code=ErrorCode.VALIDATION_ERROR,
            message=message,
            status_code=400,
            details=details,
        )


class InvalidTransitionError(AppException):
    """A lifecycle transition is not allowed from the current state."""

    def __init__(self, entity: str, current: str, target: str) -> None:
        super().__init__(
            error_code=ErrorCode.INVALID_TRANSITION,
            message=f"Cannot move {entity} from {current} to {target}",
            status_code=400,
            details={"entity": entity, "from": current, "to": target},
        )


class InvalidRoleError(AppException):
    """The requested membership role change is not allowed."""

    def __init__(self, message: str) -> None:
        super().__init__(
            error_code=ErrorCode.INVALID_ROLE,
            message=message,
            status_code=400,
        )


class CrossTeamReferenceError(AppException):
    """An assignment references a member or role from another team."""

    def __init__(self, field: str) -> None:
        super().__init__(
            error_code=ErrorCode.CROSS_TEAM_REFERENCE,
            message=f"{field} does not belong to the service's team",
            status_code=400,
            details={"field": field},
        )


class OwnerCannotLeaveError(AppException):
    """The owner must transfer ownership before leaving."""

    def __init__(self) -> None:
        super().__init__(
            error_code=ErrorCode.OWNER_CANNOT_LEAVE,
            message="Owner cannot leave the team. Transfer ownership first.",
            status_code=400,
        )


class AlreadyAMemberError(AppException):
    """User is already an active member of the team."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.ALREADY_A_MEMBER,
            message="User is already a member of this team",
            status_code=409,
            details={"user_id": user_id},
        )


class DuplicateInvitationError(AppException):
    """A pending invitation already exists for this email and team."""

    def __init__(self, email: str) -> None:
        super().__init__(
            error_code=ErrorCode.DUPLICATE_INVITATION,
            message="A pending invitation already exists for this email",
            status_code=409,
            details={"email": email},
        )


class InvitationExpiredError(AppException):
    """Invitation has expired."""

    def __init__(self) -> None:
        super().__init__(
            error_code=ErrorCode.INVITATION_EXPIRED,
            message="This invitation has expired",
            status_code=400,
        )


class TransferExpiredError(AppException):
    """Ownership transfer request has expired."""

    def __init__(self) -> None:
        super().__init__(
            error_code=ErrorCode.TRANSFER_EXPIRED,
            message="This ownership transfer has expired",
            status_code=400,
        )


class TransferAlreadyPendingError(AppException):
    """The team already has a pending ownership transfer."""

    def __init__(self, team_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.TRANSFER_ALREADY_PENDING,
            message="An ownership transfer is already pending for this team",
            status_code=409,
            details={"team_id": team_id},
        )


class DuplicateAssignmentError(AppException):
    """The member already holds this role on the service."""

    def __init__(self) -> None:
        super().__init__(
            error_code=ErrorCode.DUPLICATE_ASSIGNMENT,
            message="Assignment already exists",
            status_code=409,
        )


class DuplicateRoleError(AppException):
    """A role with this name already exists in the team."""

    def __init__(self, name: str) -> None:
        super().__init__(
            error_code=ErrorCode.DUPLICATE_ROLE,
            message=f"Role already exists: {name}",
            status_code=409,
            details={"name": name},
        )


class DuplicateServiceTypeError(AppException):
    """A service type with this name already exists in the team."""

    def __init__(self, name: str) -> None:
        super().__init__(
            error_code=ErrorCode.DUPLICATE_SERVICE_TYPE,
            message=f"Service type already exists: {name}",
            status_code=409,
            details={"name": name},
        )


class OperationTimeoutError(AppException):
    """A remote call did not finish in time. Its outcome is unknown."""

    def __init__(self, context: str, timeout_ms: int) -> None:
        super().__init__(
            error_code=ErrorCode.TIMEOUT,
            message=f"{context} timed out after {timeout_ms}ms",
            status_code=504,
            details={"context": context, "timeout_ms": timeout_ms},
        )
