"""Role-based permission matrix for team members.

The matrix is a pure mapping from a membership role to a fixed capability set.
Clients use it to decide which actions to offer; every domain service
re-checks it before mutating anything.
"""

from dataclasses import asdict, dataclass, fields
from enum import StrEnum

from core.exceptions import InsufficientPermissionsError, InvalidRoleError, PermissionDeniedError
from domain.entities.team import MembershipRole


class Capability(StrEnum):
    # Team management
    MANAGE_TEAM = "manage_team"
    DELETE_TEAM = "delete_team"
    TRANSFER_OWNERSHIP = "transfer_ownership"
    REGENERATE_INVITE_CODE = "regenerate_invite_code"
    # Member management
    INVITE_MEMBERS = "invite_members"
    REMOVE_MEMBERS = "remove_members"
    MANAGE_MEMBERS = "manage_members"
    VIEW_MEMBERS = "view_members"
    # Musical roles
    MANAGE_ROLES = "manage_roles"
    ASSIGN_ROLES = "assign_roles"
    # Services
    CREATE_SERVICES = "create_services"
    EDIT_SERVICES = "edit_services"
    DELETE_SERVICES = "delete_services"
    PUBLISH_SERVICES = "publish_services"
    # Assignments
    ASSIGN_MEMBERS = "assign_members"
    RESPOND_TO_ASSIGNMENTS = "respond_to_assignments"
    VIEW_ASSIGNMENTS = "view_assignments"
    # Availability
    SET_AVAILABILITY = "set_availability"
    VIEW_AVAILABILITY = "view_availability"


@dataclass(frozen=True)
class Capabilities:
    """Boolean view of the capabilities granted to one role."""

    manage_team: bool = False
    delete_team: bool = False
    transfer_ownership: bool = False
    regenerate_invite_code: bool = False
    invite_members: bool = False
    remove_members: bool = False
    manage_members: bool = False
    view_members: bool = False
    manage_roles: bool = False
    assign_roles: bool = False
    create_services: bool = False
    edit_services: bool = False
    delete_services: bool = False
    publish_services: bool = False
    assign_members: bool = False
    respond_to_assignments: bool = False
    view_assignments: bool = False
    set_availability: bool = False
    view_availability: bool = False

    @classmethod
    def granting(cls, granted: frozenset[Capability]) -> "Capabilities":
        return cls(**{capability.value: True for capability in granted})

    def allows(self, capability: Capability) -> bool:
        return bool(getattr(self, capability.value))

    def as_dict(self) -> dict[str, bool]:
        return asdict(self)


_ALL = frozenset(Capability)

_MEMBER = frozenset(
    {
        Capability.VIEW_MEMBERS,
        Capability.RESPOND_TO_ASSIGNMENTS,
        Capability.VIEW_ASSIGNMENTS,
        Capability.SET_AVAILABILITY,
        Capability.VIEW_AVAILABILITY,
    }
)

ROLE_CAPABILITIES: dict[MembershipRole, frozenset[Capability]] = {
    MembershipRole.OWNER: _ALL,
    MembershipRole.ADMIN: _ALL - {Capability.DELETE_TEAM, Capability.TRANSFER_OWNERSHIP},
    MembershipRole.MEMBER: _MEMBER,
}

NO_CAPABILITIES = Capabilities()

_CAPABILITIES_BY_ROLE = {
    role: Capabilities.granting(granted) for role, granted in ROLE_CAPABILITIES.items()
}


def permissions_for(role: MembershipRole | None) -> Capabilities:
    """Return the capability set for ``role``. No role means no capabilities."""
    if role is None:
        return NO_CAPABILITIES
    return _CAPABILITIES_BY_ROLE[MembershipRole(role)]


def has_permission(role: MembershipRole | None, capability: Capability) -> bool:
    return permissions_for(role).allows(capability)


def has_all_permissions(role: MembershipRole | None, capabilities: list[Capability]) -> bool:
    granted = permissions_for(role)
    return all(granted.allows(c) for c in capabilities)


def has_any_permission(role: MembershipRole | None, capabilities: list[Capability]) -> bool:
    granted = permissions_for(role)
    return any(granted.allows(c) for c in capabilities)


def enabled_permissions(role: MembershipRole | None) -> list[Capability]:
    granted = permissions_for(role)
    return [Capability(f.name) for f in fields(granted) if getattr(granted, f.name)]


def disabled_permissions(role: MembershipRole | None) -> list[Capability]:
    granted = permissions_for(role)
    return [Capability(f.name) for f in fields(granted) if not getattr(granted, f.name)]


def require_permission(role: MembershipRole | None, capability: Capability) -> None:
    """Raise :class:`InsufficientPermissionsError` unless ``role`` grants ``capability``."""
    if not has_permission(role, capability):
        raise InsufficientPermissionsError(capability.value)


def ensure_can_change_role(
    actor_role: MembershipRole,
    target_role: MembershipRole,
    new_role: MembershipRole,
) -> None:
    """Validate a membership role change.

    The owner's role only changes through an ownership transfer, nobody is
    promoted to owner here, and only the owner may promote to admin.
    """
    require_permission(actor_role, Capability.MANAGE_MEMBERS)
    if target_role == MembershipRole.OWNER:
        raise InvalidRoleError("Cannot change the owner's role. Transfer ownership instead.")
    if new_role == MembershipRole.OWNER:
        raise InvalidRoleError("Use an ownership transfer to assign the owner role")
    if new_role == MembershipRole.ADMIN and actor_role != MembershipRole.OWNER:
        raise PermissionDeniedError("Only the owner can promote members to admin")


def ensure_can_remove_member(actor_role: MembershipRole, target_role: MembershipRole) -> None:
    """Validate removing another member from the team.

    Nobody removes the owner. Admins remove members but only the owner removes
    admins.
    """
    require_permission(actor_role, Capability.REMOVE_MEMBERS)
    if target_role == MembershipRole.OWNER:
        raise PermissionDeniedError("Cannot remove the team owner")
    if target_role == MembershipRole.ADMIN and actor_role != MembershipRole.OWNER:
        raise PermissionDeniedError("Admins cannot remove other admins")


PERMISSION_LABELS: dict[str, dict[Capability, str]] = {
    "en": {
        Capability.MANAGE_TEAM: "Manage Team Settings",
        Capability.DELETE_TEAM: "Delete Team",
        Capability.TRANSFER_OWNERSHIP: "Transfer Ownership",
        Capability.REGENERATE_INVITE_CODE: "Regenerate Invite Code",
        Capability.INVITE_MEMBERS: "Invite Members",
        Capability.REMOVE_MEMBERS: "Remove Members",
        Capability.MANAGE_MEMBERS: "Manage Member Roles",
        Capability.VIEW_MEMBERS: "View Members",
        Capability.MANAGE_ROLES: "Manage Roles",
        Capability.ASSIGN_ROLES: "Assign Roles to Members",
        Capability.CREATE_SERVICES: "Create Services",
        Capability.EDIT_SERVICES: "Edit Services",
        Capability.DELETE_SERVICES: "Delete Services",
        Capability.PUBLISH_SERVICES: "Publish Services",
        Capability.ASSIGN_MEMBERS: "Assign Members to Services",
        Capability.RESPOND_TO_ASSIGNMENTS: "Respond to Assignments",
        Capability.VIEW_ASSIGNMENTS: "View Assignments",
        Capability.SET_AVAILABILITY: "Set Availability",
        Capability.VIEW_AVAILABILITY: "View Availability",
    },
    "ko": {
        Capability.MANAGE_TEAM: "팀 설정 관리",
        Capability.DELETE_TEAM: "팀 삭제",
        Capability.TRANSFER_OWNERSHIP: "소유권 이전",
        Capability.REGENERATE_INVITE_CODE: "초대 코드 재생성",
        Capability.INVITE_MEMBERS: "멤버 초대",
        Capability.REMOVE_MEMBERS: "멤버 삭제",
        Capability.MANAGE_MEMBERS: "멤버 역할 관리",
        Capability.VIEW_MEMBERS: "멤버 보기",
        Capability.MANAGE_ROLES: "역할 관리",
        Capability.ASSIGN_ROLES: "멤버에게 역할 할당",
        Capability.CREATE_SERVICES: "예배 생성",
        Capability.EDIT_SERVICES: "예배 수정",
        Capability.DELETE_SERVICES: "예배 삭제",
        Capability.PUBLISH_SERVICES: "예배 게시",
        Capability.ASSIGN_MEMBERS: "예배에 멤버 배정",
        Capability.RESPOND_TO_ASSIGNMENTS: "배정 응답",
        Capability.VIEW_ASSIGNMENTS: "배정 보기",
        Capability.SET_AVAILABILITY: "가능 여부 설정",
        Capability.VIEW_AVAILABILITY: "가능 여부 보기",
    },
}

ROLE_LABELS: dict[MembershipRole, dict[str, str]] = {
    MembershipRole.OWNER: {"en": "Owner", "ko": "소유자"},
    MembershipRole.ADMIN: {"en": "Admin", "ko": "관리자"},
    MembershipRole.MEMBER: {"en": "Member", "ko": "멤버"},
}


def permission_label(capability: Capability, language: str = "en") -> str:
    labels = PERMISSION_LABELS.get(language, PERMISSION_LABELS["en"])
    return labels[capability]


def role_label(role: MembershipRole, language: str = "en") -> str:
    labels = ROLE_LABELS[role]
    return labels.get(language, labels["en"])
