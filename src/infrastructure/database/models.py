"""SQLAlchemy ORM models."""

from datetime import date, datetime, time
from typing import Any, Optional
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Time,
    UniqueConstraint,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from domain.entities.team import DEFAULT_TEAM_COLOR, DEFAULT_TIMEZONE, default_team_settings

_ONE_ACTIVE_OWNER = "role = 'owner' AND status = 'active'"


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class ProfileModel(Base):
    """User profile model (synced from Supabase auth)."""

    __tablename__ = "profiles"

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    display_name: Mapped[str | None] = mapped_column(String(100))
    avatar_url: Mapped[str | None] = mapped_column(String(500))
    preferred_language: Mapped[str] = mapped_column(String(5), default="en")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )


class TeamModel(Base):
    """Worship team model."""

    __tablename__ = "teams"

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    owner_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("profiles.id"),
        nullable=False,
    )
    invite_code: Mapped[str] = mapped_column(String(16), unique=True, nullable=False)
    color: Mapped[str] = mapped_column(String(7), default=DEFAULT_TEAM_COLOR)
    timezone: Mapped[str] = mapped_column(String(64), default=DEFAULT_TIMEZONE)
    settings: Mapped[dict[str, Any]] = mapped_column(JSONB, default=default_team_settings)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    # Relationships
    members: Mapped[list["TeamMemberModel"]] = relationship(
        "TeamMemberModel",
        back_populates="team",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    roles: Mapped[list["RoleModel"]] = relationship(
        "RoleModel",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    service_types: Mapped[list["ServiceTypeModel"]] = relationship(
        "ServiceTypeModel",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    services: Mapped[list["ServiceModel"]] = relationship(
        "ServiceModel",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class TeamMemberModel(Base):
    """Team membership model. At most one active owner per team."""

    __tablename__ = "team_members"
    __table_args__ = (
        UniqueConstraint("team_id", "user_id", name="uq_team_members_team_user"),
        Index(
            "uq_team_members_one_owner",
            "team_id",
            unique=True,
            postgresql_where=text(_ONE_ACTIVE_OWNER),
            sqlite_where=text(_ONE_ACTIVE_OWNER),
        ),
    )

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    team_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("teams.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role: Mapped[str] = mapped_column(
        String(20),
        CheckConstraint("role IN ('owner', 'admin', 'member')", name="ck_team_members_role"),
        nullable=False,
        default="member",
    )
    status: Mapped[str] = mapped_column(
        String(20),
        CheckConstraint(
            "status IN ('active', 'inactive', 'pending')",
            name="ck_team_members_status",
        ),
        nullable=False,
        default="active",
    )
    nickname: Mapped[str | None] = mapped_column(String(100))
    joined_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Relationships
    team: Mapped["TeamModel"] = relationship("TeamModel", back_populates="members")
    user: Mapped[Optional["ProfileModel"]] = relationship("ProfileModel", lazy="joined")


class RoleModel(Base):
    """Musical role model (e.g. Keys, Vocals)."""

    __tablename__ = "roles"
    __table_args__ = (UniqueConstraint("team_id", "name", name="uq_roles_team_name"),)

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    team_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("teams.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    name_ko: Mapped[str | None] = mapped_column(String(50))
    description: Mapped[str | None] = mapped_column(Text)
    color: Mapped[str | None] = mapped_column(String(7))
    icon: Mapped[str | None] = mapped_column(String(50))
    min_required: Mapped[int] = mapped_column(Integer, default=0)
    max_allowed: Mapped[int | None] = mapped_column(Integer)
    display_order: Mapped[int] = mapped_column(Integer, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class MemberRoleModel(Base):
    """Link between a membership and a role the member can play."""

    __tablename__ = "member_roles"
    __table_args__ = (
        UniqueConstraint("team_member_id", "role_id", name="uq_member_roles_member_role"),
    )

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    team_member_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("team_members.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("roles.id", ondelete="CASCADE"),
        nullable=False,
    )
    proficiency: Mapped[str] = mapped_column(
        String(20),
        CheckConstraint(
            "proficiency IN ('beginner', 'intermediate', 'advanced', 'expert')",
            name="ck_member_roles_proficiency",
        ),
        nullable=False,
        default="intermediate",
    )
    is_primary: Mapped[bool] = mapped_column(Boolean, default=False)
    notes: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class ServiceTypeModel(Base):
    """Service template model (e.g. Sunday Worship on weekday 0)."""

    __tablename__ = "service_types"
    __table_args__ = (
        UniqueConstraint("team_id", "name", name="uq_service_types_team_name"),
        CheckConstraint(
            "default_weekday IS NULL OR default_weekday BETWEEN 0 AND 6",
            name="ck_service_types_weekday",
        ),
    )

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    team_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("teams.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    schedule_type: Mapped[str] = mapped_column(String(20), nullable=False, default="recurring")
    default_weekday: Mapped[int | None] = mapped_column(Integer)
    service_time: Mapped[time | None] = mapped_column(Time)
    rehearsal_weekday: Mapped[int | None] = mapped_column(Integer)
    rehearsal_time: Mapped[time | None] = mapped_column(Time)
    display_order: Mapped[int] = mapped_column(Integer, default=0)
    is_primary: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class ServiceModel(Base):
    """Worship service model."""

    __tablename__ = "services"

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    team_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("teams.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    service_type_id: Mapped[UUID | None] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("service_types.id", ondelete="SET NULL"),
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    service_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    start_time: Mapped[time | None] = mapped_column(Time)
    end_time: Mapped[time | None] = mapped_column(Time)
    status: Mapped[str] = mapped_column(
        String(20),
        CheckConstraint(
            "status IN ('draft', 'published', 'completed', 'cancelled')",
            name="ck_services_status",
        ),
        nullable=False,
        default="draft",
    )
    notes: Mapped[str | None] = mapped_column(Text)
    rehearsal_date: Mapped[date | None] = mapped_column(Date)
    rehearsal_time: Mapped[time | None] = mapped_column(Time)
    location: Mapped[str | None] = mapped_column(String(255))
    created_by: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("profiles.id"),
        nullable=False,
    )
    published_at: Mapped[datetime | None] = mapped_column(DateTime)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    # Relationships
    assignments: Mapped[list["AssignmentModel"]] = relationship(
        "AssignmentModel",
        back_populates="service",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class AssignmentModel(Base):
    """A member playing a role on a service."""

    __tablename__ = "service_assignments"
    __table_args__ = (
        UniqueConstraint(
            "service_id",
            "team_member_id",
            "role_id",
            name="uq_service_assignments_service_member_role",
        ),
    )

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    service_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("services.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    team_member_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("team_members.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("roles.id", ondelete="CASCADE"),
        nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(20),
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'declined')",
            name="ck_service_assignments_status",
        ),
        nullable=False,
        default="pending",
    )
    assigned_by: Mapped[UUID | None] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="SET NULL"),
    )
    decline_reason: Mapped[str | None] = mapped_column(Text)
    notes: Mapped[str | None] = mapped_column(Text)
    responded_at: Mapped[datetime | None] = mapped_column(DateTime)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    # Relationships
    service: Mapped["ServiceModel"] = relationship("ServiceModel", back_populates="assignments")
    member: Mapped["TeamMemberModel"] = relationship("TeamMemberModel")
    role: Mapped["RoleModel"] = relationship("RoleModel")


class AvailabilityModel(Base):
    """Member availability for a calendar date. One row per (team, user, date)."""

    __tablename__ = "availability"
    __table_args__ = (
        UniqueConstraint("team_id", "user_id", "date", name="uq_availability_team_user_date"),
    )

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    team_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("teams.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    date: Mapped[date] = mapped_column(Date, nullable=False)
    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    reason: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )


class InvitationModel(Base):
    """Team invitation model."""

    __tablename__ = "team_invitations"

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    team_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("teams.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    token: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
    role_suggestion: Mapped[str] = mapped_column(
        String(20),
        CheckConstraint(
            "role_suggestion IN ('admin', 'member')",
            name="ck_team_invitations_role",
        ),
        nullable=False,
        default="member",
    )
    message: Mapped[str | None] = mapped_column(Text)
    invited_by: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(20),
        CheckConstraint(
            "status IN ('pending', 'accepted', 'expired', 'cancelled')",
            name="ck_team_invitations_status",
        ),
        nullable=False,
        default="pending",
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    accepted_at: Mapped[datetime | None] = mapped_column(DateTime)


class OwnershipTransferModel(Base):
    """Ownership transfer request model."""

    __tablename__ = "ownership_transfers"

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    team_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("teams.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    from_user_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
    )
    to_user_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
    )
    previous_owner_role: Mapped[str] = mapped_column(
        String(20),
        CheckConstraint(
            "previous_owner_role IN ('admin', 'member')",
            name="ck_ownership_transfers_previous_role",
        ),
        nullable=False,
        default="admin",
    )
    status: Mapped[str] = mapped_column(
        String(20),
        CheckConstraint(
            "status IN ('pending', 'completed', 'cancelled', 'expired')",
            name="ck_ownership_transfers_status",
        ),
        nullable=False,
        default="pending",
    )
    reason: Mapped[str | None] = mapped_column(Text)
    initiated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime)
