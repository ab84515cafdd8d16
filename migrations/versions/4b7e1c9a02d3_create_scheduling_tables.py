"""create_scheduling_tables

Revision ID: 4b7e1c9a02d3
Revises:
Create Date: 2026-10-19 09:12:44.318205

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '4b7e1c9a02d3'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create profiles, teams, roles, services, assignments and availability tables."""
    op.create_table('profiles',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('display_name', sa.String(length=100), nullable=True),
        sa.Column('avatar_url', sa.String(length=500), nullable=True),
        sa.Column('preferred_language', sa.String(length=5), server_default='en', nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )

    op.create_table('teams',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('owner_id', sa.UUID(), nullable=False),
        sa.Column('invite_code', sa.String(length=16), nullable=False),
        sa.Column('color', sa.String(length=7), nullable=False),
        sa.Column('timezone', sa.String(length=64), nullable=False),
        sa.Column('settings', postgresql.JSONB(astext_type=sa.Text()), server_default='{}', nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['owner_id'], ['profiles.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('invite_code'),
    )

    op.create_table('team_members',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('team_id', sa.UUID(), nullable=False),
        sa.Column('user_id', sa.UUID(), nullable=False),
        sa.Column('role', sa.String(length=20), server_default='member', nullable=False),
        sa.Column('status', sa.String(length=20), server_default='active', nullable=False),
        sa.Column('nickname', sa.String(length=100), nullable=True),
        sa.Column('joined_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint("role IN ('owner', 'admin', 'member')", name='ck_team_members_role'),
        sa.CheckConstraint("status IN ('active', 'inactive', 'pending')", name='ck_team_members_status'),
        sa.ForeignKeyConstraint(['team_id'], ['teams.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('team_id', 'user_id', name='uq_team_members_team_user'),
    )
    op.create_index('ix_team_members_team_id', 'team_members', ['team_id'])
    op.create_index('ix_team_members_user_id', 'team_members', ['user_id'])
    # One active owner per team
    op.create_index(
        'uq_team_members_one_owner',
        'team_members',
        ['team_id'],
        unique=True,
        postgresql_where=sa.text("role = 'owner' AND status = 'active'"),
    )

    op.create_table('roles',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('team_id', sa.UUID(), nullable=False),
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('name_ko', sa.String(length=50), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('color', sa.String(length=7), nullable=True),
        sa.Column('icon', sa.String(length=50), nullable=True),
        sa.Column('min_required', sa.Integer(), server_default='0', nullable=False),
        sa.Column('max_allowed', sa.Integer(), nullable=True),
        sa.Column('display_order', sa.Integer(), server_default='0', nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['team_id'], ['teams.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('team_id', 'name', name='uq_roles_team_name'),
    )
    op.create_index('ix_roles_team_id', 'roles', ['team_id'])

    op.create_table('member_roles',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('team_member_id', sa.UUID(), nullable=False),
        sa.Column('role_id', sa.UUID(), nullable=False),
        sa.Column('proficiency', sa.String(length=20), server_default='intermediate', nullable=False),
        sa.Column('is_primary', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint(
            "proficiency IN ('beginner', 'intermediate', 'advanced', 'expert')",
            name='ck_member_roles_proficiency',
        ),
        sa.ForeignKeyConstraint(['team_member_id'], ['team_members.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['role_id'], ['roles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('team_member_id', 'role_id', name='uq_member_roles_member_role'),
    )
    op.create_index('ix_member_roles_team_member_id', 'member_roles', ['team_member_id'])

    op.create_table('service_types',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('team_id', sa.UUID(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('schedule_type', sa.String(length=20), server_default='recurring', nullable=False),
        sa.Column('default_weekday', sa.Integer(), nullable=True),
        sa.Column('service_time', sa.Time(), nullable=True),
        sa.Column('rehearsal_weekday', sa.Integer(), nullable=True),
        sa.Column('rehearsal_time', sa.Time(), nullable=True),
        sa.Column('display_order', sa.Integer(), server_default='0', nullable=False),
        sa.Column('is_primary', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint(
            'default_weekday IS NULL OR default_weekday BETWEEN 0 AND 6',
            name='ck_service_types_weekday',
        ),
        sa.ForeignKeyConstraint(['team_id'], ['teams.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('team_id', 'name', name='uq_service_types_team_name'),
    )
    op.create_index('ix_service_types_team_id', 'service_types', ['team_id'])

    op.create_table('services',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('team_id', sa.UUID(), nullable=False),
        sa.Column('service_type_id', sa.UUID(), nullable=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('service_date', sa.Date(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=True),
        sa.Column('end_time', sa.Time(), nullable=True),
        sa.Column('status', sa.String(length=20), server_default='draft', nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('rehearsal_date', sa.Date(), nullable=True),
        sa.Column('rehearsal_time', sa.Time(), nullable=True),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('created_by', sa.UUID(), nullable=False),
        sa.Column('published_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint(
            "status IN ('draft', 'published', 'completed', 'cancelled')",
            name='ck_services_status',
        ),
        sa.ForeignKeyConstraint(['team_id'], ['teams.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['service_type_id'], ['service_types.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['created_by'], ['profiles.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_services_team_id', 'services', ['team_id'])
    op.create_index('ix_services_service_date', 'services', ['service_date'])

    op.create_table('service_assignments',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('service_id', sa.UUID(), nullable=False),
        sa.Column('team_member_id', sa.UUID(), nullable=False),
        sa.Column('role_id', sa.UUID(), nullable=False),
        sa.Column('status', sa.String(length=20), server_default='pending', nullable=False),
        sa.Column('assigned_by', sa.UUID(), nullable=True),
        sa.Column('decline_reason', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('responded_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint(
            "status IN ('pending', 'confirmed', 'declined')",
            name='ck_service_assignments_status',
        ),
        sa.ForeignKeyConstraint(['service_id'], ['services.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['team_member_id'], ['team_members.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['role_id'], ['roles.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['assigned_by'], ['profiles.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint(
            'service_id', 'team_member_id', 'role_id',
            name='uq_service_assignments_service_member_role',
        ),
    )
    op.create_index('ix_service_assignments_service_id', 'service_assignments', ['service_id'])
    op.create_index('ix_service_assignments_team_member_id', 'service_assignments', ['team_member_id'])

    op.create_table('availability',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('team_id', sa.UUID(), nullable=False),
        sa.Column('user_id', sa.UUID(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('is_available', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['team_id'], ['teams.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('team_id', 'user_id', 'date', name='uq_availability_team_user_date'),
    )
    op.create_index('ix_availability_team_id', 'availability', ['team_id'])
    op.create_index('ix_availability_user_id', 'availability', ['user_id'])

    op.create_table('team_invitations',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('team_id', sa.UUID(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('token', sa.String(length=128), nullable=False),
        sa.Column('role_suggestion', sa.String(length=20), server_default='member', nullable=False),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('invited_by', sa.UUID(), nullable=False),
        sa.Column('status', sa.String(length=20), server_default='pending', nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('accepted_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint("role_suggestion IN ('admin', 'member')", name='ck_team_invitations_role'),
        sa.CheckConstraint(
            "status IN ('pending', 'accepted', 'expired', 'cancelled')",
            name='ck_team_invitations_status',
        ),
        sa.ForeignKeyConstraint(['team_id'], ['teams.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['invited_by'], ['profiles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('token'),
    )
    op.create_index('ix_team_invitations_team_id', 'team_invitations', ['team_id'])
    op.create_index('ix_team_invitations_email', 'team_invitations', ['email'])

    op.create_table('ownership_transfers',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('team_id', sa.UUID(), nullable=False),
        sa.Column('from_user_id', sa.UUID(), nullable=False),
        sa.Column('to_user_id', sa.UUID(), nullable=False),
        sa.Column('previous_owner_role', sa.String(length=20), server_default='admin', nullable=False),
        sa.Column('status', sa.String(length=20), server_default='pending', nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('initiated_at', sa.DateTime(), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint(
            "previous_owner_role IN ('admin', 'member')",
            name='ck_ownership_transfers_previous_role',
        ),
        sa.CheckConstraint(
            "status IN ('pending', 'completed', 'cancelled', 'expired')",
            name='ck_ownership_transfers_status',
        ),
        sa.ForeignKeyConstraint(['team_id'], ['teams.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['from_user_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['to_user_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_ownership_transfers_team_id', 'ownership_transfers', ['team_id'])


def downgrade() -> None:
    """Drop all scheduling tables."""
    op.drop_index('ix_ownership_transfers_team_id', table_name='ownership_transfers')
    op.drop_table('ownership_transfers')

    op.drop_index('ix_team_invitations_email', table_name='team_invitations')
    op.drop_index('ix_team_invitations_team_id', table_name='team_invitations')
    op.drop_table('team_invitations')

    op.drop_index('ix_availability_user_id', table_name='availability')
    op.drop_index('ix_availability_team_id', table_name='availability')
    op.drop_table('availability')

    op.drop_index('ix_service_assignments_team_member_id', table_name='service_assignments')
    op.drop_index('ix_service_assignments_service_id', table_name='service_assignments')
    op.drop_table('service_assignments')

    op.drop_index('ix_services_service_date', table_name='services')
    op.drop_index('ix_services_team_id', table_name='services')
    op.drop_table('services')

    op.drop_index('ix_service_types_team_id', table_name='service_types')
    op.drop_table('service_types')

    op.drop_index('ix_member_roles_team_member_id', table_name='member_roles')
    op.drop_table('member_roles')

    op.drop_index('ix_roles_team_id', table_name='roles')
    op.drop_table('roles')

    op.drop_index('uq_team_members_one_owner', table_name='team_members')
    op.drop_index('ix_team_members_user_id', table_name='team_members')
    op.drop_index('ix_team_members_team_id', table_name='team_members')
    op.drop_table('team_members')

    op.drop_table('teams')
    op.drop_table('profiles')
