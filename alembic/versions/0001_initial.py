"""Create events, sessions, registrations and matchmaking tables

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18

This migration creates:
- events / program_rooms / sessions: capacity-bounded resources
- registrations: one row per (resource, actor) claim, with a partial unique
  index over non-cancelled rows
- actors / actor_blocks / conversations / conversation_members: matchmaking
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'events',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('organization_id', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=True),

        # Capacity (0 = unbounded)
        sa.Column('capacity', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('reserved_count', sa.Integer(), nullable=False, server_default=sa.text('0')),

        sa.Column('is_archived', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),

        sa.CheckConstraint('capacity >= 0', name='check_event_capacity_positive'),
        sa.CheckConstraint('reserved_count >= 0', name='check_event_reserved_positive'),
        sa.CheckConstraint(
            'capacity = 0 OR reserved_count <= capacity',
            name='check_event_reserved_lte_capacity',
        ),
    )
    op.create_index('ix_events_organization_id', 'events', ['organization_id'])

    op.create_table(
        'program_rooms',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('event_id', sa.String(), sa.ForeignKey('events.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('capacity', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.CheckConstraint('capacity >= 0', name='check_room_capacity_positive'),
    )
    op.create_index('ix_program_rooms_event_id', 'program_rooms', ['event_id'])

    op.create_table(
        'sessions',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('event_id', sa.String(), sa.ForeignKey('events.id', ondelete='CASCADE'), nullable=False),
        sa.Column('room_id', sa.String(), sa.ForeignKey('program_rooms.id', ondelete='SET NULL'), nullable=True),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('track', sa.String(), nullable=True),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('end_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('is_archived', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('capacity', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('reserved_count', sa.Integer(), nullable=False, server_default=sa.text('0')),

        sa.CheckConstraint('capacity >= 0', name='check_session_capacity_positive'),
        sa.CheckConstraint('reserved_count >= 0', name='check_session_reserved_positive'),
        sa.CheckConstraint(
            'capacity = 0 OR reserved_count <= capacity',
            name='check_session_reserved_lte_capacity',
        ),
    )
    op.create_index('ix_sessions_event_id', 'sessions', ['event_id'])

    op.create_table(
        'registrations',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('resource_type', sa.String(20), nullable=False),
        sa.Column('resource_id', sa.String(), nullable=False),
        sa.Column('event_id', sa.String(), sa.ForeignKey('events.id', ondelete='CASCADE'), nullable=False),
        sa.Column('actor_id', sa.String(), nullable=False),
        sa.Column('actor_role', sa.String(32), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='registered'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('cancelled_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_registrations_resource_id', 'registrations', ['resource_id'])
    op.create_index('ix_registrations_event_id', 'registrations', ['event_id'])
    op.create_index('ix_registrations_actor_id', 'registrations', ['actor_id'])
    op.create_index('idx_registration_actor_event', 'registrations', ['actor_id', 'event_id'])
    # At most one live registration per (resource, actor); cancelled rows are history
    op.create_index(
        'unique_active_registration',
        'registrations',
        ['resource_type', 'resource_id', 'actor_id'],
        unique=True,
        postgresql_where=sa.text("status != 'cancelled'"),
        sqlite_where=sa.text("status != 'cancelled'"),
    )

    op.create_table(
        'actors',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('role', sa.String(32), nullable=False),
        sa.Column('event_id', sa.String(), sa.ForeignKey('events.id', ondelete='CASCADE'), nullable=True),
        sa.Column('admin_verified', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('profile', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_actors_role', 'actors', ['role'])
    op.create_index('ix_actors_event_id', 'actors', ['event_id'])

    op.create_table(
        'actor_blocks',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('blocker_id', sa.String(), nullable=False),
        sa.Column('blocked_id', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('blocker_id', 'blocked_id', name='unique_actor_block'),
    )
    op.create_index('ix_actor_blocks_blocker_id', 'actor_blocks', ['blocker_id'])
    op.create_index('ix_actor_blocks_blocked_id', 'actor_blocks', ['blocked_id'])

    op.create_table(
        'conversations',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('is_group', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('is_archived', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        'conversation_members',
        sa.Column(
            'conversation_id',
            sa.String(),
            sa.ForeignKey('conversations.id', ondelete='CASCADE'),
            primary_key=True,
        ),
        sa.Column('actor_id', sa.String(), primary_key=True),
    )
    op.create_index('ix_conversation_members_actor_id', 'conversation_members', ['actor_id'])


def downgrade() -> None:
    op.drop_index('ix_conversation_members_actor_id', table_name='conversation_members')
    op.drop_table('conversation_members')
    op.drop_table('conversations')

    op.drop_index('ix_actor_blocks_blocked_id', table_name='actor_blocks')
    op.drop_index('ix_actor_blocks_blocker_id', table_name='actor_blocks')
    op.drop_table('actor_blocks')

    op.drop_index('ix_actors_event_id', table_name='actors')
    op.drop_index('ix_actors_role', table_name='actors')
    op.drop_table('actors')

    op.drop_index('unique_active_registration', table_name='registrations')
    op.drop_index('idx_registration_actor_event', table_name='registrations')
    op.drop_index('ix_registrations_actor_id', table_name='registrations')
    op.drop_index('ix_registrations_event_id', table_name='registrations')
    op.drop_index('ix_registrations_resource_id', table_name='registrations')
    op.drop_table('registrations')

    op.drop_index('ix_sessions_event_id', table_name='sessions')
    op.drop_table('sessions')

    op.drop_index('ix_program_rooms_event_id', table_name='program_rooms')
    op.drop_table('program_rooms')

    op.drop_index('ix_events_organization_id', table_name='events')
    op.drop_table('events')
