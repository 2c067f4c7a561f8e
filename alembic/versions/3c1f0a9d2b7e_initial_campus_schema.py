"""Initial campus schema: users, events, rsvps

Revision ID: 3c1f0a9d2b7e
Revises: 
Create Date: 2026-09-28 10:12:41.518203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '3c1f0a9d2b7e'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    role_enum = postgresql.ENUM('student', 'organizer', 'admin', name='roleenum', create_type=False)
    category_enum = postgresql.ENUM(
        'academic', 'social', 'sports', 'arts', 'career',
        'technology', 'workshop', 'volunteering', 'other',
        name='eventcategory', create_type=False,
    )
    rsvp_status_enum = postgresql.ENUM('going', 'maybe', 'not_going', name='rsvpstatusenum', create_type=False)
    role_enum.create(op.get_bind(), checkfirst=True)
    category_enum.create(op.get_bind(), checkfirst=True)
    rsvp_status_enum.create(op.get_bind(), checkfirst=True)

    op.create_table(
        'users',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('full_name', sa.String(255), nullable=True),
        sa.Column('role', role_enum, nullable=False, server_default='student'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now())
    )
    op.create_index('ix_users_email', 'users', ['email'])

    op.create_table(
        'events',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('location', sa.String(255), nullable=True),
        sa.Column('starts_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('capacity', sa.Integer, nullable=False, server_default='100'),
        sa.Column('category', category_enum, nullable=True),
        sa.Column('created_by', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint('capacity > 0', name='ck_event_capacity_positive'),
    )
    op.create_index('idx_event_date', 'events', ['starts_at'])
    op.create_index('idx_event_organizer', 'events', ['created_by'])
    op.create_index('idx_event_category', 'events', ['category'])

    op.create_table(
        'rsvps',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('event_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('events.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('status', rsvp_status_enum, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_unique_constraint('uq_rsvp_event_user', 'rsvps', ['event_id', 'user_id'])
    op.create_index('idx_rsvp_user', 'rsvps', ['user_id'])
    op.create_index('idx_rsvp_event_status', 'rsvps', ['event_id', 'status'])


def downgrade() -> None:
    op.drop_table('rsvps')
    op.drop_table('events')
    op.drop_table('users')

    sa.Enum(name='rsvpstatusenum').drop(op.get_bind())
    sa.Enum(name='eventcategory').drop(op.get_bind())
    sa.Enum(name='roleenum').drop(op.get_bind())
