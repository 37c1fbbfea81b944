"""initial_schema

Revision ID: a3f1c9d2e7b4
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'a3f1c9d2e7b4'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade():
    op.create_table(
        'members',
        sa.Column('id', sa.String(length=64), primary_key=True),
        sa.Column('person_id', sa.String(length=64), nullable=True),
        sa.Column('first_name', sa.String(length=255), nullable=False),
        sa.Column('last_name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=30), nullable=True),
        sa.Column('birthdate', sa.Date(), nullable=True),
        sa.Column('anniversary', sa.Date(), nullable=True),
        sa.Column('address_line1', sa.String(length=255), nullable=True),
        sa.Column('address_line2', sa.String(length=255), nullable=True),
        sa.Column('city', sa.String(length=100), nullable=True),
        sa.Column('state', sa.String(length=50), nullable=True),
        sa.Column('postal_code', sa.String(length=20), nullable=True),
        sa.Column('status', sa.String(length=50), nullable=False, server_default='Active'),
        *_timestamps(),
    )
    op.create_index('idx_members_name', 'members', ['last_name', 'first_name'])
    op.create_index('idx_members_email', 'members', ['email'])
    op.create_index('idx_members_phone', 'members', ['phone'])
    op.create_index('idx_members_status', 'members', ['status'])
    op.create_index('idx_members_person_id', 'members', ['person_id'])

    op.create_table(
        'attendance',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('service_type', sa.String(length=100), nullable=False),
        sa.Column('member_id', sa.String(length=64),
                  sa.ForeignKey('members.id', ondelete='CASCADE'), nullable=False),
        sa.Column('present', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('checked_in_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('date', 'service_type', 'member_id', name='uq_attendance_occurrence_member'),
    )
    op.create_index('idx_attendance_date', 'attendance', ['date'])
    op.create_index('idx_attendance_service_type', 'attendance', ['service_type'])
    op.create_index('idx_attendance_member', 'attendance', ['member_id'])
    op.create_index('idx_attendance_date_service', 'attendance', ['date', 'service_type'])

    op.create_table(
        'attendance_summary',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('service_type', sa.String(length=100), nullable=False),
        sa.Column('total_present', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_absent', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('date', 'service_type', name='uq_attendance_summary_occurrence'),
    )

    op.create_table(
        'absentee_checkins',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=30), nullable=True),
        sa.Column('reason', sa.String(length=50), nullable=False),
        sa.Column('prayer_request', sa.Text(), nullable=True),
        sa.Column('service_date', sa.Date(), nullable=False),
        sa.Column('livestream_sent', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('livestream_sent_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index('idx_absentee_service_date', 'absentee_checkins', ['service_date'])
    op.create_index('idx_absentee_reason', 'absentee_checkins', ['reason'])
    op.create_index('idx_absentee_phone', 'absentee_checkins', ['phone'])

    op.create_table(
        'vimeo_passwords',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('video_id', sa.String(length=64), nullable=False),
        sa.Column('password', sa.String(length=64), nullable=False),
        sa.Column('video_url', sa.String(length=500), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('rotation_type', sa.String(length=20), nullable=False, server_default='manual'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('idx_vimeo_passwords_active', 'vimeo_passwords', ['active'])

    op.create_table(
        'password_rotation_schedule',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('day_of_week', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('time_of_day', sa.Time(), nullable=False, server_default='08:00:00'),
        sa.Column('enabled', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('last_run', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'stream_access_codes',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('code', sa.String(length=16), nullable=False, unique=True),
        sa.Column('member_name', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=30), nullable=True),
        sa.Column('absentee_checkin_id', sa.Integer(),
                  sa.ForeignKey('absentee_checkins.id', ondelete='SET NULL'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('first_used_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_used_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('use_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('revoked', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('revoked_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
    )
    op.create_index('idx_stream_codes_expires', 'stream_access_codes', ['expires_at'])
    op.create_index('idx_stream_codes_checkin', 'stream_access_codes', ['absentee_checkin_id'])

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('username', sa.String(length=100), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('display_name', sa.String(length=255), nullable=True),
        sa.Column('is_admin', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)


def downgrade():
    op.drop_index('ix_users_username', table_name='users')
    op.drop_table('users')
    op.drop_table('stream_access_codes')
    op.drop_table('password_rotation_schedule')
    op.drop_table('vimeo_passwords')
    op.drop_table('absentee_checkins')
    op.drop_table('attendance_summary')
    op.drop_table('attendance')
    op.drop_table('members')
