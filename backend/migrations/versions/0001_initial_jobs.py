"""initial agencies, users, jobs and status history

Revision ID: 0001_initial_jobs
Revises:
Create Date: 2025-11-03
"""
from __future__ import annotations
from alembic import op
import sqlalchemy as sa

revision = '0001_initial_jobs'
down_revision = None
branch_labels = None
depends_on = None

JOB_STATUSES = ('pending', 'assigned', 'accepted', 'travelling', 'onsite', 'completed', 'cancelled')
URGENCIES = ('emergency', 'urgent', 'normal', 'scheduled')


def _in(column, values):
    return column + ' IN (' + ', '.join(f"'{v}'" for v in values) + ')'


def upgrade():
    op.create_table('agencies',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=255), nullable=False, unique=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'))
    )

    op.create_table('users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('email', sa.String(length=128), nullable=False, unique=True),
        sa.Column('phone', sa.String(length=32)),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=16), nullable=False, server_default='viewer'),
        sa.Column('agency_id', sa.Integer(), sa.ForeignKey('agencies.id', ondelete='SET NULL'), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('1')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.CheckConstraint(_in('role', ('admin', 'manager', 'viewer', 'engineer')), name='ck_users_role'),
    )
    op.create_index('ix_users_email', 'users', ['email'])
    op.create_index('ix_users_agency_id', 'users', ['agency_id'])

    op.create_table('jobs',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('job_number', sa.String(length=50), nullable=False, unique=True),
        sa.Column('agency_id', sa.Integer(), sa.ForeignKey('agencies.id', ondelete='SET NULL'), nullable=True),
        sa.Column('assigned_engineer_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('client_name', sa.String(length=255), nullable=False),
        sa.Column('job_type', sa.String(length=32), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='pending'),
        sa.Column('urgency', sa.String(length=16), nullable=False, server_default='normal'),
        sa.Column('assigned_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('accepted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.CheckConstraint(_in('status', JOB_STATUSES), name='ck_jobs_status'),
        sa.CheckConstraint(_in('urgency', URGENCIES), name='ck_jobs_urgency'),
    )
    op.create_index('ix_jobs_agency_id', 'jobs', ['agency_id'])
    op.create_index('ix_jobs_assigned_engineer_id', 'jobs', ['assigned_engineer_id'])
    op.create_index('ix_jobs_status', 'jobs', ['status'])

    op.create_table('job_status_history',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('job_id', sa.String(length=36), sa.ForeignKey('jobs.id', ondelete='CASCADE'), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('changed_by', sa.Integer(), nullable=True),
        sa.Column('location', sa.JSON(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.CheckConstraint(_in('status', JOB_STATUSES), name='ck_job_status_history_status'),
    )
    op.create_index('ix_job_status_history_job_id', 'job_status_history', ['job_id'])
    op.create_index('ix_job_status_history_created_at', 'job_status_history', ['created_at'])


def downgrade():
    for tbl in ['job_status_history', 'jobs', 'users', 'agencies']:
        op.drop_table(tbl)
