"""Create project lifecycle tables

Revision ID: 003_create_project_tables
Revises: 002_create_upload_tables
Create Date: 2025-08-28 09:00:00

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision = '003_create_project_tables'
down_revision = '002_create_upload_tables'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'projects',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('external_id', sa.String(length=100), nullable=True),
        sa.Column('customer_name', sa.String(length=255), nullable=False),
        sa.Column('customer_email', sa.String(length=255), nullable=True),
        sa.Column('customer_phone', sa.String(length=50), nullable=True),
        sa.Column('address', sa.Text(), nullable=False),
        sa.Column('system_size_kw', sa.Numeric(precision=8, scale=2), nullable=True),
        sa.Column('estimated_annual_production_kwh', sa.Integer(), nullable=True),
        sa.Column('project_value', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('contract_signed_date', sa.Date(), nullable=True),
        sa.Column('notice_to_proceed_date', sa.Date(), nullable=True),
        sa.Column('estimated_completion_date', sa.Date(), nullable=True),
        sa.Column('actual_completion_date', sa.Date(), nullable=True),
        sa.Column('current_stage', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('overall_status', sa.String(length=50), nullable=False, server_default='active'),
        sa.Column('assigned_project_manager', sa.String(length=255), nullable=True),
        sa.Column('assigned_installer', sa.String(length=255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('current_stage BETWEEN 1 AND 12', name='ck_projects_current_stage'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_projects_external_id'), 'projects', ['external_id'], unique=False)
    op.create_index(op.f('ix_projects_current_stage'), 'projects', ['current_stage'], unique=False)
    op.create_index(op.f('ix_projects_overall_status'), 'projects', ['overall_status'], unique=False)

    op.create_table(
        'project_stage_history',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('project_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('stage_id', sa.Integer(), nullable=False),
        sa.Column('entered_at', sa.DateTime(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('completed_by', sa.String(length=255), nullable=True),
        sa.Column('auto_advanced', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('sms_sent', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_project_stage_history_project_id'), 'project_stage_history', ['project_id'], unique=False)


def downgrade():
    op.drop_index(op.f('ix_project_stage_history_project_id'), table_name='project_stage_history')
    op.drop_table('project_stage_history')
    op.drop_index(op.f('ix_projects_overall_status'), table_name='projects')
    op.drop_index(op.f('ix_projects_current_stage'), table_name='projects')
    op.drop_index(op.f('ix_projects_external_id'), table_name='projects')
    op.drop_table('projects')
