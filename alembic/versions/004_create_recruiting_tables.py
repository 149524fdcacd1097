"""Create job application and candidate status tables

Revision ID: 004_create_recruiting_tables
Revises: 003_create_project_tables
Create Date: 2025-09-02 14:00:00

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision = '004_create_recruiting_tables'
down_revision = '003_create_project_tables'
branch_labels = None
depends_on = None

CANDIDATE_STAGES = ('APPLIED', 'SCREENING', 'INTERVIEW', 'OFFER', 'HIRED', 'REJECTED')


def upgrade():
    candidate_stage = postgresql.ENUM(*CANDIDATE_STAGES, name='candidate_stage', create_type=False)
    candidate_stage.create(op.get_bind(), checkfirst=True)

    op.create_table(
        'job_applications',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('job_id', sa.String(length=100), nullable=False),
        sa.Column('job_title', sa.String(length=255), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=50), nullable=False),
        sa.Column('city', sa.String(length=100), nullable=True),
        sa.Column('state', sa.String(length=10), nullable=True),
        sa.Column('years_experience', sa.String(length=50), nullable=True),
        sa.Column('certifications', sa.Text(), nullable=True),
        sa.Column('cover_letter', sa.Text(), nullable=True),
        sa.Column('resume_url', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_job_applications_job_id'), 'job_applications', ['job_id'], unique=False)
    op.create_index(op.f('ix_job_applications_email'), 'job_applications', ['email'], unique=False)

    op.create_table(
        'candidate_status',
        sa.Column('candidate_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('status', candidate_stage, nullable=False, server_default='APPLIED'),
        sa.Column('updated_by', sa.String(length=255), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('candidate_id')
    )


def downgrade():
    op.drop_table('candidate_status')
    op.drop_index(op.f('ix_job_applications_email'), table_name='job_applications')
    op.drop_index(op.f('ix_job_applications_job_id'), table_name='job_applications')
    op.drop_table('job_applications')

    postgresql.ENUM(*CANDIDATE_STAGES, name='candidate_stage').drop(op.get_bind(), checkfirst=True)
