"""Create bill upload and photo submission tables

Revision ID: 002_create_upload_tables
Revises: 001_create_lead_tables
Create Date: 2025-08-27 07:22:00

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision = '002_create_upload_tables'
down_revision = '001_create_lead_tables'
branch_labels = None
depends_on = None

UPLOAD_STATUSES = ('RECEIVED', 'PROCESSING', 'COMPLETED', 'PARTIALLY_COMPLETED', 'FAILED')
SUBMISSION_TYPES = ('SITE_SURVEY', 'INSTALLATION', 'INSPECTION')


def upgrade():
    upload_status = postgresql.ENUM(*UPLOAD_STATUSES, name='upload_status', create_type=False)
    upload_status.create(op.get_bind(), checkfirst=True)
    submission_type = postgresql.ENUM(*SUBMISSION_TYPES, name='submission_type', create_type=False)
    submission_type.create(op.get_bind(), checkfirst=True)

    op.create_table(
        'bill_uploads',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('file_name', sa.String(length=255), nullable=False),
        sa.Column('original_name', sa.String(length=255), nullable=False),
        sa.Column('file_type', sa.String(length=100), nullable=False),
        sa.Column('file_size', sa.Integer(), nullable=False),
        sa.Column('source', sa.String(length=100), nullable=False, server_default='unknown'),
        sa.Column('upload_ip', sa.String(length=64), nullable=True),
        sa.Column('file_url', sa.Text(), nullable=True),
        sa.Column('status', upload_status, nullable=False, server_default='RECEIVED'),
        sa.Column('processing_notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table(
        'photo_submissions',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('project_id', sa.String(length=100), nullable=True),
        sa.Column('submission_type', submission_type, nullable=False),
        sa.Column('technician', sa.String(length=255), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('weather_conditions', sa.String(length=255), nullable=True),
        sa.Column('completion_percentage', sa.Integer(), nullable=False, server_default='100'),
        sa.Column('location', sa.JSON(), nullable=True),
        sa.Column('submitted_at', sa.DateTime(), nullable=True),
        sa.Column('status', upload_status, nullable=False, server_default='PROCESSING'),
        sa.Column('total_photos', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('uploaded_photos', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('errors', sa.JSON(), nullable=True),
        sa.Column('submitted_by', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_photo_submissions_project_id'), 'photo_submissions', ['project_id'], unique=False)

    op.create_table(
        'photo_records',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('submission_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('photo_index', sa.Integer(), nullable=False),
        sa.Column('blob_path', sa.String(length=500), nullable=False),
        sa.Column('file_url', sa.Text(), nullable=False),
        sa.Column('original_name', sa.String(length=255), nullable=True),
        sa.Column('file_type', sa.String(length=100), nullable=True),
        sa.Column('file_size', sa.Integer(), nullable=True),
        sa.Column('photo_metadata', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['submission_id'], ['photo_submissions.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_photo_records_submission_id'), 'photo_records', ['submission_id'], unique=False)


def downgrade():
    op.drop_index(op.f('ix_photo_records_submission_id'), table_name='photo_records')
    op.drop_table('photo_records')
    op.drop_index(op.f('ix_photo_submissions_project_id'), table_name='photo_submissions')
    op.drop_table('photo_submissions')
    op.drop_table('bill_uploads')

    postgresql.ENUM(*SUBMISSION_TYPES, name='submission_type').drop(op.get_bind(), checkfirst=True)
    postgresql.ENUM(*UPLOAD_STATUSES, name='upload_status').drop(op.get_bind(), checkfirst=True)
