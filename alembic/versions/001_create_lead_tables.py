"""Create splash lead, contact and appointment tables

Revision ID: 001_create_lead_tables
Revises:
Create Date: 2025-08-20 10:00:00

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision = '001_create_lead_tables'
down_revision = None
branch_labels = None
depends_on = None

SPLASH_LEAD_STATUSES = ('NEW', 'CONTACTED', 'QUALIFIED', 'CLOSED', 'DISQUALIFIED')


def upgrade():
    splash_lead_status = postgresql.ENUM(*SPLASH_LEAD_STATUSES, name='splash_lead_status', create_type=False)
    splash_lead_status.create(op.get_bind(), checkfirst=True)

    op.create_table(
        'splash_leads',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('session_id', sa.String(length=64), nullable=True),
        sa.Column('first_name', sa.String(length=100), nullable=True),
        sa.Column('last_name', sa.String(length=100), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('street_address', sa.String(length=255), nullable=True),
        sa.Column('city', sa.String(length=100), nullable=True),
        sa.Column('state', sa.String(length=50), nullable=True),
        sa.Column('zip_code', sa.String(length=10), nullable=True),
        sa.Column('utility_company', sa.String(length=255), nullable=True),
        sa.Column('average_monthly_bill', sa.Integer(), nullable=True),
        sa.Column('homeowner_status', sa.String(length=10), nullable=True),
        sa.Column('credit_score', sa.String(length=20), nullable=True),
        sa.Column('shading', sa.String(length=20), nullable=True),
        sa.Column('is_partial', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('current_step', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('form_type', sa.String(length=50), nullable=False, server_default='ameren_illinois_splash'),
        sa.Column('source', sa.String(length=50), nullable=False, server_default='splash_page'),
        sa.Column('status', splash_lead_status, nullable=False, server_default='NEW'),
        sa.Column('disqualification_reason', sa.String(length=255), nullable=True),
        sa.Column('assigned_to', sa.String(length=255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('follow_up_date', sa.Date(), nullable=True),
        sa.Column('ip_address', sa.String(length=64), nullable=True),
        sa.Column('user_agent', sa.Text(), nullable=True),
        sa.Column('utm_source', sa.String(length=100), nullable=True),
        sa.Column('utm_medium', sa.String(length=100), nullable=True),
        sa.Column('utm_campaign', sa.String(length=100), nullable=True),
        sa.Column('tcpa_consent', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('sms_consent', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('consent_timestamp', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_splash_leads_session_id'), 'splash_leads', ['session_id'], unique=True)
    op.create_index(op.f('ix_splash_leads_phone'), 'splash_leads', ['phone'], unique=False)
    op.create_index(op.f('ix_splash_leads_email'), 'splash_leads', ['email'], unique=False)
    op.create_index(op.f('ix_splash_leads_status'), 'splash_leads', ['status'], unique=False)
    op.create_index(op.f('ix_splash_leads_created_at'), 'splash_leads', ['created_at'], unique=False)

    op.create_table(
        'contact_submissions',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('address', sa.String(length=500), nullable=True),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('homeowner', sa.Boolean(), nullable=True),
        sa.Column('status', sa.String(length=50), nullable=False, server_default='new'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_contact_submissions_created_at'), 'contact_submissions', ['created_at'], unique=False)

    op.create_table(
        'lead_status',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('lead_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('source', sa.String(length=50), nullable=False),
        sa.Column('status', sa.String(length=50), nullable=False),
        sa.Column('updated_by', sa.String(length=255), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('lead_id', 'source', name='uq_lead_status_lead_source')
    )
    op.create_index(op.f('ix_lead_status_lead_id'), 'lead_status', ['lead_id'], unique=False)

    op.create_table(
        'appointment_preferences',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('lead_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('preferred_date', sa.String(length=50), nullable=True),
        sa.Column('preferred_time', sa.String(length=50), nullable=True),
        sa.Column('source', sa.String(length=100), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['lead_id'], ['splash_leads.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_appointment_preferences_lead_id'), 'appointment_preferences', ['lead_id'], unique=False)


def downgrade():
    op.drop_index(op.f('ix_appointment_preferences_lead_id'), table_name='appointment_preferences')
    op.drop_table('appointment_preferences')
    op.drop_index(op.f('ix_lead_status_lead_id'), table_name='lead_status')
    op.drop_table('lead_status')
    op.drop_index(op.f('ix_contact_submissions_created_at'), table_name='contact_submissions')
    op.drop_table('contact_submissions')
    for column in ('created_at', 'status', 'email', 'phone', 'session_id'):
        op.drop_index(op.f(f'ix_splash_leads_{column}'), table_name='splash_leads')
    op.drop_table('splash_leads')

    postgresql.ENUM(*SPLASH_LEAD_STATUSES, name='splash_lead_status').drop(op.get_bind(), checkfirst=True)
