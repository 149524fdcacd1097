"""Contact form submissions and CRM lead status overrides."""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Text, DateTime, Boolean, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from app.core.database import Base


class ContactSubmission(Base):
    __tablename__ = "contact_submissions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    address = Column(String(500), nullable=True)
    message = Column(Text, nullable=True)
    homeowner = Column(Boolean, nullable=True)
    status = Column(String(50), nullable=False, default="new")
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)


class LeadStatusRecord(Base):
    """CRM status set on a lead from either source table."""
    __tablename__ = "lead_status"
    __table_args__ = (UniqueConstraint("lead_id", "source", name="uq_lead_status_lead_source"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    lead_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    source = Column(String(50), nullable=False)  # splash or contact
    status = Column(String(50), nullable=False)
    updated_by = Column(String(255), nullable=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
