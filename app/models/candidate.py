"""Job applications and recruiting status."""
import enum
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Text, DateTime, Enum
from sqlalchemy.dialects.postgresql import UUID
from app.core.database import Base


class CandidateStage(str, enum.Enum):
    APPLIED = "applied"
    SCREENING = "screening"
    INTERVIEW = "interview"
    OFFER = "offer"
    HIRED = "hired"
    REJECTED = "rejected"


class JobApplication(Base):
    __tablename__ = "job_applications"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    job_id = Column(String(100), nullable=False, index=True)
    job_title = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    phone = Column(String(50), nullable=False)
    city = Column(String(100), nullable=True)
    state = Column(String(10), nullable=True)
    years_experience = Column(String(50), nullable=True)
    certifications = Column(Text, nullable=True)
    cover_letter = Column(Text, nullable=True)
    resume_url = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class CandidateStatus(Base):
    """Recruiting stage set from the CRM, one row per application."""
    __tablename__ = "candidate_status"

    candidate_id = Column(UUID(as_uuid=True), primary_key=True)
    status = Column(Enum(CandidateStage, name="candidate_stage"), nullable=False, default=CandidateStage.APPLIED)
    updated_by = Column(String(255), nullable=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
