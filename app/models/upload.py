"""Bill uploads and installation photo submissions."""
import enum
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Text, DateTime, Integer, ForeignKey, Enum
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.types import JSON
from app.core.database import Base


class UploadStatus(str, enum.Enum):
    RECEIVED = "received"
    PROCESSING = "processing"
    COMPLETED = "completed"
    PARTIALLY_COMPLETED = "partially_completed"
    FAILED = "failed"


class SubmissionType(str, enum.Enum):
    SITE_SURVEY = "site_survey"
    INSTALLATION = "installation"
    INSPECTION = "inspection"


class BillUpload(Base):
    __tablename__ = "bill_uploads"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    file_name = Column(String(255), nullable=False)
    original_name = Column(String(255), nullable=False)
    file_type = Column(String(100), nullable=False)
    file_size = Column(Integer, nullable=False)
    source = Column(String(100), nullable=False, default="unknown")
    upload_ip = Column(String(64), nullable=True)
    file_url = Column(Text, nullable=True)
    status = Column(Enum(UploadStatus, name="upload_status"), nullable=False, default=UploadStatus.RECEIVED)
    processing_notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class PhotoSubmission(Base):
    __tablename__ = "photo_submissions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    project_id = Column(String(100), nullable=True, index=True)
    submission_type = Column(Enum(SubmissionType, name="submission_type"), nullable=False)
    technician = Column(String(255), nullable=False)
    notes = Column(Text, nullable=True)
    weather_conditions = Column(String(255), nullable=True)
    completion_percentage = Column(Integer, nullable=False, default=100)
    location = Column(JSON, nullable=True)
    submitted_at = Column(DateTime, nullable=True)
    status = Column(Enum(UploadStatus, name="upload_status"), nullable=False, default=UploadStatus.PROCESSING)
    total_photos = Column(Integer, nullable=False, default=0)
    uploaded_photos = Column(Integer, nullable=False, default=0)
    errors = Column(JSON, nullable=True)
    submitted_by = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    photos = relationship("PhotoRecord", back_populates="submission", order_by="PhotoRecord.photo_index")


class PhotoRecord(Base):
    __tablename__ = "photo_records"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    submission_id = Column(UUID(as_uuid=True), ForeignKey("photo_submissions.id", ondelete="CASCADE"), nullable=False, index=True)
    photo_index = Column(Integer, nullable=False)
    blob_path = Column(String(500), nullable=False)
    file_url = Column(Text, nullable=False)
    original_name = Column(String(255), nullable=True)
    file_type = Column(String(100), nullable=True)
    file_size = Column(Integer, nullable=True)
    photo_metadata = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    submission = relationship("PhotoSubmission", back_populates="photos")
