"""Installation project model with 12-stage lifecycle."""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Text, DateTime, Date, Integer, Numeric, Boolean, ForeignKey, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from app.core.database import Base

PROJECT_STAGES: dict[int, str] = {
    1: "Notice to Proceed",
    2: "Site Survey & Engineering",
    3: "Permit Application",
    4: "Permit Approval",
    5: "Material Procurement",
    6: "Installation Scheduling",
    7: "Installation Start",
    8: "Installation Complete",
    9: "Electrical Inspection",
    10: "Utility Interconnection",
    11: "System Commissioning",
    12: "PTO Approval",
}
FIRST_STAGE = 1
FINAL_STAGE = 12


class Project(Base):
    __tablename__ = "projects"
    __table_args__ = (CheckConstraint("current_stage BETWEEN 1 AND 12", name="ck_projects_current_stage"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    external_id = Column(String(100), nullable=True, index=True)

    customer_name = Column(String(255), nullable=False)
    customer_email = Column(String(255), nullable=True)
    customer_phone = Column(String(50), nullable=True)
    address = Column(Text, nullable=False)

    system_size_kw = Column(Numeric(8, 2), nullable=True)
    estimated_annual_production_kwh = Column(Integer, nullable=True)
    project_value = Column(Numeric(12, 2), nullable=True)

    contract_signed_date = Column(Date, nullable=True)
    notice_to_proceed_date = Column(Date, nullable=True)
    estimated_completion_date = Column(Date, nullable=True)
    actual_completion_date = Column(Date, nullable=True)

    current_stage = Column(Integer, nullable=False, default=FIRST_STAGE, index=True)
    overall_status = Column(String(50), nullable=False, default="active", index=True)  # active, on_hold, complete, cancelled

    assigned_project_manager = Column(String(255), nullable=True)
    assigned_installer = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    stage_history = relationship(
        "ProjectStageHistory",
        back_populates="project",
        order_by="ProjectStageHistory.entered_at",
        cascade="all, delete-orphan",
    )

    @property
    def stage_name(self) -> str:
        return PROJECT_STAGES.get(self.current_stage, "Unknown")


class ProjectStageHistory(Base):
    """Append-only record of each stage a project entered."""
    __tablename__ = "project_stage_history"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    project_id = Column(UUID(as_uuid=True), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    stage_id = Column(Integer, nullable=False)
    entered_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    notes = Column(Text, nullable=True)
    completed_by = Column(String(255), nullable=True)
    auto_advanced = Column(Boolean, nullable=False, default=False)
    sms_sent = Column(Boolean, nullable=False, default=False)

    project = relationship("Project", back_populates="stage_history")
