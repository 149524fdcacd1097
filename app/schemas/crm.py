"""Pydantic schemas for CRM projects and candidates."""

from datetime import datetime, date
from decimal import Decimal
from uuid import UUID
from pydantic import BaseModel, EmailStr, Field
from app.models.candidate import CandidateStage


class ProjectCreate(BaseModel):
    customer_name: str | None = None
    customer_email: str | None = None
    customer_phone: str | None = None
    address: str | None = None
    system_size_kw: Decimal | None = None
    estimated_annual_production_kwh: int | None = None
    project_value: Decimal | None = None
    assigned_project_manager: str | None = None
    assigned_installer: str | None = None
    notes: str | None = None


class ProjectUpdate(BaseModel):
    """Editable project fields. Stage changes go through advance-stage."""
    customer_name: str | None = None
    customer_email: str | None = None
    customer_phone: str | None = None
    address: str | None = None
    system_size_kw: Decimal | None = None
    estimated_annual_production_kwh: int | None = None
    project_value: Decimal | None = None
    estimated_completion_date: date | None = None
    overall_status: str | None = None
    assigned_project_manager: str | None = None
    assigned_installer: str | None = None
    notes: str | None = None


class AdvanceStage(BaseModel):
    new_stage: int
    notes: str | None = None


class StageHistoryOut(BaseModel):
    id: UUID
    stage_id: int
    entered_at: datetime
    notes: str | None = None
    completed_by: str | None = None
    auto_advanced: bool
    sms_sent: bool

    class Config:
        from_attributes = True


class ProjectOut(BaseModel):
    id: UUID
    external_id: str | None = None
    customer_name: str
    customer_email: str | None = None
    customer_phone: str | None = None
    address: str
    system_size_kw: Decimal | None = None
    estimated_annual_production_kwh: int | None = None
    project_value: Decimal | None = None
    contract_signed_date: date | None = None
    notice_to_proceed_date: date | None = None
    estimated_completion_date: date | None = None
    actual_completion_date: date | None = None
    current_stage: int
    stage_name: str
    overall_status: str
    assigned_project_manager: str | None = None
    assigned_installer: str | None = None
    notes: str | None = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ProjectDetail(BaseModel):
    project: ProjectOut
    stage_history: list[StageHistoryOut] = Field(default_factory=list)


class CandidateCreate(BaseModel):
    job_id: str
    job_title: str
    first_name: str
    last_name: str
    email: EmailStr
    phone: str
    city: str | None = None
    state: str | None = None
    years_experience: str | None = None
    certifications: str | None = None
    cover_letter: str | None = None
    resume_url: str | None = None


class CandidateOut(BaseModel):
    id: UUID
    name: str
    email: str
    phone: str
    position: str
    status: CandidateStage
    created_at: datetime


class CandidateStatusUpdate(BaseModel):
    status: CandidateStage
