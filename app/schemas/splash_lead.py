"""Pydantic schemas for splash form leads."""

from datetime import datetime, date
from uuid import UUID
from typing import Optional
from pydantic import BaseModel, EmailStr, field_validator
from pydantic.alias_generators import to_camel
from app.models.splash_lead import SplashLeadStatus


class SplashLeadIn(BaseModel):
    """Body posted by the splash form. Keys are camelCase; blanks mean unset."""
    session_id: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    street_address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    utility_company: Optional[str] = None
    average_monthly_bill: Optional[int] = None
    homeowner_status: Optional[str] = None
    credit_score: Optional[str] = None
    shading: Optional[str] = None
    tcpa_consent: Optional[bool] = None
    sms_consent: Optional[bool] = None

    is_partial: bool = False
    current_step: Optional[int] = None
    send_email_notification: bool = False
    completed_at: Optional[datetime] = None
    timestamp: Optional[datetime] = None

    utm_source: Optional[str] = None
    utm_medium: Optional[str] = None
    utm_campaign: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    @field_validator(
        "session_id", "first_name", "last_name", "phone", "email", "street_address", "city",
        "state", "zip_code", "utility_company", "homeowner_status", "credit_score", "shading",
        mode="before",
    )
    @classmethod
    def blank_to_none(cls, value):
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    def lead_fields(self) -> dict:
        """Column values carried by this body, excluding unset ones."""
        return self.model_dump(
            exclude_none=True,
            exclude={
                "session_id", "is_partial", "current_step", "send_email_notification",
                "completed_at", "timestamp", "tcpa_consent", "sms_consent",
            },
        )

    def notification_fields(self) -> dict:
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


class DisqualifiedLeadIn(SplashLeadIn):
    disqualification_reason: Optional[str] = None

    @field_validator("disqualification_reason", mode="before")
    @classmethod
    def reason_blank_to_none(cls, value):
        if isinstance(value, str):
            return value.strip() or None
        return value

    def missing_required(self) -> list[str]:
        required = {
            "firstName": self.first_name,
            "lastName": self.last_name,
            "phone": self.phone,
            "disqualificationReason": self.disqualification_reason,
        }
        return [name for name, value in required.items() if not value]

    def lead_fields(self) -> dict:
        fields = super().lead_fields()
        fields.pop("disqualification_reason", None)
        return fields


class SplashLeadOut(BaseModel):
    id: UUID
    session_id: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    street_address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    utility_company: Optional[str] = None
    average_monthly_bill: Optional[int] = None
    homeowner_status: Optional[str] = None
    credit_score: Optional[str] = None
    shading: Optional[str] = None
    is_partial: bool
    current_step: int
    status: SplashLeadStatus
    disqualification_reason: Optional[str] = None
    notes: Optional[str] = None
    tcpa_consent: bool
    sms_consent: bool
    consent_timestamp: Optional[datetime] = None
    created_at: datetime
    completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class LeadEnvelope(BaseModel):
    success: bool
    message: str
    data: Optional[SplashLeadOut] = None


class ContactIn(BaseModel):
    name: str
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    message: Optional[str] = None
    homeowner: Optional[bool] = None


class AppointmentPreferenceIn(BaseModel):
    preferred_date: Optional[str] = None
    preferred_time: Optional[str] = None
    source: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class CrmLeadOut(BaseModel):
    """Unified CRM view over splash leads and contact submissions."""
    id: UUID
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    status: str
    created_at: datetime
    electric_bill: Optional[str] = None
    location: Optional[str] = None
    source: str
    follow_up_date: Optional[date] = None


class LeadStatusUpdate(BaseModel):
    status: str
    source: Optional[str] = None
