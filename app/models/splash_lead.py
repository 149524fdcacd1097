"""Splash form lead model."""
import enum
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Text, DateTime, Date, Integer, Boolean, Enum
from sqlalchemy.dialects.postgresql import UUID
from app.core.database import Base


class SplashLeadStatus(str, enum.Enum):
    NEW = "new"
    CONTACTED = "contacted"
    QUALIFIED = "qualified"
    CLOSED = "closed"
    DISQUALIFIED = "disqualified"


class SplashLead(Base):
    """One splash form attempt. Partial rows are upserted by session_id."""
    __tablename__ = "splash_leads"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    session_id = Column(String(64), unique=True, nullable=True, index=True)

    # Contact
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    phone = Column(String(50), nullable=True, index=True)
    email = Column(String(255), nullable=True, index=True)
    street_address = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(50), nullable=True)
    zip_code = Column(String(10), nullable=True)

    # Qualification answers
    utility_company = Column(String(255), nullable=True)
    average_monthly_bill = Column(Integer, nullable=True)
    homeowner_status = Column(String(10), nullable=True)
    credit_score = Column(String(20), nullable=True)
    shading = Column(String(20), nullable=True)

    # Progress
    is_partial = Column(Boolean, nullable=False, default=True)
    current_step = Column(Integer, nullable=False, default=0)
    form_type = Column(String(50), nullable=False, default="ameren_illinois_splash")
    source = Column(String(50), nullable=False, default="splash_page")

    # CRM
    status = Column(Enum(SplashLeadStatus, name="splash_lead_status"), nullable=False, default=SplashLeadStatus.NEW, index=True)
    disqualification_reason = Column(String(255), nullable=True)
    assigned_to = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)
    follow_up_date = Column(Date, nullable=True)

    # Tracking
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(Text, nullable=True)
    utm_source = Column(String(100), nullable=True)
    utm_medium = Column(String(100), nullable=True)
    utm_campaign = Column(String(100), nullable=True)

    # Consent
    tcpa_consent = Column(Boolean, nullable=False, default=False)
    sms_consent = Column(Boolean, nullable=False, default=False)
    consent_timestamp = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    completed_at = Column(DateTime, nullable=True)

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p)
