"""Splash lead persistence.

Session-keyed writes are upserts: non-null incoming values replace stored
ones, ``current_step`` only grows, the consent timestamp is set once and a
completed lead is never reopened by a later partial save. Writes without a
session id are plain inserts.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.splash_lead import SplashLead, SplashLeadStatus
from app.schemas.splash_lead import SplashLeadIn, DisqualifiedLeadIn

logger = logging.getLogger(__name__)

FORM_TYPE = "ameren_illinois_splash"
SOURCE = "splash_page"


def _apply(lead: SplashLead, data: SplashLeadIn, now: datetime) -> None:
    for column, value in data.lead_fields().items():
        setattr(lead, column, value)

    if data.tcpa_consent is not None:
        lead.tcpa_consent = data.tcpa_consent
    if data.sms_consent is not None:
        lead.sms_consent = data.sms_consent
    if (data.tcpa_consent or data.sms_consent) and lead.consent_timestamp is None:
        lead.consent_timestamp = now

    lead.current_step = max(lead.current_step or 0, data.current_step or 0)

    if lead.is_partial:
        lead.is_partial = data.is_partial
    if not data.is_partial:
        lead.completed_at = lead.completed_at or data.completed_at or now


def _new_lead(data: SplashLeadIn) -> SplashLead:
    return SplashLead(
        session_id=data.session_id,
        form_type=FORM_TYPE,
        source=SOURCE,
        current_step=0,
        is_partial=True,
        tcpa_consent=False,
        sms_consent=False,
        status=SplashLeadStatus.NEW,
    )


async def get_by_session(db: AsyncSession, session_id: str) -> Optional[SplashLead]:
    result = await db.execute(select(SplashLead).where(SplashLead.session_id == session_id))
    return result.scalar_one_or_none()


async def save_lead(
    db: AsyncSession,
    data: SplashLeadIn,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> SplashLead:
    """Upsert by session id, or insert when there is none. Commits."""
    now = datetime.utcnow()

    lead = await get_by_session(db, data.session_id) if data.session_id else None
    if lead is None:
        lead = _new_lead(data)
        lead.ip_address = ip_address
        lead.user_agent = user_agent
        _apply(lead, data, now)
        db.add(lead)
        try:
            await db.commit()
        except IntegrityError:
            # Another request created the session row first; update it instead.
            await db.rollback()
            if not data.session_id:
                raise
            lead = await get_by_session(db, data.session_id)
            _apply(lead, data, now)
            await db.commit()
    else:
        _apply(lead, data, now)
        await db.commit()

    await db.refresh(lead)
    return lead


async def save_disqualified_lead(
    db: AsyncSession,
    data: DisqualifiedLeadIn,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> SplashLead:
    """Persist a disqualified lead; always terminal."""
    terminal = data.model_copy(update={"is_partial": False})
    lead = await save_lead(db, terminal, ip_address=ip_address, user_agent=user_agent)
    lead.status = SplashLeadStatus.DISQUALIFIED
    lead.disqualification_reason = data.disqualification_reason
    lead.notes = f"Disqualified: {data.disqualification_reason}"
    await db.commit()
    await db.refresh(lead)
    return lead


async def most_recent_lead(db: AsyncSession) -> Optional[SplashLead]:
    result = await db.execute(select(SplashLead).order_by(SplashLead.created_at.desc()).limit(1))
    return result.scalar_one_or_none()


def lead_form_fields(lead: SplashLead) -> dict:
    """Stored lead in the camelCase shape the email templates expect."""
    return {
        "firstName": lead.first_name,
        "lastName": lead.last_name,
        "phone": lead.phone,
        "email": lead.email,
        "streetAddress": lead.street_address,
        "city": lead.city,
        "state": lead.state,
        "zipCode": lead.zip_code,
        "utilityCompany": lead.utility_company,
        "averageMonthlyBill": lead.average_monthly_bill,
        "homeownerStatus": lead.homeowner_status,
        "creditScore": lead.credit_score,
        "shading": lead.shading,
    }
