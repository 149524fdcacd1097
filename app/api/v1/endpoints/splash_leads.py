"""Splash form lead endpoints.

- POST /api/v1/splash-leads → Save a partial or complete lead (session upsert)
- POST /api/v1/disqualified-leads → Save a disqualified lead and notify sales
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.schemas.splash_lead import SplashLeadIn, DisqualifiedLeadIn, SplashLeadOut, LeadEnvelope
from app.services import splash_leads
from app.services.notifier import email_notifier

router = APIRouter()
logger = logging.getLogger(__name__)


def _client_info(request: Request) -> tuple[str | None, str | None]:
    forwarded = request.headers.get("x-forwarded-for")
    ip = forwarded.split(",")[0].strip() if forwarded else (request.client.host if request.client else None)
    return ip, request.headers.get("user-agent")


@router.post("/splash-leads", response_model=LeadEnvelope)
async def save_splash_lead(
    data: SplashLeadIn,
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    """Save splash form progress. Reusing a session id updates the same lead."""
    ip, user_agent = _client_info(request)
    try:
        lead = await splash_leads.save_lead(db, data, ip_address=ip, user_agent=user_agent)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("Failed to save splash lead %s: %s", data.session_id, e)
        raise HTTPException(status_code=500, detail=f"Database error: {e}")

    logger.info(
        "Splash lead %s saved (session=%s, partial=%s, step=%s)",
        lead.id, lead.session_id, lead.is_partial, lead.current_step,
    )

    if data.send_email_notification:
        await email_notifier.notify(
            "lead_submitted",
            {"lead": data.notification_fields(), "record_id": str(lead.id)},
        )

    message = "Partial lead saved" if lead.is_partial else "Lead submitted successfully"
    return LeadEnvelope(success=True, message=message, data=SplashLeadOut.model_validate(lead))


@router.post("/disqualified-leads", response_model=LeadEnvelope)
async def save_disqualified_lead(
    data: DisqualifiedLeadIn,
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    """Record a lead that failed qualification and email the sales inbox once."""
    missing = data.missing_required()
    if missing:
        raise HTTPException(status_code=400, detail=f"Missing required fields: {', '.join(missing)}")

    ip, user_agent = _client_info(request)
    try:
        lead = await splash_leads.save_disqualified_lead(db, data, ip_address=ip, user_agent=user_agent)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("Failed to save disqualified lead %s: %s", data.session_id, e)
        raise HTTPException(status_code=500, detail=f"Database error: {e}")

    logger.info("Disqualified lead %s saved: %s", lead.id, data.disqualification_reason)

    await email_notifier.notify(
        "lead_disqualified",
        {
            "lead": data.notification_fields(),
            "reason": data.disqualification_reason,
            "record_id": str(lead.id),
        },
    )

    return LeadEnvelope(
        success=True,
        message="Disqualified lead processed successfully",
        data=SplashLeadOut.model_validate(lead),
    )
