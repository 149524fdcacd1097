"""Public contact and appointment endpoints.

- POST /api/v1/contact → Store a contact form submission and email sales
- POST /api/v1/appointment-notification → Store appointment preference and email sales
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models.appointment import AppointmentPreference
from app.models.contact import ContactSubmission
from app.schemas.splash_lead import ContactIn, AppointmentPreferenceIn
from app.services import splash_leads
from app.services.notifier import email_notifier

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/contact", status_code=201)
async def submit_contact(data: ContactIn, db: AsyncSession = Depends(get_db)):
    if not data.name.strip():
        raise HTTPException(status_code=400, detail="Name is required")

    submission = ContactSubmission(**data.model_dump())
    db.add(submission)
    try:
        await db.commit()
        await db.refresh(submission)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("Failed to save contact submission: %s", e)
        raise HTTPException(status_code=500, detail=f"Database error: {e}")

    await email_notifier.notify("contact_submitted", {"contact": data.model_dump()})
    return {"success": True, "id": str(submission.id)}


@router.post("/appointment-notification")
async def appointment_notification(data: AppointmentPreferenceIn, db: AsyncSession = Depends(get_db)):
    """Confirm appointment preferences from the thank-you page.

    Runs outside the lead flow: email problems still return success.
    """
    if not data.preferred_date and not data.preferred_time:
        raise HTTPException(status_code=400, detail="At least one appointment preference is required")

    recent = await splash_leads.most_recent_lead(db)

    preference = AppointmentPreference(
        lead_id=recent.id if recent else None,
        preferred_date=data.preferred_date,
        preferred_time=data.preferred_time,
        source=data.source or "unknown",
    )
    db.add(preference)
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("Failed to store appointment preference: %s", e)

    result = await email_notifier.notify(
        "appointment_requested",
        {
            "preference": data.model_dump(by_alias=True),
            "recent_lead": splash_leads.lead_form_fields(recent) if recent else None,
        },
    )
    if not result.delivered:
        return {
            "success": True,
            "message": "Appointment preferences received",
            "note": "Email notification may be delayed",
        }
    return {"success": True, "message": "Appointment preferences confirmed successfully"}
