"""CRM lead endpoints (authenticated).

- GET /api/v1/crm/leads → Splash leads and contact submissions in one list
- GET /api/v1/crm/leads/{id} → Single lead
- PUT /api/v1/crm/leads/{id}/status → Set the CRM status of a lead
"""

import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import and_, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from app.core.database import get_db
from app.core.deps import get_current_user, CurrentUser
from app.models.contact import ContactSubmission, LeadStatusRecord
from app.models.splash_lead import SplashLead, SplashLeadStatus
from app.schemas.splash_lead import CrmLeadOut, LeadStatusUpdate

router = APIRouter()
logger = logging.getLogger(__name__)

SPLASH = "splash"
CONTACT = "contact"
LEAD_STATUSES = {s.value for s in SplashLeadStatus}


def _splash_to_crm(lead: SplashLead, status: Optional[str]) -> CrmLeadOut:
    if lead.city or lead.state:
        location = ", ".join(part for part in (lead.city, lead.state) if part)
    else:
        location = lead.zip_code or "Unknown"
    return CrmLeadOut(
        id=lead.id,
        name=lead.full_name or "Unknown",
        email=lead.email,
        phone=lead.phone,
        status=status or lead.status.value,
        created_at=lead.created_at,
        electric_bill=f"${lead.average_monthly_bill}" if lead.average_monthly_bill else None,
        location=location,
        source=SPLASH,
        follow_up_date=lead.follow_up_date,
    )


def _contact_to_crm(submission: ContactSubmission, status: Optional[str]) -> CrmLeadOut:
    return CrmLeadOut(
        id=submission.id,
        name=submission.name or "Unknown",
        email=submission.email,
        phone=submission.phone,
        status=status or submission.status,
        created_at=submission.created_at,
        location=submission.address or "Contact Form",
        source=CONTACT,
    )


async def _status_overrides(db: AsyncSession) -> dict[tuple[UUID, str], str]:
    result = await db.execute(select(LeadStatusRecord))
    return {(r.lead_id, r.source): r.status for r in result.scalars().all()}


def _where_status(query, model, source: str, row_matches, status: str):
    record = aliased(LeadStatusRecord)
    return query.outerjoin(
        record, and_(record.lead_id == model.id, record.source == source)
    ).where(
        or_(record.status == status, and_(record.id.is_(None), row_matches))
    )


@router.get("/crm/leads", response_model=List[CrmLeadOut])
async def list_leads(
    source: Optional[str] = Query(None, description="splash or contact"),
    status: Optional[str] = Query(None),
    limit: int = Query(500, ge=1, le=2000),
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    """Merged lead list, newest first.

    The status filter runs in SQL before the limit, against the status record
    when a lead has one and the lead row otherwise.
    """
    if status and status not in LEAD_STATUSES:
        raise HTTPException(status_code=400, detail=f"Invalid status: {status}")

    overrides = await _status_overrides(db)
    leads: list[CrmLeadOut] = []

    if source in (None, SPLASH):
        query = select(SplashLead).order_by(SplashLead.created_at.desc()).limit(limit)
        if status:
            query = _where_status(query, SplashLead, SPLASH, SplashLead.status == SplashLeadStatus(status), status)
        result = await db.execute(query)
        leads += [_splash_to_crm(l, overrides.get((l.id, SPLASH))) for l in result.scalars().all()]
    if source in (None, CONTACT):
        query = select(ContactSubmission).order_by(ContactSubmission.created_at.desc()).limit(limit)
        if status:
            query = _where_status(query, ContactSubmission, CONTACT, ContactSubmission.status == status, status)
        result = await db.execute(query)
        leads += [_contact_to_crm(c, overrides.get((c.id, CONTACT))) for c in result.scalars().all()]

    leads.sort(key=lambda l: l.created_at, reverse=True)
    return leads[:limit]


async def _find_lead(db: AsyncSession, lead_id: UUID):
    """Return (source, row) for a lead id in either table."""
    lead = await db.get(SplashLead, lead_id)
    if lead:
        return SPLASH, lead
    submission = await db.get(ContactSubmission, lead_id)
    if submission:
        return CONTACT, submission
    return None, None


@router.get("/crm/leads/{lead_id}", response_model=CrmLeadOut)
async def get_lead(
    lead_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    source, row = await _find_lead(db, lead_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Lead not found")
    overrides = await _status_overrides(db)
    if source == SPLASH:
        return _splash_to_crm(row, overrides.get((lead_id, SPLASH)))
    return _contact_to_crm(row, overrides.get((lead_id, CONTACT)))


@router.put("/crm/leads/{lead_id}/status")
async def update_lead_status(
    lead_id: UUID,
    data: LeadStatusUpdate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    """Upsert the lead's status record; splash leads also get their own column updated."""
    if data.status not in LEAD_STATUSES:
        raise HTTPException(status_code=400, detail=f"Invalid status: {data.status}")

    source, row = await _find_lead(db, lead_id)
    if row is None or (data.source and data.source != source):
        raise HTTPException(status_code=404, detail="Lead not found")

    result = await db.execute(
        select(LeadStatusRecord).where(
            LeadStatusRecord.lead_id == lead_id,
            LeadStatusRecord.source == source,
        )
    )
    record = result.scalar_one_or_none()
    if record is None:
        record = LeadStatusRecord(lead_id=lead_id, source=source)
        db.add(record)
    record.status = data.status
    record.updated_by = user.id
    record.updated_at = datetime.utcnow()

    if source == SPLASH:
        row.status = SplashLeadStatus(data.status)
    else:
        row.status = data.status

    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("Failed to update status of lead %s: %s", lead_id, e)
        raise HTTPException(status_code=500, detail="Failed to update lead status")

    logger.info("Lead %s (%s) status set to %s by %s", lead_id, source, data.status, user.id)
    return {"success": True}
