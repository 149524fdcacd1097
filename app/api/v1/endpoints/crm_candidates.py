"""CRM candidate endpoints (authenticated).

- GET /api/v1/crm/candidates → Job applicants with their recruiting status
- POST /api/v1/crm/candidates → Record a job application
- GET /api/v1/crm/candidates/{id} → Single candidate
- PUT /api/v1/crm/candidates/{id}/status → Set recruiting status
"""

import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.deps import get_current_user, CurrentUser
from app.models.candidate import JobApplication, CandidateStatus, CandidateStage
from app.schemas.crm import CandidateCreate, CandidateOut, CandidateStatusUpdate

router = APIRouter()
logger = logging.getLogger(__name__)


def _to_candidate(application: JobApplication, status: Optional[CandidateStage]) -> CandidateOut:
    name = f"{application.first_name or ''} {application.last_name or ''}".strip()
    return CandidateOut(
        id=application.id,
        name=name or "Unknown",
        email=application.email,
        phone=application.phone,
        position=application.job_title or "Unknown",
        status=status or CandidateStage.APPLIED,
        created_at=application.created_at,
    )


@router.get("/crm/candidates", response_model=List[CandidateOut])
async def list_candidates(
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    result = await db.execute(select(JobApplication).order_by(JobApplication.created_at.desc()))
    applications = result.scalars().all()
    statuses = await db.execute(select(CandidateStatus))
    by_id = {s.candidate_id: s.status for s in statuses.scalars().all()}
    return [_to_candidate(a, by_id.get(a.id)) for a in applications]


@router.post("/crm/candidates", response_model=CandidateOut, status_code=201)
async def create_candidate(
    data: CandidateCreate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    application = JobApplication(**data.model_dump())
    db.add(application)
    try:
        await db.commit()
        await db.refresh(application)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("Failed to save application from %s: %s", data.email, e)
        raise HTTPException(status_code=500, detail=f"Database error: {e}")
    logger.info("Job application %s recorded for %s", application.id, data.job_title)
    return _to_candidate(application, None)


@router.get("/crm/candidates/{candidate_id}", response_model=CandidateOut)
async def get_candidate(
    candidate_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    application = await db.get(JobApplication, candidate_id)
    if application is None:
        raise HTTPException(status_code=404, detail="Candidate not found")
    status = await db.get(CandidateStatus, candidate_id)
    return _to_candidate(application, status.status if status else None)


@router.put("/crm/candidates/{candidate_id}/status")
async def update_candidate_status(
    candidate_id: UUID,
    data: CandidateStatusUpdate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    if await db.get(JobApplication, candidate_id) is None:
        raise HTTPException(status_code=404, detail="Candidate not found")

    record = await db.get(CandidateStatus, candidate_id)
    if record is None:
        record = CandidateStatus(candidate_id=candidate_id)
        db.add(record)
    record.status = data.status
    record.updated_by = user.id
    record.updated_at = datetime.utcnow()

    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("Failed to update candidate %s status: %s", candidate_id, e)
        raise HTTPException(status_code=500, detail="Failed to update candidate status")
    return {"success": True}
