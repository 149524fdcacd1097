"""CRM project endpoints (authenticated).

- GET /api/v1/crm/projects → List projects
- POST /api/v1/crm/projects → Create project at stage 1
- GET /api/v1/crm/projects/{id} → Project with stage history
- PUT /api/v1/crm/projects/{id} → Update project fields
- POST /api/v1/crm/projects/{id}/advance-stage → Move project to a later stage
"""

import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.database import get_db
from app.core.deps import get_current_user, CurrentUser
from app.models.project import Project
from app.schemas.crm import ProjectCreate, ProjectUpdate, ProjectOut, ProjectDetail, StageHistoryOut, AdvanceStage
from app.services import projects as project_service

router = APIRouter()
logger = logging.getLogger(__name__)


async def _get_project_or_404(db: AsyncSession, project_id: UUID) -> Project:
    project = await db.get(Project, project_id)
    if project is None:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


@router.get("/crm/projects", response_model=List[ProjectOut])
async def list_projects(
    status: Optional[str] = Query(None, description="Filter by overall status"),
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    query = select(Project).order_by(Project.created_at.desc())
    if status:
        query = query.where(Project.overall_status == status)
    result = await db.execute(query)
    return result.scalars().all()


@router.post("/crm/projects", response_model=ProjectOut)
async def create_project(
    data: ProjectCreate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    if not (data.customer_name and data.customer_name.strip()) or not (data.address and data.address.strip()):
        raise HTTPException(status_code=400, detail="Customer name and address are required")

    try:
        return await project_service.create_project(db, data, created_by=user.id)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("Failed to create project for %s: %s", data.customer_name, e)
        raise HTTPException(status_code=500, detail=f"Database error: {e}")


@router.get("/crm/projects/{project_id}", response_model=ProjectDetail)
async def get_project(
    project_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    result = await db.execute(
        select(Project).where(Project.id == project_id).options(selectinload(Project.stage_history))
    )
    project = result.scalar_one_or_none()
    if project is None:
        raise HTTPException(status_code=404, detail="Project not found")
    return ProjectDetail(
        project=ProjectOut.model_validate(project),
        stage_history=[StageHistoryOut.model_validate(h) for h in project.stage_history],
    )


@router.put("/crm/projects/{project_id}", response_model=ProjectOut)
async def update_project(
    project_id: UUID,
    data: ProjectUpdate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    project = await _get_project_or_404(db, project_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(project, field, value)
    project.updated_at = datetime.utcnow()

    try:
        await db.commit()
        await db.refresh(project)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("Failed to update project %s: %s", project_id, e)
        raise HTTPException(status_code=500, detail=f"Database error: {e}")
    return project


@router.post("/crm/projects/{project_id}/advance-stage")
async def advance_project_stage(
    project_id: UUID,
    data: AdvanceStage,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    project = await _get_project_or_404(db, project_id)
    try:
        await project_service.advance_stage(db, project, data.new_stage, advanced_by=user.id, notes=data.notes)
    except project_service.InvalidStage as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("Failed to advance project %s: %s", project_id, e)
        raise HTTPException(status_code=500, detail="Failed to advance project stage")
    return {"success": True, "stage": data.new_stage}
