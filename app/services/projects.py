"""Project lifecycle: creation and stage advancement."""

import logging
from datetime import date
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.project import Project, ProjectStageHistory, FIRST_STAGE, FINAL_STAGE
from app.schemas.crm import ProjectCreate
from app.services.notifier import sms_notifier
from app.services.sms import WELCOME_MESSAGE, stage_message

logger = logging.getLogger(__name__)


class InvalidStage(ValueError):
    """Requested stage is out of range or does not move the project forward."""


def check_stage_transition(current: int, new_stage: int) -> None:
    if not FIRST_STAGE <= new_stage <= FINAL_STAGE:
        raise InvalidStage("Invalid stage number")
    if new_stage <= current:
        raise InvalidStage(f"Project is already at stage {current}")


async def record_stage_history(db: AsyncSession, history: ProjectStageHistory) -> None:
    """Stage history is secondary: a failed write is logged and skipped."""
    db.add(history)
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("Failed to record stage %s for project %s: %s", history.stage_id, history.project_id, e)


async def create_project(db: AsyncSession, data: ProjectCreate, created_by: str) -> Project:
    """Insert a project at stage 1, log the stage and welcome the customer. Commits."""
    project = Project(
        **data.model_dump(exclude_none=True),
        current_stage=FIRST_STAGE,
        overall_status="active",
        notice_to_proceed_date=date.today(),
    )
    db.add(project)
    await db.commit()
    await db.refresh(project)
    project_id = project.id

    await record_stage_history(db, ProjectStageHistory(
        project_id=project_id,
        stage_id=FIRST_STAGE,
        completed_by=created_by,
    ))

    if data.customer_phone:
        await sms_notifier.notify(
            "project_started",
            {"to": data.customer_phone, "body": WELCOME_MESSAGE.format(name=data.customer_name)},
        )

    logger.info("Project %s created for %s", project_id, data.customer_name)
    return await db.get(Project, project_id)


async def advance_stage(
    db: AsyncSession,
    project: Project,
    new_stage: int,
    advanced_by: str,
    notes: Optional[str] = None,
) -> Project:
    """Move ``project`` forward to ``new_stage``. Raises InvalidStage. Commits."""
    check_stage_transition(project.current_stage, new_stage)

    project_id = project.id
    project.current_stage = new_stage
    if new_stage == FINAL_STAGE:
        project.overall_status = "complete"
        project.actual_completion_date = date.today()
    await db.commit()

    phone, name = project.customer_phone, project.customer_name
    sms_sent = False
    message = stage_message(new_stage, name)
    if phone and message:
        result = await sms_notifier.notify("stage_update", {"to": phone, "body": message})
        sms_sent = result.delivered

    await record_stage_history(db, ProjectStageHistory(
        project_id=project_id,
        stage_id=new_stage,
        notes=notes,
        completed_by=advanced_by,
        sms_sent=sms_sent,
    ))
    logger.info("Project %s advanced to stage %s", project_id, new_stage)
    return await db.get(Project, project_id)
