"""Project spreadsheet import (authenticated).

- POST /api/v1/crm/import-projects → Create projects from an Excel export
- GET /api/v1/crm/import-projects → Project count and accepted formats
"""

import logging
from typing import Optional
from zipfile import BadZipFile

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.deps import get_current_user, CurrentUser
from app.models.project import Project
from app.services.project_import import SUPPORTED_FORMATS, import_projects, read_workbook
from app.services.uploads import file_extension

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/crm/import-projects")
async def import_project_file(
    file: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    if file is None:
        raise HTTPException(status_code=400, detail="No file provided")
    if file_extension(file.filename) not in SUPPORTED_FORMATS:
        raise HTTPException(status_code=400, detail=f"Unsupported file type. Use one of: {', '.join(SUPPORTED_FORMATS)}")

    data = await file.read()
    try:
        dataframe = read_workbook(data)
    except (ValueError, BadZipFile) as e:
        logger.warning("Unreadable workbook %s: %s", file.filename, e)
        raise HTTPException(status_code=400, detail="Could not read Excel file")
    if dataframe.empty:
        raise HTTPException(status_code=400, detail="No data found in Excel file")

    logger.info("Importing %d rows from %s for %s", len(dataframe.index), file.filename, user.id)
    result = await import_projects(db, dataframe)
    return {
        "total": result.total,
        "successful": result.successful,
        "failed": result.failed,
        "errors": result.errors,
    }


@router.get("/crm/import-projects")
async def import_status(
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    total = (await db.execute(select(func.count(Project.id)))).scalar() or 0
    return {
        "totalProjects": total,
        "importEndpoint": "/api/v1/crm/import-projects",
        "supportedFormats": SUPPORTED_FORMATS,
    }
