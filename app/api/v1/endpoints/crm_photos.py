"""Installation photo submissions (authenticated).

- POST /api/v1/crm/photo-submission → Upload site survey / installation / inspection photos

Photos are stored one at a time. A failed photo is reported in ``errors``
and does not stop the rest of the batch.
"""

import json
import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.deps import get_current_user, CurrentUser
from app.models.upload import PhotoSubmission, PhotoRecord, SubmissionType, UploadStatus
from app.services.blob_storage import blob_service
from app.services.uploads import MAX_FILE_SIZE, PHOTO_TYPES, photo_blob_path, validate_upload

router = APIRouter()
logger = logging.getLogger(__name__)


def _parse_json(raw: Optional[str], what: str) -> Optional[dict]:
    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        logger.warning("Ignoring malformed %s: %r", what, raw)
        return None


def _parse_timestamp(raw: Optional[str]) -> Optional[datetime]:
    if not raw:
        return None
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00")).replace(tzinfo=None)
    except ValueError:
        return None


def final_status(uploaded: int, failed: int) -> UploadStatus:
    if failed == 0:
        return UploadStatus.COMPLETED
    if uploaded == 0:
        return UploadStatus.FAILED
    return UploadStatus.PARTIALLY_COMPLETED


@router.post("/crm/photo-submission", status_code=201)
async def submit_photos(
    request: Request,
    submission_type: SubmissionType = Form(..., alias="submissionType"),
    technician: str = Form(...),
    project_id: Optional[str] = Form(None, alias="projectId"),
    notes: Optional[str] = Form(None),
    weather_conditions: Optional[str] = Form(None, alias="weatherConditions"),
    completion_percentage: int = Form(100, alias="completionPercentage"),
    timestamp: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    photos: Optional[List[UploadFile]] = File(None),
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    if not technician.strip():
        raise HTTPException(status_code=400, detail="Missing required fields: submissionType and technician are required")
    if not photos:
        raise HTTPException(status_code=400, detail="No photos provided")

    submission = PhotoSubmission(
        project_id=project_id or None,
        submission_type=submission_type,
        technician=technician,
        notes=notes,
        weather_conditions=weather_conditions,
        completion_percentage=completion_percentage,
        location=_parse_json(location, "location"),
        submitted_at=_parse_timestamp(timestamp),
        status=UploadStatus.PROCESSING,
        total_photos=len(photos),
        submitted_by=user.id,
    )
    db.add(submission)
    try:
        await db.commit()
        await db.refresh(submission)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("Failed to create photo submission: %s", e)
        raise HTTPException(status_code=500, detail=f"Database error: {e}")

    submission_id = submission.id
    logger.info("Processing %d photos for %s submission %s", len(photos), submission_type.value, submission_id)

    form = await request.form()
    uploaded: list[dict] = []
    errors: list[dict] = []

    for i, photo in enumerate(photos):
        metadata = _parse_json(form.get(f"photoMetadata_{i}"), f"metadata for photo {i + 1}")
        original_name = (metadata or {}).get("originalName") or photo.filename
        try:
            data = await photo.read(MAX_FILE_SIZE + 1)
            error = validate_upload(photo.content_type, len(data), PHOTO_TYPES)
            if error:
                raise ValueError(error)

            blob_path = photo_blob_path(submission_type.value, str(submission_id), i, photo.filename)
            url = await blob_service.upload_photo(blob_path, data, photo.content_type)

            record = PhotoRecord(
                submission_id=submission_id,
                photo_index=i + 1,
                blob_path=blob_path,
                file_url=url,
                original_name=original_name,
                file_type=photo.content_type,
                file_size=len(data),
                photo_metadata=metadata,
            )
            db.add(record)
            await db.commit()
            await db.refresh(record)
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Failed to record photo %d of submission %s: %s", i + 1, submission_id, e)
            errors.append({"photoIndex": i + 1, "fileName": photo.filename, "error": str(e)})
            continue
        except Exception as e:
            logger.error("Failed to upload photo %d of submission %s: %s", i + 1, submission_id, e)
            errors.append({"photoIndex": i + 1, "fileName": photo.filename, "error": str(e)})
            continue

        uploaded.append({
            "id": str(record.id),
            "fileName": blob_path.rsplit("/", 1)[-1],
            "originalName": original_name,
            "publicUrl": url,
            "fileSize": len(data),
        })

    status = final_status(len(uploaded), len(errors))
    try:
        submission = await db.get(PhotoSubmission, submission_id)
        submission.status = status
        submission.uploaded_photos = len(uploaded)
        submission.errors = errors or None
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("Failed to update photo submission %s status: %s", submission_id, e)

    logger.info("Photo submission %s: %d/%d photos uploaded", submission_id, len(uploaded), len(photos))
    response = {
        "success": True,
        "id": str(submission_id),
        "status": status.value,
        "photosUploaded": len(uploaded),
        "totalPhotos": len(photos),
        "photos": uploaded,
    }
    if errors:
        response["errors"] = errors
    return response
