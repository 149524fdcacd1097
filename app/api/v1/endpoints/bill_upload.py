"""Utility bill upload endpoint.

- POST /api/v1/bill-upload → Validate, record, store in Azure Blob and notify sales

Storage and email are optional integrations: their failure is reported in
``data.integration`` and never fails the upload.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models.upload import BillUpload, UploadStatus
from app.services import splash_leads
from app.services.blob_storage import blob_service, StorageNotConfigured
from app.services.notifier import email_notifier
from app.services.uploads import MAX_FILE_SIZE, bill_file_name, validate_upload

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/bill-upload")
async def upload_bill(
    request: Request,
    bill: Optional[UploadFile] = File(None),
    source: Optional[str] = Form(None),
    db: AsyncSession = Depends(get_db),
):
    """Accept a PDF/JPG/PNG electric bill up to 10MB."""
    if bill is None:
        raise HTTPException(status_code=400, detail="No file provided")

    # Read at most one byte past the limit so oversized files are never buffered whole.
    data = await bill.read(MAX_FILE_SIZE + 1)
    error = validate_upload(bill.content_type, len(data))
    if error:
        raise HTTPException(status_code=400, detail=error)

    file_name = bill_file_name(bill.filename)
    upload_ip = request.headers.get("x-forwarded-for") or request.headers.get("x-real-ip") or "unknown"

    record = BillUpload(
        file_name=file_name,
        original_name=bill.filename or file_name,
        file_type=bill.content_type,
        file_size=len(data),
        source=source or "unknown",
        upload_ip=upload_ip,
        status=UploadStatus.RECEIVED,
    )
    db.add(record)
    try:
        await db.commit()
        await db.refresh(record)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("Failed to record bill upload %s: %s", file_name, e)
        raise HTTPException(status_code=500, detail="Failed to process upload")

    file_url = None
    try:
        file_url = await blob_service.upload_bill(file_name, data, bill.content_type)
        integration = "azure_stored"
    except StorageNotConfigured:
        integration = "storage_unavailable"
    except Exception as e:
        logger.error("Bill upload %s could not be stored: %s", file_name, e)
        integration = "storage_failed"

    recent = await splash_leads.most_recent_lead(db)
    notified = await email_notifier.notify(
        "bill_uploaded",
        {
            "upload": {
                "fileName": file_name,
                "originalName": record.original_name,
                "fileType": record.file_type,
                "fileSize": record.file_size,
                "source": record.source,
                "fileUrl": file_url,
            },
            "recent_lead": splash_leads.lead_form_fields(recent) if recent else None,
        },
    )
    if not notified.delivered:
        integration += ",email_failed"

    record_id = record.id
    if file_url:
        status = UploadStatus.COMPLETED
    elif integration.startswith("storage_unavailable"):
        status = UploadStatus.RECEIVED
    else:
        status = UploadStatus.FAILED
    record.file_url = file_url
    record.processing_notes = integration
    record.status = status
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("Failed to update bill upload %s status: %s", record_id, e)

    return {
        "success": True,
        "message": "Bill uploaded successfully",
        "data": {
            "id": str(record_id),
            "fileName": file_name,
            "status": status.value,
            "integration": integration,
        },
    }
