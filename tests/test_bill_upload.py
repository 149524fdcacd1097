"""Tests for the bill upload endpoint."""

import pytest
from unittest.mock import AsyncMock, patch
from sqlalchemy import select

from app.models.upload import BillUpload, UploadStatus
from app.services.blob_storage import blob_service
from app.services.uploads import MAX_FILE_SIZE, bill_file_name, validate_upload


def test_validate_upload():
    assert validate_upload("application/pdf", 1024) is None
    assert "Invalid file type" in validate_upload("text/plain", 10)
    assert "too large" in validate_upload("image/png", MAX_FILE_SIZE + 1)


def test_bill_file_name_keeps_extension():
    name = bill_file_name("March Bill.PDF")
    assert name.startswith("bill-")
    assert name.endswith(".pdf")
    assert ":" not in name
    assert bill_file_name(None).endswith(".unknown")


@pytest.mark.asyncio
async def test_missing_file_rejected(client):
    response = await client.post("/api/v1/bill-upload", data={"source": "splash"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_oversized_file_rejected_before_storage(client, db):
    big = b"0" * (MAX_FILE_SIZE + 1024)
    with patch.object(blob_service, "upload_bill", new_callable=AsyncMock) as upload:
        response = await client.post(
            "/api/v1/bill-upload",
            files={"bill": ("bill.pdf", big, "application/pdf")},
        )

    assert response.status_code == 400
    assert "too large" in response.json()["detail"]
    upload.assert_not_awaited()
    assert (await db.execute(select(BillUpload))).scalars().all() == []


@pytest.mark.asyncio
async def test_wrong_type_rejected(client):
    response = await client.post(
        "/api/v1/bill-upload",
        files={"bill": ("bill.txt", b"hello", "text/plain")},
    )
    assert response.status_code == 400
    assert "Invalid file type" in response.json()["detail"]


@pytest.mark.asyncio
async def test_stored_bill_completes(client, db):
    url = "https://acct.blob.core.windows.net/bill-uploads/bill.png"
    with patch.object(blob_service, "upload_bill", new_callable=AsyncMock, return_value=url):
        response = await client.post(
            "/api/v1/bill-upload",
            files={"bill": ("bill.png", b"\x89PNG" + b"0" * (2 * 1024 * 1024), "image/png")},
            data={"source": "thank_you_page"},
        )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "completed"
    # Email is not configured in tests.
    assert data["integration"] == "azure_stored,email_failed"

    record = (await db.execute(select(BillUpload))).scalar_one()
    assert record.file_url == url
    assert record.source == "thank_you_page"
    assert record.status == UploadStatus.COMPLETED


@pytest.mark.asyncio
async def test_storage_unconfigured_still_succeeds(client):
    response = await client.post(
        "/api/v1/bill-upload",
        files={"bill": ("bill.jpg", b"jpegdata", "image/jpeg")},
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "received"
    assert data["integration"].startswith("storage_unavailable")


@pytest.mark.asyncio
async def test_storage_error_marks_failed(client):
    with patch.object(blob_service, "upload_bill", new_callable=AsyncMock, side_effect=RuntimeError("boom")):
        response = await client.post(
            "/api/v1/bill-upload",
            files={"bill": ("bill.pdf", b"%PDF-1.4", "application/pdf")},
        )

    assert response.status_code == 200
    assert response.json()["data"]["status"] == "failed"
    assert response.json()["data"]["integration"].startswith("storage_failed")
