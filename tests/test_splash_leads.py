"""Tests for the splash lead endpoints."""

import pytest
from unittest.mock import AsyncMock, patch
from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError

from app.models.splash_lead import SplashLead, SplashLeadStatus
from app.services import splash_leads
from app.services.notifier import email_notifier


def _lead_body(session_id="QSLID-1700000000000-ABC123", **overrides):
    body = {
        "sessionId": session_id,
        "zipCode": "62701",
        "utilityCompany": "Ameren Illinois",
        "averageMonthlyBill": 180,
        "homeownerStatus": "yes",
        "creditScore": "650+",
        "shading": "none",
        "firstName": "Jane",
        "lastName": "Doe",
        "email": "jane@example.com",
        "phone": "(217) 555-0100",
        "tcpaConsent": True,
        "smsConsent": True,
        "isPartial": True,
        "currentStep": 11,
    }
    body.update(overrides)
    return body


async def _count(db):
    result = await db.execute(select(func.count()).select_from(SplashLead))
    return result.scalar()


@pytest.mark.asyncio
async def test_partial_save_upserts_by_session(client, db):
    first = await client.post("/api/v1/splash-leads", json=_lead_body())
    assert first.status_code == 200
    assert first.json()["message"] == "Partial lead saved"

    second = await client.post("/api/v1/splash-leads", json=_lead_body(city="Springfield", currentStep=12))
    assert second.status_code == 200
    assert second.json()["data"]["id"] == first.json()["data"]["id"]

    assert await _count(db) == 1
    lead = (await db.execute(select(SplashLead))).scalar_one()
    assert lead.city == "Springfield"
    assert lead.current_step == 12
    assert lead.consent_timestamp is not None


@pytest.mark.asyncio
async def test_new_session_creates_new_lead(client, db):
    await client.post("/api/v1/splash-leads", json=_lead_body("QSLID-1-AAAAAA"))
    await client.post("/api/v1/splash-leads", json=_lead_body("QSLID-2-BBBBBB"))
    assert await _count(db) == 2


@pytest.mark.asyncio
async def test_current_step_never_decreases(client):
    await client.post("/api/v1/splash-leads", json=_lead_body(currentStep=12))
    response = await client.post("/api/v1/splash-leads", json=_lead_body(currentStep=11))
    assert response.json()["data"]["current_step"] == 12


@pytest.mark.asyncio
async def test_completed_lead_is_not_reopened(client):
    done = await client.post("/api/v1/splash-leads", json=_lead_body(isPartial=False, currentStep=13))
    assert done.json()["message"] == "Lead submitted successfully"
    assert done.json()["data"]["completed_at"] is not None

    late = await client.post("/api/v1/splash-leads", json=_lead_body(isPartial=True, currentStep=12))
    assert late.json()["data"]["is_partial"] is False


@pytest.mark.asyncio
async def test_blank_values_do_not_overwrite(client):
    await client.post("/api/v1/splash-leads", json=_lead_body(city="Springfield"))
    response = await client.post("/api/v1/splash-leads", json=_lead_body(city="  "))
    assert response.json()["data"]["city"] == "Springfield"


@pytest.mark.asyncio
async def test_disqualified_requires_contact_fields(client, db):
    body = {"sessionId": "QSLID-3-CCCCCC", "homeownerStatus": "no", "disqualificationReason": "Not a homeowner"}
    response = await client.post("/api/v1/disqualified-leads", json=body)

    assert response.status_code == 400
    assert "firstName" in response.json()["detail"]
    assert await _count(db) == 0


@pytest.mark.asyncio
async def test_disqualified_lead_saved(client, db):
    body = _lead_body(homeownerStatus="no", disqualificationReason="Not a homeowner", currentStep=3)
    response = await client.post("/api/v1/disqualified-leads", json=body)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "disqualified"
    assert data["is_partial"] is False
    assert data["disqualification_reason"] == "Not a homeowner"

    lead = (await db.execute(select(SplashLead))).scalar_one()
    assert lead.status == SplashLeadStatus.DISQUALIFIED
    assert lead.notes == "Disqualified: Not a homeowner"


@pytest.mark.asyncio
async def test_save_database_error_returns_500(client):
    failing = AsyncMock(side_effect=SQLAlchemyError("connection lost"))
    with patch.object(splash_leads, "save_lead", failing), \
         patch.object(email_notifier, "notify", new_callable=AsyncMock) as notify:
        response = await client.post("/api/v1/splash-leads", json=_lead_body(sendEmailNotification=True))

    assert response.status_code == 500
    assert response.json()["detail"].startswith("Database error")
    failing.assert_awaited_once()
    notify.assert_not_awaited()


@pytest.mark.asyncio
async def test_disqualified_database_error_returns_500(client):
    body = _lead_body(homeownerStatus="no", disqualificationReason="Not a homeowner", currentStep=3)
    failing = AsyncMock(side_effect=SQLAlchemyError("connection lost"))
    with patch.object(splash_leads, "save_disqualified_lead", failing), \
         patch.object(email_notifier, "notify", new_callable=AsyncMock) as notify:
        response = await client.post("/api/v1/disqualified-leads", json=body)

    assert response.status_code == 500
    assert "Database error" in response.json()["detail"]
    notify.assert_not_awaited()
