"""Tests for CRM authentication and the merged lead list."""

import uuid
from datetime import datetime

import pytest
from jose import jwt
from sqlalchemy import select

from app.models.contact import LeadStatusRecord
from app.models.splash_lead import SplashLead, SplashLeadStatus
from app.core.config import settings


async def _seed_splash(client, **overrides):
    body = {
        "sessionId": "QSLID-1700000000000-CRM001",
        "firstName": "Jane",
        "lastName": "Doe",
        "phone": "2175550100",
        "email": "jane@example.com",
        "city": "Springfield",
        "state": "IL",
        "zipCode": "62701",
        "averageMonthlyBill": 210,
        "isPartial": False,
        "currentStep": 13,
    }
    body.update(overrides)
    response = await client.post("/api/v1/splash-leads", json=body)
    return response.json()["data"]["id"]


async def _seed_contact(client):
    response = await client.post(
        "/api/v1/contact",
        json={"name": "Sam Lee", "email": "sam@example.com", "phone": "3125550199", "message": "Quote please"},
    )
    assert response.status_code == 201
    return response.json()["id"]


@pytest.mark.asyncio
async def test_leads_require_token(client):
    response = await client.get("/api/v1/crm/leads")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_bad_token_rejected(client):
    token = jwt.encode({"sub": "user_crm_1"}, "some-other-key", algorithm="HS256")
    response = await client.get("/api/v1/crm/leads", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_token_without_subject_rejected(client):
    token = jwt.encode({"email": "crm@quantumsolar.us"}, settings.AUTH_JWT_KEY, algorithm="HS256")
    response = await client.get("/api/v1/crm/leads", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_merged_lead_list(client, auth_headers):
    splash_id = await _seed_splash(client)
    contact_id = await _seed_contact(client)

    response = await client.get("/api/v1/crm/leads", headers=auth_headers)

    assert response.status_code == 200
    leads = {lead["id"]: lead for lead in response.json()}
    assert set(leads) == {splash_id, contact_id}

    splash = leads[splash_id]
    assert splash["name"] == "Jane Doe"
    assert splash["source"] == "splash"
    assert splash["electric_bill"] == "$210"
    assert splash["location"] == "Springfield, IL"
    assert splash["status"] == "new"

    contact = leads[contact_id]
    assert contact["source"] == "contact"
    assert contact["location"] == "Contact Form"

    only_contact = await client.get("/api/v1/crm/leads", params={"source": "contact"}, headers=auth_headers)
    assert [lead["id"] for lead in only_contact.json()] == [contact_id]


@pytest.mark.asyncio
async def test_location_falls_back_to_zip(client, auth_headers):
    lead_id = await _seed_splash(client, city=None, state=None)
    response = await client.get(f"/api/v1/crm/leads/{lead_id}", headers=auth_headers)
    assert response.json()["location"] == "62701"


@pytest.mark.asyncio
async def test_get_unknown_lead(client, auth_headers):
    response = await client.get("/api/v1/crm/leads/00000000-0000-0000-0000-000000000000", headers=auth_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_update_splash_status(client, db, auth_headers):
    lead_id = await _seed_splash(client)

    response = await client.put(
        f"/api/v1/crm/leads/{lead_id}/status",
        json={"status": "contacted", "source": "splash"},
        headers=auth_headers,
    )
    assert response.status_code == 200
    assert response.json() == {"success": True}

    # Setting it again updates the same status record.
    await client.put(f"/api/v1/crm/leads/{lead_id}/status", json={"status": "qualified"}, headers=auth_headers)

    records = (await db.execute(select(LeadStatusRecord))).scalars().all()
    assert len(records) == 1
    assert records[0].status == "qualified"
    assert records[0].updated_by == "user_crm_1"
    lead = (await db.execute(select(SplashLead))).scalar_one()
    assert lead.status == SplashLeadStatus.QUALIFIED

    listed = await client.get("/api/v1/crm/leads", params={"status": "qualified"}, headers=auth_headers)
    assert [lead["id"] for lead in listed.json()] == [lead_id]


@pytest.mark.asyncio
async def test_update_contact_status(client, auth_headers):
    contact_id = await _seed_contact(client)
    response = await client.put(
        f"/api/v1/crm/leads/{contact_id}/status", json={"status": "closed"}, headers=auth_headers
    )
    assert response.status_code == 200

    lead = await client.get(f"/api/v1/crm/leads/{contact_id}", headers=auth_headers)
    assert lead.json()["status"] == "closed"


@pytest.mark.asyncio
async def test_update_status_validation(client, auth_headers):
    lead_id = await _seed_splash(client)

    invalid = await client.put(f"/api/v1/crm/leads/{lead_id}/status", json={"status": "won"}, headers=auth_headers)
    assert invalid.status_code == 400

    wrong_source = await client.put(
        f"/api/v1/crm/leads/{lead_id}/status",
        json={"status": "contacted", "source": "contact"},
        headers=auth_headers,
    )
    assert wrong_source.status_code == 404


@pytest.mark.asyncio
async def test_status_filter_applies_before_limit(client, db, auth_headers):
    ids = [await _seed_splash(client, sessionId=f"QSLID-1700000000000-LIM00{n}") for n in range(3)]
    leads = (await db.execute(select(SplashLead))).scalars().all()
    for lead in leads:
        lead.created_at = datetime(2025, 1, 1 + ids.index(str(lead.id)))
    await db.commit()
    oldest, middle, newest = ids

    await client.put(f"/api/v1/crm/leads/{oldest}/status", json={"status": "qualified"}, headers=auth_headers)
    # A status record wins over the status stored on the lead row.
    db.add(LeadStatusRecord(lead_id=uuid.UUID(newest), source="splash", status="contacted"))
    await db.commit()

    qualified = await client.get(
        "/api/v1/crm/leads", params={"status": "qualified", "limit": 1}, headers=auth_headers
    )
    assert [lead["id"] for lead in qualified.json()] == [oldest]

    new = await client.get("/api/v1/crm/leads", params={"status": "new", "limit": 1}, headers=auth_headers)
    assert [lead["id"] for lead in new.json()] == [middle]

    contacted = await client.get("/api/v1/crm/leads", params={"status": "contacted"}, headers=auth_headers)
    assert [(lead["id"], lead["status"]) for lead in contacted.json()] == [(newest, "contacted")]


@pytest.mark.asyncio
async def test_list_rejects_unknown_status(client, auth_headers):
    response = await client.get("/api/v1/crm/leads", params={"status": "won"}, headers=auth_headers)
    assert response.status_code == 400
