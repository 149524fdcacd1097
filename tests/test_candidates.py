"""Tests for CRM candidate endpoints."""

import pytest

APPLICATION = {
    "job_id": "installer-2025",
    "job_title": "Solar Installer",
    "first_name": "Ana",
    "last_name": "Ruiz",
    "email": "ana@example.com",
    "phone": "2175550111",
    "years_experience": "3-5",
}


@pytest.mark.asyncio
async def test_candidate_lifecycle(client, auth_headers):
    created = await client.post("/api/v1/crm/candidates", json=APPLICATION, headers=auth_headers)
    assert created.status_code == 201
    candidate = created.json()
    assert candidate["name"] == "Ana Ruiz"
    assert candidate["position"] == "Solar Installer"
    assert candidate["status"] == "applied"

    response = await client.put(
        f"/api/v1/crm/candidates/{candidate['id']}/status",
        json={"status": "interview"},
        headers=auth_headers,
    )
    assert response.json() == {"success": True}

    fetched = await client.get(f"/api/v1/crm/candidates/{candidate['id']}", headers=auth_headers)
    assert fetched.json()["status"] == "interview"

    listed = await client.get("/api/v1/crm/candidates", headers=auth_headers)
    assert [(c["id"], c["status"]) for c in listed.json()] == [(candidate["id"], "interview")]


@pytest.mark.asyncio
async def test_invalid_email_rejected(client, auth_headers):
    response = await client.post(
        "/api/v1/crm/candidates", json={**APPLICATION, "email": "not-an-email"}, headers=auth_headers
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_status_for_unknown_candidate(client, auth_headers):
    response = await client.put(
        "/api/v1/crm/candidates/00000000-0000-0000-0000-000000000000/status",
        json={"status": "hired"},
        headers=auth_headers,
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_invalid_status_rejected(client, auth_headers):
    created = (await client.post("/api/v1/crm/candidates", json=APPLICATION, headers=auth_headers)).json()
    response = await client.put(
        f"/api/v1/crm/candidates/{created['id']}/status", json={"status": "ghosted"}, headers=auth_headers
    )
    assert response.status_code == 422
