"""Tests for CRM projects and stage advancement."""

import pytest
from unittest.mock import AsyncMock, patch
from sqlalchemy import select

from app.models.project import ProjectStageHistory
from app.services.notifier import NotifyResult, sms_notifier
from app.services.projects import InvalidStage, check_stage_transition

PROJECT = {
    "customer_name": "Cole Hendrix",
    "customer_phone": "(217) 555-0142",
    "address": "12 Elm St, Fithian, IL 61844",
    "system_size_kw": "4.05",
}


async def _create(client, auth_headers, **overrides):
    body = {**PROJECT, **overrides}
    with patch.object(sms_notifier, "notify", new_callable=AsyncMock, return_value=NotifyResult(delivered=True)):
        response = await client.post("/api/v1/crm/projects", json=body, headers=auth_headers)
    assert response.status_code == 200, response.text
    return response.json()


def test_check_stage_transition():
    check_stage_transition(1, 2)
    check_stage_transition(3, 12)
    with pytest.raises(InvalidStage, match="Invalid stage number"):
        check_stage_transition(1, 13)
    with pytest.raises(InvalidStage, match="Invalid stage number"):
        check_stage_transition(1, 0)
    with pytest.raises(InvalidStage, match="already at stage 4"):
        check_stage_transition(4, 4)
    with pytest.raises(InvalidStage):
        check_stage_transition(4, 2)


@pytest.mark.asyncio
async def test_projects_require_token(client):
    response = await client.get("/api/v1/crm/projects")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_create_requires_name_and_address(client, auth_headers):
    response = await client.post("/api/v1/crm/projects", json={"customer_name": "Cole"}, headers=auth_headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "Customer name and address are required"


@pytest.mark.asyncio
async def test_create_starts_at_stage_one(client, db, auth_headers):
    with patch.object(sms_notifier, "notify", new_callable=AsyncMock, return_value=NotifyResult(delivered=True)) as notify:
        response = await client.post("/api/v1/crm/projects", json=PROJECT, headers=auth_headers)

    project = response.json()
    assert project["current_stage"] == 1
    assert project["stage_name"] == "Notice to Proceed"
    assert project["overall_status"] == "active"
    assert project["notice_to_proceed_date"] is not None

    notify.assert_awaited_once()
    event, payload = notify.await_args.args
    assert event == "project_started"
    assert payload["to"] == PROJECT["customer_phone"]
    assert "Cole Hendrix" in payload["body"]

    history = (await db.execute(select(ProjectStageHistory))).scalars().all()
    assert [(h.stage_id, h.completed_by) for h in history] == [(1, "user_crm_1")]


@pytest.mark.asyncio
async def test_advance_stage_sends_sms_and_records_history(client, auth_headers):
    project = await _create(client, auth_headers)

    with patch.object(sms_notifier, "notify", new_callable=AsyncMock, return_value=NotifyResult(delivered=True)) as notify:
        response = await client.post(
            f"/api/v1/crm/projects/{project['id']}/advance-stage",
            json={"new_stage": 3, "notes": "Permit packet sent"},
            headers=auth_headers,
        )

    assert response.json() == {"success": True, "stage": 3}
    assert "submitting your solar permits" in notify.await_args.args[1]["body"]

    detail = (await client.get(f"/api/v1/crm/projects/{project['id']}", headers=auth_headers)).json()
    assert detail["project"]["current_stage"] == 3
    assert detail["project"]["stage_name"] == "Permit Application"
    stages = [(h["stage_id"], h["sms_sent"], h["notes"]) for h in detail["stage_history"]]
    assert stages == [(1, False, None), (3, True, "Permit packet sent")]


@pytest.mark.asyncio
async def test_advance_stage_must_move_forward(client, auth_headers):
    project = await _create(client, auth_headers)
    url = f"/api/v1/crm/projects/{project['id']}/advance-stage"

    same = await client.post(url, json={"new_stage": 1}, headers=auth_headers)
    assert same.status_code == 400
    assert same.json()["detail"] == "Project is already at stage 1"

    out_of_range = await client.post(url, json={"new_stage": 13}, headers=auth_headers)
    assert out_of_range.status_code == 400


@pytest.mark.asyncio
async def test_final_stage_completes_project(client, auth_headers):
    project = await _create(client, auth_headers, customer_phone=None)

    response = await client.post(
        f"/api/v1/crm/projects/{project['id']}/advance-stage",
        json={"new_stage": 12},
        headers=auth_headers,
    )
    assert response.status_code == 200

    detail = (await client.get(f"/api/v1/crm/projects/{project['id']}", headers=auth_headers)).json()
    assert detail["project"]["overall_status"] == "complete"
    assert detail["project"]["actual_completion_date"] is not None
    assert detail["stage_history"][-1]["sms_sent"] is False


@pytest.mark.asyncio
async def test_update_and_filter_projects(client, auth_headers):
    project = await _create(client, auth_headers)

    updated = await client.put(
        f"/api/v1/crm/projects/{project['id']}",
        json={"overall_status": "on_hold", "assigned_installer": "Crew B"},
        headers=auth_headers,
    )
    assert updated.status_code == 200
    assert updated.json()["assigned_installer"] == "Crew B"
    assert updated.json()["current_stage"] == 1

    on_hold = await client.get("/api/v1/crm/projects", params={"status": "on_hold"}, headers=auth_headers)
    assert [p["id"] for p in on_hold.json()] == [project["id"]]
    active = await client.get("/api/v1/crm/projects", params={"status": "active"}, headers=auth_headers)
    assert active.json() == []


@pytest.mark.asyncio
async def test_unknown_project(client, auth_headers):
    response = await client.get("/api/v1/crm/projects/00000000-0000-0000-0000-000000000000", headers=auth_headers)
    assert response.status_code == 404
