from __future__ import annotations

import re
from collections.abc import Generator
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from leadflow.api.deps import get_spreadsheet
from leadflow.core.config import LEADS_HEADERS, get_settings
from leadflow.main import app
from leadflow.sheets.store import Spreadsheet, WorkbookSpreadsheet


@pytest.fixture()
def spreadsheet() -> WorkbookSpreadsheet:
    return WorkbookSpreadsheet.new()


@pytest.fixture()
def client(spreadsheet: WorkbookSpreadsheet) -> Generator[TestClient, None, None]:
    def override_get_spreadsheet() -> Generator[Spreadsheet, None, None]:
        yield spreadsheet

    app.dependency_overrides[get_spreadsheet] = override_get_spreadsheet
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _create_lead_payload(**overrides: str) -> dict[str, str]:
    payload = {
        "name": "Jamie Smith",
        "phone": "+15550123",
        "source": "website",
        "message": "Please call back",
        "assignee": "kim",
    }
    payload.update(overrides)
    return payload


def test_setup_command_is_idempotent(client: TestClient, spreadsheet: WorkbookSpreadsheet) -> None:
    first = client.post("/api/commands/setup")
    second = client.post("/api/commands/setup")

    assert first.status_code == 200
    assert second.json() == {"command": "setup_sheets", "message": "Sheets are ready", "lead_id": None}
    leads = spreadsheet.get_sheet("Leads")
    assert leads is not None
    assert leads.get_values() == [list(LEADS_HEADERS)]


def test_create_get_and_list_leads(client: TestClient) -> None:
    created = client.post("/api/leads", json=_create_lead_payload())
    assert created.status_code == 201
    lead_id = created.json()["id"]
    assert re.match(r"^L-\d{8}-[A-Z0-9]{6}$", lead_id)

    fetched = client.get(f"/api/leads/{lead_id}")
    assert fetched.status_code == 200
    body = fetched.json()
    assert body["name"] == "Jamie Smith"
    assert body["source"] == "website"
    assert body["status"] == "NEW"
    assert body["created_at"] == body["last_update"]

    listed = client.get("/api/leads", params={"status": "NEW"})
    assert [item["id"] for item in listed.json()] == [lead_id]
    assert client.get("/api/leads", params={"status": "DONE"}).json() == []


def test_create_lead_defaults_source_to_manual(client: TestClient) -> None:
    created = client.post("/api/leads", json={})
    assert created.status_code == 201

    fetched = client.get(f"/api/leads/{created.json()['id']}")
    assert fetched.json()["source"] == "manual"
    assert fetched.json()["name"] == ""


def test_update_status_flow_and_errors(client: TestClient, spreadsheet: WorkbookSpreadsheet) -> None:
    lead_id = client.post("/api/leads", json=_create_lead_payload()).json()["id"]

    ok = client.patch(f"/api/leads/{lead_id}/status", json={"status": "IN_PROGRESS"})
    assert ok.status_code == 200
    assert ok.json() == {"ok": True, "id": lead_id, "status": "IN_PROGRESS"}
    assert client.get(f"/api/leads/{lead_id}").json()["status"] == "IN_PROGRESS"

    leads = spreadsheet.get_sheet("Leads")
    assert leads is not None
    before = leads.get_values()

    invalid = client.patch(
        f"/api/leads/{lead_id}/status",
        json={"status": "WON"},
        headers={"X-Correlation-Id": "corr-invalid"},
    )
    assert invalid.status_code == 422
    assert invalid.json()["code"] == "lead_status_update_failed"
    assert "NEW, IN_PROGRESS, DONE, CLOSED" in invalid.json()["message"]
    assert invalid.json()["correlation_id"] == "corr-invalid"

    missing = client.patch("/api/leads/L-20990101-ZZZZZZ/status", json={"status": "DONE"})
    assert missing.status_code == 404
    assert missing.json()["details"] == {"lead_id": "L-20990101-ZZZZZZ"}

    assert leads.get_values() == before


def test_update_status_before_setup_is_schema_conflict(client: TestClient) -> None:
    response = client.patch("/api/leads/L-20260101-AAAAAA/status", json={"status": "DONE"})

    assert response.status_code == 409
    assert response.json()["details"]["sheet"] == "Leads"


def test_add_test_lead_command_returns_generated_id(client: TestClient) -> None:
    response = client.post("/api/commands/add-test-lead")

    assert response.status_code == 200
    body = response.json()
    assert body["command"] == "add_test_lead"
    assert body["lead_id"] in body["message"]
    assert client.get(f"/api/leads/{body['lead_id']}").json()["source"] == "test"


def test_weekly_report_command(client: TestClient) -> None:
    empty = client.post("/api/commands/weekly-report")
    assert empty.status_code == 200
    assert empty.json()["generated"] is False

    lead_id = client.post("/api/leads", json=_create_lead_payload()).json()["id"]
    client.patch(f"/api/leads/{lead_id}/status", json={"status": "IN_PROGRESS"})

    report = client.post("/api/commands/weekly-report")
    assert report.status_code == 200
    body = report.json()
    assert body["generated"] is True
    assert body["sheet_name"].startswith(get_settings().report_prefix)
    assert {row["status"]: row["count"] for row in body["rows"]} == {
        "NEW": 0,
        "IN_PROGRESS": 1,
        "DONE": 0,
        "CLOSED": 0,
    }


def test_archive_command(client: TestClient, spreadsheet: WorkbookSpreadsheet) -> None:
    assert client.post("/api/commands/archive").json()["message"] == "No leads to archive"

    client.post("/api/commands/setup")
    leads = spreadsheet.get_sheet("Leads")
    assert leads is not None
    aged = datetime.now().replace(microsecond=0) - timedelta(days=30)
    row = {"ID": "L-20260101-OLDONE", "CreatedAt": aged, "Status": "DONE", "Source": "manual", "LastUpdate": aged}
    leads.append_row([row.get(column, "") for column in LEADS_HEADERS])

    response = client.post("/api/commands/archive")

    assert response.status_code == 200
    assert response.json()["archived"] == 1
    assert response.json()["archived_ids"] == ["L-20260101-OLDONE"]
    assert leads.get_values() == [list(LEADS_HEADERS)]


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
