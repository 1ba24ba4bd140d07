from __future__ import annotations

import logging
from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from leadflow.api.deps import get_spreadsheet
from leadflow.core.config import get_settings
from leadflow.main import app
from leadflow.sheets.store import Spreadsheet, WorkbookSpreadsheet


@pytest.fixture(autouse=True)
def clear_settings() -> Generator[None, None, None]:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def client() -> Generator[TestClient, None, None]:
    spreadsheet = WorkbookSpreadsheet.new()

    def override_get_spreadsheet() -> Generator[Spreadsheet, None, None]:
        yield spreadsheet

    app.dependency_overrides[get_spreadsheet] = override_get_spreadsheet
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def test_generated_correlation_id_returned_in_header_and_error_envelope(client: TestClient) -> None:
    client.post("/api/commands/add-test-lead")
    response = client.patch("/api/leads/L-20260101-ABCDEF/status", json={"status": "DONE"})
    assert response.status_code == 404
    header_value = response.headers.get("x-correlation-id")
    assert header_value
    assert response.json()["correlation_id"] == header_value


def test_correlation_id_respected_when_provided(client: TestClient) -> None:
    response = client.patch(
        "/api/leads/L-20260101-ABCDEF/status",
        json={"status": "PAUSED"},
        headers={"X-Correlation-Id": "abc-123"},
    )
    assert response.status_code == 422
    assert response.headers.get("x-correlation-id") == "abc-123"
    assert response.json()["correlation_id"] == "abc-123"


def test_command_logs_carry_request_correlation_id(client: TestClient, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO)

    response = client.post("/api/commands/add-test-lead", headers={"X-Correlation-Id": "corr-cmd-1"})
    assert response.status_code == 200

    finished = [
        record
        for record in caplog.records
        if record.name == "leadflow.commands" and record.getMessage() == "command.finished"
    ]
    assert finished
    assert finished[-1].correlation_id == "corr-cmd-1"
    assert finished[-1].command == "add_lead"
    assert finished[-1].status == "succeeded"
