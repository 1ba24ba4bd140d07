from __future__ import annotations

import pytest

from leadflow.core.config import LEADS_HEADERS, LOGS_HEADERS, WorkflowConfig
from leadflow.sheets.store import WorkbookSpreadsheet
from leadflow.workflow.errors import SchemaError
from leadflow.workflow.schema import SchemaManager, header_index


@pytest.fixture()
def spreadsheet() -> WorkbookSpreadsheet:
    return WorkbookSpreadsheet.new()


@pytest.fixture()
def schema(spreadsheet: WorkbookSpreadsheet) -> SchemaManager:
    return SchemaManager(spreadsheet, WorkflowConfig())


def test_ensure_sheet_is_idempotent(schema: SchemaManager, spreadsheet: WorkbookSpreadsheet) -> None:
    first = schema.ensure_sheet("Leads")
    second = schema.ensure_sheet("Leads")

    assert first.name == second.name == "Leads"
    assert spreadsheet.sheet_names() == ["Leads"]


def test_ensure_headers_writes_frozen_header_on_blank_sheet(schema: SchemaManager) -> None:
    sheet = schema.ensure_sheet("Logs")

    written = schema.ensure_headers(sheet, LOGS_HEADERS)

    assert written is True
    assert sheet.get_values() == [list(LOGS_HEADERS)]
    assert sheet.is_header_frozen()


def test_ensure_headers_replaces_row_of_falsy_cells(schema: SchemaManager) -> None:
    sheet = schema.ensure_sheet("Logs")
    sheet.set_values(1, 1, [["", 0, None]])
    sheet.set_values(2, 1, [["kept", "row", "2"]])

    assert schema.ensure_headers(sheet, LOGS_HEADERS) is True
    assert sheet.get_values() == [list(LOGS_HEADERS), ["kept", "row", "2"]]


def test_ensure_headers_leaves_existing_header_untouched(schema: SchemaManager) -> None:
    sheet = schema.ensure_sheet("Leads")
    sheet.set_values(1, 1, [["ID", "Custom"]])

    assert schema.ensure_headers(sheet, LEADS_HEADERS) is False
    assert sheet.get_values() == [["ID", "Custom"]]
    assert not sheet.is_header_frozen()


def test_setup_sheets_twice_keeps_identical_headers(schema: SchemaManager, spreadsheet: WorkbookSpreadsheet) -> None:
    schema.setup_sheets()
    leads = spreadsheet.get_sheet("Leads")
    assert leads is not None
    leads.append_row(["L-20260101-AAAAAA"])
    before = {name: spreadsheet.get_sheet(name).get_values() for name in spreadsheet.sheet_names()}

    schema.setup_sheets()

    after = {name: spreadsheet.get_sheet(name).get_values() for name in spreadsheet.sheet_names()}
    assert after == before
    assert after["Leads"][0] == list(LEADS_HEADERS)
    assert after["Logs"] == [list(LOGS_HEADERS)]


def test_header_index_reports_missing_columns() -> None:
    assert header_index(["ID", "Status"], ["Status"], sheet="Leads") == {"Status": 1}

    with pytest.raises(SchemaError) as exc_info:
        header_index(["ID"], ["Status", "LastUpdate"], sheet="Leads")

    assert exc_info.value.missing == ["LastUpdate", "Status"]
    assert exc_info.value.sheet == "Leads"


def test_header_index_resolves_repeated_names_to_first_column() -> None:
    header = ["ID", "Status", "LastUpdate", "Status", None, "ID"]

    assert header_index(header, ["ID", "Status", "LastUpdate"], sheet="Leads") == {
        "ID": 0,
        "Status": 1,
        "LastUpdate": 2,
    }
