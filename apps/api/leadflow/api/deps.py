from __future__ import annotations

from collections.abc import Generator

from fastapi import Depends

from leadflow.core.config import get_settings
from leadflow.sheets.store import Spreadsheet, WorkbookSpreadsheet
from leadflow.workflow.service import LeadWorkflow


def get_spreadsheet() -> Generator[Spreadsheet, None, None]:
    # writes are not rolled back on failure, matching a hosted spreadsheet
    spreadsheet = WorkbookSpreadsheet.open(get_settings().workbook_path)
    try:
        yield spreadsheet
    finally:
        spreadsheet.save()


def get_workflow(spreadsheet: Spreadsheet = Depends(get_spreadsheet)) -> LeadWorkflow:
    return LeadWorkflow(spreadsheet, get_settings().workflow_config())
