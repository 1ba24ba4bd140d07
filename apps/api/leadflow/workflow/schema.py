from __future__ import annotations

import logging
from collections.abc import Sequence

from leadflow.core.config import WorkflowConfig
from leadflow.sheets.store import Sheet, Spreadsheet
from leadflow.workflow.errors import SchemaError

logger = logging.getLogger("leadflow.workflow.schema")


def header_index(header: Sequence[object], required: Sequence[str], *, sheet: str) -> dict[str, int]:
    """Map each required column name to its 0-based position in ``header``.

    A repeated header name resolves to its first column.
    """
    positions: dict[str, int] = {}
    for idx, name in enumerate(header):
        if name not in (None, ""):
            positions.setdefault(str(name), idx)
    missing = [name for name in required if name not in positions]
    if missing:
        raise SchemaError(
            f"Sheet '{sheet}' is missing required columns: {', '.join(missing)}. Run setup first.",
            sheet=sheet,
            missing=missing,
        )
    return {name: positions[name] for name in required}


class SchemaManager:
    def __init__(self, spreadsheet: Spreadsheet, config: WorkflowConfig) -> None:
        self.spreadsheet = spreadsheet
        self.config = config

    def ensure_sheet(self, name: str) -> Sheet:
        sheet = self.spreadsheet.get_sheet(name)
        if sheet is None:
            sheet = self.spreadsheet.insert_sheet(name)
            logger.info("sheet.created", extra={"sheet": name})
        return sheet

    def ensure_headers(self, sheet: Sheet, columns: Sequence[str]) -> bool:
        """Write ``columns`` as a frozen header when row 1 is absent or blank.

        An existing header is left alone even when it differs from ``columns``;
        drift is not repaired here. Returns True when the header was written.
        """
        if sheet.last_row() > 0 and sheet.last_column() > 0:
            first_row = sheet.get_range(1, 1, 1, sheet.last_column())[0]
            if any(first_row):
                return False

        sheet.set_values(1, 1, [list(columns)])
        sheet.freeze_header()
        sheet.auto_resize_columns()
        logger.info("sheet.headers_written", extra={"sheet": sheet.name, "count": len(columns)})
        return True

    def setup_sheets(self) -> None:
        leads = self.ensure_sheet(self.config.leads_sheet)
        self.ensure_headers(leads, self.config.leads_headers)
        logs = self.ensure_sheet(self.config.logs_sheet)
        self.ensure_headers(logs, self.config.logs_headers)

    def bootstrapped_sheet(self, name: str) -> Sheet:
        """Return sheet ``name``, running the full setup first when it is empty."""
        sheet = self.ensure_sheet(name)
        if sheet.last_row() == 0:
            self.setup_sheets()
        return sheet
