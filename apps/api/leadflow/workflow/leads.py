from __future__ import annotations

import logging
import random
from datetime import date, datetime
from typing import Any

from leadflow.core.config import WorkflowConfig
from leadflow.workflow.activity_log import ActivityLog
from leadflow.workflow.clock import Clock
from leadflow.workflow.errors import NotFoundError, SchemaError, ValidationError
from leadflow.workflow.ids import generate_lead_id
from leadflow.workflow.schema import SchemaManager, header_index
from leadflow.workflow.schemas import LeadRead

logger = logging.getLogger("leadflow.workflow.leads")

_UPDATE_COLUMNS = ("ID", "Status", "LastUpdate")


def cell_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def as_datetime(value: Any) -> datetime | None:
    """Return the cell as a datetime when it holds a date/time value, else None."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    return None


class LeadStore:
    def __init__(
        self,
        schema: SchemaManager,
        activity_log: ActivityLog,
        config: WorkflowConfig,
        clock: Clock,
        rng: random.Random | None = None,
    ) -> None:
        self.schema = schema
        self.activity_log = activity_log
        self.config = config
        self.clock = clock
        self.rng = rng

    def add_lead(
        self,
        name: str = "",
        phone: str = "",
        source: str | None = None,
        message: str = "",
        assignee: str = "",
    ) -> str:
        sheet = self.schema.bootstrapped_sheet(self.config.leads_sheet)
        now = self.clock()
        lead_id = generate_lead_id(now, self.rng)
        values = {
            "ID": lead_id,
            "CreatedAt": now,
            "Name": name or "",
            "Phone": phone or "",
            "Source": source or self.config.default_source,
            "Message": message or "",
            "Status": self.config.initial_status,
            "Assignee": assignee or "",
            "LastUpdate": now,
        }
        sheet.append_row([values.get(column, "") for column in self.config.leads_headers])
        self.activity_log.log("ADD_LEAD", f"{lead_id} | {values['Name']} | {values['Phone']} | {values['Source']}")
        logger.info("lead.created", extra={"lead_id": lead_id, "status": values["Status"]})
        return lead_id

    def update_status(self, lead_id: str | None, new_status: str | None) -> bool:
        lead_id = (lead_id or "").strip()
        if not lead_id:
            raise ValidationError("Lead id is required")
        if new_status not in self.config.statuses:
            raise ValidationError(
                f"Invalid status '{new_status}'. Allowed: {', '.join(self.config.statuses)}"
            )

        sheet_name = self.config.leads_sheet
        sheet = self.schema.ensure_sheet(sheet_name)
        if sheet.last_row() < 2:
            raise SchemaError(f"Sheet '{sheet_name}' has no leads", sheet=sheet_name)

        values = sheet.get_values()
        columns = header_index(values[0], _UPDATE_COLUMNS, sheet=sheet_name)

        for offset, row in enumerate(values[1:]):
            if cell_text(row[columns["ID"]]) != lead_id:
                continue
            row_number = offset + 2
            now = self.clock()
            sheet.set_values(row_number, columns["Status"] + 1, [[new_status]])
            sheet.set_values(row_number, columns["LastUpdate"] + 1, [[now]])
            self.activity_log.log("UPDATE_STATUS", f"{lead_id} -> {new_status}")
            logger.info("lead.status_updated", extra={"lead_id": lead_id, "status": new_status})
            return True

        raise NotFoundError(lead_id)

    def list_leads(self, status: str | None = None) -> list[LeadRead]:
        sheet_name = self.config.leads_sheet
        sheet = self.schema.ensure_sheet(sheet_name)
        if sheet.last_row() < 2:
            return []

        values = sheet.get_values()
        columns = header_index(values[0], self.config.leads_headers, sheet=sheet_name)
        leads: list[LeadRead] = []
        for offset, row in enumerate(values[1:]):
            if not cell_text(row[columns["ID"]]):
                continue
            lead = self._to_read(row, columns, offset + 2)
            if status is not None and lead.status != status:
                continue
            leads.append(lead)
        return leads

    def get_lead(self, lead_id: str) -> LeadRead:
        for lead in self.list_leads():
            if lead.id == lead_id:
                return lead
        raise NotFoundError(lead_id)

    @staticmethod
    def _to_read(row: list[Any], columns: dict[str, int], row_number: int) -> LeadRead:
        return LeadRead(
            id=cell_text(row[columns["ID"]]),
            created_at=as_datetime(row[columns["CreatedAt"]]),
            name=cell_text(row[columns["Name"]]),
            phone=cell_text(row[columns["Phone"]]),
            source=cell_text(row[columns["Source"]]),
            message=cell_text(row[columns["Message"]]),
            status=cell_text(row[columns["Status"]]),
            assignee=cell_text(row[columns["Assignee"]]),
            last_update=as_datetime(row[columns["LastUpdate"]]),
            row_number=row_number,
        )
