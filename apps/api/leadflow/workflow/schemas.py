from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class LeadCreate(BaseModel):
    name: str = ""
    phone: str = ""
    source: str = "manual"
    message: str = ""
    assignee: str = ""


class LeadCreated(BaseModel):
    id: str


class LeadStatusUpdate(BaseModel):
    status: str = Field(min_length=1)


class LeadStatusUpdated(BaseModel):
    ok: bool
    id: str
    status: str


class LeadRead(BaseModel):
    id: str
    created_at: datetime | None
    name: str
    phone: str
    source: str
    message: str
    status: str
    assignee: str
    last_update: datetime | None
    row_number: int


class CommandNotice(BaseModel):
    command: str
    message: str
    lead_id: str | None = None


class ReportRow(BaseModel):
    status: str
    count: int
    window_from: datetime
    window_to: datetime


class WeeklyReportRead(BaseModel):
    generated: bool
    message: str
    sheet_name: str | None = None
    window_from: datetime | None = None
    window_to: datetime | None = None
    rows: list[ReportRow] = Field(default_factory=list)

    def counts(self) -> dict[str, int]:
        return {row.status: row.count for row in self.rows}


class ArchiveResultRead(BaseModel):
    archived: int
    message: str
    cutoff: datetime | None = None
    archived_ids: list[str] = Field(default_factory=list)
