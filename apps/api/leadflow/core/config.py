from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


LEAD_STATUSES: tuple[str, ...] = ("NEW", "IN_PROGRESS", "DONE", "CLOSED")

LEADS_HEADERS: tuple[str, ...] = (
    "ID",
    "CreatedAt",
    "Name",
    "Phone",
    "Source",
    "Message",
    "Status",
    "Assignee",
    "LastUpdate",
)

LOGS_HEADERS: tuple[str, ...] = ("Timestamp", "Action", "Details")

REPORT_HEADERS: tuple[str, ...] = ("Status", "Count (7d)", "From", "To")


@dataclass(frozen=True, slots=True)
class WorkflowConfig:
    """Sheet names, status set and time rules shared by every workflow component."""

    leads_sheet: str = "Leads"
    logs_sheet: str = "Logs"
    archive_sheet: str = "Archive"
    report_prefix: str = "Report_"
    statuses: tuple[str, ...] = LEAD_STATUSES
    leads_headers: tuple[str, ...] = LEADS_HEADERS
    logs_headers: tuple[str, ...] = LOGS_HEADERS
    timezone: str = "UTC"
    report_window_days: int = 7
    archive_after_days: int = 7
    default_source: str = "manual"

    @property
    def initial_status(self) -> str:
        return self.statuses[0]


class Settings(BaseSettings):
    app_name: str = "Leadflow"
    app_env: str = "local"
    app_debug: bool = True
    api_port: int = 8000
    workbook_path: str = "data/leads.xlsx"
    timezone: str = "UTC"
    leads_sheet: str = "Leads"
    logs_sheet: str = "Logs"
    archive_sheet: str = "Archive"
    report_prefix: str = "Report_"
    report_window_days: int = 7
    archive_after_days: int = 7
    metrics_enabled: bool = False
    otel_enabled: bool = False

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False)

    def workflow_config(self) -> WorkflowConfig:
        return WorkflowConfig(
            leads_sheet=self.leads_sheet,
            logs_sheet=self.logs_sheet,
            archive_sheet=self.archive_sheet,
            report_prefix=self.report_prefix,
            timezone=self.timezone,
            report_window_days=self.report_window_days,
            archive_after_days=self.archive_after_days,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
