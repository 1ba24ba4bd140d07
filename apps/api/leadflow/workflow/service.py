from __future__ import annotations

import logging
import random
import time
from collections.abc import Iterator
from contextlib import contextmanager

from opentelemetry.trace import Span

from leadflow.context import command_scope
from leadflow.core.config import WorkflowConfig
from leadflow.metrics import observe_command, observe_leads_archived
from leadflow.otel import command_span
from leadflow.sheets.store import Spreadsheet
from leadflow.workflow.activity_log import ActivityLog
from leadflow.workflow.archive import Archiver
from leadflow.workflow.clock import Clock, local_clock
from leadflow.workflow.leads import LeadStore
from leadflow.workflow.reports import ReportGenerator
from leadflow.workflow.schema import SchemaManager
from leadflow.workflow.schemas import ArchiveResultRead, CommandNotice, LeadRead, WeeklyReportRead

logger = logging.getLogger("leadflow.commands")

TEST_LEAD = {
    "name": "Test Lead",
    "phone": "+10000000000",
    "source": "test",
    "message": "Demo request created from the command menu",
    "assignee": "",
}


class LeadWorkflow:
    """Entry point for every lead command against one spreadsheet.

    Each command runs inside a span, emits ``command.started`` /
    ``command.finished`` log records and feeds the command metrics. Errors from
    the components propagate unchanged once they have been recorded.
    """

    def __init__(
        self,
        spreadsheet: Spreadsheet,
        config: WorkflowConfig | None = None,
        clock: Clock | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.spreadsheet = spreadsheet
        self.config = config or WorkflowConfig()
        self.clock = clock or local_clock(self.config.timezone)
        self.schema = SchemaManager(spreadsheet, self.config)
        self.activity_log = ActivityLog(self.schema, self.config, self.clock)
        self.leads = LeadStore(self.schema, self.activity_log, self.config, self.clock, rng)
        self.reports = ReportGenerator(self.schema, self.activity_log, self.config, self.clock)
        self.archiver = Archiver(self.schema, self.activity_log, self.config, self.clock)

    @contextmanager
    def _command(self, command: str) -> Iterator[Span]:
        started = time.perf_counter()
        final_status = "failed"
        with command_scope(command), command_span(command) as span:
            logger.info("command.started", extra={"command": command, "status": "running", "duration_ms": 0.0})
            try:
                yield span
                final_status = "succeeded"
            except Exception as exc:
                logger.info(
                    "command.finished",
                    extra={
                        "command": command,
                        "status": final_status,
                        "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                        "error": str(exc),
                    },
                )
                raise
            else:
                logger.info(
                    "command.finished",
                    extra={
                        "command": command,
                        "status": final_status,
                        "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                    },
                )
            finally:
                observe_command(command, final_status, time.perf_counter() - started)

    def setup_sheets(self) -> CommandNotice:
        with self._command("setup_sheets"):
            self.schema.setup_sheets()
            self.activity_log.log("SETUP", f"{self.config.leads_sheet}, {self.config.logs_sheet}")
            return CommandNotice(command="setup_sheets", message="Sheets are ready")

    def add_lead(
        self,
        name: str = "",
        phone: str = "",
        source: str | None = None,
        message: str = "",
        assignee: str = "",
    ) -> str:
        with self._command("add_lead") as span:
            lead_id = self.leads.add_lead(name=name, phone=phone, source=source, message=message, assignee=assignee)
            span.set_attribute("lead_id", lead_id)
            return lead_id

    def add_test_lead(self) -> CommandNotice:
        lead_id = self.add_lead(**TEST_LEAD)
        return CommandNotice(command="add_test_lead", message=f"Test lead added: {lead_id}", lead_id=lead_id)

    def update_lead_status(self, lead_id: str | None, new_status: str | None) -> bool:
        with self._command("update_lead_status") as span:
            span.set_attribute("lead_id", lead_id or "")
            span.set_attribute("status", new_status or "")
            return self.leads.update_status(lead_id, new_status)

    def generate_weekly_report(self) -> WeeklyReportRead:
        with self._command("generate_weekly_report"):
            return self.reports.generate_weekly_report()

    def archive_done_leads(self) -> ArchiveResultRead:
        with self._command("archive_done_leads") as span:
            result = self.archiver.archive_done_leads()
            span.set_attribute("archived", result.archived)
            observe_leads_archived(result.archived)
            return result

    def list_leads(self, status: str | None = None) -> list[LeadRead]:
        return self.leads.list_leads(status=status)

    def get_lead(self, lead_id: str) -> LeadRead:
        return self.leads.get_lead(lead_id)
