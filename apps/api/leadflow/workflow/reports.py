from __future__ import annotations

import logging
from datetime import datetime, timedelta

from leadflow.core.config import REPORT_HEADERS, WorkflowConfig
from leadflow.workflow.activity_log import ActivityLog
from leadflow.workflow.clock import Clock
from leadflow.workflow.leads import as_datetime, cell_text
from leadflow.workflow.schema import SchemaManager, header_index
from leadflow.workflow.schemas import ReportRow, WeeklyReportRead

logger = logging.getLogger("leadflow.workflow.reports")


class ReportGenerator:
    def __init__(
        self,
        schema: SchemaManager,
        activity_log: ActivityLog,
        config: WorkflowConfig,
        clock: Clock,
    ) -> None:
        self.schema = schema
        self.activity_log = activity_log
        self.config = config
        self.clock = clock

    def report_name(self, now: datetime) -> str:
        return f"{self.config.report_prefix}{now.strftime('%Y%m%d')}"

    def generate_weekly_report(self) -> WeeklyReportRead:
        leads_name = self.config.leads_sheet
        leads = self.schema.ensure_sheet(leads_name)
        if leads.last_row() < 2:
            return WeeklyReportRead(generated=False, message="No leads to report")

        # sheet name, window bounds and log timestamp share this single reading
        window_to = self.clock()
        window_from = window_to - timedelta(days=self.config.report_window_days)

        values = leads.get_values()
        columns = header_index(values[0], ("CreatedAt", "Status"), sheet=leads_name)

        # fixed statuses first so zero counts still show up; unknown ones follow in first-seen order
        counts: dict[str, int] = {status: 0 for status in self.config.statuses}
        for row in values[1:]:
            created_at = as_datetime(row[columns["CreatedAt"]])
            if created_at is None or not (window_from <= created_at <= window_to):
                continue
            status = cell_text(row[columns["Status"]]) or self.config.initial_status
            counts[status] = counts.get(status, 0) + 1

        rows = [
            ReportRow(status=status, count=count, window_from=window_from, window_to=window_to)
            for status, count in counts.items()
        ]

        name = self.report_name(window_to)
        report = self.schema.ensure_sheet(name)
        report.clear()
        report.set_values(1, 1, [list(REPORT_HEADERS)])
        report.set_values(2, 1, [[row.status, row.count, row.window_from, row.window_to] for row in rows])
        report.freeze_header()
        report.auto_resize_columns()

        self.activity_log.log(
            "REPORT_WEEKLY",
            f"{name} ({window_from.isoformat(sep=' ')} - {window_to.isoformat(sep=' ')})",
            at=window_to,
        )
        logger.info("report.generated", extra={"sheet": name, "count": sum(counts.values())})
        return WeeklyReportRead(
            generated=True,
            message=f"Report created: {name}",
            sheet_name=name,
            window_from=window_from,
            window_to=window_to,
            rows=rows,
        )
