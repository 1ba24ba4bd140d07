from __future__ import annotations

import logging
from datetime import timedelta

from leadflow.core.config import WorkflowConfig
from leadflow.workflow.activity_log import ActivityLog
from leadflow.workflow.clock import Clock
from leadflow.workflow.leads import as_datetime, cell_text
from leadflow.workflow.schema import SchemaManager, header_index
from leadflow.workflow.schemas import ArchiveResultRead

logger = logging.getLogger("leadflow.workflow.archive")

ARCHIVE_STATUS = "DONE"


class Archiver:
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

    def archive_done_leads(self) -> ArchiveResultRead:
        leads_name = self.config.leads_sheet
        leads = self.schema.ensure_sheet(leads_name)
        if leads.last_row() < 2:
            return ArchiveResultRead(archived=0, message="No leads to archive")

        values = leads.get_values()
        header = values[0]
        archive = self.schema.ensure_sheet(self.config.archive_sheet)
        self.schema.ensure_headers(archive, [cell_text(name) for name in header])

        columns = header_index(header, ("Status", "CreatedAt"), sheet=leads_name)
        now = self.clock()
        cutoff = now - timedelta(days=self.config.archive_after_days)

        selected: list[tuple[int, list[object]]] = []
        for offset, row in enumerate(values[1:]):
            if cell_text(row[columns["Status"]]) != ARCHIVE_STATUS:
                continue
            created_at = as_datetime(row[columns["CreatedAt"]])
            if created_at is None or not created_at < cutoff:
                continue
            selected.append((offset + 2, row))

        if not selected:
            return ArchiveResultRead(archived=0, message="No DONE leads older than cutoff", cutoff=cutoff)

        archive.set_values(archive.last_row() + 1, 1, [row for _, row in selected])
        # bottom-up so pending row numbers do not shift
        for row_number, _ in sorted(selected, key=lambda item: item[0], reverse=True):
            leads.delete_row(row_number)

        id_position = header.index("ID") if "ID" in header else None
        archived_ids = [cell_text(row[id_position]) for _, row in selected] if id_position is not None else []

        self.activity_log.log(
            "ARCHIVE_DONE",
            f"Archived {len(selected)} leads older than {cutoff.isoformat(sep=' ')}",
            at=now,
        )
        logger.info("leads.archived", extra={"sheet": self.config.archive_sheet, "count": len(selected)})
        return ArchiveResultRead(
            archived=len(selected),
            message=f"Archived {len(selected)} leads",
            cutoff=cutoff,
            archived_ids=archived_ids,
        )
