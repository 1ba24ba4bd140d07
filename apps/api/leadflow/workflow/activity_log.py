from __future__ import annotations

from datetime import datetime

from leadflow.core.config import WorkflowConfig
from leadflow.workflow.clock import Clock
from leadflow.workflow.schema import SchemaManager


class ActivityLog:
    """Append-only audit trail kept in the Logs sheet."""

    def __init__(self, schema: SchemaManager, config: WorkflowConfig, clock: Clock) -> None:
        self.schema = schema
        self.config = config
        self.clock = clock

    def log(self, action: str, details: str = "", at: datetime | None = None) -> None:
        sheet = self.schema.bootstrapped_sheet(self.config.logs_sheet)
        sheet.append_row([at or self.clock(), action, details])
