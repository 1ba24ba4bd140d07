from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

from leadflow.core.config import get_settings
from leadflow.logging import configure_logging
from leadflow.sheets.store import WorkbookSpreadsheet
from leadflow.workflow.errors import LeadflowError
from leadflow.workflow.service import LeadWorkflow

logger = logging.getLogger("leadflow.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="leadflow", description="Run one lead workflow command against a workbook.")
    parser.add_argument(
        "--workbook",
        default=None,
        help="Path to the .xlsx workbook (defaults to WORKBOOK_PATH).",
    )
    subcommands = parser.add_subparsers(dest="command", required=True)
    subcommands.add_parser("setup", help="Create or validate the Leads and Logs sheets.")
    subcommands.add_parser("add-test-lead", help="Insert one demo lead.")
    subcommands.add_parser("report", help="Build the 7-day status report sheet.")
    subcommands.add_parser("archive", help="Move aged DONE leads to the Archive sheet.")

    update = subcommands.add_parser("update-status", help="Change the status of one lead.")
    update.add_argument("lead_id")
    update.add_argument("status")
    return parser


def run(workflow: LeadWorkflow, args: argparse.Namespace) -> str:
    if args.command == "setup":
        return workflow.setup_sheets().message
    if args.command == "add-test-lead":
        return workflow.add_test_lead().message
    if args.command == "report":
        report = workflow.generate_weekly_report()
        lines = [report.message]
        lines.extend(f"{row.status}: {row.count}" for row in report.rows)
        return "\n".join(lines)
    if args.command == "archive":
        return workflow.archive_done_leads().message
    workflow.update_lead_status(args.lead_id, args.status)
    return f"Lead {args.lead_id} -> {args.status}"


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(stream=sys.stderr)

    settings = get_settings()
    spreadsheet = WorkbookSpreadsheet.open(args.workbook or settings.workbook_path)
    workflow = LeadWorkflow(spreadsheet, settings.workflow_config())
    try:
        output = run(workflow, args)
    except LeadflowError as exc:
        logger.error("cli.command_failed", extra={"command": args.command, "error": str(exc)})
        print(str(exc), file=sys.stderr)
        return 1
    finally:
        spreadsheet.save()

    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
