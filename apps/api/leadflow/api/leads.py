from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse

from leadflow.api.deps import get_workflow
from leadflow.context import get_correlation_id
from leadflow.workflow.errors import LeadflowError, NotFoundError, SchemaError, ValidationError
from leadflow.workflow.schemas import (
    ArchiveResultRead,
    CommandNotice,
    LeadCreate,
    LeadCreated,
    LeadRead,
    LeadStatusUpdate,
    LeadStatusUpdated,
    WeeklyReportRead,
)
from leadflow.workflow.service import LeadWorkflow

leads_router = APIRouter(prefix="/api", tags=["leads"])
commands_router = APIRouter(prefix="/api/commands", tags=["commands"])


@dataclass
class ErrorEnvelope:
    code: str
    message: str
    details: Any
    correlation_id: str | None


def error_response(
    request: Request,
    *,
    status_code: int,
    code: str,
    message: str,
    details: Any = None,
) -> JSONResponse:
    correlation_id = get_correlation_id() or getattr(request.state, "correlation_id", None)
    payload = ErrorEnvelope(
        code=code,
        message=message,
        details=details,
        correlation_id=correlation_id,
    )
    return JSONResponse(status_code=status_code, content=payload.__dict__)


def workflow_error_response(request: Request, exc: LeadflowError, code: str) -> JSONResponse:
    if isinstance(exc, ValidationError):
        return error_response(request, status_code=422, code=code, message=str(exc))
    if isinstance(exc, NotFoundError):
        return error_response(
            request,
            status_code=status.HTTP_404_NOT_FOUND,
            code=code,
            message=str(exc),
            details={"lead_id": exc.lead_id},
        )
    if isinstance(exc, SchemaError):
        return error_response(
            request,
            status_code=status.HTTP_409_CONFLICT,
            code=code,
            message=str(exc),
            details={"sheet": exc.sheet, "missing": exc.missing},
        )
    return error_response(request, status_code=status.HTTP_400_BAD_REQUEST, code=code, message=str(exc))


@leads_router.get("/leads", response_model=list[LeadRead])
def list_leads(
    request: Request,
    status_filter: str | None = Query(default=None, alias="status"),
    workflow: LeadWorkflow = Depends(get_workflow),
) -> list[LeadRead] | JSONResponse:
    try:
        return workflow.list_leads(status=status_filter)
    except LeadflowError as exc:
        return workflow_error_response(request, exc, "lead_list_failed")


@leads_router.post("/leads", response_model=LeadCreated, status_code=status.HTTP_201_CREATED)
def create_lead(
    request: Request,
    dto: LeadCreate,
    workflow: LeadWorkflow = Depends(get_workflow),
) -> LeadCreated | JSONResponse:
    try:
        lead_id = workflow.add_lead(
            name=dto.name,
            phone=dto.phone,
            source=dto.source,
            message=dto.message,
            assignee=dto.assignee,
        )
    except LeadflowError as exc:
        return workflow_error_response(request, exc, "lead_create_failed")
    return LeadCreated(id=lead_id)


@leads_router.get("/leads/{lead_id}", response_model=LeadRead)
def get_lead(
    request: Request,
    lead_id: str,
    workflow: LeadWorkflow = Depends(get_workflow),
) -> LeadRead | JSONResponse:
    try:
        return workflow.get_lead(lead_id)
    except LeadflowError as exc:
        return workflow_error_response(request, exc, "lead_get_failed")


@leads_router.patch("/leads/{lead_id}/status", response_model=LeadStatusUpdated)
def update_lead_status(
    request: Request,
    lead_id: str,
    dto: LeadStatusUpdate,
    workflow: LeadWorkflow = Depends(get_workflow),
) -> LeadStatusUpdated | JSONResponse:
    try:
        ok = workflow.update_lead_status(lead_id, dto.status)
    except LeadflowError as exc:
        return workflow_error_response(request, exc, "lead_status_update_failed")
    return LeadStatusUpdated(ok=ok, id=lead_id, status=dto.status)


@commands_router.post("/setup", response_model=CommandNotice)
def setup_sheets(workflow: LeadWorkflow = Depends(get_workflow)) -> CommandNotice:
    return workflow.setup_sheets()


@commands_router.post("/add-test-lead", response_model=CommandNotice)
def add_test_lead(request: Request, workflow: LeadWorkflow = Depends(get_workflow)) -> CommandNotice | JSONResponse:
    try:
        return workflow.add_test_lead()
    except LeadflowError as exc:
        return workflow_error_response(request, exc, "add_test_lead_failed")


@commands_router.post("/weekly-report", response_model=WeeklyReportRead)
def generate_weekly_report(
    request: Request,
    workflow: LeadWorkflow = Depends(get_workflow),
) -> WeeklyReportRead | JSONResponse:
    try:
        return workflow.generate_weekly_report()
    except LeadflowError as exc:
        return workflow_error_response(request, exc, "weekly_report_failed")


@commands_router.post("/archive", response_model=ArchiveResultRead)
def archive_done_leads(
    request: Request,
    workflow: LeadWorkflow = Depends(get_workflow),
) -> ArchiveResultRead | JSONResponse:
    try:
        return workflow.archive_done_leads()
    except LeadflowError as exc:
        return workflow_error_response(request, exc, "archive_failed")
