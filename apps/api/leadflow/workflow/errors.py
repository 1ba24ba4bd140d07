from __future__ import annotations


class LeadflowError(Exception):
    """Base error for lead workflow failures."""


class ValidationError(LeadflowError):
    """Raised when a command argument is missing or not allowed."""


class SchemaError(LeadflowError):
    """Raised when a sheet lacks the rows or header columns an operation needs."""

    def __init__(self, message: str, *, sheet: str | None = None, missing: list[str] | None = None) -> None:
        self.sheet = sheet
        self.missing = sorted(set(missing or []))
        super().__init__(message)


class NotFoundError(LeadflowError):
    """Raised when a referenced lead id does not exist."""

    def __init__(self, lead_id: str) -> None:
        self.lead_id = lead_id
        super().__init__(f"Lead not found: {lead_id}")
