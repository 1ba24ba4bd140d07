from leadflow.workflow.errors import LeadflowError, NotFoundError, SchemaError, ValidationError
from leadflow.workflow.service import LeadWorkflow

__all__ = ["LeadWorkflow", "LeadflowError", "NotFoundError", "SchemaError", "ValidationError"]
