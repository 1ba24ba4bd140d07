import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

from leadflow.api.routes import router as api_router
from leadflow.core.config import get_settings
from leadflow.logging import configure_logging
from leadflow.middleware.request_context import RequestContextMiddleware
from leadflow.middleware.request_logging import RequestLoggingMiddleware
from leadflow.otel import setup_otel


configure_logging()
logger = logging.getLogger("leadflow.lifecycle")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logger.info("system.started", extra={"sheet": settings.workbook_path})
    yield


app = FastAPI(title="Leadflow", version="0.1.0", lifespan=lifespan)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(RequestContextMiddleware)
app.include_router(api_router)

setup_otel()

if not getattr(app, "_is_instrumented_by_opentelemetry", False):
    FastAPIInstrumentor().instrument_app(app)
