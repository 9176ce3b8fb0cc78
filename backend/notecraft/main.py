"""
FastAPI Application — Entry Point

Notecraft document ingestion and notebook synthesis API.

Architecture:
  - All routes are versioned under /api/v1/
  - Pipelines are built once in the lifespan and shared via app.state
  - Caller identity comes from X-User-ID (authentication happens upstream)
  - Structured JSON error responses on all 4xx/5xx

Middleware stack (innermost → outermost):
  1. CORS: restrict to configured origins
  2. Gzip: compress responses > 1 KB
  3. Request ID + logging: X-Request-ID on every response, latency per request

Error mapping (NotecraftError subclasses → ErrorResponse):
  UnsupportedTypeError, ValidationFailure   → 400
  NotFoundError (incl. empty notebook)      → 404
  DecodeFailureError, NoTextFoundError      → 422
  OCRServiceError, RenderError              → 502
  request validation                        → 422
  anything else                             → 500
"""

from __future__ import annotations

import logging
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from notecraft.api.v1.documents import router as documents_router
from notecraft.api.v1.notebooks import router as notebooks_router
from notecraft.core.config import settings
from notecraft.core.exceptions import (
    DecodeFailureError,
    NoTextFoundError,
    NotecraftError,
    NotFoundError,
    OCRServiceError,
    RenderError,
    UnsupportedTypeError,
    ValidationFailure,
)
from notecraft.schemas.documents import ErrorDetail, ErrorResponse, IngestErrors

logger = logging.getLogger(__name__)

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)


# Most specific first; the first isinstance match wins.
ERROR_STATUS: tuple[tuple[type[NotecraftError], int], ...] = (
    (UnsupportedTypeError, status.HTTP_400_BAD_REQUEST),
    (ValidationFailure,    status.HTTP_400_BAD_REQUEST),
    (NotFoundError,        status.HTTP_404_NOT_FOUND),
    (DecodeFailureError,   status.HTTP_422_UNPROCESSABLE_ENTITY),
    (NoTextFoundError,     status.HTTP_422_UNPROCESSABLE_ENTITY),
    (OCRServiceError,      status.HTTP_502_BAD_GATEWAY),
    (RenderError,          status.HTTP_502_BAD_GATEWAY),
)


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None) or request.headers.get("X-Request-ID")


def status_for(exc: NotecraftError) -> int:
    for exc_type, code in ERROR_STATUS:
        if isinstance(exc, exc_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


# ---------------------------------------------------------------------------
# Default collaborators
# ---------------------------------------------------------------------------

def build_default_pipelines(app: FastAPI) -> None:
    """Textract OCR, SQL stores and WeasyPrint; skipped for anything already on app.state."""
    from notecraft.db.stores import (
        SQLAnnotationStore,
        SQLKnowledgeElementStore,
        SQLNotebookStore,
    )
    from notecraft.processing.ocr import TextractOCRClient
    from notecraft.services.ingestion import IngestionPipeline
    from notecraft.services.synthesis import SynthesisPipeline
    from notecraft.synthesis.engine import WeasyPrintEngine

    if getattr(app.state, "ingestion_pipeline", None) is None:
        app.state.ingestion_pipeline = IngestionPipeline(ocr_client=TextractOCRClient())

    if getattr(app.state, "synthesis_pipeline", None) is None:
        app.state.synthesis_pipeline = SynthesisPipeline(
            notebook_store=SQLNotebookStore(),
            knowledge_store=SQLKnowledgeElementStore(),
            annotation_store=SQLAnnotationStore(),
            engine=WeasyPrintEngine(),
        )


# ---------------------------------------------------------------------------
# Application lifespan: startup / shutdown hooks
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "Starting Notecraft | env=%s language=%s template=%s",
        settings.app_env, settings.default_language, settings.default_template,
    )
    build_default_pipelines(app)

    yield

    logger.info("Shutting down Notecraft")
    from notecraft.db.session import dispose_engine
    await dispose_engine()


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------

def create_app() -> FastAPI:
    app = FastAPI(
        title="Notecraft",
        description=(
            "Document ingestion (PDF, Word, PowerPoint, images with OCR fallback) "
            "and notebook synthesis to formatted text or paginated PDF."
        ),
        version="1.0.0",
        docs_url="/api/docs" if not settings.is_production else None,
        redoc_url="/api/redoc" if not settings.is_production else None,
        openapi_url="/api/openapi.json" if not settings.is_production else None,
        lifespan=lifespan,
    )

    # ----------------------------------------------------------------
    # Middleware (applied in reverse order: last added = outermost)
    # ----------------------------------------------------------------

    app.add_middleware(GZipMiddleware, minimum_size=1024)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.app_env == "development" else [],
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type", "X-Request-ID", "X-User-ID"],
        expose_headers=[
            "X-Request-ID", "Content-Disposition",
            "X-Page-Count", "X-Template", "X-Generated-At",
        ],
    )

    # ----------------------------------------------------------------
    # Request ID + structured logging middleware
    # ----------------------------------------------------------------

    @app.middleware("http")
    async def request_id_and_logging(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        start = time.perf_counter()

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start) * 1000
        response.headers["X-Request-ID"] = request_id

        logger.info(
            "HTTP %s %s %d %.1fms | user=%s",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            request.headers.get("X-User-ID", "-"),
        )
        return response

    # ----------------------------------------------------------------
    # Exception handlers: uniform structured error responses
    # ----------------------------------------------------------------

    @app.exception_handler(NotecraftError)
    async def notecraft_exception_handler(request: Request, exc: NotecraftError):
        status_code = status_for(exc)
        request_id = _request_id(request)
        log = logger.error if status_code >= 500 else logger.info
        log(
            "Request failed | path=%s status=%d error_code=%s message=%s",
            request.url.path, status_code, exc.error_code, exc.message,
        )
        body = ErrorResponse(
            error_code=exc.error_code,
            message=exc.message,
            request_id=request_id,
        )
        return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Convert Pydantic/FastAPI validation errors to structured ErrorResponse."""
        details = [
            ErrorDetail(
                field=" → ".join(str(loc) for loc in err["loc"]),
                message=err["msg"],
                code="VALIDATION_ERROR",
            )
            for err in exc.errors()
        ]
        body = ErrorResponse(
            error_code="VALIDATION_ERROR",
            message="Request validation failed.",
            details=details,
            request_id=_request_id(request),
        )
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=body.model_dump(mode="json"),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        """Catch-all for unhandled exceptions: never expose stack traces."""
        request_id = _request_id(request) or str(uuid.uuid4())
        logger.exception(
            "Unhandled exception | path=%s request_id=%s",
            request.url.path, request_id,
        )
        body = IngestErrors.internal_error(request_id)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=body.model_dump(mode="json"),
            headers={"X-Request-ID": request_id},
        )

    # ----------------------------------------------------------------
    # Routers
    # ----------------------------------------------------------------

    app.include_router(documents_router, prefix="/api/v1")
    app.include_router(notebooks_router, prefix="/api/v1")

    # ----------------------------------------------------------------
    # Health (no auth: used by load balancer)
    # ----------------------------------------------------------------

    @app.get(
        "/health",
        tags=["Operations"],
        summary="Liveness probe",
        description="Returns 200 if the process is alive. No external checks.",
    )
    async def health() -> dict:
        return {"status": "ok", "service": "notecraft-api"}

    @app.get(
        "/ready",
        tags=["Operations"],
        summary="Readiness probe",
        description="Returns 200 only if the database is reachable.",
    )
    async def readiness() -> JSONResponse:
        from notecraft.db.session import check_db_health

        db_status = await check_db_health()
        if db_status["status"] != "ok":
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"status": "not_ready", "database": db_status},
            )
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content={"status": "ready", "database": db_status},
        )

    return app


# ---------------------------------------------------------------------------
# Application instance (imported by uvicorn)
# ---------------------------------------------------------------------------

app = create_app()


# ---------------------------------------------------------------------------
# Local development entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "notecraft.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.app_env == "development",
        log_level="debug" if settings.debug else "info",
        access_log=True,
    )
