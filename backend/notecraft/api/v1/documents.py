"""
Document Ingestion API Router
POST /api/v1/documents/ingest

Request lifecycle:
  ┌─────────────────────────────────────────────────────────┐
  │ 1. Caller identity from X-User-ID                       │
  │ 2. Size guard (Content-Length, then actual bytes) → 413  │
  │ 3. Declared type = file_type form field, else the        │
  │    filename extension                                    │
  │ 4. IngestionPipeline.process → StructuredText            │
  │ 5. 200 with the StructuredText (nothing is stored)      │
  └─────────────────────────────────────────────────────────┘

Pipeline failures (unsupported type, decode failure, no text, OCR outage)
propagate as typed exceptions and are mapped to the ErrorResponse envelope
by the handlers registered in notecraft.main.
"""

from __future__ import annotations

import logging
import os
import uuid
from typing import Optional

from fastapi import APIRouter, File, Form, Request, UploadFile, status
from fastapi.responses import JSONResponse

from notecraft.api.dependencies import CurrentUserID, Ingestion
from notecraft.core.config import settings
from notecraft.schemas.documents import ErrorResponse, IngestErrors, IngestResponse

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/documents",
    tags=["Document Ingestion"],
)

# Multipart framing overhead tolerated on top of max_upload_bytes
_FORM_OVERHEAD_BYTES = 4096


# ---------------------------------------------------------------------------
# POST /documents/ingest
# ---------------------------------------------------------------------------

@router.post(
    "/ingest",
    response_model=IngestResponse,
    status_code=status.HTTP_200_OK,
    summary="Extract structured text from a document",
    description=(
        "Accepts PDF, Word, PowerPoint and image files. "
        "PDFs without a text layer (or with use_ocr=true) are sent to OCR."
    ),
    responses={
        200: {"model": IngestResponse, "description": "Structured text extracted"},
        400: {"model": ErrorResponse, "description": "Unsupported file type"},
        413: {"model": ErrorResponse, "description": "File exceeds the upload limit"},
        422: {"model": ErrorResponse, "description": "Corrupt file or no text found"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
        502: {"model": ErrorResponse, "description": "OCR service unavailable"},
    },
)
async def ingest_document(
    request:   Request,
    user_id:   CurrentUserID,
    pipeline:  Ingestion,
    file:      UploadFile    = File(..., description="Document file"),
    file_type: Optional[str] = Form(None, description="Declared type; defaults to the filename extension"),
    use_ocr:   bool          = Form(False, description="Force OCR for PDFs"),
) -> JSONResponse:
    request_id = getattr(request.state, "request_id", None) or str(uuid.uuid4())
    limit = settings.max_upload_bytes

    # Guard: reject oversized requests before reading body
    content_length = request.headers.get("content-length")
    if content_length and content_length.isdigit() and int(content_length) > limit + _FORM_OVERHEAD_BYTES:
        return _too_large(int(content_length), request_id)

    data = await file.read()
    if len(data) > limit:
        return _too_large(len(data), request_id)

    declared_type = file_type or _extension(file.filename)
    if not declared_type:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=IngestErrors.missing_file_type(file.filename, request_id).model_dump(mode="json"),
            headers={"X-Request-ID": request_id},
        )

    logger.info(
        "Ingest request | user=%s file=%s type=%s size=%d request_id=%s",
        user_id, file.filename, declared_type, len(data), request_id,
    )

    structured = await pipeline.process(data, declared_type, use_ocr=use_ocr)

    result = IngestResponse.from_structured(structured, filename=file.filename)
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=result.model_dump(mode="json"),
        headers={"X-Request-ID": request_id},
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _extension(filename: str | None) -> str:
    return os.path.splitext(filename or "")[1].lstrip(".").lower()


def _too_large(size_bytes: int, request_id: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
        content=IngestErrors.file_too_large(size_bytes, request_id).model_dump(mode="json"),
        headers={"X-Request-ID": request_id},
    )
