"""
Document Ingestion — Pydantic Response and Error Schemas

Covers POST /api/v1/documents/ingest:
  - Success response (200) carrying the StructuredText
  - The uniform error envelope used by every 4xx/5xx in the API
  - Error factories for cases raised by the router itself (size cap,
    missing file); pipeline failures are mapped in notecraft.main

All timestamps are ISO-8601 UTC strings.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from notecraft.core.config import settings
from notecraft.models.structured_text import StructuredText


# ---------------------------------------------------------------------------
# Success response
# ---------------------------------------------------------------------------

class SectionResponse(BaseModel):
    heading:     str
    content:     str
    subsections: list["SectionResponse"] = Field(default_factory=list)


class TextMetadataResponse(BaseModel):
    word_count:  int
    language:    str
    source:      str = Field(..., description="Extraction path, e.g. pdf-text-extraction")
    page_count:  int | None = None
    slide_count: int | None = None


class IngestResponse(BaseModel):
    """Returned by POST /documents/ingest; nothing is persisted server-side."""
    filename: str | None = None
    title:    str
    sections: list[SectionResponse]
    metadata: TextMetadataResponse

    @classmethod
    def from_structured(
        cls,
        structured: StructuredText,
        filename:   str | None = None,
    ) -> "IngestResponse":
        data = structured.to_dict()
        return cls(filename=filename, **data)


# ---------------------------------------------------------------------------
# Structured error bodies
# ---------------------------------------------------------------------------

class ErrorDetail(BaseModel):
    """Single structured error: may appear in a list."""
    field:   str | None = Field(None, description="Request field that caused the error, if applicable")
    message: str
    code:    str         = Field(..., description="Machine-readable error code for client handling")


class ErrorResponse(BaseModel):
    """
    Uniform error envelope for all 4xx/5xx responses.
    Clients should check `error_code` for programmatic handling.
    """
    error_code: str               = Field(..., description="Stable machine-readable code")
    message:    str               = Field(..., description="Human-readable summary")
    details:    list[ErrorDetail] = Field(default_factory=list)
    request_id: str | None        = Field(None, description="Trace ID for log correlation")


# ---------------------------------------------------------------------------
# Pre-defined error factories (keeps route handlers thin)
# ---------------------------------------------------------------------------

class IngestErrors:

    @staticmethod
    def file_too_large(size_bytes: int, request_id: str | None = None) -> ErrorResponse:
        limit = settings.max_upload_bytes
        return ErrorResponse(
            error_code="FILE_TOO_LARGE",
            message=f"Uploaded file exceeds the {limit // (1024 * 1024)} MB limit.",
            details=[
                ErrorDetail(
                    field="file",
                    message=f"Received {size_bytes:,} bytes; limit is {limit:,} bytes.",
                    code="FILE_TOO_LARGE",
                )
            ],
            request_id=request_id,
        )

    @staticmethod
    def missing_file_type(filename: str | None, request_id: str | None = None) -> ErrorResponse:
        return ErrorResponse(
            error_code="UNSUPPORTED_FILE_TYPE",
            message="Could not determine the file type.",
            details=[
                ErrorDetail(
                    field="file_type",
                    message=(
                        f"'{filename or ''}' has no extension; "
                        "pass file_type explicitly (pdf, docx, pptx, png …)."
                    ),
                    code="UNSUPPORTED_FILE_TYPE",
                )
            ],
            request_id=request_id,
        )

    @staticmethod
    def internal_error(request_id: str | None = None) -> ErrorResponse:
        return ErrorResponse(
            error_code="INTERNAL_ERROR",
            message="An unexpected error occurred. Our team has been notified.",
            details=[],
            request_id=request_id,
        )

