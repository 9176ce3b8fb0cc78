"""
Notebook Synthesis API Router

  GET  /api/v1/notebooks/{notebook_id}/compile         → CompiledContent (JSON)
  GET  /api/v1/notebooks/{notebook_id}/formatted-text  → markdown-style text (JSON)
  GET  /api/v1/notebooks/{notebook_id}/stats           → reference counts
  POST /api/v1/notebooks/{notebook_id}/export          → application/pdf download

Compilation options arrive as query parameters on the GET routes and as the
``compilation`` object of the export body. Every read is scoped to the
caller from X-User-ID; another user's notebook is a 404.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status

from notecraft.api.dependencies import CurrentUserID, Synthesis
from notecraft.schemas.documents import ErrorResponse
from notecraft.schemas.notebooks import (
    DEFAULT_SECTION_SEPARATOR,
    CompilationOptions,
    CompilationStatsResponse,
    CompiledContentResponse,
    ExportRequest,
    FormattedTextResponse,
    rendered_metadata_headers,
)
from notecraft.synthesis.formatter import FormatStyle

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/notebooks",
    tags=["Notebook Synthesis"],
)

_NOT_FOUND = {"model": ErrorResponse, "description": "Notebook not found for this user"}
_BAD_OPTIONS = {"model": ErrorResponse, "description": "Invalid compilation or render options"}
_NO_USER = {"model": ErrorResponse, "description": "X-User-ID header missing"}


def compilation_options(
    include_source_references: bool        = Query(True),
    format_style:              FormatStyle = Query(FormatStyle.STRUCTURED),
    section_separator:         str         = Query(DEFAULT_SECTION_SEPARATOR),
    include_metadata:          bool        = Query(True),
) -> CompilationOptions:
    return CompilationOptions(
        include_source_references=include_source_references,
        format_style=format_style,
        section_separator=section_separator,
        include_metadata=include_metadata,
    )


QueryOptions = Annotated[CompilationOptions, Depends(compilation_options)]


# ---------------------------------------------------------------------------
# GET /notebooks/{notebook_id}/compile
# ---------------------------------------------------------------------------

@router.get(
    "/{notebook_id}/compile",
    response_model=CompiledContentResponse,
    summary="Compile a notebook into ordered sections",
    responses={400: _NO_USER, 404: _NOT_FOUND, 422: _BAD_OPTIONS},
)
async def compile_notebook(
    notebook_id: str,
    user_id:     CurrentUserID,
    pipeline:    Synthesis,
    options:     QueryOptions,
) -> CompiledContentResponse:
    content = await pipeline.compile(notebook_id, user_id, options)
    return CompiledContentResponse.from_compiled(content)


# ---------------------------------------------------------------------------
# GET /notebooks/{notebook_id}/formatted-text
# ---------------------------------------------------------------------------

@router.get(
    "/{notebook_id}/formatted-text",
    response_model=FormattedTextResponse,
    summary="Compile a notebook and render it as formatted text",
    responses={400: _NO_USER, 404: _NOT_FOUND, 422: _BAD_OPTIONS},
)
async def get_formatted_text(
    notebook_id: str,
    user_id:     CurrentUserID,
    pipeline:    Synthesis,
    options:     QueryOptions,
) -> FormattedTextResponse:
    content = await pipeline.compile(notebook_id, user_id, options)
    return FormattedTextResponse(
        formatted_text=pipeline.generate_formatted_text(content, options),
        metadata=CompiledContentResponse.from_compiled(content).metadata,
    )


# ---------------------------------------------------------------------------
# GET /notebooks/{notebook_id}/stats
# ---------------------------------------------------------------------------

@router.get(
    "/{notebook_id}/stats",
    response_model=CompilationStatsResponse,
    summary="Count composition references by element type",
    responses={400: _NO_USER, 404: _NOT_FOUND},
)
async def get_compilation_stats(
    notebook_id: str,
    user_id:     CurrentUserID,
    pipeline:    Synthesis,
) -> CompilationStatsResponse:
    stats = await pipeline.get_compilation_stats(notebook_id, user_id)
    return CompilationStatsResponse.from_stats(stats)


# ---------------------------------------------------------------------------
# POST /notebooks/{notebook_id}/export
# ---------------------------------------------------------------------------

@router.post(
    "/{notebook_id}/export",
    status_code=status.HTTP_200_OK,
    summary="Export a notebook as a paginated PDF",
    response_class=Response,
    responses={
        200: {"content": {"application/pdf": {}}, "description": "Rendered document"},
        400: _NO_USER,
        404: {"model": ErrorResponse, "description": "Notebook not found or has no content"},
        422: _BAD_OPTIONS,
        502: {"model": ErrorResponse, "description": "Rendering engine failed"},
    },
)
async def export_notebook(
    notebook_id: str,
    user_id:     CurrentUserID,
    pipeline:    Synthesis,
    body:        ExportRequest | None = None,
) -> Response:
    body = body or ExportRequest()
    document = await pipeline.export_to_rendered_document(
        notebook_id,
        user_id,
        compile_options=body.compilation,
        render_options=body.render,
    )
    return Response(
        content=document.buffer,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{document.filename}"',
            **rendered_metadata_headers(document.metadata),
        },
    )
