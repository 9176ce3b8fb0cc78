"""
Composed FastAPI Dependencies

The single wiring point for the request context. Pipelines are built once in
the application lifespan (notecraft.main) and stored on ``app.state``; route
handlers receive them through the aliases below and never construct
collaborators themselves.

Caller identity comes from the ``X-User-ID`` header. Authentication is
expected to happen upstream (gateway / reverse proxy); this service only
scopes reads by the id it is given.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Header, Request

from notecraft.core.exceptions import ValidationFailure
from notecraft.services.ingestion import IngestionPipeline
from notecraft.services.synthesis import SynthesisPipeline


# ---------------------------------------------------------------------------
# 1. Caller identity
# ---------------------------------------------------------------------------

async def get_user_id(
    x_user_id: Annotated[str | None, Header(alias="X-User-ID")] = None,
) -> str:
    user_id = (x_user_id or "").strip()
    if not user_id:
        raise ValidationFailure("X-User-ID header is required.")
    return user_id


# ---------------------------------------------------------------------------
# 2. Pipelines (built in lifespan, shared across requests)
# ---------------------------------------------------------------------------

def get_ingestion_pipeline(request: Request) -> IngestionPipeline:
    return request.app.state.ingestion_pipeline


def get_synthesis_pipeline(request: Request) -> SynthesisPipeline:
    return request.app.state.synthesis_pipeline


# ---------------------------------------------------------------------------
# Type aliases for cleaner route signatures
# ---------------------------------------------------------------------------

CurrentUserID = Annotated[str,               Depends(get_user_id)]
Ingestion     = Annotated[IngestionPipeline, Depends(get_ingestion_pipeline)]
Synthesis     = Annotated[SynthesisPipeline, Depends(get_synthesis_pipeline)]
