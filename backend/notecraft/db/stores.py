"""
SQL implementations of the synthesis content stores.

Each call opens its own read session (notecraft.db.session.read_session) so
the stores are safe to share across concurrent compilations. Ownership is
enforced in the WHERE clause: a notebook or annotation that belongs to
another user is indistinguishable from one that does not exist.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from notecraft.db.session import read_session
from notecraft.models.composition import (
    Annotation,
    CompositionReference,
    ElementType,
    KnowledgeElement,
    Notebook,
    SourceLocation,
)
from notecraft.models.tables import (
    AnnotationRow,
    CompositionRow,
    KnowledgeElementRow,
    NotebookRow,
)
from notecraft.synthesis.stores import AnnotationStore, KnowledgeElementStore, NotebookStore

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Row → record mapping
# ---------------------------------------------------------------------------

def composition_from_row(row: CompositionRow) -> CompositionReference | None:
    try:
        element_type = ElementType(row.element_type)
    except ValueError:
        logger.warning(
            "Skipping composition entry with unknown element type | notebook=%s type=%s",
            row.notebook_id, row.element_type,
        )
        return None
    return CompositionReference(
        element_type=element_type,
        element_id=row.element_id,
        order_index=row.order_index,
        section_title=row.section_title,
        custom_content=row.custom_content,
    )


def notebook_from_row(row: NotebookRow) -> Notebook:
    references = [composition_from_row(c) for c in row.composition]
    return Notebook(
        id=row.id,
        user_id=row.user_id,
        title=row.title,
        description=row.description,
        updated_at=row.updated_at,
        composition=[r for r in references if r is not None],
    )


def knowledge_element_from_row(row: KnowledgeElementRow) -> KnowledgeElement:
    return KnowledgeElement(
        id=row.id,
        document_id=row.document_id,
        agent_type=row.agent_type,
        element_type=row.element_type,
        title=row.title or "",
        body=row.body or "",
        tags=list(row.tags or []),
        source_location=SourceLocation(section=row.source_section, page=row.source_page),
    )


def annotation_from_row(row: AnnotationRow) -> Annotation:
    return Annotation(
        id=row.id,
        user_id=row.user_id,
        document_id=row.document_id,
        annotation_type=row.annotation_type,
        content=row.content or "",
        position_data=row.position_data,
        created_at=row.created_at,
    )


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------

class _SQLStore:

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None) -> None:
        self._session_factory = session_factory


class SQLNotebookStore(_SQLStore, NotebookStore):

    async def get_with_composition(self, notebook_id: str, user_id: str) -> Notebook | None:
        stmt = (
            select(NotebookRow)
            .options(selectinload(NotebookRow.composition))
            .where(NotebookRow.id == notebook_id, NotebookRow.user_id == user_id)
        )
        async with read_session(self._session_factory) as session:
            row = await session.scalar(stmt)
            return notebook_from_row(row) if row is not None else None


class SQLKnowledgeElementStore(_SQLStore, KnowledgeElementStore):

    async def get_by_id(self, element_id: str) -> KnowledgeElement | None:
        async with read_session(self._session_factory) as session:
            row = await session.get(KnowledgeElementRow, element_id)
            return knowledge_element_from_row(row) if row is not None else None


class SQLAnnotationStore(_SQLStore, AnnotationStore):

    async def get_by_id_and_owner(self, element_id: str, user_id: str) -> Annotation | None:
        stmt = select(AnnotationRow).where(
            AnnotationRow.id == element_id,
            AnnotationRow.user_id == user_id,
        )
        async with read_session(self._session_factory) as session:
            row = await session.scalar(stmt)
            return annotation_from_row(row) if row is not None else None
