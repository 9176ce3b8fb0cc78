"""
Unit Tests — SQL content stores
═══════════════════════════════
No database: rows are transient ORM instances and the session factory is a
MagicMock whose session returns them.

Coverage targets:
  ✅ Row → record mapping (null columns, unknown composition types)
  ✅ Stores return None for missing rows
  ✅ Ownership predicates are part of the query
  ✅ Every read session is rolled back
"""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from notecraft.db.stores import (
    SQLAnnotationStore,
    SQLKnowledgeElementStore,
    SQLNotebookStore,
    annotation_from_row,
    composition_from_row,
    knowledge_element_from_row,
    notebook_from_row,
)
from notecraft.models.composition import ElementType, SourceLocation
from notecraft.models.tables import (
    AnnotationRow,
    CompositionRow,
    KnowledgeElementRow,
    NotebookRow,
)
from tests.conftest import NOTEBOOK_ID, TEST_USER_ID

UPDATED_AT = datetime(2024, 5, 2, 12, 0, tzinfo=timezone.utc)


def _composition(element_type: str, element_id: str, order_index: int, **kwargs) -> CompositionRow:
    return CompositionRow(
        id=f"c-{order_index}",
        notebook_id=NOTEBOOK_ID,
        element_type=element_type,
        element_id=element_id,
        order_index=order_index,
        **kwargs,
    )


def _session_factory(*, scalar=None, get=None):
    session = AsyncMock()
    session.scalar.return_value = scalar
    session.get.return_value = get
    factory = MagicMock()
    factory.return_value.__aenter__.return_value = session
    factory.return_value.__aexit__.return_value = False
    return factory, session


# ─────────────────────────────────────────────────────────────────────────────
# Mapping
# ─────────────────────────────────────────────────────────────────────────────

@pytest.mark.unit
@pytest.mark.synthesis
class TestRowMapping:

    def test_composition_row(self):
        ref = composition_from_row(
            _composition("annotation", "ann-1", 4, section_title="Quote", custom_content="See p.3"),
        )
        assert ref.element_type is ElementType.ANNOTATION
        assert ref.element_id == "ann-1"
        assert ref.order_index == 4
        assert ref.section_title == "Quote"
        assert ref.custom_content == "See p.3"

    def test_unknown_composition_type_is_skipped(self):
        assert composition_from_row(_composition("flashcard", "f-1", 0)) is None

    def test_notebook_row_keeps_known_references(self):
        row = NotebookRow(
            id=NOTEBOOK_ID,
            user_id=TEST_USER_ID,
            title="Physics Review",
            description=None,
            updated_at=UPDATED_AT,
            composition=[
                _composition("knowledge_element", "ke-1", 0),
                _composition("flashcard", "f-1", 1),
                _composition("annotation", "ann-1", 2),
            ],
        )

        notebook = notebook_from_row(row)

        assert notebook.id == NOTEBOOK_ID
        assert notebook.user_id == TEST_USER_ID
        assert notebook.description is None
        assert notebook.updated_at == UPDATED_AT
        assert [r.element_id for r in notebook.composition] == ["ke-1", "ann-1"]

    def test_knowledge_element_row_with_null_columns(self):
        element = knowledge_element_from_row(KnowledgeElementRow(
            id="ke-1",
            document_id="doc-1",
            agent_type="pedagogy",
            element_type="question",
            title=None,
            body=None,
            tags=None,
        ))

        assert element.title == ""
        assert element.body == ""
        assert element.tags == []
        assert element.source_location == SourceLocation()

    def test_knowledge_element_row_with_location(self):
        element = knowledge_element_from_row(KnowledgeElementRow(
            id="ke-1",
            document_id="doc-1",
            agent_type="extraction",
            element_type="formula",
            title="Ideal gas",
            body="PV = nRT",
            tags=["chemistry", "gas"],
            source_section="Gases",
            source_page=40,
        ))

        assert element.tags == ["chemistry", "gas"]
        assert element.source_location == SourceLocation(section="Gases", page=40)

    def test_annotation_row(self):
        created = datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc)
        annotation = annotation_from_row(AnnotationRow(
            id="ann-1",
            user_id=TEST_USER_ID,
            document_id="doc-1",
            annotation_type="bookmark",
            content=None,
            position_data={"page": 7},
            created_at=created,
        ))

        assert annotation.content == ""
        assert annotation.position_data == {"page": 7}
        assert annotation.created_at == created


# ─────────────────────────────────────────────────────────────────────────────
# Stores
# ─────────────────────────────────────────────────────────────────────────────

@pytest.mark.unit
@pytest.mark.synthesis
class TestSQLStores:

    async def test_notebook_store_maps_row_and_filters_by_owner(self):
        row = NotebookRow(
            id=NOTEBOOK_ID, user_id=TEST_USER_ID, title="Physics Review",
            composition=[_composition("knowledge_element", "ke-1", 0)],
        )
        factory, session = _session_factory(scalar=row)

        notebook = await SQLNotebookStore(factory).get_with_composition(NOTEBOOK_ID, TEST_USER_ID)

        assert notebook.title == "Physics Review"
        assert len(notebook.composition) == 1
        stmt = session.scalar.await_args.args[0]
        where = str(stmt.whereclause)
        assert "review_notebooks.id" in where
        assert "review_notebooks.user_id" in where
        session.rollback.assert_awaited_once()

    async def test_notebook_store_missing_row(self):
        factory, session = _session_factory(scalar=None)
        assert await SQLNotebookStore(factory).get_with_composition("nope", TEST_USER_ID) is None
        session.rollback.assert_awaited_once()

    async def test_knowledge_store_uses_primary_key_lookup(self):
        row = KnowledgeElementRow(
            id="ke-1", document_id="doc-1", agent_type="analysis", element_type="summary",
            title="Overview", body="Text", tags=[],
        )
        factory, session = _session_factory(get=row)

        element = await SQLKnowledgeElementStore(factory).get_by_id("ke-1")

        assert element.title == "Overview"
        session.get.assert_awaited_once_with(KnowledgeElementRow, "ke-1")

    async def test_knowledge_store_missing_row(self):
        factory, _ = _session_factory(get=None)
        assert await SQLKnowledgeElementStore(factory).get_by_id("ke-gone") is None

    async def test_annotation_store_filters_by_owner(self):
        row = AnnotationRow(
            id="ann-1", user_id=TEST_USER_ID, document_id="doc-1",
            annotation_type="note", content="Mine",
        )
        factory, session = _session_factory(scalar=row)

        annotation = await SQLAnnotationStore(factory).get_by_id_and_owner("ann-1", TEST_USER_ID)

        assert annotation.content == "Mine"
        where = str(session.scalar.await_args.args[0].whereclause)
        assert "annotations.id" in where
        assert "annotations.user_id" in where

    async def test_store_fault_propagates_and_session_is_rolled_back(self):
        factory, session = _session_factory()
        session.scalar.side_effect = ConnectionError("connection reset")

        with pytest.raises(ConnectionError):
            await SQLAnnotationStore(factory).get_by_id_and_owner("ann-1", TEST_USER_ID)

        session.rollback.assert_awaited_once()
