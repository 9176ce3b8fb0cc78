"""
SQLAlchemy ORM Models — Notebooks, Composition, Annotations, Knowledge Elements

Backing tables for the SQL implementations of the synthesis stores
(notecraft.db.stores). The pipeline never sees these rows; the stores map
them to the plain records in notecraft.models.composition.

Ids are opaque 36-char strings (UUIDs minted by the writers of these tables).
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


# ---------------------------------------------------------------------------
# review_notebooks
# ---------------------------------------------------------------------------

class NotebookRow(Base):
    __tablename__ = "review_notebooks"
    __table_args__ = (
        Index("idx_review_notebooks_user_id", "user_id"),
    )

    id:          Mapped[str]           = mapped_column(String(36), primary_key=True)
    user_id:     Mapped[str]           = mapped_column(String(36), nullable=False)
    title:       Mapped[str]           = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    composition: Mapped[list["CompositionRow"]] = relationship(
        back_populates="notebook",
        order_by="CompositionRow.order_index",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<NotebookRow id={self.id} user={self.user_id} title={self.title!r}>"


# ---------------------------------------------------------------------------
# notebook_composition
# ---------------------------------------------------------------------------

class CompositionRow(Base):
    """One ordered reference; (notebook_id, order_index) is unique."""

    __tablename__ = "notebook_composition"
    __table_args__ = (
        UniqueConstraint("notebook_id", "order_index", name="uq_notebook_order"),
        Index("idx_notebook_composition_element_id", "element_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    notebook_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("review_notebooks.id", ondelete="CASCADE"),
        nullable=False,
    )
    element_type:   Mapped[str]           = mapped_column(String(50), nullable=False)
    element_id:     Mapped[str]           = mapped_column(String(255), nullable=False)
    order_index:    Mapped[int]           = mapped_column(Integer, nullable=False)
    section_title:  Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    custom_content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    notebook: Mapped[NotebookRow] = relationship(back_populates="composition")


# ---------------------------------------------------------------------------
# annotations
# ---------------------------------------------------------------------------

class AnnotationRow(Base):
    __tablename__ = "annotations"
    __table_args__ = (
        Index("idx_annotations_user_id", "user_id"),
        Index("idx_annotations_document_id", "document_id"),
    )

    id:              Mapped[str]            = mapped_column(String(36), primary_key=True)
    user_id:         Mapped[str]            = mapped_column(String(36), nullable=False)
    document_id:     Mapped[str]            = mapped_column(String(36), nullable=False)
    annotation_type: Mapped[str]            = mapped_column(String(50), nullable=False)
    content:         Mapped[Optional[str]]  = mapped_column(Text, nullable=True)
    position_data:   Mapped[Optional[dict]] = mapped_column(JSONB, nullable=True)
    tags:            Mapped[list]           = mapped_column(
        JSONB, nullable=False, default=list, server_default="[]",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )


# ---------------------------------------------------------------------------
# knowledge_elements
# ---------------------------------------------------------------------------

class KnowledgeElementRow(Base):
    """Fragments written by the analysis / extraction / pedagogy agents."""

    __tablename__ = "knowledge_elements"
    __table_args__ = (
        Index("idx_knowledge_elements_document_id", "document_id"),
    )

    id:           Mapped[str] = mapped_column(String(36), primary_key=True)
    document_id:  Mapped[str] = mapped_column(String(36), nullable=False)
    agent_type:   Mapped[str] = mapped_column(String(50), nullable=False)
    element_type: Mapped[str] = mapped_column(String(50), nullable=False)
    title:        Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    body:         Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    tags:         Mapped[list] = mapped_column(
        JSONB, nullable=False, default=list, server_default="[]",
    )

    # Where in the source document the element came from
    source_section: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    source_page:    Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
