"""
Notebook composition — records read from the external stores and the
compiled/rendered values produced by the synthesis pipeline.

Store records (KnowledgeElement, Annotation, Notebook) are plain value
objects; the stores themselves live behind the ABCs in
notecraft.synthesis.stores.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class ElementType(str, Enum):
    KNOWLEDGE_ELEMENT = "knowledge_element"
    ANNOTATION        = "annotation"


# ---------------------------------------------------------------------------
# Store records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CompositionReference:
    """
    Ordered pointer from a notebook to one content item.
    order_index is unique per notebook (enforced by the owning store) and is
    the rendering sort key.
    """
    element_type:   ElementType
    element_id:     str
    order_index:    int
    section_title:  str | None = None
    custom_content: str | None = None


@dataclass(frozen=True)
class SourceLocation:
    section: str | None = None
    page:    int | None = None


@dataclass(frozen=True)
class KnowledgeElement:
    """A fragment produced by one of the extraction agents (summary, definition …)."""
    id:              str
    document_id:     str
    agent_type:      str           # analysis | extraction | pedagogy
    element_type:    str           # summary | definition | formula | …
    title:           str = ""
    body:            str = ""
    tags:            list[str] = field(default_factory=list)
    source_location: SourceLocation = field(default_factory=SourceLocation)


@dataclass(frozen=True)
class Annotation:
    id:              str
    user_id:         str
    document_id:     str
    annotation_type: str           # highlight | note | bookmark
    content:         str = ""
    position_data:   dict[str, Any] | None = None
    created_at:      datetime | None = None


@dataclass(frozen=True)
class Notebook:
    id:          str
    user_id:     str
    title:       str
    description: str | None = None
    updated_at:  datetime | None = None
    composition: list[CompositionReference] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Compiled output
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CompiledSection:
    title:        str
    content:      str
    element_type: ElementType
    source_id:    str
    order_index:  int
    metadata:     dict[str, Any] | None = None


@dataclass(frozen=True)
class CompilationMetadata:
    total_elements: int
    compiled_at:    datetime
    user_id:        str
    notebook_id:    str


@dataclass(frozen=True)
class CompiledContent:
    """Recomputed on every compile request; never persisted."""
    title:       str
    sections:    list[CompiledSection]
    metadata:    CompilationMetadata
    description: str | None = None


@dataclass(frozen=True)
class CompilationStats:
    total_elements: int
    element_types:  dict[str, int]
    last_compiled:  datetime | None = None


@dataclass(frozen=True)
class RenderedDocumentMetadata:
    title:        str
    page_count:   int             # 0 when the engine does not report it
    generated_at: datetime
    template:     str
    file_size:    int


@dataclass(frozen=True)
class RenderedDocument:
    buffer:   bytes
    filename: str
    metadata: RenderedDocumentMetadata
