"""
Composition Resolver — one CompositionReference → at most one CompiledSection.

Best-effort by design: a reference whose target no longer exists resolves to
``None`` and is dropped by the caller, so one stale reference cannot fail a
whole compilation. Store faults still raise; the synthesis pipeline decides
whether to absorb them.
"""

from __future__ import annotations

import logging

from notecraft.models.composition import (
    Annotation,
    CompiledSection,
    CompositionReference,
    ElementType,
    KnowledgeElement,
)
from notecraft.schemas.notebooks import CompilationOptions
from notecraft.synthesis.formatter import (
    default_annotation_title,
    default_element_title,
    format_annotation,
    format_content,
)
from notecraft.synthesis.stores import AnnotationStore, KnowledgeElementStore

logger = logging.getLogger(__name__)


class CompositionResolver:

    def __init__(
        self,
        knowledge_store:  KnowledgeElementStore,
        annotation_store: AnnotationStore,
    ) -> None:
        self._knowledge   = knowledge_store
        self._annotations = annotation_store

    async def resolve(
        self,
        reference: CompositionReference,
        user_id:   str,
        options:   CompilationOptions,
    ) -> CompiledSection | None:
        if reference.element_type is ElementType.KNOWLEDGE_ELEMENT:
            return await self._resolve_knowledge_element(reference, options)
        if reference.element_type is ElementType.ANNOTATION:
            return await self._resolve_annotation(reference, user_id, options)
        raise ValueError(f"Unknown element type: {reference.element_type!r}")

    # ------------------------------------------------------------------
    # Knowledge elements
    # ------------------------------------------------------------------

    async def _resolve_knowledge_element(
        self,
        reference: CompositionReference,
        options:   CompilationOptions,
    ) -> CompiledSection | None:
        element = await self._knowledge.get_by_id(reference.element_id)
        if element is None:
            logger.warning("Knowledge element not found | id=%s", reference.element_id)
            return None

        title = (
            reference.section_title
            or element.title
            or default_element_title(element.element_type)
        )

        content = _with_custom_content(element.body or "", reference.custom_content)
        content = format_content(content, element.element_type, options.format_style)

        if options.include_source_references:
            content += f"\n\n*Source: {knowledge_source_reference(element)}*"

        metadata = None
        if options.include_metadata:
            metadata = {
                "agent_type":      element.agent_type,
                "element_type":    element.element_type,
                "tags":            list(element.tags),
                "source_location": {
                    "section": element.source_location.section,
                    "page":    element.source_location.page,
                },
            }

        return CompiledSection(
            title=title,
            content=content,
            element_type=ElementType.KNOWLEDGE_ELEMENT,
            source_id=reference.element_id,
            order_index=reference.order_index,
            metadata=metadata,
        )

    # ------------------------------------------------------------------
    # Annotations (ownership-scoped)
    # ------------------------------------------------------------------

    async def _resolve_annotation(
        self,
        reference: CompositionReference,
        user_id:   str,
        options:   CompilationOptions,
    ) -> CompiledSection | None:
        annotation = await self._annotations.get_by_id_and_owner(reference.element_id, user_id)
        if annotation is None:
            logger.warning(
                "Annotation not found | id=%s user=%s", reference.element_id, user_id
            )
            return None

        title = reference.section_title or default_annotation_title(annotation.annotation_type)

        content = _with_custom_content(annotation.content or "", reference.custom_content)
        content = format_annotation(content, annotation.annotation_type, options.format_style)

        if options.include_source_references:
            content += f"\n\n*Source: {annotation_source_reference(annotation)}*"

        metadata = None
        if options.include_metadata:
            metadata = {
                "annotation_type": annotation.annotation_type,
                "document_id":     annotation.document_id,
                "position_data":   annotation.position_data,
                "created_at": (
                    annotation.created_at.isoformat() if annotation.created_at else None
                ),
            }

        return CompiledSection(
            title=title,
            content=content,
            element_type=ElementType.ANNOTATION,
            source_id=reference.element_id,
            order_index=reference.order_index,
            metadata=metadata,
        )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _with_custom_content(body: str, custom_content: str | None) -> str:
    return f"{custom_content}\n\n{body}" if custom_content else body


def knowledge_source_reference(element: KnowledgeElement) -> str:
    """Built from whichever parts exist: <agent> agent[ - <section>][ (page <n>)]."""
    reference = f"{element.agent_type} agent"
    location = element.source_location
    if location.section:
        reference += f" - {location.section}"
    if location.page:
        reference += f" (page {location.page})"
    return reference


def annotation_source_reference(annotation: Annotation) -> str:
    return f"Document annotation ({annotation.annotation_type})"
