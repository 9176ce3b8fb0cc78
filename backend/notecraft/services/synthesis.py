"""
Notebook Synthesis Pipeline

  compile(notebook_id, user_id, options)
    1. Load the notebook + composition (owner-scoped); missing → NotebookNotFoundError
    2. Resolve every reference concurrently, bounded by a semaphore
         missing target  → dropped (resolver returns None)
         resolver raises → logged at WARNING, dropped
    3. Sort by order_index, wrap with compilation metadata

  generate_formatted_text(content, options)   pure, see DocumentRenderer
  get_compilation_stats(notebook_id, user_id) counts references, no resolution
  export_to_rendered_document(...)            compile → render (scoped engine session)

Stateless: every call recomputes from the stores; nothing is persisted.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Mapping

from notecraft.core.config import settings
from notecraft.core.exceptions import EmptyNotebookError, NotebookNotFoundError
from notecraft.models.composition import (
    CompilationMetadata,
    CompilationStats,
    CompiledContent,
    CompiledSection,
    CompositionReference,
    RenderedDocument,
)
from notecraft.schemas.notebooks import CompilationOptions, RenderOptions, coerce_options
from notecraft.synthesis.engine import BaseRenderingEngine
from notecraft.synthesis.renderer import DocumentRenderer
from notecraft.synthesis.resolver import CompositionResolver
from notecraft.synthesis.stores import AnnotationStore, KnowledgeElementStore, NotebookStore

logger = logging.getLogger(__name__)

OptionsInput = Mapping[str, Any] | None


class SynthesisPipeline:

    def __init__(
        self,
        notebook_store:   NotebookStore,
        knowledge_store:  KnowledgeElementStore,
        annotation_store: AnnotationStore,
        engine:           BaseRenderingEngine,
        renderer:         DocumentRenderer | None = None,
        concurrency:      int | None = None,
    ) -> None:
        self._notebooks   = notebook_store
        self._resolver    = CompositionResolver(knowledge_store, annotation_store)
        self._engine      = engine
        self._renderer    = renderer or DocumentRenderer()
        self._concurrency = max(1, concurrency or settings.composition_concurrency)

    # ------------------------------------------------------------------
    # Compile
    # ------------------------------------------------------------------

    async def compile(
        self,
        notebook_id: str,
        user_id:     str,
        options:     CompilationOptions | OptionsInput = None,
    ) -> CompiledContent:
        options = coerce_options(CompilationOptions, options)
        t0 = time.monotonic()

        notebook = await self._notebooks.get_with_composition(notebook_id, user_id)
        if notebook is None:
            raise NotebookNotFoundError(notebook_id)

        semaphore = asyncio.Semaphore(self._concurrency)

        async def _bounded(reference: CompositionReference) -> CompiledSection | None:
            async with semaphore:
                return await self._resolve_safely(reference, user_id, options)

        resolved = await asyncio.gather(*(_bounded(ref) for ref in notebook.composition))
        sections = sorted(
            (section for section in resolved if section is not None),
            key=lambda section: section.order_index,
        )

        logger.info(
            "Notebook compiled | notebook=%s user=%s references=%d sections=%d elapsed_ms=%.0f",
            notebook_id,
            user_id,
            len(notebook.composition),
            len(sections),
            (time.monotonic() - t0) * 1000,
        )

        return CompiledContent(
            title=notebook.title,
            description=notebook.description,
            sections=sections,
            metadata=CompilationMetadata(
                total_elements=len(sections),
                compiled_at=datetime.now(timezone.utc),
                user_id=user_id,
                notebook_id=notebook_id,
            ),
        )

    async def _resolve_safely(
        self,
        reference: CompositionReference,
        user_id:   str,
        options:   CompilationOptions,
    ) -> CompiledSection | None:
        try:
            return await self._resolver.resolve(reference, user_id, options)
        except Exception as exc:
            logger.warning(
                "Failed to resolve composition reference | type=%s id=%s error=%s",
                reference.element_type.value,
                reference.element_id,
                exc,
                exc_info=True,
            )
            return None

    # ------------------------------------------------------------------
    # Text / stats
    # ------------------------------------------------------------------

    def generate_formatted_text(
        self,
        content: CompiledContent,
        options: CompilationOptions | OptionsInput = None,
    ) -> str:
        return self._renderer.generate_formatted_text(
            content, coerce_options(CompilationOptions, options)
        )

    async def get_compilation_stats(self, notebook_id: str, user_id: str) -> CompilationStats:
        notebook = await self._notebooks.get_with_composition(notebook_id, user_id)
        if notebook is None:
            raise NotebookNotFoundError(notebook_id)

        counts = Counter(ref.element_type.value for ref in notebook.composition)
        return CompilationStats(
            total_elements=len(notebook.composition),
            element_types=dict(counts),
            last_compiled=notebook.updated_at,
        )

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    async def export_to_rendered_document(
        self,
        notebook_id:     str,
        user_id:         str,
        compile_options: CompilationOptions | OptionsInput = None,
        render_options:  RenderOptions | OptionsInput = None,
    ) -> RenderedDocument:
        compile_options = coerce_options(CompilationOptions, compile_options)
        render_options  = coerce_options(RenderOptions, render_options)

        content = await self.compile(notebook_id, user_id, compile_options)
        if not content.sections:
            raise EmptyNotebookError(notebook_id)

        document = await self._renderer.render(content, render_options, self._engine)
        logger.info(
            "Notebook exported | notebook=%s user=%s file=%s size=%d",
            notebook_id, user_id, document.filename, document.metadata.file_size,
        )
        return document
