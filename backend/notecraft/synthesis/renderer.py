"""
Document Renderer  —  CompiledContent → formatted text / paginated PDF
══════════════════════════════════════════════════════════════════════

Formatted text
──────────────
  # <title>

  <description>                                  (when present)

  *Compiled on <M/D/YYYY> with <n> elements*     (when include_metadata)

  ## <section title>

  <section content>
  <separator>                                    (between sections only)
  ...

Paginated document
──────────────────
  CompiledContent ──► build_html (Jinja2 layout + template CSS)
                  ──► engine.session() ──► RenderSession.render
                  ──► RenderedDocument(buffer, filename, metadata)

The engine session is scoped to one render call and released on every exit
path by BaseRenderingEngine.session().
"""

from __future__ import annotations

import logging
import re
import time
from datetime import date, datetime, timezone

from notecraft.models.composition import (
    CompiledContent,
    RenderedDocument,
    RenderedDocumentMetadata,
)
from notecraft.schemas.notebooks import CompilationOptions, RenderOptions
from notecraft.synthesis.engine import BaseRenderingEngine, PageSetup
from notecraft.synthesis.markup import markup_to_html
from notecraft.synthesis.templates import render_css, render_layout

logger = logging.getLogger(__name__)

_FILENAME_UNSAFE = re.compile(r"[^A-Za-z0-9 \-]")


def display_date(value: date | datetime) -> str:
    """M/D/YYYY without zero padding."""
    return f"{value.month}/{value.day}/{value.year}"


def sanitize_filename(title: str, on: date | datetime, extension: str = "pdf") -> str:
    stem = _FILENAME_UNSAFE.sub("", title).replace(" ", "_")
    return f"{stem}_{on.strftime('%Y-%m-%d')}.{extension}"


class DocumentRenderer:

    # ------------------------------------------------------------------
    # Formatted text
    # ------------------------------------------------------------------

    def generate_formatted_text(
        self,
        content: CompiledContent,
        options: CompilationOptions | None = None,
    ) -> str:
        options = options or CompilationOptions()

        text = f"# {content.title}\n\n"
        if content.description:
            text += f"{content.description}\n\n"
        if options.include_metadata:
            text += (
                f"*Compiled on {display_date(content.metadata.compiled_at)} "
                f"with {content.metadata.total_elements} elements*\n\n"
            )

        text += options.section_separator.join(
            f"## {section.title}\n\n{section.content}\n" for section in content.sections
        )
        return text

    # ------------------------------------------------------------------
    # HTML layout
    # ------------------------------------------------------------------

    def build_html(
        self,
        content:      CompiledContent,
        options:      RenderOptions,
        generated_at: datetime,
    ) -> str:
        toc = []
        if options.include_table_of_contents and content.sections:
            toc = [f"{i}. {section.title}" for i, section in enumerate(content.sections, start=1)]

        sections = [
            {
                "number": i,
                "title":  section.title,
                "body":   markup_to_html(section.content),
            }
            for i, section in enumerate(content.sections, start=1)
        ]

        return render_layout(
            title=content.title,
            description=content.description,
            generated_on=display_date(generated_at),
            element_count=content.metadata.total_elements,
            template=options.template.value,
            css=render_css(options.template, options.font_size),
            toc=toc,
            sections=sections,
        )

    # ------------------------------------------------------------------
    # Paginated document
    # ------------------------------------------------------------------

    async def render(
        self,
        content: CompiledContent,
        options: RenderOptions,
        engine:  BaseRenderingEngine,
    ) -> RenderedDocument:
        generated_at = datetime.now(timezone.utc)
        html = self.build_html(content, options, generated_at)
        setup = PageSetup(
            page_size=options.page_size,
            orientation=options.orientation,
            margins=options.margins,
            header_text=options.header_text,
            footer_text=options.footer_text,
            page_numbers=options.include_page_numbers,
        )

        t0 = time.monotonic()
        async with engine.session() as session:
            result = await session.render(html, setup)

        page_count = result.page_count or 0
        logger.info(
            "Rendered document | engine=%s template=%s pages=%d bytes=%d elapsed_ms=%.0f",
            engine.engine_name,
            options.template.value,
            page_count,
            len(result.content),
            (time.monotonic() - t0) * 1000,
        )

        return RenderedDocument(
            buffer=result.content,
            filename=sanitize_filename(content.title, generated_at),
            metadata=RenderedDocumentMetadata(
                title=content.title,
                page_count=page_count,
                generated_at=generated_at,
                template=options.template.value,
                file_size=len(result.content),
            ),
        )
