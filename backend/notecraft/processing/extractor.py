"""
Format Extractors  —  Raw Text from PDF, Word and PowerPoint Bytes
══════════════════════════════════════════════════════════════════

  PDF         PyMuPDF (fitz)   native text layer + page count
  Word        python-docx      body paragraphs and table cells, in order
  PowerPoint  python-pptx      per-slide title + body text

All decoders are blocking C/XML parsers, so every extraction runs in the
default thread executor. Any decoder exception (corrupt bytes, wrong
format, legacy binary .doc/.ppt) is surfaced as DecodeFailureError: the
extractor never returns partial text for a file it could not open.

Extractors only produce raw text; normalization and structure inference are
the ingestion pipeline's job.
"""

from __future__ import annotations

import asyncio
import io
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, TypeVar

from notecraft.core.exceptions import DecodeFailureError

logger = logging.getLogger(__name__)

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Result dataclasses
# ---------------------------------------------------------------------------

@dataclass
class PDFExtraction:
    text:       str
    page_count: int


@dataclass
class WordExtraction:
    """warnings are non-fatal; the pipeline logs them and carries on."""
    text:     str
    warnings: list[str] = field(default_factory=list)


@dataclass
class SlideText:
    title:   str | None = None
    content: str | None = None


# ---------------------------------------------------------------------------
# Extractor
# ---------------------------------------------------------------------------

class FormatExtractor:
    """
    Stateless: one instance can serve concurrent requests.

    Usage:
        extractor = FormatExtractor()
        pdf = await extractor.extract_pdf(data)
    """

    async def extract_pdf(self, data: bytes) -> PDFExtraction:
        result = await self._run("pdf", self._extract_pdf_sync, data)
        logger.info(
            "PDF extraction | pages=%d chars=%d",
            result.page_count, len(result.text),
        )
        return result

    async def extract_word(self, data: bytes) -> WordExtraction:
        result = await self._run("word", self._extract_word_sync, data)
        logger.info(
            "Word extraction | chars=%d warnings=%d",
            len(result.text), len(result.warnings),
        )
        return result

    async def extract_slides(self, data: bytes) -> list[SlideText]:
        slides = await self._run("powerpoint", self._extract_slides_sync, data)
        logger.info("PowerPoint extraction | slides=%d", len(slides))
        return slides

    # ------------------------------------------------------------------
    # Executor plumbing
    # ------------------------------------------------------------------

    async def _run(self, file_type: str, fn: Callable[[bytes], T], data: bytes) -> T:
        loop = asyncio.get_running_loop()
        t0 = time.monotonic()
        try:
            return await loop.run_in_executor(None, fn, data)
        except Exception as exc:
            logger.warning("%s decode failed: %s", file_type, exc)
            raise DecodeFailureError(file_type, exc) from exc
        finally:
            logger.debug(
                "%s extractor elapsed_ms=%.0f", file_type, (time.monotonic() - t0) * 1000
            )

    # ------------------------------------------------------------------
    # Blocking decoders: run in thread executor
    # ------------------------------------------------------------------

    @staticmethod
    def _extract_pdf_sync(data: bytes) -> PDFExtraction:
        import fitz  # PyMuPDF; imported here to avoid module-level import cost

        with fitz.open(stream=data, filetype="pdf") as doc:
            # get_text("text") returns plain text preserving reading order
            pages = [page.get_text("text") or "" for page in doc]
            return PDFExtraction(text="\n".join(pages), page_count=doc.page_count)

    @staticmethod
    def _extract_word_sync(data: bytes) -> WordExtraction:
        import docx
        from docx.table import Table

        doc = docx.Document(io.BytesIO(data))
        lines: list[str] = []

        for block in doc.iter_inner_content():
            if isinstance(block, Table):
                lines.extend(_table_rows(block))
            elif block.text.strip():
                lines.append(block.text)

        warnings: list[str] = []
        image_count = len(doc.inline_shapes)
        if image_count:
            warnings.append(
                f"{image_count} inline image(s) skipped; their text is not extracted"
            )

        return WordExtraction(text="\n".join(lines), warnings=warnings)

    @staticmethod
    def _extract_slides_sync(data: bytes) -> list[SlideText]:
        from pptx import Presentation

        prs = Presentation(io.BytesIO(data))
        slides: list[SlideText] = []

        for slide in prs.slides:
            title_shape = slide.shapes.title
            title = title_shape.text_frame.text.strip() if title_shape is not None else ""

            parts: list[str] = []
            for shape in slide.shapes:
                if title_shape is not None and shape.shape_id == title_shape.shape_id:
                    continue
                if shape.has_text_frame:
                    text = shape.text_frame.text.strip()
                    if text:
                        parts.append(text)
                elif shape.has_table:
                    parts.extend(_table_rows(shape.table))

            slides.append(SlideText(
                title=title or None,
                content="\n".join(parts) or None,
            ))

        return slides


def _table_rows(table) -> list[str]:
    """One line per row; merged cells (same underlying XML cell) appear once."""
    rows: list[str] = []
    for row in table.rows:
        seen: set[int] = set()
        cells: list[str] = []
        for cell in row.cells:
            key = id(cell._tc)
            if key in seen:
                continue
            seen.add(key)
            text = cell.text.strip()
            if text:
                cells.append(text)
        if cells:
            rows.append(" | ".join(cells))
    return rows
