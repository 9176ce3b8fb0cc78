"""
Document Ingestion Pipeline

Turns raw file bytes + a declared file type into StructuredText:

  1. Resolve the declared type to a FileKind (closed set; unknown → error)
  2. Dispatch to the per-kind handler
       pdf                          → text layer, OCR fallback
       docx | doc                   → python-docx
       pptx | ppt                   → python-pptx, slide-framed text stream
       jpg | jpeg | png | gif | bmp | tiff → OCR
  3. Standardize: normalize → infer sections → title → word count

Failure contract:
  - Every failure is a typed IngestError subclass (UnsupportedTypeError,
    DecodeFailureError, NoTextFoundError, OCRServiceError).
  - Failures are terminal for the call; no internal retries.
  - Nothing is written anywhere: the caller persists the result.
"""

from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Awaitable, Callable

from notecraft.core.config import settings
from notecraft.core.exceptions import NoTextFoundError, UnsupportedTypeError
from notecraft.models.structured_text import (
    ExtractionSource,
    StructuredText,
    TextMetadata,
)
from notecraft.processing.extractor import FormatExtractor, SlideText
from notecraft.processing.normalizer import count_words, normalize_text
from notecraft.processing.ocr import BaseOCRClient, should_use_ocr
from notecraft.processing.structure import (
    HeadingDetector,
    extract_title,
    infer_sections,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# File kinds
# ---------------------------------------------------------------------------

class FileKind(str, Enum):
    PDF        = "pdf"
    WORD       = "word"
    POWERPOINT = "powerpoint"
    IMAGE      = "image"


_DECLARED_TYPES: dict[str, FileKind] = {
    "pdf":  FileKind.PDF,
    "docx": FileKind.WORD,
    "doc":  FileKind.WORD,
    "pptx": FileKind.POWERPOINT,
    "ppt":  FileKind.POWERPOINT,
    "jpg":  FileKind.IMAGE,
    "jpeg": FileKind.IMAGE,
    "png":  FileKind.IMAGE,
    "gif":  FileKind.IMAGE,
    "bmp":  FileKind.IMAGE,
    "tiff": FileKind.IMAGE,
}

SUPPORTED_TYPES: frozenset[str] = frozenset(_DECLARED_TYPES)


def resolve_file_kind(declared_type: str) -> FileKind:
    """Case-insensitive; tolerates a leading dot (".PDF" → pdf)."""
    key = (declared_type or "").strip().lower().lstrip(".")
    try:
        return _DECLARED_TYPES[key]
    except KeyError:
        raise UnsupportedTypeError(declared_type) from None


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------

class IngestionPipeline:
    """
    Stateless pipeline: safe to share between concurrent requests.
    All collaborators are injected (testable, no hidden globals).
    """

    def __init__(
        self,
        ocr_client:       BaseOCRClient,
        extractor:        FormatExtractor | None = None,
        heading_detector: HeadingDetector | None = None,
        language:         str | None = None,
        title_max_length: int | None = None,
    ) -> None:
        self._ocr       = ocr_client
        self._extractor = extractor or FormatExtractor()
        self._detector  = heading_detector or HeadingDetector(
            max_length=settings.heading_max_length,
        )
        self._language  = language or settings.default_language
        self._title_max = title_max_length or settings.title_max_length

        self._handlers: dict[FileKind, Callable[[bytes, bool], Awaitable[StructuredText]]] = {
            FileKind.PDF:        self._process_pdf,
            FileKind.WORD:       self._process_word,
            FileKind.POWERPOINT: self._process_powerpoint,
            FileKind.IMAGE:      self._process_image,
        }

    # ------------------------------------------------------------------
    # Public entry point
    # ------------------------------------------------------------------

    async def process(
        self,
        file_bytes:    bytes,
        declared_type: str,
        *,
        use_ocr:       bool = False,
    ) -> StructuredText:
        kind = resolve_file_kind(declared_type)
        t0 = time.monotonic()

        logger.info(
            "Ingest start | type=%s kind=%s size=%d use_ocr=%s",
            declared_type, kind.value, len(file_bytes), use_ocr,
        )

        structured = await self._handlers[kind](file_bytes, use_ocr)

        logger.info(
            "Ingest done | kind=%s source=%s sections=%d words=%d elapsed_ms=%.0f",
            kind.value,
            structured.metadata.source.value,
            len(structured.sections),
            structured.metadata.word_count,
            (time.monotonic() - t0) * 1000,
        )
        return structured

    # ------------------------------------------------------------------
    # Per-kind handlers
    # ------------------------------------------------------------------

    async def _process_pdf(self, data: bytes, use_ocr: bool) -> StructuredText:
        pdf = await self._extractor.extract_pdf(data)

        decision = should_use_ocr(pdf.text, use_ocr)
        if decision.use_ocr:
            logger.info(
                "PDF routed to OCR | reason=%s service=%s",
                decision.reason, self._ocr.service_name,
            )
            return await self._process_image_based_pdf(data)

        return self.standardize(
            pdf.text,
            ExtractionSource.PDF_TEXT,
            page_count=pdf.page_count,
        )

    async def _process_image_based_pdf(self, data: bytes) -> StructuredText:
        text = await self._ocr_text(data)
        return self.standardize(text, ExtractionSource.OCR_PDF)

    async def _process_image(self, data: bytes, use_ocr: bool) -> StructuredText:
        text = await self._ocr_text(data)
        return self.standardize(text, ExtractionSource.IMAGE_OCR)

    async def _process_word(self, data: bytes, use_ocr: bool) -> StructuredText:
        word = await self._extractor.extract_word(data)
        for warning in word.warnings:
            logger.warning("Word extraction warning | %s", warning)
        return self.standardize(word.text, ExtractionSource.WORD)

    async def _process_powerpoint(self, data: bytes, use_ocr: bool) -> StructuredText:
        slides = await self._extractor.extract_slides(data)
        return self.standardize(
            slides_to_text(slides),
            ExtractionSource.POWERPOINT,
            slide_count=len(slides),
        )

    async def _ocr_text(self, data: bytes) -> str:
        lines = await self._ocr.detect_text(data)
        text = "\n".join(lines)
        if not text.strip():
            raise NoTextFoundError()
        return text

    # ------------------------------------------------------------------
    # Standardization
    # ------------------------------------------------------------------

    def standardize(
        self,
        raw_text:    str,
        source:      ExtractionSource,
        *,
        page_count:  int | None = None,
        slide_count: int | None = None,
    ) -> StructuredText:
        text = normalize_text(raw_text)
        return StructuredText(
            title=extract_title(text, self._title_max),
            sections=tuple(infer_sections(text, self._detector)),
            metadata=TextMetadata(
                word_count=count_words(text),
                language=self._language,
                source=source,
                page_count=page_count,
                slide_count=slide_count,
            ),
        )


def slides_to_text(slides: list[SlideText]) -> str:
    """Flat text stream framed per slide, in slide order."""
    parts: list[str] = []
    for number, slide in enumerate(slides, start=1):
        parts.append(f"\n\n--- Slide {number} ---\n")
        if slide.title:
            parts.append(f"Title: {slide.title}\n")
        if slide.content:
            parts.append(f"{slide.content}\n")
    return "".join(parts)
