"""
StructuredText — canonical output of the ingestion pipeline.

Sections are emitted as a flat ordered list. ``subsections`` exists on the
type but is always empty: the heading heuristic cannot infer nesting depth.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any


class ExtractionSource(str, Enum):
    """Which extraction path produced the text."""
    PDF_TEXT   = "pdf-text-extraction"
    OCR_PDF    = "ocr-textract"
    WORD       = "word-extraction"
    POWERPOINT = "powerpoint-extraction"
    IMAGE_OCR  = "image-ocr"


@dataclass(frozen=True)
class Section:
    heading:     str
    content:     str = ""
    subsections: tuple[Section, ...] = ()


@dataclass(frozen=True)
class TextMetadata:
    """
    word_count  : non-empty whitespace tokens of the NORMALIZED text
    language    : configured default language (no detection)
    page_count  : PDF pages (text-layer path only)
    slide_count : PowerPoint slides
    source      : extraction path
    """
    word_count:  int
    language:    str
    source:      ExtractionSource
    page_count:  int | None = None
    slide_count: int | None = None


@dataclass(frozen=True)
class StructuredText:
    title:    str
    sections: tuple[Section, ...]
    metadata: TextMetadata

    def __post_init__(self) -> None:
        if not self.sections:
            raise ValueError("StructuredText requires at least one section")

    def to_dict(self) -> dict[str, Any]:
        """JSON-safe representation handed to the content store."""
        data = asdict(self)
        data["sections"] = [
            {**s, "subsections": list(s["subsections"])} for s in data["sections"]
        ]
        meta = data["metadata"]
        meta["source"] = self.metadata.source.value
        data["metadata"] = {k: v for k, v in meta.items() if v is not None}
        return data
