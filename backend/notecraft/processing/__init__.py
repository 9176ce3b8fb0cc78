"""
Document Processing Package
════════════════════════════

Format-specific building blocks of the ingestion pipeline:

  Declared type → Extraction (or OCR) → Normalization → Structure inference

Modules
───────
  extractor.py   PDF text layer (PyMuPDF), Word (python-docx), PowerPoint (python-pptx)
  ocr.py         OCR routing decision + OCR client abstraction (AWS Textract)
  normalizer.py  Line-ending / whitespace normalization and word counting
  structure.py   Heading heuristics, section inference, title extraction

Design principles
─────────────────
  • Every component is stateless and dependency-injected.
  • Blocking decoders and OCR calls run in the default thread executor.
  • Every step emits structured log lines.
"""

from notecraft.processing.extractor import FormatExtractor, PDFExtraction, SlideText, WordExtraction
from notecraft.processing.normalizer import count_words, normalize_text
from notecraft.processing.ocr import BaseOCRClient, OCRDecision, TextractOCRClient, should_use_ocr
from notecraft.processing.structure import HeadingDetector, extract_title, infer_sections

__all__ = [
    "FormatExtractor",
    "PDFExtraction",
    "WordExtraction",
    "SlideText",
    "normalize_text",
    "count_words",
    "BaseOCRClient",
    "OCRDecision",
    "TextractOCRClient",
    "should_use_ocr",
    "HeadingDetector",
    "extract_title",
    "infer_sections",
]
