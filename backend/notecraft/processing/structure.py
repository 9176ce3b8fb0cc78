"""
Structure Inference  —  Headings, Sections and Title from Flat Text
═══════════════════════════════════════════════════════════════════

Input is normalized text (see normalizer.py); output is a flat ordered list
of Section objects plus a document title.

Heading heuristic
─────────────────
  A trimmed line is a heading when it is shorter than ``max_length`` AND
  any predicate in ``HEADING_PREDICATES`` accepts it:

    capitalized_without_terminal_punctuation   ^[A-Z][^.!?]*$
    leading_number                             ^\\d+\\.?\\s
    leading_roman_numeral                      ^[IVX]+\\.?\\s
    capitalized_word_colon                     ^[A-Z][a-z]*:
    all_uppercase                              line == line.upper()

  The thresholds have no documented rationale; downstream expectations are
  pinned to them, so they are preserved rather than tuned.

Segmentation
────────────
  Single pass, blank lines skipped. A heading closes the open section and
  opens a new one. Body lines seen BEFORE the first heading are discarded.
  No heading at all  →  one synthetic "Content" section holding the whole
  text.

Nesting depth cannot be inferred from these signals, so sections are never
nested (Section.subsections stays empty).
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Sequence

from notecraft.models.structured_text import Section

logger = logging.getLogger(__name__)

HeadingPredicate = Callable[[str], bool]

DEFAULT_SECTION_HEADING = "Content"
UNTITLED_DOCUMENT = "Untitled Document"
TRUNCATION_SUFFIX = "..."

_CAPITALIZED_RE   = re.compile(r"^[A-Z][^.!?]*$")
_LEADING_NUM_RE   = re.compile(r"^\d+\.?\s")
_LEADING_ROMAN_RE = re.compile(r"^[IVX]+\.?\s")
_WORD_COLON_RE    = re.compile(r"^[A-Z][a-z]*:")


# ---------------------------------------------------------------------------
# Heading predicates: each one is independently testable
# ---------------------------------------------------------------------------

def capitalized_without_terminal_punctuation(line: str) -> bool:
    return _CAPITALIZED_RE.match(line) is not None


def leading_number(line: str) -> bool:
    return _LEADING_NUM_RE.match(line) is not None


def leading_roman_numeral(line: str) -> bool:
    return _LEADING_ROMAN_RE.match(line) is not None


def capitalized_word_colon(line: str) -> bool:
    return _WORD_COLON_RE.match(line) is not None


def all_uppercase(line: str) -> bool:
    return line == line.upper()


HEADING_PREDICATES: tuple[HeadingPredicate, ...] = (
    capitalized_without_terminal_punctuation,
    leading_number,
    leading_roman_numeral,
    capitalized_word_colon,
    all_uppercase,
)


# ---------------------------------------------------------------------------
# Detector
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class HeadingDetector:
    """OR-combination of heading predicates behind a line-length ceiling."""
    max_length: int = 100
    predicates: Sequence[HeadingPredicate] = field(default=HEADING_PREDICATES)

    def is_heading(self, line: str) -> bool:
        if len(line) >= self.max_length:
            return False
        return any(predicate(line) for predicate in self.predicates)


def infer_sections(text: str, detector: HeadingDetector | None = None) -> list[Section]:
    """Segment normalized text into a flat, ordered, non-empty section list."""
    detector = detector or HeadingDetector()

    sections: list[Section] = []
    heading: str | None = None
    body: list[str] = []
    discarded = 0

    for raw_line in text.split("\n"):
        line = raw_line.strip()
        if not line:
            continue

        if detector.is_heading(line):
            if heading is not None:
                sections.append(Section(heading=heading, content="\n".join(body).strip()))
            heading = line
            body = []
        elif heading is not None:
            body.append(line)
        else:
            discarded += 1

    if heading is not None:
        sections.append(Section(heading=heading, content="\n".join(body).strip()))

    if discarded and sections:
        logger.debug("Structure | dropped %d line(s) before first heading", discarded)

    if not sections:
        return [Section(heading=DEFAULT_SECTION_HEADING, content=text)]

    return sections


def extract_title(text: str, max_length: int = 100) -> str:
    """
    First non-empty line; longer than ``max_length`` → cut to exactly
    ``max_length`` characters ending in "...".
    """
    for raw_line in text.split("\n"):
        line = raw_line.strip()
        if line:
            if len(line) > max_length:
                return line[: max_length - len(TRUNCATION_SUFFIX)] + TRUNCATION_SUFFIX
            return line
    return UNTITLED_DOCUMENT
