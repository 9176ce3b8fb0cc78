"""
Text normalization — whitespace and newline canonicalization.

Applied to every extraction result before structure inference, so word
counts and section boundaries are computed on the same canonical text.
"""

from __future__ import annotations

import re

_CRLF_RE        = re.compile(r"\r\n?")
_EXCESS_NL_RE   = re.compile(r"\n{3,}")
_INLINE_WS_RE   = re.compile(r"[ \t]+")


def normalize_text(text: str) -> str:
    """
    1. \\r\\n and bare \\r  →  \\n
    2. 3+ consecutive newlines  →  exactly 2
    3. runs of spaces/tabs  →  one space
    4. trim
    """
    text = _CRLF_RE.sub("\n", text)
    text = _EXCESS_NL_RE.sub("\n\n", text)
    text = _INLINE_WS_RE.sub(" ", text)
    return text.strip()


def count_words(text: str) -> int:
    """Number of non-empty whitespace-delimited tokens."""
    return len(text.split())
