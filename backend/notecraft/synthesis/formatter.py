"""
Content formatting — per-item text decoration for compiled sections.

Pure functions: (body, subtype, style) → str. No I/O, no state.
"""

from __future__ import annotations

from enum import Enum


class FormatStyle(str, Enum):
    ACADEMIC   = "academic"
    CASUAL     = "casual"
    STRUCTURED = "structured"
    MINIMAL    = "minimal"


# ---------------------------------------------------------------------------
# Default section titles
# ---------------------------------------------------------------------------

_ELEMENT_TITLES: dict[str, str] = {
    "summary":      "Summary",
    "definition":   "Definition",
    "formula":      "Formula",
    "question":     "Question",
    "topic":        "Topic",
    "entity":       "Entity",
    "theme":        "Theme",
    "structure":    "Structure",
    "argument":     "Argument",
    "mindmap":      "Mind Map",
    "concept":      "Concept",
    "theorem":      "Theorem",
    "relationship": "Relationship",
}

_ANNOTATION_TITLES: dict[str, str] = {
    "highlight": "Highlighted Text",
    "note":      "Personal Note",
    "bookmark":  "Bookmark",
}


def default_element_title(element_type: str) -> str:
    return _ELEMENT_TITLES.get(element_type, "Knowledge Element")


def default_annotation_title(annotation_type: str) -> str:
    return _ANNOTATION_TITLES.get(annotation_type, "Annotation")


# ---------------------------------------------------------------------------
# Knowledge element bodies
# ---------------------------------------------------------------------------

_ACADEMIC_TEMPLATES: dict[str, str] = {
    "definition": "**Definition:** {}",
    "formula":    "$${}$$",
    "theorem":    "**Theorem:** {}",
    "summary":    "**Abstract:** {}",
}

_CASUAL_EMOJI: dict[str, str] = {
    "definition": "📖",
    "formula":    "🧮",
    "theorem":    "🎓",
    "summary":    "📝",
    "concept":    "💡",
    "question":   "❓",
}
_CASUAL_DEFAULT_EMOJI = "📄"


def format_content(body: str, subtype: str, style: FormatStyle | str) -> str:
    """
    minimal     trim only
    academic    subtype template; unknown subtypes unchanged
    casual      subtype emoji prefix; unknown subtypes get the generic emoji
    structured  "### <Subtype>" header for every subtype
    """
    style = FormatStyle(style)

    if style is FormatStyle.MINIMAL:
        return body.strip()

    if style is FormatStyle.ACADEMIC:
        template = _ACADEMIC_TEMPLATES.get(subtype)
        return template.format(body) if template else body

    if style is FormatStyle.CASUAL:
        return f"{_CASUAL_EMOJI.get(subtype, _CASUAL_DEFAULT_EMOJI)} {body}"

    return f"### {subtype[:1].upper()}{subtype[1:]}\n\n{body}"


# ---------------------------------------------------------------------------
# Annotation bodies
# ---------------------------------------------------------------------------

_ANNOTATION_FORMATS: dict[str, tuple[str, str]] = {
    # type: (academic, any other style)
    "highlight": ("> {}",                      "**Highlighted:** {}"),
    "note":      ("{}",                        "📝 {}"),
    "bookmark":  ("*Bookmarked section:* {}",  "🔖 {}"),
}


def format_annotation(content: str, annotation_type: str, style: FormatStyle | str) -> str:
    formats = _ANNOTATION_FORMATS.get(annotation_type)
    if formats is None:
        return content
    academic, other = formats
    template = academic if FormatStyle(style) is FormatStyle.ACADEMIC else other
    return template.format(content)
