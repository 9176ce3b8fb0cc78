"""
Unit Tests — Content formatting + minimal markup
═════════════════════════════════════════════════
"""

from __future__ import annotations

import pytest

from notecraft.synthesis.formatter import (
    FormatStyle,
    default_annotation_title,
    default_element_title,
    format_annotation,
    format_content,
)
from notecraft.synthesis.markup import markup_to_html


@pytest.mark.unit
@pytest.mark.synthesis
class TestFormatContent:

    @pytest.mark.parametrize("subtype, expected", [
        ("definition", "**Definition:** body"),
        ("formula",    "$$body$$"),
        ("theorem",    "**Theorem:** body"),
        ("summary",    "**Abstract:** body"),
        ("topic",      "body"),
    ])
    def test_academic(self, subtype, expected):
        assert format_content("body", subtype, FormatStyle.ACADEMIC) == expected

    @pytest.mark.parametrize("subtype, emoji", [
        ("definition", "📖"),
        ("formula",    "🧮"),
        ("theorem",    "🎓"),
        ("summary",    "📝"),
        ("concept",    "💡"),
        ("question",   "❓"),
        ("entity",     "📄"),
    ])
    def test_casual(self, subtype, emoji):
        assert format_content("body", subtype, FormatStyle.CASUAL) == f"{emoji} body"

    def test_structured_adds_capitalized_header_for_every_subtype(self):
        assert format_content("body", "mindmap", FormatStyle.STRUCTURED) == "### Mindmap\n\nbody"

    def test_minimal_only_trims(self):
        assert format_content("  body text \n", "definition", FormatStyle.MINIMAL) == "body text"

    def test_minimal_is_idempotent(self):
        once = format_content("\n  x  \n", "summary", FormatStyle.MINIMAL)
        assert format_content(once, "summary", FormatStyle.MINIMAL) == once

    def test_style_accepts_plain_string(self):
        assert format_content("x", "theorem", "academic") == "**Theorem:** x"

    def test_unknown_style_raises(self):
        with pytest.raises(ValueError):
            format_content("x", "theorem", "baroque")


@pytest.mark.unit
@pytest.mark.synthesis
class TestFormatAnnotation:

    @pytest.mark.parametrize("annotation_type, academic, other", [
        ("highlight", "> quote",                     "**Highlighted:** quote"),
        ("note",      "quote",                       "📝 quote"),
        ("bookmark",  "*Bookmarked section:* quote", "🔖 quote"),
    ])
    def test_known_types(self, annotation_type, academic, other):
        assert format_annotation("quote", annotation_type, FormatStyle.ACADEMIC) == academic
        assert format_annotation("quote", annotation_type, FormatStyle.CASUAL) == other
        assert format_annotation("quote", annotation_type, FormatStyle.STRUCTURED) == other

    def test_unknown_type_is_unchanged(self):
        assert format_annotation("quote", "sticker", FormatStyle.ACADEMIC) == "quote"


@pytest.mark.unit
@pytest.mark.synthesis
class TestDefaultTitles:

    def test_element_titles(self):
        assert default_element_title("mindmap") == "Mind Map"
        assert default_element_title("relationship") == "Relationship"
        assert default_element_title("unheard-of") == "Knowledge Element"

    def test_annotation_titles(self):
        assert default_annotation_title("highlight") == "Highlighted Text"
        assert default_annotation_title("note") == "Personal Note"
        assert default_annotation_title("bookmark") == "Bookmark"
        assert default_annotation_title("sticker") == "Annotation"


@pytest.mark.unit
@pytest.mark.synthesis
class TestMarkupToHTML:

    def test_inline_markup(self):
        html = markup_to_html("**bold** and *italic* and `code`")
        assert str(html) == "<p><strong>bold</strong> and <em>italic</em> and <code>code</code></p>"

    def test_code_span_content_is_literal(self):
        html = markup_to_html("Use `a*b*c` here")
        assert str(html) == "<p>Use <code>a*b*c</code> here</p>"

    def test_paragraphs_and_line_breaks(self):
        html = str(markup_to_html("first line\nsecond line\n\nnext paragraph"))
        assert html.count("<p>") == 2
        assert "first line<br>" in html
        assert "<p>next paragraph</p>" in html

    def test_structured_header_renders_as_heading(self):
        html = str(markup_to_html(format_content("Entropy is disorder.", "definition", "structured")))
        assert "<h3>Definition</h3>" in html
        assert "<p>Entropy is disorder.</p>" in html
        assert "###" not in html

    def test_academic_highlight_renders_as_blockquote(self):
        html = str(markup_to_html(format_annotation("Energy is conserved.", "highlight", "academic")))
        assert "<blockquote>" in html
        assert "Energy is conserved." in html
        assert "&gt;" not in html

    def test_source_suffix_is_italic(self):
        html = str(markup_to_html("Body.\n\n*Source: analysis agent*"))
        assert "<em>Source: analysis agent</em>" in html

    def test_html_is_escaped(self):
        html = markup_to_html("<script>alert('x')</script> **safe**")
        assert "<script>" not in html
        assert "&lt;script&gt;" in html
        assert "<strong>safe</strong>" in html

    def test_block_html_is_escaped(self):
        html = markup_to_html("<div onclick=\"x()\">boom</div>")
        assert "<div" not in html
        assert "&lt;div" in html

    def test_empty_text(self):
        assert str(markup_to_html("")) == ""
        assert str(markup_to_html("  \n ")) == ""
