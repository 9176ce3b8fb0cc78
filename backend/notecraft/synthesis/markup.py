"""
Section body markup → HTML, via Python-Markdown.

Compiled sections carry light markdown from the formatter (``### Subtype``
headers, ``> quote`` highlights, **bold**, *italic*, `code`). Raw HTML
handling is removed from the parser, so any markup in user text is emitted
escaped and can never inject into the layout. Single newlines become
``<br>`` (nl2br), blank lines separate paragraphs.
"""

from __future__ import annotations

import markdown
from markupsafe import Markup

EXTENSIONS = ["nl2br", "fenced_code", "tables", "sane_lists"]


def _parser() -> markdown.Markdown:
    # Markdown instances keep per-document state; one per conversion.
    md = markdown.Markdown(extensions=EXTENSIONS, output_format="html")
    md.preprocessors.deregister("html_block")
    md.inlinePatterns.deregister("html")
    return md


def markup_to_html(text: str) -> Markup:
    if not text.strip():
        return Markup("")
    return Markup(_parser().convert(text.replace("\r\n", "\n")))
