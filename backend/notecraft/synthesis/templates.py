"""
Notebook layout templates.

One base layout (title page → optional table of contents → numbered
sections) shared by every visual template. A template only swaps the
presentation constants in TEMPLATE_STYLES (font family, colors, borders,
alignment); content and ordering never depend on it.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from functools import lru_cache

from jinja2 import Environment, select_autoescape
from markupsafe import Markup

from notecraft.schemas.notebooks import FontSize, TemplateName


@dataclass(frozen=True)
class TemplateStyle:
    font_family:    str
    text_color:     str
    accent_color:   str
    heading_border: str
    title_align:    str
    toc_background: str
    code_background: str


TEMPLATE_STYLES: dict[TemplateName, TemplateStyle] = {
    TemplateName.ACADEMIC: TemplateStyle(
        font_family='"Times New Roman", Times, Georgia, serif',
        text_color="#1a1a1a",
        accent_color="#5b0f1b",
        heading_border="1px solid #1a1a1a",
        title_align="center",
        toc_background="#ffffff",
        code_background="#f4f1ea",
    ),
    TemplateName.MODERN: TemplateStyle(
        font_family='"Helvetica Neue", Helvetica, Arial, sans-serif',
        text_color="#1f2937",
        accent_color="#2563eb",
        heading_border="3px solid #2563eb",
        title_align="left",
        toc_background="#eff6ff",
        code_background="#f3f4f6",
    ),
    TemplateName.MINIMAL: TemplateStyle(
        font_family='Georgia, "DejaVu Serif", serif',
        text_color="#333333",
        accent_color="#333333",
        heading_border="none",
        title_align="left",
        toc_background="#ffffff",
        code_background="#f7f7f7",
    ),
    TemplateName.REPORT: TemplateStyle(
        font_family='Arial, "Liberation Sans", sans-serif',
        text_color="#111827",
        accent_color="#0f766e",
        heading_border="2px solid #0f766e",
        title_align="center",
        toc_background="#f0fdfa",
        code_background="#ecfdf5",
    ),
}

FONT_SIZES: dict[FontSize, str] = {
    FontSize.SMALL:  "10pt",
    FontSize.MEDIUM: "12pt",
    FontSize.LARGE:  "14pt",
}


BASE_CSS = """\
body {
  font-family: {{ style.font_family }};
  font-size: {{ font_size }};
  color: {{ style.text_color }};
  line-height: 1.6;
}
.title-page {
  text-align: {{ style.title_align }};
  page-break-after: always;
  padding-top: 30%;
}
.doc-title { font-size: 2.2em; color: {{ style.accent_color }}; margin-bottom: 0.4em; }
.doc-description { font-size: 1.1em; font-style: italic; }
.doc-meta { font-size: 0.9em; color: #666666; margin: 0.2em 0; }
.toc {
  background: {{ style.toc_background }};
  padding: 1em 1.5em;
  page-break-after: always;
}
.toc h2 { color: {{ style.accent_color }}; }
.toc ul { list-style: none; padding-left: 0; }
.toc li { margin: 0.3em 0; }
.notebook-section { margin-bottom: 2em; }
.section-title {
  color: {{ style.accent_color }};
  border-bottom: {{ style.heading_border }};
  padding-bottom: 0.2em;
  page-break-after: avoid;
}
.section-body h3 { font-size: 1.05em; color: {{ style.accent_color }}; margin: 0.6em 0 0.3em; }
blockquote {
  border-left: 3px solid {{ style.accent_color }};
  margin: 0.8em 0;
  padding-left: 1em;
  font-style: italic;
}
code { background: {{ style.code_background }}; padding: 0.1em 0.3em; border-radius: 3px; }
pre code { display: block; padding: 0.6em; white-space: pre-wrap; }
table { border-collapse: collapse; margin: 0.8em 0; }
th, td { border: 1px solid #cccccc; padding: 0.3em 0.6em; }
"""

BASE_LAYOUT = """\
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>{{ title }}</title>
  <style>{{ css }}</style>
</head>
<body class="template-{{ template }}">
  <section class="title-page">
    <h1 class="doc-title">{{ title }}</h1>
    {% if description %}<p class="doc-description">{{ description }}</p>{% endif %}
    <p class="doc-meta">Generated on {{ generated_on }}</p>
    <p class="doc-meta">{{ element_count }} element{{ "" if element_count == 1 else "s" }}</p>
  </section>
  {% if toc %}
  <nav class="toc">
    <h2>Table of Contents</h2>
    <ul>
      {% for entry in toc %}<li>{{ entry }}</li>
      {% endfor %}
    </ul>
  </nav>
  {% endif %}
  {% for section in sections %}
  <section class="notebook-section">
    <h2 class="section-title">{{ section.number }}. {{ section.title }}</h2>
    <div class="section-body">{{ section.body }}</div>
  </section>
  {% endfor %}
</body>
</html>
"""


@lru_cache(maxsize=1)
def _environment() -> Environment:
    return Environment(autoescape=select_autoescape(default_for_string=True))


@lru_cache(maxsize=1)
def _css_environment() -> Environment:
    return Environment(autoescape=False)


def render_css(template: TemplateName, font_size: FontSize) -> Markup:
    """Stylesheet for one template; Markup so the layout embeds it unescaped."""
    css = _css_environment().from_string(BASE_CSS).render(
        style=asdict(TEMPLATE_STYLES[template]),
        font_size=FONT_SIZES[font_size],
    )
    return Markup(css)


def render_layout(**context) -> str:
    """Render BASE_LAYOUT; section bodies must already be Markup."""
    return _environment().from_string(BASE_LAYOUT).render(**context)
