"""
Notebook Synthesis — Pydantic Option and Response Schemas

Options are validated models so malformed input (unknown style, template,
page size …) fails fast as a ValidationFailure before any store is touched.
Response models mirror the internal dataclasses in
notecraft.models.composition for the HTTP layer.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Mapping, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from notecraft.core.config import settings
from notecraft.core.exceptions import ValidationFailure
from notecraft.models.composition import (
    CompilationStats,
    CompiledContent,
    RenderedDocumentMetadata,
)
from notecraft.synthesis.formatter import FormatStyle

M = TypeVar("M", bound=BaseModel)

DEFAULT_SECTION_SEPARATOR = "\n\n---\n\n"


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class TemplateName(str, Enum):
    ACADEMIC = "academic"
    MODERN   = "modern"
    MINIMAL  = "minimal"
    REPORT   = "report"


class PageSize(str, Enum):
    A4     = "A4"
    LETTER = "Letter"
    LEGAL  = "Legal"


class Orientation(str, Enum):
    PORTRAIT  = "portrait"
    LANDSCAPE = "landscape"


class FontSize(str, Enum):
    SMALL  = "small"
    MEDIUM = "medium"
    LARGE  = "large"


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------

class CompilationOptions(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    include_source_references: bool        = True
    format_style:              FormatStyle = FormatStyle.STRUCTURED
    section_separator:         str         = DEFAULT_SECTION_SEPARATOR
    include_metadata:          bool        = True


class Margins(BaseModel):
    """CSS lengths, e.g. "1in", "20mm"."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    top:    str = Field("1in", pattern=r"^\d+(\.\d+)?(in|cm|mm|pt|px)$")
    right:  str = Field("1in", pattern=r"^\d+(\.\d+)?(in|cm|mm|pt|px)$")
    bottom: str = Field("1in", pattern=r"^\d+(\.\d+)?(in|cm|mm|pt|px)$")
    left:   str = Field("1in", pattern=r"^\d+(\.\d+)?(in|cm|mm|pt|px)$")


class RenderOptions(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    # Defaults follow settings.default_template / settings.default_page_size
    template:  TemplateName = Field(default_factory=lambda: TemplateName(settings.default_template))
    page_size: PageSize     = Field(default_factory=lambda: PageSize(settings.default_page_size))

    orientation:              Orientation  = Orientation.PORTRAIT
    include_table_of_contents: bool        = True
    include_page_numbers:     bool         = True
    font_size:                FontSize     = FontSize.MEDIUM
    header_text:              str | None   = Field(None, max_length=200)
    footer_text:              str | None   = Field(None, max_length=200)
    margins:                  Margins      = Field(default_factory=Margins)


def coerce_options(model: type[M], value: M | Mapping[str, Any] | None) -> M:
    """Accept a model, a plain mapping or None; map pydantic errors to ValidationFailure."""
    if value is None:
        return model()
    if isinstance(value, model):
        return value
    try:
        return model.model_validate(value)
    except ValidationError as exc:
        raise ValidationFailure(
            f"Invalid {model.__name__}: "
            + "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
            )
        ) from exc


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

class ExportRequest(BaseModel):
    """POST /notebooks/{id}/export body."""
    model_config = ConfigDict(extra="forbid")

    compilation: CompilationOptions = Field(default_factory=CompilationOptions)
    render:      RenderOptions      = Field(default_factory=RenderOptions)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class CompiledSectionResponse(BaseModel):
    title:        str
    content:      str
    element_type: str
    source_id:    str
    order_index:  int
    metadata:     dict[str, Any] | None = None


class CompilationMetadataResponse(BaseModel):
    total_elements: int
    compiled_at:    datetime
    user_id:        str
    notebook_id:    str


class CompiledContentResponse(BaseModel):
    title:       str
    description: str | None = None
    sections:    list[CompiledSectionResponse]
    metadata:    CompilationMetadataResponse

    @classmethod
    def from_compiled(cls, content: CompiledContent) -> "CompiledContentResponse":
        return cls(
            title=content.title,
            description=content.description,
            sections=[
                CompiledSectionResponse(
                    title=s.title,
                    content=s.content,
                    element_type=s.element_type.value,
                    source_id=s.source_id,
                    order_index=s.order_index,
                    metadata=s.metadata,
                )
                for s in content.sections
            ],
            metadata=CompilationMetadataResponse(
                total_elements=content.metadata.total_elements,
                compiled_at=content.metadata.compiled_at,
                user_id=content.metadata.user_id,
                notebook_id=content.metadata.notebook_id,
            ),
        )


class FormattedTextResponse(BaseModel):
    formatted_text: str
    metadata:       CompilationMetadataResponse


class CompilationStatsResponse(BaseModel):
    total_elements: int
    element_types:  dict[str, int]
    last_compiled:  datetime | None = None

    @classmethod
    def from_stats(cls, stats: CompilationStats) -> "CompilationStatsResponse":
        return cls(
            total_elements=stats.total_elements,
            element_types=dict(stats.element_types),
            last_compiled=stats.last_compiled,
        )


def rendered_metadata_headers(meta: RenderedDocumentMetadata) -> dict[str, str]:
    """Rendered-document metadata exposed as response headers on the PDF download."""
    return {
        "X-Page-Count":   str(meta.page_count),
        "X-Template":     meta.template,
        "X-Generated-At": meta.generated_at.isoformat(),
    }
