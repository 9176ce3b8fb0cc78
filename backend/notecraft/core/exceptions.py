"""
Typed failures raised by the ingestion and synthesis pipelines.

Every exception carries a stable machine-readable ``error_code`` so the HTTP
layer (and any other caller) can tell "nothing to show" apart from
"something broke" without parsing messages.
"""

from __future__ import annotations


class NotecraftError(Exception):
    """Base exception for all pipeline errors."""

    error_code: str = "INTERNAL_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


# ---------------------------------------------------------------------------
# Ingestion
# ---------------------------------------------------------------------------

class IngestError(NotecraftError):
    """A file could not be turned into StructuredText."""

    error_code = "INGEST_ERROR"


class UnsupportedTypeError(IngestError):
    error_code = "UNSUPPORTED_FILE_TYPE"

    def __init__(self, file_type: str) -> None:
        super().__init__(f"Unsupported file type: {file_type}")
        self.file_type = file_type


class DecodeFailureError(IngestError):
    """The file bytes are corrupt or not the declared format."""

    error_code = "DECODE_FAILURE"

    def __init__(self, file_type: str, cause: Exception | str) -> None:
        super().__init__(f"Failed to decode {file_type} file: {cause}")
        self.file_type = file_type
        self.cause = cause


class NoTextFoundError(IngestError):
    error_code = "NO_TEXT_FOUND"

    def __init__(self, message: str = "No text found in document") -> None:
        super().__init__(message)


class OCRServiceError(IngestError):
    error_code = "OCR_SERVICE_FAILURE"

    def __init__(self, cause: Exception | str) -> None:
        super().__init__(f"OCR processing failed: {cause}")
        self.cause = cause


# ---------------------------------------------------------------------------
# Synthesis
# ---------------------------------------------------------------------------

class NotFoundError(NotecraftError):
    error_code = "NOT_FOUND"

    def __init__(self, resource: str, resource_id: str, message: str | None = None) -> None:
        super().__init__(message or f"{resource.capitalize()} '{resource_id}' was not found.")
        self.resource = resource
        self.resource_id = resource_id


class NotebookNotFoundError(NotFoundError):
    error_code = "NOTEBOOK_NOT_FOUND"

    def __init__(self, notebook_id: str) -> None:
        super().__init__("notebook", notebook_id)


class EmptyNotebookError(NotFoundError):
    """Notebook exists but none of its references resolved to content."""

    error_code = "NOTEBOOK_EMPTY"

    def __init__(self, notebook_id: str) -> None:
        super().__init__(
            "notebook",
            notebook_id,
            f"Notebook '{notebook_id}' has no resolvable content to export.",
        )


class ValidationFailure(NotecraftError):
    error_code = "VALIDATION_ERROR"


class RenderError(NotecraftError):
    """The external rendering engine failed or timed out."""

    error_code = "RENDER_FAILURE"
