"""
OCR  —  Fallback Decision + OCR Service Clients
════════════════════════════════════════════════

Decision
────────
  should_use_ocr() is the single place that decides whether a PDF goes to
  OCR:

    extracted text empty / whitespace-only   → OCR
    caller asked for OCR (use_ocr=True)      → OCR, even if text exists
    otherwise                                → keep the text layer

  Images always go to OCR; that is a dispatch concern, not a decision.

Clients
───────
  BaseOCRClient.detect_text(bytes) returns the recognised LINES in the order
  the service reports them. Reading order is the service's responsibility;
  nothing here reorders lines.

  TextractOCRClient wraps AWS Textract DetectDocumentText (synchronous API).
  The boto3 call is blocking, so it runs in the default thread executor and
  is bounded by settings.ocr_timeout_seconds.

  Unlike the extraction strategies, OCR clients RAISE on failure
  (OCRServiceError): the ingestion pipeline surfaces OCR failures to the
  caller instead of falling through to a weaker strategy. No retries here;
  retry policy belongs to the caller.
"""

from __future__ import annotations

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass

from notecraft.core.config import settings
from notecraft.core.exceptions import OCRServiceError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Fallback decision
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class OCRDecision:
    use_ocr: bool
    reason:  str   # "no_text_layer" | "requested" | "text_layer"


def should_use_ocr(extracted_text: str | None, use_ocr: bool = False) -> OCRDecision:
    """An explicit OCR request always wins over an existing text layer."""
    if use_ocr:
        return OCRDecision(use_ocr=True, reason="requested")
    if not extracted_text or not extracted_text.strip():
        return OCRDecision(use_ocr=True, reason="no_text_layer")
    return OCRDecision(use_ocr=False, reason="text_layer")


# ---------------------------------------------------------------------------
# Abstract client
# ---------------------------------------------------------------------------

class BaseOCRClient(ABC):
    """
    Abstract OCR collaborator.

    Implementations:
      - Accept raw file bytes (PDF page or image)
      - Return recognised lines in service order
      - Raise OCRServiceError on any service failure or timeout
      - Hold no per-request state (safe for concurrent use)
    """

    @property
    @abstractmethod
    def service_name(self) -> str:
        """Unique name for logging."""

    @abstractmethod
    async def detect_text(self, data: bytes) -> list[str]:
        """Return the ordered text lines found in ``data``."""


# ---------------------------------------------------------------------------
# AWS Textract
# ---------------------------------------------------------------------------

class TextractOCRClient(BaseOCRClient):
    """
    AWS Textract: managed OCR (DetectDocumentText).

    IAM permissions required on the calling role:
      textract:DetectDocumentText
    """

    def __init__(
        self,
        region:          str | None = None,
        timeout_seconds: float | None = None,
        endpoint_url:    str | None = None,
    ) -> None:
        self._region   = region or settings.aws_region
        self._timeout  = timeout_seconds or settings.ocr_timeout_seconds
        self._endpoint = endpoint_url or settings.textract_endpoint_url or None

    @property
    def service_name(self) -> str:
        return "textract"

    async def detect_text(self, data: bytes) -> list[str]:
        loop = asyncio.get_running_loop()
        t0 = time.monotonic()

        try:
            lines = await asyncio.wait_for(
                loop.run_in_executor(None, self._detect_sync, data),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as exc:
            logger.error("Textract OCR timed out after %.0fs", self._timeout)
            raise OCRServiceError(f"timed out after {self._timeout:.0f}s") from exc
        except OCRServiceError:
            raise
        except Exception as exc:
            logger.error("Textract OCR failed: %s", exc, exc_info=True)
            raise OCRServiceError(exc) from exc

        logger.info(
            "Textract | lines=%d bytes=%d elapsed_ms=%.0f",
            len(lines), len(data), (time.monotonic() - t0) * 1000,
        )
        return lines

    def _client(self):
        import boto3

        kwargs: dict = {"region_name": self._region}
        if self._endpoint:
            kwargs["endpoint_url"] = self._endpoint
        # Local dev only; prod relies on the task role credential chain
        if settings.aws_access_key_id and settings.aws_secret_access_key:
            kwargs["aws_access_key_id"] = settings.aws_access_key_id
            kwargs["aws_secret_access_key"] = settings.aws_secret_access_key
        return boto3.client("textract", **kwargs)

    def _detect_sync(self, data: bytes) -> list[str]:
        """Blocking Textract call: runs in thread executor."""
        response = self._client().detect_document_text(Document={"Bytes": data})
        return lines_from_blocks(response.get("Blocks", []))


def lines_from_blocks(blocks: list[dict]) -> list[str]:
    """Keep LINE blocks that carry text, in the order Textract returned them."""
    return [
        block["Text"]
        for block in blocks
        if block.get("BlockType") == "LINE" and block.get("Text")
    ]
