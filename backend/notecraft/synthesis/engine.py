"""
Rendering Engine  —  HTML → Paginated PDF
═════════════════════════════════════════

The engine is a heavyweight external resource, so it is only ever used
through a scoped session:

    async with engine.session() as session:
        result = await session.render(html, page_setup)

open → render → close, with close guaranteed on every exit path (including
errors and cancellation). Sessions are never shared between requests.

WeasyPrintEngine is the shipped backend. Each session owns its own
FontConfiguration; rendering is blocking, so it runs in the default thread
executor bounded by settings.render_timeout_seconds. A timeout releases the
session but not the worker thread, which finishes in the background (see
WeasyPrintSession). Pagination concerns (page size, orientation, margins,
header/footer text, page numbers) are expressed as an @page stylesheet
applied on top of the document CSS.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

from notecraft.core.config import settings
from notecraft.core.exceptions import RenderError
from notecraft.schemas.notebooks import Margins, Orientation, PageSize

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Shared data types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PageSetup:
    page_size:    PageSize = PageSize.A4
    orientation:  Orientation = Orientation.PORTRAIT
    margins:      Margins = Margins()
    header_text:  str | None = None
    footer_text:  str | None = None
    page_numbers: bool = True


@dataclass(frozen=True)
class RenderResult:
    """page_count is None when the engine cannot report it."""
    content:    bytes
    page_count: int | None = None


# ---------------------------------------------------------------------------
# Abstract engine
# ---------------------------------------------------------------------------

class RenderSession(ABC):

    @abstractmethod
    async def render(self, html: str, setup: PageSetup) -> RenderResult:
        """Paginate ``html``; raise RenderError on failure."""


class BaseRenderingEngine(ABC):

    @property
    @abstractmethod
    def engine_name(self) -> str:
        """Unique name for logging."""

    @abstractmethod
    async def open_session(self) -> RenderSession:
        ...

    @abstractmethod
    async def close_session(self, session: RenderSession) -> None:
        ...

    @asynccontextmanager
    async def session(self) -> AsyncIterator[RenderSession]:
        session = await self.open_session()
        logger.debug("Render session opened | engine=%s", self.engine_name)
        try:
            yield session
        finally:
            await self.close_session(session)
            logger.debug("Render session closed | engine=%s", self.engine_name)


# ---------------------------------------------------------------------------
# @page stylesheet
# ---------------------------------------------------------------------------

def _css_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", " ")
    return f'"{escaped}"'


def page_stylesheet(setup: PageSetup) -> str:
    m = setup.margins
    rules = [
        f"size: {setup.page_size.value} {setup.orientation.value};",
        f"margin: {m.top} {m.right} {m.bottom} {m.left};",
    ]
    if setup.header_text:
        rules.append(
            f"@top-center {{ content: {_css_string(setup.header_text)}; font-size: 9pt; }}"
        )
    if setup.footer_text:
        rules.append(
            f"@bottom-left {{ content: {_css_string(setup.footer_text)}; font-size: 9pt; }}"
        )
    if setup.page_numbers:
        rules.append(
            '@bottom-right { content: "Page " counter(page) " of " counter(pages); font-size: 9pt; }'
        )
    return "@page {\n  " + "\n  ".join(rules) + "\n}\n"


# ---------------------------------------------------------------------------
# WeasyPrint
# ---------------------------------------------------------------------------

class WeasyPrintSession(RenderSession):
    """
    One FontConfiguration per session; renders run in the default executor.

    A timed-out render cannot be interrupted: wait_for gives up on the
    executor future, but the worker thread keeps laying out the document
    until WeasyPrint returns, even after the session is closed. The result
    is discarded. ``running_renders`` counts such threads so close() can
    report them.
    """

    def __init__(self, timeout_seconds: float) -> None:
        from weasyprint.text.fonts import FontConfiguration

        self._font_config = FontConfiguration()
        self._timeout = timeout_seconds
        self._closed = False
        self._running = 0
        self._lock = threading.Lock()

    @property
    def running_renders(self) -> int:
        with self._lock:
            return self._running

    def close(self) -> None:
        self._font_config = None
        self._closed = True
        if self.running_renders:
            logger.warning(
                "Render session closed with %d render(s) still running in worker threads",
                self.running_renders,
            )

    async def render(self, html: str, setup: PageSetup) -> RenderResult:
        if self._closed:
            raise RenderError("Render session is closed")

        loop = asyncio.get_running_loop()
        t0 = time.monotonic()
        try:
            result = await asyncio.wait_for(
                loop.run_in_executor(
                    None, self._run, html, page_stylesheet(setup), self._font_config,
                ),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as exc:
            logger.error("WeasyPrint render timed out after %.0fs", self._timeout)
            raise RenderError(f"Rendering timed out after {self._timeout:.0f}s") from exc
        except Exception as exc:
            logger.error("WeasyPrint render failed: %s", exc, exc_info=True)
            raise RenderError(f"Rendering failed: {exc}") from exc

        logger.info(
            "WeasyPrint | pages=%s bytes=%d elapsed_ms=%.0f",
            result.page_count, len(result.content), (time.monotonic() - t0) * 1000,
        )
        return result

    def _run(self, html: str, page_css: str, font_config) -> RenderResult:
        with self._lock:
            self._running += 1
        try:
            return self._render_sync(html, page_css, font_config)
        finally:
            with self._lock:
                self._running -= 1

    @staticmethod
    def _render_sync(html: str, page_css: str, font_config) -> RenderResult:
        """Blocking render: runs in thread executor."""
        from weasyprint import CSS, HTML

        stylesheet = CSS(string=page_css, font_config=font_config)
        document = HTML(string=html).render(
            stylesheets=[stylesheet],
            font_config=font_config,
        )
        return RenderResult(content=document.write_pdf(), page_count=len(document.pages))


class WeasyPrintEngine(BaseRenderingEngine):

    def __init__(self, timeout_seconds: float | None = None) -> None:
        self._timeout = timeout_seconds or settings.render_timeout_seconds

    @property
    def engine_name(self) -> str:
        return "weasyprint"

    async def open_session(self) -> RenderSession:
        return WeasyPrintSession(self._timeout)

    async def close_session(self, session: RenderSession) -> None:
        if isinstance(session, WeasyPrintSession):
            session.close()
